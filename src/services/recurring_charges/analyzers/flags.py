"""
Flag detector for recurring payment detection.

Annotates a pattern with anomalies that do not invalidate it.
"""

import logging
from typing import Sequence, Set

from models.recurring_pattern import PatternFlag, RecurrenceFrequency
from models.transaction import Transaction
from services.recurring_charges.analyzers.frequency import FrequencyClassifier

logger = logging.getLogger(__name__)


class FlagDetector:
    """
    Detects price changes and missed payments within a candidate group.

    - price_change: a payment differs from the one before it by more than
      ``price_change_threshold_percent``
    - missed_payment: a gap longer than ``missed_payment_factor`` times the
      expected cadence, i.e. at least one cycle was skipped
    """

    def __init__(self, price_change_threshold_percent: float = 1.0, missed_payment_factor: float = 1.5):
        self.price_change_threshold_percent = price_change_threshold_percent
        self.missed_payment_factor = missed_payment_factor

    def detect_flags(
        self,
        transactions: Sequence[Transaction],
        intervals_days: Sequence[int],
        amounts: Sequence[float],
        frequency: RecurrenceFrequency
    ) -> Set[PatternFlag]:
        """
        Detect anomaly flags for a date-sorted group.

        Args:
            transactions: Group transactions sorted by date
            intervals_days: Day gaps between consecutive transactions
            amounts: Absolute amounts, in the same order as ``transactions``
            frequency: Classified cadence

        Returns:
            Set of PatternFlag values (empty when nothing is unusual)
        """
        flags: Set[PatternFlag] = set()

        if self._has_price_change(amounts):
            flags.add(PatternFlag.PRICE_CHANGE)

        if self._has_missed_payment(intervals_days, frequency):
            flags.add(PatternFlag.MISSED_PAYMENT)

        if flags:
            merchant = transactions[0].merchant_name if transactions else "?"
            logger.debug(f"Flags for {merchant}: {sorted(flag.value for flag in flags)}")
        return flags

    def _has_price_change(self, amounts: Sequence[float]) -> bool:
        threshold = self.price_change_threshold_percent / 100.0
        for previous, current in zip(amounts, amounts[1:]):
            if previous == 0:
                if current != 0:
                    return True
                continue
            if abs(current - previous) / abs(previous) > threshold:
                return True
        return False

    def _has_missed_payment(self, intervals_days: Sequence[int], frequency: RecurrenceFrequency) -> bool:
        if not intervals_days:
            return False
        expected = FrequencyClassifier.nominal_days(
            frequency, FrequencyClassifier.median_interval(intervals_days)
        )
        if expected <= 0:
            return False
        limit = expected * self.missed_payment_factor
        return any(interval > limit for interval in intervals_days)
