"""
Frequency classifier for recurring payment detection.

Maps interval statistics to a cadence bucket.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from models.recurring_pattern import RecurrenceFrequency
from services.recurring_charges.config import CADENCE_SLACK_RATIO, FrequencyBuckets, NOMINAL_DAYS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrequencyMatch:
    """Result of classifying a list of intervals."""
    frequency: RecurrenceFrequency
    matched_reason: str
    median_interval: float


class FrequencyClassifier:
    """
    Classifies intervals into weekly, biweekly, monthly, quarterly, yearly
    or custom cadences.

    Classification uses the median interval so a single late or skipped
    payment does not shift the bucket. With an even number of intervals the
    lower median is taken: skipped cycles only ever lengthen gaps.
    """

    def __init__(self, buckets: Optional[Dict[RecurrenceFrequency, Tuple[float, float]]] = None):
        """
        Initialize the frequency classifier.

        Args:
            buckets: Ordered mapping of RecurrenceFrequency to (min_days, max_days)
        """
        self.buckets = buckets or FrequencyBuckets().to_dict()

    def classify(
        self,
        intervals_days: Sequence[int],
        tolerance_days: int = 7
    ) -> Optional[FrequencyMatch]:
        """
        Classify intervals into a cadence.

        Args:
            intervals_days: Day gaps between consecutive payments
            tolerance_days: Maximum distance from a bucket to still match it

        Returns:
            FrequencyMatch, or None when there are no usable intervals
        """
        if not intervals_days:
            return None

        median = self.median_interval(intervals_days)
        if median <= 0:
            logger.debug("Median interval is zero days; same-day charges carry no cadence")
            return None

        best: Optional[Tuple[float, RecurrenceFrequency]] = None
        for frequency, (min_days, max_days) in self.buckets.items():
            distance = self._distance(median, min_days, max_days)
            if distance > tolerance_days:
                continue
            # Strict comparison keeps the earlier (shorter) bucket on ties
            if best is None or distance < best[0]:
                best = (distance, frequency)

        if best is None:
            return FrequencyMatch(
                frequency=RecurrenceFrequency.CUSTOM,
                matched_reason=f"median interval {median:g}d matches no standard cadence",
                median_interval=median,
            )

        distance, frequency = best
        min_days, max_days = self.buckets[frequency]
        bucket = f"{min_days:g}d" if min_days == max_days else f"{min_days:g}-{max_days:g}d"
        return FrequencyMatch(
            frequency=frequency,
            matched_reason=(
                f"median interval {median:g}d within {distance:g}d of {frequency.value} ({bucket})"
            ),
            median_interval=median,
        )

    def fits_cadence(
        self,
        intervals_days: Sequence[int],
        frequency: RecurrenceFrequency,
        median_interval: float,
        tolerance_days: int = 7,
        max_skipped_cycles: int = 1
    ) -> bool:
        """
        Check that every interval is a whole number of cadence cycles.

        An interval may span up to ``1 + max_skipped_cycles`` cycles and must
        land within the slack of that multiple. The slack is the tolerance
        capped at a quarter of the cycle, so short cadences are not satisfied
        by arbitrary spacing.

        Args:
            intervals_days: Day gaps between consecutive payments
            frequency: Classified cadence
            median_interval: Median used for the classification
            tolerance_days: Maximum slack in days
            max_skipped_cycles: Consecutive cycles that may be missed

        Returns:
            True if all intervals follow the cadence
        """
        expected = self.nominal_days(frequency, median_interval)
        if expected <= 0:
            return False

        slack = min(float(tolerance_days), expected * CADENCE_SLACK_RATIO)
        for interval in intervals_days:
            cycles = max(1, int(round(interval / expected)))
            if cycles > 1 + max_skipped_cycles:
                return False
            if abs(interval - cycles * expected) > slack:
                return False
        return True

    @staticmethod
    def median_interval(intervals_days: Sequence[int]) -> float:
        """Lower median of the intervals."""
        ordered = np.sort(np.asarray(intervals_days, dtype=float))
        return float(ordered[(len(ordered) - 1) // 2])

    @staticmethod
    def _distance(value: float, min_days: float, max_days: float) -> float:
        if value < min_days:
            return min_days - value
        if value > max_days:
            return value - max_days
        return 0.0

    @staticmethod
    def nominal_days(frequency: RecurrenceFrequency, median_interval: Optional[float] = None) -> float:
        """
        Expected cadence length in days.

        CUSTOM cadences have no nominal length and use the observed median.
        """
        if frequency == RecurrenceFrequency.CUSTOM:
            return float(median_interval or 0.0)
        return NOMINAL_DAYS[frequency]
