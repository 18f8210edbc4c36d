"""
Recurring Payment Detection Service.

This module orchestrates recurring payment detection over a snapshot of
transactions using hash-map grouping and specialized pattern analyzers.

## Detection Pipeline

```mermaid
graph TD
    A[Transactions] --> B[Lookback Filter + Skip Malformed]
    B --> C[Group by Normalized Merchant]
    C --> D[Split by Amount Tolerance]
    D --> E[IntervalCalculator]
    E --> F[FrequencyClassifier]
    F --> G[ConfidenceScorer]
    G --> H{confidence >= min?}
    H -->|Yes| I[FlagDetector]
    H -->|No| X[Discard]
    F -->|off cadence| X
    I --> J[Predict Next Date]
    J --> K[RecurringPatterns sorted by confidence]
```
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from models.money import Currency, Money
from models.recurring_pattern import RecurrenceFrequency, RecurringPattern
from models.transaction import Transaction
from services.recurring_charges.analyzers import (
    MerchantNormalizer,
    IntervalCalculator,
    FrequencyClassifier,
    ConfidenceScorer,
    FlagDetector,
)
from services.recurring_charges.config import DetectionConfig, DEFAULT_CONFIG
from utils.performance import DetectionPerformanceTracker
from utils.temporal_utils import next_occurrence

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
VARIANCE_PLACES = Decimal("0.0001")

GroupKey = Tuple[str, Currency]


class PatternDetector:
    """
    Detects recurring payments in transaction history.

    Groups transactions by normalized merchant, splits each group by amount
    tolerance, then applies the interval, frequency, confidence and flag
    analyzers to every candidate group. The detector holds configuration
    only; every call works on the transactions it is given.
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        """
        Initialize the detector.

        Args:
            config: Optional detection configuration. If None, uses DEFAULT_CONFIG.
        """
        self.config = config or DEFAULT_CONFIG

        self.merchant_normalizer = MerchantNormalizer()
        self.interval_calculator = IntervalCalculator()
        self.frequency_classifier = FrequencyClassifier(
            buckets=self.config.frequency_buckets.to_dict()
        )
        self.confidence_scorer = ConfidenceScorer(
            weights=self.config.confidence_weights,
            interval_cv_sensitivity=self.config.interval_cv_sensitivity,
            amount_cv_sensitivity=self.config.amount_cv_sensitivity,
        )
        self.flag_detector = FlagDetector(
            price_change_threshold_percent=self.config.price_change_threshold_percent,
            missed_payment_factor=self.config.missed_payment_factor,
        )

    def detect_patterns(
        self,
        transactions: Iterable[Transaction],
        as_of: Optional[date] = None
    ) -> List[RecurringPattern]:
        """
        Detect recurring payment patterns in transaction history.

        Args:
            transactions: Transactions to analyze (any order)
            as_of: Reference date for the lookback window (default: today)

        Returns:
            Patterns sorted by confidence, highest first
        """
        as_of = as_of or date.today()
        transactions = list(transactions)

        with DetectionPerformanceTracker("detect_patterns") as tracker:
            tracker.set_transaction_count(len(transactions))

            with tracker.stage("filtering"):
                recent, skipped = self._filter_recent(transactions, as_of)
                tracker.set_skipped_count(skipped)

            with tracker.stage("grouping"):
                groups = self._group_by_merchant(recent)

            with tracker.stage("pattern_analysis"):
                patterns: List[RecurringPattern] = []
                analyzed = 0
                for (normalized_merchant, _currency), group in groups.items():
                    for candidate in self._split_by_amount(group):
                        if len(candidate) < self.config.min_transactions:
                            continue
                        analyzed += 1
                        try:
                            pattern = self._analyze_group(normalized_merchant, candidate)
                        except Exception as e:
                            logger.exception(
                                f"Failed to analyze group '{normalized_merchant}' "
                                f"({len(candidate)} transactions): {e}"
                            )
                            continue
                        if pattern is not None:
                            patterns.append(pattern)
                tracker.set_groups_analyzed(analyzed)

            patterns.sort(key=self._sort_key)
            tracker.set_patterns_detected(len(patterns))

        logger.info(
            f"Detection complete: {len(patterns)} patterns from {len(recent)} recent transactions "
            f"({skipped} skipped)"
        )
        return patterns

    def matches_pattern(self, transaction: Transaction, pattern: RecurringPattern) -> bool:
        """
        Check whether a newly observed transaction continues a known pattern.

        The merchant key must match exactly, the amount must be within the
        amount tolerance of the pattern's representative amount and the date
        within the interval tolerance of the predicted next date.

        Args:
            transaction: Freshly observed transaction
            pattern: Previously detected pattern

        Returns:
            True if the transaction belongs to the pattern
        """
        if not transaction.is_analyzable:
            return False

        normalized = self.merchant_normalizer.normalize(transaction.merchant_name)
        if normalized != pattern.normalized_merchant:
            return False

        amount = transaction.amount.abs()  # type: ignore[union-attr]
        expected = pattern.representative_amount
        if amount.currency != expected.currency:
            return False

        tolerance = expected.amount * self._amount_tolerance()
        if abs(amount.amount - expected.amount) > tolerance:
            return False

        days_off = abs((transaction.date - pattern.predicted_next_date).days)  # type: ignore[operator]
        return days_off <= self.config.interval_tolerance_days

    def _filter_recent(self, transactions: List[Transaction], as_of: date) -> Tuple[List[Transaction], int]:
        """
        Keep well-formed transactions inside the lookback window.

        Returns:
            Tuple of (recent transactions, number of malformed records skipped)
        """
        cutoff = as_of - timedelta(days=self.config.lookback_days)
        recent = []
        skipped = 0
        for txn in transactions:
            if not txn.is_analyzable:
                logger.debug(f"Skipping transaction {txn.id}: missing or invalid amount/date")
                skipped += 1
                continue
            if cutoff <= txn.date <= as_of:  # type: ignore[operator]
                recent.append(txn)
        return recent, skipped

    def _group_by_merchant(self, transactions: List[Transaction]) -> Dict[GroupKey, List[Transaction]]:
        groups: Dict[GroupKey, List[Transaction]] = defaultdict(list)
        for txn in transactions:
            key = self.merchant_normalizer.normalize(txn.merchant_name)
            groups[(key, txn.amount.currency)].append(txn)  # type: ignore[union-attr]
        return groups

    def _split_by_amount(self, group: List[Transaction]) -> List[List[Transaction]]:
        """
        Split a merchant group into amount clusters.

        Amounts are sorted and each cluster is anchored on its smallest
        amount. A new cluster starts when an amount exceeds the anchor by more
        than the amount tolerance, so every member (and the cluster mean) stays
        within tolerance of the representative amount.
        """
        ordered = sorted(group, key=lambda t: abs(t.amount.amount))  # type: ignore[union-attr]
        tolerance = self._amount_tolerance()

        clusters: List[List[Transaction]] = []
        current: List[Transaction] = []
        anchor: Optional[Decimal] = None
        for txn in ordered:
            amount = abs(txn.amount.amount)  # type: ignore[union-attr]
            if anchor is not None and amount - anchor > anchor * tolerance:
                clusters.append(current)
                current = []
                anchor = None
            if anchor is None:
                anchor = amount
            current.append(txn)
        if current:
            clusters.append(current)
        return clusters

    def _analyze_group(
        self,
        normalized_merchant: str,
        group: List[Transaction]
    ) -> Optional[RecurringPattern]:
        """
        Analyze one candidate group using the specialized analyzers.

        Returns:
            RecurringPattern, or None if the group is not a recurring payment
        """
        ordered = sorted(group, key=lambda t: (t.date, t.id))
        dates = [txn.date for txn in ordered]

        intervals = self.interval_calculator.intervals(dates)
        match = self.frequency_classifier.classify(intervals, self.config.interval_tolerance_days)
        if match is None:
            return None
        if match.frequency == RecurrenceFrequency.CUSTOM and not self.config.allow_custom:
            logger.debug(f"Discarding '{normalized_merchant}': {match.matched_reason}")
            return None
        if not self.frequency_classifier.fits_cadence(
            intervals,
            match.frequency,
            match.median_interval,
            self.config.interval_tolerance_days,
            self.config.max_skipped_cycles,
        ):
            logger.debug(f"Discarding '{normalized_merchant}': intervals do not follow {match.frequency.value} cadence")
            return None

        amounts = [float(abs(txn.amount.amount)) for txn in ordered]  # type: ignore[union-attr]
        confidence = self.confidence_scorer.score(intervals, amounts, match.frequency, len(ordered))
        if confidence < self.config.min_confidence:
            logger.debug(
                f"Discarding '{normalized_merchant}': confidence {confidence:.2f} "
                f"below {self.config.min_confidence:.2f}"
            )
            return None

        flags = self.flag_detector.detect_flags(ordered, intervals, amounts, match.frequency)

        currency = ordered[0].amount.currency  # type: ignore[union-attr]
        total = sum((abs(txn.amount.amount) for txn in ordered), Decimal("0"))  # type: ignore[union-attr]
        mean_amount = (total / len(ordered)).quantize(CENTS, rounding=ROUND_HALF_UP)
        amount_std = Decimal(str(float(np.std(amounts)))).quantize(VARIANCE_PLACES, rounding=ROUND_HALF_UP)

        last_date = dates[-1]
        return RecurringPattern(
            normalized_merchant=normalized_merchant,
            representative_merchant_name=ordered[0].merchant_name,
            representative_amount=Money(amount=mean_amount, currency=currency),
            amount_variance=amount_std,
            frequency=match.frequency,
            confidence=confidence,
            last_date=last_date,
            predicted_next_date=next_occurrence(last_date, match.frequency, match.median_interval),
            transactions=ordered,
            flags=flags,
            detection_reason=match.matched_reason,
        )

    def _amount_tolerance(self) -> Decimal:
        return Decimal(str(self.config.amount_tolerance_percent)) / Decimal("100")

    @staticmethod
    def _sort_key(pattern: RecurringPattern):
        return (
            -pattern.confidence,
            pattern.normalized_merchant,
            pattern.representative_merchant_name,
            pattern.representative_amount.amount,
        )
