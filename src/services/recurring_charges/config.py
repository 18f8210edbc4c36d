"""
Configuration classes for recurring payment detection.

Centralizes all configuration parameters, thresholds, and weights used
in the detection pipeline.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Tuple

from models.recurring_pattern import RecurrenceFrequency


@dataclass
class ConfidenceWeights:
    """
    Weights for multi-factor confidence score calculation.

    All weights must sum to 1.0 for proper normalization.
    """

    interval_regularity: float = 0.40
    """Weight for interval regularity (how close the gaps are to the cadence)."""

    amount_stability: float = 0.30
    """Weight for amount stability (how consistent the amounts are)."""

    sample_size: float = 0.30
    """Weight for sample size (how many occurrences)."""

    def __post_init__(self):
        """Validate that weights sum to 1.0."""
        total = self.interval_regularity + self.amount_stability + self.sample_size
        if abs(total - 1.0) > 0.001:
            raise ValueError(
                f"Confidence weights must sum to 1.0, got {total}. "
                f"Weights: interval={self.interval_regularity}, "
                f"amount={self.amount_stability}, "
                f"sample_size={self.sample_size}"
            )
        if min(self.interval_regularity, self.amount_stability, self.sample_size) < 0:
            raise ValueError("Confidence weights must be non-negative")


@dataclass
class FrequencyBuckets:
    """
    Day ranges for each cadence bucket.

    A bucket with equal bounds is a point center (weekly, biweekly). Ranges
    absorb calendar variation: a month is 28-31 days, a quarter 89-92 and a
    year 365-366. Buckets are listed shortest first, which is also the
    tie-break order.
    """

    weekly: Tuple[float, float] = (7, 7)
    biweekly: Tuple[float, float] = (14, 14)
    monthly: Tuple[float, float] = (28, 31)
    quarterly: Tuple[float, float] = (89, 92)
    yearly: Tuple[float, float] = (365, 366)

    def to_dict(self) -> Dict[RecurrenceFrequency, Tuple[float, float]]:
        """
        Convert buckets to an ordered mapping of frequency enum to day range.

        Returns:
            Dictionary mapping RecurrenceFrequency to (min_days, max_days) tuple
        """
        return {
            RecurrenceFrequency.WEEKLY: self.weekly,
            RecurrenceFrequency.BIWEEKLY: self.biweekly,
            RecurrenceFrequency.MONTHLY: self.monthly,
            RecurrenceFrequency.QUARTERLY: self.quarterly,
            RecurrenceFrequency.YEARLY: self.yearly,
        }


# Average cadence lengths in days, used as the expected interval for scoring
NOMINAL_DAYS: Dict[RecurrenceFrequency, float] = {
    RecurrenceFrequency.WEEKLY: 7.0,
    RecurrenceFrequency.BIWEEKLY: 14.0,
    RecurrenceFrequency.MONTHLY: 365.25 / 12,
    RecurrenceFrequency.QUARTERLY: 365.25 / 4,
    RecurrenceFrequency.YEARLY: 365.25,
}

# Share of a cycle an interval may drift from a whole number of cycles
CADENCE_SLACK_RATIO = 0.25


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class DetectionConfig:
    """
    Master configuration for recurring payment detection.

    Aggregates thresholds for grouping, classification, scoring and flagging.
    """

    min_transactions: int = 2
    """Minimum transactions in a group to form a pattern."""

    min_confidence: float = 0.3
    """Patterns scoring below this are discarded."""

    interval_tolerance_days: int = 7
    """Distance allowed between a median interval and a cadence bucket, and
    between a new transaction and a pattern's predicted date."""

    amount_tolerance_percent: float = 20.0
    """Amount variation still treated as the same pattern."""

    lookback_days: int = 365
    """How far back from the reference date transactions are analyzed."""

    allow_custom: bool = False
    """Emit patterns whose cadence fits no standard bucket."""

    price_change_threshold_percent: float = 1.0
    """Consecutive amount change that raises the price_change flag."""

    missed_payment_factor: float = 1.5
    """Interval multiple of the cadence that raises the missed_payment flag."""

    max_skipped_cycles: int = 1
    """Consecutive cycles a payment may skip while the group still counts as one series."""

    interval_cv_sensitivity: float = 2.0
    """How strongly interval spread lowers the regularity factor."""

    amount_cv_sensitivity: float = 5.0
    """How strongly amount spread lowers the stability factor."""

    confidence_weights: ConfidenceWeights = field(default_factory=ConfidenceWeights)
    frequency_buckets: FrequencyBuckets = field(default_factory=FrequencyBuckets)

    def __post_init__(self):
        if self.min_transactions < 2:
            raise ValueError("min_transactions must be at least 2 (one interval)")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError("min_confidence must be between 0.0 and 1.0")
        if self.interval_tolerance_days < 0:
            raise ValueError("interval_tolerance_days must be non-negative")
        if self.amount_tolerance_percent < 0:
            raise ValueError("amount_tolerance_percent must be non-negative")
        if self.lookback_days <= 0:
            raise ValueError("lookback_days must be positive")
        if self.missed_payment_factor <= 1.0:
            raise ValueError("missed_payment_factor must be greater than 1.0")
        if self.max_skipped_cycles < 0:
            raise ValueError("max_skipped_cycles must be non-negative")

    @classmethod
    def from_environment(cls) -> 'DetectionConfig':
        """
        Create configuration from environment variables with fallback to defaults.

        Environment variables:
        - RECURRING_MIN_TRANSACTIONS
        - RECURRING_MIN_CONFIDENCE
        - RECURRING_INTERVAL_TOLERANCE_DAYS
        - RECURRING_AMOUNT_TOLERANCE_PERCENT
        - RECURRING_LOOKBACK_DAYS
        - RECURRING_ALLOW_CUSTOM
        """
        return cls(
            min_transactions=int(os.getenv('RECURRING_MIN_TRANSACTIONS', 2)),
            min_confidence=float(os.getenv('RECURRING_MIN_CONFIDENCE', 0.3)),
            interval_tolerance_days=int(os.getenv('RECURRING_INTERVAL_TOLERANCE_DAYS', 7)),
            amount_tolerance_percent=float(os.getenv('RECURRING_AMOUNT_TOLERANCE_PERCENT', 20.0)),
            lookback_days=int(os.getenv('RECURRING_LOOKBACK_DAYS', 365)),
            allow_custom=_env_bool('RECURRING_ALLOW_CUSTOM', False),
        )


# Default configuration instance
DEFAULT_CONFIG = DetectionConfig()
