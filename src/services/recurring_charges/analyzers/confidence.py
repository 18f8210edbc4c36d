"""
Confidence scorer for recurring payment detection.

Calculates a multi-factor confidence score in [0, 1] for a candidate group.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from models.recurring_pattern import RecurrenceFrequency
from services.recurring_charges.config import ConfidenceWeights
from services.recurring_charges.analyzers.frequency import FrequencyClassifier

logger = logging.getLogger(__name__)


class ConfidenceScorer:
    """
    Calculates multi-factor confidence scores for recurring payment patterns.

    Considers:
    - Interval regularity (how close the gaps are to the expected cadence)
    - Amount stability (how consistent the amounts are)
    - Sample size (more occurrences = higher confidence, with diminishing returns)

    A group whose amounts are all identical is simply a zero-variance input;
    it still needs regular spacing and enough occurrences to score high.
    """

    def __init__(
        self,
        weights: Optional[ConfidenceWeights] = None,
        interval_cv_sensitivity: float = 2.0,
        amount_cv_sensitivity: float = 5.0
    ):
        """
        Initialize the confidence scorer.

        Args:
            weights: Optional custom weights for scoring factors.
                    If None, uses default weights (40%, 30%, 30%)
            interval_cv_sensitivity: Multiplier applied to the interval spread
            amount_cv_sensitivity: Multiplier applied to the amount spread
        """
        self.weights = weights or ConfidenceWeights()
        self.interval_cv_sensitivity = interval_cv_sensitivity
        self.amount_cv_sensitivity = amount_cv_sensitivity

    def score(
        self,
        intervals_days: Sequence[int],
        amounts: Sequence[float],
        frequency: RecurrenceFrequency,
        sample_size: int
    ) -> float:
        """
        Calculate confidence score (0.0-1.0).

        Args:
            intervals_days: Day gaps between consecutive payments
            amounts: Absolute payment amounts
            frequency: Classified cadence
            sample_size: Number of transactions in the group

        Returns:
            Confidence score between 0.0 and 1.0
        """
        regularity = self.interval_regularity(intervals_days, frequency)
        stability = self.amount_stability(amounts)
        sample = self.sample_size_factor(sample_size)

        confidence = (
            self.weights.interval_regularity * regularity +
            self.weights.amount_stability * stability +
            self.weights.sample_size * sample
        )

        logger.debug(
            f"Confidence factors: regularity={regularity:.3f}, "
            f"stability={stability:.3f}, sample={sample:.3f} -> {confidence:.3f}"
        )
        return min(1.0, max(0.0, round(confidence, 2)))

    def interval_regularity(self, intervals_days: Sequence[int], frequency: RecurrenceFrequency) -> float:
        """
        Regularity of the intervals relative to the expected cadence.

        Uses the root-mean-square deviation from the cadence length divided by
        that length, inverted to the [0, 1] range.

        Returns:
            Regularity score (0.0-1.0), 0.0 without intervals
        """
        if not intervals_days:
            return 0.0

        values = np.asarray(intervals_days, dtype=float)
        expected = FrequencyClassifier.nominal_days(
            frequency, FrequencyClassifier.median_interval(intervals_days)
        )
        if expected <= 0:
            return 0.0

        rms_deviation = float(np.sqrt(np.mean((values - expected) ** 2)))
        cv = rms_deviation / expected
        return 1.0 / (1.0 + self.interval_cv_sensitivity * cv)

    def amount_stability(self, amounts: Sequence[float]) -> float:
        """
        Stability of the amounts, from the coefficient of variation (std/mean).

        Returns:
            Stability score (0.0-1.0), 0.0 without amounts or with a zero mean
        """
        if not amounts:
            return 0.0

        values = np.abs(np.asarray(amounts, dtype=float))
        mean_amount = float(np.mean(values))
        if mean_amount <= 0:
            return 0.0

        cv = float(np.std(values)) / mean_amount
        return 1.0 / (1.0 + self.amount_cv_sensitivity * cv)

    @staticmethod
    def sample_size_factor(sample_size: int) -> float:
        """
        Diminishing-returns score for the number of occurrences.

        Two transactions give 0.5, five give ~0.94.
        """
        if sample_size < 2:
            return 0.0
        return 1.0 - 0.5 ** (sample_size - 1)
