"""
Interval calculator for recurring payment detection.

Computes day gaps between consecutive payment dates.
"""

import logging
from datetime import date
from typing import Dict, List, Sequence

import numpy as np

logger = logging.getLogger(__name__)


class IntervalCalculator:
    """Calculates day intervals between consecutive, pre-sorted dates."""

    def intervals(self, sorted_dates: Sequence[date]) -> List[int]:
        """
        Calculate day intervals between consecutive dates.

        Args:
            sorted_dates: Dates ordered ascending

        Returns:
            ``len(sorted_dates) - 1`` gaps in days, empty for fewer than two dates
        """
        if len(sorted_dates) < 2:
            return []
        return [
            (sorted_dates[i + 1] - sorted_dates[i]).days
            for i in range(len(sorted_dates) - 1)
        ]

    def interval_statistics(self, intervals_days: Sequence[int]) -> Dict[str, float]:
        """
        Calculate summary statistics for a list of intervals.

        Args:
            intervals_days: Day gaps

        Returns:
            Dictionary with mean, median, std, min, max intervals
        """
        if not intervals_days:
            return {
                'mean': 0.0,
                'median': 0.0,
                'std': 0.0,
                'min': 0.0,
                'max': 0.0
            }

        values = np.asarray(intervals_days, dtype=float)
        return {
            'mean': float(np.mean(values)),
            'median': float(np.median(values)),
            'std': float(np.std(values)),
            'min': float(np.min(values)),
            'max': float(np.max(values))
        }
