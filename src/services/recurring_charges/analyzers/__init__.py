"""
Pattern analyzers for recurring payment detection.

This package provides specialized analyzers that extract different aspects
of recurring payment patterns from merchant-grouped transactions.
"""

from services.recurring_charges.analyzers.merchant import MerchantNormalizer, normalize_merchant
from services.recurring_charges.analyzers.interval import IntervalCalculator
from services.recurring_charges.analyzers.frequency import FrequencyClassifier, FrequencyMatch
from services.recurring_charges.analyzers.confidence import ConfidenceScorer
from services.recurring_charges.analyzers.flags import FlagDetector

__all__ = [
    'MerchantNormalizer',
    'normalize_merchant',
    'IntervalCalculator',
    'FrequencyClassifier',
    'FrequencyMatch',
    'ConfidenceScorer',
    'FlagDetector',
]
