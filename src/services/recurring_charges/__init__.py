"""
Recurring Payment Detection.

This package detects recurring payments ("subscriptions") in transaction
history.

Public API:
    - PatternDetector: Groups, classifies, scores and flags recurring payments
    - DetectionConfig: Configuration for detection parameters
    - DEFAULT_CONFIG: Default configuration instance
"""

from services.recurring_charges.detection_service import PatternDetector
from services.recurring_charges.config import (
    DetectionConfig,
    DEFAULT_CONFIG,
    ConfidenceWeights,
    FrequencyBuckets,
    NOMINAL_DAYS,
)
from services.recurring_charges.analyzers import (
    MerchantNormalizer,
    normalize_merchant,
    IntervalCalculator,
    FrequencyClassifier,
    FrequencyMatch,
    ConfidenceScorer,
    FlagDetector,
)

__all__ = [
    'PatternDetector',
    'DetectionConfig',
    'DEFAULT_CONFIG',
    'ConfidenceWeights',
    'FrequencyBuckets',
    'NOMINAL_DAYS',
    'MerchantNormalizer',
    'normalize_merchant',
    'IntervalCalculator',
    'FrequencyClassifier',
    'FrequencyMatch',
    'ConfidenceScorer',
    'FlagDetector',
]
