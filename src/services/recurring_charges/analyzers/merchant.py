"""
Merchant normalizer for recurring payment detection.

Turns raw merchant strings into a stable key so differently formatted
descriptions of the same merchant group together.
"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 20

# Web domain suffixes removed before punctuation is stripped, so that
# "NETFLIX.COM" and "Netflix" share a key
DOMAIN_SUFFIX = re.compile(r"\.(?:co\.uk|com|net|org|io|tv|co)(?![a-z0-9])")
NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")
WEB_PREFIX = re.compile(r"^(?:https?|www)+")


class MerchantNormalizer:
    """
    Canonicalizes merchant names into matching keys.

    The key is lower-case, alphanumeric only, without leading web prefixes
    and at most ``max_length`` characters. ``normalize`` is idempotent.
    """

    def __init__(self, max_length: int = MAX_KEY_LENGTH):
        self.max_length = max_length

    def normalize(self, raw: Optional[str]) -> str:
        """
        Normalize a raw merchant name.

        Args:
            raw: Merchant name as it appears on the statement

        Returns:
            Normalized merchant key (possibly empty for garbage input)
        """
        if not raw:
            return ""
        key = raw.lower()
        key = DOMAIN_SUFFIX.sub("", key)
        key = NON_ALPHANUMERIC.sub("", key)
        key = WEB_PREFIX.sub("", key)
        return key[:self.max_length]

    def same_merchant(self, first: Optional[str], second: Optional[str]) -> bool:
        return self.normalize(first) == self.normalize(second)


_default_normalizer = MerchantNormalizer()


def normalize_merchant(raw: Optional[str]) -> str:
    """Normalize with the default key length."""
    return _default_normalizer.normalize(raw)
