"""
Subscription detection service.

Front door for recurring payment detection: runs the pattern detector,
matches new transactions against known patterns and turns confirmed
patterns into tracked subscriptions, refusing to create duplicates.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from models.duplicate_check import DuplicateCheckResult
from models.recurring_pattern import RecurringPattern
from models.subscription import Subscription
from models.transaction import Transaction
from repositories.base import ConflictError
from repositories.interfaces import SubscriptionsRepository, TransactionsRepository
from services.duplicate_subscription_checker import (
    DuplicateCheckOptions,
    DuplicateSubscriptionChecker,
)
from services.recurring_charges import PatternDetector
from services.recurring_charges.config import DetectionConfig

logger = logging.getLogger(__name__)


class DuplicateSubscriptionError(ConflictError):
    """Raised when a subscription would duplicate one already tracked."""

    def __init__(self, message: str, result: DuplicateCheckResult):
        super().__init__(message)
        self.result = result


class SubscriptionDetectionService:
    """Detects recurring payments and manages subscriptions created from them."""

    def __init__(
        self,
        detector: Optional[PatternDetector] = None,
        duplicate_checker: Optional[DuplicateSubscriptionChecker] = None,
        config: Optional[DetectionConfig] = None
    ):
        self.detector = detector or PatternDetector(config)
        self.duplicate_checker = duplicate_checker or DuplicateSubscriptionChecker(
            self.detector.merchant_normalizer
        )

    def detect_patterns(
        self,
        transactions: Iterable[Transaction],
        as_of: Optional[date] = None
    ) -> List[RecurringPattern]:
        return self.detector.detect_patterns(transactions, as_of=as_of)

    def match_new_transaction(
        self,
        transaction: Transaction,
        patterns: Iterable[RecurringPattern]
    ) -> Optional[RecurringPattern]:
        """
        Find the known pattern a freshly observed transaction continues.

        Patterns are tried in the given order, so passing them sorted by
        confidence returns the strongest match.
        """
        for pattern in patterns:
            if self.detector.matches_pattern(transaction, pattern):
                logger.debug(f"Transaction {transaction.id} matches pattern '{pattern.normalized_merchant}'")
                return pattern
        return None

    def create_subscription_from_pattern(
        self,
        pattern: RecurringPattern,
        category_id: Optional[str],
        subscriptions_repo: SubscriptionsRepository,
        transactions_repo: TransactionsRepository,
        options: Optional[DuplicateCheckOptions] = None
    ) -> Subscription:
        """
        Persist a subscription for a detected pattern and link its transactions.

        The duplicate check runs against the pattern's most recent transaction
        before anything is written.

        Args:
            pattern: Detected recurring pattern
            category_id: Category to assign to the subscription
            subscriptions_repo: Where the subscription is stored
            transactions_repo: Where linked transactions are updated
            options: Duplicate check options

        Returns:
            The stored subscription (status pending_review)

        Raises:
            DuplicateSubscriptionError: If the pattern duplicates a tracked subscription
        """
        latest = pattern.transactions[-1]
        result = self.duplicate_checker.check_for_duplicates(
            latest,
            subscriptions_repo.list(),
            transactions_repo.list(),
            options,
        )
        if result.is_duplicate:
            message = self.duplicate_checker.generate_warning_message(result)
            logger.warning(f"Refusing to create subscription for '{pattern.normalized_merchant}': {message}")
            raise DuplicateSubscriptionError(message, result)

        subscription = Subscription.from_pattern(pattern, category_id=category_id)
        subscriptions_repo.upsert(subscription)

        linked = 0
        for transaction_id in subscription.transaction_ids:
            stored = transactions_repo.get(transaction_id)
            if stored is None:
                logger.warning(f"Pattern transaction {transaction_id} not in repository, not linked")
                continue
            transactions_repo.upsert(stored.model_copy(update={"subscription_id": subscription.id}))
            linked += 1

        logger.info(
            f"Created subscription {subscription.id} for '{subscription.merchant_name}' "
            f"({pattern.frequency.value}, confidence {pattern.confidence:.2f}, {linked} transactions linked)"
        )
        return subscription
