"""
Duplicate subscription checks.

Advisory checks run before a transaction or detected pattern is turned into
a tracked subscription. Merchant names are compared through the same
normalizer the recurring payment detector uses.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from models.duplicate_check import DuplicateCheckResult
from models.subscription import Subscription, SubscriptionStatus
from models.transaction import Transaction
from services.recurring_charges.analyzers.merchant import MerchantNormalizer

logger = logging.getLogger(__name__)


@dataclass
class DuplicateCheckOptions:
    check_active_only: bool = True
    amount_tolerance: float = 0.15  # fraction of the subscription amount

    def __post_init__(self):
        if self.amount_tolerance < 0:
            raise ValueError("amount_tolerance must be non-negative")


class DuplicateSubscriptionChecker:
    """Checks whether marking a transaction as a subscription would duplicate one."""

    def __init__(self, normalizer: Optional[MerchantNormalizer] = None):
        self.normalizer = normalizer or MerchantNormalizer()

    def check_for_duplicates(
        self,
        transaction: Transaction,
        existing_subscriptions: Iterable[Subscription],
        existing_transactions: Iterable[Transaction],
        options: Optional[DuplicateCheckOptions] = None
    ) -> DuplicateCheckResult:
        """
        Check a transaction against tracked subscriptions and linked transactions.

        Args:
            transaction: Transaction about to be marked as a subscription
            existing_subscriptions: Currently tracked subscriptions
            existing_transactions: Transactions that may already be linked
            options: Matching options (defaults: active only, 15% tolerance)

        Returns:
            DuplicateCheckResult describing any hits
        """
        options = options or DuplicateCheckOptions()
        normalized = self.normalizer.normalize(transaction.merchant_name)

        subscription = self._find_matching_subscription(
            transaction, existing_subscriptions, normalized, options
        )
        linked = self._find_matching_transactions(transaction, existing_transactions, normalized)

        is_duplicate = subscription is not None or len(linked) > 0
        if is_duplicate:
            logger.info(
                f"Duplicate check for '{transaction.merchant_name}' hit: "
                f"subscription={subscription.id if subscription else None}, linked={len(linked)}"
            )

        return DuplicateCheckResult(
            is_duplicate=is_duplicate,
            existing_subscription=subscription,
            existing_transactions=linked,
            merchant_name=transaction.merchant_name,
            normalized_merchant=normalized,
        )

    def generate_warning_message(self, result: DuplicateCheckResult) -> str:
        """Build a user-facing warning for a duplicate check result."""
        if not result.is_duplicate:
            return ""

        merchant_name = result.merchant_name

        if result.existing_subscription is not None:
            return (
                f'You already have an active subscription for "{merchant_name}". '
                f'Adding this transaction would create a duplicate.'
            )

        count = len(result.existing_transactions)
        if count > 0:
            plural = "transaction" if count == 1 else "transactions"
            return f'You have {count} other {plural} from "{merchant_name}" already marked as subscriptions.'

        return f'Potential duplicate subscription detected for "{merchant_name}".'

    def _find_matching_subscription(
        self,
        transaction: Transaction,
        subscriptions: Iterable[Subscription],
        normalized: str,
        options: DuplicateCheckOptions
    ) -> Optional[Subscription]:
        tolerance = Decimal(str(options.amount_tolerance))
        for sub in subscriptions:
            if options.check_active_only and sub.status == SubscriptionStatus.CANCELLED:
                continue
            if self.normalizer.normalize(sub.merchant_name) != normalized:
                continue

            # Amount check only applies when both sides carry an amount
            if transaction.amount is not None and sub.amount is not None:
                txn_amount = abs(transaction.amount.amount)
                sub_amount = abs(sub.amount.amount)
                if abs(txn_amount - sub_amount) > sub_amount * tolerance:
                    continue

            return sub
        return None

    def _find_matching_transactions(
        self,
        transaction: Transaction,
        transactions: Iterable[Transaction],
        normalized: str
    ) -> List[Transaction]:
        return [
            txn for txn in transactions
            if txn.id != transaction.id
            and txn.subscription_id
            and self.normalizer.normalize(txn.merchant_name) == normalized
        ]
