"""
Category resolution for transactions.

Precedence, strongest first:
1. An explicit category on the transaction (if the category still exists)
2. The highest-priority active merchant rule that matches
3. The "Uncategorised" category, created on first use
"""

import logging
from typing import Dict, Iterable, List, Optional

from models.category import Category, MerchantCategoryRule
from models.transaction import Transaction
from repositories.base import NotFound
from repositories.interfaces import (
    CategoriesRepository,
    MerchantRulesRepository,
    TransactionsRepository,
)

logger = logging.getLogger(__name__)


class CategorisationResolver:
    """Resolves the category of transactions against stored categories and rules."""

    def __init__(
        self,
        categories_repo: CategoriesRepository,
        merchant_rules_repo: MerchantRulesRepository,
        transactions_repo: Optional[TransactionsRepository] = None
    ):
        self.categories_repo = categories_repo
        self.merchant_rules_repo = merchant_rules_repo
        self.transactions_repo = transactions_repo

    def categorise(self, transaction: Transaction) -> Category:
        categories = self._categories_by_id()
        rules = self._ordered_rules()
        return self._resolve(transaction, categories, rules)

    def bulk_categorise(self, transactions: Iterable[Transaction]) -> Dict[str, Category]:
        """
        Categorise many transactions with a single load of rules and categories.

        Returns:
            Mapping of transaction id to resolved category
        """
        categories = self._categories_by_id()
        rules = self._ordered_rules()

        result: Dict[str, Category] = {}
        for transaction in transactions:
            result[transaction.id] = self._resolve(transaction, categories, rules)

        logger.info(f"Categorised {len(result)} transactions using {len(rules)} rules")
        return result

    def find_matching_rule(self, merchant_name: Optional[str]) -> Optional[MerchantCategoryRule]:
        """Return the highest-priority active rule matching the merchant, if any."""
        for rule in self._ordered_rules():
            if rule.matches(merchant_name):
                return rule
        return None

    def add_merchant_rule(self, merchant_pattern: str, category_id: str) -> MerchantCategoryRule:
        """
        Add a rule that outranks every existing rule.

        The category is not validated here; rules pointing at a missing
        category are skipped during resolution.
        """
        existing = self.merchant_rules_repo.list()
        max_priority = max([rule.priority for rule in existing] + [0])

        rule = MerchantCategoryRule(
            merchant_pattern=merchant_pattern,
            category_id=category_id,
            priority=max_priority + 1,
        )
        self.merchant_rules_repo.upsert(rule)
        logger.info(f"Added merchant rule {rule.id}: '{merchant_pattern}' -> {category_id} (priority {rule.priority})")
        return rule

    def override_transaction_category(self, transaction_id: str, category_id: str) -> Transaction:
        """
        Pin a transaction to a category.

        Raises:
            NotFound: If the transaction or category does not exist
            ValueError: If no transactions repository was configured
        """
        if self.transactions_repo is None:
            raise ValueError("A transactions repository is required to override categories")

        transaction = self.transactions_repo.get(transaction_id)
        if transaction is None:
            raise NotFound(f"Transaction {transaction_id} not found")
        if self.categories_repo.get(category_id) is None:
            raise NotFound(f"Category {category_id} not found")

        updated = transaction.model_copy(update={"category_id": category_id})
        self.transactions_repo.upsert(updated)
        logger.info(f"Transaction {transaction_id} category overridden to {category_id}")
        return updated

    def _resolve(
        self,
        transaction: Transaction,
        categories: Dict[str, Category],
        rules: List[MerchantCategoryRule]
    ) -> Category:
        if transaction.category_id:
            category = categories.get(transaction.category_id)
            if category is not None:
                return category
            logger.debug(f"Transaction {transaction.id} references unknown category {transaction.category_id}")

        for rule in rules:
            if not rule.matches(transaction.merchant_name):
                continue
            category = categories.get(rule.category_id)
            if category is None:
                logger.warning(f"Rule {rule.id} points at unknown category {rule.category_id}, skipping")
                continue
            return category

        return self._uncategorised(categories)

    def _uncategorised(self, categories: Dict[str, Category]) -> Category:
        for category in categories.values():
            if category.is_uncategorised:
                return category

        category = Category.uncategorised()
        self.categories_repo.upsert(category)
        # Keep the per-call cache in step so later lookups reuse it
        categories[category.id] = category
        logger.info(f"Created fallback category '{category.name}' ({category.id})")
        return category

    def _categories_by_id(self) -> Dict[str, Category]:
        return {category.id: category for category in self.categories_repo.list()}

    def _ordered_rules(self) -> List[MerchantCategoryRule]:
        # sorted() is stable, so equal priorities keep insertion order
        active = [rule for rule in self.merchant_rules_repo.list() if rule.is_active]
        return sorted(active, key=lambda rule: -rule.priority)
