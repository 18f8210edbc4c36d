"""
In-memory repository implementations.

Dictionary-backed repositories that keep insertion order. They are created
and passed explicitly by the caller; nothing here is shared between
instances.
"""

from typing import Dict, Iterable, List, Optional

from models.budget import BudgetConfig
from models.category import Category, MerchantCategoryRule
from models.subscription import Subscription
from models.transaction import Transaction
from repositories.base import repository_operation
from repositories.interfaces import (
    BudgetsRepository,
    CategoriesRepository,
    MerchantRulesRepository,
    SubscriptionsRepository,
    TransactionsRepository,
)



class InMemoryTransactionsRepository(TransactionsRepository):

    def __init__(self, transactions: Optional[Iterable[Transaction]] = None):
        self._items: Dict[str, Transaction] = {}
        for transaction in transactions or []:
            self._items[transaction.id] = transaction

    @repository_operation("list_transactions")
    def list(self) -> List[Transaction]:
        return list(self._items.values())

    @repository_operation("get_transaction")
    def get(self, transaction_id: str) -> Optional[Transaction]:
        return self._items.get(transaction_id)

    @repository_operation("upsert_transaction")
    def upsert(self, transaction: Transaction) -> None:
        self._items[transaction.id] = transaction


class InMemoryCategoriesRepository(CategoriesRepository):

    def __init__(self, categories: Optional[Iterable[Category]] = None):
        self._items: Dict[str, Category] = {}
        for category in categories or []:
            self._items[category.id] = category

    @repository_operation("list_categories")
    def list(self) -> List[Category]:
        return list(self._items.values())

    @repository_operation("get_category")
    def get(self, category_id: str) -> Optional[Category]:
        return self._items.get(category_id)

    @repository_operation("upsert_category")
    def upsert(self, category: Category) -> None:
        self._items[category.id] = category

    @repository_operation("remove_category")
    def remove(self, category_id: str) -> None:
        self._items.pop(category_id, None)


class InMemoryMerchantRulesRepository(MerchantRulesRepository):

    def __init__(self, rules: Optional[Iterable[MerchantCategoryRule]] = None):
        self._items: Dict[str, MerchantCategoryRule] = {}
        for rule in rules or []:
            self._items[rule.id] = rule

    @repository_operation("list_merchant_rules")
    def list(self) -> List[MerchantCategoryRule]:
        return list(self._items.values())

    @repository_operation("upsert_merchant_rule")
    def upsert(self, rule: MerchantCategoryRule) -> None:
        self._items[rule.id] = rule


class InMemorySubscriptionsRepository(SubscriptionsRepository):

    def __init__(self, subscriptions: Optional[Iterable[Subscription]] = None):
        self._items: Dict[str, Subscription] = {}
        for subscription in subscriptions or []:
            self._items[subscription.id] = subscription

    @repository_operation("list_subscriptions")
    def list(self) -> List[Subscription]:
        return list(self._items.values())

    @repository_operation("upsert_subscription")
    def upsert(self, subscription: Subscription) -> None:
        self._items[subscription.id] = subscription


class InMemoryBudgetsRepository(BudgetsRepository):

    def __init__(self, config: Optional[BudgetConfig] = None):
        self._config = config

    @repository_operation("get_budget_config")
    def get(self) -> Optional[BudgetConfig]:
        return self._config

    @repository_operation("set_budget_config")
    def set(self, config: BudgetConfig) -> None:
        self._config = config
