"""Repository interfaces consumed by the analysis services."""

from abc import ABC, abstractmethod
from typing import List, Optional

from models.budget import BudgetConfig
from models.category import Category, MerchantCategoryRule
from models.subscription import Subscription
from models.transaction import Transaction


class TransactionsRepository(ABC):
    """Repository interface for transactions."""

    @abstractmethod
    def list(self) -> List[Transaction]:
        """Return every stored transaction."""

    @abstractmethod
    def get(self, transaction_id: str) -> Optional[Transaction]:
        """Return the transaction with this id, or None."""

    @abstractmethod
    def upsert(self, transaction: Transaction) -> None:
        """Insert or replace a transaction by id."""


class CategoriesRepository(ABC):
    """Repository interface for categories."""

    @abstractmethod
    def list(self) -> List[Category]:
        """Return every category."""

    @abstractmethod
    def get(self, category_id: str) -> Optional[Category]:
        """Return the category with this id, or None."""

    @abstractmethod
    def upsert(self, category: Category) -> None:
        """Insert or replace a category by id."""

    @abstractmethod
    def remove(self, category_id: str) -> None:
        """Delete a category. Removing an unknown id is a no-op."""


class MerchantRulesRepository(ABC):
    """Repository interface for merchant category rules."""

    @abstractmethod
    def list(self) -> List[MerchantCategoryRule]:
        """
        Return every rule in insertion order.

        Callers rely on this order to break priority ties.
        """

    @abstractmethod
    def upsert(self, rule: MerchantCategoryRule) -> None:
        """Insert or replace a rule by id. Replacing keeps the original position."""


class SubscriptionsRepository(ABC):
    """Repository interface for tracked subscriptions."""

    @abstractmethod
    def list(self) -> List[Subscription]:
        """Return every subscription, including cancelled ones."""

    @abstractmethod
    def upsert(self, subscription: Subscription) -> None:
        """Insert or replace a subscription by id."""


class BudgetsRepository(ABC):
    """Repository interface for the budget configuration."""

    @abstractmethod
    def get(self) -> Optional[BudgetConfig]:
        """Return the stored configuration, or None if none was saved yet."""

    @abstractmethod
    def set(self, config: BudgetConfig) -> None:
        """Store the configuration."""
