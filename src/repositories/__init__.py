"""
Repository interfaces and in-memory implementations.

Services receive repositories through their constructors; there is no
process-wide repository registry.
"""

from repositories.base import NotFound, ConflictError, repository_operation
from repositories.interfaces import (
    TransactionsRepository,
    CategoriesRepository,
    MerchantRulesRepository,
    SubscriptionsRepository,
    BudgetsRepository,
)
from repositories.memory import (
    InMemoryTransactionsRepository,
    InMemoryCategoriesRepository,
    InMemoryMerchantRulesRepository,
    InMemorySubscriptionsRepository,
    InMemoryBudgetsRepository,
)

__all__ = [
    'NotFound',
    'ConflictError',
    'repository_operation',
    'TransactionsRepository',
    'CategoriesRepository',
    'MerchantRulesRepository',
    'SubscriptionsRepository',
    'BudgetsRepository',
    'InMemoryTransactionsRepository',
    'InMemoryCategoriesRepository',
    'InMemoryMerchantRulesRepository',
    'InMemorySubscriptionsRepository',
    'InMemoryBudgetsRepository',
]
