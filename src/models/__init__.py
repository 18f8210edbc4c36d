"""
Models package for the subscription and budget analysis engine.
"""

from .money import (
    Money,
    Currency,
)

from .transaction import (
    Transaction,
    TransactionSource,
)

from .category import (
    Category,
    MerchantCategoryRule,
    UNCATEGORISED_NAME,
)

from .recurring_pattern import (
    RecurringPattern,
    RecurrenceFrequency,
    PatternFlag,
)

from .subscription import (
    Subscription,
    SubscriptionStatus,
    SubscriptionSource,
)

from .budget import (
    BudgetConfig,
    BudgetStatus,
    BudgetBreach,
    BreachType,
    CategoryBudgetStatus,
    WillExceedResult,
    MonthlySpending,
)

from .duplicate_check import DuplicateCheckResult

__all__ = [
    'Money',
    'Currency',
    'Transaction',
    'TransactionSource',
    'Category',
    'MerchantCategoryRule',
    'UNCATEGORISED_NAME',
    'RecurringPattern',
    'RecurrenceFrequency',
    'PatternFlag',
    'Subscription',
    'SubscriptionStatus',
    'SubscriptionSource',
    'BudgetConfig',
    'BudgetStatus',
    'BudgetBreach',
    'BreachType',
    'CategoryBudgetStatus',
    'WillExceedResult',
    'MonthlySpending',
    'DuplicateCheckResult',
]
