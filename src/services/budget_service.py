"""
Budget evaluation.

BudgetEvaluator is a pure calculator over explicitly passed transactions,
categories and configuration. BudgetService loads those inputs from
repositories and delegates to the evaluator.
"""

import logging
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from models.budget import (
    UNCATEGORISED_BUCKET,
    BreachType,
    BudgetBreach,
    BudgetConfig,
    BudgetStatus,
    CategoryBudgetStatus,
    MonthlySpending,
    WillExceedResult,
)
from models.category import UNCATEGORISED_NAME, Category
from models.money import Currency, Money
from models.transaction import Transaction
from repositories.interfaces import (
    BudgetsRepository,
    CategoriesRepository,
    TransactionsRepository,
)
from utils.temporal_utils import month_bounds, month_iso

logger = logging.getLogger(__name__)


class _Spend:
    """Decimal spend totals for one date range."""

    def __init__(self):
        self.total = Decimal("0")
        self.by_category: Dict[str, Decimal] = OrderedDict()

    def add(self, bucket: str, amount: Decimal) -> None:
        self.total += amount
        self.by_category[bucket] = self.by_category.get(bucket, Decimal("0")) + amount


class BudgetEvaluator:
    """Aggregates spend per month and category and reports limit breaches."""

    def evaluate(
        self,
        month_iso_key: str,
        transactions: Iterable[Transaction],
        categories: Iterable[Category],
        config: Optional[BudgetConfig] = None
    ) -> BudgetStatus:
        """
        Evaluate one month against the budget configuration.

        Args:
            month_iso_key: Month key in ``YYYY-MM`` form
            transactions: Transactions to consider (any dates)
            categories: Known categories, used for names and monthly limits
            config: Budget configuration (None means no limits)

        Returns:
            BudgetStatus for the month

        Raises:
            ValueError: If the month key is invalid
        """
        config = config or BudgetConfig()
        transactions = list(transactions)
        category_map = {category.id: category for category in categories}
        currency = config.currency

        start, end = month_bounds(month_iso_key)
        spend = self._spend_between(transactions, start, end, currency)

        category_status = self._category_status(spend, category_map, config)
        breaches: List[BudgetBreach] = []

        total_spent = Money(amount=spend.total, currency=currency)
        if config.monthly_limit is not None and spend.total > config.monthly_limit.amount:
            breaches.append(self._breach(BreachType.MONTHLY, spend.total, config.monthly_limit))

        if config.yearly_limit is not None:
            year_to_date = self._year_to_date(transactions, end, currency)
            if year_to_date > config.yearly_limit.amount:
                breaches.append(self._breach(BreachType.YEARLY, year_to_date, config.yearly_limit))

        for status in category_status:
            if status.is_over and status.limit is not None:
                breaches.append(self._breach(
                    BreachType.CATEGORY,
                    status.spent.amount,
                    status.limit,
                    category_id=status.category_id,
                    category_name=status.category_name,
                ))

        if breaches:
            logger.info(f"Budget for {month_iso_key}: {len(breaches)} breach(es), spent {total_spent}")

        return BudgetStatus(
            month=month_iso_key,
            total_spent=total_spent,
            monthly_limit=config.monthly_limit,
            yearly_limit=config.yearly_limit,
            category_status=category_status,
            breaches=breaches,
        )

    def will_exceed_on_add(
        self,
        amount: Money,
        transactions: Iterable[Transaction],
        categories: Iterable[Category],
        config: Optional[BudgetConfig] = None,
        category_id: Optional[str] = None,
        on_date: Optional[date] = None
    ) -> WillExceedResult:
        """
        Check whether adding a hypothetical spend would cross a limit.

        Limits are checked in order monthly, yearly, category and the first
        one crossed is reported.

        Raises:
            ValueError: If the amount's currency differs from the budget currency
        """
        config = config or BudgetConfig()
        if amount.currency != config.currency:
            raise ValueError(
                f"Cannot compare {amount.currency.value} spend against a {config.currency.value} budget"
            )

        categories = list(categories)
        transactions = list(transactions)
        on_date = on_date or date.today()
        status = self.evaluate(month_iso(on_date), transactions, categories, config)

        if config.monthly_limit is not None:
            if status.total_spent.amount + amount.amount > config.monthly_limit.amount:
                return WillExceedResult(
                    will_exceed=True,
                    reason=f"Would exceed monthly budget of {config.monthly_limit}",
                )

        if config.yearly_limit is not None:
            _, end = month_bounds(status.month)
            year_to_date = self._year_to_date(transactions, end, config.currency)
            if year_to_date + amount.amount > config.yearly_limit.amount:
                return WillExceedResult(
                    will_exceed=True,
                    reason=f"Would exceed yearly budget of {config.yearly_limit}",
                )

        if category_id:
            category = next((c for c in categories if c.id == category_id), None)
            limit = self._effective_limit(category_id, category, config)
            if limit is not None:
                new_spent = status.spent_for(category_id) + amount.amount
                if new_spent > limit.amount:
                    name = category.name if category is not None else "category"
                    return WillExceedResult(
                        will_exceed=True,
                        reason=f"Would exceed {name} budget of {limit}",
                    )

        return WillExceedResult(will_exceed=False)

    def get_yearly_spending(
        self,
        year: int,
        transactions: Iterable[Transaction],
        categories: Iterable[Category],
        config: Optional[BudgetConfig] = None
    ) -> List[MonthlySpending]:
        """Total spend for each of the 12 months of a year."""
        config = config or BudgetConfig()
        transactions = list(transactions)

        results = []
        for month in range(1, 13):
            key = f"{year:04d}-{month:02d}"
            start, end = month_bounds(key)
            spend = self._spend_between(transactions, start, end, config.currency)
            results.append(MonthlySpending(month=key, total=Money(amount=spend.total, currency=config.currency)))
        return results

    def _spend_between(
        self,
        transactions: List[Transaction],
        start: date,
        end: date,
        currency: Currency
    ) -> _Spend:
        spend = _Spend()
        for txn in transactions:
            if not txn.is_analyzable:
                continue
            if txn.amount.currency != currency:  # type: ignore[union-attr]
                logger.debug(f"Skipping transaction {txn.id}: currency differs from budget currency")
                continue
            if start <= txn.date <= end:  # type: ignore[operator]
                spend.add(txn.category_id or UNCATEGORISED_BUCKET, txn.amount.amount)  # type: ignore[union-attr]
        return spend

    def _year_to_date(self, transactions: List[Transaction], end: date, currency: Currency) -> Decimal:
        return self._spend_between(transactions, date(end.year, 1, 1), end, currency).total

    def _category_status(
        self,
        spend: _Spend,
        category_map: Dict[str, Category],
        config: BudgetConfig
    ) -> List[CategoryBudgetStatus]:
        statuses = []
        for category_id, spent in spend.by_category.items():
            category = category_map.get(category_id)
            limit = self._effective_limit(category_id, category, config)
            statuses.append(CategoryBudgetStatus(
                category_id=category_id,
                category_name=self._category_name(category_id, category),
                spent=Money(amount=spent, currency=config.currency),
                limit=limit,
                is_over=limit is not None and spent > limit.amount,
            ))
        return statuses

    @staticmethod
    def _effective_limit(
        category_id: str,
        category: Optional[Category],
        config: BudgetConfig
    ) -> Optional[Money]:
        if category_id in config.per_category_limits:
            return config.per_category_limits[category_id]
        if category is None or category.monthly_limit is None:
            return None
        if category.monthly_limit.currency != config.currency:
            logger.debug(
                f"Ignoring {category.monthly_limit.currency.value} limit of category {category_id}: "
                f"budget currency is {config.currency.value}"
            )
            return None
        return category.monthly_limit

    @staticmethod
    def _category_name(category_id: str, category: Optional[Category]) -> str:
        if category is not None:
            return category.name
        if category_id == UNCATEGORISED_BUCKET:
            return UNCATEGORISED_NAME
        return category_id

    @staticmethod
    def _breach(
        breach_type: BreachType,
        spent: Decimal,
        limit: Money,
        category_id: Optional[str] = None,
        category_name: Optional[str] = None
    ) -> BudgetBreach:
        return BudgetBreach(
            type=breach_type,
            spent=Money(amount=spent, currency=limit.currency),
            limit=limit,
            overage=Money(amount=spent - limit.amount, currency=limit.currency),
            category_id=category_id,
            category_name=category_name,
        )


class BudgetService:
    """Budget evaluation backed by repositories."""

    def __init__(
        self,
        transactions_repo: TransactionsRepository,
        categories_repo: CategoriesRepository,
        budgets_repo: BudgetsRepository,
        evaluator: Optional[BudgetEvaluator] = None
    ):
        self.transactions_repo = transactions_repo
        self.categories_repo = categories_repo
        self.budgets_repo = budgets_repo
        self.evaluator = evaluator or BudgetEvaluator()

    def get_config(self) -> BudgetConfig:
        return self.budgets_repo.get() or BudgetConfig()

    def evaluate_month(self, month_iso_key: str) -> BudgetStatus:
        return self.evaluator.evaluate(
            month_iso_key,
            self.transactions_repo.list(),
            self.categories_repo.list(),
            self.get_config(),
        )

    def get_current_month_status(self, today: Optional[date] = None) -> BudgetStatus:
        today = today or date.today()
        return self.evaluate_month(month_iso(today))

    def will_exceed_on_add(
        self,
        amount: Money,
        category_id: Optional[str] = None,
        on_date: Optional[date] = None
    ) -> WillExceedResult:
        return self.evaluator.will_exceed_on_add(
            amount,
            self.transactions_repo.list(),
            self.categories_repo.list(),
            self.get_config(),
            category_id=category_id,
            on_date=on_date,
        )

    def get_yearly_spending(self, year: int) -> List[MonthlySpending]:
        return self.evaluator.get_yearly_spending(
            year,
            self.transactions_repo.list(),
            self.categories_repo.list(),
            self.get_config(),
        )
