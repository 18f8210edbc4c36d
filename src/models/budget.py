"""
Budget models.

Configuration for spending limits and the status reports produced when a
month is evaluated against them.
"""

from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict, computed_field, model_validator
from typing_extensions import Self

from models.money import Currency, Money

UNCATEGORISED_BUCKET = "uncategorised"


class BreachType(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CATEGORY = "category"


class BudgetConfig(BaseModel):
    """Spending limits. Every limit is optional; no limits means no breaches."""
    currency: Currency = Currency.GBP
    monthly_limit: Optional[Money] = Field(default=None, alias="monthlyLimit")
    yearly_limit: Optional[Money] = Field(default=None, alias="yearlyLimit")
    per_category_limits: Dict[str, Money] = Field(default_factory=dict, alias="perCategoryLimits")

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=False
    )

    @model_validator(mode='after')
    def check_limit_currencies(self) -> Self:
        limits = {"monthly_limit": self.monthly_limit, "yearly_limit": self.yearly_limit}
        limits.update({f"per_category_limits[{key}]": value for key, value in self.per_category_limits.items()})
        for name, limit in limits.items():
            if limit is not None and limit.currency != self.currency:
                raise ValueError(
                    f"{name} is in {limit.currency.value} but the budget currency is {self.currency.value}"
                )
        return self


class CategoryBudgetStatus(BaseModel):
    category_id: str = Field(alias="categoryId")
    category_name: str = Field(alias="categoryName")
    spent: Money
    limit: Optional[Money] = None
    is_over: bool = Field(default=False, alias="isOver")

    model_config = ConfigDict(populate_by_name=True)


class BudgetBreach(BaseModel):
    type: BreachType
    spent: Money
    limit: Money
    overage: Money
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    category_name: Optional[str] = Field(default=None, alias="categoryName")

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=False
    )


class BudgetStatus(BaseModel):
    month: str
    total_spent: Money = Field(alias="totalSpent")
    monthly_limit: Optional[Money] = Field(default=None, alias="monthlyLimit")
    yearly_limit: Optional[Money] = Field(default=None, alias="yearlyLimit")
    category_status: List[CategoryBudgetStatus] = Field(default_factory=list, alias="categoryStatus")
    breaches: List[BudgetBreach] = Field(default_factory=list)

    model_config = ConfigDict(
        populate_by_name=True,
        json_encoders={
            Decimal: str
        }
    )

    @computed_field(alias="isOverBudget")  # type: ignore[misc]
    @property
    def is_over_budget(self) -> bool:
        return len(self.breaches) > 0

    def spent_for(self, category_id: str) -> Decimal:
        for status in self.category_status:
            if status.category_id == category_id:
                return status.spent.amount
        return Decimal("0")

    def status_for(self, category_id: str) -> Optional[CategoryBudgetStatus]:
        return next((s for s in self.category_status if s.category_id == category_id), None)


class WillExceedResult(BaseModel):
    will_exceed: bool = Field(alias="willExceed")
    reason: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class MonthlySpending(BaseModel):
    month: str
    total: Money
