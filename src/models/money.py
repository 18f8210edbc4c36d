from decimal import Decimal, InvalidOperation
import enum
from typing import Any

from pydantic import BaseModel, field_validator, ConfigDict


class Currency(str, enum.Enum):
    """Enum for currencies"""
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    JPY = "JPY"
    AUD = "AUD"
    CHF = "CHF"
    CNY = "CNY"
    OTHER = "other"


class Money(BaseModel):
    """
    Money represents a monetary amount in a given currency.

    Amounts are always held as Decimal so sums over many transactions stay
    exact. Arithmetic between two Money values requires matching currencies.
    """
    amount: Decimal
    currency: Currency = Currency.GBP

    model_config = ConfigDict(
        frozen=True,
        json_encoders={
            Decimal: str
        },
        use_enum_values=False
    )

    @field_validator('amount', mode='before')
    @classmethod
    def ensure_amount_is_decimal(cls, v: Any) -> Decimal:
        if isinstance(v, bool):
            raise ValueError(f"Invalid amount value: {v}. Could not convert to Decimal.")
        if not isinstance(v, Decimal):
            try:
                return Decimal(str(v))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid amount value: {v}. Could not convert to Decimal.") from e
        return v

    @classmethod
    def zero(cls, currency: Currency = Currency.GBP) -> 'Money':
        return cls(amount=Decimal("0"), currency=currency)

    @property
    def is_finite(self) -> bool:
        return self.amount.is_finite()

    def abs(self) -> 'Money':
        return Money(amount=abs(self.amount), currency=self.currency)

    def _check_currency(self, other: 'Money', operation: str) -> None:
        if self.currency != other.currency:
            raise ValueError(f"Cannot {operation} money with different currencies")

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_currency(other, "subtract")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __mul__(self, other: Decimal) -> 'Money':
        if not isinstance(other, Decimal):
            other = Decimal(str(other))
        return Money(amount=self.amount * other, currency=self.currency)

    def __truediv__(self, other: Decimal) -> 'Money':
        if not isinstance(other, Decimal):
            other = Decimal(str(other))
        if other == Decimal(0):
            raise ValueError("Cannot divide by zero")
        return Money(amount=self.amount / other, currency=self.currency)

    def __str__(self) -> str:
        return f"{self.currency.value}{self.amount:.2f}"
