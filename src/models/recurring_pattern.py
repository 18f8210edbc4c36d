"""
Recurring Pattern Models.

This module provides Pydantic models for detected recurring payments,
including the cadence and anomaly-flag enums shared by the analyzers.
"""

import logging
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Set

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from typing_extensions import Self

from models.money import Money
from models.transaction import Transaction

logger = logging.getLogger(__name__)

MIN_PATTERN_TRANSACTIONS = 2


class RecurrenceFrequency(str, Enum):
    """Cadence of a recurring payment."""
    WEEKLY = "weekly"          # ~7 day intervals
    BIWEEKLY = "biweekly"      # ~14 day intervals
    MONTHLY = "monthly"        # 28-31 day intervals
    QUARTERLY = "quarterly"    # 89-92 day intervals
    YEARLY = "yearly"          # 365-366 day intervals
    CUSTOM = "custom"          # Regular but outside the standard buckets


class PatternFlag(str, Enum):
    """Anomalies annotated on a pattern without splitting it."""
    PRICE_CHANGE = "price_change"
    MISSED_PAYMENT = "missed_payment"


class RecurringPattern(BaseModel):
    """
    A group of transactions from one merchant that recur on a cadence.

    The frequency, confidence and flags are all derived from ``transactions``
    by the pattern detector; they are never set independently.
    """
    normalized_merchant: str = Field(alias="normalizedMerchant")
    representative_merchant_name: str = Field(alias="representativeMerchantName")
    representative_amount: Money = Field(alias="representativeAmount")
    amount_variance: Decimal = Field(alias="amountVariance", ge=0)
    frequency: RecurrenceFrequency
    confidence: float = Field(ge=0.0, le=1.0)
    last_date: date = Field(alias="lastDate")
    predicted_next_date: date = Field(alias="predictedNextDate")
    transactions: List[Transaction]
    flags: Set[PatternFlag] = Field(default_factory=set)
    detection_reason: str = Field(default="interval_matching", alias="detectionReason")

    model_config = ConfigDict(
        populate_by_name=True,
        json_encoders={
            Decimal: str
        },
        use_enum_values=False  # Preserve enum objects (not strings) for type safety
    )

    @field_validator('transactions')
    @classmethod
    def validate_transactions(cls, v: List[Transaction]) -> List[Transaction]:
        if len(v) < MIN_PATTERN_TRANSACTIONS:
            raise ValueError(
                f"A recurring pattern needs at least {MIN_PATTERN_TRANSACTIONS} transactions, got {len(v)}"
            )
        if any(txn.date is None for txn in v):
            raise ValueError("Pattern transactions must all carry a date")
        dates = [txn.date for txn in v]
        if dates != sorted(dates):
            raise ValueError("Pattern transactions must be ordered ascending by date")
        return v

    @model_validator(mode='after')
    def check_dates(self) -> Self:
        if self.last_date != self.transactions[-1].date:
            raise ValueError("last_date must equal the date of the latest transaction")
        if self.predicted_next_date <= self.last_date:
            raise ValueError("predicted_next_date must fall after last_date")
        return self

    @property
    def transaction_ids(self) -> List[str]:
        return [txn.id for txn in self.transactions]

    @property
    def first_date(self) -> date:
        return self.transactions[0].date  # type: ignore[return-value]

    def has_flag(self, flag: PatternFlag) -> bool:
        return flag in self.flags
