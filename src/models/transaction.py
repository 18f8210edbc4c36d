import uuid
import logging
import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from models.money import Money

logger = logging.getLogger(__name__)


class TransactionSource(str, Enum):
    """Where a transaction record came from."""
    PLAID = "plaid"
    MANUAL = "manual"


class Transaction(BaseModel):
    """
    A single bank or card transaction as supplied by the transactions repository.

    Amount and date are optional so that partially populated records coming
    from an upstream sync can still be represented; analysis code skips such
    records instead of failing (see ``is_analyzable``).

    Transactions are immutable. Updates (category overrides, subscription
    links) produce a new copy via ``model_copy(update=...)``.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    merchant_name: str = Field(default="", alias="merchantName")
    amount: Optional[Money] = None
    date: Optional[datetime.date] = None
    account_id: Optional[str] = Field(default=None, alias="accountId")
    pending: bool = False
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    subscription_id: Optional[str] = Field(default=None, alias="subscriptionId")
    source: Optional[TransactionSource] = None

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        use_enum_values=False
    )

    @property
    def is_analyzable(self) -> bool:
        """True when the record carries a usable amount and date."""
        return (
            self.amount is not None
            and self.amount.is_finite
            and self.date is not None
        )

    @property
    def absolute_amount(self) -> Optional[Money]:
        if self.amount is None:
            return None
        return self.amount.abs()
