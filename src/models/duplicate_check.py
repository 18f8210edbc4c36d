from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from models.subscription import Subscription
from models.transaction import Transaction


class DuplicateCheckResult(BaseModel):
    """Outcome of checking a transaction against tracked subscriptions."""
    is_duplicate: bool = Field(alias="isDuplicate")
    existing_subscription: Optional[Subscription] = Field(default=None, alias="existingSubscription")
    existing_transactions: List[Transaction] = Field(default_factory=list, alias="existingTransactions")
    merchant_name: str = Field(alias="merchantName")
    normalized_merchant: str = Field(alias="normalizedMerchant")

    model_config = ConfigDict(populate_by_name=True)
