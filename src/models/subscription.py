import uuid
import logging
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from models.money import Money
from models.recurring_pattern import RecurrenceFrequency, RecurringPattern

logger = logging.getLogger(__name__)


class SubscriptionStatus(str, Enum):
    """Lifecycle status of a tracked subscription."""
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    PENDING_REVIEW = "pending_review"  # Detected, awaiting user confirmation


class SubscriptionSource(str, Enum):
    MOCK = "mock"
    PLAID = "plaid"
    MANUAL = "manual"
    DETECTED = "detected"


class Subscription(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    merchant_name: str = Field(alias="merchantName")
    amount: Optional[Money] = None
    recurrence: RecurrenceFrequency = RecurrenceFrequency.MONTHLY
    next_payment_date: Optional[date] = Field(default=None, alias="nextPaymentDate")
    last_payment_date: Optional[date] = Field(default=None, alias="lastPaymentDate")
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    source: SubscriptionSource = SubscriptionSource.MANUAL
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    transaction_ids: List[str] = Field(default_factory=list, alias="transactionIds")
    notes: Optional[str] = None

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=False
    )

    @property
    def is_cancelled(self) -> bool:
        return self.status == SubscriptionStatus.CANCELLED

    @classmethod
    def from_pattern(cls, pattern: RecurringPattern, category_id: Optional[str] = None) -> "Subscription":
        """Build a subscription awaiting review from a detected pattern."""
        return cls(
            merchant_name=pattern.representative_merchant_name,
            amount=pattern.representative_amount,
            recurrence=pattern.frequency,
            next_payment_date=pattern.predicted_next_date,
            last_payment_date=pattern.last_date,
            category_id=category_id,
            status=SubscriptionStatus.PENDING_REVIEW,
            source=SubscriptionSource.DETECTED,
            confidence=pattern.confidence,
            transaction_ids=pattern.transaction_ids,
            notes=f"Detected from {len(pattern.transactions)} transactions ({pattern.detection_reason})",
        )
