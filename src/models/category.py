from pydantic import BaseModel, Field, field_validator
from typing import Optional
from uuid import uuid4
from pydantic import ConfigDict
import logging

from models.money import Money

logger = logging.getLogger(__name__)

UNCATEGORISED_NAME = "Uncategorised"
UNCATEGORISED_COLOUR = "#9E9E9E"


class Category(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    colour: Optional[str] = None
    monthly_limit: Optional[Money] = Field(default=None, alias="monthlyLimit")

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=False
    )

    @property
    def is_uncategorised(self) -> bool:
        return self.name == UNCATEGORISED_NAME

    @classmethod
    def uncategorised(cls) -> "Category":
        """Build the canonical fallback category."""
        return cls(name=UNCATEGORISED_NAME, colour=UNCATEGORISED_COLOUR)


class MerchantCategoryRule(BaseModel):
    """
    Maps merchants to a category by case-insensitive substring.

    Higher priority rules are evaluated first.
    """
    id: str = Field(default_factory=lambda: f"rule_{uuid4().hex[:8]}")
    merchant_pattern: str = Field(alias="merchantPattern")
    category_id: str = Field(alias="categoryId")
    priority: int = Field(default=0)
    is_active: bool = Field(default=True, alias="isActive")

    model_config = ConfigDict(
        populate_by_name=True
    )

    @field_validator('merchant_pattern')
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('Merchant pattern must not be empty')
        return v

    def matches(self, merchant_name: Optional[str]) -> bool:
        """
        Bidirectional case-insensitive substring match.

        Either the pattern occurs in the merchant name or the merchant name
        occurs in the pattern. Empty merchant names never match.
        """
        if not merchant_name or not merchant_name.strip():
            return False
        merchant_lower = merchant_name.lower()
        pattern_lower = self.merchant_pattern.lower()
        return pattern_lower in merchant_lower or merchant_lower in pattern_lower
