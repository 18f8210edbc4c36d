"""
Unit tests for RecurringPattern model validation.
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from models.money import Money
from models.recurring_pattern import PatternFlag, RecurrenceFrequency, RecurringPattern
from models.subscription import Subscription, SubscriptionSource, SubscriptionStatus
from tests.fixtures.transaction_fixtures import create_transaction


def _pattern(**overrides):
    transactions = [
        create_transaction("Netflix", "12.99", date(2025, 1, 1), transaction_id="t1"),
        create_transaction("Netflix", "12.99", date(2025, 1, 31), transaction_id="t2"),
    ]
    fields = dict(
        normalized_merchant="netflix",
        representative_merchant_name="Netflix",
        representative_amount=Money(amount=Decimal("12.99")),
        amount_variance=Decimal("0"),
        frequency=RecurrenceFrequency.MONTHLY,
        confidence=0.84,
        last_date=date(2025, 1, 31),
        predicted_next_date=date(2025, 2, 28),
        transactions=transactions,
    )
    fields.update(overrides)
    return RecurringPattern(**fields)


class TestRecurringPattern:

    def test_valid_pattern(self):
        pattern = _pattern(flags={PatternFlag.PRICE_CHANGE})
        assert pattern.transaction_ids == ["t1", "t2"]
        assert pattern.first_date == date(2025, 1, 1)
        assert pattern.has_flag(PatternFlag.PRICE_CHANGE)
        assert not pattern.has_flag(PatternFlag.MISSED_PAYMENT)

    def test_requires_two_transactions(self):
        single = [create_transaction("Tesco", "3.50", date(2025, 1, 1))]
        with pytest.raises(ValidationError):
            _pattern(transactions=single, last_date=date(2025, 1, 1))

    def test_requires_ascending_dates(self):
        unordered = [
            create_transaction("Netflix", "12.99", date(2025, 1, 31)),
            create_transaction("Netflix", "12.99", date(2025, 1, 1)),
        ]
        with pytest.raises(ValidationError):
            _pattern(transactions=unordered, last_date=date(2025, 1, 1))

    @pytest.mark.parametrize("confidence", [-0.01, 1.01])
    def test_confidence_bounds(self, confidence):
        with pytest.raises(ValidationError):
            _pattern(confidence=confidence)

    def test_last_date_must_match_latest_transaction(self):
        with pytest.raises(ValidationError):
            _pattern(last_date=date(2025, 1, 30))

    def test_predicted_date_after_last_date(self):
        with pytest.raises(ValidationError):
            _pattern(predicted_next_date=date(2025, 1, 31))

    def test_serializes_camel_case(self):
        dumped = _pattern().model_dump(by_alias=True, mode="json")
        assert dumped["normalizedMerchant"] == "netflix"
        assert dumped["predictedNextDate"] == "2025-02-28"
        assert dumped["frequency"] == "monthly"


class TestSubscriptionFromPattern:

    def test_builds_pending_review_subscription(self):
        pattern = _pattern()
        subscription = Subscription.from_pattern(pattern, category_id="entertainment")

        assert subscription.merchant_name == "Netflix"
        assert subscription.amount == Money(amount=Decimal("12.99"))
        assert subscription.recurrence == RecurrenceFrequency.MONTHLY
        assert subscription.next_payment_date == date(2025, 2, 28)
        assert subscription.last_payment_date == date(2025, 1, 31)
        assert subscription.category_id == "entertainment"
        assert subscription.status == SubscriptionStatus.PENDING_REVIEW
        assert subscription.source == SubscriptionSource.DETECTED
        assert subscription.confidence == 0.84
        assert subscription.transaction_ids == ["t1", "t2"]
        assert not subscription.is_cancelled

    def test_cancelled(self):
        subscription = Subscription(merchant_name="Gym", status=SubscriptionStatus.CANCELLED)
        assert subscription.is_cancelled
