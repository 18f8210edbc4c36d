"""
Unit tests for the in-memory repositories and the repository decorator.
"""

import logging
from datetime import date
from decimal import Decimal

import pytest

from models.budget import BudgetConfig
from models.category import Category, MerchantCategoryRule
from models.money import Money
from models.subscription import Subscription
from repositories import (
    BudgetsRepository,
    ConflictError,
    InMemoryBudgetsRepository,
    InMemoryCategoriesRepository,
    InMemoryMerchantRulesRepository,
    InMemorySubscriptionsRepository,
    InMemoryTransactionsRepository,
    NotFound,
    TransactionsRepository,
    repository_operation,
)
from tests.fixtures.transaction_fixtures import create_transaction


class TestInMemoryTransactionsRepository:

    def test_upsert_and_get(self):
        repo = InMemoryTransactionsRepository()
        txn = create_transaction("Netflix", "12.99", date(2025, 1, 1), transaction_id="t1")
        repo.upsert(txn)

        assert repo.get("t1") == txn
        assert repo.get("missing") is None
        assert repo.list() == [txn]

    def test_upsert_replaces_in_place(self):
        first = create_transaction("A", "1", date(2025, 1, 1), transaction_id="a")
        second = create_transaction("B", "2", date(2025, 1, 2), transaction_id="b")
        repo = InMemoryTransactionsRepository([first, second])

        repo.upsert(first.model_copy(update={"category_id": "food"}))

        assert [t.id for t in repo.list()] == ["a", "b"]
        assert repo.get("a").category_id == "food"

    def test_is_a_transactions_repository(self):
        assert isinstance(InMemoryTransactionsRepository(), TransactionsRepository)


class TestInMemoryCategoriesRepository:

    def test_crud(self):
        repo = InMemoryCategoriesRepository()
        category = Category(id="c1", name="Food")
        repo.upsert(category)
        assert repo.get("c1") == category

        repo.remove("c1")
        assert repo.get("c1") is None
        repo.remove("c1")
        assert repo.list() == []


class TestInMemoryMerchantRulesRepository:

    def test_keeps_insertion_order(self):
        rules = [
            MerchantCategoryRule(id=f"r{i}", merchant_pattern=f"m{i}", category_id="c")
            for i in range(3)
        ]
        repo = InMemoryMerchantRulesRepository(rules)
        repo.upsert(rules[0].model_copy(update={"priority": 4}))

        assert [r.id for r in repo.list()] == ["r0", "r1", "r2"]
        assert repo.list()[0].priority == 4


class TestInMemorySubscriptionsRepository:

    def test_upsert(self):
        repo = InMemorySubscriptionsRepository()
        subscription = Subscription(id="s1", merchant_name="Netflix")
        repo.upsert(subscription)
        assert repo.list() == [subscription]


class TestInMemoryBudgetsRepository:

    def test_get_and_set(self):
        repo = InMemoryBudgetsRepository()
        assert repo.get() is None

        config = BudgetConfig(monthly_limit=Money(amount=Decimal("100")))
        repo.set(config)
        assert repo.get() == config
        assert isinstance(repo, BudgetsRepository)


class TestRepositoryOperation:

    def test_passes_result_through(self):
        @repository_operation("lookup")
        def lookup(value):
            return value * 2

        assert lookup(4) == 8
        assert lookup.__name__ == "lookup"

    @pytest.mark.parametrize("error", [NotFound("gone"), ConflictError("clash")])
    def test_contract_errors_propagate_without_error_log(self, error, caplog):
        @repository_operation()
        def failing():
            raise error

        with caplog.at_level(logging.ERROR, logger="repositories.base"):
            with pytest.raises(type(error)):
                failing()
        assert caplog.records == []

    def test_unexpected_errors_logged_and_reraised(self, caplog):
        @repository_operation("explode")
        def exploding():
            raise RuntimeError("disk on fire")

        with caplog.at_level(logging.ERROR, logger="repositories.base"):
            with pytest.raises(RuntimeError):
                exploding()
        assert "Unexpected error in explode" in caplog.text
