"""
Unit tests for PatternDetector.

Covers the end-to-end detection pipeline on small transaction histories:
grouping, amount splitting, filtering, flags, prediction and ordering.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from models.money import Currency, Money
from models.recurring_pattern import PatternFlag, RecurrenceFrequency
from models.transaction import Transaction
from services.recurring_charges import DetectionConfig, PatternDetector
from tests.fixtures.transaction_fixtures import (
    AS_OF,
    create_series,
    create_transaction,
    gym_missed_payment_scenario,
    netflix_scenario,
    spotify_price_rise_scenario,
)


@pytest.fixture
def detector():
    return PatternDetector()


@pytest.fixture
def mixed_history():
    """Netflix, Spotify and PureGym subscriptions plus one-off shopping."""
    return (
        netflix_scenario()
        + spotify_price_rise_scenario()
        + gym_missed_payment_scenario()
        + [
            create_transaction("Tesco", "23.17", date(2025, 2, 14)),
            create_transaction("Amazon", "45.00", date(2025, 3, 3)),
        ]
    )


class TestScenarios:
    """Reference scenarios for the detector."""

    def test_stable_monthly_subscription(self, detector):
        patterns = detector.detect_patterns(netflix_scenario(), as_of=AS_OF)

        assert len(patterns) == 1
        pattern = patterns[0]
        assert pattern.normalized_merchant == "netflix"
        assert pattern.representative_merchant_name == "Netflix"
        assert pattern.representative_amount == Money(amount=Decimal("12.99"))
        assert pattern.amount_variance == Decimal("0")
        assert pattern.frequency == RecurrenceFrequency.MONTHLY
        assert pattern.confidence >= 0.8
        assert len(pattern.transactions) == 5
        assert pattern.flags == set()
        assert pattern.last_date == date(2025, 5, 1)
        assert pattern.predicted_next_date == date(2025, 6, 1)

    def test_price_rise_stays_one_pattern(self, detector):
        stable = detector.detect_patterns(netflix_scenario(), as_of=AS_OF)[0]
        patterns = detector.detect_patterns(spotify_price_rise_scenario(), as_of=AS_OF)

        assert len(patterns) == 1
        pattern = patterns[0]
        assert pattern.has_flag(PatternFlag.PRICE_CHANGE)
        assert not pattern.has_flag(PatternFlag.MISSED_PAYMENT)
        assert len(pattern.transactions) == 4
        assert pattern.representative_amount.amount == Decimal("10.24")
        assert pattern.amount_variance > 0
        assert detector.config.min_confidence <= pattern.confidence < stable.confidence

    def test_skipped_month_is_flagged(self, detector):
        patterns = detector.detect_patterns(gym_missed_payment_scenario(), as_of=AS_OF)

        assert len(patterns) == 1
        pattern = patterns[0]
        assert pattern.frequency == RecurrenceFrequency.MONTHLY
        assert pattern.has_flag(PatternFlag.MISSED_PAYMENT)
        assert not pattern.has_flag(PatternFlag.PRICE_CHANGE)

    def test_one_off_transaction_never_detected(self, detector):
        history = netflix_scenario() + [create_transaction("Tesco", "42.10", date(2025, 3, 5))]
        patterns = detector.detect_patterns(history, as_of=AS_OF)
        assert [p.normalized_merchant for p in patterns] == ["netflix"]

        assert detector.detect_patterns(
            [create_transaction("Tesco", "42.10", date(2025, 3, 5))], as_of=AS_OF
        ) == []

    def test_empty_input(self, detector):
        assert detector.detect_patterns([], as_of=AS_OF) == []


class TestDetectionPipeline:

    def test_minimum_support(self, detector, mixed_history):
        patterns = detector.detect_patterns(mixed_history, as_of=AS_OF)
        assert patterns
        for pattern in patterns:
            assert len(pattern.transactions) >= detector.config.min_transactions
            assert pattern.confidence >= detector.config.min_confidence
            assert 0.0 <= pattern.confidence <= 1.0

    def test_sorted_by_confidence(self, detector, mixed_history):
        patterns = detector.detect_patterns(mixed_history, as_of=AS_OF)
        assert [p.normalized_merchant for p in patterns] == ["netflix", "spotify", "puregym"]
        confidences = [p.confidence for p in patterns]
        assert confidences == sorted(confidences, reverse=True)

    def test_transactions_ordered_by_date(self, detector):
        shuffled = list(reversed(netflix_scenario()))
        pattern = detector.detect_patterns(shuffled, as_of=AS_OF)[0]
        dates = [txn.date for txn in pattern.transactions]
        assert dates == sorted(dates)

    def test_malformed_records_skipped(self, detector):
        history = netflix_scenario() + [
            Transaction(merchant_name="Netflix", amount=None, date=date(2025, 6, 1)),
            Transaction(merchant_name="Netflix", amount=Money(amount="12.99"), date=None),
        ]
        patterns = detector.detect_patterns(history, as_of=AS_OF)
        assert len(patterns) == 1
        assert len(patterns[0].transactions) == 5

    def test_lookback_window(self, detector):
        old = create_series("Netflix", "12.99", AS_OF - timedelta(days=500), [30, 30, 30])
        future = create_series("Netflix", "12.99", AS_OF + timedelta(days=1), [30, 30])
        assert detector.detect_patterns(old + future, as_of=AS_OF) == []

    def test_amount_clusters_split_unrelated_purchases(self, detector):
        prime = create_series("Amazon Prime", "7.99", date(2025, 1, 10), [31, 28, 31, 30])
        shopping = [
            create_transaction("AMAZON PRIME", "64.00", date(2025, 2, 20)),
            create_transaction("Amazon Prime", "120.00", date(2025, 4, 2)),
        ]
        patterns = detector.detect_patterns(prime + shopping, as_of=AS_OF)

        assert len(patterns) == 1
        assert patterns[0].representative_amount.amount == Decimal("7.99")
        assert len(patterns[0].transactions) == 5

    def test_irregular_grocery_shopping_not_detected(self, detector):
        # 26 visits 3 to 11 days apart, baskets between 20 and 60
        gaps = [3, 8, 5, 11, 4, 9, 6, 10, 7] * 2 + [3, 8, 5, 11, 4, 9, 6]
        amounts = [f"{20 + (i * 17) % 41}.45" for i in range(len(gaps) + 1)]
        groceries = create_series("TESCO STORES 2041", amounts, date(2025, 1, 2), gaps)

        assert detector.detect_patterns(groceries, as_of=AS_OF) == []

        history = netflix_scenario() + groceries
        assert [p.normalized_merchant for p in detector.detect_patterns(history, as_of=AS_OF)] == ["netflix"]

    def test_drifting_amounts_do_not_chain_into_one_pattern(self, detector):
        # Each step is within tolerance of the last, the whole range is not
        drifting = create_series(
            "Cloud Storage", ["10.00", "11.50", "13.00", "14.50", "16.00"], date(2025, 1, 1), [30, 30, 30, 30]
        )
        patterns = detector.detect_patterns(drifting, as_of=AS_OF)

        assert sorted(len(p.transactions) for p in patterns) == [2, 2]

    def test_pattern_amounts_within_tolerance_of_representative(self, detector, mixed_history):
        drifting = create_series(
            "Cloud Storage", ["10.00", "11.50", "13.00", "14.50", "16.00"], date(2025, 1, 1), [30, 30, 30, 30]
        )
        patterns = detector.detect_patterns(mixed_history + drifting, as_of=AS_OF)
        tolerance = Decimal(str(detector.config.amount_tolerance_percent)) / 100

        assert patterns
        for pattern in patterns:
            expected = pattern.representative_amount.amount
            for txn in pattern.transactions:
                assert abs(txn.amount.amount - expected) <= expected * tolerance

    def test_currencies_grouped_separately(self, detector):
        gbp = create_series("Netflix", "12.99", date(2025, 1, 1), [30, 30, 30])
        eur = [
            create_transaction("Netflix", "12.99", d, currency=Currency.EUR)
            for d in (date(2025, 1, 5), date(2025, 2, 4), date(2025, 3, 6), date(2025, 4, 5))
        ]
        patterns = detector.detect_patterns(gbp + eur, as_of=AS_OF)
        assert sorted(p.representative_amount.currency.value for p in patterns) == ["EUR", "GBP"]

    def test_month_end_prediction(self, detector):
        history = [
            create_transaction("Council Tax", "150.00", date(2024, 11, 30)),
            create_transaction("Council Tax", "150.00", date(2024, 12, 31)),
            create_transaction("Council Tax", "150.00", date(2025, 1, 31)),
        ]
        pattern = detector.detect_patterns(history, as_of=date(2025, 2, 1))[0]
        assert pattern.frequency == RecurrenceFrequency.MONTHLY
        assert pattern.predicted_next_date == date(2025, 2, 28)

    def test_weekly_cadence(self, detector):
        weekly = create_series("Parkrun Cafe", "4.50", date(2025, 3, 3), [7, 7, 7, 7])
        pattern = detector.detect_patterns(weekly, as_of=AS_OF)[0]

        assert pattern.normalized_merchant == "parkruncafe"
        assert pattern.frequency == RecurrenceFrequency.WEEKLY
        assert pattern.predicted_next_date == date(2025, 4, 7)

    def test_yearly_cadence_with_longer_lookback(self):
        yearly = create_series("Amazon Prime Annual", "95.00", date(2023, 8, 1), [366])

        # The first payment falls outside the default 365 day window
        assert PatternDetector().detect_patterns(yearly, as_of=AS_OF) == []

        detector = PatternDetector(DetectionConfig(lookback_days=800))
        pattern = detector.detect_patterns(yearly, as_of=AS_OF)[0]
        assert pattern.frequency == RecurrenceFrequency.YEARLY
        assert pattern.predicted_next_date == date(2025, 8, 1)

    def test_custom_cadence_requires_opt_in(self):
        history = create_series("Window Cleaner", "20.00", date(2025, 1, 1), [50, 50, 50])

        assert PatternDetector().detect_patterns(history, as_of=AS_OF) == []

        patterns = PatternDetector(DetectionConfig(allow_custom=True)).detect_patterns(history, as_of=AS_OF)
        assert len(patterns) == 1
        assert patterns[0].frequency == RecurrenceFrequency.CUSTOM
        assert patterns[0].predicted_next_date == patterns[0].last_date + timedelta(days=50)

    def test_min_confidence_filter(self):
        strict = PatternDetector(DetectionConfig(min_confidence=0.99))
        assert strict.detect_patterns(netflix_scenario(), as_of=AS_OF) == []

    def test_min_transactions_filter(self):
        detector = PatternDetector(DetectionConfig(min_transactions=5))
        patterns = detector.detect_patterns(
            netflix_scenario() + spotify_price_rise_scenario(), as_of=AS_OF
        )
        assert [p.normalized_merchant for p in patterns] == ["netflix"]

    def test_failing_group_does_not_abort_run(self, detector, mixed_history, monkeypatch):
        original = detector._analyze_group

        def flaky(normalized_merchant, group):
            if normalized_merchant == "spotify":
                raise RuntimeError("unexpected data shape")
            return original(normalized_merchant, group)

        monkeypatch.setattr(detector, "_analyze_group", flaky)
        patterns = detector.detect_patterns(mixed_history, as_of=AS_OF)
        assert [p.normalized_merchant for p in patterns] == ["netflix", "puregym"]


class TestMatchesPattern:

    @pytest.fixture
    def pattern(self, detector):
        return detector.detect_patterns(netflix_scenario(), as_of=AS_OF)[0]

    def test_next_payment_matches(self, detector, pattern):
        txn = create_transaction("NETFLIX.COM", "12.99", date(2025, 6, 3))
        assert detector.matches_pattern(txn, pattern)

    def test_amount_within_tolerance(self, detector, pattern):
        txn = create_transaction("Netflix", "15.00", date(2025, 6, 1))
        assert detector.matches_pattern(txn, pattern)

    @pytest.mark.parametrize("merchant,amount,txn_date", [
        ("Netflix", "12.99", date(2025, 6, 15)),   # too far from predicted date
        ("Netflix", "20.00", date(2025, 6, 1)),    # amount outside tolerance
        ("Spotify", "12.99", date(2025, 6, 1)),    # different merchant
    ])
    def test_non_matching(self, detector, pattern, merchant, amount, txn_date):
        assert not detector.matches_pattern(create_transaction(merchant, amount, txn_date), pattern)

    def test_currency_mismatch(self, detector, pattern):
        txn = create_transaction("Netflix", "12.99", date(2025, 6, 1), currency=Currency.EUR)
        assert not detector.matches_pattern(txn, pattern)

    def test_malformed_never_matches(self, detector, pattern):
        assert not detector.matches_pattern(Transaction(merchant_name="Netflix"), pattern)
