from datetime import date, datetime
from decimal import Decimal
import random

import pytest

from app.utils.savings_series import build_series


def allowance(amount, when, percent=None):
    tx = {"type": "allowance", "amount": Decimal(amount), "created_at": when}
    if percent is not None:
        tx["savings_percent"] = percent
        tx["saved_amount"] = (Decimal(amount) * percent / 100).quantize(Decimal("0.01"))
    return tx


def unlock(amount, when):
    return {"type": "unlock", "amount": Decimal(amount), "created_at": when}


def as_pairs(points):
    return [(p.label, p.amount) for p in points]


def test_empty_history_gives_empty_series():
    assert build_series([], 20, "monthly") == []


def test_same_month_collapses_to_one_bucket():
    history = [
        allowance("100", datetime(2024, 1, 5)),
        allowance("50", datetime(2024, 1, 20)),
    ]
    points = build_series(history, 20, "monthly")
    assert as_pairs(points) == [("January 2024", Decimal("30.00"))]
    assert points[0].period_start == date(2024, 1, 1)


def test_bucket_holds_running_total_not_per_bucket_sum():
    history = [
        allowance("100", datetime(2024, 1, 5)),
        allowance("100", datetime(2024, 2, 3)),
        unlock("5", datetime(2024, 2, 10)),
        allowance("50", datetime(2024, 3, 1)),
    ]
    assert as_pairs(build_series(history, 20, "monthly")) == [
        ("January 2024", Decimal("20.00")),
        ("February 2024", Decimal("35.00")),
        ("March 2024", Decimal("45.00")),
    ]


def test_daily_labels():
    history = [
        allowance("10", datetime(2024, 3, 1, 9)),
        allowance("10", datetime(2024, 3, 1, 18)),
        allowance("10", datetime(2024, 3, 2, 7)),
    ]
    assert as_pairs(build_series(history, 50, "daily")) == [
        ("2024-03-01", Decimal("10.00")),
        ("2024-03-02", Decimal("15.00")),
    ]


def test_weekly_uses_iso_weeks():
    history = [
        allowance("10", datetime(2024, 1, 1)),   # Monday, ISO week 1
        allowance("10", datetime(2024, 1, 7)),   # Sunday, still week 1
        allowance("10", datetime(2024, 1, 8)),   # week 2
    ]
    points = build_series(history, 10, "weekly")
    assert as_pairs(points) == [("Week 1", Decimal("2.00")), ("Week 2", Decimal("3.00"))]
    assert points[0].period_start == date(2024, 1, 1)
    assert points[1].period_start == date(2024, 1, 8)


def test_weekly_keeps_equal_week_numbers_of_different_years_apart():
    history = [
        allowance("10", datetime(2024, 1, 3)),
        allowance("10", datetime(2025, 1, 1)),  # ISO week 1 of 2025
    ]
    points = build_series(history, 10, "weekly")
    assert as_pairs(points) == [("Week 1", Decimal("1.00")), ("Week 1", Decimal("2.00"))]
    assert points[0].period_start != points[1].period_start


def test_yearly_labels():
    history = [
        allowance("100", datetime(2023, 6, 1)),
        allowance("100", datetime(2024, 6, 1)),
    ]
    assert as_pairs(build_series(history, 10, "yearly")) == [
        ("2023", Decimal("10.00")),
        ("2024", Decimal("20.00")),
    ]


def test_unsorted_input_is_sorted_deterministically():
    history = [
        allowance("100", datetime(2024, 1, 5)),
        unlock("10", datetime(2024, 2, 1)),
        allowance("40", datetime(2024, 3, 9)),
        allowance("60", datetime(2024, 1, 28)),
    ]
    shuffled = list(history)
    random.Random(7).shuffle(shuffled)

    first = build_series(shuffled, 20, "monthly")
    second = build_series(shuffled, 20, "monthly")
    assert first == second
    assert first == build_series(history, 20, "monthly")
    assert as_pairs(first) == [
        ("January 2024", Decimal("32.00")),
        ("February 2024", Decimal("22.00")),
        ("March 2024", Decimal("30.00")),
    ]


def test_input_list_is_not_mutated():
    history = [allowance("10", datetime(2024, 5, 2)), allowance("10", datetime(2024, 5, 1))]
    before = list(history)
    build_series(history, 20, "daily")
    assert history == before


@pytest.mark.parametrize("granularity", ["daily", "weekly", "monthly", "yearly"])
def test_pure_allowance_history_never_decreases(granularity):
    rng = random.Random(granularity)
    history = [
        allowance(f"{rng.randint(1, 5000) / 100:.2f}", datetime(2024, rng.randint(1, 12), rng.randint(1, 28), rng.randint(0, 23)))
        for _ in range(40)
    ]
    amounts = [p.amount for p in build_series(history, 15, granularity)]
    assert amounts == sorted(amounts)


def test_recorded_percent_wins_over_current_percent():
    history = [
        allowance("100", datetime(2024, 1, 5), percent=20),
        allowance("100", datetime(2024, 2, 5), percent=40),
    ]
    # Current setting is 5%, but each deposit keeps the rate it was made at
    assert as_pairs(build_series(history, 5, "monthly")) == [
        ("January 2024", Decimal("20.00")),
        ("February 2024", Decimal("60.00")),
    ]


def test_unknown_granularity_is_rejected():
    with pytest.raises(ValueError):
        build_series([allowance("10", datetime(2024, 1, 1))], 20, "hourly")
