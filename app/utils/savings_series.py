# app/utils/savings_series.py
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, Hashable, Iterable, List, Tuple

from app.utils.ledger import ZERO, quantize, transaction_delta

GRANULARITIES = ("daily", "weekly", "monthly", "yearly")


@dataclass(frozen=True)
class SeriesPoint:
    label: str
    amount: Decimal
    period_start: date


# ────────────────────────────────────────────────────────────────────────────────
# BUCKETS
# ────────────────────────────────────────────────────────────────────────────────
def _daily(day: date) -> Tuple[Hashable, str, date]:
    return day, day.isoformat(), day


def _weekly(day: date) -> Tuple[Hashable, str, date]:
    iso_year, iso_week, iso_weekday = day.isocalendar()
    # Keyed by ISO year too, so week 1 of two different years stays apart
    return (iso_year, iso_week), f"Week {iso_week}", day - timedelta(days=iso_weekday - 1)


def _monthly(day: date) -> Tuple[Hashable, str, date]:
    start = date(day.year, day.month, 1)
    return (day.year, day.month), start.strftime("%B %Y"), start


def _yearly(day: date) -> Tuple[Hashable, str, date]:
    return day.year, str(day.year), date(day.year, 1, 1)


_BUCKETERS: Dict[str, Callable[[date], Tuple[Hashable, str, date]]] = {
    "daily": _daily,
    "weekly": _weekly,
    "monthly": _monthly,
    "yearly": _yearly,
}


def bucket_for(moment: datetime, granularity: str) -> Tuple[Hashable, str, date]:
    try:
        bucketer = _BUCKETERS[granularity]
    except KeyError:
        raise ValueError(f"Unknown granularity '{granularity}'; expected one of {', '.join(GRANULARITIES)}")
    day = moment.date() if isinstance(moment, datetime) else moment
    return bucketer(day)


# ────────────────────────────────────────────────────────────────────────────────
# MAIN ENTRY
# ────────────────────────────────────────────────────────────────────────────────
def _created_at(tx: Any) -> datetime:
    return tx["created_at"] if isinstance(tx, dict) else tx.created_at


def build_series(transactions: Iterable[Any], percent: int, granularity: str) -> List[SeriesPoint]:
    """
    Cumulative locked savings, snapshotted per time bucket.

    Transactions are sorted by ``created_at`` first. Each bucket holds the
    running total as of the last transaction that fell inside it, and buckets
    come out in the order they were first reached.

    ``percent`` is only used for allowances that carry no recorded rate.
    """
    if granularity not in _BUCKETERS:
        raise ValueError(f"Unknown granularity '{granularity}'; expected one of {', '.join(GRANULARITIES)}")

    ordered = sorted(transactions, key=_created_at)
    running = ZERO
    buckets: Dict[Hashable, SeriesPoint] = {}

    for tx in ordered:
        running += transaction_delta(tx, percent)
        key, label, period_start = bucket_for(_created_at(tx), granularity)
        # dicts keep first-insertion order; reassigning a key keeps its slot
        buckets[key] = SeriesPoint(label=label, amount=quantize(running), period_start=period_start)

    return list(buckets.values())
