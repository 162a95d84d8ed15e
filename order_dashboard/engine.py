"""
Categorization Engine

Pure computation over decoded rows:
- classify: free-text status -> CategoryTag bucket(s)
- categorize_rows: buckets + running price totals + profit model
- profit_by_date: delivered rows grouped per calendar day
- lookup: price/profit figures for a single sub order

Nothing here performs I/O; persistence and decoding live in storage.py
and adapters.py.
"""
from __future__ import annotations

import logging
import math
import numbers
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd
import pytz

from .exceptions import SubOrderNotFoundError
from .fields import DISCOUNTED_PRICE, LISTED_PRICE
from .models import (
    CategorizedDataset, CategoryTag, LookupResult, ProfitByDateEntry, Record,
)

logger = logging.getLogger(__name__)

STATUS_FIELD = "Reason for Credit Entry"

# Flat cost assumed for every delivered item
DEFAULT_UNIT_COST = 500.0
# Flat charge booked for every door-step exchange
DEFAULT_EXCHANGE_FEE = 80.0

RTO_MARKERS = ("rto_complete", "rto_locked", "rto_initiated")

# Scanned in this order when the row is not an RTO
GENERIC_TAGS = (
    CategoryTag.DOOR_STEP_EXCHANGED,
    CategoryTag.DELIVERED,
    CategoryTag.CANCELLED,
    CategoryTag.READY_TO_SHIP,
    CategoryTag.SHIPPED,
)

DATE_FIELDS = ("Order Date", "Date", "Created At", "Delivered Date")

EXCEL_EPOCH = datetime(1899, 12, 30)


# -----------------------------
# Classification
# -----------------------------
def status_of(record: Record) -> str:
    value = record.get(STATUS_FIELD)
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return str(value).lower().strip()


def classify_status(status: str) -> Tuple[CategoryTag, ...]:
    """Map a lower-cased status string to its bucket(s).

    RTO markers win outright. Otherwise every generic tag found in the text
    is returned, so a status naming two tags counts in both buckets.
    Nothing matched (including an empty status) means OTHER.
    """
    if any(marker in status for marker in RTO_MARKERS):
        return (CategoryTag.RTO,)

    matched = tuple(tag for tag in GENERIC_TAGS if tag.value in status)
    return matched or (CategoryTag.OTHER,)


def classify(record: Record) -> Tuple[CategoryTag, ...]:
    return classify_status(status_of(record))


# -----------------------------
# Aggregation
# -----------------------------
def categorize_rows(
    records: Iterable[Record],
    unit_cost: float = DEFAULT_UNIT_COST,
    exchange_fee: float = DEFAULT_EXCHANGE_FEE,
) -> CategorizedDataset:
    """Bucket every row and compute the upload Totals.

    Price totals run over every row regardless of bucket. Profit only looks
    at delivered rows: delivered discounted total minus ``unit_cost`` per
    delivered item.
    """
    dataset = CategorizedDataset()
    totals = dataset.totals

    for row in records:
        status = status_of(row)
        dataset.categories[CategoryTag.ALL].append(row)

        listed = LISTED_PRICE.price(row)
        discounted = DISCOUNTED_PRICE.price(row)
        totals.total_supplier_listed_price += listed
        totals.total_supplier_discounted_price += discounted

        if "delivered" in status:
            totals.sell_in_month_products += 1
            totals.delivered_supplier_discounted_price_total += discounted

        if "door_step_exchanged" in status:
            totals.total_door_step_exchanger += exchange_fee

        for tag in classify_status(status):
            dataset.categories[tag].append(row)

    cost_basis = totals.sell_in_month_products * unit_cost
    totals.total_profit = totals.delivered_supplier_discounted_price_total - cost_basis
    percent = (totals.total_profit / cost_basis) * 100 if cost_basis else 0
    totals.profit_percent = f"{percent:.2f}"
    return dataset


# -----------------------------
# Profit by date
# -----------------------------
def parse_order_date(value: Any, tz_name: str = "UTC") -> Optional[date]:
    """Calendar date of a date-like cell, or None when it cannot be read.

    Numbers are Excel serial days. Timestamps carrying an offset are moved
    to ``tz_name`` before the date is taken; naive ones keep their date.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value

    if isinstance(value, numbers.Real):
        days = float(value)
        if math.isnan(days):
            return None
        try:
            return (EXCEL_EPOCH + timedelta(days=days)).date()
        except OverflowError:
            return None

    if isinstance(value, datetime):
        try:
            ts = pd.Timestamp(value)
        except ValueError:
            return None
    else:
        text = str(value).strip()
        if not text:
            return None
        ts = pd.to_datetime(text, errors="coerce")

    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(pytz.timezone(tz_name))
    return ts.date()


def _date_cell(record: Record) -> Any:
    for name in DATE_FIELDS:
        value = record.get(name)
        if value is None or value == "":
            continue
        return value
    return None


def profit_by_date(
    records: Iterable[Record],
    unit_cost: float = DEFAULT_UNIT_COST,
    tz_name: str = "UTC",
) -> List[ProfitByDateEntry]:
    """Group delivered rows by calendar date; one entry per date.

    Entries come out in first-occurrence order. Use sorted_by_date for a
    chronological series.
    """
    buckets: Dict[str, List[float]] = {}
    for row in records:
        if "delivered" not in status_of(row):
            continue

        raw = _date_cell(row)
        day = parse_order_date(raw, tz_name) if raw is not None else None
        if day is None:
            logger.debug("Skipping delivered row without a usable date: %r", raw)
            continue

        key = day.isoformat()
        total_count = buckets.setdefault(key, [0.0, 0])
        total_count[0] += DISCOUNTED_PRICE.price(row)
        total_count[1] += 1

    return [
        ProfitByDateEntry(
            date=key,
            profit=total - count * unit_cost,
            count=count,
            discounted_total=total,
        )
        for key, (total, count) in buckets.items()
    ]


def sorted_by_date(entries: Sequence[ProfitByDateEntry]) -> List[ProfitByDateEntry]:
    # YYYY-MM-DD sorts chronologically as text
    return sorted(entries, key=lambda e: e.date)


# -----------------------------
# Lookup
# -----------------------------
def _cell_text(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    text = str(value).strip().lower()
    return text or None


def _sub_order_key(record: Record) -> Optional[str]:
    for key in record.keys():
        k = str(key).lower()
        if "sub" in k and "order" in k:
            return key
    return None


def find_sub_order(records: Sequence[Record], identifier: str) -> Optional[Record]:
    """Find the row for ``identifier`` (trimmed, case-insensitive).

    The sub-order column is searched first across all rows. Only when that
    finds nothing is every cell of every row compared, which can hit an
    unrelated column holding the same text.
    """
    needle = (identifier or "").strip().lower()
    if not needle:
        raise ValueError("Sub Order No required")

    for row in records:
        key = _sub_order_key(row)
        if key is not None and _cell_text(row[key]) == needle:
            return row

    for row in records:
        if any(_cell_text(v) == needle for v in row.values()):
            return row
    return None


def lookup(
    records: Sequence[Record],
    identifier: str,
    unit_cost: float = DEFAULT_UNIT_COST,
) -> LookupResult:
    row = find_sub_order(records, identifier)
    needle = identifier.strip().lower()
    if row is None:
        raise SubOrderNotFoundError(needle)

    discounted = DISCOUNTED_PRICE.price(row)
    return LookupResult(
        sub_order_no=needle,
        listed_price=LISTED_PRICE.price(row),
        discounted_price=discounted,
        profit=unit_cost - discounted,
    )
