"""
Column resolution and price parsing.

Marketplace exports are not consistent about header text: casing, spacing
and even spelling ("Commision") change between downloads. Fields are
therefore resolved through an ordered list of known header aliases, most
specific first, instead of a fixed schema.
"""
from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass
from typing import Any, Iterable, Tuple

from .models import Record

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")


def _norm_header(name: Any) -> str:
    return str(name).strip().lower()


def resolve_field(record: Record, aliases: Iterable[str], default: Any = 0) -> Any:
    """Return the value under the first alias present as a key in ``record``.

    Header-name priority, not value priority: an empty cell under a
    higher-priority alias still wins over a filled one under a lower alias.
    """
    keys = {}
    for key in record.keys():
        keys.setdefault(_norm_header(key), key)

    for alias in aliases:
        norm = _norm_header(alias)
        if norm in keys:
            return record[keys[norm]]
    return default


def parse_price(value: Any) -> float:
    """Turn a raw cell ("₹1,299.00", 450, "", None) into a float amount."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, numbers.Real):
        f = float(value)
        return 0.0 if math.isnan(f) else f

    clean = _NON_NUMERIC.sub("", str(value).strip())
    m = _LEADING_NUMBER.match(clean)
    if not m:
        return 0.0
    return float(m.group(0))


@dataclass(frozen=True)
class FieldAliases:
    """A canonical field and the header spellings it may appear under."""
    name: str
    aliases: Tuple[str, ...]

    def resolve(self, record: Record, default: Any = 0) -> Any:
        return resolve_field(record, self.aliases, default)

    def price(self, record: Record) -> float:
        return parse_price(self.resolve(record))


LISTED_PRICE = FieldAliases(
    name="listed_price",
    aliases=(
        "Supplier Listed Price (Incl. GST + Commission)",
        "Supplier Listed Price",
        "Listed Price",
    ),
)

DISCOUNTED_PRICE = FieldAliases(
    name="discounted_price",
    aliases=(
        "Supplier Discounted Price (Incl GST and Commission)",
        "Supplier Discounted Price (Incl GST and Commision)",  # misspelled in some exports
        "Supplier Discounted Price",
        "Discounted Price",
    ),
)
