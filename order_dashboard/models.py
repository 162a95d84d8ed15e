"""
Dashboard Data Models

Core data structures shared by the engine, storage and report layers:
- Record: one decoded spreadsheet row, keyed by the header text as it appears
  in the source file
- CategoryTag: the fixed set of status buckets shown on the dashboard
- CategorizedDataset: rows per bucket plus the Totals computed over them
- UploadSnapshot: the unit persisted per upload and read back as "latest"
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

Record = Dict[str, Any]


# =============================================================================
# Enums
# =============================================================================

class CategoryTag(str, Enum):
    """Status buckets a row can be counted in"""
    ALL = "all"
    RTO = "rto"
    DOOR_STEP_EXCHANGED = "door_step_exchanged"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    READY_TO_SHIP = "ready_to_ship"   # shown as "Pending"
    SHIPPED = "shipped"
    OTHER = "other"                   # nothing else matched


# Every tag except ALL; each row lands in at least one of these
OPERATIONAL_TAGS = [tag for tag in CategoryTag if tag is not CategoryTag.ALL]


# =============================================================================
# Core Data Models
# =============================================================================

@dataclass
class Totals:
    """Aggregate figures for one upload"""
    total_supplier_listed_price: float = 0.0
    total_supplier_discounted_price: float = 0.0
    sell_in_month_products: int = 0                      # delivered row count
    delivered_supplier_discounted_price_total: float = 0.0
    total_door_step_exchanger: float = 0.0               # flat exchange charges
    total_profit: float = 0.0
    profit_percent: str = "0.00"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Totals":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class CategorizedDataset:
    """
    Rows bucketed by CategoryTag, in input order, plus their Totals.
    Every tag is present as a key even when its bucket is empty.
    """
    categories: Dict[CategoryTag, List[Record]] = field(
        default_factory=lambda: {tag: [] for tag in CategoryTag}
    )
    totals: Totals = field(default_factory=Totals)

    def rows(self, tag: CategoryTag) -> List[Record]:
        return self.categories.get(tag, [])

    def counts(self) -> Dict[str, int]:
        return {tag.value: len(self.rows(tag)) for tag in CategoryTag}

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {tag.value: list(self.rows(tag)) for tag in CategoryTag}
        out["totals"] = self.totals.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategorizedDataset":
        categories = {tag: list(data.get(tag.value, [])) for tag in CategoryTag}
        return cls(categories=categories, totals=Totals.from_dict(data.get("totals", {})))


@dataclass(frozen=True)
class ProfitByDateEntry:
    """Profit of the delivered rows sharing one calendar date"""
    date: str                        # YYYY-MM-DD
    profit: float
    count: int = 0
    discounted_total: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProfitByDateEntry":
        return cls(
            date=str(data["date"]),
            profit=float(data.get("profit", 0.0)),
            count=int(data.get("count", 0)),
            discounted_total=float(data.get("discounted_total", 0.0)),
        )


@dataclass(frozen=True)
class UploadSnapshot:
    """
    Everything produced by one upload. Created once, never mutated;
    the next upload supersedes it as "latest".
    """
    submitted_at: datetime
    records: List[Record]
    dataset: CategorizedDataset
    profit_by_date: List[ProfitByDateEntry] = field(default_factory=list)

    @property
    def totals(self) -> Totals:
        return self.dataset.totals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "submitted_at": self.submitted_at.isoformat(),
            "data": self.records,
            "totals": self.dataset.totals.to_dict(),
            "categories": self.dataset.to_dict(),
            "profit_by_date": [entry.to_dict() for entry in self.profit_by_date],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UploadSnapshot":
        return cls(
            submitted_at=datetime.fromisoformat(data["submitted_at"]),
            records=list(data.get("data", [])),
            dataset=CategorizedDataset.from_dict(data.get("categories", {})),
            profit_by_date=[ProfitByDateEntry.from_dict(p) for p in data.get("profit_by_date", [])],
        )


@dataclass(frozen=True)
class LookupResult:
    """Price figures for a single sub order"""
    sub_order_no: str
    listed_price: float
    discounted_price: float
    profit: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
