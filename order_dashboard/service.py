"""
Dashboard service

Wires decoding, the categorization engine and snapshot storage into the
operations the API and CLI expose: upload, lookup, latest profit series
and report downloads. The store is injected so the service can run against
a JSON folder in production and an in-memory list in tests.
"""
from __future__ import annotations

import io
import logging
from datetime import datetime
from typing import List, Optional, Sequence

import pytz

from .adapters import read_records
from .engine import categorize_rows, lookup, profit_by_date
from .exceptions import NoDataError, NoRowsError
from .models import LookupResult, ProfitByDateEntry, Record, UploadSnapshot
from .outputs import write_report_pdf, write_report_xlsx
from .settings import DEFAULT_SETTINGS, DashboardSettings
from .storage import JsonSnapshotStore, SnapshotStore

logger = logging.getLogger(__name__)


class DashboardService:

    def __init__(self, store: Optional[SnapshotStore] = None, settings: DashboardSettings = DEFAULT_SETTINGS):
        self.settings = settings
        self.store = store if store is not None else JsonSnapshotStore(settings.data_dir)

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------
    def upload(self, data: bytes, filename: str) -> UploadSnapshot:
        records = read_records(data, filename)
        return self.process_records(records, source=filename)

    def process_records(self, records: Sequence[Record], source: str = "records") -> UploadSnapshot:
        """Categorize ``records`` and persist them as the latest snapshot."""
        if not records:
            raise NoRowsError(f"No data to save in {source}")

        records = list(records)
        dataset = categorize_rows(
            records,
            unit_cost=self.settings.unit_cost,
            exchange_fee=self.settings.exchange_fee,
        )
        series = profit_by_date(
            records,
            unit_cost=self.settings.unit_cost,
            tz_name=self.settings.report_tz,
        )
        snapshot = UploadSnapshot(
            submitted_at=datetime.now(pytz.utc),
            records=records,
            dataset=dataset,
            profit_by_date=series,
        )
        self.store.insert_latest(snapshot)
        logger.info(
            "Processed %d rows from %s: %d delivered, profit %.2f (%s%%), %d dates",
            len(records),
            source,
            dataset.totals.sell_in_month_products,
            dataset.totals.total_profit,
            dataset.totals.profit_percent,
            len(series),
        )
        return snapshot

    # ------------------------------------------------------------------
    # Queries against the latest upload
    # ------------------------------------------------------------------
    def latest(self) -> UploadSnapshot:
        snapshot = self.store.get_latest()
        if snapshot is None:
            raise NoDataError("No data found")
        return snapshot

    def latest_profit_series(self) -> List[ProfitByDateEntry]:
        return list(self.latest().profit_by_date)

    def lookup(self, identifier: str) -> LookupResult:
        if not (identifier or "").strip():
            raise ValueError("Sub Order No required")
        snapshot = self.latest()
        return lookup(snapshot.records, identifier, unit_cost=self.settings.unit_cost)

    def report_pdf(self) -> bytes:
        snapshot = self.latest()
        bio = io.BytesIO()
        write_report_pdf(bio, snapshot)
        logger.info("Rendered PDF report for upload %s", snapshot.submitted_at.isoformat())
        return bio.getvalue()

    def report_xlsx(self) -> bytes:
        snapshot = self.latest()
        bio = io.BytesIO()
        write_report_xlsx(bio, snapshot)
        logger.info("Rendered XLSX report for upload %s", snapshot.submitted_at.isoformat())
        return bio.getvalue()
