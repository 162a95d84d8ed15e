"""Shared fixtures: a small marketplace export in the shape the service receives."""

import pytest

from order_dashboard.service import DashboardService
from order_dashboard.settings import DashboardSettings
from order_dashboard.storage import InMemorySnapshotStore

STATUS = "Reason for Credit Entry"
DISCOUNTED = "Supplier Discounted Price (Incl GST and Commission)"
LISTED = "Supplier Listed Price (Incl. GST + Commission)"


@pytest.fixture
def sample_rows() -> list:
    return [
        {"Sub Order No": "SO-1", STATUS: "DELIVERED", LISTED: "₹900", DISCOUNTED: "₹600", "Order Date": "2024-03-01"},
        {"Sub Order No": "SO-2", STATUS: "RTO_INITIATED", LISTED: "₹700", DISCOUNTED: "₹400", "Order Date": "2024-03-01"},
        {"Sub Order No": "SO-3", STATUS: "Delivered", LISTED: "1,000", DISCOUNTED: "800", "Order Date": "2024-03-02"},
        {"Sub Order No": "SO-4", STATUS: "CANCELLED", LISTED: "500", DISCOUNTED: "450", "Order Date": "2024-03-02"},
        {"Sub Order No": "SO-5", STATUS: "", LISTED: "", DISCOUNTED: "", "Order Date": ""},
        {"Sub Order No": "SO-6", STATUS: "delivered", LISTED: "650", DISCOUNTED: "600", "Order Date": "2024-03-01"},
    ]


@pytest.fixture
def settings(tmp_path) -> DashboardSettings:
    return DashboardSettings(data_dir=str(tmp_path / "data"), unit_cost=500.0, exchange_fee=80.0, report_tz="UTC")


@pytest.fixture
def service(settings) -> DashboardService:
    return DashboardService(store=InMemorySnapshotStore(), settings=settings)
