from __future__ import annotations

import os
from dataclasses import dataclass

# NOTE:
# - Every value can be overridden with an environment variable.
#
# Suggested env overrides:
#   DASHBOARD_DATA_DIR      (folder for persisted uploads)
#   DASHBOARD_UNIT_COST     (flat cost per delivered item, default 500)
#   DASHBOARD_EXCHANGE_FEE  (flat charge per door-step exchange, default 80)
#   DASHBOARD_REPORT_TZ     (zone used to date timezone-aware timestamps)
#   DASHBOARD_HOST / DASHBOARD_PORT


@dataclass(frozen=True)
class DashboardSettings:
    # Each upload is written here as one JSON snapshot file
    data_dir: str = os.environ.get("DASHBOARD_DATA_DIR", os.path.join(os.getcwd(), "dashboard_data"))

    # Profit model
    unit_cost: float = float(os.environ.get("DASHBOARD_UNIT_COST", "500"))
    exchange_fee: float = float(os.environ.get("DASHBOARD_EXCHANGE_FEE", "80"))

    # Profit-by-date bucketing for timestamps that carry an offset
    report_tz: str = os.environ.get("DASHBOARD_REPORT_TZ", "UTC")

    # API server
    host: str = os.environ.get("DASHBOARD_HOST", "127.0.0.1")
    port: int = int(os.environ.get("DASHBOARD_PORT", "5000"))


DEFAULT_SETTINGS = DashboardSettings()
