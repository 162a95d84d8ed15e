"""Order status dashboard backend.

Categorizes order-line exports (CSV/XLSX), computes profit totals and keeps
the latest upload for lookups and reports. Run the API standalone via Uvicorn:

    python -m uvicorn order_dashboard.api_app:app --host 127.0.0.1 --port 5000
"""
