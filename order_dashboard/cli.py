from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .outputs import metric_rows, profit_rows, write_report_pdf, write_report_xlsx
from .service import DashboardService
from .settings import DEFAULT_SETTINGS
from .storage import InMemorySnapshotStore


def run_summarize(path: Path, pdf_out: Path | None = None, xlsx_out: Path | None = None):
    service = DashboardService(store=InMemorySnapshotStore(), settings=DEFAULT_SETTINGS)
    snapshot = service.upload(path.read_bytes(), path.name)

    for label, value in metric_rows(snapshot):
        print(f"{label:<40} {value}")
    print()
    for day, profit in profit_rows(snapshot):
        print(f"{day:<40} {profit}")

    if pdf_out:
        write_report_pdf(pdf_out, snapshot)
        print(f"Wrote: {pdf_out}")
    if xlsx_out:
        write_report_xlsx(xlsx_out, snapshot)
        print(f"Wrote: {xlsx_out}")


def run_serve(host: str, port: int):
    import uvicorn

    uvicorn.run("order_dashboard.api_app:app", host=host, port=port)


def main(argv=None):
    ap = argparse.ArgumentParser(prog="order-dashboard")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    summarize = sub.add_parser("summarize", help="categorize one export and print the metrics")
    summarize.add_argument("file", type=Path)
    summarize.add_argument("--pdf", type=Path, default=None)
    summarize.add_argument("--xlsx", type=Path, default=None)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default=DEFAULT_SETTINGS.host)
    serve.add_argument("--port", type=int, default=DEFAULT_SETTINGS.port)

    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "summarize":
        run_summarize(args.file, args.pdf, args.xlsx)
    elif args.command == "serve":
        run_serve(args.host, args.port)


if __name__ == "__main__":
    main()
