from __future__ import annotations

import io
import logging
from typing import Any, Dict, List, Optional, Type

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from .exceptions import (
    DashboardError,
    FileDecodeError,
    NoDataError,
    NoRowsError,
    SubOrderNotFoundError,
    UnsupportedFileTypeError,
)
from .models import UploadSnapshot
from .service import DashboardService

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_STATUS_CODES: Dict[Type[DashboardError], int] = {
    UnsupportedFileTypeError: 400,
    FileDecodeError: 400,
    NoRowsError: 400,
    NoDataError: 404,
    SubOrderNotFoundError: 404,
}


# ============================================================================
# Response Models
# ============================================================================

class ProfitPoint(BaseModel):
    date: str
    profit: float
    count: int = 0
    discounted_total: float = 0.0


class LookupResponse(BaseModel):
    sub_order_no: str
    listed_price: float
    discounted_price: float
    profit: float


class SummaryResponse(BaseModel):
    submitted_at: str
    counts: Dict[str, int]
    totals: Dict[str, Any]


# ============================================================================
# Helper Functions
# ============================================================================

def _http_error(e: DashboardError) -> HTTPException:
    return HTTPException(status_code=_STATUS_CODES.get(type(e), 500), detail=str(e))


def _summary(snapshot: UploadSnapshot) -> Dict:
    return {
        "submitted_at": snapshot.submitted_at.isoformat(),
        "counts": snapshot.dataset.counts(),
        "totals": snapshot.totals.to_dict(),
    }


def _attachment(data: bytes, media_type: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(data),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ============================================================================
# App
# ============================================================================

def create_app(service: Optional[DashboardService] = None) -> FastAPI:
    """Build the API around ``service`` (a JSON-folder backed one by default)."""
    app = FastAPI(title="Order Dashboard API", version="1.0")
    app.state.service = service or DashboardService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def svc() -> DashboardService:
        return app.state.service

    @app.get("/health")
    def health():
        """Simple health check endpoint"""
        return {"ok": True, "status": "running"}

    @app.post("/upload")
    async def upload(file: Optional[UploadFile] = File(None)):
        """Categorize an uploaded CSV/XLSX export and store it as the latest upload."""
        if file is None or not file.filename:
            raise HTTPException(status_code=400, detail="No file uploaded")

        data = await file.read()
        try:
            snapshot = svc().upload(data, file.filename)
        except DashboardError as e:
            logger.warning("Upload of %s rejected: %s", file.filename, e)
            raise _http_error(e)
        except Exception:
            logger.exception("Error processing file %s", file.filename)
            raise HTTPException(status_code=500, detail="Failed to process file")

        body = _summary(snapshot)
        body["categories"] = snapshot.dataset.to_dict()
        body["profit_by_date"] = [p.to_dict() for p in snapshot.profit_by_date]
        return body

    @app.get("/summary", response_model=SummaryResponse)
    def summary():
        """Tile counts and totals of the latest upload"""
        try:
            return _summary(svc().latest())
        except DashboardError as e:
            raise _http_error(e)

    @app.get("/profit-graph", response_model=List[ProfitPoint])
    def profit_graph():
        """Profit-by-date series of the latest upload, in first-seen order"""
        try:
            return [p.to_dict() for p in svc().latest_profit_series()]
        except DashboardError as e:
            raise _http_error(e)

    @app.get("/filter/{sub_order_no}", response_model=LookupResponse)
    def filter_sub_order(sub_order_no: str):
        """Price and profit for one sub order of the latest upload"""
        try:
            return svc().lookup(sub_order_no).to_dict()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except DashboardError as e:
            raise _http_error(e)

    @app.get("/download-pdf")
    def download_pdf():
        try:
            data = svc().report_pdf()
        except DashboardError as e:
            raise _http_error(e)
        return _attachment(data, PDF_MEDIA_TYPE, "dashboard-report.pdf")

    @app.get("/download-xlsx")
    def download_xlsx():
        try:
            data = svc().report_xlsx()
        except DashboardError as e:
            raise _http_error(e)
        return _attachment(data, XLSX_MEDIA_TYPE, "dashboard-report.xlsx")

    return app


app = create_app()
