"""
Report Output

Renders the latest UploadSnapshot for download:
- metric_rows / profit_rows: flat (label, value) tables shared by every format
- write_report_pdf: paginated PDF (Summary Metrics + Profit By Date)
- write_report_xlsx: workbook with the same two tables
"""
from __future__ import annotations

import io
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .engine import sorted_by_date
from .models import CategoryTag, UploadSnapshot

RUPEE = "₹"
# The built-in PDF fonts have no rupee glyph
PDF_CURRENCY = "Rs. "

EMPTY_ROW = ("-", "-")


# =============================================================================
# Formatting
# =============================================================================

def _group_indian(digits: str) -> str:
    """12345678 -> 1,23,45,678 (lakh/crore grouping)"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_inr(amount: Any, symbol: str = RUPEE) -> str:
    try:
        num = float(amount or 0)
    except (TypeError, ValueError):
        num = 0.0
    sign = "-" if num < 0 else ""
    whole, frac = f"{abs(num):.2f}".split(".")
    frac = frac.rstrip("0")
    text = _group_indian(whole) + (f".{frac}" if frac else "")
    return f"{sign}{symbol}{text}"


# =============================================================================
# Tables
# =============================================================================

def metric_items(snapshot: UploadSnapshot) -> List[Tuple[str, Any, str]]:
    """(label, raw value, kind) in report order; kind is count/money/text."""
    counts = snapshot.dataset.counts()
    t = snapshot.totals
    return [
        ("All Orders", counts[CategoryTag.ALL.value], "count"),
        ("RTO", counts[CategoryTag.RTO.value], "count"),
        ("Door Step Exchanged", counts[CategoryTag.DOOR_STEP_EXCHANGED.value], "count"),
        ("Delivered (count / discounted total)", (t.sell_in_month_products, t.delivered_supplier_discounted_price_total), "delivered"),
        ("Cancelled", counts[CategoryTag.CANCELLED.value], "count"),
        ("Pending", counts[CategoryTag.READY_TO_SHIP.value], "count"),
        ("Shipped", counts[CategoryTag.SHIPPED.value], "count"),
        ("Other", counts[CategoryTag.OTHER.value], "count"),
        ("Supplier Listed Total Price", t.total_supplier_listed_price, "money"),
        ("Supplier Discounted Total Price", t.total_supplier_discounted_price, "money"),
        ("Total Profit", t.total_profit, "money"),
        ("Profit %", f"{t.profit_percent or '0.00'}%", "text"),
    ]


def _format_item(value: Any, kind: str, symbol: str) -> str:
    if kind == "money":
        return format_inr(value, symbol)
    if kind == "delivered":
        count, total = value
        return f"{count} / {format_inr(total, symbol)}"
    return str(value)


def metric_rows(snapshot: UploadSnapshot, symbol: str = RUPEE) -> List[Tuple[str, str]]:
    return [(label, _format_item(value, kind, symbol)) for label, value, kind in metric_items(snapshot)]


def profit_rows(snapshot: UploadSnapshot, symbol: str = RUPEE) -> List[Tuple[str, str]]:
    rows = [(p.date, format_inr(p.profit, symbol)) for p in sorted_by_date(snapshot.profit_by_date)]
    return rows or [EMPTY_ROW]


# =============================================================================
# PDF
# =============================================================================

TABLE_STYLE = TableStyle([
    ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
    ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTSIZE", (0, 0), (-1, -1), 10),
    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ("TOPPADDING", (0, 0), (-1, -1), 7),
    ("BOTTOMPADDING", (0, 0), (-1, -1), 7),
    ("LEFTPADDING", (0, 0), (-1, -1), 8),
])


def write_report_pdf(
    output: io.BytesIO | Path,
    snapshot: UploadSnapshot,
    generated_at: Optional[datetime] = None,
) -> None:
    """Write the dashboard report; tables break across A4 pages with headers repeated."""
    styles = getSampleStyleSheet()
    target = output if isinstance(output, io.BytesIO) else str(output)
    doc = SimpleDocTemplate(
        target,
        pagesize=A4,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
        title="Dashboard Report",
    )
    generated_at = generated_at or datetime.now()

    story = []
    story.append(Paragraph("Dashboard Report", styles["Title"]))
    story.append(Paragraph(f"Generated: {generated_at:%Y-%m-%d %H:%M:%S}", styles["Normal"]))
    story.append(Paragraph(f"Upload: {snapshot.submitted_at:%Y-%m-%d %H:%M:%S}", styles["Normal"]))
    story.append(Spacer(1, 18))

    story.append(Paragraph("Summary Metrics", styles["Heading2"]))
    metrics = Table(
        [["Metric", "Value"]] + [list(r) for r in metric_rows(snapshot, PDF_CURRENCY)],
        colWidths=[300, 160],
        repeatRows=1,
    )
    metrics.setStyle(TABLE_STYLE)
    story.append(metrics)
    story.append(Spacer(1, 24))

    story.append(Paragraph("Profit By Date", styles["Heading2"]))
    by_date = Table(
        [["Date", "Profit"]] + [list(r) for r in profit_rows(snapshot, PDF_CURRENCY)],
        colWidths=[200, 140],
        repeatRows=1,
    )
    by_date.setStyle(TABLE_STYLE)
    story.append(by_date)

    doc.build(story)
    if isinstance(output, io.BytesIO):
        output.seek(0)


# =============================================================================
# XLSX
# =============================================================================

HEADER_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF")
PROFIT_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
LOSS_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")

THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)

CURRENCY_FORMAT = '"₹"#,##0.00'


def write_report_xlsx(output: io.BytesIO | Path, snapshot: UploadSnapshot) -> None:
    """
    Write the dashboard report as a workbook.

    Sheets:
    - Summary: metric table (money cells stay numeric)
    - Profit By Date: one row per delivered date, chronological
    """
    wb = Workbook()
    wb.remove(wb.active)

    _create_summary_sheet(wb, snapshot)
    _create_profit_sheet(wb, snapshot)

    if isinstance(output, io.BytesIO):
        wb.save(output)
        output.seek(0)
    else:
        wb.save(str(output))


def _write_headers(ws, row: int, headers: List[str]) -> None:
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center")


def _create_summary_sheet(wb: Workbook, snapshot: UploadSnapshot):
    ws = wb.create_sheet("Summary")

    ws["A1"] = "Dashboard Report"
    ws["A1"].font = Font(bold=True, size=14)
    ws["A2"] = f"Upload: {snapshot.submitted_at:%Y-%m-%d %H:%M:%S}"

    row = 4
    _write_headers(ws, row, ["Metric", "Value"])

    row += 1
    for label, value, kind in metric_items(snapshot):
        ws.cell(row=row, column=1, value=label).border = THIN_BORDER
        if kind == "delivered":
            cell = ws.cell(row=row, column=2, value=_format_item(value, kind, RUPEE))
        else:
            cell = ws.cell(row=row, column=2, value=value)
            if kind == "money":
                cell.number_format = CURRENCY_FORMAT
        cell.border = THIN_BORDER
        row += 1

    _auto_width(ws)


def _create_profit_sheet(wb: Workbook, snapshot: UploadSnapshot):
    ws = wb.create_sheet("Profit By Date")

    _write_headers(ws, 1, ["Date", "Delivered Items", "Discounted Total", "Profit"])

    row = 2
    entries = sorted_by_date(snapshot.profit_by_date)
    if not entries:
        ws.cell(row=row, column=1, value="No delivered rows with a date")
    for entry in entries:
        ws.cell(row=row, column=1, value=entry.date)
        ws.cell(row=row, column=2, value=entry.count)
        ws.cell(row=row, column=3, value=entry.discounted_total).number_format = CURRENCY_FORMAT
        profit = ws.cell(row=row, column=4, value=entry.profit)
        profit.number_format = CURRENCY_FORMAT
        profit.fill = PROFIT_FILL if entry.profit >= 0 else LOSS_FILL
        for col in range(1, 5):
            ws.cell(row=row, column=col).border = THIN_BORDER
        row += 1

    _auto_width(ws)


def _auto_width(ws):
    """Auto-adjust column widths"""
    for column in ws.columns:
        max_length = 0
        column_letter = get_column_letter(column[0].column)
        for cell in column:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[column_letter].width = min(max_length + 2, 50)
