"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from order_dashboard.api_app import create_app

CSV = (
    "Sub Order No,Reason for Credit Entry,Supplier Discounted Price,Supplier Listed Price,Order Date\n"
    "SO-1,DELIVERED,₹600,₹900,2024-03-01\n"
    "SO-2,RTO_INITIATED,₹400,₹700,2024-03-01\n"
).encode("utf-8")


@pytest.fixture
def client(service) -> TestClient:
    return TestClient(create_app(service))


def _upload(client, data=CSV, filename="orders.csv"):
    return client.post("/upload", files={"file": (filename, data, "text/csv")})


def test_health(client) -> None:
    assert client.get("/health").json() == {"ok": True, "status": "running"}


def test_upload(client) -> None:
    res = _upload(client)

    assert res.status_code == 200
    body = res.json()
    assert body["counts"]["all"] == 2
    assert body["counts"]["rto"] == 1
    assert body["counts"]["delivered"] == 1
    assert body["totals"]["delivered_supplier_discounted_price_total"] == 600.0
    assert body["totals"]["total_profit"] == 100.0
    assert body["totals"]["profit_percent"] == "20.00"
    assert body["categories"]["rto"][0]["Sub Order No"] == "SO-2"
    assert body["profit_by_date"] == [
        {"date": "2024-03-01", "profit": 100.0, "count": 1, "discounted_total": 600.0}
    ]


def test_upload_without_file(client) -> None:
    res = client.post("/upload")
    assert res.status_code == 400
    assert res.json()["detail"] == "No file uploaded"


def test_upload_unsupported_type(client) -> None:
    assert _upload(client, filename="orders.txt").status_code == 400


def test_upload_without_rows(client) -> None:
    res = _upload(client, data=b"Sub Order No,Reason for Credit Entry\n")
    assert res.status_code == 400


@pytest.mark.parametrize("path", ["/summary", "/profit-graph", "/filter/SO-1", "/download-pdf", "/download-xlsx"])
def test_no_data_before_first_upload(client, path) -> None:
    res = client.get(path)
    assert res.status_code == 404
    assert res.json()["detail"] == "No data found"


def test_profit_graph(client) -> None:
    _upload(client)
    res = client.get("/profit-graph")

    assert res.status_code == 200
    assert res.json() == [{"date": "2024-03-01", "profit": 100.0, "count": 1, "discounted_total": 600.0}]


def test_filter(client) -> None:
    _upload(client)
    res = client.get("/filter/so-2")

    assert res.status_code == 200
    assert res.json() == {
        "sub_order_no": "so-2",
        "listed_price": 700.0,
        "discounted_price": 400.0,
        "profit": 100.0,
    }


def test_filter_not_found(client) -> None:
    _upload(client)
    res = client.get("/filter/SO-999")

    assert res.status_code == 404
    assert res.json()["detail"].startswith("Sub Order No not found")


def test_summary(client) -> None:
    _upload(client)
    body = client.get("/summary").json()

    assert body["counts"]["delivered"] == 1
    assert body["totals"]["sell_in_month_products"] == 1


def test_downloads(client) -> None:
    _upload(client)

    pdf = client.get("/download-pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert "dashboard-report.pdf" in pdf.headers["content-disposition"]
    assert pdf.content.startswith(b"%PDF")

    xlsx = client.get("/download-xlsx")
    assert xlsx.status_code == 200
    assert xlsx.content[:2] == b"PK"
