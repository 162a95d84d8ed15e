"""Tests for classification, aggregation, profit-by-date and lookup."""

from datetime import date, datetime

import pytest
import pytz

from order_dashboard.engine import (
    categorize_rows,
    classify,
    classify_status,
    find_sub_order,
    lookup,
    parse_order_date,
    profit_by_date,
    sorted_by_date,
)
from order_dashboard.exceptions import SubOrderNotFoundError
from order_dashboard.models import OPERATIONAL_TAGS, CategoryTag, ProfitByDateEntry

STATUS = "Reason for Credit Entry"
DISCOUNTED = "Supplier Discounted Price (Incl GST and Commission)"
LISTED = "Supplier Listed Price (Incl. GST + Commission)"


class TestClassify:

    @pytest.mark.parametrize("marker", ["rto_complete", "rto_locked", "rto_initiated"])
    def test_rto_markers(self, marker) -> None:
        assert classify_status(marker) == (CategoryTag.RTO,)

    def test_rto_takes_precedence_over_generic_keywords(self) -> None:
        assert classify_status("rto_initiated after delivered") == (CategoryTag.RTO,)

    def test_status_is_lowercased_and_trimmed(self) -> None:
        assert classify({STATUS: "  RTO_Locked  "}) == (CategoryTag.RTO,)
        assert classify({STATUS: "Delivered"}) == (CategoryTag.DELIVERED,)

    def test_plain_rto_is_other(self) -> None:
        assert classify_status("rto") == (CategoryTag.OTHER,)
        assert classify_status("rto_pending") == (CategoryTag.OTHER,)

    @pytest.mark.parametrize(
        "status, tag",
        [
            ("door_step_exchanged", CategoryTag.DOOR_STEP_EXCHANGED),
            ("cancelled", CategoryTag.CANCELLED),
            ("ready_to_ship", CategoryTag.READY_TO_SHIP),
            ("shipped", CategoryTag.SHIPPED),
        ],
    )
    def test_generic_tags(self, status, tag) -> None:
        assert classify_status(status) == (tag,)

    def test_multiple_keywords_give_multiple_buckets(self) -> None:
        assert classify_status("shipped then cancelled") == (CategoryTag.CANCELLED, CategoryTag.SHIPPED)

    def test_empty_or_missing_status_is_other(self) -> None:
        assert classify({}) == (CategoryTag.OTHER,)
        assert classify({STATUS: None}) == (CategoryTag.OTHER,)
        assert classify({STATUS: ""}) == (CategoryTag.OTHER,)


class TestCategorizeRows:

    def test_totals(self, sample_rows) -> None:
        totals = categorize_rows(sample_rows).totals

        assert totals.total_supplier_listed_price == pytest.approx(3750.0)
        assert totals.total_supplier_discounted_price == pytest.approx(2850.0)
        assert totals.sell_in_month_products == 3
        assert totals.delivered_supplier_discounted_price_total == pytest.approx(2000.0)
        assert totals.total_profit == pytest.approx(500.0)
        assert totals.profit_percent == "33.33"

    def test_counts(self, sample_rows) -> None:
        counts = categorize_rows(sample_rows).counts()

        assert counts == {
            "all": 6,
            "rto": 1,
            "door_step_exchanged": 0,
            "delivered": 3,
            "cancelled": 1,
            "ready_to_ship": 0,
            "shipped": 0,
            "other": 1,
        }

    def test_partition_when_no_row_has_two_keywords(self, sample_rows) -> None:
        dataset = categorize_rows(sample_rows)

        assert len(dataset.rows(CategoryTag.ALL)) == len(sample_rows)
        assert sum(len(dataset.rows(tag)) for tag in OPERATIONAL_TAGS) == len(sample_rows)

    def test_buckets_keep_input_order(self, sample_rows) -> None:
        dataset = categorize_rows(sample_rows)

        assert dataset.rows(CategoryTag.ALL) == sample_rows
        assert [r["Sub Order No"] for r in dataset.rows(CategoryTag.DELIVERED)] == ["SO-1", "SO-3", "SO-6"]

    def test_two_row_scenario(self) -> None:
        rows = [
            {STATUS: "Delivered", DISCOUNTED: "₹600"},
            {STATUS: "RTO_Initiated", DISCOUNTED: "₹400"},
        ]
        dataset = categorize_rows(rows)

        assert len(dataset.rows(CategoryTag.ALL)) == 2
        assert len(dataset.rows(CategoryTag.RTO)) == 1
        assert len(dataset.rows(CategoryTag.DELIVERED)) == 1
        assert dataset.totals.delivered_supplier_discounted_price_total == pytest.approx(600.0)
        assert dataset.totals.total_profit == pytest.approx(100.0)

    def test_price_totals_ignore_categorization(self) -> None:
        rows = [
            {STATUS: "", LISTED: "100", DISCOUNTED: "90"},
            {STATUS: "rto_complete", LISTED: "200", DISCOUNTED: "180"},
        ]
        totals = categorize_rows(rows).totals

        assert totals.total_supplier_listed_price == pytest.approx(300.0)
        assert totals.total_supplier_discounted_price == pytest.approx(270.0)
        assert totals.sell_in_month_products == 0
        assert totals.total_profit == 0
        assert totals.profit_percent == "0.00"

    def test_door_step_exchange_charges(self) -> None:
        rows = [{STATUS: "door_step_exchanged"}, {STATUS: "DOOR_STEP_EXCHANGED"}, {STATUS: "delivered"}]
        dataset = categorize_rows(rows, exchange_fee=80.0)

        assert dataset.totals.total_door_step_exchanger == pytest.approx(160.0)
        assert len(dataset.rows(CategoryTag.DOOR_STEP_EXCHANGED)) == 2

    def test_unit_cost_is_configurable(self) -> None:
        rows = [{STATUS: "delivered", DISCOUNTED: "1000"}]
        totals = categorize_rows(rows, unit_cost=400.0).totals

        assert totals.total_profit == pytest.approx(600.0)
        assert totals.profit_percent == "150.00"

    def test_empty_input_gives_empty_buckets(self) -> None:
        dataset = categorize_rows([])

        assert all(count == 0 for count in dataset.counts().values())
        assert dataset.totals.profit_percent == "0.00"


class TestParseOrderDate:

    def test_iso_string(self) -> None:
        assert parse_order_date("2024-03-05") == date(2024, 3, 5)

    def test_naive_timestamp_keeps_its_date(self) -> None:
        assert parse_order_date("2024-03-05 23:30:00") == date(2024, 3, 5)

    def test_offset_timestamp_is_converted(self) -> None:
        # 01:00 in India is the previous evening in UTC
        assert parse_order_date("2024-03-05T01:00:00+05:30", "UTC") == date(2024, 3, 4)
        assert parse_order_date("2024-03-05T01:00:00+05:30", "Asia/Kolkata") == date(2024, 3, 5)

    def test_datetime_objects(self) -> None:
        aware = pytz.utc.localize(datetime(2024, 3, 5, 20, 0))
        assert parse_order_date(aware, "Asia/Kolkata") == date(2024, 3, 6)
        assert parse_order_date(date(2024, 1, 2)) == date(2024, 1, 2)

    def test_excel_serial_number(self) -> None:
        assert parse_order_date(45352) == date(2024, 3, 1)

    @pytest.mark.parametrize("raw", [None, "", "not a date", float("nan")])
    def test_unparseable(self, raw) -> None:
        assert parse_order_date(raw) is None


class TestProfitByDate:

    def test_groups_delivered_rows_by_date(self, sample_rows) -> None:
        entries = profit_by_date(sample_rows)

        assert entries == [
            ProfitByDateEntry(date="2024-03-01", profit=200.0, count=2, discounted_total=1200.0),
            ProfitByDateEntry(date="2024-03-02", profit=300.0, count=1, discounted_total=800.0),
        ]

    def test_only_delivered_rows_count(self) -> None:
        rows = [
            {STATUS: "cancelled", DISCOUNTED: "999", "Order Date": "2024-01-01"},
            {STATUS: "rto_complete", DISCOUNTED: "999", "Order Date": "2024-01-01"},
        ]
        assert profit_by_date(rows) == []

    def test_date_field_fallbacks(self) -> None:
        rows = [
            {STATUS: "delivered", DISCOUNTED: "700", "Order Date": "", "Created At": "2024-02-10"},
            {STATUS: "delivered", DISCOUNTED: "700", "Delivered Date": "2024-02-11"},
        ]
        assert [e.date for e in profit_by_date(rows)] == ["2024-02-10", "2024-02-11"]

    def test_rows_without_usable_date_are_skipped(self) -> None:
        rows = [
            {STATUS: "delivered", DISCOUNTED: "700"},
            {STATUS: "delivered", DISCOUNTED: "700", "Date": "garbage"},
            {STATUS: "delivered", DISCOUNTED: "700", "Date": "2024-02-10"},
        ]
        entries = profit_by_date(rows)

        assert len(entries) == 1
        assert entries[0].profit == pytest.approx(200.0)

    def test_first_occurrence_order_and_sorting(self) -> None:
        rows = [
            {STATUS: "delivered", DISCOUNTED: "500", "Date": "2024-05-03"},
            {STATUS: "delivered", DISCOUNTED: "500", "Date": "2024-05-01"},
        ]
        entries = profit_by_date(rows)

        assert [e.date for e in entries] == ["2024-05-03", "2024-05-01"]
        assert [e.date for e in sorted_by_date(entries)] == ["2024-05-01", "2024-05-03"]


class TestLookup:

    def test_lookup_by_sub_order_column(self, sample_rows) -> None:
        result = lookup(sample_rows, "  so-3 ")

        assert result.sub_order_no == "so-3"
        assert result.listed_price == pytest.approx(1000.0)
        assert result.discounted_price == pytest.approx(800.0)
        assert result.profit == pytest.approx(500.0 - 800.0)

    def test_sub_order_column_wins_over_other_cells(self) -> None:
        rows = [
            {"Sub Order No": "A", "Note": "B", DISCOUNTED: "100"},
            {"Sub Order No": "B", "Note": "", DISCOUNTED: "200"},
        ]
        assert find_sub_order(rows, "b") is rows[1]

    def test_falls_back_to_any_cell(self) -> None:
        rows = [
            {"Order Id": "X-1", DISCOUNTED: "100"},
            {"Order Id": "X-2", DISCOUNTED: "250"},
        ]
        result = lookup(rows, "x-2")

        assert result.discounted_price == pytest.approx(250.0)
        assert result.profit == pytest.approx(250.0)

    def test_numeric_cells_match(self) -> None:
        rows = [{"Sub Order No": 123456789, DISCOUNTED: 300}]
        assert lookup(rows, "123456789").discounted_price == pytest.approx(300.0)

    def test_not_found_raises(self, sample_rows) -> None:
        with pytest.raises(SubOrderNotFoundError):
            lookup(sample_rows, "does-not-exist")

    def test_blank_identifier(self, sample_rows) -> None:
        with pytest.raises(ValueError):
            find_sub_order(sample_rows, "   ")
