"""Profit report, highlights and the daily sales chart."""
from datetime import date

import pytest

from pharmadist.schemas.billing import CartItem, FinalizedBill
from pharmadist.services.report_service import CHART_DAYS, line_profit, profit_report, sales_chart, sales_highlights

TODAY = date(2026, 1, 15)


def _bill(bill_no, store_id, store_name, day, items, grand_total):
    return FinalizedBill(
        bill_no=bill_no,
        store_id=store_id,
        store_name=store_name,
        date=day,
        items=items,
        grand_total=grand_total,
    )


def _line(medicine_id, name, quantity, mrp=100, bought=15, sold=5):
    return CartItem(
        id=medicine_id,
        name=name,
        quantity=quantity,
        mrp=mrp,
        purchase_discount=bought,
        discount_value=sold,
    )


@pytest.fixture
def bills():
    return [
        _bill(1, "s1", "City Pharmacy", "2026-01-15T10:00:00+00:00", [_line("m1", "Panadol Tab", 10)], 950),
        _bill(2, "s2", "Shifa Medicos", "2026-01-14T18:30:00Z", [_line("m2", "Brufen Syp", 4, mrp=50)], 190),
        _bill(3, "s1", "City Pharmacy", "2025-11-01T09:00:00+00:00", [_line("m1", "Panadol Tab", 1)], 95),
    ]


def test_line_profit_is_discount_gap():
    assert line_profit(_line("m1", "Panadol Tab", 10)) == pytest.approx(100)
    assert line_profit(_line("m1", "Panadol Tab", 10, bought=None, sold=None)) == 0


def test_profit_report_totals(bills):
    report = profit_report(bills, today=TODAY)
    assert report["total_profit"] == pytest.approx(100 + 20 + 10)
    assert report["total_sales"] == pytest.approx(1235)
    assert report["profit_margin"] == pytest.approx(130 / 1235 * 100)
    assert report["top_products"][0] == {"name": "Panadol Tab", "value": pytest.approx(110)}
    assert [s["name"] for s in report["top_stores"]] == ["City Pharmacy", "Shifa Medicos"]


def test_profit_chart_covers_last_thirty_days(bills):
    chart = profit_report(bills, today=TODAY)["chart"]
    assert len(chart["labels"]) == CHART_DAYS
    assert chart["labels"][0] == "Dec 17"
    assert chart["labels"][-1] == "Jan 15"
    assert chart["data"][-1] == pytest.approx(100)
    assert chart["data"][-2] == pytest.approx(20)
    # The November bill counts in totals only
    assert sum(chart["data"]) == pytest.approx(120)


def test_empty_report():
    report = profit_report([], today=TODAY)
    assert report["profit_margin"] == 0
    assert report["top_products"] == []
    assert sales_highlights([]) == {"top_product": None, "top_store": None}


def test_highlights(bills):
    highlights = sales_highlights(bills)
    assert highlights["top_product"] == {"name": "Panadol Tab", "quantity": 11}
    assert highlights["top_store"] == {"name": "City Pharmacy", "total": 1045}


def test_sales_chart_sums_grand_totals(bills):
    chart = sales_chart(bills, today=TODAY)
    assert chart["data"][-1] == 950
    assert chart["data"][-2] == 190
    assert sum(chart["data"]) == 1140
