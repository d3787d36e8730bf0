"""
Sales and profit reports over finalized bills.

Profit on a line is the gap between the discount the distributor received
when buying and the discount it gave when selling:

    profit = mrp * quantity * (purchase_discount - discount_value) / 100

Daily series cover the 30 days ending `today` (inclusive), oldest first.
"""
import math
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from pharmadist.core.clock import parse_iso, utc_now
from pharmadist.schemas.billing import CartItem, FinalizedBill

CHART_DAYS = 30
TOP_N = 10


def line_profit(item: CartItem) -> float:
    margin = (item.purchase_discount or 0) - (item.discount_value or 0)
    return item.mrp * item.quantity * margin / 100


def _bill_day(bill: FinalizedBill) -> Optional[date]:
    try:
        return parse_iso(bill.date).date()
    except ValueError:
        return None


def _chart_days(today: date) -> List[date]:
    return [today - timedelta(days=offset) for offset in range(CHART_DAYS - 1, -1, -1)]


def _label(day: date) -> str:
    return f"{day.strftime('%b')} {day.day}"


def _top(totals: Dict[str, dict], n: int = TOP_N) -> List[dict]:
    ranked = sorted(totals.values(), key=lambda t: t["value"], reverse=True)
    return [{"name": t["name"], "value": t["value"]} for t in ranked[:n]]


def profit_report(bills: Iterable[FinalizedBill], today: Optional[date] = None) -> dict:
    """Total profit and sales, margin %, top products/stores and a daily series."""
    today = today or utc_now().date()
    total_profit = 0.0
    total_sales = 0.0
    products: Dict[str, dict] = {}
    stores: Dict[str, dict] = {}
    daily: Dict[date, float] = {}

    for bill in bills:
        total_sales += bill.grand_total
        bill_profit = 0.0
        for item in bill.items:
            profit = line_profit(item)
            bill_profit += profit
            entry = products.setdefault(item.id, {"name": item.name, "value": 0.0})
            entry["value"] += profit

        total_profit += bill_profit
        entry = stores.setdefault(bill.store_id, {"name": bill.store_name, "value": 0.0})
        entry["value"] += bill_profit

        day = _bill_day(bill)
        if day is not None:
            daily[day] = daily.get(day, 0.0) + bill_profit

    days = _chart_days(today)
    return {
        "total_profit": total_profit,
        "total_sales": total_sales,
        "profit_margin": (total_profit / total_sales) * 100 if total_sales > 0 else 0,
        "top_products": _top(products),
        "top_stores": _top(stores),
        "chart": {
            "labels": [_label(d) for d in days],
            "data": [daily.get(d, 0.0) for d in days],
        },
    }


def sales_highlights(bills: Iterable[FinalizedBill]) -> dict:
    """Best-selling product by quantity and best store by revenue."""
    quantities: Dict[str, dict] = {}
    revenues: Dict[str, dict] = {}
    for bill in bills:
        for item in bill.items:
            entry = quantities.setdefault(item.id, {"name": item.name, "quantity": 0.0})
            entry["quantity"] += item.quantity
        entry = revenues.setdefault(bill.store_id, {"name": bill.store_name, "total": 0.0})
        entry["total"] += bill.grand_total

    top_product = max(quantities.values(), key=lambda p: p["quantity"], default=None)
    if top_product is not None and top_product["quantity"] <= 0:
        top_product = None
    top_store = max(revenues.values(), key=lambda s: s["total"], default=None)
    if top_store is not None and top_store["total"] <= 0:
        top_store = None
    return {"top_product": top_product, "top_store": top_store}


def sales_chart(bills: Iterable[FinalizedBill], today: Optional[date] = None) -> dict:
    """Grand totals per day for the last 30 days."""
    today = today or utc_now().date()
    days = _chart_days(today)
    index = {d: i for i, d in enumerate(days)}
    buckets: List[List[float]] = [[] for _ in days]
    for bill in bills:
        day = _bill_day(bill)
        if day in index:
            buckets[index[day]].append(bill.grand_total)
    return {
        "labels": [_label(d) for d in days],
        "data": [math.fsum(b) for b in buckets],
    }
