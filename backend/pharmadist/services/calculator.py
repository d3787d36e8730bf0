"""
Line and cart money calculations.

Nothing here rounds. Amounts keep full float precision through aggregation and
are rounded to two decimals only by format_money at display or export time.
"""
import math
from typing import Iterable, Optional

from pharmadist.schemas.billing import CartItem
from pharmadist.schemas.purchase import PurchaseRowData


def calculate_line(
    quantity: Optional[float],
    rate: Optional[float],
    discount_percent: Optional[float] = None,
    tax_amount: Optional[float] = None,
    default_discount: Optional[float] = None,
) -> dict:
    """Gross, discount and net amounts for one sale line.

    Args:
        quantity: Units sold.
        rate: Unit rate.
        discount_percent: Line discount %. None falls back to default_discount, then 0.
        tax_amount: Flat sales tax added to the line. None counts as 0.
        default_discount: The medicine's default sale discount %.

    Returns:
        dict with gross_amount, discount_percent, discount_amount, tax_amount, net_amount.
        A line missing its quantity or rate is all zeros, tax included.
    """
    if discount_percent is None:
        discount_percent = default_discount if default_discount is not None else 0
    if not quantity or not rate:
        return {
            "gross_amount": 0,
            "discount_percent": discount_percent,
            "discount_amount": 0,
            "tax_amount": 0,
            "net_amount": 0,
        }
    tax = tax_amount or 0
    gross = quantity * rate
    discount_amount = gross * (discount_percent / 100)
    net = gross - discount_amount + tax

    return {
        "gross_amount": gross,
        "discount_percent": discount_percent,
        "discount_amount": discount_amount,
        "tax_amount": tax,
        "net_amount": net,
    }


def purchase_net_amount(quantity: Optional[float], rate: Optional[float], discount: Optional[float]) -> float:
    """Purchase line net: gross less discount, no tax term."""
    base = (quantity or 0) * (rate or 0)
    return base - base * ((discount or 0) / 100)


def price_cart_item(item: CartItem) -> CartItem:
    """Return a copy of `item` with calculated_discount_amount and net_amount filled in."""
    line = calculate_line(
        item.quantity,
        item.mrp,
        discount_percent=item.discount_value,
        tax_amount=item.sales_tax_amount,
        default_discount=item.sale_discount,
    )
    return item.model_copy(update={
        "calculated_discount_amount": line["discount_amount"],
        "net_amount": line["net_amount"],
    })


def is_valid_bill_item(item: CartItem) -> bool:
    """A line counts on a finalized bill only with a positive quantity and rate."""
    return item.quantity > 0 and item.mrp > 0


def cart_grand_total(items: Iterable[CartItem]) -> float:
    return math.fsum(price_cart_item(i).net_amount for i in items if i.quantity > 0)


def bill_subtotal(items: Iterable[CartItem]) -> float:
    """Sum of mrp * quantity before discounts and tax."""
    return math.fsum(i.mrp * i.quantity for i in items if i.quantity > 0)


def purchase_grand_total(rows: Iterable[PurchaseRowData]) -> float:
    return math.fsum(
        purchase_net_amount(r.quantity, r.rate, r.discount) for r in rows if r.quantity > 0
    )


def format_money(amount: float) -> str:
    """Return amount formatted to two decimals."""
    return f"{amount:.2f}"
