"""Line and cart money calculations."""
import pytest

from pharmadist.schemas.billing import CartItem
from pharmadist.schemas.purchase import PurchaseRowData
from pharmadist.services.calculator import (
    bill_subtotal,
    calculate_line,
    cart_grand_total,
    format_money,
    is_valid_bill_item,
    price_cart_item,
    purchase_grand_total,
    purchase_net_amount,
)


def _item(**kwargs) -> CartItem:
    data = {"id": "m1", "name": "Panadol Tab"}
    data.update(kwargs)
    return CartItem(**data)


def test_line_amounts():
    """10 x 100 at 20% -> gross 1000, discount 200, net 800."""
    line = calculate_line(10, 100, 20)
    assert line["gross_amount"] == 1000
    assert line["discount_amount"] == 200
    assert line["net_amount"] == 800
    assert line["tax_amount"] == 0


def test_tax_is_added_after_discount():
    line = calculate_line(2, 50, 10, tax_amount=5)
    assert line["net_amount"] == pytest.approx(95)


def test_missing_discount_falls_back_to_default_then_zero():
    assert calculate_line(1, 100, None, default_discount=5)["net_amount"] == pytest.approx(95)
    assert calculate_line(1, 100, None)["net_amount"] == 100
    # An explicit 0 on the line beats the default
    assert calculate_line(1, 100, 0, default_discount=5)["net_amount"] == 100


def test_missing_rate_or_quantity_counts_as_zero():
    assert calculate_line(None, 100, 10)["net_amount"] == 0
    assert calculate_line(5, None, 10)["net_amount"] == 0


def test_purchase_net_has_no_tax():
    assert purchase_net_amount(10, 100, 20) == 800
    assert purchase_net_amount(3, 10, None) == 30


def test_price_cart_item_fills_calculated_fields():
    priced = price_cart_item(_item(quantity=10, mrp=100, discount_value=20))
    assert priced.calculated_discount_amount == 200
    assert priced.net_amount == 800


def test_price_cart_item_uses_sale_discount_when_line_has_none():
    priced = price_cart_item(_item(quantity=1, mrp=200, discount_value=None, sale_discount=10))
    assert priced.net_amount == pytest.approx(180)


def test_zero_quantity_line_is_absent_from_total():
    items = [
        _item(id="a", quantity=10, mrp=100, discount_value=20),
        _item(id="b", quantity=0, mrp=500, discount_value=0, sales_tax_amount=50),
    ]
    assert cart_grand_total(items) == 800
    assert price_cart_item(items[1]).net_amount == 0
    assert not is_valid_bill_item(items[1])


def test_line_without_rate_or_quantity_carries_no_tax():
    assert calculate_line(0, 100, 0, tax_amount=50)["net_amount"] == 0
    assert calculate_line(3, 0, 0, tax_amount=50)["net_amount"] == 0
    assert calculate_line(3, None, 0, tax_amount=50)["tax_amount"] == 0


def test_line_without_rate_is_not_valid():
    assert not is_valid_bill_item(_item(quantity=2, mrp=0))
    assert is_valid_bill_item(_item(quantity=2, mrp=10))


def test_bill_subtotal_is_before_discount():
    items = [
        _item(id="a", quantity=10, mrp=100, discount_value=20),
        _item(id="b", quantity=2, mrp=25, discount_value=50),
    ]
    assert bill_subtotal(items) == 1050


def test_purchase_grand_total_skips_empty_rows():
    rows = [
        PurchaseRowData(quantity=10, rate=100, discount=20),
        PurchaseRowData(quantity=0, rate=999, discount=0),
    ]
    assert purchase_grand_total(rows) == 800


def test_no_rounding_until_formatted():
    total = cart_grand_total([_item(quantity=3, mrp=0.1, discount_value=0)])
    assert total == pytest.approx(0.3)
    assert format_money(total) == "0.30"
    assert format_money(1234.5) == "1234.50"
