"""Purchase entry: rows, posting and its effect on account pricing."""
import pytest

from pharmadist.core.exceptions import DuplicateNameError, ValidationError
from pharmadist.schemas.purchase import PurchaseRowUpdate
from pharmadist.services.session_state import SessionMode, View

from conftest import T0


@pytest.fixture
def purchasing(account, shop):
    account.purchasing.start(shop["supplier"].id)
    return account.purchasing


def test_add_line_uses_last_known_rate(purchasing, shop):
    row = purchasing.add_line(shop["panadol"].id)
    assert (row.quantity, row.rate, row.discount, row.batch_no) == (1, 100, 0, "")


def test_re_adding_resets_the_row(purchasing, shop):
    purchasing.add_line(shop["panadol"].id)
    purchasing.update_row(shop["panadol"].id, PurchaseRowUpdate(quantity=9, discount=3, batch_no="Z"))

    row = purchasing.add_line(shop["panadol"].id)
    assert (row.quantity, row.discount, row.batch_no) == (1, 0, "")
    assert purchasing.state.order == [shop["panadol"].id]


def test_rows_carry_name_and_net(purchasing, shop):
    purchasing.add_line(shop["panadol"].id)
    purchasing.update_row(shop["panadol"].id, PurchaseRowUpdate(quantity=5, rate=80, discount=10))
    rows = purchasing.rows()
    assert rows[0]["medicine_name"] == "Panadol Tab"
    assert rows[0]["net_amount"] == pytest.approx(360)
    assert purchasing.grand_total() == pytest.approx(360)


def test_post_records_purchase_and_updates_pricing(account, purchasing, shop, notifier):
    purchasing.add_line(shop["panadol"].id)
    purchasing.update_row(
        shop["panadol"].id, PurchaseRowUpdate(quantity=5, rate=80, discount=10, batch_no="B1")
    )
    purchase = purchasing.post()

    assert purchase.purchase_id == 1
    assert purchase.grand_total == pytest.approx(360)
    assert purchase.items[0].net_amount == pytest.approx(360)
    assert purchase.date == T0

    panadol = account.inventory.get_medicine(shop["panadol"].id)
    assert (panadol.price, panadol.discount, panadol.batch_no) == (80, 10, "B1")
    assert panadol.sale_discount == 5
    assert purchasing.mode() == SessionMode.IDLE
    assert "Purchase #1 recorded." in notifier.messages()


def test_lines_without_rate_are_not_posted(account, purchasing, shop):
    purchasing.add_line(shop["panadol"].id)
    purchasing.add_line(shop["brufen"].id)
    purchasing.update_row(shop["brufen"].id, PurchaseRowUpdate(rate=0))

    purchase = purchasing.post()
    assert [i.medicine_name for i in purchase.items] == ["Panadol Tab"]
    assert account.inventory.get_medicine(shop["brufen"].id).price == 50


def test_empty_purchase_is_rejected(account, purchasing, shop):
    purchasing.add_line(shop["brufen"].id)
    purchasing.update_row(shop["brufen"].id, PurchaseRowUpdate(rate=0))
    with pytest.raises(ValidationError, match="Purchase is empty"):
        purchasing.post()
    assert account.purchases.all_purchases() == []


def test_rows_need_a_supplier(account, shop):
    with pytest.raises(ValidationError, match="No supplier selected"):
        account.purchasing.add_line(shop["panadol"].id)


def test_zero_quantity_removes_row(purchasing, shop):
    purchasing.add_line(shop["panadol"].id)
    purchasing.add_line(shop["brufen"].id)
    assert purchasing.set_quantity(shop["panadol"].id, 0) is None
    assert purchasing.state.order == [shop["brufen"].id]


def test_negative_discount_is_rejected(purchasing, shop):
    purchasing.add_line(shop["panadol"].id)
    with pytest.raises(ValidationError):
        purchasing.update_row(shop["panadol"].id, PurchaseRowUpdate(discount=-5))


def test_bulk_quantity(purchasing, shop, notifier):
    purchasing.add_line(shop["panadol"].id)
    purchasing.add_line(shop["brufen"].id)

    assert purchasing.bulk_set_quantity(12) == 2
    assert all(r["quantity"] == 12 for r in purchasing.rows())
    assert "Quantity set to 12 for all 2 items." in notifier.messages()

    with pytest.raises(ValidationError, match="valid quantity"):
        purchasing.bulk_set_quantity(0)
    assert all(r["quantity"] == 12 for r in purchasing.rows())


def test_editing_old_purchase_does_not_roll_back_prices(account, purchasing, shop, now, notifier):
    panadol, brufen = shop["panadol"].id, shop["brufen"].id

    purchasing.add_line(panadol)
    purchasing.update_row(panadol, PurchaseRowUpdate(quantity=5, rate=80))
    purchasing.add_line(brufen)
    purchasing.update_row(brufen, PurchaseRowUpdate(quantity=5, rate=40))
    purchasing.post()

    now.iso = "2026-01-20T10:00:00+00:00"
    purchasing.start(shop["supplier"].id)
    purchasing.add_line(panadol)
    purchasing.update_row(panadol, PurchaseRowUpdate(rate=90))
    purchasing.post()

    purchasing.start_editing(1)
    assert purchasing.mode() == SessionMode.EDITING
    assert purchasing.purchase_number() == 1
    purchasing.update_row(panadol, PurchaseRowUpdate(rate=70))
    purchasing.update_row(brufen, PurchaseRowUpdate(rate=45))
    edited = purchasing.post()

    assert edited.purchase_id == 1
    assert edited.date == T0
    assert account.inventory.get_medicine(panadol).price == 90
    assert account.inventory.get_medicine(brufen).price == 45
    assert [p.purchase_id for p in account.purchases.list_purchases()] == [2, 1]
    assert "Purchase #1 updated." in notifier.messages()


def test_leaving_purchase_entry_drops_an_edit(purchasing, shop, notifier):
    purchasing.add_line(shop["panadol"].id)
    purchasing.post()
    purchasing.start_editing(1)

    assert not purchasing.on_view_change(View.PURCHASE_ENTRY)
    assert purchasing.on_view_change(View.YOUR_BILLS)
    assert purchasing.mode() == SessionMode.IDLE
    assert "Stopped editing Purchase #1." in notifier.messages()


def test_cancel_returns_next_view(purchasing, shop):
    assert purchasing.cancel() == View.MANAGE_SUPPLIERS
    purchasing.start(shop["supplier"].id)
    purchasing.add_line(shop["panadol"].id)
    purchasing.post()
    purchasing.start_editing(1)
    assert purchasing.cancel() == View.YOUR_PURCHASES


def test_starting_again_discards_open_purchase(purchasing, shop, notifier):
    purchasing.add_line(shop["panadol"].id)
    purchasing.start(shop["supplier"].id)
    assert purchasing.state.order == []
    assert "Discarded unfinished purchase for Getz Distributors." in notifier.messages()


def test_rename_medicine(account, purchasing, shop, notifier):
    purchasing.add_line(shop["brufen"].id)
    with pytest.raises(DuplicateNameError):
        purchasing.rename_medicine(shop["brufen"].id, "PANADOL TAB")
    assert notifier.active()[-1].type == "warning"

    purchasing.rename_medicine(shop["brufen"].id, "Brufen 100ml Syp")
    assert account.inventory.get_medicine(shop["brufen"].id).name == "Brufen 100ml Syp"
    assert 'Renamed to "Brufen 100ml Syp".' in notifier.messages()


def test_new_medicine_line_creates_medicine(account, purchasing):
    row = purchasing.add_new_medicine_line("Hydrillin Syp")
    assert row.rate == 0
    assert purchasing.rows()[0]["medicine_name"] == "Hydrillin Syp"


def test_negative_quantity_removes_row(purchasing, shop):
    purchasing.add_line(shop["panadol"].id)
    assert purchasing.update_row(shop["panadol"].id, PurchaseRowUpdate(quantity=-1)) is None
    assert purchasing.state.rows == {}
    assert purchasing.state.order == []


def test_rename_to_empty_name_is_rejected(account, purchasing, shop, notifier):
    purchasing.add_line(shop["brufen"].id)
    with pytest.raises(ValidationError, match="cannot be empty"):
        purchasing.rename_medicine(shop["brufen"].id, "   ")
    assert account.inventory.get_medicine(shop["brufen"].id).name == "Brufen Syp"
    assert notifier.active()[-1].type == "error"
