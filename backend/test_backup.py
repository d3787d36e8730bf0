"""Export, import and reset of one account's data."""
import pytest

from pharmadist.core.exceptions import ValidationError
from pharmadist.core.ids import SequentialIdGenerator
from pharmadist.db.store import Keys
from pharmadist.schemas.billing import CartLineUpdate
from pharmadist.schemas.medicine import MedicineDefinition
from pharmadist.services.account import AccountContext


@pytest.fixture
def with_history(account, shop):
    account.billing.start(shop["store"].id)
    account.billing.add_line(shop["panadol"].id)
    account.billing.update_line(shop["panadol"].id, CartLineUpdate(quantity=3))
    account.billing.finalize(1)
    account.purchasing.start(shop["supplier"].id)
    account.purchasing.add_line(shop["brufen"].id)
    account.purchasing.post()
    return account


def test_export_then_import_into_another_account(db, with_history, shop, notifier):
    doc = with_history.backup.export_document()
    assert len(doc.finalized_bills) == 1
    assert len(doc.finalized_purchases) == 1

    other = AccountContext(db, "acct-2", notifier, ids=SequentialIdGenerator("other"))
    other.backup.import_document(doc.model_dump(mode="json"))

    assert other.bills.get_bill(1).store_name == "City Pharmacy"
    assert other.inventory.get_medicine(shop["panadol"].id).price == 100
    assert [s.name for s in other.directory.list_stores()] == ["City Pharmacy"]
    assert other.store.get(Keys.MIGRATION_DONE) is True
    assert "Data imported successfully! The app will now use the new data." in notifier.messages()


def test_invalid_document_changes_nothing(account, shop, notifier):
    writes = account.store.write_count
    with pytest.raises(ValidationError):
        account.backup.import_document({"finalized_bills": "not a list"})
    with pytest.raises(ValidationError):
        account.backup.import_document({"unexpected": []})

    assert account.store.write_count == writes
    assert len(account.directory.list_stores()) == 1
    assert notifier.active()[-1].message.startswith("Failed to import data.")


def test_import_keeps_existing_catalog_entries(account, shop):
    doc = account.backup.export_document().model_dump(mode="json")
    doc["global_medicine_definitions"] = [
        MedicineDefinition(id=shop["panadol"].id, name="Renamed Panadol").model_dump(),
        MedicineDefinition(id="imported-1", name="Softin Tab").model_dump(),
    ]
    account.backup.import_document(doc)

    assert account.catalog.get(shop["panadol"].id).name == "Panadol Tab"
    assert account.catalog.get("imported-1").name == "Softin Tab"


def test_import_replaces_account_collections(account, shop):
    account.backup.import_document({})
    assert account.directory.list_stores() == []
    assert account.inventory.get_medicine(shop["panadol"].id).price is None


def test_clear_account_keeps_catalog(with_history, shop, notifier):
    with_history.backup.clear_account()

    assert with_history.bills.all_bills() == []
    assert with_history.purchases.all_purchases() == []
    assert with_history.directory.list_suppliers() == []
    assert with_history.inventory.get_medicine(shop["panadol"].id).price is None
    assert len(with_history.catalog.definitions()) == 2
    assert "Account data has been reset." in notifier.messages()


def test_import_repairs_purchase_session_order(account, shop):
    doc = account.backup.export_document().model_dump(mode="json")
    doc["purchase_session"] = {
        "supplier_id": shop["supplier"].id,
        "rows": {},
        "order": [shop["panadol"].id],
    }
    account.backup.import_document(doc)

    assert account.purchasing.state.order == []
    assert account.purchasing.rows() == []


def test_duplicate_record_numbers_are_rejected(with_history, shop, notifier):
    doc = with_history.backup.export_document().model_dump(mode="json")
    writes = with_history.store.write_count

    bills = dict(doc, finalized_bills=doc["finalized_bills"] * 2)
    with pytest.raises(ValidationError):
        with_history.backup.import_document(bills)
    purchases = dict(doc, finalized_purchases=doc["finalized_purchases"] * 2)
    with pytest.raises(ValidationError):
        with_history.backup.import_document(purchases)

    assert with_history.store.write_count == writes
    assert len(with_history.bills.all_bills()) == 1
    assert notifier.active()[-1].message.startswith("Failed to import data.")
