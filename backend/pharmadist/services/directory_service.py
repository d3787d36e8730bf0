"""Medical stores (bill counterparties) and suppliers (purchase counterparties)."""
import logging
from typing import List, Optional

from pharmadist.core.exceptions import DuplicateNameError, NotFoundError
from pharmadist.core.ids import IdGenerator, UUIDGenerator
from pharmadist.db.store import Keys
from pharmadist.schemas.billing import MedicalStore, StoreCreate, StoreUpdate
from pharmadist.schemas.purchase import Supplier, SupplierCreate, SupplierUpdate
from pharmadist.services.base import AccountService

logger = logging.getLogger(__name__)


def _name_key(name: str) -> str:
    return (name or "").strip().lower()


class DirectoryService(AccountService):

    def __init__(self, store, notifier, ids: Optional[IdGenerator] = None, **kwargs) -> None:
        super().__init__(store, notifier, **kwargs)
        self.ids = ids or UUIDGenerator()

    # ------------------------------------------------------------------
    # Stores
    # ------------------------------------------------------------------

    def list_stores(self) -> List[MedicalStore]:
        return self._load_list(Keys.MEDICAL_STORES, MedicalStore)

    def _save_stores(self, stores: List[MedicalStore]) -> None:
        self._save_list(Keys.MEDICAL_STORES, stores)

    def find_store(self, store_id: Optional[str]) -> Optional[MedicalStore]:
        if not store_id:
            return None
        return next((s for s in self.list_stores() if s.id == store_id), None)

    def get_store(self, store_id: str) -> MedicalStore:
        store = self.find_store(store_id)
        if store is None:
            raise self._reject("Store not found.", NotFoundError)
        return store

    def _check_store_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        clean = (name or "").strip()
        if not clean:
            raise self._reject("Store name cannot be empty.")
        taken = any(
            s.id != exclude_id and _name_key(s.name) == _name_key(clean)
            for s in self.list_stores()
        )
        if taken:
            raise self._reject(f'A store named "{clean}" already exists.', DuplicateNameError)
        return clean

    def add_store(self, data: StoreCreate) -> MedicalStore:
        name = self._check_store_name(data.name)
        store = MedicalStore(id=self.ids.new_id(), name=name, address=data.address.strip())
        self._save_stores(self.list_stores() + [store])
        self.store.commit()
        self.notifier.success("Store added successfully!")
        return store

    def update_store(self, store_id: str, data: StoreUpdate) -> MedicalStore:
        current = self.get_store(store_id)
        changes = {}
        if data.name is not None:
            changes["name"] = self._check_store_name(data.name, exclude_id=store_id)
        if data.address is not None:
            changes["address"] = data.address.strip()
        updated = current.model_copy(update=changes)
        self._save_stores([updated if s.id == store_id else s for s in self.list_stores()])
        self.store.commit()
        self.notifier.success("Store updated successfully!")
        return updated

    def delete_store(self, store_id: str) -> None:
        store = self.get_store(store_id)
        self._save_stores([s for s in self.list_stores() if s.id != store_id])
        self.store.commit()
        self.notifier.info(f'"{store.name}" was deleted.')

    # ------------------------------------------------------------------
    # Suppliers
    # ------------------------------------------------------------------

    def list_suppliers(self) -> List[Supplier]:
        return self._load_list(Keys.SUPPLIERS, Supplier)

    def _save_suppliers(self, suppliers: List[Supplier]) -> None:
        self._save_list(Keys.SUPPLIERS, suppliers)

    def find_supplier(self, supplier_id: Optional[str]) -> Optional[Supplier]:
        if not supplier_id:
            return None
        return next((s for s in self.list_suppliers() if s.id == supplier_id), None)

    def get_supplier(self, supplier_id: str) -> Supplier:
        supplier = self.find_supplier(supplier_id)
        if supplier is None:
            raise self._reject("Supplier not found.", NotFoundError)
        return supplier

    def _check_supplier_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        clean = (name or "").strip()
        if not clean:
            raise self._reject("Supplier name cannot be empty.")
        taken = any(
            s.id != exclude_id and _name_key(s.name) == _name_key(clean)
            for s in self.list_suppliers()
        )
        if taken:
            raise self._reject(f'A supplier named "{clean}" already exists.', DuplicateNameError)
        return clean

    def add_supplier(self, data: SupplierCreate) -> Supplier:
        name = self._check_supplier_name(data.name)
        supplier = Supplier(
            id=self.ids.new_id(),
            name=name,
            address=data.address.strip(),
            contact_person=data.contact_person,
            phone=data.phone,
        )
        self._save_suppliers(self.list_suppliers() + [supplier])
        self.store.commit()
        self.notifier.success("Supplier added!")
        return supplier

    def update_supplier(self, supplier_id: str, data: SupplierUpdate) -> Supplier:
        current = self.get_supplier(supplier_id)
        changes = data.model_dump(exclude_unset=True)
        if "name" in changes:
            changes["name"] = self._check_supplier_name(changes["name"] or "", exclude_id=supplier_id)
        if "address" in changes:
            changes["address"] = (changes["address"] or "").strip()
        updated = current.model_copy(update=changes)
        self._save_suppliers([updated if s.id == supplier_id else s for s in self.list_suppliers()])
        self.store.commit()
        self.notifier.success("Supplier updated!")
        return updated

    def delete_supplier(self, supplier_id: str) -> None:
        supplier = self.get_supplier(supplier_id)
        self._save_suppliers([s for s in self.list_suppliers() if s.id != supplier_id])
        self.store.commit()
        self.notifier.info(f'"{supplier.name}" was deleted.')
