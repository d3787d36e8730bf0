"""
Inventory: the account's view of the shared catalog.

project() joins catalog definitions with the account's overrides. It is pure
and cheap (one dict lookup per definition) so every read recomputes it from
the latest committed state instead of caching a copy.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError as SchemaError

from pharmadist.core.exceptions import DuplicateNameError, NotFoundError, ValidationError
from pharmadist.db.store import Keys
from pharmadist.schemas.billing import FinalizedBill
from pharmadist.schemas.medicine import (
    Medicine,
    MedicineCreate,
    MedicineDefinition,
    MedicineUpdate,
    StockLevel,
    UserMedicineData,
)
from pharmadist.schemas.purchase import FinalizedPurchase, PurchaseItem
from pharmadist.services.base import AccountService
from pharmadist.services.medicine_resolver import MedicineCatalog, normalize_medicine_name

logger = logging.getLogger(__name__)

_DEFAULT_OVERRIDE = UserMedicineData()
_OVERRIDE_FIELDS = ("price", "discount", "sale_discount", "batch_no")


def project(
    definitions: Iterable[MedicineDefinition],
    overrides: Mapping[str, UserMedicineData],
) -> List[Medicine]:
    """One Medicine per definition; missing overrides fall back to defaults."""
    medicines = []
    for definition in definitions:
        data = overrides.get(definition.id) or _DEFAULT_OVERRIDE
        medicines.append(Medicine(
            id=definition.id,
            name=definition.name,
            company=definition.company,
            type=definition.type,
            tags=list(definition.tags),
            price=data.price,
            discount=data.discount,
            sale_discount=data.sale_discount,
            batch_no=data.batch_no,
            last_updated=data.last_updated,
        ))
    return medicines


class InventoryService(AccountService):
    """Medicines as seen by one account."""

    def __init__(self, store, catalog: MedicineCatalog, notifier, **kwargs) -> None:
        super().__init__(store, notifier, **kwargs)
        self.catalog = catalog

    # ------------------------------------------------------------------
    # Overrides
    # ------------------------------------------------------------------

    def load_overrides(self) -> Dict[str, UserMedicineData]:
        raw = self.store.get(Keys.USER_MEDICINE_DATA, {})
        try:
            return {mid: UserMedicineData.model_validate(data) for mid, data in raw.items()}
        except (SchemaError, AttributeError, TypeError) as e:
            logger.error(f"[Inventory] Corrupt overrides for {self.store.namespace}, using empty map: {e}")
            return {}

    def save_overrides(self, overrides: Mapping[str, UserMedicineData]) -> bool:
        return self.store.set(
            Keys.USER_MEDICINE_DATA,
            {mid: data.model_dump(mode="json") for mid, data in overrides.items()},
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_medicines(self) -> List[Medicine]:
        return project(self.catalog.definitions(), self.load_overrides())

    def sorted_medicines(self) -> List[Medicine]:
        return sorted(self.list_medicines(), key=lambda m: normalize_medicine_name(m.name))

    def get_medicine(self, medicine_id: str) -> Medicine:
        definition = self.catalog.get(medicine_id)
        if definition is None:
            raise NotFoundError(f"Medicine {medicine_id} not found.")
        return project([definition], self.load_overrides())[0]

    def search(self, term: Optional[str]) -> List[Medicine]:
        """Case-insensitive substring match on name, company and tags."""
        medicines = self.sorted_medicines()
        needle = (term or "").strip().lower()
        if not needle:
            return medicines
        return [
            m for m in medicines
            if needle in m.name.lower()
            or needle in m.company.lower()
            or any(needle in tag for tag in m.tags)
        ]

    def summary(self) -> dict:
        medicines = self.list_medicines()
        priced = sum(1 for m in medicines if m.price is not None and m.price > 0)
        return {"total": len(medicines), "priced": priced, "unpriced": len(medicines) - priced}

    def stock_levels(
        self,
        bills: Iterable[FinalizedBill],
        purchases: Iterable[FinalizedPurchase],
        term: Optional[str] = None,
    ) -> List[StockLevel]:
        """Purchased minus sold quantity per medicine, positive stock only."""
        purchased: Dict[str, float] = {}
        for purchase in purchases:
            for item in purchase.items:
                purchased[item.medicine_id] = purchased.get(item.medicine_id, 0) + item.quantity

        sold: Dict[str, float] = {}
        for bill in bills:
            for item in bill.items:
                sold[item.id] = sold.get(item.id, 0) + item.quantity

        needle = (term or "").strip().lower()
        levels = []
        for medicine in self.sorted_medicines():
            stock = purchased.get(medicine.id, 0) - sold.get(medicine.id, 0)
            if stock <= 0:
                continue
            if needle and needle not in medicine.name.lower():
                continue
            levels.append(StockLevel(id=medicine.id, name=medicine.name, stock=stock))
        return levels

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_medicine(self, data: MedicineCreate) -> Medicine:
        """Create a definition and this account's override in one step."""
        name = data.name.strip()
        if not name:
            raise self._reject("Medicine name cannot be empty.")
        if self.catalog.find_by_name(name):
            raise self._reject(f'Medicine "{name}" already exists.', DuplicateNameError)

        definition = self.catalog.create(name, data.company, data.type, data.tags)
        overrides = self.load_overrides()
        overrides[definition.id] = UserMedicineData(
            price=data.price,
            discount=data.discount,
            sale_discount=data.sale_discount,
            batch_no=data.batch_no,
            last_updated=self.now_iso(),
        )
        self.save_overrides(overrides)
        self.store.commit()

        self.notifier.success(f'Medicine "{name}" added.')
        return self.get_medicine(definition.id)

    def ensure_medicine(self, name: str) -> Tuple[Medicine, bool]:
        """Find a medicine by name or add it with no pricing. Returns (medicine, created)."""
        clean = (name or "").strip()
        if not clean:
            raise self._reject("Medicine name cannot be empty.")

        existing = self.catalog.find_by_name(clean)
        if existing:
            self.notifier.info(f'"{clean}" already exists. Using existing item.')
            return self.get_medicine(existing.id), False

        definition, _ = self.catalog.resolve(clean)
        overrides = self.load_overrides()
        overrides[definition.id] = UserMedicineData(last_updated=self.now_iso())
        self.save_overrides(overrides)
        self.store.commit()

        self.notifier.success(f'Added "{definition.name}" to inventory.')
        return self.get_medicine(definition.id), True

    def update_medicine(self, medicine_id: str, changes: MedicineUpdate) -> Medicine:
        """Shared fields go to the catalog, pricing fields to this account's override."""
        if self.catalog.get(medicine_id) is None:
            raise self._reject(f"Medicine {medicine_id} not found.", NotFoundError)

        fields = changes.model_fields_set
        if "name" in fields and changes.name is not None:
            name = changes.name.strip()
            if not name:
                raise self._reject("Medicine name cannot be empty.")
            clash = self.catalog.find_by_name(name)
            if clash and clash.id != medicine_id:
                raise self._reject(f'Medicine "{name}" already exists.', DuplicateNameError)

        definition = self.catalog.update(
            medicine_id,
            name=changes.name if "name" in fields else None,
            company=changes.company if "company" in fields else None,
            type=changes.type if "type" in fields else None,
            tags=changes.tags if "tags" in fields else None,
        )

        overrides = self.load_overrides()
        current = overrides.get(medicine_id) or UserMedicineData()
        update = {f: getattr(changes, f) for f in _OVERRIDE_FIELDS if f in fields}
        if update.get("batch_no") is None:
            update.pop("batch_no", None)
        update["last_updated"] = self.now_iso()
        overrides[medicine_id] = current.model_copy(update=update)
        self.save_overrides(overrides)
        self.store.commit()

        self.notifier.success(f'Medicine "{definition.name}" updated.')
        return self.get_medicine(medicine_id)

    def set_sale_discount(self, medicine_id: str, sale_discount: Optional[float]) -> Medicine:
        if sale_discount is not None and sale_discount < 0:
            raise self._reject("Sale discount cannot be negative.")
        medicine = self.get_medicine(medicine_id)

        overrides = self.load_overrides()
        current = overrides.get(medicine_id) or UserMedicineData()
        overrides[medicine_id] = current.model_copy(update={
            "sale_discount": sale_discount,
            "last_updated": self.now_iso(),
        })
        self.save_overrides(overrides)
        self.store.commit()

        self.notifier.success(f'Updated sale discount for "{medicine.name}".')
        return self.get_medicine(medicine_id)

    def delete_medicine(self, medicine_id: str) -> bool:
        """Drop this account's override. The shared definition stays in the catalog."""
        if self.catalog.get(medicine_id) is None:
            raise self._reject(f"Medicine {medicine_id} not found.", NotFoundError)

        overrides = self.load_overrides()
        removed = overrides.pop(medicine_id, None) is not None
        if removed:
            self.save_overrides(overrides)
            self.store.commit()
        self.notifier.info("Medicine deleted.")
        return removed

    def apply_purchase_lines(self, items: Iterable[PurchaseItem]) -> None:
        """Overwrite price, discount and batch from posted purchase lines. Caller commits."""
        overrides = self.load_overrides()
        stamp = self.now_iso()
        for item in items:
            current = overrides.get(item.medicine_id) or UserMedicineData()
            overrides[item.medicine_id] = current.model_copy(update={
                "price": item.rate,
                "discount": item.discount,
                "batch_no": item.batch_no,
                "last_updated": stamp,
            })
        self.save_overrides(overrides)
