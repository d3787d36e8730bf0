"""
Purchase entry session.

Rows are keyed by medicine id with a separate display order. Unlike the bill
cart, adding a medicine that is already listed resets its row to fresh
values. Posting hands the valid rows (quantity and rate above zero) to
PurchaseService, which also refreshes the account's pricing.

Editing a posted purchase is only possible from the purchase entry screen:
navigating anywhere else drops the edit.
"""
import logging
from typing import List, Optional

from pharmadist.core.exceptions import DuplicateNameError, NotFoundError
from pharmadist.db.store import Keys
from pharmadist.schemas.medicine import MedicineUpdate
from pharmadist.schemas.purchase import (
    FinalizedPurchase,
    PurchaseItem,
    PurchaseRowData,
    PurchaseRowUpdate,
)
from pharmadist.schemas.session import PurchaseSessionState
from pharmadist.services.base import AccountService
from pharmadist.services.calculator import purchase_grand_total, purchase_net_amount
from pharmadist.services.directory_service import DirectoryService
from pharmadist.services.inventory_service import InventoryService
from pharmadist.services.purchase_service import PurchaseService
from pharmadist.services.session_state import SessionMode, View

logger = logging.getLogger(__name__)


def _is_empty_row(row: PurchaseRowData) -> bool:
    return not row.quantity and not row.rate and not row.discount and not row.batch_no


class PurchaseSession(AccountService):

    def __init__(
        self,
        store,
        inventory: InventoryService,
        directory: DirectoryService,
        purchases: PurchaseService,
        notifier,
        **kwargs,
    ) -> None:
        super().__init__(store, notifier, **kwargs)
        self.inventory = inventory
        self.directory = directory
        self.purchases = purchases

    @property
    def state(self) -> PurchaseSessionState:
        return self._load_one(Keys.PURCHASE_SESSION, PurchaseSessionState)

    def _save(self, state: PurchaseSessionState) -> None:
        self._save_one(Keys.PURCHASE_SESSION, state)
        self.store.commit()

    @staticmethod
    def _is_open(state: PurchaseSessionState) -> bool:
        return bool(state.order) or state.supplier_id is not None

    def mode(self) -> str:
        state = self.state
        if state.editing_purchase_id is not None:
            return SessionMode.EDITING
        if self._is_open(state):
            return SessionMode.ACTIVE
        return SessionMode.IDLE

    def _require_supplier(self, state: PurchaseSessionState):
        supplier = self.directory.find_supplier(state.supplier_id)
        if supplier is None:
            raise self._reject("No supplier selected.")
        return supplier

    def rows(self) -> List[dict]:
        """Rows in display order with their medicine name and net amount."""
        state = self.state
        medicines = {m.id: m for m in self.inventory.list_medicines()}
        result = []
        for medicine_id in state.order:
            row = state.rows[medicine_id]
            medicine = medicines.get(medicine_id)
            result.append({
                "medicine_id": medicine_id,
                "medicine_name": medicine.name if medicine else "",
                **row.model_dump(),
                "net_amount": purchase_net_amount(row.quantity, row.rate, row.discount),
            })
        return result

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, supplier_id: str) -> PurchaseSessionState:
        supplier = self.directory.get_supplier(supplier_id)
        current = self.state
        if self._is_open(current):
            previous = self.directory.find_supplier(current.supplier_id)
            name = previous.name if previous else "previous session"
            self.notifier.warning(f"Discarded unfinished purchase for {name}.")

        state = PurchaseSessionState(supplier_id=supplier.id)
        self._save(state)
        self.notifier.success(f"Purchase entry started for {supplier.name}.")
        return state

    def start_editing(self, purchase_id: int) -> PurchaseSessionState:
        purchase = self.purchases.get_purchase(purchase_id)
        current = self.state
        if self._is_open(current) and current.editing_purchase_id != purchase_id:
            self.notifier.warning("Unfinished purchase discarded.")

        state = PurchaseSessionState(
            supplier_id=purchase.supplier_id,
            editing_purchase_id=purchase.purchase_id,
        )
        for item in purchase.items:
            state.rows[item.medicine_id] = PurchaseRowData(
                quantity=item.quantity,
                rate=item.rate,
                discount=item.discount,
                batch_no=item.batch_no,
            )
            if item.medicine_id not in state.order:
                state.order.append(item.medicine_id)
        self._save(state)
        self.notifier.info(f"Editing Purchase #{purchase.purchase_id}.")
        return state

    def cancel(self) -> str:
        editing = self.state.editing_purchase_id
        self._save(PurchaseSessionState())
        self.notifier.info("Purchase cancelled.")
        return View.YOUR_PURCHASES if editing is not None else View.MANAGE_SUPPLIERS

    def on_view_change(self, view: str) -> bool:
        """Drop a purchase edit when the user leaves the purchase entry screen."""
        state = self.state
        if state.editing_purchase_id is None or view == View.PURCHASE_ENTRY:
            return False
        self._save(PurchaseSessionState())
        self.notifier.info(f"Stopped editing Purchase #{state.editing_purchase_id}.")
        return True

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def add_line(self, medicine_id: str) -> PurchaseRowData:
        """Add a row, or reset the existing one, priced at the last known rate."""
        state = self.state
        self._require_supplier(state)
        medicine = self.inventory.get_medicine(medicine_id)

        row = PurchaseRowData(quantity=1, rate=medicine.price or 0, discount=0, batch_no="")
        state.rows[medicine.id] = row
        if medicine.id not in state.order:
            state.order.append(medicine.id)
        self._save(state)
        return row

    def add_new_medicine_line(self, name: str) -> PurchaseRowData:
        self._require_supplier(self.state)
        medicine, _ = self.inventory.ensure_medicine(name)
        return self.add_line(medicine.id)

    def _remove(self, state: PurchaseSessionState, medicine_id: str) -> None:
        state.rows.pop(medicine_id, None)
        state.order = [mid for mid in state.order if mid != medicine_id]

    def update_row(self, medicine_id: str, changes: PurchaseRowUpdate) -> Optional[PurchaseRowData]:
        """Apply edited fields. Rows left with quantity <= 0 or no data are removed."""
        state = self.state
        current = state.rows.get(medicine_id)
        if current is None:
            raise self._reject(f"Item {medicine_id} is not in the purchase.", NotFoundError)

        fields = changes.model_fields_set
        for field in ("rate", "discount"):
            value = getattr(changes, field)
            if field in fields and value is not None and value < 0:
                raise self._reject(f"{field.capitalize()} cannot be negative.")

        update = {f: getattr(changes, f) for f in fields if getattr(changes, f) is not None}
        if "quantity" in fields and changes.quantity is None:
            update["quantity"] = 0
        row = current.model_copy(update=update)

        if ("quantity" in fields and row.quantity <= 0) or _is_empty_row(row):
            self._remove(state, medicine_id)
            self._save(state)
            return None

        state.rows[medicine_id] = row
        self._save(state)
        return row

    def set_quantity(self, medicine_id: str, quantity: float) -> Optional[PurchaseRowData]:
        return self.update_row(medicine_id, PurchaseRowUpdate(quantity=quantity))

    def remove_line(self, medicine_id: str) -> None:
        state = self.state
        if medicine_id not in state.rows:
            raise self._reject(f"Item {medicine_id} is not in the purchase.", NotFoundError)
        self._remove(state, medicine_id)
        self._save(state)

    def bulk_set_quantity(self, quantity: Optional[float]) -> int:
        """Set the same quantity on every row. Returns how many rows changed."""
        if quantity is None or quantity <= 0:
            raise self._reject("Please enter a valid quantity.")
        state = self.state
        for medicine_id in state.order:
            state.rows[medicine_id] = state.rows[medicine_id].model_copy(update={"quantity": quantity})
        self._save(state)

        shown = int(quantity) if float(quantity).is_integer() else quantity
        self.notifier.info(f"Quantity set to {shown} for all {len(state.order)} items.")
        return len(state.order)

    def rename_medicine(self, medicine_id: str, new_name: str) -> None:
        """Rename a listed medicine in the shared catalog."""
        medicine = self.inventory.get_medicine(medicine_id)
        name = (new_name or "").strip()
        if not name:
            raise self._reject("Medicine name cannot be empty.")
        if name == medicine.name:
            return
        clash = self.inventory.catalog.find_by_name(name)
        if clash and clash.id != medicine_id:
            raise self._reject(f'Medicine name "{name}" already exists.', DuplicateNameError)
        self.inventory.update_medicine(medicine_id, MedicineUpdate(name=name))
        self.notifier.success(f'Renamed to "{name}".')

    # ------------------------------------------------------------------
    # Totals / post
    # ------------------------------------------------------------------

    def grand_total(self) -> float:
        return purchase_grand_total(self.state.rows.values())

    def purchase_number(self) -> int:
        editing = self.state.editing_purchase_id
        return editing if editing is not None else self.purchases.next_purchase_id()

    def post(self) -> FinalizedPurchase:
        state = self.state
        supplier = self._require_supplier(state)

        medicines = {m.id: m for m in self.inventory.list_medicines()}
        items = []
        for medicine_id in state.order:
            row = state.rows[medicine_id]
            medicine = medicines.get(medicine_id)
            if medicine is None or row.quantity <= 0 or row.rate <= 0:
                continue
            items.append(PurchaseItem(
                medicine_id=medicine_id,
                medicine_name=medicine.name,
                quantity=row.quantity,
                rate=row.rate,
                discount=row.discount or 0,
                batch_no=row.batch_no,
            ))
        if not items:
            raise self._reject("Purchase is empty.")

        valid_rows = [state.rows[i.medicine_id] for i in items]
        editing = state.editing_purchase_id
        purchase = self.purchases.post_purchase(
            supplier, items, purchase_grand_total(valid_rows), editing_id=editing,
        )
        self._save(PurchaseSessionState())

        verb = "updated" if editing is not None else "recorded"
        self.notifier.success(f"Purchase #{purchase.purchase_id} {verb}.")
        logger.info(
            f"[PurchaseSession] Posted #{purchase.purchase_id} for "
            f"{supplier.name} ({self.store.namespace})"
        )
        return purchase
