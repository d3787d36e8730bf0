"""
Billing session (the in-progress bill).

State is persisted per account under Keys.BILLING_SESSION, so a bill being
typed survives a restart. Every operation loads the state, validates, then
writes it back and commits; a rejected operation leaves the stored state
untouched.

    IDLE --start(store)--> ACTIVE --finalize()/cancel()--> IDLE
    IDLE --start_editing(bill_no)--> EDITING --finalize()/cancel()--> IDLE

Starting a new session while one is open discards the open one with a
warning naming the store it belonged to.
"""
import logging
from typing import List, Optional

from pharmadist.core.config import settings
from pharmadist.core.exceptions import NotFoundError
from pharmadist.db.store import Keys
from pharmadist.schemas.billing import CartItem, CartLineUpdate, FinalizedBill
from pharmadist.schemas.session import BillingSessionState
from pharmadist.services.base import AccountService
from pharmadist.services.bill_service import BillService
from pharmadist.services.calculator import (
    bill_subtotal,
    cart_grand_total,
    is_valid_bill_item,
    price_cart_item,
)
from pharmadist.services.directory_service import DirectoryService
from pharmadist.services.inventory_service import InventoryService
from pharmadist.services.session_state import SessionMode, View

logger = logging.getLogger(__name__)


class BillingSession(AccountService):

    def __init__(
        self,
        store,
        inventory: InventoryService,
        directory: DirectoryService,
        bills: BillService,
        notifier,
        auto_cancel_edit: Optional[bool] = None,
        **kwargs,
    ) -> None:
        super().__init__(store, notifier, **kwargs)
        self.inventory = inventory
        self.directory = directory
        self.bills = bills
        self.auto_cancel_edit = (
            settings.AUTO_CANCEL_BILL_EDIT if auto_cancel_edit is None else auto_cancel_edit
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> BillingSessionState:
        return self._load_one(Keys.BILLING_SESSION, BillingSessionState)

    def _save(self, state: BillingSessionState) -> None:
        self._save_one(Keys.BILLING_SESSION, state)
        self.store.commit()

    @staticmethod
    def _is_open(state: BillingSessionState) -> bool:
        return bool(state.cart) or state.store_id is not None

    def mode(self) -> str:
        state = self.state
        if state.editing_bill_no is not None:
            return SessionMode.EDITING
        if self._is_open(state):
            return SessionMode.ACTIVE
        return SessionMode.IDLE

    def _discard_open(self, state: BillingSessionState) -> None:
        if not self._is_open(state):
            return
        previous = self.directory.find_store(state.store_id)
        name = previous.name if previous else "previous session"
        self.notifier.warning(f"Discarded unfinished bill for {name}.")
        logger.info(f"[Billing] Discarded open bill ({len(state.cart)} lines) for {self.store.namespace}")

    def _require_store(self, state: BillingSessionState, message: str):
        store = self.directory.find_store(state.store_id)
        if store is None:
            raise self._reject(message)
        return store

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, store_id: str) -> BillingSessionState:
        store = self.directory.get_store(store_id)
        self._discard_open(self.state)

        state = BillingSessionState(store_id=store.id)
        self._save(state)
        self.notifier.success(f"Billing started for {store.name}.")
        return state

    def start_editing(self, bill_no: int) -> BillingSessionState:
        """Load a finalized bill back into the cart."""
        bill = self.bills.get_bill(bill_no)
        current = self.state
        if current.editing_bill_no != bill_no:
            self._discard_open(current)

        state = BillingSessionState(
            store_id=bill.store_id,
            editing_bill_no=bill.bill_no,
            cart=[item.model_copy() for item in bill.items],
        )
        self._save(state)
        self.notifier.info(f"Now editing Bill #{bill.bill_no}.")
        return state

    def cancel(self) -> str:
        """Drop the open bill. Returns the view to show next."""
        editing = self.state.editing_bill_no
        self._save(BillingSessionState())
        self.notifier.info("Bill cancelled.")
        return View.YOUR_BILLS if editing is not None else View.MANAGE_STORES

    def on_view_change(self, view: str) -> bool:
        """Leaving the bill screen while editing an old bill drops the edit."""
        state = self.state
        if not self.auto_cancel_edit or state.editing_bill_no is None or view == View.CREATE_BILL:
            return False
        self._save(BillingSessionState())
        self.notifier.info(f"Stopped editing Bill #{state.editing_bill_no}.")
        return True

    # ------------------------------------------------------------------
    # Cart lines
    # ------------------------------------------------------------------

    def add_line(self, medicine_id: str) -> CartItem:
        state = self.state
        self._require_store(state, "Select a store before adding items.")
        medicine = self.inventory.get_medicine(medicine_id)

        existing = next((i for i in state.cart if i.id == medicine.id), None)
        if existing is not None:
            self.notifier.info(f'"{medicine.name}" is already in the bill.')
            return existing

        item = CartItem(
            **medicine.model_dump(),
            quantity=1,
            discount_value=medicine.sale_discount,
            purchase_discount=medicine.discount,
            mrp=medicine.price or 0,
        )
        state.cart.append(item)
        self._save(state)
        return item

    def add_new_medicine_line(self, name: str) -> CartItem:
        """Add a line by typed name, creating the medicine when it is new."""
        self._require_store(self.state, "Select a store before adding items.")
        medicine, _ = self.inventory.ensure_medicine(name)
        return self.add_line(medicine.id)

    def _find_line(self, state: BillingSessionState, medicine_id: str) -> CartItem:
        line = next((i for i in state.cart if i.id == medicine_id), None)
        if line is None:
            raise self._reject(f"Item {medicine_id} is not in the bill.", NotFoundError)
        return line

    def update_line(self, medicine_id: str, changes: CartLineUpdate) -> Optional[CartItem]:
        """Apply edited fields to one line. A quantity of zero or less removes it."""
        state = self.state
        line = self._find_line(state, medicine_id)
        fields = changes.model_fields_set

        if "quantity" in fields and (changes.quantity is None or changes.quantity <= 0):
            self.remove_line(medicine_id)
            return None
        if "rate" in fields and changes.rate is not None and changes.rate < 0:
            raise self._reject("Rate cannot be negative.")
        if "discount_value" in fields and changes.discount_value is not None and changes.discount_value < 0:
            raise self._reject("Discount cannot be negative.")

        update = {}
        if "quantity" in fields:
            update["quantity"] = changes.quantity
        if "rate" in fields:
            update["mrp"] = changes.rate or 0
        if "discount_value" in fields:
            update["discount_value"] = changes.discount_value
        if "sales_tax_amount" in fields:
            update["sales_tax_amount"] = changes.sales_tax_amount
        if "batch_no" in fields:
            update["batch_no"] = changes.batch_no or ""

        updated = line.model_copy(update=update)
        state.cart = [updated if i.id == medicine_id else i for i in state.cart]
        self._save(state)
        return price_cart_item(updated)

    def set_quantity(self, medicine_id: str, quantity: float) -> Optional[CartItem]:
        return self.update_line(medicine_id, CartLineUpdate(quantity=quantity))

    def remove_line(self, medicine_id: str) -> None:
        state = self.state
        line = self._find_line(state, medicine_id)
        state.cart = [i for i in state.cart if i.id != medicine_id]
        self._save(state)
        self.notifier.info(f'"{line.name}" removed from bill.')

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def priced_cart(self) -> List[CartItem]:
        return [price_cart_item(item) for item in self.state.cart]

    def grand_total(self) -> float:
        return cart_grand_total(self.state.cart)

    def suggested_bill_no(self) -> int:
        editing = self.state.editing_bill_no
        return editing if editing is not None else self.bills.suggest_bill_no()

    def totals(self) -> dict:
        cart = self.state.cart
        return {
            "subtotal": bill_subtotal(cart),
            "grand_total": cart_grand_total(cart),
            "item_count": sum(1 for i in cart if i.quantity > 0),
        }

    # ------------------------------------------------------------------
    # Finalize
    # ------------------------------------------------------------------

    def finalize(self, bill_no: Optional[int] = None) -> FinalizedBill:
        """
        Validate and record the open bill, then reset to IDLE.

        New bills take `bill_no` (or the suggested next number) and it must be
        positive and unused. An edited bill keeps its number and its original
        date.
        """
        state = self.state
        store = self._require_store(state, "Cannot finalize: No store is selected.")
        if not state.cart:
            raise self._reject("Cannot finalize: The bill is empty.")

        items = [item for item in self.priced_cart() if is_valid_bill_item(item)]
        if not items:
            raise self._reject("Bill has no valid items.")

        editing = state.editing_bill_no
        original = None
        if editing is not None:
            if bill_no is not None and bill_no != editing:
                raise self._reject(f"Bill number cannot be changed while editing Bill #{editing}.")
            number = editing
            original = self.bills.find_bill(editing)
        else:
            number = bill_no if bill_no is not None else self.bills.suggest_bill_no()
            if number <= 0:
                raise self._reject("Invalid Bill Number. It must be a positive number.")
            if self.bills.exists(number):
                raise self._reject(f"Bill #{number} already exists. Please use a different number.")

        bill = FinalizedBill(
            bill_no=number,
            store_id=store.id,
            store_name=store.name,
            store_address=store.address,
            date=original.date if original is not None else self.now_iso(),
            items=items,
            subtotal=bill_subtotal(items),
            grand_total=cart_grand_total(items),
        )
        self.bills.save_bill(bill, replace=original is not None)
        self._save(BillingSessionState())

        self.notifier.success(f"Bill #{number} {'updated' if editing is not None else 'finalized'}!")
        return bill
