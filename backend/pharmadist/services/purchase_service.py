"""
Finalized purchases.

Posting a purchase is the authoritative source of the account's current cost:
each posted line overwrites price, purchase discount and batch on the
account's override for that medicine. Re-posting an edited purchase only
refreshes medicines for which no later purchase exists, so correcting an old
record does not roll live pricing back.
"""
import logging
from typing import Iterable, List, Optional

from pharmadist.core.exceptions import NotFoundError
from pharmadist.db.store import Keys
from pharmadist.schemas.purchase import FinalizedPurchase, PurchaseItem, Supplier
from pharmadist.services.base import AccountService
from pharmadist.services.calculator import purchase_net_amount
from pharmadist.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)


class PurchaseService(AccountService):

    def __init__(self, store, inventory: InventoryService, notifier, **kwargs) -> None:
        super().__init__(store, notifier, **kwargs)
        self.inventory = inventory

    def all_purchases(self) -> List[FinalizedPurchase]:
        return self._load_list(Keys.FINALIZED_PURCHASES, FinalizedPurchase)

    def list_purchases(self, supplier_id: Optional[str] = None) -> List[FinalizedPurchase]:
        purchases = self.all_purchases()
        if supplier_id:
            purchases = [p for p in purchases if p.supplier_id == supplier_id]
        return sorted(purchases, key=lambda p: p.purchase_id, reverse=True)

    def find_purchase(self, purchase_id: int) -> Optional[FinalizedPurchase]:
        return next((p for p in self.all_purchases() if p.purchase_id == purchase_id), None)

    def get_purchase(self, purchase_id: int) -> FinalizedPurchase:
        purchase = self.find_purchase(purchase_id)
        if purchase is None:
            raise self._reject(f"Purchase #{purchase_id} not found.", NotFoundError)
        return purchase

    def next_purchase_id(self) -> int:
        return max((p.purchase_id for p in self.all_purchases()), default=0) + 1

    def post_purchase(
        self,
        supplier: Supplier,
        items: Iterable[PurchaseItem],
        grand_total: float,
        editing_id: Optional[int] = None,
    ) -> FinalizedPurchase:
        """Record a purchase and refresh pricing from its lines. Caller commits."""
        items = [
            item.model_copy(update={
                "net_amount": purchase_net_amount(item.quantity, item.rate, item.discount),
            })
            for item in items
        ]
        purchases = self.all_purchases()

        if editing_id is not None:
            original = self.get_purchase(editing_id)
            purchase = FinalizedPurchase(
                purchase_id=editing_id,
                supplier_id=supplier.id,
                supplier_name=supplier.name,
                date=original.date,
                items=items,
                grand_total=grand_total,
            )
            purchases = [purchase if p.purchase_id == editing_id else p for p in purchases]
            newer = {
                item.medicine_id
                for p in purchases if p.purchase_id > editing_id
                for item in p.items
            }
            pricing_lines = [item for item in items if item.medicine_id not in newer]
        else:
            purchase = FinalizedPurchase(
                purchase_id=self.next_purchase_id(),
                supplier_id=supplier.id,
                supplier_name=supplier.name,
                date=self.now_iso(),
                items=items,
                grand_total=grand_total,
            )
            purchases.append(purchase)
            pricing_lines = items

        self._save_list(Keys.FINALIZED_PURCHASES, purchases)
        self.inventory.apply_purchase_lines(pricing_lines)

        logger.info(
            f"[Purchases] Posted #{purchase.purchase_id} ({len(items)} lines, "
            f"{len(pricing_lines)} price updates) for {self.store.namespace}"
        )
        return purchase

    def delete_purchase(self, purchase_id: int) -> None:
        self.get_purchase(purchase_id)
        self._save_list(
            Keys.FINALIZED_PURCHASES,
            [p for p in self.all_purchases() if p.purchase_id != purchase_id],
        )
        self.store.commit()
        self.notifier.info(f"Purchase #{purchase_id} deleted.")
