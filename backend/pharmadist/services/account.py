"""Wires every account-scoped service over one DB session."""
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from pharmadist.core.clock import utc_now_iso
from pharmadist.core.ids import IdGenerator, UUIDGenerator
from pharmadist.core.notifications import NotificationCenter
from pharmadist.db.store import GLOBAL_NAMESPACE, KeyValueStore, account_namespace
from pharmadist.services.backup_service import BackupService
from pharmadist.services.bill_service import BillService
from pharmadist.services.billing_session import BillingSession
from pharmadist.services.directory_service import DirectoryService
from pharmadist.services.inventory_service import InventoryService
from pharmadist.services.medicine_resolver import MedicineCatalog
from pharmadist.services.migration import bootstrap_account
from pharmadist.services.purchase_service import PurchaseService
from pharmadist.services.purchase_session import PurchaseSession
from pharmadist.services.settings_service import SettingsService


class AccountContext:
    def __init__(
        self,
        db: Session,
        account_id: str,
        notifier: Optional[NotificationCenter] = None,
        ids: Optional[IdGenerator] = None,
        now_iso: Callable[[], str] = utc_now_iso,
        auto_cancel_bill_edit: Optional[bool] = None,
    ) -> None:
        self.account_id = account_id
        self.notifier = notifier or NotificationCenter()
        self.ids = ids or UUIDGenerator()

        self.global_store = KeyValueStore(db, GLOBAL_NAMESPACE)
        self.store = KeyValueStore(db, account_namespace(account_id))
        self.catalog = MedicineCatalog(self.global_store, self.ids)

        common = {"now_iso": now_iso}
        self.inventory = InventoryService(self.store, self.catalog, self.notifier, **common)
        self.directory = DirectoryService(self.store, self.notifier, ids=self.ids, **common)
        self.bills = BillService(self.store, self.notifier, **common)
        self.purchases = PurchaseService(self.store, self.inventory, self.notifier, **common)
        self.settings = SettingsService(self.store, self.notifier, **common)
        self.billing = BillingSession(
            self.store, self.inventory, self.directory, self.bills, self.notifier,
            auto_cancel_edit=auto_cancel_bill_edit, **common,
        )
        self.purchasing = PurchaseSession(
            self.store, self.inventory, self.directory, self.purchases, self.notifier, **common,
        )
        self.backup = BackupService(
            self.store, self.inventory, self.directory, self.bills, self.purchases,
            self.settings, self.notifier, **common,
        )

    def bootstrap(self, seed: Optional[bool] = None) -> "AccountContext":
        bootstrap_account(self.global_store, self.store, self.catalog, self.ids, seed)
        return self

    def change_view(self, view: str) -> Dict[str, bool]:
        """Tell both sessions the user navigated. Returns which edits were dropped."""
        return {
            "bill_edit_cancelled": self.billing.on_view_change(view),
            "purchase_edit_cancelled": self.purchasing.on_view_change(view),
        }
