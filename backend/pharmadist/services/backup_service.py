"""
Full-state backup and restore for one account.

The document carries every per-account collection plus the shared catalog.
On import the catalog is merged by id (entries already present are kept as
they are) and every per-account collection is replaced wholesale.
"""
import logging
from typing import Any, Mapping

from pydantic import ValidationError as SchemaError

from pharmadist.db.store import Keys
from pharmadist.schemas.backup import BackupDocument
from pharmadist.schemas.billing import BillLayoutSettings, SalesSettings
from pharmadist.schemas.session import BillingSessionState, PurchaseSessionState
from pharmadist.services.base import AccountService
from pharmadist.services.bill_service import BillService
from pharmadist.services.directory_service import DirectoryService
from pharmadist.services.inventory_service import InventoryService
from pharmadist.services.purchase_service import PurchaseService
from pharmadist.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


class BackupService(AccountService):

    def __init__(
        self,
        store,
        inventory: InventoryService,
        directory: DirectoryService,
        bills: BillService,
        purchases: PurchaseService,
        settings_service: SettingsService,
        notifier,
        **kwargs,
    ) -> None:
        super().__init__(store, notifier, **kwargs)
        self.inventory = inventory
        self.directory = directory
        self.bills = bills
        self.purchases = purchases
        self.settings_service = settings_service

    def export_document(self) -> BackupDocument:
        return BackupDocument(
            global_medicine_definitions=self.inventory.catalog.definitions(),
            user_medicine_data=self.inventory.load_overrides(),
            medical_stores=self.directory.list_stores(),
            suppliers=self.directory.list_suppliers(),
            finalized_bills=self.bills.all_bills(),
            finalized_purchases=self.purchases.all_purchases(),
            bill_layout_settings=self.settings_service.get_bill_layout(),
            sales_settings=self.settings_service.get_sales_settings(),
            billing_session=self._load_one(Keys.BILLING_SESSION, BillingSessionState),
            purchase_session=self._load_one(Keys.PURCHASE_SESSION, PurchaseSessionState),
        )

    def import_document(self, raw: Mapping[str, Any]) -> BackupDocument:
        """Validate `raw` as a BackupDocument and make it this account's state."""
        try:
            doc = BackupDocument.model_validate(raw)
        except SchemaError as e:
            logger.warning(f"[Backup] Rejected import for {self.store.namespace}: {e.error_count()} errors")
            raise self._reject("Failed to import data. The file may be corrupted or in the wrong format.")

        added = self.inventory.catalog.merge(doc.global_medicine_definitions)
        self.inventory.save_overrides(doc.user_medicine_data)
        self._save_list(Keys.MEDICAL_STORES, doc.medical_stores)
        self._save_list(Keys.SUPPLIERS, doc.suppliers)
        self._save_list(Keys.FINALIZED_BILLS, doc.finalized_bills)
        self._save_list(Keys.FINALIZED_PURCHASES, doc.finalized_purchases)
        self._save_one(Keys.BILL_LAYOUT_SETTINGS, doc.bill_layout_settings)
        self._save_one(Keys.SALES_SETTINGS, doc.sales_settings)
        self._save_one(Keys.BILLING_SESSION, doc.billing_session)
        self._save_one(Keys.PURCHASE_SESSION, doc.purchase_session)
        # Imported overrides are already keyed by catalog id.
        self.store.delete(Keys.LEGACY_MEDICINES)
        self.store.set(Keys.MIGRATION_DONE, True)
        self.store.commit()

        logger.info(
            f"[Backup] Imported into {self.store.namespace}: {len(doc.finalized_bills)} bills, "
            f"{len(doc.finalized_purchases)} purchases, {added} new catalog entries"
        )
        self.notifier.success("Data imported successfully! The app will now use the new data.")
        return doc

    def clear_account(self) -> None:
        """Reset every per-account collection. The shared catalog is left alone."""
        self.inventory.save_overrides({})
        for key in (Keys.MEDICAL_STORES, Keys.SUPPLIERS, Keys.FINALIZED_BILLS, Keys.FINALIZED_PURCHASES):
            self.store.set(key, [])
        self._save_one(Keys.BILL_LAYOUT_SETTINGS, BillLayoutSettings())
        self._save_one(Keys.SALES_SETTINGS, SalesSettings())
        self._save_one(Keys.BILLING_SESSION, BillingSessionState())
        self._save_one(Keys.PURCHASE_SESSION, PurchaseSessionState())
        self.store.delete(Keys.LEGACY_MEDICINES)
        self.store.set(Keys.MIGRATION_DONE, True)
        self.store.commit()

        logger.info(f"[Backup] Cleared {self.store.namespace}")
        self.notifier.success("Account data has been reset.")
