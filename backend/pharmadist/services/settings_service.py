"""Bill layout and sales screen settings."""
from pharmadist.db.store import Keys
from pharmadist.schemas.billing import (
    BillLayoutSettings,
    BillLayoutSettingsUpdate,
    SalesSettings,
    SalesSettingsUpdate,
)
from pharmadist.services.base import AccountService


class SettingsService(AccountService):

    def get_bill_layout(self) -> BillLayoutSettings:
        return self._load_one(Keys.BILL_LAYOUT_SETTINGS, BillLayoutSettings)

    def update_bill_layout(self, data: BillLayoutSettingsUpdate) -> BillLayoutSettings:
        updated = self.get_bill_layout().model_copy(update=data.model_dump(exclude_none=True))
        self._save_one(Keys.BILL_LAYOUT_SETTINGS, updated)
        self.store.commit()
        self.notifier.success("Bill layout settings updated.")
        return updated

    def get_sales_settings(self) -> SalesSettings:
        return self._load_one(Keys.SALES_SETTINGS, SalesSettings)

    def update_sales_settings(self, data: SalesSettingsUpdate) -> SalesSettings:
        updated = self.get_sales_settings().model_copy(update=data.model_dump(exclude_none=True))
        self._save_one(Keys.SALES_SETTINGS, updated)
        self.store.commit()
        self.notifier.success("Sales settings updated.")
        return updated
