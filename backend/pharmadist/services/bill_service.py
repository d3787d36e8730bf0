"""Finalized bills. Used by the billing session and the bills history screen."""
import logging
from typing import List, Optional

from pharmadist.core.exceptions import NotFoundError
from pharmadist.db.store import Keys
from pharmadist.schemas.billing import FinalizedBill
from pharmadist.services.base import AccountService

logger = logging.getLogger(__name__)


class BillService(AccountService):

    def all_bills(self) -> List[FinalizedBill]:
        return self._load_list(Keys.FINALIZED_BILLS, FinalizedBill)

    def list_bills(self, store_id: Optional[str] = None, search: Optional[str] = None) -> List[FinalizedBill]:
        """Newest bill number first, optionally for one store and matching a search term."""
        bills = self.all_bills()
        if store_id:
            bills = [b for b in bills if b.store_id == store_id]
        needle = (search or "").strip().lstrip("#").lower()
        if needle:
            bills = [b for b in bills if needle in b.store_name.lower() or needle in str(b.bill_no)]
        return sorted(bills, key=lambda b: b.bill_no, reverse=True)

    def find_bill(self, bill_no: int) -> Optional[FinalizedBill]:
        return next((b for b in self.all_bills() if b.bill_no == bill_no), None)

    def get_bill(self, bill_no: int) -> FinalizedBill:
        bill = self.find_bill(bill_no)
        if bill is None:
            raise self._reject(f"Bill #{bill_no} not found.", NotFoundError)
        return bill

    def exists(self, bill_no: int) -> bool:
        return self.find_bill(bill_no) is not None

    def suggest_bill_no(self) -> int:
        return max((b.bill_no for b in self.all_bills()), default=0) + 1

    def save_bill(self, bill: FinalizedBill, replace: bool) -> None:
        """Append a new bill or replace the one with the same number. Caller commits."""
        bills = self.all_bills()
        if replace:
            bills = [bill if b.bill_no == bill.bill_no else b for b in bills]
        else:
            bills.append(bill)
        self._save_list(Keys.FINALIZED_BILLS, bills)
        logger.info(f"[Bills] {'Replaced' if replace else 'Saved'} bill #{bill.bill_no} for {self.store.namespace}")

    def delete_bill(self, bill_no: int) -> None:
        self.get_bill(bill_no)
        self._save_list(Keys.FINALIZED_BILLS, [b for b in self.all_bills() if b.bill_no != bill_no])
        self.store.commit()
        self.notifier.info(f"Bill #{bill_no} deleted.")
