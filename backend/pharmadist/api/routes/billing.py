"""Billing: the open bill, finalized bills and bill settings."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from pharmadist.api.deps import domain_errors, get_account
from pharmadist.core.exceptions import BusinessError
from pharmadist.schemas.billing import (
    BillLayoutSettings,
    BillLayoutSettingsUpdate,
    CartLineUpdate,
    FinalizedBill,
    SalesSettings,
    SalesSettingsUpdate,
)
from pharmadist.schemas.session import AddLineRequest, FinalizeBillRequest, StartBillingRequest
from pharmadist.services.account import AccountContext

router = APIRouter()


def _session_view(account: AccountContext) -> dict:
    session = account.billing
    state = session.state
    return {
        "mode": session.mode(),
        "store_id": state.store_id,
        "editing_bill_no": state.editing_bill_no,
        "suggested_bill_no": session.suggested_bill_no(),
        "cart": session.priced_cart(),
        **session.totals(),
    }


# ==============================================================================
# OPEN BILL
# ==============================================================================

@router.get("/session")
def get_session(account: AccountContext = Depends(get_account)):
    return _session_view(account)


@router.post("/session/start")
def start_session(data: StartBillingRequest, account: AccountContext = Depends(get_account)):
    with domain_errors():
        account.billing.start(data.store_id)
    return _session_view(account)


@router.post("/session/edit/{bill_no}")
def edit_bill(bill_no: int, account: AccountContext = Depends(get_account)):
    with domain_errors():
        account.billing.start_editing(bill_no)
    return _session_view(account)


@router.post("/session/lines")
def add_line(data: AddLineRequest, account: AccountContext = Depends(get_account)):
    if not data.medicine_id and not (data.name or "").strip():
        raise BusinessError.bad_request("Provide a medicine id or a name.")
    with domain_errors():
        if data.medicine_id:
            account.billing.add_line(data.medicine_id)
        else:
            account.billing.add_new_medicine_line(data.name)
    return _session_view(account)


@router.patch("/session/lines/{medicine_id}")
def update_line(
    medicine_id: str,
    data: CartLineUpdate,
    account: AccountContext = Depends(get_account),
):
    """Edit a line. Quantity 0 or less removes it."""
    with domain_errors():
        account.billing.update_line(medicine_id, data)
    return _session_view(account)


@router.delete("/session/lines/{medicine_id}")
def remove_line(medicine_id: str, account: AccountContext = Depends(get_account)):
    with domain_errors():
        account.billing.remove_line(medicine_id)
    return _session_view(account)


@router.post("/session/finalize", response_model=FinalizedBill)
def finalize_bill(data: FinalizeBillRequest, account: AccountContext = Depends(get_account)):
    with domain_errors():
        return account.billing.finalize(data.bill_no)


@router.post("/session/cancel")
def cancel_session(account: AccountContext = Depends(get_account)):
    return {"next_view": account.billing.cancel()}


# ==============================================================================
# FINALIZED BILLS
# ==============================================================================

@router.get("/bills", response_model=List[FinalizedBill])
def list_bills(
    store_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    account: AccountContext = Depends(get_account),
):
    return account.bills.list_bills(store_id, search)


@router.get("/bills/{bill_no}", response_model=FinalizedBill)
def get_bill(bill_no: int, account: AccountContext = Depends(get_account)):
    with domain_errors():
        return account.bills.get_bill(bill_no)


@router.delete("/bills/{bill_no}")
def delete_bill(bill_no: int, account: AccountContext = Depends(get_account)):
    with domain_errors():
        account.bills.delete_bill(bill_no)
    return {"deleted": bill_no}


# ==============================================================================
# SETTINGS
# ==============================================================================

@router.get("/settings/layout", response_model=BillLayoutSettings)
def get_bill_layout(account: AccountContext = Depends(get_account)):
    return account.settings.get_bill_layout()


@router.patch("/settings/layout", response_model=BillLayoutSettings)
def update_bill_layout(data: BillLayoutSettingsUpdate, account: AccountContext = Depends(get_account)):
    return account.settings.update_bill_layout(data)


@router.get("/settings/sales", response_model=SalesSettings)
def get_sales_settings(account: AccountContext = Depends(get_account)):
    return account.settings.get_sales_settings()


@router.patch("/settings/sales", response_model=SalesSettings)
def update_sales_settings(data: SalesSettingsUpdate, account: AccountContext = Depends(get_account)):
    return account.settings.update_sales_settings(data)
