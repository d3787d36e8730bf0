"""Purchases: the open purchase entry and posted purchases."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from pharmadist.api.deps import domain_errors, get_account
from pharmadist.core.exceptions import BusinessError
from pharmadist.schemas.purchase import FinalizedPurchase, PurchaseRowUpdate
from pharmadist.schemas.session import (
    AddLineRequest,
    BulkQuantityRequest,
    RenameMedicineRequest,
    StartPurchaseRequest,
)
from pharmadist.services.account import AccountContext

router = APIRouter()


def _session_view(account: AccountContext) -> dict:
    session = account.purchasing
    state = session.state
    return {
        "mode": session.mode(),
        "supplier_id": state.supplier_id,
        "editing_purchase_id": state.editing_purchase_id,
        "purchase_id": session.purchase_number(),
        "rows": session.rows(),
        "grand_total": session.grand_total(),
    }


@router.get("/session")
def get_session(account: AccountContext = Depends(get_account)):
    return _session_view(account)


@router.post("/session/start")
def start_session(data: StartPurchaseRequest, account: AccountContext = Depends(get_account)):
    with domain_errors():
        account.purchasing.start(data.supplier_id)
    return _session_view(account)


@router.post("/session/edit/{purchase_id}")
def edit_purchase(purchase_id: int, account: AccountContext = Depends(get_account)):
    with domain_errors():
        account.purchasing.start_editing(purchase_id)
    return _session_view(account)


@router.post("/session/lines")
def add_line(data: AddLineRequest, account: AccountContext = Depends(get_account)):
    """Add or reset a row. Re-adding a listed medicine resets its row."""
    if not data.medicine_id and not (data.name or "").strip():
        raise BusinessError.bad_request("Provide a medicine id or a name.")
    with domain_errors():
        if data.medicine_id:
            account.purchasing.add_line(data.medicine_id)
        else:
            account.purchasing.add_new_medicine_line(data.name)
    return _session_view(account)


@router.patch("/session/lines/{medicine_id}")
def update_row(
    medicine_id: str,
    data: PurchaseRowUpdate,
    account: AccountContext = Depends(get_account),
):
    with domain_errors():
        account.purchasing.update_row(medicine_id, data)
    return _session_view(account)


@router.delete("/session/lines/{medicine_id}")
def remove_row(medicine_id: str, account: AccountContext = Depends(get_account)):
    with domain_errors():
        account.purchasing.remove_line(medicine_id)
    return _session_view(account)


@router.post("/session/bulk-quantity")
def bulk_quantity(data: BulkQuantityRequest, account: AccountContext = Depends(get_account)):
    with domain_errors():
        account.purchasing.bulk_set_quantity(data.quantity)
    return _session_view(account)


@router.post("/session/rename/{medicine_id}")
def rename_medicine(
    medicine_id: str,
    data: RenameMedicineRequest,
    account: AccountContext = Depends(get_account),
):
    with domain_errors():
        account.purchasing.rename_medicine(medicine_id, data.name)
    return _session_view(account)


@router.post("/session/post", response_model=FinalizedPurchase)
def post_purchase(account: AccountContext = Depends(get_account)):
    with domain_errors():
        return account.purchasing.post()


@router.post("/session/cancel")
def cancel_session(account: AccountContext = Depends(get_account)):
    return {"next_view": account.purchasing.cancel()}


@router.get("", response_model=List[FinalizedPurchase])
def list_purchases(
    supplier_id: Optional[str] = Query(None),
    account: AccountContext = Depends(get_account),
):
    return account.purchases.list_purchases(supplier_id)


@router.get("/{purchase_id}", response_model=FinalizedPurchase)
def get_purchase(purchase_id: int, account: AccountContext = Depends(get_account)):
    with domain_errors():
        return account.purchases.get_purchase(purchase_id)


@router.delete("/{purchase_id}")
def delete_purchase(purchase_id: int, account: AccountContext = Depends(get_account)):
    with domain_errors():
        account.purchases.delete_purchase(purchase_id)
    return {"deleted": purchase_id}
