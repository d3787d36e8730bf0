"""Inventory: the account's medicines over the shared catalog."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from pharmadist.api.deps import domain_errors, get_account
from pharmadist.schemas.medicine import (
    EnsureMedicineRequest,
    Medicine,
    MedicineCreate,
    MedicineUpdate,
    SaleDiscountUpdate,
    StockLevel,
)
from pharmadist.services.account import AccountContext

router = APIRouter()


@router.get("", response_model=List[Medicine])
def list_medicines(
    search: Optional[str] = Query(None),
    account: AccountContext = Depends(get_account),
):
    """Medicines sorted by name, filtered by name, company or tag."""
    return account.inventory.search(search)


@router.get("/summary")
def inventory_summary(account: AccountContext = Depends(get_account)):
    return account.inventory.summary()


@router.get("/stock-levels", response_model=List[StockLevel])
def stock_levels(
    search: Optional[str] = Query(None),
    account: AccountContext = Depends(get_account),
):
    return account.inventory.stock_levels(
        account.bills.all_bills(), account.purchases.all_purchases(), search,
    )


@router.post("", response_model=Medicine, status_code=status.HTTP_201_CREATED)
def add_medicine(data: MedicineCreate, account: AccountContext = Depends(get_account)):
    with domain_errors():
        return account.inventory.add_medicine(data)


@router.post("/ensure")
def ensure_medicine(data: EnsureMedicineRequest, account: AccountContext = Depends(get_account)):
    """Find by name or create with no pricing."""
    with domain_errors():
        medicine, created = account.inventory.ensure_medicine(data.name)
    return {"medicine": medicine, "created": created}


@router.get("/{medicine_id}", response_model=Medicine)
def get_medicine(medicine_id: str, account: AccountContext = Depends(get_account)):
    with domain_errors():
        return account.inventory.get_medicine(medicine_id)


@router.patch("/{medicine_id}", response_model=Medicine)
def update_medicine(
    medicine_id: str,
    data: MedicineUpdate,
    account: AccountContext = Depends(get_account),
):
    with domain_errors():
        return account.inventory.update_medicine(medicine_id, data)


@router.put("/{medicine_id}/sale-discount", response_model=Medicine)
def set_sale_discount(
    medicine_id: str,
    data: SaleDiscountUpdate,
    account: AccountContext = Depends(get_account),
):
    with domain_errors():
        return account.inventory.set_sale_discount(medicine_id, data.sale_discount)


@router.delete("/{medicine_id}")
def delete_medicine(medicine_id: str, account: AccountContext = Depends(get_account)):
    """Remove the account's pricing. The catalog entry stays shared."""
    with domain_errors():
        removed = account.inventory.delete_medicine(medicine_id)
    return {"deleted": removed}
