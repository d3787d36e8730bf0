"""Medical stores and suppliers."""
from typing import List

from fastapi import APIRouter, Depends, status

from pharmadist.api.deps import domain_errors, get_account
from pharmadist.schemas.billing import MedicalStore, StoreCreate, StoreUpdate
from pharmadist.schemas.purchase import Supplier, SupplierCreate, SupplierUpdate
from pharmadist.services.account import AccountContext

router = APIRouter()


@router.get("/stores", response_model=List[MedicalStore])
def list_stores(account: AccountContext = Depends(get_account)):
    return account.directory.list_stores()


@router.post("/stores", response_model=MedicalStore, status_code=status.HTTP_201_CREATED)
def add_store(data: StoreCreate, account: AccountContext = Depends(get_account)):
    with domain_errors():
        return account.directory.add_store(data)


@router.patch("/stores/{store_id}", response_model=MedicalStore)
def update_store(store_id: str, data: StoreUpdate, account: AccountContext = Depends(get_account)):
    with domain_errors():
        return account.directory.update_store(store_id, data)


@router.delete("/stores/{store_id}")
def delete_store(store_id: str, account: AccountContext = Depends(get_account)):
    with domain_errors():
        account.directory.delete_store(store_id)
    return {"deleted": store_id}


@router.get("/suppliers", response_model=List[Supplier])
def list_suppliers(account: AccountContext = Depends(get_account)):
    return account.directory.list_suppliers()


@router.post("/suppliers", response_model=Supplier, status_code=status.HTTP_201_CREATED)
def add_supplier(data: SupplierCreate, account: AccountContext = Depends(get_account)):
    with domain_errors():
        return account.directory.add_supplier(data)


@router.patch("/suppliers/{supplier_id}", response_model=Supplier)
def update_supplier(supplier_id: str, data: SupplierUpdate, account: AccountContext = Depends(get_account)):
    with domain_errors():
        return account.directory.update_supplier(supplier_id, data)


@router.delete("/suppliers/{supplier_id}")
def delete_supplier(supplier_id: str, account: AccountContext = Depends(get_account)):
    with domain_errors():
        account.directory.delete_supplier(supplier_id)
    return {"deleted": supplier_id}
