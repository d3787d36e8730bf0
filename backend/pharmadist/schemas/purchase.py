from pydantic import BaseModel, Field
from typing import List, Optional


class Supplier(BaseModel):
    id: str
    name: str
    address: str = ""
    contact_person: Optional[str] = None
    phone: Optional[str] = None


class SupplierCreate(BaseModel):
    name: str
    address: str = ""
    contact_person: Optional[str] = None
    phone: Optional[str] = None


class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None


class PurchaseRowData(BaseModel):
    """Editable fields of one purchase line while the purchase is open."""
    quantity: float = 0
    rate: float = 0
    discount: float = 0
    batch_no: str = ""


class PurchaseRowUpdate(BaseModel):
    quantity: Optional[float] = None
    rate: Optional[float] = None
    discount: Optional[float] = None
    batch_no: Optional[str] = None


class PurchaseItem(BaseModel):
    medicine_id: str
    medicine_name: str
    quantity: float
    rate: float
    discount: float = 0
    batch_no: str = ""
    net_amount: float = 0


class FinalizedPurchase(BaseModel):
    purchase_id: int
    supplier_id: str
    supplier_name: str
    date: str
    items: List[PurchaseItem] = Field(default_factory=list)
    grand_total: float = 0
