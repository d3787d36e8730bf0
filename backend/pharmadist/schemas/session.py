"""Persisted state of the in-progress bill and purchase."""
from pydantic import BaseModel, Field, model_validator
from typing import Dict, List, Optional

from pharmadist.schemas.billing import CartItem
from pharmadist.schemas.purchase import PurchaseRowData


class BillingSessionState(BaseModel):
    store_id: Optional[str] = None
    editing_bill_no: Optional[int] = None
    cart: List[CartItem] = Field(default_factory=list)


class PurchaseSessionState(BaseModel):
    supplier_id: Optional[str] = None
    editing_purchase_id: Optional[int] = None
    rows: Dict[str, PurchaseRowData] = Field(default_factory=dict)
    order: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _sync_order(self) -> "PurchaseSessionState":
        """Every row appears in order exactly once and order names no missing rows."""
        order = [mid for mid in dict.fromkeys(self.order) if mid in self.rows]
        order += [mid for mid in self.rows if mid not in order]
        self.order = order
        return self


class StartBillingRequest(BaseModel):
    store_id: str


class StartPurchaseRequest(BaseModel):
    supplier_id: str


class AddLineRequest(BaseModel):
    """Either an existing medicine id or a typed name to find or create."""
    medicine_id: Optional[str] = None
    name: Optional[str] = None


class FinalizeBillRequest(BaseModel):
    bill_no: Optional[int] = None


class BulkQuantityRequest(BaseModel):
    quantity: Optional[float] = None


class RenameMedicineRequest(BaseModel):
    name: str


class NavigateRequest(BaseModel):
    view: str
