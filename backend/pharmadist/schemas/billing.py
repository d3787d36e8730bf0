from pydantic import BaseModel, Field
from typing import List, Optional

from pharmadist.schemas.medicine import Medicine


class MedicalStore(BaseModel):
    id: str
    name: str
    address: str = ""


class StoreCreate(BaseModel):
    name: str
    address: str = ""


class StoreUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None


class CartItem(Medicine):
    quantity: float = 0
    discount_value: Optional[float] = None  # overrides sale_discount for this line
    purchase_discount: Optional[float] = None  # snapshot of discount when added
    mrp: float = 0  # snapshot of price / entered rate
    calculated_discount_amount: float = 0
    net_amount: float = 0
    sales_tax_amount: Optional[float] = None


class CartLineUpdate(BaseModel):
    quantity: Optional[float] = None
    rate: Optional[float] = None
    discount_value: Optional[float] = None
    sales_tax_amount: Optional[float] = None
    batch_no: Optional[str] = None


class FinalizedBill(BaseModel):
    bill_no: int
    store_id: str
    store_name: str
    store_address: str = ""
    date: str
    items: List[CartItem] = Field(default_factory=list)
    subtotal: float = 0
    grand_total: float = 0


class BillLayoutSettings(BaseModel):
    distributor_name: str = "Mughal Distributors"
    distributor_title: str = "ESTIMATE"
    distributor_address_line1: str = "Bismillah Plaza, Opp. Sonari Bank"
    distributor_address_line2: str = "Chinioat Bazar, Faisalabad"
    footer_text: str = ""
    show_phone_number: bool = True
    show_bill_date: bool = True
    phone_number: str = "03040297400"


class BillLayoutSettingsUpdate(BaseModel):
    distributor_name: Optional[str] = None
    distributor_title: Optional[str] = None
    distributor_address_line1: Optional[str] = None
    distributor_address_line2: Optional[str] = None
    footer_text: Optional[str] = None
    show_phone_number: Optional[bool] = None
    show_bill_date: Optional[bool] = None
    phone_number: Optional[str] = None


class SalesSettings(BaseModel):
    show_sales_tax_column: bool = False
    show_batch_no: bool = False


class SalesSettingsUpdate(BaseModel):
    show_sales_tax_column: Optional[bool] = None
    show_batch_no: Optional[bool] = None
