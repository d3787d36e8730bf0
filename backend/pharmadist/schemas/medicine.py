"""Medicine catalog, per-account overrides and the joined view."""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from pharmadist.core.clock import EPOCH_ISO


class MedicineDefinition(BaseModel):
    """Shared across all accounts. One per normalised name."""
    id: str
    name: str
    company: str = ""
    type: str = "OTHER"
    tags: List[str] = Field(default_factory=list)


class UserMedicineData(BaseModel):
    """Per-account pricing layered over a definition."""
    price: Optional[float] = None
    discount: Optional[float] = None  # purchase discount %
    sale_discount: Optional[float] = None  # default sale discount %
    batch_no: str = ""
    last_updated: str = EPOCH_ISO


class Medicine(BaseModel):
    """Read-only join of a definition and the account's override."""
    id: str
    name: str
    company: str = ""
    type: str = "OTHER"
    tags: List[str] = Field(default_factory=list)
    price: Optional[float] = None
    discount: Optional[float] = None
    sale_discount: Optional[float] = None
    batch_no: str = ""
    last_updated: str = EPOCH_ISO


class MedicineCreate(BaseModel):
    name: str
    company: str = ""
    type: Optional[str] = None
    tags: Optional[List[str]] = None
    price: Optional[float] = None
    discount: Optional[float] = None
    sale_discount: Optional[float] = None
    batch_no: str = ""


class MedicineUpdate(BaseModel):
    name: Optional[str] = None
    company: Optional[str] = None
    type: Optional[str] = None
    tags: Optional[List[str]] = None
    price: Optional[float] = None
    discount: Optional[float] = None
    sale_discount: Optional[float] = None
    batch_no: Optional[str] = None


class SaleDiscountUpdate(BaseModel):
    sale_discount: Optional[float] = None


class StockLevel(BaseModel):
    id: str
    name: str
    stock: float


OverrideMap = Dict[str, UserMedicineData]


class EnsureMedicineRequest(BaseModel):
    name: str
