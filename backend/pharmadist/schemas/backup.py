"""Full-state export document."""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Dict, Iterable, List

from pharmadist.schemas.billing import BillLayoutSettings, FinalizedBill, MedicalStore, SalesSettings
from pharmadist.schemas.medicine import MedicineDefinition, UserMedicineData
from pharmadist.schemas.purchase import FinalizedPurchase, Supplier
from pharmadist.schemas.session import BillingSessionState, PurchaseSessionState

BACKUP_VERSION = "1.0.0"


def _duplicates(numbers: Iterable[int]) -> List[int]:
    seen, repeated = set(), []
    for number in numbers:
        if number in seen and number not in repeated:
            repeated.append(number)
        seen.add(number)
    return repeated


class BackupDocument(BaseModel):
    # Unknown top-level keys mean the file is not one of ours.
    model_config = ConfigDict(extra="forbid")

    version: str = BACKUP_VERSION
    global_medicine_definitions: List[MedicineDefinition] = Field(default_factory=list)
    user_medicine_data: Dict[str, UserMedicineData] = Field(default_factory=dict)
    medical_stores: List[MedicalStore] = Field(default_factory=list)
    suppliers: List[Supplier] = Field(default_factory=list)
    finalized_bills: List[FinalizedBill] = Field(default_factory=list)
    finalized_purchases: List[FinalizedPurchase] = Field(default_factory=list)
    bill_layout_settings: BillLayoutSettings = Field(default_factory=BillLayoutSettings)
    sales_settings: SalesSettings = Field(default_factory=SalesSettings)
    billing_session: BillingSessionState = Field(default_factory=BillingSessionState)
    purchase_session: PurchaseSessionState = Field(default_factory=PurchaseSessionState)

    @model_validator(mode="after")
    def _unique_numbers(self) -> "BackupDocument":
        bills = _duplicates(b.bill_no for b in self.finalized_bills)
        if bills:
            raise ValueError(f"duplicate bill numbers: {bills}")
        purchases = _duplicates(p.purchase_id for p in self.finalized_purchases)
        if purchases:
            raise ValueError(f"duplicate purchase ids: {purchases}")
        return self
