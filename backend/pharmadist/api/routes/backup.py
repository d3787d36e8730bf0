"""Export, import and reset of an account's data."""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from pharmadist.api.deps import domain_errors, get_account
from pharmadist.schemas.backup import BackupDocument
from pharmadist.services.account import AccountContext

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/export", response_model=BackupDocument)
def export_backup(account: AccountContext = Depends(get_account)):
    doc = account.backup.export_document()
    account.notifier.success("Backup data file saved.")
    return doc


@router.post("/import")
def import_backup(
    payload: Dict[str, Any] = Body(...),
    account: AccountContext = Depends(get_account),
):
    """Replace this account's data with a backup document. Raw body, validated by the service."""
    with domain_errors():
        doc = account.backup.import_document(payload)
    return {
        "imported": True,
        "bills": len(doc.finalized_bills),
        "purchases": len(doc.finalized_purchases),
    }


@router.post("/clear")
def clear_account(account: AccountContext = Depends(get_account)):
    logger.info(f"[BACKUP] Clear requested for account {account.account_id}")
    account.backup.clear_account()
    return {"cleared": True}
