"""Read-only reports over finalized bills."""
from fastapi import APIRouter, Depends

from pharmadist.api.deps import get_account
from pharmadist.services.account import AccountContext
from pharmadist.services.report_service import profit_report, sales_chart, sales_highlights

router = APIRouter()


@router.get("/profit")
def get_profit_report(account: AccountContext = Depends(get_account)):
    return profit_report(account.bills.all_bills())


@router.get("/highlights")
def get_sales_highlights(account: AccountContext = Depends(get_account)):
    return sales_highlights(account.bills.all_bills())


@router.get("/sales-chart")
def get_sales_chart(account: AccountContext = Depends(get_account)):
    return sales_chart(account.bills.all_bills())
