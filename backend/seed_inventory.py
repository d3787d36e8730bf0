"""Seed the shared catalog and demo counterparties for one account.

Usage: python seed_inventory.py [account_id]
"""
import sys

from sqlalchemy.orm import Session

from pharmadist.db.init_db import init_db
from pharmadist.db.session import SessionLocal
from pharmadist.services.account import AccountContext

DEFAULT_ACCOUNT = "local"


def seed_inventory(db: Session, account_id: str = DEFAULT_ACCOUNT) -> dict:
    """Run first-run seeding and legacy migration, return what the account now holds."""
    account = AccountContext(db, account_id).bootstrap(seed=True)
    return {
        "medicines": len(account.inventory.list_medicines()),
        "stores": len(account.directory.list_stores()),
        "suppliers": len(account.directory.list_suppliers()),
    }


if __name__ == "__main__":
    account_id = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_ACCOUNT
    init_db()
    db = SessionLocal()
    try:
        counts = seed_inventory(db, account_id)
    finally:
        db.close()
    print(f"✅ Account '{account_id}' ready: {counts['medicines']} medicines, "
          f"{counts['stores']} stores, {counts['suppliers']} suppliers")
