"""FastAPI dependencies: DB session, current account and its services.

The account id arrives in a header set by the upstream auth gateway
(settings.ACCOUNT_HEADER). It is only used to namespace stored data.
"""
import re
from contextlib import contextmanager
import threading
from typing import Dict, Generator, Iterator, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from pharmadist.core.config import settings
from pharmadist.core.exceptions import BusinessError, PharmaDistError
from pharmadist.core.notifications import NotificationCenter
from pharmadist.db.session import SessionLocal
from pharmadist.services.account import AccountContext

_ACCOUNT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.@-]{1,128}$")

# Notifications outlive a single request, one center per account.
_notifiers: Dict[str, NotificationCenter] = {}
_notifiers_lock = threading.Lock()


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_account_id(
    account_id: Optional[str] = Header(None, alias=settings.ACCOUNT_HEADER),
) -> str:
    if not account_id:
        raise BusinessError.unauthorized("missing account header")
    account_id = account_id.strip()
    if not _ACCOUNT_ID_PATTERN.match(account_id):
        raise BusinessError.unauthorized("malformed account id")
    return account_id


def get_notifier(account_id: str = Depends(get_current_account_id)) -> NotificationCenter:
    with _notifiers_lock:
        notifier = _notifiers.get(account_id)
        if notifier is None:
            notifier = _notifiers[account_id] = NotificationCenter()
        return notifier


def reset_notifiers() -> None:
    with _notifiers_lock:
        _notifiers.clear()


def get_account(
    db: Session = Depends(get_db),
    account_id: str = Depends(get_current_account_id),
    notifier: NotificationCenter = Depends(get_notifier),
) -> AccountContext:
    """Services for the current account, seeded and migrated on first use."""
    return AccountContext(db, account_id, notifier).bootstrap()


@contextmanager
def domain_errors() -> Iterator[None]:
    """Translate rejected business operations into HTTP errors."""
    try:
        yield
    except PharmaDistError as e:
        raise BusinessError.from_domain(e)
