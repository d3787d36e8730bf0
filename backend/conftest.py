"""Shared fixtures: in-memory DB, frozen clocks and a wired account."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from pharmadist.core.ids import SequentialIdGenerator
from pharmadist.core.notifications import NotificationCenter
from pharmadist.db.base import Base
from pharmadist.db.store import GLOBAL_NAMESPACE, KeyValueStore, account_namespace
from pharmadist.models import StoredValue  # noqa: F401 - register models
from pharmadist.schemas.billing import StoreCreate
from pharmadist.schemas.medicine import MedicineCreate
from pharmadist.schemas.purchase import SupplierCreate
from pharmadist.services.account import AccountContext
from pharmadist.services.medicine_resolver import MedicineCatalog

T0 = "2026-01-15T10:00:00+00:00"


class FrozenTime:
    """now_iso replacement. Assign .iso to move time."""

    def __init__(self, iso: str = T0) -> None:
        self.iso = iso

    def __call__(self) -> str:
        return self.iso


class FakeClock:
    """Monotonic clock for notification expiry."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def engine():
    engine = make_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = Session(engine)
    yield session
    session.close()


@pytest.fixture
def global_store(db):
    return KeyValueStore(db, GLOBAL_NAMESPACE)


@pytest.fixture
def account_store(db):
    return KeyValueStore(db, account_namespace("acct-1"))


@pytest.fixture
def catalog(global_store):
    return MedicineCatalog(global_store, SequentialIdGenerator("med"))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier(clock):
    return NotificationCenter(timeout_seconds=5, clock=clock)


@pytest.fixture
def now():
    return FrozenTime()


@pytest.fixture
def account(db, notifier, now):
    """Unseeded account with deterministic ids and time."""
    return AccountContext(
        db,
        "acct-1",
        notifier,
        ids=SequentialIdGenerator("id"),
        now_iso=now,
        auto_cancel_bill_edit=True,
    )


@pytest.fixture
def shop(account):
    """Account with one store, one supplier and two priced medicines."""
    store = account.directory.add_store(StoreCreate(name="City Pharmacy", address="Mall Road"))
    supplier = account.directory.add_supplier(SupplierCreate(name="Getz Distributors"))
    panadol = account.inventory.add_medicine(
        MedicineCreate(name="Panadol Tab", company="GSK", price=100, discount=15, sale_discount=5)
    )
    brufen = account.inventory.add_medicine(
        MedicineCreate(name="Brufen Syp", company="Abbott", price=50, discount=12, sale_discount=None)
    )
    return {"store": store, "supplier": supplier, "panadol": panadol, "brufen": brufen}
