"""
Namespaced key-value persistence.

Every logical table of the application (catalog, overrides, bills, purchases,
session state, settings, flags) is a single JSON document stored under a key.
Writes are compared against the stored serialisation and skipped when nothing
changed. Writes are flushed, not committed: the service that owns the
operation commits once so multi-key updates land together.
"""
import copy
import json
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from pharmadist.models.stored_value import StoredValue

logger = logging.getLogger(__name__)

GLOBAL_NAMESPACE = "global"


class Keys:
    """Storage keys."""
    # Global
    MEDICINE_DEFINITIONS = "global_medicine_definitions"
    GLOBAL_INITIALIZED = "global_initialized"

    # Per account
    USER_MEDICINE_DATA = "user_medicine_data"
    LEGACY_MEDICINES = "medicines"
    MIGRATION_DONE = "migration_done"
    MEDICAL_STORES = "medical_stores"
    SUPPLIERS = "suppliers"
    FINALIZED_BILLS = "finalized_bills"
    FINALIZED_PURCHASES = "finalized_purchases"
    BILLING_SESSION = "billing_session"
    PURCHASE_SESSION = "purchase_session"
    BILL_LAYOUT_SETTINGS = "bill_layout_settings"
    SALES_SETTINGS = "sales_settings"


def account_namespace(account_id: str) -> str:
    return f"account:{account_id}"


def _serialize(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


class KeyValueStore:
    """JSON documents under one namespace."""

    def __init__(self, db: Session, namespace: str) -> None:
        self.db = db
        self.namespace = namespace
        self.write_count = 0

    def _row(self, key: str, for_update: bool = False) -> Optional[StoredValue]:
        query = self.db.query(StoredValue).filter(
            StoredValue.namespace == self.namespace, StoredValue.key == key
        )
        if for_update:
            # Row lock where the backend supports it; always bypass the identity map.
            query = query.with_for_update().populate_existing()
        return query.first()

    def get(self, key: str, default: Any = None, for_update: bool = False) -> Any:
        """Return the stored value, or a copy of `default` when missing or unreadable.

        With for_update the row is re-read from the database and locked until
        the next commit.
        """
        row = self._row(key, for_update)
        if row is None:
            return copy.deepcopy(default)
        try:
            return json.loads(row.value)
        except (TypeError, ValueError) as e:
            logger.error(
                f"[Store] Corrupt value for {self.namespace}/{key}, using default: {e}"
            )
            return copy.deepcopy(default)

    def has(self, key: str) -> bool:
        return self._row(key) is not None

    def set(self, key: str, value: Any) -> bool:
        """Persist `value`. Returns False when the stored value is already identical."""
        serialized = _serialize(value)
        row = self._row(key)
        if row is not None and row.value == serialized:
            return False
        if row is None:
            row = StoredValue(namespace=self.namespace, key=key, value=serialized)
            self.db.add(row)
        else:
            row.value = serialized
        self.db.flush()
        self.write_count += 1
        return True

    def delete(self, key: str) -> bool:
        row = self._row(key)
        if row is None:
            return False
        self.db.delete(row)
        self.db.flush()
        self.write_count += 1
        return True

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
