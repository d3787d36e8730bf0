"""Shared plumbing for account-scoped services."""
import logging
from typing import Callable, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from pharmadist.core.clock import utc_now_iso
from pharmadist.core.exceptions import DuplicateNameError, PharmaDistError, ValidationError
from pharmadist.core.notifications import NotificationCenter
from pharmadist.db.store import KeyValueStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class AccountService:
    def __init__(
        self,
        store: KeyValueStore,
        notifier: NotificationCenter,
        now_iso: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.now_iso = now_iso

    def _reject(self, message: str, exc_cls: Type[PharmaDistError] = ValidationError) -> PharmaDistError:
        """Post the rejection to the user and build the exception to raise."""
        if exc_cls is DuplicateNameError:
            self.notifier.warning(message)
        else:
            self.notifier.error(message)
        logger.info(f"[{type(self).__name__}] Rejected: {message}")
        return exc_cls(message)

    def _load_list(self, key: str, model: Type[M]) -> List[M]:
        """Stored list of records; an unreadable shape yields an empty list."""
        raw = self.store.get(key, [])
        try:
            return [model.model_validate(item) for item in raw]
        except (SchemaError, TypeError) as e:
            logger.error(f"[{type(self).__name__}] Corrupt '{key}' for {self.store.namespace}, using empty list: {e}")
            return []

    def _load_one(self, key: str, model: Type[M]) -> M:
        """Stored record; a missing or unreadable value yields the model defaults."""
        raw = self.store.get(key, {})
        try:
            return model.model_validate(raw)
        except (SchemaError, TypeError) as e:
            logger.error(f"[{type(self).__name__}] Corrupt '{key}' for {self.store.namespace}, using defaults: {e}")
            return model()

    def _save_list(self, key: str, records: List[BaseModel]) -> bool:
        return self.store.set(key, [r.model_dump(mode="json") for r in records])

    def _save_one(self, key: str, record: BaseModel) -> bool:
        return self.store.set(key, record.model_dump(mode="json"))
