"""Id generation, injected wherever new records are created."""
import itertools
import uuid
from abc import ABC, abstractmethod


class IdGenerator(ABC):
    @abstractmethod
    def new_id(self) -> str:
        ...


class UUIDGenerator(IdGenerator):
    """Random UUID4 ids for production use."""

    def new_id(self) -> str:
        return str(uuid.uuid4())


class SequentialIdGenerator(IdGenerator):
    """Deterministic ids (`<prefix>-1`, `<prefix>-2`, ...)."""

    def __init__(self, prefix: str = "id") -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)

    def new_id(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"
