"""
MEDICINE IDENTITY RESOLUTION

Maps a typed medicine name to its shared catalog definition.

- Names are compared on name.strip().lower(); the catalog holds at most one
  definition per normalised name.
- resolve_or_create() returns the existing id untouched, or appends a new
  definition with an id from the injected generator.
- Every catalog write re-reads the stored list with a row lock, saves and
  commits while the process lock is held, so two requests resolving in the
  same cycle cannot drop each other's definition.

Callers validate names first; an empty name reaching the catalog is a bug in
the caller and raises ValidationError.
"""
import logging
import re
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError as SchemaError

from pharmadist.core.exceptions import DuplicateNameError, NotFoundError, ValidationError
from pharmadist.core.ids import IdGenerator, UUIDGenerator
from pharmadist.db.store import KeyValueStore, Keys
from pharmadist.schemas.medicine import MedicineDefinition

logger = logging.getLogger(__name__)

# Serialises catalog read-modify-write within the process.
_CATALOG_LOCK = threading.RLock()

TYPE_PATTERN = re.compile(r"(syp|tab|cap|inj|lotion|cream|oint|drops|sac|bar|solution)")
DEFAULT_TYPE = "OTHER"


def normalize_medicine_name(name: str) -> str:
    """
    Dedup key for a medicine name.

    Examples:
        "  Panadol Tab " -> "panadol tab"
        "AUGMENTIN 625" -> "augmentin 625"
    """
    return (name or "").strip().lower()


def guess_medicine_type(name: str) -> str:
    """First dosage-form keyword found in the name, upper-cased; OTHER when none."""
    match = TYPE_PATTERN.search(normalize_medicine_name(name))
    return match.group(0).upper() if match else DEFAULT_TYPE


def derive_tags(name: str) -> List[str]:
    """Lower-cased words of the name without brackets, in order, no repeats."""
    tags: List[str] = []
    for word in normalize_medicine_name(name).split():
        tag = word.replace("(", "").replace(")", "")
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _clean_tags(tags, name: str) -> List[str]:
    """Tags given as a list of strings are kept; anything else is derived from the name."""
    if isinstance(tags, (list, tuple, set)) and all(isinstance(t, str) for t in tags):
        return list(tags)
    return derive_tags(name)


class MedicineCatalog:
    """Repository over the shared list of MedicineDefinition."""

    def __init__(self, store: KeyValueStore, ids: Optional[IdGenerator] = None) -> None:
        self.store = store
        self.ids = ids or UUIDGenerator()

    def _load(self, for_update: bool = False) -> List[MedicineDefinition]:
        raw = self.store.get(Keys.MEDICINE_DEFINITIONS, [], for_update=for_update)
        try:
            return [MedicineDefinition.model_validate(d) for d in raw]
        except (SchemaError, TypeError) as e:
            logger.error(f"[Catalog] Corrupt catalog, using empty list: {e}")
            return []

    def _save(self, definitions: List[MedicineDefinition]) -> None:
        """Persist and commit. Called with _CATALOG_LOCK held."""
        if self.store.set(
            Keys.MEDICINE_DEFINITIONS,
            [d.model_dump(mode="json") for d in definitions],
        ):
            self.store.commit()

    def definitions(self) -> List[MedicineDefinition]:
        return self._load()

    def by_id(self) -> Dict[str, MedicineDefinition]:
        return {d.id: d for d in self._load()}

    def get(self, definition_id: str) -> Optional[MedicineDefinition]:
        return self.by_id().get(definition_id)

    def require(self, definition_id: str) -> MedicineDefinition:
        definition = self.get(definition_id)
        if definition is None:
            raise NotFoundError(f"Medicine {definition_id} not found.")
        return definition

    def find_by_name(self, name: str) -> Optional[MedicineDefinition]:
        key = normalize_medicine_name(name)
        for definition in self._load():
            if normalize_medicine_name(definition.name) == key:
                return definition
        return None

    def is_empty(self) -> bool:
        return not self._load()

    def resolve(
        self,
        name: str,
        company: str = "",
        type: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Tuple[MedicineDefinition, bool]:
        """Return (definition, created). Existing definitions are never modified here."""
        clean = (name or "").strip()
        if not clean:
            raise ValidationError("Medicine name cannot be empty.")

        key = normalize_medicine_name(clean)
        with _CATALOG_LOCK:
            definitions = self._load(for_update=True)
            for definition in definitions:
                if normalize_medicine_name(definition.name) == key:
                    return definition, False

            definition = MedicineDefinition(
                id=self.ids.new_id(),
                name=clean,
                company=company if isinstance(company, str) else "",
                type=type if isinstance(type, str) and type.strip() else guess_medicine_type(clean),
                tags=_clean_tags(tags, clean),
            )
            definitions.append(definition)
            self._save(definitions)

        logger.info(f"[Catalog] Created '{definition.name}' (id={definition.id})")
        return definition, True

    def resolve_or_create(
        self,
        name: str,
        company: str = "",
        type: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> str:
        definition, _ = self.resolve(name, company, type, tags)
        return definition.id

    def create(
        self,
        name: str,
        company: str = "",
        type: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> MedicineDefinition:
        """Like resolve(), but a name collision is an error."""
        definition, created = self.resolve(name, company, type, tags)
        if not created:
            raise DuplicateNameError(f'Medicine "{name.strip()}" already exists.')
        return definition

    def update(
        self,
        definition_id: str,
        name: Optional[str] = None,
        company: Optional[str] = None,
        type: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> MedicineDefinition:
        """Edit shared fields. The new name must not belong to another definition."""
        with _CATALOG_LOCK:
            definitions = self._load(for_update=True)
            index = next((i for i, d in enumerate(definitions) if d.id == definition_id), None)
            if index is None:
                raise NotFoundError(f"Medicine {definition_id} not found.")

            changes = {}
            if name is not None:
                clean = name.strip()
                if not clean:
                    raise ValidationError("Medicine name cannot be empty.")
                key = normalize_medicine_name(clean)
                clash = any(
                    d.id != definition_id and normalize_medicine_name(d.name) == key
                    for d in definitions
                )
                if clash:
                    raise DuplicateNameError(f'Medicine "{clean}" already exists.')
                changes["name"] = clean
            if company is not None:
                changes["company"] = company
            if type is not None:
                changes["type"] = type
            if tags is not None:
                changes["tags"] = _clean_tags(tags, changes.get("name", definitions[index].name))

            updated = definitions[index].model_copy(update=changes)
            definitions[index] = updated
            self._save(definitions)
        return updated

    def merge(self, incoming: Iterable[MedicineDefinition]) -> int:
        """Append definitions whose id is not present yet. Returns how many were added.

        An incoming definition whose name already belongs to another id is
        skipped, so the one-definition-per-name rule holds after a merge.
        """
        with _CATALOG_LOCK:
            definitions = self._load(for_update=True)
            known = {d.id for d in definitions}
            names = {normalize_medicine_name(d.name) for d in definitions}
            added = 0
            for definition in incoming:
                if definition.id in known:
                    continue
                key = normalize_medicine_name(definition.name)
                if not key or key in names:
                    logger.warning(
                        f"[Catalog] Skipped merging '{definition.name}' (id={definition.id}): name already taken"
                    )
                    continue
                definitions.append(definition)
                known.add(definition.id)
                names.add(key)
                added += 1
            if added:
                self._save(definitions)
        return added
