"""
One-time data procedures run when an account is first used.

seed_initial_data()
    Global, once per database: fills an empty catalog from the seed list and
    stamps the global_initialized flag. Also gives a fresh account one demo
    store and one demo supplier.

migrate_legacy_medicines()
    Once per account: older accounts kept a full medicine list of their own.
    Each record is resolved against the shared catalog by name, and its
    pricing becomes the account's override. The override map is replaced,
    not merged. Afterwards the legacy list is deleted and migration_done set.
    The flag is the only guard, so a second run performs no writes at all.
"""
import logging
from typing import Optional

from pydantic import ValidationError as SchemaError

from pharmadist.core.clock import EPOCH_ISO
from pharmadist.core.config import settings
from pharmadist.core.ids import IdGenerator, UUIDGenerator
from pharmadist.db.seed_data import DEMO_STORE, DEMO_SUPPLIER, SEED_MEDICINES, seed_medicine_id
from pharmadist.db.store import KeyValueStore, Keys
from pharmadist.schemas.billing import MedicalStore
from pharmadist.schemas.medicine import MedicineDefinition, UserMedicineData
from pharmadist.schemas.purchase import Supplier
from pharmadist.services.medicine_resolver import MedicineCatalog, derive_tags

logger = logging.getLogger(__name__)


def migrate_legacy_medicines(
    global_store: KeyValueStore,
    account_store: KeyValueStore,
    catalog: MedicineCatalog,
) -> bool:
    """Move a legacy per-account medicine list onto the shared catalog.

    Returns:
        True if this call did the migration, False if it had already run.
    """
    if account_store.get(Keys.MIGRATION_DONE, False):
        return False

    legacy = account_store.get(Keys.LEGACY_MEDICINES)
    if not isinstance(legacy, list):
        if legacy is not None:
            logger.error(f"[Migration] Unreadable legacy list for {account_store.namespace}, skipping")
        account_store.set(Keys.MIGRATION_DONE, True)
        account_store.commit()
        logger.info(f"[Migration] Nothing to migrate for {account_store.namespace}")
        return True

    overrides = {}
    created = 0
    for record in legacy:
        if not isinstance(record, dict):
            continue
        name = record.get("name")
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            logger.warning(f"[Migration] Skipped nameless legacy record in {account_store.namespace}")
            continue

        definition, was_created = catalog.resolve(
            name,
            company=record.get("company") or "",
            type=record.get("type"),
            tags=record.get("tags"),
        )
        created += was_created

        try:
            overrides[definition.id] = UserMedicineData(
                price=record.get("price"),
                discount=record.get("discount"),
                sale_discount=record.get("sale_discount", record.get("saleDiscount")),
                batch_no=record.get("batch_no", record.get("batchNo")) or "",
                last_updated=record.get("last_updated", record.get("lastUpdated")) or EPOCH_ISO,
            ).model_dump(mode="json")
        except SchemaError as e:
            logger.warning(f"[Migration] Bad pricing on '{name}', using defaults: {e}")
            overrides[definition.id] = UserMedicineData().model_dump(mode="json")

    account_store.set(Keys.USER_MEDICINE_DATA, overrides)
    account_store.delete(Keys.LEGACY_MEDICINES)
    account_store.set(Keys.MIGRATION_DONE, True)
    account_store.commit()

    logger.info(
        f"[Migration] Migrated {len(overrides)} medicines for {account_store.namespace} "
        f"({created} new catalog entries)"
    )
    return True


def seed_initial_data(
    global_store: KeyValueStore,
    account_store: KeyValueStore,
    catalog: MedicineCatalog,
    ids: Optional[IdGenerator] = None,
) -> bool:
    """Populate an empty database. Returns True if seeding ran."""
    if not catalog.is_empty() or global_store.get(Keys.GLOBAL_INITIALIZED, False):
        return False
    ids = ids or UUIDGenerator()

    definitions = []
    overrides = {}
    for index, entry in enumerate(SEED_MEDICINES):
        definition = MedicineDefinition(
            id=seed_medicine_id(index, entry["name"]),
            name=entry["name"],
            company=entry["company"],
            type=entry["type"],
            tags=derive_tags(entry["name"]),
        )
        definitions.append(definition)
        overrides[definition.id] = UserMedicineData(
            discount=entry["discount"],
            sale_discount=entry["sale_discount"],
        ).model_dump(mode="json")

    catalog.merge(definitions)
    global_store.set(Keys.GLOBAL_INITIALIZED, True)
    if not account_store.get(Keys.USER_MEDICINE_DATA):
        account_store.set(Keys.USER_MEDICINE_DATA, overrides)

    if not account_store.get(Keys.MEDICAL_STORES):
        store = MedicalStore(id=ids.new_id(), **DEMO_STORE)
        account_store.set(Keys.MEDICAL_STORES, [store.model_dump(mode="json")])
    if not account_store.get(Keys.SUPPLIERS):
        supplier = Supplier(id=ids.new_id(), **DEMO_SUPPLIER)
        account_store.set(Keys.SUPPLIERS, [supplier.model_dump(mode="json")])

    account_store.commit()
    logger.info(f"[Seed] Catalog seeded with {len(definitions)} medicines for {account_store.namespace}")
    return True


def bootstrap_account(
    global_store: KeyValueStore,
    account_store: KeyValueStore,
    catalog: MedicineCatalog,
    ids: Optional[IdGenerator] = None,
    seed: Optional[bool] = None,
) -> None:
    """Seed (when enabled) and migrate before the account's first request."""
    if seed is None:
        seed = settings.SEED_DEMO_DATA
    if seed:
        seed_initial_data(global_store, account_store, catalog, ids)
    migrate_legacy_medicines(global_store, account_store, catalog)
