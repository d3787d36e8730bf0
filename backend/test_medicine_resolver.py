"""Shared catalog: one definition per normalised name."""
import pytest
from sqlalchemy.orm import Session

from pharmadist.core.exceptions import DuplicateNameError, NotFoundError, ValidationError
from pharmadist.core.ids import SequentialIdGenerator
from pharmadist.db.store import GLOBAL_NAMESPACE, KeyValueStore, Keys
from pharmadist.schemas.medicine import MedicineDefinition
from pharmadist.services.medicine_resolver import (
    MedicineCatalog,
    derive_tags,
    guess_medicine_type,
    normalize_medicine_name,
)


def test_normalize():
    assert normalize_medicine_name("  Panadol Tab ") == "panadol tab"
    assert normalize_medicine_name(None) == ""


def test_same_name_resolves_to_one_definition(catalog):
    first = catalog.resolve_or_create(" Panadol Tab ")
    second = catalog.resolve_or_create("PANADOL TAB")
    assert first == second == "med-1"
    assert len(catalog.definitions()) == 1
    assert catalog.get(first).name == "Panadol Tab"


def test_existing_definition_is_not_modified(catalog):
    catalog.resolve("Brufen Syp", company="Abbott")
    definition, created = catalog.resolve("brufen syp", company="Someone Else", type="TAB")
    assert not created
    assert definition.company == "Abbott"
    assert definition.type == "SYP"


def test_new_definition_guesses_type_and_tags(catalog):
    definition, created = catalog.resolve("Augmentin (625mg) Tab")
    assert created
    assert definition.type == "TAB"
    assert definition.tags == ["augmentin", "625mg", "tab"]


def test_type_guess_defaults_to_other():
    assert guess_medicine_type("Vitamin C") == "OTHER"
    assert guess_medicine_type("Otrivin Drops") == "DROPS"
    assert derive_tags("ORS  Sac sac") == ["ors", "sac"]


def test_empty_name_is_rejected(catalog):
    with pytest.raises(ValidationError):
        catalog.resolve("   ")
    assert catalog.is_empty()


def test_create_rejects_taken_name(catalog):
    catalog.create("Risek 20mg Cap")
    with pytest.raises(DuplicateNameError):
        catalog.create("risek 20MG cap")
    assert len(catalog.definitions()) == 1


def test_update_checks_name_collisions(catalog):
    panadol = catalog.create("Panadol Tab")
    calpol = catalog.create("Calpol Syp")

    with pytest.raises(DuplicateNameError):
        catalog.update(calpol.id, name="panadol tab")
    with pytest.raises(NotFoundError):
        catalog.update("missing", company="X")

    renamed = catalog.update(panadol.id, name="Panadol Extra Tab", company="GSK")
    assert renamed.name == "Panadol Extra Tab"
    assert catalog.find_by_name("panadol extra tab").id == panadol.id


def test_merge_skips_known_ids_and_taken_names(catalog):
    existing = catalog.create("Flagyl 400mg Tab")
    added = catalog.merge([
        MedicineDefinition(id=existing.id, name="Renamed Elsewhere"),
        MedicineDefinition(id="other-id", name="FLAGYL 400MG TAB"),
        MedicineDefinition(id="new-id", name="Softin Tab"),
    ])
    assert added == 1
    names = sorted(d.name for d in catalog.definitions())
    assert names == ["Flagyl 400mg Tab", "Softin Tab"]


def test_corrupt_catalog_reads_as_empty(catalog, global_store):
    global_store.set(Keys.MEDICINE_DEFINITIONS, [{"no_id": True}])
    assert catalog.definitions() == []


def test_resolved_definition_is_committed(catalog, global_store):
    catalog.resolve("Softin Tab")
    global_store.rollback()
    assert catalog.find_by_name("softin tab") is not None


def test_concurrent_sessions_keep_both_definitions(engine, catalog):
    catalog.create("Panadol Tab")
    other_db = Session(engine)
    try:
        other = MedicineCatalog(KeyValueStore(other_db, GLOBAL_NAMESPACE), SequentialIdGenerator("other"))
        assert len(other.definitions()) == 1

        catalog.resolve("Softin Tab")
        other.resolve("Calpol Syp")
    finally:
        other_db.close()

    names = sorted(d.name for d in catalog.definitions())
    assert names == ["Calpol Syp", "Panadol Tab", "Softin Tab"]


def test_malformed_tags_fall_back_to_derived(catalog):
    from_string, _ = catalog.resolve("Brufen Syp", tags="fever")
    assert from_string.tags == ["brufen", "syp"]
    from_numbers, _ = catalog.resolve("Flagyl Tab", tags=[1, 2])
    assert from_numbers.tags == ["flagyl", "tab"]
    kept, _ = catalog.resolve("Risek Cap", tags=("ulcer",))
    assert kept.tags == ["ulcer"]
