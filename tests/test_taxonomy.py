"""Tests for categories and activity names, including cascades."""

import pytest

from suds_hub.errors import DuplicateError, NotFoundError, ServiceError, ValidationInputError
from suds_hub.models.domain import ACTIVITY_RECORDS, Direction
from suds_hub.services import activity_records, taxonomy
from suds_hub.store.memory_provider import InMemoryDocumentStore


def test_activity_names_are_normalized():
    assert taxonomy.normalize_activity_name("  bARRIDO ") == "Barrido"
    assert taxonomy.normalize_activity_name("") == ""


def test_add_activity_name_twice_raises_duplicate(any_store):
    """Second add of the same normalized name fails and leaves one entry."""
    taxonomy.add_category(any_store, "Limpieza")
    taxonomy.add_activity_name(any_store, "Limpieza", "Barrido")
    with pytest.raises(DuplicateError):
        taxonomy.add_activity_name(any_store, "Limpieza", "barrido")
    assert taxonomy.get_defined_names(any_store)["Limpieza"] == ["Barrido"]


def test_add_category_rejects_blank_and_duplicate(store):
    with pytest.raises(ValidationInputError):
        taxonomy.add_category(store, "   ")
    taxonomy.add_category(store, "Limpieza")
    with pytest.raises(DuplicateError):
        taxonomy.add_category(store, " Limpieza ")
    assert taxonomy.get_categories(store) == ["Limpieza"]


def test_add_activity_name_requires_existing_category(store):
    with pytest.raises(NotFoundError):
        taxonomy.add_activity_name(store, "Nope", "Barrido")


def test_same_activity_name_allowed_in_two_categories(store):
    taxonomy.add_category(store, "Limpieza")
    taxonomy.add_category(store, "Vegetación")
    taxonomy.add_activity_name(store, "Limpieza", "Poda")
    taxonomy.add_activity_name(store, "Vegetación", "Poda")
    assert taxonomy.get_taxonomy(store)["activities"] == {"Limpieza": ["Poda"], "Vegetación": ["Poda"]}


def test_delete_category_cascades(any_store):
    taxonomy.add_category(any_store, "Limpieza")
    taxonomy.add_category(any_store, "Vegetación")
    taxonomy.add_activity_name(any_store, "Limpieza", "Barrido")
    taxonomy.add_activity_name(any_store, "Vegetación", "Riego")
    asset_id = any_store.add("sudsTypes", {"name": "Zanja", "description": "d", "order": 0})
    activity_records.set_applies(any_store, asset_id, "Limpieza", "Barrido", True)
    activity_records.set_applies(any_store, asset_id, "Vegetación", "Riego", True)

    deleted = taxonomy.delete_category(any_store, "Limpieza")

    assert deleted == 1
    assert taxonomy.get_categories(any_store) == ["Vegetación"]
    assert "Limpieza" not in taxonomy.get_defined_names(any_store)
    remaining = any_store.query(ACTIVITY_RECORDS)
    assert [r["category"] for r in remaining] == ["Vegetación"]


def test_delete_category_is_all_or_nothing(zanja, store, monkeypatch):
    """A failure halfway through the cascade leaves every document as it was."""
    activity_records.set_applies(store, zanja["id"], "Limpieza", "Barrido", True)
    activity_records.set_applies(store, zanja["id"], "Limpieza", "Poda", True)
    before = {
        "taxonomy": taxonomy.get_taxonomy(store),
        "records": store.query(ACTIVITY_RECORDS),
    }

    original = InMemoryDocumentStore._apply_op
    calls = {"n": 0}

    def flaky(self, data, op):
        if op.kind == "delete":
            calls["n"] += 1
            if calls["n"] == 2:
                raise ServiceError("store unavailable")
        return original(self, data, op)

    monkeypatch.setattr(InMemoryDocumentStore, "_apply_op", flaky)
    with pytest.raises(ServiceError):
        taxonomy.delete_category(store, "Limpieza")

    assert taxonomy.get_taxonomy(store) == before["taxonomy"]
    assert store.query(ACTIVITY_RECORDS) == before["records"]


def test_delete_missing_category_raises(store):
    with pytest.raises(NotFoundError):
        taxonomy.delete_category(store, "Nope")


def test_delete_activity_name_cascades_only_matching_records(zanja, store):
    activity_records.set_applies(store, zanja["id"], "Limpieza", "Barrido", True)
    activity_records.set_applies(store, zanja["id"], "Limpieza", "Poda", True)

    assert taxonomy.delete_activity_name(store, "Limpieza", "barrido") == 1

    assert taxonomy.get_defined_names(store)["Limpieza"] == ["Poda"]
    assert [r["activityName"] for r in store.query(ACTIVITY_RECORDS)] == ["Poda"]


def test_rename_activity_name_keeps_position_and_updates_records(any_store):
    store = any_store
    taxonomy.add_category(store, "Limpieza")
    for name in ("Barrido", "Poda", "Desbroce"):
        taxonomy.add_activity_name(store, "Limpieza", name)
    asset_id = store.add("sudsTypes", {"name": "Zanja", "description": "d", "order": 0})
    record = activity_records.set_applies(store, asset_id, "Limpieza", "Poda", True)

    assert taxonomy.rename_activity_name(store, "Limpieza", "Poda", "poda de arbustos") == 1

    assert taxonomy.get_defined_names(store)["Limpieza"] == ["Barrido", "Poda de arbustos", "Desbroce"]
    assert store.get(ACTIVITY_RECORDS, record["id"])["activityName"] == "Poda de arbustos"


def test_rename_to_existing_name_raises_duplicate(zanja, store):
    with pytest.raises(DuplicateError):
        taxonomy.rename_activity_name(store, "Limpieza", "Poda", "barrido")
    assert taxonomy.get_defined_names(store)["Limpieza"] == ["Barrido", "Poda"]


def test_rename_to_same_name_is_noop(zanja, store):
    assert taxonomy.rename_activity_name(store, "Limpieza", "Poda", "poda") == 0


def test_rename_missing_activity_raises(zanja, store):
    with pytest.raises(NotFoundError):
        taxonomy.rename_activity_name(store, "Limpieza", "Siega", "Corte")


def test_move_category_and_activity(zanja, store):
    assert taxonomy.move_category(store, "Vegetación", Direction.UP) == ["Vegetación", "Limpieza"]
    assert taxonomy.get_categories(store) == ["Vegetación", "Limpieza"]
    # already first
    assert taxonomy.move_category(store, "Vegetación", Direction.UP) == ["Vegetación", "Limpieza"]

    assert taxonomy.move_activity_name(store, "Limpieza", "Barrido", Direction.DOWN) == ["Poda", "Barrido"]
    assert taxonomy.get_defined_names(store)["Limpieza"] == ["Poda", "Barrido"]
    assert taxonomy.move_activity_name(store, "Limpieza", "Barrido", Direction.DOWN) == ["Poda", "Barrido"]


def test_get_taxonomy_only_lists_known_categories(store):
    taxonomy.add_category(store, "Limpieza")
    store.set("appSettings", "definedActivityNames", {"Huérfana": ["X"]}, merge=True)
    assert taxonomy.get_taxonomy(store) == {"categories": ["Limpieza"], "activities": {"Limpieza": []}}


def test_fresh_store_has_empty_taxonomy():
    assert taxonomy.get_taxonomy(InMemoryDocumentStore()) == {"categories": [], "activities": {}}
