"""
Maintenance taxonomy: ordered categories and, per category, ordered activity names.

Both lists live in the ``appSettings`` collection. Every cascading change
(category/activity deletion, activity rename) is submitted as one batch so the
settings documents and the affected activity records change together or not at all.
"""
from typing import Dict, List

import structlog

from ..errors import DuplicateError, NotFoundError, ValidationInputError
from ..models.domain import (
    ACTIVITY_NAMES_DOC,
    ACTIVITY_RECORDS,
    APP_SETTINGS,
    CATEGORIES_DOC,
    Direction,
)
from ..store.provider import DocumentStore
from . import reordering

logger = structlog.get_logger(__name__)


def normalize_activity_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        return ""
    return name[0].upper() + name[1:].lower()


def _clean_category(name: str) -> str:
    return (name or "").strip()


def get_categories(store: DocumentStore) -> List[str]:
    doc = store.get(APP_SETTINGS, CATEGORIES_DOC) or {}
    return list(doc.get("categories") or [])


def get_defined_names(store: DocumentStore) -> Dict[str, List[str]]:
    doc = store.get(APP_SETTINGS, ACTIVITY_NAMES_DOC) or {}
    doc.pop("id", None)
    return {cat: list(names or []) for cat, names in doc.items()}


def get_taxonomy(store: DocumentStore) -> dict:
    categories = get_categories(store)
    names = get_defined_names(store)
    return {
        "categories": categories,
        "activities": {cat: names.get(cat, []) for cat in categories},
    }


def require_category(store: DocumentStore, category: str) -> List[str]:
    categories = get_categories(store)
    if category not in categories:
        raise NotFoundError(f"Category '{category}' not found")
    return categories


def find_activity(names: List[str], name: str) -> int:
    if name in names:
        return names.index(name)
    normalized = normalize_activity_name(name)
    if normalized in names:
        return names.index(normalized)
    raise NotFoundError(f"Activity '{name}' not found")


def _records_matching(store: DocumentStore, category: str, activity_name: str = None) -> List[dict]:
    def _match(doc: dict) -> bool:
        if doc.get("category") != category:
            return False
        return activity_name is None or doc.get("activityName") == activity_name

    return store.query(ACTIVITY_RECORDS, _match)


# ---- categories ----

def add_category(store: DocumentStore, name: str) -> List[str]:
    name = _clean_category(name)
    if not name:
        raise ValidationInputError("Category name is required")
    categories = get_categories(store)
    if name in categories:
        raise DuplicateError(f"Category '{name}' already exists")
    categories.append(name)
    store.set(APP_SETTINGS, CATEGORIES_DOC, {"categories": categories}, merge=True)
    logger.info("category_added", category=name)
    return categories


def delete_category(store: DocumentStore, name: str) -> int:
    """Remove a category, its activity names and all of its activity records.

    Returns the number of records deleted.
    """
    name = _clean_category(name)
    categories = require_category(store, name)
    names = get_defined_names(store)
    names.pop(name, None)
    records = _records_matching(store, name)

    batch = store.batch()
    batch.set(APP_SETTINGS, CATEGORIES_DOC, {"categories": [c for c in categories if c != name]}, merge=True)
    batch.set(APP_SETTINGS, ACTIVITY_NAMES_DOC, names)
    for rec in records:
        batch.delete(ACTIVITY_RECORDS, rec["id"])
    batch.commit()
    logger.info("category_deleted", category=name, records=len(records))
    return len(records)


def move_category(store: DocumentStore, name: str, direction: Direction) -> List[str]:
    categories = get_categories(store)
    moved = reordering.move(categories, _clean_category(name), direction)
    if moved is None:
        return categories
    reordered, _, _ = moved
    store.set(APP_SETTINGS, CATEGORIES_DOC, {"categories": reordered}, merge=True)
    return reordered


# ---- activity names ----

def add_activity_name(store: DocumentStore, category: str, name: str) -> List[str]:
    category = _clean_category(category)
    require_category(store, category)
    normalized = normalize_activity_name(name)
    if not normalized:
        raise ValidationInputError("Activity name is required")
    current = get_defined_names(store).get(category, [])
    if normalized in current:
        raise DuplicateError(f"Activity '{normalized}' already exists in '{category}'")
    current.append(normalized)
    store.set(APP_SETTINGS, ACTIVITY_NAMES_DOC, {category: current}, merge=True)
    logger.info("activity_name_added", category=category, activity=normalized)
    return current


def delete_activity_name(store: DocumentStore, category: str, name: str) -> int:
    category = _clean_category(category)
    require_category(store, category)
    current = get_defined_names(store).get(category, [])
    stored = current[find_activity(current, name)]
    records = _records_matching(store, category, stored)

    batch = store.batch()
    batch.set(APP_SETTINGS, ACTIVITY_NAMES_DOC, {category: [n for n in current if n != stored]}, merge=True)
    for rec in records:
        batch.delete(ACTIVITY_RECORDS, rec["id"])
    batch.commit()
    logger.info("activity_name_deleted", category=category, activity=stored, records=len(records))
    return len(records)


def rename_activity_name(store: DocumentStore, category: str, old_name: str, new_name: str) -> int:
    """Rename in place and carry every matching record over to the new name.

    Returns the number of records rewritten.
    """
    category = _clean_category(category)
    require_category(store, category)
    current = get_defined_names(store).get(category, [])
    index = find_activity(current, old_name)
    stored = current[index]
    normalized = normalize_activity_name(new_name)
    if not normalized:
        raise ValidationInputError("New activity name is required")
    if normalized == stored:
        return 0
    if normalized in current:
        raise DuplicateError(f"Activity '{normalized}' already exists in '{category}'")

    renamed = list(current)
    renamed[index] = normalized
    records = _records_matching(store, category, stored)

    batch = store.batch()
    batch.set(APP_SETTINGS, ACTIVITY_NAMES_DOC, {category: renamed}, merge=True)
    for rec in records:
        batch.update(ACTIVITY_RECORDS, rec["id"], {"activityName": normalized})
    batch.commit()
    logger.info("activity_name_renamed", category=category, old=stored, new=normalized, records=len(records))
    return len(records)


def move_activity_name(store: DocumentStore, category: str, name: str, direction: Direction) -> List[str]:
    category = _clean_category(category)
    require_category(store, category)
    current = get_defined_names(store).get(category, [])
    moved = reordering.move(current, current[find_activity(current, name)], direction)
    if moved is None:
        return current
    reordered, _, _ = moved
    store.set(APP_SETTINGS, ACTIVITY_NAMES_DOC, {category: reordered}, merge=True)
    return reordered
