"""
Display order of the activities that apply to one SUDS type.

Each top-level activity is followed by the activities that depend on it
(transitively), in the same category/activity order used everywhere else.
Dependency edges may form any directed graph, cycles included: a visited set
guarantees every record is emitted once and the walk always terminates.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Set, Tuple


@dataclass(frozen=True)
class ResolvedActivity:
    record: dict
    is_dependent: bool
    depth: int = 0


def activity_sort_key(
    record: dict,
    categories: Sequence[str],
    defined_names: Dict[str, Sequence[str]],
) -> Tuple[int, int, str, str]:
    """(category position, activity position, name, id).

    Unknown categories sort after all known ones; unknown activity names sort
    after every defined name of their category.
    """
    category = record.get("category")
    cat_index = categories.index(category) if category in categories else len(categories)
    names = defined_names.get(category) or []
    name = record.get("activityName") or ""
    act_index = names.index(name) if name in names else len(names)
    return cat_index, act_index, name, record.get("id") or ""


def _dependency_ids(record: dict) -> List[str]:
    seen: List[str] = []
    for dep in record.get("dependentActivities") or []:
        if dep not in seen:
            seen.append(dep)
    return seen


def resolve_display_order(
    asset_id: str,
    records: Iterable[dict],
    categories: Sequence[str],
    defined_names: Dict[str, Sequence[str]],
) -> List[ResolvedActivity]:
    applicable = [r for r in records if r.get("sudsTypeId") == asset_id and r.get("applies")]
    by_id = {r["id"]: r for r in applicable}

    def key(record: dict):
        return activity_sort_key(record, categories, defined_names)

    dependent_ids: Set[str] = {dep for r in applicable for dep in _dependency_ids(r)}
    roots = sorted((r for r in applicable if r["id"] not in dependent_ids), key=key)

    visited: Set[str] = set()
    ordered: List[ResolvedActivity] = []

    def walk(start: dict, start_is_dependent: bool) -> None:
        stack = [(start, start_is_dependent, 0)]
        while stack:
            record, is_dependent, depth = stack.pop()
            if record["id"] in visited:
                continue
            visited.add(record["id"])
            ordered.append(ResolvedActivity(record=record, is_dependent=is_dependent, depth=depth))
            children = sorted(
                (by_id[c] for c in _dependency_ids(record) if c in by_id and c not in visited),
                key=key,
            )
            # reversed so the first child is popped first
            for child in reversed(children):
                stack.append((child, True, depth + 1))

    for root in roots:
        walk(root, False)

    # Records only reachable through a cycle have no root; still list each once
    for record in sorted(applicable, key=key):
        if record["id"] not in visited:
            walk(record, True)

    return ordered
