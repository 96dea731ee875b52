"""
Coverage and validation summaries.

Both views are pure functions of a DashboardSnapshot; nothing is cached between
calls. Records with ``applies`` off never reach a tally.
"""
from collections import Counter
from typing import Dict, List, Optional

from ..errors import NotFoundError
from ..models.domain import ProposalStatus, ValidationStatus, canonical_status
from .read_model import DashboardSnapshot
from .resolver import resolve_display_order


def contract_view(snapshot: DashboardSnapshot, contract_id: str) -> dict:
    contract = snapshot.contract(contract_id)
    if contract is None:
        raise NotFoundError(f"Contract '{contract_id}' not found")
    name = contract.get("name")

    rows: List[dict] = []
    for asset in snapshot.assets:
        resolved = resolve_display_order(asset["id"], snapshot.records, snapshot.categories, snapshot.defined_names)
        for entry in resolved:
            record = entry.record
            if name not in (record.get("involvedContracts") or []):
                continue
            rows.append({
                "recordId": record["id"],
                "assetId": asset["id"],
                "assetName": asset.get("name"),
                "category": record.get("category"),
                "activityName": record.get("activityName"),
                "status": record.get("status"),
                "comment": record.get("comment") or "",
                "frequency": record.get("frequency") or "",
                "isDependent": entry.is_dependent,
                "validationStatus": record.get("validationStatus"),
                "validatorComment": record.get("validatorComment") or "",
                "validatedBy": record.get("validatedBy"),
            })
    return {"contract": contract, "rows": rows}


def _tally(counter: Counter, keys: List[str]) -> List[dict]:
    total = sum(counter.values())
    out = []
    for key in keys:
        count = counter.get(key, 0)
        out.append({
            "value": key,
            "count": count,
            "percent": round(100.0 * count / total, 1) if total else 0.0,
        })
    return out


def pivot_view(snapshot: DashboardSnapshot, category: Optional[str] = None) -> dict:
    """Asset x activity grid plus status and validation tallies.

    Status values are folded to their canonical form (``verde`` counts as
    ``included``); anything unrecognised counts as ``unset``.
    """
    categories = [c for c in snapshot.categories if category is None or c == category]
    asset_ids = {a["id"] for a in snapshot.assets}

    columns = [
        {"category": cat, "activityName": name}
        for cat in categories
        for name in snapshot.defined_names.get(cat, [])
    ]
    defined = {(col["category"], col["activityName"]) for col in columns}

    # Tallies only count records that own a grid cell
    applicable: Dict[tuple, dict] = {}
    for record in snapshot.records:
        if not record.get("applies") or record.get("sudsTypeId") not in asset_ids:
            continue
        if (record.get("category"), record.get("activityName")) not in defined:
            continue
        key = (record["sudsTypeId"], record["category"], record.get("activityName"))
        applicable.setdefault(key, record)

    status_keys = [s.value for s in ProposalStatus]
    validation_keys = [v.value for v in ValidationStatus]
    status_counts: Counter = Counter()
    validation_counts: Counter = Counter()
    per_asset: List[dict] = []
    grid: List[dict] = []

    for asset in snapshot.assets:
        cells = []
        for col in columns:
            record = applicable.get((asset["id"], col["category"], col["activityName"]))
            cells.append({
                **col,
                "recordId": record["id"] if record else None,
                "status": canonical_status(record.get("status")).value if record else None,
            })
        grid.append({"assetId": asset["id"], "assetName": asset.get("name"), "cells": cells})

        asset_status: Counter = Counter()
        asset_validation: Counter = Counter()
        for key, record in applicable.items():
            if key[0] != asset["id"]:
                continue
            asset_status[canonical_status(record.get("status")).value] += 1
            validation = record.get("validationStatus")
            asset_validation[validation if validation in validation_keys else ValidationStatus.PENDING.value] += 1
        status_counts.update(asset_status)
        validation_counts.update(asset_validation)
        per_asset.append({
            "assetId": asset["id"],
            "assetName": asset.get("name"),
            "status": {k: asset_status.get(k, 0) for k in status_keys},
            "validation": {k: asset_validation.get(k, 0) for k in validation_keys},
        })

    return {
        "category": category,
        "columns": columns,
        "grid": grid,
        "statusTally": _tally(status_counts, status_keys),
        "validationTally": _tally(validation_counts, validation_keys),
        "perAsset": per_asset,
        "total": sum(status_counts.values()),
    }
