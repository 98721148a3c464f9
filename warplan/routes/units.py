# warplan/routes/units.py
from __future__ import annotations

from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query

from warplan.game.units import (
    TRAINING_TIME_REDUCTION_BARRACKS,
    TRAINING_TIME_REDUCTION_COMMON,
    TRIBES,
    TROOP_DATA,
    find_unit,
    training_time_for_level,
    units_for_tribe,
)

router = APIRouter(prefix="/units", tags=["units"])


def _unit_to_dict(u) -> dict:
    d = asdict(u)
    d["total_cost"] = u.total_cost
    return d


@router.get("/tribes")
def list_tribes() -> dict:
    return {"tribes": list(TRIBES)}


@router.get("")
def list_units(tribe: Optional[str] = Query(default=None)) -> dict:
    if tribe is None:
        units = list(TROOP_DATA)
    else:
        if tribe not in TRIBES:
            raise HTTPException(status_code=404, detail={"error": "Unknown tribe", "tribe": tribe})
        units = units_for_tribe(tribe)
    return {"units": [_unit_to_dict(u) for u in units], "count": len(units)}


_REDUCTION_TABLES = {
    "barracks": TRAINING_TIME_REDUCTION_BARRACKS,
    "common": TRAINING_TIME_REDUCTION_COMMON,
}


@router.get("/{tribe}/{unit_name}/training")
def unit_training_time(
    tribe: str,
    unit_name: str,
    level: int = Query(default=1, ge=0, le=20),
    building: Literal["barracks", "common"] = Query(default="barracks"),
) -> dict:
    unit = find_unit(tribe, unit_name)
    if unit is None:
        raise HTTPException(status_code=404, detail={"error": "Unknown unit", "tribe": tribe, "unit": unit_name})
    return {
        "tribe": unit.tribe,
        "unit": unit.unit,
        "level": int(level),
        "building": building,
        "base_seconds": unit.training_time_s,
        "seconds": training_time_for_level(unit, level, _REDUCTION_TABLES[building]),
    }
