# warplan/routes/planner.py
from __future__ import annotations

from typing import Literal, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from warplan.config import TS_MAX_LEVEL
from warplan.database import get_db
from warplan.game.defense import DefenderVillage, plan_reinforcements
from warplan.game.scheduler import (
    DEFAULT_TRIBE,
    DEFAULT_UNIT,
    Mission,
    ScheduledMission,
    decode_plan,
    encode_plan,
    group,
    mission_from_village,
    next_mission_id,
    plan_to_dict,
    recompute,
)
from warplan.game.travel import (
    Coordinate,
    format_duration,
    format_utc,
    parse_arrival,
    parse_coord,
    utc_now,
)
from warplan.models.user import User
from warplan.routes.auth import get_current_user
from warplan.store import SqlVillageStore

router = APIRouter(prefix="/planner", tags=["planner"])

# Form fields arrive as numbers or raw text ("", "-", "12")
CoordField = Union[int, str, None]


class MissionIn(BaseModel):
    id: Optional[str] = None
    label: str = ""
    tribe: str = DEFAULT_TRIBE
    unit_name: str = DEFAULT_UNIT
    ts_level: int = Field(default=0, ge=0, le=TS_MAX_LEVEL)
    start_x: CoordField = 0
    start_y: CoordField = 0
    end_x: CoordField = 0
    end_y: CoordField = 0

    def to_mission(self) -> Mission:
        return Mission(
            id=self.id or next_mission_id(),
            label=self.label,
            tribe=self.tribe,
            unit_name=self.unit_name,
            ts_level=self.ts_level,
            source=Coordinate(parse_coord(self.start_x), parse_coord(self.start_y)),
            target=Coordinate(parse_coord(self.end_x), parse_coord(self.end_y)),
        )


class ScheduleRequest(BaseModel):
    arrival: str
    group: Literal["none", "by_target", "by_hour"] = "none"
    missions: list[MissionIn] = Field(default_factory=list)


class PlanEncodeRequest(BaseModel):
    arrival: str = ""
    missions: list[MissionIn] = Field(default_factory=list)


class PlanDecodeRequest(BaseModel):
    plan: str


class FromVillagesRequest(BaseModel):
    target_x: CoordField = 0
    target_y: CoordField = 0
    tribe: str = DEFAULT_TRIBE
    unit_name: str = DEFAULT_UNIT


class DefenderIn(BaseModel):
    id: str
    name: str = ""
    x: CoordField = 0
    y: CoordField = 0
    ts_level: int = Field(default=0, ge=0, le=TS_MAX_LEVEL)
    tribe: str = DEFAULT_TRIBE


class DefenseRequest(BaseModel):
    target_x: CoordField = 0
    target_y: CoordField = 0
    arrival: str
    standard_bonus_pct: float = Field(default=0, ge=0, le=100)
    boots_bonus_pct: float = Field(default=0, ge=0, le=100)
    villages: list[DefenderIn] = Field(default_factory=list)


class MyDefenseRequest(BaseModel):
    target_x: CoordField = 0
    target_y: CoordField = 0
    arrival: str
    standard_bonus_pct: float = Field(default=0, ge=0, le=100)
    boots_bonus_pct: float = Field(default=0, ge=0, le=100)
    # village_id -> tribe; unspecified villages are Romans
    tribes: dict[str, str] = Field(default_factory=dict)


def _scheduled_to_dict(s: ScheduledMission) -> dict:
    m = s.mission
    return {
        "id": m.id,
        "label": m.label,
        "tribe": m.tribe,
        "unit_name": s.unit.unit,
        "requested_unit": m.unit_name,
        "ts_level": m.ts_level,
        "source": {"x": m.source.x, "y": m.source.y},
        "target": {"x": m.target.x, "y": m.target.y},
        "distance": round(s.distance, 2),
        "travel_seconds": int(s.travel_seconds),
        "travel": format_duration(s.travel_seconds),
        "launch_at": format_utc(s.launch),
        "arrives_at": format_utc(s.arrival),
    }


def _mission_to_dict(m: Mission) -> dict:
    return plan_to_dict([m], None)["missions"][0]


def _defense_response(results: list, arrival: str) -> dict:
    arrival_dt = parse_arrival(arrival)
    return {
        "valid": arrival_dt is not None,
        "arrival": format_utc(arrival_dt) if arrival_dt else None,
        "villages": [
            {
                "id": r.village.id,
                "name": r.village.name,
                "tribe": r.village.tribe,
                "ts_level": r.village.ts_level,
                "distance": round(r.distance, 2),
                "possible_count": r.possible_count,
                "units": [
                    {
                        "unit_name": u.unit_name,
                        "travel_seconds": u.travel_seconds,
                        "travel": format_duration(u.travel_seconds),
                        "launch_at": format_utc(u.launch),
                        "on_time": u.on_time,
                    }
                    for u in r.units
                ],
            }
            for r in results
        ],
    }


@router.get("/now")
def server_now() -> dict:
    return {"now": format_utc(utc_now())}


@router.post("/schedule")
def schedule(payload: ScheduleRequest) -> dict:
    """
    Recompute the whole attack plan. Manual "recalculate" and
    automatic refresh both land here.
    """
    missions = [m.to_mission() for m in payload.missions]
    scheduled = recompute(missions, payload.arrival)
    arrival_dt = parse_arrival(payload.arrival)

    return {
        "valid": arrival_dt is not None,
        "arrival": format_utc(arrival_dt) if arrival_dt else None,
        "count": len(scheduled),
        "groups": [
            {"label": label, "missions": [_scheduled_to_dict(s) for s in members]}
            for label, members in group(scheduled, payload.group)
        ],
    }


@router.post("/missions/from-villages")
def missions_from_villages(
    payload: FromVillagesRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    target = Coordinate(parse_coord(payload.target_x), parse_coord(payload.target_y))
    villages = SqlVillageStore(db, current_user).list_villages()
    missions = [
        mission_from_village(v, target, tribe=payload.tribe, unit_name=payload.unit_name)
        for v in villages
    ]
    return {"missions": [_mission_to_dict(m) for m in missions]}


@router.post("/plan/encode")
def plan_encode(payload: PlanEncodeRequest) -> dict:
    missions = [m.to_mission() for m in payload.missions]
    return {"plan": encode_plan(missions, payload.arrival)}


@router.post("/plan/decode")
def plan_decode(payload: PlanDecodeRequest) -> dict:
    try:
        missions, arrival = decode_plan(payload.plan)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "arrival": arrival,
        "missions": [_mission_to_dict(m) for m in missions],
    }


@router.post("/defense")
def defense(payload: DefenseRequest) -> dict:
    villages = [
        DefenderVillage(
            id=v.id,
            name=v.name,
            position=Coordinate(parse_coord(v.x), parse_coord(v.y)),
            ts_level=v.ts_level,
            tribe=v.tribe,
        )
        for v in payload.villages
    ]
    results = plan_reinforcements(
        villages,
        Coordinate(parse_coord(payload.target_x), parse_coord(payload.target_y)),
        payload.arrival,
        standard_bonus_pct=payload.standard_bonus_pct,
        boots_bonus_pct=payload.boots_bonus_pct,
    )
    return _defense_response(results, payload.arrival)


@router.post("/defense/mine")
def my_defense(
    payload: MyDefenseRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    villages = [
        DefenderVillage(
            id=str(v.id),
            name=v.name,
            position=Coordinate(v.x, v.y),
            ts_level=v.ts_level,
            tribe=payload.tribes.get(str(v.id), DEFAULT_TRIBE),
        )
        for v in SqlVillageStore(db, current_user).list_villages()
    ]
    results = plan_reinforcements(
        villages,
        Coordinate(parse_coord(payload.target_x), parse_coord(payload.target_y)),
        payload.arrival,
        standard_bonus_pct=payload.standard_bonus_pct,
        boots_bonus_pct=payload.boots_bonus_pct,
    )
    return _defense_response(results, payload.arrival)
