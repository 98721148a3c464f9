# warplan/game/scheduler.py
from __future__ import annotations

import base64
import binascii
import itertools
import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional, Sequence

from warplan.config import MAP_SIZE, TS_BONUS_PER_LEVEL, TS_MAX_LEVEL
from warplan.game.travel import (
    Coordinate,
    launch_time,
    parse_arrival,
    parse_coord,
    travel_seconds,
    wrapped_distance,
)
from warplan.game.units import TROOP_DATA, UnitStat, resolve_unit

log = logging.getLogger(__name__)

DEFAULT_TRIBE = "Romans"
DEFAULT_UNIT = "Legionnaire"

_ids = itertools.count(1)


def next_mission_id() -> str:
    # Only needs to be unique within the running process.
    return f"m{next(_ids)}"


def _clamp_level(level: Any) -> int:
    try:
        lvl = int(level or 0)
    except (TypeError, ValueError):
        return 0
    return min(TS_MAX_LEVEL, max(0, lvl))


@dataclass
class Mission:
    id: str
    label: str
    tribe: str
    # slowest unit of the group; it sets the march speed
    unit_name: str
    ts_level: int = 0
    source: Coordinate = field(default_factory=lambda: Coordinate(0, 0))
    target: Coordinate = field(default_factory=lambda: Coordinate(0, 0))


@dataclass(frozen=True)
class ScheduledMission:
    mission: Mission
    unit: UnitStat
    distance: float
    travel_seconds: int
    launch: datetime

    @property
    def arrival(self) -> datetime:
        return self.launch + timedelta(seconds=self.travel_seconds)


class GroupMode(str, Enum):
    NONE = "none"
    BY_TARGET = "by_target"
    BY_HOUR = "by_hour"


# ----------------------------
# Mission list editing
# ----------------------------

def new_mission(missions: Sequence[Mission]) -> Mission:
    """
    A new row copies tribe, unit, TS level and coordinates from the last one.
    """
    last = missions[-1] if missions else None
    return Mission(
        id=next_mission_id(),
        label=f"Mission {len(missions) + 1}",
        tribe=last.tribe if last else DEFAULT_TRIBE,
        unit_name=last.unit_name if last else DEFAULT_UNIT,
        ts_level=last.ts_level if last else 0,
        source=last.source if last else Coordinate(0, 0),
        target=last.target if last else Coordinate(0, 0),
    )


def remove_mission(missions: list[Mission], mission_id: str) -> bool:
    # The plan always keeps at least one row.
    if len(missions) <= 1:
        return False
    for i, m in enumerate(missions):
        if m.id == mission_id:
            del missions[i]
            return True
    return False


def update_mission(missions: list[Mission], mission_id: str, **changes: Any) -> Optional[Mission]:
    m = next((m for m in missions if m.id == mission_id), None)
    if m is None:
        return None

    if "label" in changes:
        m.label = str(changes["label"])
    if "tribe" in changes:
        m.tribe = str(changes["tribe"])
    if "unit_name" in changes:
        m.unit_name = str(changes["unit_name"])
    if "ts_level" in changes:
        m.ts_level = _clamp_level(changes["ts_level"])

    sx = parse_coord(changes["source_x"]) if "source_x" in changes else m.source.x
    sy = parse_coord(changes["source_y"]) if "source_y" in changes else m.source.y
    tx = parse_coord(changes["target_x"]) if "target_x" in changes else m.target.x
    ty = parse_coord(changes["target_y"]) if "target_y" in changes else m.target.y
    m.source = Coordinate(sx, sy)
    m.target = Coordinate(tx, ty)
    return m


def mission_from_village(
    village: Any,
    target: Coordinate,
    *,
    tribe: str = DEFAULT_TRIBE,
    unit_name: str = DEFAULT_UNIT,
    label: Optional[str] = None,
) -> Mission:
    """Village coordinates and TS level become the mission's defaults."""
    return Mission(
        id=next_mission_id(),
        label=label or str(getattr(village, "name", "") or "Mission"),
        tribe=tribe,
        unit_name=unit_name,
        ts_level=_clamp_level(getattr(village, "ts_level", 0)),
        source=Coordinate(int(getattr(village, "x", 0) or 0), int(getattr(village, "y", 0) or 0)),
        target=target,
    )


# ----------------------------
# Schedule
# ----------------------------

def recompute(
    missions: Sequence[Mission],
    arrival: Any,
    catalog: Sequence[UnitStat] = TROOP_DATA,
    *,
    bonus_per_level: float = TS_BONUS_PER_LEVEL,
    grid_size: int = MAP_SIZE,
) -> list[ScheduledMission]:
    """
    Derive distance, travel time and launch time for every mission and
    return them ordered by launch (stable on ties).

    An arrival that does not parse yields an empty plan.
    """
    arrival_dt = parse_arrival(arrival)
    if arrival_dt is None:
        log.warning("Unparseable arrival time %r, no plan", arrival)
        return []

    out: list[ScheduledMission] = []
    for m in missions:
        unit = resolve_unit(m.tribe, m.unit_name, catalog)
        if unit is None:
            continue

        distance = wrapped_distance(m.source, m.target, grid_size)
        if not math.isfinite(distance):
            log.warning("Mission %s has non-numeric coordinates, skipped", m.id)
            continue
        secs = travel_seconds(distance, unit.speed, m.ts_level, bonus_per_level)
        out.append(
            ScheduledMission(
                mission=m,
                unit=unit,
                distance=distance,
                travel_seconds=secs,
                launch=launch_time(arrival_dt, secs),
            )
        )

    out.sort(key=lambda s: s.launch)
    log.debug("Recomputed %d of %d missions for arrival %s", len(out), len(missions), arrival_dt)
    return out


def _group_key(s: ScheduledMission, mode: GroupMode) -> str:
    if mode == GroupMode.BY_TARGET:
        return s.mission.target.key()
    if mode == GroupMode.BY_HOUR:
        return s.launch.strftime("%Y-%m-%d %H:00 UTC")
    return "All"


def group(
    scheduled: Sequence[ScheduledMission],
    mode: GroupMode | str = GroupMode.NONE,
) -> list[tuple[str, list[ScheduledMission]]]:
    """
    Bucket a schedule by target or launch hour.

    Members keep their order from `scheduled`; groups are ordered by the
    earliest launch among their members.
    """
    mode = GroupMode(mode)
    if mode == GroupMode.NONE:
        return [("All", list(scheduled))]

    buckets: dict[str, list[ScheduledMission]] = {}
    for s in scheduled:
        buckets.setdefault(_group_key(s, mode), []).append(s)

    ordered = sorted(buckets.items(), key=lambda kv: min(s.launch for s in kv[1]))
    return [(label, members) for label, members in ordered]


# ----------------------------
# Plan save / share
# ----------------------------

def _mission_to_dict(m: Mission) -> dict:
    return {
        "id": m.id,
        "label": m.label,
        "tribe": m.tribe,
        "unit_name": m.unit_name,
        "ts_level": int(m.ts_level),
        "start_x": int(m.source.x),
        "start_y": int(m.source.y),
        "end_x": int(m.target.x),
        "end_y": int(m.target.y),
    }


def _mission_from_dict(d: dict) -> Mission:
    return Mission(
        id=str(d.get("id") or next_mission_id()),
        label=str(d.get("label", "")),
        tribe=str(d.get("tribe", DEFAULT_TRIBE)),
        unit_name=str(d.get("unit_name", "")),
        ts_level=_clamp_level(d.get("ts_level", 0)),
        source=Coordinate(parse_coord(d.get("start_x")), parse_coord(d.get("start_y"))),
        target=Coordinate(parse_coord(d.get("end_x")), parse_coord(d.get("end_y"))),
    )


def plan_to_dict(missions: Sequence[Mission], arrival: Any) -> dict:
    if isinstance(arrival, datetime):
        # keep sub-second precision so the plan round-trips exactly
        arrival = parse_arrival(arrival).isoformat().replace("+00:00", "Z")
    return {
        "missions": [_mission_to_dict(m) for m in missions],
        "arrival": "" if arrival is None else str(arrival),
    }


def plan_from_dict(data: Any) -> tuple[list[Mission], str]:
    if not isinstance(data, dict) or not isinstance(data.get("missions"), list):
        raise ValueError("plan must be an object with a 'missions' list")
    try:
        missions = [_mission_from_dict(d) for d in data["missions"]]
    except AttributeError as e:
        raise ValueError("plan missions must be objects") from e
    return missions, str(data.get("arrival") or "")


def encode_plan(missions: Sequence[Mission], arrival: Any) -> str:
    raw = json.dumps(plan_to_dict(missions, arrival), separators=(",", ":"), ensure_ascii=False)
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_plan(text: str) -> tuple[list[Mission], str]:
    s = (text or "").strip().lstrip("#")
    # tolerate links that lost their padding
    s += "=" * (-len(s) % 4)
    try:
        raw = base64.urlsafe_b64decode(s.encode("ascii"))
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise ValueError("invalid plan encoding") from e
    return plan_from_dict(data)
