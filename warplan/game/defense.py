# warplan/game/defense.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from warplan.config import MAP_SIZE, TS_BONUS_PER_LEVEL
from warplan.game.travel import (
    Coordinate,
    launch_time,
    parse_arrival,
    travel_seconds,
    utc_now,
    wrapped_distance,
)
from warplan.game.units import TROOP_DATA, UnitStat, units_for_tribe

log = logging.getLogger(__name__)


@dataclass
class DefenderVillage:
    id: str
    name: str
    position: Coordinate
    ts_level: int = 0
    tribe: str = "Romans"


@dataclass(frozen=True)
class UnitTiming:
    unit_name: str
    travel_seconds: int
    launch: datetime
    on_time: bool


@dataclass
class VillageReinforcement:
    village: DefenderVillage
    distance: float
    units: list[UnitTiming] = field(default_factory=list)

    @property
    def possible_count(self) -> int:
        return sum(1 for u in self.units if u.on_time)


def plan_reinforcements(
    villages: Sequence[DefenderVillage],
    target: Coordinate,
    arrival: Any,
    *,
    now: Any = None,
    standard_bonus_pct: float = 0,
    boots_bonus_pct: float = 0,
    catalog: Sequence[UnitStat] = TROOP_DATA,
    bonus_per_level: float = TS_BONUS_PER_LEVEL,
    grid_size: int = MAP_SIZE,
) -> list[VillageReinforcement]:
    """
    For every village, time each unit of its tribe to land on `target` at
    `arrival` and flag whether it can still leave after `now`.

    The war standard speeds up the whole march; boots stack with the TS
    multiplier past the threshold. Villages that can send the most unit
    types come first.
    """
    arrival_dt = parse_arrival(arrival)
    if arrival_dt is None:
        log.warning("Unparseable arrival time %r, no reinforcement plan", arrival)
        return []

    now_dt = parse_arrival(now) if now is not None else None
    if now_dt is None:
        if now is not None:
            log.warning("Unparseable current time %r, using the clock", now)
        now_dt = utc_now()

    results: list[VillageReinforcement] = []
    for v in villages:
        distance = wrapped_distance(v.position, target, grid_size)
        if not math.isfinite(distance):
            log.warning("Village %s has non-numeric coordinates, skipped", v.id)
            continue
        row = VillageReinforcement(village=v, distance=distance)

        for unit in units_for_tribe(v.tribe, catalog):
            secs = travel_seconds(
                distance,
                unit.speed,
                v.ts_level,
                bonus_per_level,
                base_speed_pct=standard_bonus_pct,
                after_threshold_pct=boots_bonus_pct,
            )
            launch = launch_time(arrival_dt, secs)
            row.units.append(
                UnitTiming(
                    unit_name=unit.unit,
                    travel_seconds=secs,
                    launch=launch,
                    on_time=launch > now_dt,
                )
            )

        results.append(row)

    results.sort(key=lambda r: r.possible_count, reverse=True)
    return results
