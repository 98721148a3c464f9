# warplan/game/resources.py
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional, Sequence

from warplan.game.units import TROOP_DATA, UnitStat, find_unit, find_unit_any_tribe

RESOURCE_KEYS = ("wood", "clay", "iron", "crop")


@dataclass
class ResourceTotals:
    wood: int = 0
    clay: int = 0
    iron: int = 0
    crop: float = 0
    upkeep: int = 0
    training_time: int = 0
    sum_resources: float = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ResourcePool:
    wood: float = 0
    clay: float = 0
    iron: float = 0
    crop: float = 0

    @property
    def total(self) -> float:
        return self.wood + self.clay + self.iron + self.crop


@dataclass
class Allocation:
    standard: list[tuple[str, int]] = field(default_factory=list)
    gold: list[tuple[str, int]] = field(default_factory=list)
    total_sum: float = 0
    available_for_gold: float = 0


def _lookup(
    unit_name: str,
    tribe: Optional[str],
    catalog: Sequence[UnitStat],
) -> Optional[UnitStat]:
    name = (unit_name or "").strip()
    if not name:
        return None
    if tribe:
        return find_unit(tribe, name, catalog)
    return find_unit_any_tribe(name, catalog)


# ----------------------------
# Forward: units -> resources
# ----------------------------

def forward_totals(
    items: Iterable[tuple[str, int]],
    catalog: Sequence[UnitStat] = TROOP_DATA,
    hourly_crop_reserve: float = 0,
    tribe: Optional[str] = None,
) -> ResourceTotals:
    """
    Sum the cost of a training order.

    Unknown or blank unit names contribute nothing. One hour of crop
    consumption is added on top so the totals are safe to spend.
    """
    totals = ResourceTotals()

    for unit_name, count in items:
        unit = _lookup(unit_name, tribe, catalog)
        if unit is None:
            continue
        n = max(0, int(count or 0))

        totals.wood += unit.wood * n
        totals.clay += unit.clay * n
        totals.iron += unit.iron * n
        totals.crop += unit.crop * n
        totals.upkeep += unit.crop_upkeep * n
        totals.training_time += unit.training_time_s * n
        totals.sum_resources += unit.sum_resources * n

    reserve = max(0, hourly_crop_reserve or 0)
    totals.crop += reserve
    totals.sum_resources += reserve
    return totals


# ----------------------------
# Backward: resources -> units
# ----------------------------

def _standard_count(unit: UnitStat, budgets: dict[str, float]) -> int:
    # Restrictive resource: whichever of the four runs out first caps the count.
    limits = [
        budgets[k] / getattr(unit, k)
        for k in RESOURCE_KEYS
        if getattr(unit, k) > 0
    ]
    if not limits:
        return 0
    return max(0, math.floor(min(limits)))


def _gold_count(unit: UnitStat, budget: float) -> int:
    cost = unit.total_cost
    if cost <= 0:
        return 0
    return max(0, math.floor(budget / cost))


def backward_allocation(
    pool: ResourcePool,
    crop_reserve: float,
    allocations: Iterable[tuple[str, float]],
    tribe: Optional[str] = None,
    catalog: Sequence[UnitStat] = TROOP_DATA,
) -> Allocation:
    """
    How many units each percentage share of `pool` can train.

    standard: every resource is split by the percentage and the scarcest
              one decides (crop after the reserve is set aside).
    gold:     resources are fungible (NPC trade), only the total matters.

    Percentages are used as given; they are not required to sum to 100.
    """
    reserve = max(0, crop_reserve or 0)
    effective_crop = max(0, pool.crop - reserve)
    total_sum = pool.total
    available_for_gold = max(0, total_sum - reserve)

    result = Allocation(total_sum=total_sum, available_for_gold=available_for_gold)

    for unit_name, pct in allocations:
        unit = _lookup(unit_name, tribe, catalog)
        if unit is None:
            continue
        share = (pct or 0) / 100

        budgets = {
            "wood": pool.wood * share,
            "clay": pool.clay * share,
            "iron": pool.iron * share,
            "crop": effective_crop * share,
        }
        result.standard.append((unit.unit, _standard_count(unit, budgets)))
        result.gold.append((unit.unit, _gold_count(unit, available_for_gold * share)))

    return result


def clamp_percentage(percentages: Sequence[float], index: int, value: float) -> list[float]:
    """
    Apply a single slider edit without letting the total exceed 100.
    Only the edited value is reduced; the others are left alone.
    """
    out = list(percentages)
    others = sum(p for i, p in enumerate(out) if i != index)
    cap = max(0, 100 - others)
    out[index] = min(max(0, value), cap)
    return out
