# warplan/game/units.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitStat:
    tribe: str
    unit: str
    attack: int
    def_inf: int
    def_cav: int
    # tiles per hour
    speed: int
    carry: int
    wood: int
    clay: int
    iron: int
    crop: int
    sum_resources: int
    crop_upkeep: int
    training_time_s: int

    @property
    def total_cost(self) -> int:
        return self.wood + self.clay + self.iron + self.crop


TROOP_DATA: tuple[UnitStat, ...] = (
    UnitStat("Romans", "Legionnaire", 40, 35, 50, 6, 50, 120, 100, 150, 30, 400, 1, 1600),
    UnitStat("Romans", "Praetorian", 30, 65, 35, 5, 20, 100, 130, 160, 70, 460, 1, 1760),
    UnitStat("Romans", "Imperian", 70, 40, 25, 7, 50, 150, 160, 210, 80, 600, 1, 1920),
    UnitStat("Romans", "Equites Legati", 0, 20, 10, 16, 0, 140, 160, 20, 40, 360, 2, 1360),
    UnitStat("Romans", "Equites Imperatoris", 120, 65, 50, 14, 100, 550, 440, 320, 100, 1410, 3, 2640),
    UnitStat("Romans", "Equites Caesaris", 180, 80, 105, 10, 70, 550, 640, 800, 180, 2170, 4, 3520),
    UnitStat("Romans", "Battering Ram", 60, 30, 75, 4, 0, 900, 360, 500, 70, 1830, 3, 4600),
    UnitStat("Romans", "Fire Catapult", 75, 60, 10, 3, 0, 950, 1350, 600, 90, 2990, 6, 9000),
    UnitStat("Romans", "Senator", 50, 40, 30, 4, 0, 30750, 27200, 45000, 37500, 140450, 5, 90660),
    UnitStat("Romans", "Settler", 0, 80, 80, 5, 3000, 4600, 4200, 5800, 4400, 19000, 1, 26880),
    UnitStat("Gauls", "Phalanx", 15, 40, 50, 7, 35, 100, 130, 55, 30, 315, 1, 1040),
    UnitStat("Gauls", "Swordsman", 65, 35, 20, 6, 45, 140, 150, 185, 60, 535, 1, 1440),
    UnitStat("Gauls", "Pathfinder", 0, 20, 10, 17, 0, 170, 150, 20, 40, 380, 2, 1360),
    UnitStat("Gauls", "Theutates Thunder", 100, 25, 40, 19, 75, 350, 450, 230, 60, 1090, 2, 2480),
    UnitStat("Gauls", "Druidrider", 45, 115, 55, 16, 35, 360, 330, 280, 120, 1090, 2, 2560),
    UnitStat("Gauls", "Haeduan", 140, 60, 165, 13, 65, 500, 620, 675, 170, 1965, 3, 3120),
    UnitStat("Gauls", "Ram", 50, 30, 105, 4, 0, 950, 555, 330, 75, 1910, 3, 5000),
    UnitStat("Gauls", "Trebuchet", 70, 45, 10, 3, 0, 960, 1450, 630, 90, 3130, 6, 9000),
    UnitStat("Gauls", "Chieftain", 40, 50, 50, 5, 0, 30750, 45400, 31000, 37500, 144650, 4, 90700),
    UnitStat("Gauls", "Settler", 0, 80, 80, 5, 3000, 4400, 5600, 4200, 3900, 18100, 1, 22700),
    UnitStat("Teutons", "Maceman", 40, 20, 5, 7, 60, 95, 75, 40, 40, 250, 1, 720),
    UnitStat("Teutons", "Spearman", 10, 35, 60, 7, 40, 145, 70, 85, 40, 340, 1, 1120),
    UnitStat("Teutons", "Axeman", 60, 30, 30, 6, 50, 130, 120, 170, 70, 490, 1, 1200),
    UnitStat("Teutons", "Scout", 0, 10, 5, 9, 0, 160, 100, 50, 50, 360, 1, 1120),
    UnitStat("Teutons", "Paladin", 55, 100, 40, 10, 110, 370, 270, 290, 75, 1005, 2, 2400),
    UnitStat("Teutons", "Teutonic Knight", 150, 50, 75, 9, 80, 450, 515, 480, 80, 1525, 3, 2960),
    UnitStat("Teutons", "Ram", 65, 30, 80, 4, 0, 1000, 300, 350, 70, 1720, 3, 4200),
    UnitStat("Teutons", "Catapult", 50, 60, 10, 3, 0, 900, 1200, 600, 60, 2760, 6, 9000),
    UnitStat("Teutons", "Chief", 40, 60, 40, 4, 0, 35500, 26600, 25000, 27200, 114300, 4, 70500),
    UnitStat("Teutons", "Settler", 10, 80, 80, 5, 3000, 5800, 4400, 4600, 5200, 20000, 1, 31000),
    UnitStat("Egyptians", "Slave Militia", 10, 30, 20, 7, 15, 45, 60, 30, 15, 150, 1, 530),
    UnitStat("Egyptians", "Ash Warden", 30, 55, 40, 6, 50, 115, 100, 145, 60, 420, 1, 1380),
    UnitStat("Egyptians", "Khopesh Warrior", 65, 50, 20, 7, 45, 170, 180, 220, 80, 650, 1, 1440),
    UnitStat("Egyptians", "Sopdu Explorer", 0, 20, 10, 16, 0, 170, 150, 20, 40, 380, 2, 1360),
    UnitStat("Egyptians", "Anhur Guard", 50, 110, 50, 15, 50, 360, 330, 280, 120, 1090, 2, 2560),
    UnitStat("Egyptians", "Resheph Chariot", 110, 120, 150, 10, 70, 450, 560, 610, 180, 1800, 3, 3240),
    UnitStat("Egyptians", "Ram", 55, 30, 95, 4, 0, 995, 575, 340, 80, 1990, 3, 4800),
    UnitStat("Egyptians", "Stone Catapult", 65, 55, 10, 3, 0, 980, 1510, 660, 100, 3250, 6, 9000),
    UnitStat("Egyptians", "Nomarch", 40, 50, 50, 4, 0, 34000, 50000, 34000, 42000, 160000, 4, 90700),
    UnitStat("Egyptians", "Settler", 0, 80, 80, 5, 3000, 5040, 6510, 4830, 4620, 21000, 1, 24800),
    UnitStat("Huns", "Mercenary", 35, 40, 30, 6, 50, 130, 80, 40, 40, 290, 1, 810),
    UnitStat("Huns", "Bowman", 50, 30, 10, 6, 30, 140, 110, 60, 60, 370, 1, 1120),
    UnitStat("Huns", "Spotter", 0, 20, 10, 19, 0, 170, 150, 20, 40, 380, 2, 1360),
    UnitStat("Huns", "Steppe Rider", 120, 30, 15, 16, 75, 290, 370, 190, 45, 895, 2, 2400),
    UnitStat("Huns", "Marksman", 110, 80, 70, 15, 105, 320, 350, 330, 50, 1050, 2, 2480),
    UnitStat("Huns", "Marauder", 180, 60, 40, 14, 80, 450, 560, 610, 140, 1760, 3, 2990),
    UnitStat("Huns", "Ram", 65, 30, 90, 4, 0, 1060, 330, 360, 70, 1820, 3, 4400),
    UnitStat("Huns", "Catapult", 45, 55, 10, 3, 0, 950, 1280, 620, 60, 2910, 6, 9000),
    UnitStat("Huns", "Logades", 50, 40, 30, 5, 0, 37200, 27600, 25200, 27600, 117600, 4, 90700),
    UnitStat("Huns", "Settler", 10, 80, 80, 5, 3000, 6100, 4600, 4800, 5400, 20900, 1, 28950),
    UnitStat("Spartans", "Hoplite", 50, 35, 30, 6, 60, 110, 185, 110, 35, 440, 1, 1700),
    UnitStat("Spartans", "Sentinel", 0, 40, 22, 9, 0, 185, 150, 35, 75, 445, 1, 1232),
    UnitStat("Spartans", "Shieldsman", 40, 85, 45, 8, 40, 145, 95, 245, 45, 530, 1, 1936),
    UnitStat("Spartans", "Twinsteel Therion", 90, 55, 40, 6, 50, 130, 200, 400, 65, 795, 1, 2112),
    UnitStat("Spartans", "Elpida Rider", 55, 120, 90, 16, 110, 555, 445, 330, 110, 1440, 2, 2816),
    UnitStat("Spartans", "Corinthian Crusher", 195, 80, 75, 9, 80, 660, 495, 995, 165, 2315, 3, 3432),
    UnitStat("Spartans", "Ram", 65, 30, 80, 4, 0, 525, 260, 790, 130, 1705, 3, 4620),
    UnitStat("Spartans", "Ballista", 50, 60, 10, 3, 0, 550, 1240, 825, 135, 2750, 6, 9900),
    UnitStat("Spartans", "Ephor", 40, 60, 40, 4, 0, 33450, 30665, 36240, 13935, 114290, 4, 77550),
    UnitStat("Spartans", "Settler", 10, 80, 80, 5, 3000, 5115, 5580, 6045, 3255, 19995, 1, 34100),
    UnitStat("Vikings", "Thrall", 45, 22, 5, 7, 55, 95, 80, 50, 40, 265, 1, 800),
    UnitStat("Vikings", "Shield Maiden", 20, 50, 30, 7, 40, 125, 70, 85, 40, 320, 1, 1080),
    UnitStat("Vikings", "Berserker", 70, 30, 25, 5, 75, 235, 220, 200, 70, 725, 2, 1550),
    UnitStat("Vikings", "Heimdall’s Eye", 0, 10, 5, 9, 0, 155, 95, 50, 50, 350, 1, 1120),
    UnitStat("Vikings", "Huskarl Rider", 45, 95, 100, 12, 110, 385, 295, 290, 85, 1055, 2, 2650),
    UnitStat("Vikings", "Valkyrie’s Blessing", 160, 50, 75, 9, 80, 475, 535, 515, 100, 1625, 2, 3060),
    UnitStat("Vikings", "Ram", 65, 30, 80, 4, 0, 950, 325, 375, 70, 1720, 2, 4200),
    UnitStat("Vikings", "Catapult", 50, 60, 10, 3, 0, 850, 1225, 625, 60, 2760, 6, 9000),
    UnitStat("Vikings", "Jarl", 40, 40, 60, 5, 0, 35500, 26600, 25000, 27200, 114300, 4, 70500),
    UnitStat("Vikings", "Settler", 10, 80, 80, 5, 3000, 5800, 4400, 4800, 4800, 20000, 1, 31000),
)

TRIBES: tuple[str, ...] = (
    "Romans", "Gauls", "Teutons", "Egyptians", "Huns", "Spartans", "Vikings",
)

# Training time multipliers, index 0 = level 1 ... index 19 = level 20.
TRAINING_TIME_REDUCTION_COMMON: tuple[float, ...] = (
    1.00, 0.90, 0.81, 0.73, 0.66, 0.59, 0.53, 0.48, 0.43, 0.39,
    0.35, 0.31, 0.28, 0.25, 0.23, 0.21, 0.19, 0.17, 0.15, 0.14,
)

TRAINING_TIME_REDUCTION_BARRACKS: tuple[float, ...] = (
    1.0000, 0.9000, 0.8100, 0.7290, 0.6561, 0.5905, 0.5314, 0.4783, 0.4305, 0.3874,
    0.3487, 0.3138, 0.2824, 0.2542, 0.2288, 0.2059, 0.1853, 0.1668, 0.1501, 0.1351,
)


def units_for_tribe(tribe: str, catalog: Iterable[UnitStat] = TROOP_DATA) -> list[UnitStat]:
    return [u for u in catalog if u.tribe == tribe]


def find_unit(
    tribe: str,
    unit_name: str,
    catalog: Iterable[UnitStat] = TROOP_DATA,
) -> Optional[UnitStat]:
    for u in catalog:
        if u.tribe == tribe and u.unit == unit_name:
            return u
    return None


def find_unit_any_tribe(
    unit_name: str,
    catalog: Iterable[UnitStat] = TROOP_DATA,
) -> Optional[UnitStat]:
    """
    Name-only lookup. Some names ("Settler", "Ram") exist in several tribes;
    the first row in catalog order wins.
    """
    name = (unit_name or "").strip()
    if not name:
        return None
    for u in catalog:
        if u.unit == name:
            return u
    return None


def resolve_unit(
    tribe: str,
    unit_name: str,
    catalog: Sequence[UnitStat] = TROOP_DATA,
) -> Optional[UnitStat]:
    """
    Exact (tribe, unit) match, else the first unit of the tribe.
    Returns None only when the tribe has no units at all.
    """
    unit = find_unit(tribe, unit_name, catalog)
    if unit is not None:
        return unit

    roster = units_for_tribe(tribe, catalog)
    if not roster:
        log.warning("No units for tribe %r", tribe)
        return None

    log.warning(
        "Unknown unit %r for tribe %r, falling back to %r",
        unit_name, tribe, roster[0].unit,
    )
    return roster[0]


def training_time_for_level(
    unit: UnitStat,
    building_level: int,
    table: Sequence[float] = TRAINING_TIME_REDUCTION_BARRACKS,
) -> int:
    # Level 0 (not built) is treated like level 1; levels beyond the table clamp.
    lvl = min(len(table), max(1, int(building_level or 1)))
    return int(round(unit.training_time_s * table[lvl - 1]))
