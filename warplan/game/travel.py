# warplan/game/travel.py
from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, NamedTuple, Optional

from warplan.config import MAP_SIZE, TS_BONUS_PER_LEVEL, TS_THRESHOLD_TILES

_INT_RE = re.compile(r"^[+-]?\d+$")


class Coordinate(NamedTuple):
    x: int
    y: int

    def key(self) -> str:
        return f"{self.x}|{self.y}"


# ----------------------------
# Engine
# ----------------------------

def wrapped_distance(a: Coordinate, b: Coordinate, grid_size: int = MAP_SIZE) -> float:
    """
    Euclidean distance on a torus: each axis takes the shorter way around.
    (-200, 0) -> (200, 0) on a 401 map is 1 tile.
    """
    dx = abs(a[0] - b[0])
    dy = abs(a[1] - b[1])

    if dx > grid_size / 2:
        dx = grid_size - dx
    if dy > grid_size / 2:
        dy = grid_size - dy

    return math.sqrt(dx * dx + dy * dy)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def travel_hours(
    distance: float,
    base_speed: float,
    bonus_level: int = 0,
    bonus_per_level: float = TS_BONUS_PER_LEVEL,
    *,
    threshold: float = TS_THRESHOLD_TILES,
    base_speed_pct: float = 0,
    after_threshold_pct: float = 0,
) -> float:
    """
    Piecewise march time in hours.

    The first `threshold` tiles are walked at base speed; the rest at
    base * (1 + level * bonus_per_level + after_threshold_pct/100).
    base_speed_pct scales the base speed for the whole march.
    """
    if not base_speed or base_speed <= 0:
        raise ValueError(f"base_speed must be > 0, got {base_speed!r}")

    speed = base_speed * (1 + base_speed_pct / 100.0)

    if distance <= threshold:
        return distance / speed

    after_mult = 1 + bonus_level * bonus_per_level + after_threshold_pct / 100.0
    return threshold / speed + (distance - threshold) / (speed * after_mult)


def travel_seconds(
    distance: float,
    base_speed: float,
    bonus_level: int = 0,
    bonus_per_level: float = TS_BONUS_PER_LEVEL,
    **kwargs: Any,
) -> int:
    """Whole seconds, rounded half-up. `distance` must be finite."""
    if not math.isfinite(distance):
        raise ValueError(f"distance must be finite, got {distance!r}")
    hours = travel_hours(distance, base_speed, bonus_level, bonus_per_level, **kwargs)
    return _round_half_up(hours * 3600)


def launch_time(arrival: datetime, travel_secs: int) -> datetime:
    return arrival - timedelta(seconds=int(travel_secs))


# ----------------------------
# Input parsing (caller side)
# ----------------------------

def parse_coord(value: Any) -> int:
    """
    Form-field coordinate -> int.
    Blank, a bare sign, and non-integer text all become 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0

    s = str(value).strip()
    if not _INT_RE.match(s):
        return 0
    return int(s)


def parse_arrival(value: Any) -> Optional[datetime]:
    """
    Arrival time -> aware UTC datetime, or None if it cannot be parsed.
    Naive values are taken as UTC ("2024-01-01T12:00" == "2024-01-01T12:00:00Z").
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ----------------------------
# Display helpers
# ----------------------------

def format_duration(total_seconds: int) -> str:
    total_seconds = max(0, int(total_seconds))
    h = total_seconds // 3600
    m = (total_seconds % 3600) // 60
    s = total_seconds % 60
    return f"{h}h {m}m {s}s"


def format_utc(dt: datetime) -> str:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")
