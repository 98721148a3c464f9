# warplan/config.py
from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DATA_DIR = Path(os.getenv("WARPLAN_DATA_DIR", str(PROJECT_ROOT / "data")))
DATA_DIR.mkdir(parents=True, exist_ok=True)

DB_PATH = DATA_DIR / "warplan.db"
DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DB_PATH.as_posix()}")

# Admin override key (single source of truth)
ADMIN_KEY: str = os.getenv("ADMIN_KEY", "")

SESSION_HOURS: int = int(os.getenv("SESSION_HOURS", "24"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# Map geometry: 401x401 tiles, coordinates -200..200, edges wrap.
MAP_SIZE: int = int(os.getenv("MAP_SIZE", "401"))

# Tournament Square: bonus only applies to the part of the march beyond this radius.
TS_THRESHOLD_TILES: float = float(os.getenv("TS_THRESHOLD_TILES", "20"))

# Speed bonus per TS level (0.2 => level 20 gives x5 after the threshold).
TS_BONUS_PER_LEVEL: float = float(os.getenv("TS_BONUS_PER_LEVEL", "0.2"))
TS_MAX_LEVEL = 20
