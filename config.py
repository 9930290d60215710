"""
Centralized configuration for the Alliance War Tracker bot.
"""

from __future__ import annotations

import os
from typing import List, Dict, Any

from dotenv import load_dotenv

load_dotenv()


def _parse_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_float(env_var: str, default: float) -> float:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _parse_bool(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _parse_str_list(env_var: str, default: List[str]) -> List[str]:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    values = [x.strip() for x in raw.split(",") if x.strip()]
    return values or default


DB_PATH = os.getenv("DB_PATH", "war_tracker.db")
DISCORD_BOT_TOKEN = os.getenv("DISCORD_BOT_TOKEN")
ADMIN_USER_IDS: List[int] = []

_admin_env = os.getenv("ADMIN_USER_IDS", "")
if _admin_env:
    try:
        ADMIN_USER_IDS = [int(uid.strip()) for uid in _admin_env.split(",") if uid.strip()]
    except ValueError:
        ADMIN_USER_IDS = []

# Spreadsheet exports used for the roster import and streak ladder baseline
ROSTER_CSV_PATH = os.getenv("ROSTER_CSV_PATH", "C.Av PR aDR.csv")
STREAKS_CSV_PATH = os.getenv("STREAKS_CSV_PATH", "Streaks.csv")

BATTLEGROUPS: List[str] = _parse_str_list("BATTLEGROUPS", ["BG1", "BG2", "BG3"])
PLAYERS_PER_BATTLEGROUP = _parse_int("PLAYERS_PER_BATTLEGROUP", 10)
NODE_COUNT = _parse_int("NODE_COUNT", 50)
WARS_PER_SEASON = _parse_int("WARS_PER_SEASON", 12)

# Season 60 holds the original spreadsheet data and can never be deleted
CSV_SEASON_NUMBER = _parse_int("CSV_SEASON_NUMBER", 60)

# Power rating
SOLO_RATE_BONUS_MULTIPLIER = _parse_float("SOLO_RATE_BONUS_MULTIPLIER", 1.6)

# Node difficulty normalization. Game-specific, kept verbatim.
DIFFICULTY_FIGHTS_PER_NODE = 150
DIFFICULTY_TOTAL_BASE = 419
DIFFICULTY_TOTAL_OFFSET = 0
DIFFICULTY_NODE_OFFSET = 12
DIFFICULTY_SCALE = 10
DIFFICULTY_FLOOR = 1

DIFFICULTY_SETTINGS: Dict[str, Any] = {
    "adjustment_factor": _parse_float("DIFFICULTY_ADJUSTMENT_FACTOR", 0.1),
    "min_value": _parse_float("DIFFICULTY_MIN_VALUE", 0.1),
    "max_value": _parse_float("DIFFICULTY_MAX_VALUE", 5.0),
    "update_threshold": _parse_int("DIFFICULTY_UPDATE_THRESHOLD", 10),
}

DEFAULT_NODE_BASE_VALUE = 1.0
DEFAULT_NODE_KILL_BONUS = 0.1
DEFAULT_NODE_DEATH_PENALTY = 0.1

# Streak ladder
CENTENNIAL_STREAK = _parse_int("CENTENNIAL_STREAK", 100)

LEADERBOARD_DEFAULT_LIMIT = _parse_int("LEADERBOARD_DEFAULT_LIMIT", 20)
USE_ADMIN_PERMISSION_FALLBACK = _parse_bool("USE_ADMIN_PERMISSION_FALLBACK", True)
