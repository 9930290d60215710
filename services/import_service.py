"""
Import of the alliance spreadsheet exports.

The roster export is a wide CSV:
- row 2 holds player names at 30 fixed column positions
- rows 4-53 are nodes 50 down to 1
- a player's kills sit in their name column, deaths in the next column
- columns Y, Z and AA hold node value, kill bonus and death penalty

The streak ladder export lists Summoner, High Streak and Total Streak in
columns C-E.
"""

import csv
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone

from config import (
    BATTLEGROUPS,
    DEFAULT_NODE_BASE_VALUE,
    DEFAULT_NODE_DEATH_PENALTY,
    DEFAULT_NODE_KILL_BONUS,
    NODE_COUNT,
    PLAYERS_PER_BATTLEGROUP,
    ROSTER_CSV_PATH,
    STREAKS_CSV_PATH,
)
from domain.models.node_difficulty import DifficultySettings, NodeDifficulty
from repositories.interfaces import IDifficultyRepository, IPlayerRepository, IStreakRepository

logger = logging.getLogger("war_tracker.services.import")

PLAYER_NAME_COLUMNS = [
    "KH", "FR", "HZ", "GV", "EN", "JD", "DJ", "BB", "CF", "LL",
    "TN", "SJ", "VV", "UR", "ZH", "WZ", "AAL", "RF", "YD", "ABP",
    "APL", "AOH", "AKV", "AIN", "ALZ", "ART", "AQP", "AJR", "ASX", "AND",
]

NAME_ROW = 1
FIRST_NODE_ROW = 3
NODE_VALUE_COLUMN = "Y"
KILL_BONUS_COLUMN = "Z"
DEATH_PENALTY_COLUMN = "AA"


def column_letter_to_index(letter: str) -> int:
    """Convert spreadsheet column letters (A, Z, AA, ...) to a 0-based index."""
    col = 0
    for ch in letter.upper():
        col = col * 26 + (ord(ch) - ord("A") + 1)
    return col - 1


def _cell(row: list[str], index: int) -> str:
    return row[index].strip() if index < len(row) else ""


def _number(raw: str, default: float) -> float:
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Non-numeric spreadsheet cell {raw!r}, using {default}")
        return default


def read_records(path: str) -> list[list[str]]:
    """Read CSV rows, skipping blank lines."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return [row for row in csv.reader(f) if row]


@dataclass
class ImportedPlayer:
    name: str
    battlegroup: str
    kills_per_node: dict[int, int] = field(default_factory=dict)
    deaths_per_node: dict[int, int] = field(default_factory=dict)


def _node_rows(records: list[list[str]], node_count: int) -> list[tuple[int, list[str]]]:
    rows = records[FIRST_NODE_ROW:FIRST_NODE_ROW + node_count]
    return [(node_count - idx, row) for idx, row in enumerate(rows)]


def parse_roster(
    records: list[list[str]],
    node_count: int = NODE_COUNT,
    battlegroups: list[str] | None = None,
    players_per_group: int = PLAYERS_PER_BATTLEGROUP,
) -> list[ImportedPlayer]:
    """Extract players and their per-node counts from the roster export."""
    battlegroups = battlegroups or BATTLEGROUPS
    name_row = records[NAME_ROW] if len(records) > NAME_ROW else []
    node_rows = _node_rows(records, node_count)

    players = []
    for position, letters in enumerate(PLAYER_NAME_COLUMNS):
        col = column_letter_to_index(letters)
        name = _cell(name_row, col)
        if not name:
            continue
        group_index = position // players_per_group
        battlegroup = battlegroups[group_index] if group_index < len(battlegroups) else "Unknown"

        player = ImportedPlayer(name=name, battlegroup=battlegroup)
        for node, row in node_rows:
            player.kills_per_node[node] = int(_number(_cell(row, col), 0))
            player.deaths_per_node[node] = int(_number(_cell(row, col + 1), 0))
        players.append(player)
    return players


def parse_node_values(
    records: list[list[str]],
    node_count: int = NODE_COUNT,
    default_value: float = DEFAULT_NODE_BASE_VALUE,
    default_kill_bonus: float = DEFAULT_NODE_KILL_BONUS,
    default_death_penalty: float = DEFAULT_NODE_DEATH_PENALTY,
) -> dict[int, NodeDifficulty]:
    """Read node value, kill bonus and death penalty for every node row."""
    value_col = column_letter_to_index(NODE_VALUE_COLUMN)
    bonus_col = column_letter_to_index(KILL_BONUS_COLUMN)
    penalty_col = column_letter_to_index(DEATH_PENALTY_COLUMN)

    nodes = {}
    for node, row in _node_rows(records, node_count):
        nodes[node] = NodeDifficulty.from_value(
            _number(_cell(row, value_col), default_value),
            _number(_cell(row, bonus_col), default_kill_bonus),
            _number(_cell(row, penalty_col), default_death_penalty),
        )
    return nodes


def parse_streak_ladder(records: list[list[str]]) -> list[tuple[str, int, int]]:
    """Return (name, high streak, current streak) for every ladder row with a streak."""
    ladder = []
    for row in records:
        name, high_raw, current_raw = _cell(row, 2), _cell(row, 3), _cell(row, 4)
        if not name or not high_raw or not current_raw:
            continue
        high = int(_number(high_raw, 0)) if high_raw.lstrip("-").isdigit() else 0
        current = int(_number(current_raw, 0)) if current_raw.lstrip("-").isdigit() else 0
        if high > 0 or current > 0:
            ladder.append((name, high, current))
    return ladder


class ImportService:
    """Loads spreadsheet exports into the roster, difficulty and streak stores."""

    def __init__(
        self,
        player_repo: IPlayerRepository,
        difficulty_repo: IDifficultyRepository,
        streak_repo: IStreakRepository | None = None,
        roster_csv_path: str | None = None,
        streaks_csv_path: str | None = None,
        node_count: int = NODE_COUNT,
    ):
        self.player_repo = player_repo
        self.difficulty_repo = difficulty_repo
        self.streak_repo = streak_repo
        self.roster_csv_path = roster_csv_path or ROSTER_CSV_PATH
        self.streaks_csv_path = streaks_csv_path or STREAKS_CSV_PATH
        self.node_count = node_count

    def _load_roster_records(self) -> list[list[str]] | None:
        if not os.path.exists(self.roster_csv_path):
            logger.error(f"Roster CSV not found: {self.roster_csv_path}")
            return None
        records = read_records(self.roster_csv_path)
        if len(records) < FIRST_NODE_ROW + self.node_count:
            logger.error(
                f"Roster CSV too short: {len(records)} rows, "
                f"expected at least {FIRST_NODE_ROW + self.node_count}"
            )
            return None
        return records

    def import_roster(self) -> dict:
        """
        Add imported players to the roster and store their per-node counts.

        Players an admin previously deleted from the import are skipped.
        Existing players keep their hidden flag.
        """
        if not os.path.exists(self.roster_csv_path):
            return {"success": False, "error": "CSV file not found"}
        try:
            records = self._load_roster_records()
        except OSError as exc:
            logger.error(f"Failed to read roster CSV: {exc}")
            return {"success": False, "error": "Failed to read CSV file"}
        if records is None:
            return {"success": False, "error": "CSV file format invalid"}

        deleted = self.player_repo.get_deleted_import_names()
        now = datetime.now(timezone.utc).isoformat()
        imported = []
        skipped = []
        for player in parse_roster(records, self.node_count):
            if player.name.lower() in deleted:
                skipped.append(player.name)
                continue
            if self.player_repo.exists(player.name):
                self.player_repo.set_battlegroup(player.name, player.battlegroup)
            else:
                self.player_repo.add(player.name, player.battlegroup, is_custom=False, added_at=now)
            self.player_repo.save_imported_stats(
                player.name, player.kills_per_node, player.deaths_per_node
            )
            imported.append(player.name)

        logger.info(f"Imported {len(imported)} players, skipped {len(skipped)} deleted players")
        return {"success": True, "imported": imported, "skipped": skipped}

    def load_node_values(self) -> dict[int, NodeDifficulty]:
        """
        Node table read straight from the roster export.

        Used when no difficulty table has been saved yet. Returns an empty
        table when the export is missing or unreadable.
        """
        try:
            records = self._load_roster_records()
        except OSError as exc:
            logger.error(f"Failed to read node values: {exc}")
            return {}
        if records is None:
            return {}
        return parse_node_values(
            records,
            self.node_count,
            default_value=0.0,
            default_kill_bonus=0.0,
            default_death_penalty=0.0,
        )

    def initialize_difficulty(self, settings: DifficultySettings | None = None) -> dict:
        """Seed the difficulty table from the spreadsheet, replacing any saved values."""
        if not os.path.exists(self.roster_csv_path):
            return {"success": False, "error": "CSV file not found"}
        try:
            records = self._load_roster_records()
        except OSError as exc:
            logger.error(f"Failed to read roster CSV: {exc}")
            return {"success": False, "error": "Failed to read CSV file"}
        if records is None:
            return {"success": False, "error": "CSV file format invalid"}

        nodes = parse_node_values(records, self.node_count)
        self.difficulty_repo.save_nodes(nodes)
        self.difficulty_repo.save_settings(settings or DifficultySettings())
        logger.info(f"Initialized difficulty for {len(nodes)} nodes from CSV")
        return {
            "success": True,
            "message": "Difficulty ratings initialized from CSV successfully",
            "nodes_count": len(nodes),
        }

    def import_streak_baselines(self) -> dict:
        """Load the historical streak ladder as the baseline for live streaks."""
        if self.streak_repo is None:
            return {"success": False, "error": "Streak storage is not configured"}
        if not os.path.exists(self.streaks_csv_path):
            logger.error(f"Streaks CSV not found: {self.streaks_csv_path}")
            return {"success": False, "error": "Streaks CSV file not found"}
        try:
            records = read_records(self.streaks_csv_path)
        except OSError as exc:
            logger.error(f"Failed to read streaks CSV: {exc}")
            return {"success": False, "error": "Failed to read streaks CSV"}

        best: dict[str, tuple[str, int, int]] = {}
        for name, high, current in parse_streak_ladder(records):
            key = name.lower()
            if key in best:
                _, prev_high, prev_current = best[key]
                best[key] = (name, max(high, prev_high), max(current, prev_current))
            else:
                best[key] = (name, high, current)

        for name, high, current in best.values():
            self.streak_repo.upsert_baseline(name, max(high, current), current)
        return {"success": True, "count": len(best)}
