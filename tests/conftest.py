"""
Shared fixtures: temporary databases, repositories and spreadsheet exports.
"""

import csv
import os
import tempfile
import time

import pytest

from repositories.battlegroup_death_repository import BattlegroupDeathRepository
from repositories.difficulty_repository import DifficultyRepository
from repositories.node_entry_repository import NodeEntryRepository
from repositories.player_repository import PlayerRepository
from repositories.season_repository import SeasonRepository
from repositories.streak_repository import StreakRepository
from services.import_service import PLAYER_NAME_COLUMNS, column_letter_to_index


@pytest.fixture
def repo_db_path():
    """Path to a fresh SQLite file, removed after the test."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield db_path
    try:
        time.sleep(0.1)  # Windows file locking
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture
def repos(repo_db_path):
    """One of each repository against the same database."""
    return {
        "player_repo": PlayerRepository(repo_db_path),
        "entry_repo": NodeEntryRepository(repo_db_path),
        "bg_death_repo": BattlegroupDeathRepository(repo_db_path),
        "difficulty_repo": DifficultyRepository(repo_db_path),
        "season_repo": SeasonRepository(repo_db_path),
        "streak_repo": StreakRepository(repo_db_path),
        "db_path": repo_db_path,
    }


@pytest.fixture
def write_roster_csv(tmp_path):
    """
    Factory writing a roster export in the spreadsheet layout.

    names: {position (0-29): player name}
    stats: {player name: {node: (kills, deaths)}}
    node_values: {node: (value, kill_bonus, death_penalty)}
    """

    def _write(names, stats=None, node_values=None, node_rows=50, filename="roster.csv"):
        stats = stats or {}
        node_values = node_values or {}
        width = column_letter_to_index("ASX") + 2
        rows = [[""] * width for _ in range(3 + node_rows)]
        rows[0][0] = "Alliance War"
        for position, name in names.items():
            col = column_letter_to_index(PLAYER_NAME_COLUMNS[position])
            rows[1][col] = name
            for node, (kills, deaths) in stats.get(name, {}).items():
                row = rows[3 + (50 - node)]
                row[col] = str(kills)
                row[col + 1] = str(deaths)
        for node, (value, kill_bonus, death_penalty) in node_values.items():
            row = rows[3 + (50 - node)]
            row[column_letter_to_index("Y")] = str(value)
            row[column_letter_to_index("Z")] = str(kill_bonus)
            row[column_letter_to_index("AA")] = str(death_penalty)
        for idx in range(3, 3 + node_rows):
            rows[idx][0] = f"Node {50 - (idx - 3)}"

        path = tmp_path / filename
        with open(path, "w", encoding="utf-8", newline="") as f:
            csv.writer(f).writerows(rows)
        return str(path)

    return _write


@pytest.fixture
def write_streaks_csv(tmp_path):
    """Factory writing a streak ladder export: rows of (name, high, current)."""

    def _write(ladder, filename="streaks.csv"):
        path = tmp_path / filename
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["", "#", "Summoner", "High Streak", "Total Streak"])
            for i, (name, high, current) in enumerate(ladder, 1):
                writer.writerow(["", str(i), name, str(high), str(current)])
        return str(path)

    return _write
