"""
Repository for the historical streak ladder and saved all-time highs.
"""

from domain.models.war_stats import StreakResult
from repositories.base_repository import BaseRepository
from repositories.interfaces import IStreakRepository


class StreakRepository(BaseRepository, IStreakRepository):
    """Streak data survives season rollover; nothing here is archived or reset."""

    def get_baselines(self) -> dict[str, tuple[int, int]]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name, high_streak, current_streak FROM streak_baselines")
            return {
                row["name"]: (row["high_streak"] or 0, row["current_streak"] or 0)
                for row in cursor.fetchall()
            }

    def upsert_baseline(self, name: str, high_streak: int, current_streak: int) -> None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO streak_baselines (name, high_streak, current_streak)
                VALUES (?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    high_streak = excluded.high_streak,
                    current_streak = excluded.current_streak
                """,
                (name.strip(), high_streak, current_streak),
            )

    def save_all_time_highs(self, results: list[StreakResult], updated_at: str) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM all_time_highs")
            cursor.executemany(
                """
                INSERT INTO all_time_highs
                (name, battlegroup, high_streak, current_streak, total_kills, total_deaths, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        r.name,
                        r.battlegroup,
                        r.high_streak,
                        r.current_streak,
                        r.total_kills,
                        r.total_deaths,
                        updated_at,
                    )
                    for r in results
                ],
            )
            return len(results)

    def get_all_time_highs(self) -> list[dict]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM all_time_highs ORDER BY high_streak DESC, name")
            return [dict(row) for row in cursor.fetchall()]
