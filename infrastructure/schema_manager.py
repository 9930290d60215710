"""
Schema and migration management for SQLite database.
"""

import logging
import sqlite3

logger = logging.getLogger("war_tracker.schema")


class SchemaManager:
    """
    Owns schema creation and migrations.

    Call initialize() to ensure schema is present and migrations are applied.
    """

    def __init__(self, db_path: str, use_uri: bool = False):
        self.db_path = db_path
        self.use_uri = use_uri

    def initialize(self) -> None:
        """Create base schema and apply migrations."""
        logger.info(f"Initializing database schema: {self.db_path}")
        with self._connect() as conn:
            cursor = conn.cursor()
            self._create_base_schema(cursor)
            self._create_schema_migrations_table(cursor)
            self._run_migrations(cursor)
            conn.commit()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, uri=self.use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    def _create_base_schema(self, cursor) -> None:
        # Active roster: imported players and manually added ones
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS players (
                name TEXT PRIMARY KEY COLLATE NOCASE,
                battlegroup TEXT,
                is_custom INTEGER DEFAULT 0,
                hidden INTEGER DEFAULT 0,
                added_at TEXT,
                hidden_at TEXT,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

        # Per-node counts from the spreadsheet import
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS imported_node_stats (
                player_name TEXT NOT NULL COLLATE NOCASE,
                node INTEGER NOT NULL,
                kills INTEGER DEFAULT 0,
                deaths INTEGER DEFAULT 0,
                PRIMARY KEY (player_name, node)
            )
            """
        )

        # Imported players removed by an admin; skipped on re-import
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS deleted_import_players (
                name TEXT PRIMARY KEY COLLATE NOCASE,
                deleted_at TEXT
            )
            """
        )

        # Logged fights for the working season
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS node_entries (
                entry_id INTEGER PRIMARY KEY AUTOINCREMENT,
                player_name TEXT NOT NULL COLLATE NOCASE,
                node INTEGER,
                deaths INTEGER DEFAULT 0,
                war INTEGER,
                carry_over INTEGER DEFAULT 0,
                recorded_at TEXT
            )
            """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS battlegroup_deaths (
                entry_id INTEGER PRIMARY KEY AUTOINCREMENT,
                battlegroup TEXT NOT NULL,
                deaths INTEGER NOT NULL,
                war INTEGER,
                season INTEGER,
                timestamp TEXT
            )
            """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS node_difficulty (
                node INTEGER PRIMARY KEY,
                base_value REAL NOT NULL,
                current_value REAL NOT NULL,
                kill_bonus REAL NOT NULL,
                death_penalty REAL NOT NULL,
                total_kills INTEGER DEFAULT 0,
                total_deaths INTEGER DEFAULT 0,
                last_updated TEXT
            )
            """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS difficulty_settings (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                adjustment_factor REAL NOT NULL,
                min_value REAL NOT NULL,
                max_value REAL NOT NULL,
                update_threshold INTEGER NOT NULL
            )
            """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS current_season (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                season_number INTEGER NOT NULL,
                season_name TEXT NOT NULL
            )
            """
        )

        # War calendar
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS seasons (
                season INTEGER PRIMARY KEY,
                start_date TEXT,
                end_date TEXT,
                wars TEXT NOT NULL
            )
            """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS season_archives (
                season_number INTEGER PRIMARY KEY,
                season_name TEXT NOT NULL,
                payload TEXT NOT NULL,
                total_kills INTEGER DEFAULT 0,
                total_deaths INTEGER DEFAULT 0,
                archived_at TEXT,
                description TEXT
            )
            """
        )

    # --- Migration helpers ---

    def _add_column_if_not_exists(self, cursor, table: str, column: str, column_type: str) -> None:
        try:
            cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_type}")
        except sqlite3.OperationalError:
            pass

    def _create_schema_migrations_table(self, cursor) -> None:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                name TEXT PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

    def _run_migrations(self, cursor) -> None:
        applied = {row["name"] for row in cursor.execute("SELECT name FROM schema_migrations")}
        for name, action in self._get_migrations():
            if name in applied:
                continue
            logger.info(f"Applying migration: {name}")
            action(cursor)
            cursor.execute(
                "INSERT INTO schema_migrations (name) VALUES (?)",
                (name,),
            )

    def _get_migrations(self):
        return [
            ("create_season_backups_table", self._migration_create_season_backups_table),
            ("create_streak_tables", self._migration_create_streak_tables),
            ("add_indexes_v1", self._migration_add_indexes_v1),
        ]

    # --- Migrations ---

    def _migration_create_season_backups_table(self, cursor) -> None:
        """Snapshots of working data taken before a season restore."""
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS season_backups (
                backup_id INTEGER PRIMARY KEY AUTOINCREMENT,
                reason TEXT,
                payload TEXT NOT NULL,
                created_at TEXT
            )
            """
        )

    def _migration_create_streak_tables(self, cursor) -> None:
        """Historical streak ladder baseline and saved all-time highs."""
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS streak_baselines (
                name TEXT PRIMARY KEY COLLATE NOCASE,
                high_streak INTEGER DEFAULT 0,
                current_streak INTEGER DEFAULT 0
            )
            """
        )
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS all_time_highs (
                name TEXT PRIMARY KEY COLLATE NOCASE,
                battlegroup TEXT,
                high_streak INTEGER DEFAULT 0,
                current_streak INTEGER DEFAULT 0,
                total_kills INTEGER DEFAULT 0,
                total_deaths INTEGER DEFAULT 0,
                updated_at TEXT
            )
            """
        )

    def _migration_add_indexes_v1(self, cursor) -> None:
        """
        Add indexes for the common lookups.
        Safe to run multiple times due to IF NOT EXISTS.
        """
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_node_entries_player ON node_entries(player_name)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_node_entries_war ON node_entries(war)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_battlegroup_deaths_period "
            "ON battlegroup_deaths(battlegroup, season, war)"
        )
