"""
Abstract repository interfaces for data access.

These interfaces define the contracts implemented by concrete repositories.
"""

from abc import ABC, abstractmethod


class IPlayerRepository(ABC):
    @abstractmethod
    def add(
        self,
        name: str,
        battlegroup: str | None,
        is_custom: bool = False,
        added_at: str | None = None,
    ) -> None: ...

    @abstractmethod
    def get_by_name(self, name: str): ...

    @abstractmethod
    def get_all(self, include_hidden: bool = True): ...

    @abstractmethod
    def exists(self, name: str) -> bool: ...

    @abstractmethod
    def set_hidden(self, name: str, hidden: bool, hidden_at: str | None = None) -> bool: ...

    @abstractmethod
    def set_battlegroup(self, name: str, battlegroup: str) -> bool: ...

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Remove a player and every fight and imported count recorded for them."""
        ...

    @abstractmethod
    def save_imported_stats(
        self, name: str, kills_per_node: dict[int, int], deaths_per_node: dict[int, int]
    ) -> None: ...

    @abstractmethod
    def get_imported_stats(self) -> dict[str, tuple[dict[int, int], dict[int, int]]]: ...

    @abstractmethod
    def mark_import_deleted(self, name: str, deleted_at: str | None = None) -> bool: ...

    @abstractmethod
    def restore_import_player(self, name: str) -> bool: ...

    @abstractmethod
    def get_deleted_import_names(self) -> set[str]:
        """Lower-cased names of imported players that were deleted."""
        ...


class INodeEntryRepository(ABC):
    @abstractmethod
    def add_entry(self, entry) -> int: ...

    @abstractmethod
    def get_entries(self, player: str | None = None, include_carry_over: bool = True): ...

    @abstractmethod
    def assign_war(self, player: str, war: int) -> int:
        """Assign a war to the player's entries that have none. Returns rows updated."""
        ...

    @abstractmethod
    def replace_all(self, entries) -> None: ...

    @abstractmethod
    def clear(self) -> int: ...


class IBattlegroupDeathRepository(ABC):
    @abstractmethod
    def add(self, entry) -> int: ...

    @abstractmethod
    def get_entries(
        self,
        battlegroup: str | None = None,
        season: int | None = None,
        war: int | None = None,
    ): ...

    @abstractmethod
    def replace_all(self, entries) -> None: ...

    @abstractmethod
    def clear(self) -> int: ...


class IDifficultyRepository(ABC):
    @abstractmethod
    def get_nodes(self): ...

    @abstractmethod
    def save_nodes(self, nodes) -> None: ...

    @abstractmethod
    def get_node(self, node: int): ...

    @abstractmethod
    def update_node(self, node: int, difficulty) -> None: ...

    @abstractmethod
    def get_settings(self): ...

    @abstractmethod
    def save_settings(self, settings) -> None: ...


class ISeasonRepository(ABC):
    @abstractmethod
    def get_current(self): ...

    @abstractmethod
    def set_current(self, season_number: int, season_name: str) -> None: ...

    @abstractmethod
    def get_season(self, season: int): ...

    @abstractmethod
    def get_all_seasons(self): ...

    @abstractmethod
    def save_season(self, season) -> None: ...

    @abstractmethod
    def save_archive(self, archive) -> None: ...

    @abstractmethod
    def get_archive(self, season_number: int): ...

    @abstractmethod
    def list_archives(self): ...

    @abstractmethod
    def delete_archive(self, season_number: int) -> bool: ...

    @abstractmethod
    def save_backup(self, reason: str, payload: dict, created_at: str) -> int: ...


class IStreakRepository(ABC):
    @abstractmethod
    def get_baselines(self) -> dict[str, tuple[int, int]]:
        """Map of name -> (high_streak, current_streak) from the historical ladder."""
        ...

    @abstractmethod
    def upsert_baseline(self, name: str, high_streak: int, current_streak: int) -> None: ...

    @abstractmethod
    def save_all_time_highs(self, results, updated_at: str) -> int: ...

    @abstractmethod
    def get_all_time_highs(self) -> list[dict]: ...
