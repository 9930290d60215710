"""
Service for roster administration and fight logging.
"""

import logging
from datetime import datetime, timezone

from config import BATTLEGROUPS, NODE_COUNT
from domain.models.war_stats import BattlegroupDeathEntry, NodeEntry
from repositories.interfaces import (
    IBattlegroupDeathRepository,
    INodeEntryRepository,
    IPlayerRepository,
    ISeasonRepository,
)

logger = logging.getLogger("war_tracker.services.roster")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RosterService:
    """
    Admin operations on the roster and the fight logs.

    Hiding a player removes them from rankings only; their fights still count
    toward alliance and battlegroup totals. Deleting purges them entirely.
    """

    def __init__(
        self,
        player_repo: IPlayerRepository,
        entry_repo: INodeEntryRepository,
        bg_death_repo: IBattlegroupDeathRepository,
        season_repo: ISeasonRepository | None = None,
        battlegroups: list[str] | None = None,
        node_count: int = NODE_COUNT,
    ):
        self.player_repo = player_repo
        self.entry_repo = entry_repo
        self.bg_death_repo = bg_death_repo
        self.season_repo = season_repo
        self.battlegroups = battlegroups or BATTLEGROUPS
        self.node_count = node_count

    def add_custom_player(self, name: str, battlegroup: str) -> dict:
        name = (name or "").strip()
        if not name:
            return {"success": False, "error": "Player name is required"}
        if battlegroup not in self.battlegroups:
            return {
                "success": False,
                "error": f"Battlegroup must be one of {', '.join(self.battlegroups)}",
            }
        if self.player_repo.exists(name):
            return {"success": False, "error": "Player already exists"}
        try:
            self.player_repo.add(name, battlegroup, is_custom=True, added_at=_now())
        except ValueError as exc:
            return {"success": False, "error": str(exc)}
        logger.info(f"Added custom player {name} to {battlegroup}")
        return {"success": True, "message": f"Added {name} to {battlegroup}"}

    def set_hidden(self, name: str, hidden: bool) -> dict:
        if not self.player_repo.set_hidden(name, hidden, hidden_at=_now() if hidden else None):
            return {"success": False, "error": f"Player {name} not found"}
        state = "hidden" if hidden else "visible"
        logger.info(f"Player {name} is now {state}")
        return {"success": True, "message": f"{name} is now {state}"}

    def delete_player(self, name: str) -> dict:
        """
        Hard delete a player with every logged fight.

        Imported players are also remembered as deleted so the next roster
        import does not bring them back.
        """
        player = self.player_repo.get_by_name(name)
        if player is None:
            return {"success": False, "error": f"Player {name} not found"}
        if player.is_custom:
            self.player_repo.delete(player.name)
        else:
            self.player_repo.mark_import_deleted(player.name, deleted_at=_now())
        return {"success": True, "message": f"Deleted {player.name}"}

    def delete_import_player(self, name: str) -> dict:
        name = (name or "").strip()
        if not name:
            return {"success": False, "error": "Player name is required"}
        if not self.player_repo.mark_import_deleted(name, deleted_at=_now()):
            return {"success": False, "error": f"{name} is already deleted"}
        return {"success": True, "message": f"{name} removed from the import"}

    def restore_import_player(self, name: str) -> dict:
        if not self.player_repo.restore_import_player(name):
            return {"success": False, "error": f"{name} was not deleted"}
        return {
            "success": True,
            "message": f"{name} will be included in the next roster import",
        }

    def record_fight(
        self, name: str, node: int, deaths: int = 0, war: int | None = None
    ) -> dict:
        """Log one kill on a node together with the deaths taken there."""
        player = self.player_repo.get_by_name(name)
        if player is None:
            return {"success": False, "error": f"Player {name} not found"}
        if node < 1 or node > self.node_count:
            return {"success": False, "error": f"Node must be between 1 and {self.node_count}"}
        try:
            entry = NodeEntry(
                player=player.name, node=node, deaths=deaths, war=war, recorded_at=_now()
            )
        except ValueError as exc:
            return {"success": False, "error": str(exc)}
        entry.entry_id = self.entry_repo.add_entry(entry)
        return {
            "success": True,
            "message": f"Recorded node {node} for {player.name} ({deaths} deaths)",
            "entry": entry,
        }

    def assign_war(self, name: str, war: int) -> dict:
        if war < 1:
            return {"success": False, "error": "War must be a positive number"}
        player = self.player_repo.get_by_name(name)
        if player is None:
            return {"success": False, "error": f"Player {name} not found"}
        updated = self.entry_repo.assign_war(player.name, war)
        return {
            "success": True,
            "message": f"Assigned war {war} to {updated} fights for {player.name}",
            "updated": updated,
        }

    def record_battlegroup_deaths(
        self, battlegroup: str, deaths: int, war: int | None = None
    ) -> dict:
        if battlegroup not in self.battlegroups:
            return {
                "success": False,
                "error": f"Battlegroup must be one of {', '.join(self.battlegroups)}",
            }
        season = self.season_repo.get_current().season_number if self.season_repo else None
        try:
            entry = BattlegroupDeathEntry(
                battlegroup=battlegroup, deaths=deaths, war=war, season=season, timestamp=_now()
            )
        except ValueError as exc:
            return {"success": False, "error": str(exc)}
        self.bg_death_repo.add(entry)
        logger.info(f"Recorded {deaths} deaths for {battlegroup} (season {season}, war {war})")
        return {"success": True, "message": f"Recorded {deaths} deaths for {battlegroup}"}
