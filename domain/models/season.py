"""
Season, war calendar and archive models.
"""

from dataclasses import dataclass, field


@dataclass
class War:
    war: int
    start_date: str | None = None
    end_date: str | None = None
    is_active: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "War":
        return cls(
            war=int(data["war"]),
            start_date=data.get("start_date") or None,
            end_date=data.get("end_date") or None,
            is_active=bool(data.get("is_active", False)),
        )


@dataclass
class Season:
    """
    A season on the war calendar.

    A season holds a fixed number of wars; at most one of them is active.
    """

    season: int
    start_date: str | None = None
    end_date: str | None = None
    wars: list[War] = field(default_factory=list)

    @classmethod
    def with_wars(cls, season: int, war_count: int, start_date: str | None = None) -> "Season":
        return cls(
            season=season,
            start_date=start_date,
            wars=[War(war=i + 1) for i in range(war_count)],
        )

    def get_war(self, war: int) -> War | None:
        for w in self.wars:
            if w.war == war:
                return w
        return None

    def active_war(self) -> War | None:
        for w in self.wars:
            if w.is_active:
                return w
        return None


@dataclass
class CurrentSeason:
    season_number: int
    season_name: str


@dataclass
class SeasonArchive:
    """
    Immutable snapshot of a season's working data.

    ``payload`` is an opaque blob holding node entries, battlegroup deaths,
    and the roster state at the time of archiving.
    """

    season_number: int
    season_name: str
    payload: dict
    total_kills: int = 0
    total_deaths: int = 0
    archived_at: str | None = None
    description: str | None = None

    @property
    def node_entries(self) -> list[dict]:
        return list(self.payload.get("node_entries") or [])

    @property
    def battlegroup_deaths(self) -> list[dict]:
        return list(self.payload.get("battlegroup_deaths") or [])
