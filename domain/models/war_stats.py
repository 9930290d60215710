"""
War statistic records: logged fights, battlegroup deaths and derived ratings.
"""

from dataclasses import asdict, dataclass


def _optional_int(value, field_name: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be an integer, got {value!r}")


@dataclass
class NodeEntry:
    """
    A single logged fight for a player.

    Each entry that names a node counts as one kill on that node; ``deaths``
    are the deaths taken on the same node. Carry-over entries represent a kill
    streak brought forward from the previous season and never count toward
    ratings or difficulty.
    """

    player: str
    node: int | None = None
    deaths: int = 0
    war: int | None = None
    carry_over: bool = False
    recorded_at: str | None = None
    entry_id: int | None = None

    def __post_init__(self):
        if self.node is not None and self.node < 1:
            raise ValueError(f"Node must be positive, got {self.node}")
        if self.deaths < 0:
            raise ValueError(f"Deaths cannot be negative, got {self.deaths}")

    @classmethod
    def from_dict(cls, data: dict) -> "NodeEntry":
        player = (data.get("player") or "").strip()
        if not player:
            raise ValueError("Node entry requires a player name")
        return cls(
            player=player,
            node=_optional_int(data.get("node"), "node"),
            deaths=_optional_int(data.get("deaths"), "deaths") or 0,
            war=_optional_int(data.get("war"), "war"),
            carry_over=bool(data.get("carry_over", False)),
            recorded_at=data.get("recorded_at"),
            entry_id=data.get("entry_id"),
        )

    @property
    def kills(self) -> int:
        return 1 if self.node else 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("entry_id", None)
        return data


@dataclass
class BattlegroupDeathEntry:
    """Deaths attributable to a battlegroup as a whole rather than one player."""

    battlegroup: str
    deaths: int
    war: int | None = None
    season: int | None = None
    timestamp: str | None = None

    def __post_init__(self):
        if not self.battlegroup:
            raise ValueError("Battlegroup is required")
        if self.deaths < 0:
            raise ValueError(f"Deaths cannot be negative, got {self.deaths}")

    @classmethod
    def from_dict(cls, data: dict) -> "BattlegroupDeathEntry":
        deaths = _optional_int(data.get("deaths"), "deaths")
        if deaths is None:
            raise ValueError("Battlegroup death entry requires a death count")
        return cls(
            battlegroup=data.get("battlegroup") or "",
            deaths=deaths,
            war=_optional_int(data.get("war"), "war"),
            season=_optional_int(data.get("season"), "season"),
            timestamp=data.get("timestamp"),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AllianceTotals:
    kills: int = 0
    deaths: int = 0


@dataclass
class PlayerRating:
    """A player's totals together with their computed ratings."""

    name: str
    battlegroup: str | None
    kills: int
    deaths: int
    power_rating: float
    difficulty_rating_per_fight: float
    solo_rate: float
    hidden: bool = False
    is_custom: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class BattlegroupTotals:
    battlegroup: str
    total_kills: int
    total_deaths: int
    total_pr: float
    avg_solo_rate: float
    player_count: int
    visible_player_count: int


@dataclass
class StreakResult:
    """Outcome of replaying a player's fights in war order."""

    name: str
    current_streak: int
    session_high: int
    high_streak: int
    is_new_high: bool
    total_kills: int
    total_deaths: int
    battlegroup: str | None = None
