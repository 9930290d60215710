"""
Player domain model.
"""

from dataclasses import dataclass, field


def _count_mapping(raw, field_name: str) -> dict[int, int]:
    """Normalize a node -> count mapping, rejecting negative or non-numeric counts."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"{field_name} must be a mapping of node -> count")
    counts: dict[int, int] = {}
    for node, value in raw.items():
        try:
            node_id = int(node)
            count = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"{field_name} has a non-numeric entry: {node!r}={value!r}")
        if count < 0:
            raise ValueError(f"{field_name} has a negative count on node {node_id}")
        counts[node_id] = counts.get(node_id, 0) + count
    return counts


@dataclass
class Player:
    """
    Represents an alliance member on the active roster.

    This is a pure domain model with no infrastructure dependencies.
    Per-node counts are keyed by node id (1-50).
    """

    name: str
    battlegroup: str | None = None
    kills_per_node: dict[int, int] = field(default_factory=dict)
    deaths_per_node: dict[int, int] = field(default_factory=dict)
    is_custom: bool = False
    hidden: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        """
        Build a player from an untyped record.

        Raises:
            ValueError: If the name is missing or any count is malformed
        """
        name = (data.get("name") or "").strip()
        if not name:
            raise ValueError("Player name is required")
        return cls(
            name=name,
            battlegroup=data.get("battlegroup"),
            kills_per_node=_count_mapping(data.get("kills_per_node"), "kills_per_node"),
            deaths_per_node=_count_mapping(data.get("deaths_per_node"), "deaths_per_node"),
            is_custom=bool(data.get("is_custom", False)),
            hidden=bool(data.get("hidden", False)),
        )

    @property
    def total_kills(self) -> int:
        return sum(self.kills_per_node.values())

    @property
    def total_deaths(self) -> int:
        return sum(self.deaths_per_node.values())

    @property
    def solo_rate(self) -> float:
        kills = self.total_kills
        return kills / ((kills + self.total_deaths) or 1)

    def add_fight(self, node: int, deaths: int = 0, kills: int = 1) -> None:
        """Add kills and deaths on a node."""
        self.kills_per_node[node] = self.kills_per_node.get(node, 0) + kills
        self.deaths_per_node[node] = self.deaths_per_node.get(node, 0) + deaths

    def __str__(self) -> str:
        bg = self.battlegroup or "No BG"
        return f"{self.name} ({bg}, K-D: {self.total_kills}-{self.total_deaths})"
