"""
Node difficulty domain models.
"""

from dataclasses import asdict, dataclass

from config import (
    DEFAULT_NODE_BASE_VALUE,
    DEFAULT_NODE_DEATH_PENALTY,
    DEFAULT_NODE_KILL_BONUS,
    DIFFICULTY_SETTINGS,
)


def _as_float(data: dict, key: str, default: float | None = None) -> float:
    raw = data.get(key, default)
    if raw is None:
        raise ValueError(f"Missing required field: {key}")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Field {key} must be numeric, got {raw!r}")
    if value != value:  # NaN
        raise ValueError(f"Field {key} must not be NaN")
    return value


@dataclass
class NodeDifficulty:
    """Tunable parameters for one of the 50 war nodes."""

    base_value: float = DEFAULT_NODE_BASE_VALUE
    current_value: float = DEFAULT_NODE_BASE_VALUE
    kill_bonus: float = DEFAULT_NODE_KILL_BONUS
    death_penalty: float = DEFAULT_NODE_DEATH_PENALTY
    total_kills: int = 0
    total_deaths: int = 0
    last_updated: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "NodeDifficulty":
        base_value = _as_float(data, "base_value", DEFAULT_NODE_BASE_VALUE)
        return cls(
            base_value=base_value,
            current_value=_as_float(data, "current_value", base_value),
            kill_bonus=_as_float(data, "kill_bonus", DEFAULT_NODE_KILL_BONUS),
            death_penalty=_as_float(data, "death_penalty", DEFAULT_NODE_DEATH_PENALTY),
            total_kills=int(data.get("total_kills") or 0),
            total_deaths=int(data.get("total_deaths") or 0),
            last_updated=data.get("last_updated"),
        )

    @classmethod
    def from_value(
        cls, value: float, kill_bonus: float, death_penalty: float
    ) -> "NodeDifficulty":
        """Seed a node whose base and current value are the same."""
        return cls(
            base_value=value,
            current_value=value,
            kill_bonus=kill_bonus,
            death_penalty=death_penalty,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DifficultySettings:
    """Alliance-level knobs for difficulty recalculation."""

    adjustment_factor: float = DIFFICULTY_SETTINGS["adjustment_factor"]
    min_value: float = DIFFICULTY_SETTINGS["min_value"]
    max_value: float = DIFFICULTY_SETTINGS["max_value"]
    update_threshold: int = DIFFICULTY_SETTINGS["update_threshold"]

    def __post_init__(self):
        if self.min_value > self.max_value:
            raise ValueError(
                f"min_value ({self.min_value}) cannot exceed max_value ({self.max_value})"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "DifficultySettings":
        defaults = cls()
        return cls(
            adjustment_factor=_as_float(data, "adjustment_factor", defaults.adjustment_factor),
            min_value=_as_float(data, "min_value", defaults.min_value),
            max_value=_as_float(data, "max_value", defaults.max_value),
            update_threshold=int(data.get("update_threshold", defaults.update_threshold)),
        )

    def clamp(self, value: float) -> float:
        return max(self.min_value, min(self.max_value, value))

    def to_dict(self) -> dict:
        return asdict(self)
