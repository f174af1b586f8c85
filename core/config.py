"""Session configuration for the Rails Europe game engine.

Fixed rule numbers live in core.constants. GameConfig carries what changes
from one game session to another: who plays, how the deck is shuffled and
which end-of-game scoring rules apply.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from .constants import (
    MIN_PLAYERS,
    MAX_PLAYERS,
    DOUBLE_ROUTE_MAX_PLAYERS,
    LONGEST_ROUTE_BONUS,
)


@dataclass(frozen=True)
class GameConfig:
    """Configuration for a single game session.

    Attributes:
        player_names: Names of the players in turn order (2-5, unique).
        seed: Seed for the session RNG, or None for a random game.
        double_route_max_players: At or below this player count, claiming
            one of two parallel routes makes the other unclaimable.
        score_destinations: Whether destinations are scored at game end.
        longest_route_bonus: Points for the longest continuous path
            (0 disables the bonus).
    """

    player_names: tuple[str, ...] = ("Player 1", "Player 2")
    seed: Optional[int] = None
    double_route_max_players: int = DOUBLE_ROUTE_MAX_PLAYERS
    score_destinations: bool = True
    longest_route_bonus: int = LONGEST_ROUTE_BONUS

    def __post_init__(self) -> None:
        # Lists are accepted for convenience but stored as a tuple
        object.__setattr__(self, "player_names", tuple(self.player_names))
        num_players = len(self.player_names)
        if not MIN_PLAYERS <= num_players <= MAX_PLAYERS:
            raise ValueError(
                f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, "
                f"got {num_players}"
            )
        if len(set(self.player_names)) != num_players:
            raise ValueError(f"Player names must be unique: {self.player_names}")
        if self.longest_route_bonus < 0:
            raise ValueError("longest_route_bonus cannot be negative")

    @property
    def num_players(self) -> int:
        """Return the number of players."""
        return len(self.player_names)

    @property
    def blocks_double_routes(self) -> bool:
        """Check if parallel routes block each other in this session."""
        return self.num_players <= self.double_route_max_players

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GameConfig:
        """Build a config from plain data (e.g. parsed JSON).

        Raises:
            ValueError: If the mapping has unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**dict(data))

    def to_dict(self) -> dict[str, Any]:
        """Serialize the config to plain data."""
        return {
            "player_names": list(self.player_names),
            "seed": self.seed,
            "double_route_max_players": self.double_route_max_players,
            "score_destinations": self.score_destinations,
            "longest_route_bonus": self.longest_route_bonus,
        }
