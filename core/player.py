"""Player model for the Rails Europe game engine.

Each player has train pieces, stations, a hand of wagon cards, a staging
buffer for cards being committed to a payment, destinations and a score.
Train pieces and stations are consumed during the game and never recovered.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .board import Destination
from .constants import (
    CardColor,
    PlayerColor,
    SIMPLE_COLORS,
    INITIAL_TRAINS,
    INITIAL_STATIONS,
    INITIAL_SCORE,
    STATION_COSTS,
    STATION_VALUE,
)


@dataclass
class Player:
    """Represents a player in the game.

    Attributes:
        player_id: Index of the player in turn order (0-indexed).
        name: Display name, unique within a game.
        color: Piece color shown by viewers.
        trains_remaining: Train pieces not yet placed on routes.
        stations_remaining: Stations not yet built.
        hand: Wagon cards in hand (a multiset).
        staged: Cards currently committed to a payment in progress.
        destinations: Destinations kept by the player.
        score: Running score; starts at 12 (3 unused stations x 4 points).
    """

    player_id: int
    name: str
    color: Optional[PlayerColor] = None
    trains_remaining: int = INITIAL_TRAINS
    stations_remaining: int = INITIAL_STATIONS
    hand: Counter[CardColor] = field(default_factory=Counter)
    staged: list[CardColor] = field(default_factory=list)
    destinations: list[Destination] = field(default_factory=list)
    score: int = INITIAL_SCORE

    # -------------------------------------------------------------------------
    # Hand
    # -------------------------------------------------------------------------

    def add_card(self, card: CardColor) -> None:
        self.hand[card] += 1

    def add_cards(self, cards: Iterable[CardColor]) -> None:
        for card in cards:
            self.add_card(card)

    def count(self, color: CardColor) -> int:
        """Return how many cards of a color are in hand."""
        return self.hand[color]

    def locomotives(self) -> int:
        return self.hand[CardColor.LOCOMOTIVE]

    def hand_size(self) -> int:
        return sum(self.hand.values())

    def best_color_count(self) -> int:
        """Return the size of the largest single-color group in hand."""
        return max((self.hand[color] for color in SIMPLE_COLORS), default=0)

    def can_pay(self, length: int, color: CardColor = CardColor.GRAY) -> bool:
        """Check if the hand can pay ``length`` cards of one color.

        Locomotives substitute for any color. GRAY means any single color,
        so the largest color group counts.
        """
        if color == CardColor.GRAY:
            matching = self.best_color_count()
        elif color == CardColor.LOCOMOTIVE:
            matching = 0
        else:
            matching = self.count(color)
        return matching + self.locomotives() >= length

    def hand_labels(self) -> list[str]:
        """Return the distinct card labels in hand, sorted."""
        return sorted(card.label for card, n in self.hand.items() if n > 0)

    # -------------------------------------------------------------------------
    # Staging buffer
    # -------------------------------------------------------------------------

    def stage_card(self, card: CardColor) -> None:
        """Move one card from the hand to the staging buffer.

        Raises:
            ValueError: If the card is not in hand.
        """
        if self.hand[card] <= 0:
            raise ValueError(f"Player {self.player_id} has no {card.label} card to stage")
        self.hand[card] -= 1
        if self.hand[card] == 0:
            del self.hand[card]
        self.staged.append(card)

    def return_staged(self) -> list[CardColor]:
        """Move every staged card back to the hand.

        Returns:
            The cards that were returned.
        """
        returned = list(self.staged)
        self.add_cards(returned)
        self.staged.clear()
        return returned

    def release_staged(self) -> list[CardColor]:
        """Empty the staging buffer and hand its cards to the caller."""
        released = list(self.staged)
        self.staged.clear()
        return released

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    def can_build_station(self) -> bool:
        return self.stations_remaining > 0

    def station_cost(self) -> int:
        """Return the number of cards the next station costs.

        Raises:
            ValueError: If no stations remain.
        """
        if not self.can_build_station():
            raise ValueError(f"Player {self.player_id} has no stations remaining")
        return STATION_COSTS[self.stations_remaining]

    def use_station(self) -> None:
        """Spend one station; it no longer counts as unused at game end.

        Raises:
            ValueError: If no stations remain.
        """
        if not self.can_build_station():
            raise ValueError(f"Player {self.player_id} has no stations remaining")
        self.stations_remaining -= 1
        self.score -= STATION_VALUE

    def spend_trains(self, count: int) -> None:
        """Place train pieces on the board.

        Raises:
            ValueError: If the player has fewer trains than requested.
        """
        if count < 0 or count > self.trains_remaining:
            raise ValueError(
                f"Player {self.player_id} cannot place {count} trains "
                f"({self.trains_remaining} remaining)"
            )
        self.trains_remaining -= count

    def add_score(self, points: int) -> None:
        """Add points to the player's score.

        Args:
            points: Number of points to add (can be negative).
        """
        self.score += points

    def add_destinations(self, destinations: Iterable[Destination]) -> None:
        self.destinations.extend(destinations)

    def to_dict(self, is_current: bool = False) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "color": self.color.value if self.color else None,
            "score": self.score,
            "trains_remaining": self.trains_remaining,
            "stations_remaining": self.stations_remaining,
            "is_current": is_current,
            "destinations": [d.to_dict() for d in self.destinations],
            "hand": sorted(card.label for card in self.hand.elements()),
            "staged": sorted(card.label for card in self.staged),
        }

    def __str__(self) -> str:
        return f"{self.name} ({self.score} pts)"
