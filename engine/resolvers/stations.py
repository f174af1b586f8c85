"""Station build resolver for the Rails Europe game engine.

A station can be built in any city that has none. It costs 1, 2 or 3 cards
of a single color (locomotives substitute) depending on how many stations
the player has left, and gives up the 4 points an unused station is worth.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from core.constants import CardColor
from core.board import CityName
from engine.payment import PaymentSession, can_afford

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player
    from engine.prompter import ChoicePrompter

logger = logging.getLogger(__name__)


@dataclass
class StationResult:
    """Result of building a station.

    Attributes:
        resolved: Whether the station was built.
        player_id: The building player.
        city: The city where the station was built.
        cost: Number of cards paid.
        cards_paid: Cards moved to the discard pile.
    """

    resolved: bool
    player_id: int
    city: CityName
    cost: int = 0
    cards_paid: list[CardColor] = field(default_factory=list)


class StationResolver:
    """Resolves the build station action."""

    def __init__(self, state: GameState, prompter: ChoicePrompter):
        """Initialize the resolver.

        Args:
            state: The current game state.
            prompter: Choice request used to collect payment.
        """
        self.state = state
        self.prompter = prompter

    def can_afford_station(self, player: Player) -> bool:
        """Check if the player has a station left and the cards for it."""
        if not player.can_build_station():
            return False
        return can_afford(player, player.station_cost())

    def can_build(self, player: Player, city_name: CityName) -> bool:
        city = self.state.board.cities.get(city_name)
        if city is None or city.has_station():
            return False
        return self.can_afford_station(player)

    def get_buildable_cities(self, player: Player) -> list[CityName]:
        """Return the cities where the player may build a station now."""
        if not self.can_afford_station(player):
            return []
        return [city.name for city in self.state.board.get_free_cities()]

    def resolve(self, city_name: CityName) -> StationResult:
        """Build a station for the current player.

        Raises:
            ValueError: If the station cannot be built.
        """
        player = self.state.get_current_player()
        if not self.can_build(player, city_name):
            raise ValueError(f"{player.name} cannot build a station in {city_name}")

        cost = player.station_cost()
        session = PaymentSession(player, cost)
        if not session.collect(self.prompter, f"Choose cards to build a station in {city_name}"):
            session.abort()
            return StationResult(resolved=False, player_id=player.player_id, city=city_name)

        cards = session.commit(self.state.piles)
        self.state.board.get_city(city_name).build_station(player.player_id)
        player.use_station()

        self.state.log(f"{player.name} builds a station in {city_name}")
        logger.debug("%s has %d stations left", player.name, player.stations_remaining)
        return StationResult(
            resolved=True,
            player_id=player.player_id,
            city=city_name,
            cost=cost,
            cards_paid=cards,
        )
