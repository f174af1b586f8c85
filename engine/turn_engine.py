"""Turn engine for the Rails Europe game engine.

A turn is one top-level action, picked by label from the legal set:
- "destinations": draft new destinations (always legal)
- "GRIS": blind draw, legal while the draw or discard pile has cards
- a visible card label: take that card
- a city name: build a station there
- a route name: claim that route (plain, ferry or tunnel)

The TurnEngine enumerates the legal labels, asks the current player to
pick one and dispatches to the matching resolver.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, TYPE_CHECKING

from core.constants import DESTINATIONS_LABEL

from .resolvers import (
    DrawCardsResolver,
    RouteResolver,
    StationResolver,
    DestinationResolver,
)

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player
    from .prompter import ChoicePrompter

logger = logging.getLogger(__name__)


class TurnActionType(Enum):
    """Kinds of top-level turn actions."""

    DRAW_DESTINATIONS = "draw_destinations"
    DRAW_CARDS = "draw_cards"
    BUILD_STATION = "build_station"
    CLAIM_ROUTE = "claim_route"


@dataclass
class TurnResult:
    """Result of one player's turn.

    Attributes:
        player_id: The player who took the turn.
        label: The label the player picked.
        action_type: What kind of action the label started.
        result: The resolver-specific result object.
    """

    player_id: int
    label: str
    action_type: TurnActionType
    result: Any = None


class TurnEngine:
    """Enumerates and executes top-level turn actions.

    Usage:
        engine = TurnEngine(state, prompter)
        result = engine.play_turn()
    """

    def __init__(self, state: GameState, prompter: ChoicePrompter):
        """Initialize the turn engine.

        Args:
            state: The current game state.
            prompter: Choice request for the current player.
        """
        self.state = state
        self.prompter = prompter
        self.draw_cards = DrawCardsResolver(state, prompter)
        self.routes = RouteResolver(state, prompter)
        self.stations = StationResolver(state, prompter)
        self.destinations = DestinationResolver(state, prompter)

    def get_legal_actions(self, player: Player | None = None) -> dict[str, TurnActionType]:
        """Return every legal label for the player, mapped to its action type.

        Args:
            player: The player to check (default: the current player).

        Returns:
            Ordered mapping of label to action type.
        """
        player = player if player is not None else self.state.get_current_player()
        actions: dict[str, TurnActionType] = {DESTINATIONS_LABEL: TurnActionType.DRAW_DESTINATIONS}

        for label in self.draw_cards.get_first_pick_choices():
            actions[label] = TurnActionType.DRAW_CARDS
        for city_name in self.stations.get_buildable_cities(player):
            actions[city_name] = TurnActionType.BUILD_STATION
        for route in self.routes.get_claimable_routes(player):
            actions[route.name] = TurnActionType.CLAIM_ROUTE
        return actions

    def play_turn(self) -> TurnResult:
        """Ask the current player for an action and carry it out."""
        player = self.state.get_current_player()
        actions = self.get_legal_actions(player)
        label = self.prompter.choose(f"{player.name}, choose an action", list(actions))
        return self.execute(label, actions[label])

    def execute(self, label: str, action_type: TurnActionType) -> TurnResult:
        """Dispatch a picked label to its resolver.

        Raises:
            ValueError: If the resolver rejects the action.
        """
        player = self.state.get_current_player()
        logger.debug("%s plays %s (%s)", player.name, label, action_type.value)

        if action_type == TurnActionType.DRAW_DESTINATIONS:
            result = self.destinations.resolve()
        elif action_type == TurnActionType.DRAW_CARDS:
            result = self.draw_cards.resolve(label)
        elif action_type == TurnActionType.BUILD_STATION:
            result = self.stations.resolve(label)
        elif action_type == TurnActionType.CLAIM_ROUTE:
            result = self.routes.resolve(label)
        else:
            raise ValueError(f"Unknown action type: {action_type}")

        return TurnResult(
            player_id=player.player_id,
            label=label,
            action_type=action_type,
            result=result,
        )
