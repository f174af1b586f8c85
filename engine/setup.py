"""Initial game setup logic for the Rails Europe game engine.

Handles the setup phase which occurs once at the beginning of each game.
Cards are dealt when the GameState is created; this module runs the
opening destination draft:
1. Each player, in turn order, is dealt 1 long and 3 short destinations
2. The player discards down to a minimum of 2 (or stops earlier)
3. Discarded short destinations go to the bottom of the destination pile;
   discarded long destinations leave the game

After setup completes, the game enters the main loop at MAIN.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from core.board import Destination
from core.constants import (
    SETUP_SHORT_DESTINATIONS,
    SETUP_LONG_DESTINATIONS,
    SETUP_MIN_KEEP,
)

from .resolvers import DestinationResolver, DestinationDraftResult, keep_minimum

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player
    from .prompter import ChoicePrompter

logger = logging.getLogger(__name__)


class SetupManager:
    """Manages the opening destination draft.

    Every player drafts once, in turn order from the initial player. The
    current player is moved to each drafter so that choice requests are
    addressed to them, and restored to the initial player at the end.
    """

    def __init__(self, state: GameState, prompter: ChoicePrompter):
        """Initialize the setup manager.

        Args:
            state: The game state to manage setup for.
            prompter: Choice request for the drafting player.
        """
        self.state = state
        self.prompter = prompter
        self.resolver = DestinationResolver(state, prompter)
        self._first_player = state.current_player_idx
        self._drafted: dict[int, DestinationDraftResult] = {}

    # -------------------------------------------------------------------------
    # Dealing
    # -------------------------------------------------------------------------

    def deal_destinations(self, player: Player) -> list[Destination]:
        """Deal the opening destinations for one player.

        Returns:
            Long destinations first, then short ones. Fewer cards are dealt
            if the piles run out.
        """
        dealt = []
        for _ in range(SETUP_LONG_DESTINATIONS):
            if self.state.long_destinations:
                dealt.append(self.state.long_destinations.pop(0))
        for _ in range(SETUP_SHORT_DESTINATIONS):
            destination = self.state.piles.draw_destination()
            if destination is None:
                break
            dealt.append(destination)

        expected = SETUP_LONG_DESTINATIONS + SETUP_SHORT_DESTINATIONS
        if len(dealt) < expected:
            logger.warning("Only %d destinations left to deal to %s", len(dealt), player.name)
        return dealt

    def _discard(self, destination: Destination) -> None:
        if destination.is_long:
            logger.debug("Long destination %s leaves the game", destination.label)
            return
        self.state.piles.return_destination(destination)

    # -------------------------------------------------------------------------
    # Drafting
    # -------------------------------------------------------------------------

    def get_player_order(self) -> list[int]:
        """Get drafting order (clockwise from the first player)."""
        num_players = self.state.num_players()
        return [(self._first_player + i) % num_players for i in range(num_players)]

    def get_next_player(self) -> Optional[int]:
        """Get the next player who still has to draft, or None if done."""
        for player_id in self.get_player_order():
            if player_id not in self._drafted:
                return player_id
        return None

    def draft_player(self, player_id: int) -> DestinationDraftResult:
        """Deal to and run the draft for one player.

        Raises:
            ValueError: If the player has already drafted.
        """
        if player_id in self._drafted:
            raise ValueError(f"Player {player_id} has already drafted destinations")

        self.state.set_current_player(player_id)
        player = self.state.get_current_player()
        offered = self.deal_destinations(player)
        expected = SETUP_LONG_DESTINATIONS + SETUP_SHORT_DESTINATIONS
        min_keep = keep_minimum(len(offered), expected, SETUP_MIN_KEEP)

        result = self.resolver.draft(player, offered, min_keep, on_discard=self._discard)
        self._drafted[player_id] = result
        self.state.log(f"{player.name} keeps {len(result.kept)} destination(s)")
        return result

    def run(self) -> list[DestinationDraftResult]:
        """Run the draft for every player, then hand the turn to the first player."""
        results = []
        while (player_id := self.get_next_player()) is not None:
            results.append(self.draft_player(player_id))
        self.state.set_current_player(self._first_player)
        return results

    # -------------------------------------------------------------------------
    # Setup Completion
    # -------------------------------------------------------------------------

    def is_setup_complete(self) -> bool:
        """Check if every player has drafted."""
        return self.get_next_player() is None

    def get_setup_summary(self) -> dict:
        """Get a summary of setup progress.

        Returns:
            Dictionary with setup progress details.
        """
        return {
            "drafted": {
                player_id: [d.label for d in result.kept]
                for player_id, result in self._drafted.items()
            },
            "long_destinations_left": len(self.state.long_destinations),
            "destination_pile": len(self.state.piles.destination_pile),
            "setup_complete": self.is_setup_complete(),
        }


def initialize_game(state: GameState, prompter: ChoicePrompter) -> SetupManager:
    """Run the opening destination draft for a freshly created game.

    Args:
        state: The game state to initialize (cards already dealt).
        prompter: Choice request for the drafting players.

    Returns:
        The SetupManager, with setup complete.
    """
    manager = SetupManager(state, prompter)
    manager.run()
    return manager
