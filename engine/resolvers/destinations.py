"""Destination draft resolver for the Rails Europe game engine.

A draft offers a handful of destinations and lets the player discard them
one at a time until only the minimum is left or the player stops. Kept
destinations are the player's for the rest of the game.

Mid-game drafts offer 3 cards from the destination pile and keep at least
1; discarded cards go back to the bottom of the pile. When the pile cannot
supply all 3, the player keeps whatever was drawn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, TYPE_CHECKING

from core.board import Destination
from core.constants import DESTINATIONS_PER_DRAW, DRAFT_MIN_KEEP
from engine.prompter import PASS

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player
    from engine.prompter import ChoicePrompter

logger = logging.getLogger(__name__)


def keep_minimum(offered: int, expected: int, min_keep: int) -> int:
    """Return how many destinations must be kept from a draft.

    Args:
        offered: Number of destinations actually offered.
        expected: Number a full draft would offer.
        min_keep: Minimum for a full draft.

    Returns:
        min_keep for a full draft, otherwise every offered card.
    """
    if offered < expected:
        return offered
    return min(min_keep, offered)


@dataclass
class DestinationDraftResult:
    """Result of a destination draft.

    Attributes:
        resolved: Whether any destination was offered.
        player_id: The drafting player.
        kept: Destinations added to the player's set.
        discarded: Destinations given back.
    """

    resolved: bool
    player_id: int
    kept: list[Destination] = field(default_factory=list)
    discarded: list[Destination] = field(default_factory=list)


class DestinationResolver:
    """Runs destination drafts for the current player."""

    def __init__(self, state: GameState, prompter: ChoicePrompter):
        """Initialize the resolver.

        Args:
            state: The current game state.
            prompter: Choice request used for each discard.
        """
        self.state = state
        self.prompter = prompter

    def draft(
        self,
        player: Player,
        offered: Sequence[Destination],
        min_keep: int,
        on_discard: Optional[Callable[[Destination], None]] = None,
    ) -> DestinationDraftResult:
        """Let a player discard offered destinations down to min_keep.

        The player must be the current player, since the choice request
        is addressed to the current player.

        Args:
            player: The drafting player.
            offered: Destinations on offer.
            min_keep: Fewest destinations the player may keep.
            on_discard: Called with each discarded destination.

        Returns:
            DestinationDraftResult with kept and discarded cards.
        """
        kept = list(offered)
        discarded: list[Destination] = []

        while len(kept) > min_keep:
            labels = [d.label for d in kept]
            response = self.prompter.choose(
                f"Discard a destination (up to {len(kept) - min_keep} more) or pass",
                [],
                buttons=labels,
                can_pass=True,
            )
            if response == PASS:
                break
            dropped = kept.pop(labels.index(response))
            discarded.append(dropped)
            if on_discard is not None:
                on_discard(dropped)

        player.add_destinations(kept)
        return DestinationDraftResult(
            resolved=bool(offered),
            player_id=player.player_id,
            kept=kept,
            discarded=discarded,
        )

    def resolve(self) -> DestinationDraftResult:
        """Draw up to 3 destinations for the current player and draft them."""
        player = self.state.get_current_player()
        piles = self.state.piles

        offered = []
        for _ in range(DESTINATIONS_PER_DRAW):
            destination = piles.draw_destination()
            if destination is None:
                break
            offered.append(destination)

        if not offered:
            logger.warning("Destination pile is empty, %s draws nothing", player.name)
            self.state.log(f"{player.name} finds no destination left")
            return DestinationDraftResult(resolved=False, player_id=player.player_id)
        if len(offered) < DESTINATIONS_PER_DRAW:
            logger.warning("Destination pile short: %d offered to %s", len(offered), player.name)

        min_keep = keep_minimum(len(offered), DESTINATIONS_PER_DRAW, DRAFT_MIN_KEEP)
        result = self.draft(player, offered, min_keep, on_discard=piles.return_destination)
        self.state.log(f"{player.name} keeps {len(result.kept)} destination(s)")
        return result
