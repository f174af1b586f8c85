"""Draw cards resolver for the Rails Europe game engine.

Drawing wagon cards takes two picks:
- A visible locomotive is the whole draw; no second pick follows
- Any other visible card, or a blind draw from the pile ("GRIS"), grants a
  second pick: another blind draw or a visible non-locomotive card
- A blind draw that turns up a locomotive does not cancel the second pick

When the piles run dry a pick yields nothing and the turn goes on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from core.constants import CardColor, BLIND_DRAW_LABEL

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player
    from engine.prompter import ChoicePrompter

logger = logging.getLogger(__name__)


@dataclass
class CardPick:
    """One pick of a draw action.

    Attributes:
        label: What was chosen (a card label or the blind draw label).
        card: The card that reached the hand, None if the piles were empty.
    """

    label: str
    card: Optional[CardColor]

    @property
    def blind(self) -> bool:
        return self.label == BLIND_DRAW_LABEL


@dataclass
class DrawCardsResult:
    """Result of a draw cards action.

    Attributes:
        resolved: Whether the action was carried out.
        player_id: The drawing player.
        picks: The picks made, in order (one or two).
        second_pick_skipped: True if a second pick was owed but impossible.
    """

    resolved: bool
    player_id: int
    picks: list[CardPick] = field(default_factory=list)
    second_pick_skipped: bool = False

    @property
    def cards_drawn(self) -> list[CardColor]:
        return [pick.card for pick in self.picks if pick.card is not None]


class DrawCardsResolver:
    """Resolves the draw cards action for the current player."""

    def __init__(self, state: GameState, prompter: ChoicePrompter):
        """Initialize the resolver.

        Args:
            state: The current game state.
            prompter: Choice request for the second pick.
        """
        self.state = state
        self.prompter = prompter

    def get_first_pick_choices(self) -> list[str]:
        """Return the labels that start a draw action."""
        choices = []
        if self.state.piles.has_wagon_cards():
            choices.append(BLIND_DRAW_LABEL)
        choices.extend(dict.fromkeys(card.label for card in self.state.piles.visible))
        return choices

    def get_second_pick_choices(self) -> list[str]:
        """Return the labels allowed for the second pick (no locomotives)."""
        choices = []
        if self.state.piles.has_wagon_cards():
            choices.append(BLIND_DRAW_LABEL)
        choices.extend(dict.fromkeys(
            card.label for card in self.state.piles.visible
            if card != CardColor.LOCOMOTIVE
        ))
        return choices

    def resolve(self, first_label: str) -> DrawCardsResult:
        """Carry out a draw action starting with the given pick.

        Args:
            first_label: The blind draw label or a visible card label.

        Returns:
            DrawCardsResult with the picks made.

        Raises:
            ValueError: If the first pick is not available.
        """
        if first_label not in self.get_first_pick_choices():
            raise ValueError(f"Cannot draw {first_label!r}")

        player = self.state.get_current_player()
        result = DrawCardsResult(resolved=True, player_id=player.player_id)

        first = self._pick(player, first_label)
        result.picks.append(first)
        if not first.blind and first.card == CardColor.LOCOMOTIVE:
            self.state.log(f"{player.name} takes a visible locomotive")
            return result

        choices = self.get_second_pick_choices()
        if not choices:
            logger.warning("No card left for %s's second pick", player.name)
            result.second_pick_skipped = True
            self._log_draw(player, result)
            return result

        second_label = self.prompter.choose("Choose a second card", choices)
        result.picks.append(self._pick(player, second_label))
        self._log_draw(player, result)
        return result

    def _pick(self, player: Player, label: str) -> CardPick:
        piles = self.state.piles
        if label == BLIND_DRAW_LABEL:
            card = piles.draw_wagon_card()
        else:
            card = piles.take_visible(CardColor.from_label(label))
        if card is not None:
            player.add_card(card)
        return CardPick(label=label, card=card)

    def _log_draw(self, player: Player, result: DrawCardsResult) -> None:
        shown = [
            "a blind card" if pick.blind else pick.card.label
            for pick in result.picks
            if pick.card is not None
        ]
        self.state.log(f"{player.name} draws {', '.join(shown) or 'nothing'}")
