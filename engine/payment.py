"""Payment validation for the Rails Europe game engine.

A payment is built one card at a time: the player offers a card from hand,
the session accepts or rejects it, and accepted cards wait in the player's
staging buffer until the payment is committed (cards go to the discard
pile) or aborted (cards go back to the hand).

Matching rules:
- Locomotives are always accepted.
- On a fixed-color route only that color is accepted.
- On a gray route (and for stations) the first non-locomotive card fixes
  the color for the rest of the payment. It is only accepted if the hand
  still holds enough of that color plus locomotives to finish.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from core.constants import CardColor
from .prompter import PASS

if TYPE_CHECKING:
    from core.cards import CardPiles
    from core.player import Player
    from .prompter import ChoicePrompter

logger = logging.getLogger(__name__)


def can_afford(
    player: Player,
    length: int,
    color: CardColor = CardColor.GRAY,
    locomotives_required: int = 0,
) -> bool:
    """Check if a player's hand can pay for a route or station.

    Args:
        player: The paying player.
        length: Total number of cards to pay.
        color: Required color, or GRAY for any single color.
        locomotives_required: Cards that must be locomotives (ferries).

    Returns:
        True if some single color plus locomotives reaches the length.
    """
    if player.locomotives() < locomotives_required:
        return False
    return player.can_pay(length, color)


class PaymentSession:
    """Incremental payment of ``required`` cards by one player.

    Attributes:
        player: The paying player; their staging buffer holds the cards.
        required: Number of cards the payment needs (tunnels may raise it).
        payment_color: Color fixed for the payment, None while undecided.
    """

    def __init__(self, player: Player, required: int, color: CardColor = CardColor.GRAY):
        """Start a payment.

        Args:
            player: The paying player (staging buffer must be empty).
            required: Number of cards to pay.
            color: Required color, or GRAY for any single color.

        Raises:
            ValueError: If the player is already staging another payment.
        """
        if player.staged:
            raise ValueError(f"Player {player.player_id} already has staged cards")
        if required < 0:
            raise ValueError(f"Invalid payment size: {required}")
        self.player = player
        self.required = required
        self.payment_color: Optional[CardColor] = None if color == CardColor.GRAY else color
        self._locomotives_only = False

    @property
    def staged_count(self) -> int:
        return len(self.player.staged)

    @property
    def outstanding(self) -> int:
        """Cards still needed to complete the payment."""
        return self.required - self.staged_count

    def is_complete(self) -> bool:
        return self.staged_count >= self.required

    def accepts(self, card: CardColor) -> bool:
        """Check if offering this card now would be accepted."""
        if self.is_complete() or self.player.count(card) <= 0:
            return False
        if card == CardColor.LOCOMOTIVE:
            return True
        if not card.is_simple() or self._locomotives_only:
            return False
        if self.payment_color is not None:
            return card == self.payment_color
        # Look ahead: committing to this color must still allow completion
        available = self.player.count(card) + self.player.locomotives()
        return available >= self.outstanding

    def offer(self, card: CardColor) -> bool:
        """Stage a card if it is acceptable.

        Returns:
            True if the card was staged, False if it was rejected.
        """
        if not self.accepts(card):
            logger.debug("Payment rejected %s (color=%s)", card.label, self.payment_color)
            return False
        self.player.stage_card(card)
        if card != CardColor.LOCOMOTIVE and self.payment_color is None:
            self.payment_color = card
        return True

    def acceptable_labels(self) -> list[str]:
        """Return the labels of cards in hand that would be accepted now."""
        return [label for label in self.player.hand_labels() if self.accepts(CardColor.from_label(label))]

    def stage_locomotives(self, count: int) -> None:
        """Stage locomotives up front (ferry requirement).

        Raises:
            ValueError: If the hand holds fewer locomotives, or the count
                exceeds what is still owed.
        """
        if count > self.outstanding:
            raise ValueError(f"Cannot stage {count} locomotives for {self.outstanding} cards")
        if self.player.locomotives() < count:
            raise ValueError(
                f"Player {self.player.player_id} has {self.player.locomotives()} "
                f"locomotives, {count} required"
            )
        for _ in range(count):
            self.player.stage_card(CardColor.LOCOMOTIVE)

    def add_extra(self, count: int) -> None:
        """Raise the amount owed (tunnel toll).

        If no color was fixed yet (everything so far was locomotives), the
        extra cards must be locomotives too.
        """
        self.required += count
        if self.payment_color is None:
            self._locomotives_only = True

    def collect(self, prompter: ChoicePrompter, instruction: str, can_pass: bool = False) -> bool:
        """Ask the player for cards until the payment is complete.

        Only acceptable cards are offered, so every response is staged.

        Args:
            prompter: Choice request used for each card.
            instruction: Text shown with each request.
            can_pass: Whether the player may give up (tunnels).

        Returns:
            True once complete, False if the player passed or no card in
            hand is acceptable. Staged cards are left in place either way.
        """
        while not self.is_complete():
            labels = self.acceptable_labels()
            response = prompter.choose(f"{instruction} ({self.outstanding} left)", labels, can_pass=can_pass)
            if response == PASS:
                return False
            self.offer(CardColor.from_label(response))
        return True

    def commit(self, piles: CardPiles) -> list[CardColor]:
        """Discard the staged cards and close the payment.

        Raises:
            ValueError: If the payment is not complete.
        """
        if not self.is_complete():
            raise ValueError(
                f"Payment incomplete: {self.staged_count} of {self.required} cards staged"
            )
        cards = self.player.release_staged()
        piles.discard_wagon_cards(cards)
        return cards

    def abort(self) -> list[CardColor]:
        """Return every staged card to the hand."""
        returned = self.player.return_staged()
        logger.debug("Payment aborted, %d cards returned to hand", len(returned))
        return returned
