"""Card piles for the Rails Europe game engine.

CardPiles owns every wagon card that is not in a player's hand or staging
buffer (draw pile, discard pile, face-up row) and the destination pile.
Cards only move through its methods so the deck total stays constant.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .board import Destination
from .constants import (
    CardColor,
    SIMPLE_COLORS,
    CARDS_PER_COLOR,
    LOCOMOTIVE_CARDS,
    VISIBLE_CARDS,
    MAX_VISIBLE_LOCOMOTIVES,
)

logger = logging.getLogger(__name__)


def build_wagon_deck() -> list[CardColor]:
    """Return the full, unshuffled wagon deck (110 cards)."""
    deck = [color for color in SIMPLE_COLORS for _ in range(CARDS_PER_COLOR)]
    deck.extend([CardColor.LOCOMOTIVE] * LOCOMOTIVE_CARDS)
    return deck


@dataclass
class CardPiles:
    """Shared wagon and destination piles.

    The last element of ``draw_pile`` is its top card. The first element of
    ``destination_pile`` is its top card; returned destinations go to the end.

    Attributes:
        draw_pile: Face-down wagon cards.
        discard_pile: Wagon cards spent or discarded.
        visible: The face-up row (5 cards unless the deck runs dry).
        destination_pile: Short destinations still available to draw.
        rng: Random source used for every shuffle.
    """

    draw_pile: list[CardColor] = field(default_factory=list)
    discard_pile: list[CardColor] = field(default_factory=list)
    visible: list[CardColor] = field(default_factory=list)
    destination_pile: list[Destination] = field(default_factory=list)
    rng: random.Random = field(default_factory=random.Random, repr=False)

    @classmethod
    def create(
        cls,
        destinations: Iterable[Destination] = (),
        rng: Optional[random.Random] = None,
    ) -> CardPiles:
        """Create piles holding a freshly shuffled deck.

        Args:
            destinations: Short destinations for the destination pile.
            rng: Random source (a new unseeded one if omitted).

        Returns:
            CardPiles with the whole deck face down and no visible cards.
        """
        rng = rng if rng is not None else random.Random()
        draw_pile = build_wagon_deck()
        rng.shuffle(draw_pile)
        destination_pile = list(destinations)
        rng.shuffle(destination_pile)
        return cls(draw_pile=draw_pile, destination_pile=destination_pile, rng=rng)

    # -------------------------------------------------------------------------
    # Wagon cards
    # -------------------------------------------------------------------------

    def has_wagon_cards(self) -> bool:
        """Check if a blind draw can yield a card."""
        return bool(self.draw_pile) or bool(self.discard_pile)

    def reshuffle_discard(self) -> bool:
        """Shuffle the discard pile into the draw pile.

        Returns:
            True if any card was moved.
        """
        if not self.discard_pile:
            return False
        self.draw_pile.extend(self.discard_pile)
        self.discard_pile.clear()
        self.rng.shuffle(self.draw_pile)
        logger.debug("Reshuffled discard pile, draw pile now has %d cards", len(self.draw_pile))
        return True

    def draw_wagon_card(self) -> Optional[CardColor]:
        """Draw the top card of the draw pile.

        An empty draw pile is first refilled from the shuffled discard pile.

        Returns:
            The drawn card, or None if both piles are empty.
        """
        if not self.draw_pile:
            self.reshuffle_discard()
        if not self.draw_pile:
            logger.warning("Wagon deck exhausted: nothing to draw")
            return None
        return self.draw_pile.pop()

    def discard_wagon_card(self, card: CardColor) -> None:
        """Discard a card, or show it face up if the row is short."""
        if len(self.visible) < VISIBLE_CARDS:
            self.visible.append(card)
        else:
            self.discard_pile.append(card)

    def discard_wagon_cards(self, cards: Iterable[CardColor]) -> None:
        for card in cards:
            self.discard_wagon_card(card)

    # -------------------------------------------------------------------------
    # Face-up row
    # -------------------------------------------------------------------------

    def visible_locomotives(self) -> int:
        return self.visible.count(CardColor.LOCOMOTIVE)

    def refill_visible(self) -> None:
        """Top the row up to 5 cards, then apply the locomotive limit."""
        self._fill_row()
        self._enforce_locomotive_limit()

    def take_visible(self, card: CardColor) -> CardColor:
        """Take one face-up card and replace it from the draw pile.

        Raises:
            ValueError: If no such card is face up.
        """
        if card not in self.visible:
            raise ValueError(f"{card.label} is not among the visible cards")
        self.visible.remove(card)
        replacement = self.draw_wagon_card()
        if replacement is not None:
            self.visible.append(replacement)
        self._enforce_locomotive_limit()
        return card

    def _fill_row(self) -> None:
        while len(self.visible) < VISIBLE_CARDS:
            card = self.draw_wagon_card()
            if card is None:
                break
            self.visible.append(card)

    def _row_can_be_fixed(self) -> bool:
        # A redealt row needs enough non-locomotives somewhere outside the hands
        pool = self.draw_pile + self.discard_pile + self.visible
        non_locomotives = sum(1 for c in pool if c != CardColor.LOCOMOTIVE)
        row_size = min(VISIBLE_CARDS, len(pool))
        return non_locomotives >= row_size - MAX_VISIBLE_LOCOMOTIVES

    def _enforce_locomotive_limit(self) -> None:
        while self.visible_locomotives() > MAX_VISIBLE_LOCOMOTIVES:
            if not self._row_can_be_fixed():
                logger.warning("Too few non-locomotive cards left to redeal the visible row")
                return
            logger.debug("%d locomotives face up: redealing the row", self.visible_locomotives())
            self.discard_pile.extend(self.visible)
            self.visible.clear()
            self._fill_row()

    # -------------------------------------------------------------------------
    # Destinations
    # -------------------------------------------------------------------------

    def draw_destination(self) -> Optional[Destination]:
        """Draw the top destination, or None if the pile is empty."""
        if not self.destination_pile:
            return None
        return self.destination_pile.pop(0)

    def return_destination(self, destination: Destination) -> None:
        """Put a destination at the bottom of the pile."""
        self.destination_pile.append(destination)

    # -------------------------------------------------------------------------
    # Accounting
    # -------------------------------------------------------------------------

    def count_wagon_cards(self) -> int:
        """Return the number of wagon cards held by the piles."""
        return len(self.draw_pile) + len(self.discard_pile) + len(self.visible)
