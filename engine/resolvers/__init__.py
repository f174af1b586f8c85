"""Turn action resolvers for the Rails Europe game engine.

This module contains one resolver per top-level turn action. Resolvers
handle the logic of executing an action once the player has picked it.

Each resolver:
- Takes the game state and the choice prompter as input
- Provides legality checks used by the turn engine to enumerate actions
- Provides resolve() to execute the action and update state, asking the
  player for any sub-choices (cards to pay, destinations to discard)
- Returns a result dataclass with resolution details
"""

from .draw_cards import (
    DrawCardsResolver,
    DrawCardsResult,
    CardPick,
)

from .routes import (
    RouteResolver,
    RouteClaimResult,
    TunnelToll,
)

from .stations import (
    StationResolver,
    StationResult,
)

from .destinations import (
    DestinationResolver,
    DestinationDraftResult,
    keep_minimum,
)

__all__ = [
    # Draw cards
    "DrawCardsResolver",
    "DrawCardsResult",
    "CardPick",
    # Routes
    "RouteResolver",
    "RouteClaimResult",
    "TunnelToll",
    # Stations
    "StationResolver",
    "StationResult",
    # Destinations
    "DestinationResolver",
    "DestinationDraftResult",
    "keep_minimum",
]
