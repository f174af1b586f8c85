"""Route claim resolver for the Rails Europe game engine.

Handles the three route kinds:
- Plain routes: pay the length in one color (locomotives substitute)
- Ferries: same, but the required locomotives are staged first
- Tunnels: the base payment may be abandoned; once paid, 3 cards are drawn
  and discarded, and each one matching the payment color (or a locomotive)
  costs one extra card. Refusing the extra cards abandons the claim and
  returns every staged card to the hand.

Completing a claim moves the cards to the discard pile, places the trains
(base length only), scores the route and, in small games, blocks the
parallel route between the same two cities.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from core.constants import CardColor, TUNNEL_TOLL_CARDS
from core.board import Route, RouteName
from engine.payment import PaymentSession, can_afford

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player
    from engine.prompter import ChoicePrompter

logger = logging.getLogger(__name__)


@dataclass
class TunnelToll:
    """Outcome of the tunnel toll draw.

    Attributes:
        cards: The cards drawn and discarded (up to 3).
        extra_cards: Additional cards the player had to pay.
    """

    cards: list[CardColor]
    extra_cards: int


@dataclass
class RouteClaimResult:
    """Result of a route claim attempt.

    Attributes:
        resolved: Whether the route changed owner.
        player_id: The claiming player.
        route_name: The route targeted.
        aborted: True if the player abandoned a tunnel claim.
        cards_paid: Cards moved to the discard pile.
        points_scored: Points added to the player's score.
        toll: Tunnel toll details (tunnels only).
        blocked_routes: Parallel routes made unclaimable by this claim.
    """

    resolved: bool
    player_id: int
    route_name: RouteName
    aborted: bool = False
    cards_paid: list[CardColor] = field(default_factory=list)
    points_scored: int = 0
    toll: Optional[TunnelToll] = None
    blocked_routes: list[RouteName] = field(default_factory=list)


class RouteResolver:
    """Resolves route claims (plain, ferry and tunnel)."""

    def __init__(self, state: GameState, prompter: ChoicePrompter):
        """Initialize the resolver.

        Args:
            state: The current game state.
            prompter: Choice request used to collect payment.
        """
        self.state = state
        self.prompter = prompter

    # -------------------------------------------------------------------------
    # Legality
    # -------------------------------------------------------------------------

    def can_claim(self, player: Player, route: Route) -> bool:
        """Check if a player may start claiming a route.

        The route must be unowned and unblocked, the player must not own a
        parallel route already, have enough trains, and hold cards that can
        pay the base cost (including a ferry's locomotives).
        """
        if not route.is_available():
            return False
        if self.state.board.player_owns_pair(player.player_id, route):
            return False
        if player.trains_remaining < route.length:
            return False
        return can_afford(player, route.length, route.color, route.ferry_locomotives)

    def get_claimable_routes(self, player: Player) -> list[Route]:
        """Return every route the player may claim now, in board order."""
        return [route for route in self.state.board.iter_routes() if self.can_claim(player, route)]

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve(self, route_name: RouteName) -> RouteClaimResult:
        """Claim a route for the current player.

        Args:
            route_name: The route to claim.

        Returns:
            RouteClaimResult describing the claim.

        Raises:
            KeyError: If the route does not exist.
            ValueError: If the current player cannot claim the route.
        """
        route = self.state.board.get_route(route_name)
        player = self.state.get_current_player()
        if not self.can_claim(player, route):
            raise ValueError(f"{player.name} cannot claim {route.name}")

        session = PaymentSession(player, route.length, route.color)
        if route.is_ferry():
            session.stage_locomotives(route.ferry_locomotives)

        if route.is_tunnel():
            return self._claim_tunnel(player, route, session)

        if not session.collect(self.prompter, f"Choose cards to claim {route.name}"):
            # Only reachable if the hand changed since can_claim()
            session.abort()
            return RouteClaimResult(resolved=False, player_id=player.player_id, route_name=route.name, aborted=True)
        return self._complete(player, route, session)

    def _claim_tunnel(self, player: Player, route: Route, session: PaymentSession) -> RouteClaimResult:
        if not session.collect(self.prompter, f"Choose cards to dig the tunnel {route.name}", can_pass=True):
            return self._abort(player, route, session, toll=None)

        toll = self._draw_toll(session)
        if toll.extra_cards:
            self.state.log(
                f"Tunnel {route.name}: {player.name} must pay {toll.extra_cards} more card(s)"
            )
            session.add_extra(toll.extra_cards)
            if not session.collect(self.prompter, f"Pay the tunnel toll for {route.name}", can_pass=True):
                return self._abort(player, route, session, toll=toll)

        result = self._complete(player, route, session)
        result.toll = toll
        return result

    def _draw_toll(self, session: PaymentSession) -> TunnelToll:
        """Draw 3 cards, discard them and count the ones that must be matched."""
        piles = self.state.piles
        drawn = []
        for _ in range(TUNNEL_TOLL_CARDS):
            card = piles.draw_wagon_card()
            if card is not None:
                drawn.append(card)
        piles.discard_wagon_cards(drawn)

        # payment_color is None only if the base payment was all locomotives
        extra = sum(
            1 for card in drawn
            if card == CardColor.LOCOMOTIVE or card == session.payment_color
        )
        self.state.log(f"Tunnel toll: {', '.join(card.label for card in drawn) or 'no cards'}")
        return TunnelToll(cards=drawn, extra_cards=extra)

    def _abort(
        self,
        player: Player,
        route: Route,
        session: PaymentSession,
        toll: Optional[TunnelToll],
    ) -> RouteClaimResult:
        session.abort()
        logger.warning("%s abandoned tunnel %s", player.name, route.name)
        self.state.log(f"{player.name} gives up the tunnel {route.name}")
        return RouteClaimResult(
            resolved=False,
            player_id=player.player_id,
            route_name=route.name,
            aborted=True,
            toll=toll,
        )

    def _complete(self, player: Player, route: Route, session: PaymentSession) -> RouteClaimResult:
        cards = session.commit(self.state.piles)
        route.claim(player.player_id)
        player.spend_trains(route.length)
        player.add_score(route.points)
        blocked = self._block_parallel_routes(route)

        self.state.log(f"{player.name} claims {route.name} (+{route.points} points)")
        return RouteClaimResult(
            resolved=True,
            player_id=player.player_id,
            route_name=route.name,
            cards_paid=cards,
            points_scored=route.points,
            blocked_routes=blocked,
        )

    def _block_parallel_routes(self, route: Route) -> list[RouteName]:
        if not self.state.config.blocks_double_routes:
            return []
        blocked = []
        for parallel in self.state.board.parallel_routes(route):
            if parallel.is_available():
                parallel.block()
                blocked.append(parallel.name)
        if blocked:
            logger.debug("Blocked parallel routes %s", blocked)
        return blocked
