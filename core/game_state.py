"""Game state for the Rails Europe game engine.

GameState is the single source of truth for the entire game. It owns the
board, the players, the card piles and the audit log, and provides the
snapshot published to viewers and the invariant checks used by tests.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from .board import Board, Destination
from .cards import CardPiles
from .config import GameConfig
from .constants import (
    Phase,
    PlayerColor,
    DECK_SIZE,
    INITIAL_STATIONS,
    STARTING_HAND_SIZE,
    VISIBLE_CARDS,
)
from .player import Player

logger = logging.getLogger(__name__)

LogSink = Callable[[str], None]


@dataclass
class GameState:
    """The complete game state.

    Attributes:
        board: Cities and routes with their ownership.
        players: All players in turn order.
        piles: Draw, discard, visible and destination piles.
        config: Session configuration.
        long_destinations: Long destinations not yet dealt at setup.
        phase: Current game phase.
        current_player_idx: Index of the player whose turn it is.
        last_round_trigger_idx: Player who triggered the last round, if any.
        messages: Ordered audit log.
        prompt: The choice request currently shown, if any.
        log_sinks: Callables receiving every audit message.
    """

    board: Board
    players: list[Player]
    piles: CardPiles
    config: GameConfig
    long_destinations: list[Destination] = field(default_factory=list)
    phase: Phase = Phase.SETUP
    current_player_idx: int = 0
    last_round_trigger_idx: Optional[int] = None
    messages: list[str] = field(default_factory=list)
    prompt: Optional[dict[str, Any]] = None
    log_sinks: list[LogSink] = field(default_factory=list, repr=False)

    @classmethod
    def create_initial_state(
        cls,
        board: Board,
        config: GameConfig,
        short_destinations: Iterable[Destination] = (),
        long_destinations: Iterable[Destination] = (),
    ) -> GameState:
        """Create a game ready for the destination draft.

        Shuffles the deck, deals 4 cards to each player in turn order, then
        lays out the 5 visible cards.

        Args:
            board: The game board (already loaded with topology).
            config: Session configuration (players, seed, rule switches).
            short_destinations: Deck drawn from during the game.
            long_destinations: Deck dealt once at setup.

        Returns:
            A new GameState in the SETUP phase.
        """
        rng = random.Random(config.seed)
        piles = CardPiles.create(short_destinations, rng=rng)

        palette = list(PlayerColor)
        rng.shuffle(palette)
        players = [
            Player(player_id=i, name=name, color=palette[i])
            for i, name in enumerate(config.player_names)
        ]
        for player in players:
            for _ in range(STARTING_HAND_SIZE):
                card = piles.draw_wagon_card()
                if card is not None:
                    player.add_card(card)
        piles.refill_visible()

        longs = list(long_destinations)
        rng.shuffle(longs)

        logger.info("New game: %s (seed=%s)", ", ".join(config.player_names), config.seed)
        return cls(
            board=board,
            players=players,
            piles=piles,
            config=config,
            long_destinations=longs,
        )

    # -------------------------------------------------------------------------
    # Player access methods
    # -------------------------------------------------------------------------

    @property
    def rng(self) -> random.Random:
        return self.piles.rng

    def num_players(self) -> int:
        """Return the number of players."""
        return len(self.players)

    def get_current_player(self) -> Player:
        """Get the current player."""
        return self.players[self.current_player_idx]

    def get_player(self, player_id: int) -> Player:
        """Get a player by ID.

        Raises:
            ValueError: If player_id is invalid.
        """
        if not 0 <= player_id < len(self.players):
            raise ValueError(f"Invalid player ID: {player_id}")
        return self.players[player_id]

    def set_current_player(self, player_id: int) -> None:
        self.get_player(player_id)
        self.current_player_idx = player_id

    def advance_current_player(self) -> Player:
        """Move to the next player in turn order and return them."""
        self.current_player_idx = (self.current_player_idx + 1) % len(self.players)
        return self.get_current_player()

    # -------------------------------------------------------------------------
    # Phase management
    # -------------------------------------------------------------------------

    def set_phase(self, phase: Phase) -> None:
        """Set the current game phase."""
        self.phase = phase

    def is_game_over(self) -> bool:
        """Check if the game has ended."""
        return self.phase == Phase.GAME_OVER

    # -------------------------------------------------------------------------
    # Audit log
    # -------------------------------------------------------------------------

    def log(self, message: str) -> None:
        """Append a message to the audit log and forward it to the sinks."""
        self.messages.append(message)
        logger.info("%s", message)
        for sink in self.log_sinks:
            try:
                sink(message)
            except Exception:
                logger.exception("Log sink %r failed", sink)

    # -------------------------------------------------------------------------
    # Accounting and validation
    # -------------------------------------------------------------------------

    def count_wagon_cards(self) -> int:
        """Count wagon cards across piles, hands and staging buffers."""
        held = sum(player.hand_size() + len(player.staged) for player in self.players)
        return self.piles.count_wagon_cards() + held

    def validate(self, between_actions: bool = True) -> list[str]:
        """Validate the game state for consistency.

        Args:
            between_actions: Also require every staging buffer to be empty.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors: list[str] = []

        total = self.count_wagon_cards()
        if total != DECK_SIZE:
            errors.append(f"Card conservation broken: {total} cards, expected {DECK_SIZE}")

        if len(self.piles.visible) > VISIBLE_CARDS:
            errors.append(f"Too many visible cards: {len(self.piles.visible)}")

        if not 0 <= self.current_player_idx < len(self.players):
            errors.append(f"Invalid current_player_idx: {self.current_player_idx}")

        player_ids = {p.player_id for p in self.players}
        for i, player in enumerate(self.players):
            if player.player_id != i:
                errors.append(f"Player at index {i} has ID {player.player_id} (expected {i})")
            if player.trains_remaining < 0:
                errors.append(f"Player {i} has negative trains: {player.trains_remaining}")
            if player.stations_remaining < 0:
                errors.append(f"Player {i} has negative stations: {player.stations_remaining}")
            if any(n < 0 for n in player.hand.values()):
                errors.append(f"Player {i} has a negative card count in hand")
            if between_actions and player.staged:
                errors.append(f"Player {i} has staged cards between actions: {player.staged}")
            built = len(self.board.get_player_stations(i))
            if built != INITIAL_STATIONS - player.stations_remaining:
                errors.append(
                    f"Player {i} built {built} stations but has "
                    f"{player.stations_remaining} remaining"
                )

        owned_pairs: set[tuple[int, frozenset[str]]] = set()
        for route in self.board.iter_routes():
            if route.owner is None:
                continue
            if route.owner not in player_ids:
                errors.append(f"Route {route.name} owned by unknown player {route.owner}")
            key = (route.owner, route.city_pair)
            if key in owned_pairs:
                errors.append(f"Player {route.owner} owns two routes between {sorted(route.city_pair)}")
            owned_pairs.add(key)

        for city in self.board.cities.values():
            if city.owner is not None and city.owner not in player_ids:
                errors.append(f"City {city.name} owned by unknown player {city.owner}")

        return errors

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the public game state for viewers.

        Returns:
            JSON-serializable snapshot of players, board, piles and log.
        """
        board = self.board.to_dict()
        return {
            "phase": self.phase.value,
            "prompt": self.prompt,
            "current_player": self.get_current_player().name,
            "players": [
                p.to_dict(is_current=(i == self.current_player_idx))
                for i, p in enumerate(self.players)
            ],
            "cities": board["cities"],
            "routes": board["routes"],
            "piles": {
                "draw_pile": len(self.piles.draw_pile),
                "destination_pile": len(self.piles.destination_pile),
                "discard_pile": [card.label for card in self.piles.discard_pile],
                "visible": [card.label for card in self.piles.visible],
            },
            "log": list(self.messages),
        }

    def __str__(self) -> str:
        """Return a human-readable string representation."""
        lines = [
            f"GameState(phase={self.phase.value}, current={self.get_current_player().name})",
            f"  Draw pile: {len(self.piles.draw_pile)}, discard: {len(self.piles.discard_pile)}, "
            f"destinations: {len(self.piles.destination_pile)}",
            f"  Visible: {', '.join(card.label for card in self.piles.visible)}",
        ]
        for p in self.players:
            lines.append(
                f"  {p.name}: score={p.score}, trains={p.trains_remaining}, "
                f"stations={p.stations_remaining}, cards={p.hand_size()}, "
                f"destinations={len(p.destinations)}"
            )
        return "\n".join(lines)
