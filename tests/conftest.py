"""Shared fixtures for the Rails Europe test suite."""

from typing import Callable, Iterable

import pytest

from core.board import Board
from core.config import GameConfig
from core.constants import CardColor
from core.game_state import GameState
from core.player import Player
from data.loader import BoardLoader, load_default_board, load_default_destinations
from engine.prompter import ChoicePrompter, ScriptedInputChannel


# =============================================================================
# Boards
# =============================================================================

# Five cities in a line, with one double route and a few special routes
SMALL_MAP = {
    "cities": ["Alpha", "Beta", "Gamma", "Delta", "Epsilon"],
    "routes": [
        {"from": "Alpha", "to": "Beta", "length": 2, "color": "RED"},
        {"from": "Alpha", "to": "Beta", "length": 2, "color": "BLUE"},
        {"from": "Beta", "to": "Gamma", "length": 3, "color": "GRAY"},
        {"from": "Gamma", "to": "Delta", "length": 2, "color": "GRAY", "kind": "ferry", "locomotives": 1},
        {"from": "Delta", "to": "Epsilon", "length": 2, "color": "GREEN", "kind": "tunnel"},
        {"from": "Beta", "to": "Epsilon", "length": 4, "color": "GRAY", "kind": "tunnel"},
    ],
    "destinations": {
        "long": [["Alpha", "Epsilon", 20], ["Beta", "Delta", 21]],
        "short": [
            ["Alpha", "Gamma", 5],
            ["Beta", "Delta", 6],
            ["Gamma", "Epsilon", 7],
            ["Alpha", "Delta", 8],
            ["Beta", "Epsilon", 9],
            ["Alpha", "Beta", 4],
            ["Gamma", "Delta", 3],
            ["Delta", "Epsilon", 2],
        ],
    },
}


@pytest.fixture
def small_board() -> Board:
    """Load the small five-city test board."""
    return BoardLoader(strict=False).load_from_dict(SMALL_MAP)


@pytest.fixture
def small_destinations(small_board: Board):
    """Return the (short, long) destination decks of the small board."""
    return BoardLoader(strict=False).load_destinations(SMALL_MAP, small_board)


@pytest.fixture
def europe_board() -> Board:
    """Load the default Europe map."""
    return load_default_board()


# =============================================================================
# Game states
# =============================================================================

@pytest.fixture
def make_state(small_board: Board, small_destinations) -> Callable[..., GameState]:
    """Factory for game states on the small board."""
    short, long = small_destinations

    def _make(names: Iterable[str] = ("Ada", "Bob"), seed: int = 7, **config_kwargs) -> GameState:
        config = GameConfig(player_names=tuple(names), seed=seed, **config_kwargs)
        return GameState.create_initial_state(small_board, config, short, long)

    return _make


@pytest.fixture
def state(make_state) -> GameState:
    """A two-player game on the small board, cards dealt."""
    return make_state()


@pytest.fixture
def europe_state(europe_board: Board) -> GameState:
    """A two-player game on the Europe map, cards dealt."""
    short, long = load_default_destinations()
    config = GameConfig(player_names=("Ada", "Bob"), seed=11)
    return GameState.create_initial_state(europe_board, config, short, long)


@pytest.fixture
def channel() -> ScriptedInputChannel:
    """An empty scripted input channel; feed it per test."""
    return ScriptedInputChannel()


@pytest.fixture
def prompter(state: GameState, channel: ScriptedInputChannel) -> ChoicePrompter:
    """A prompter for the small-board game reading from the scripted channel."""
    return ChoicePrompter(state, channel)


# =============================================================================
# Card helpers
# =============================================================================

def _take_from_piles(state: GameState, card: CardColor) -> None:
    piles = state.piles
    for pile in (piles.draw_pile, piles.discard_pile):
        if card in pile:
            pile.remove(card)
            return
    raise AssertionError(f"No {card.label} card left outside the hands")


@pytest.fixture
def set_hand() -> Callable[[GameState, Player, Iterable[CardColor]], None]:
    """Replace a player's hand, moving cards to and from the piles.

    The old hand goes back into the draw pile and the new cards are taken
    from the draw or discard pile, so the deck total is unchanged.
    """

    def _set_hand(state: GameState, player: Player, cards: Iterable[CardColor]) -> None:
        state.piles.draw_pile.extend(player.hand.elements())
        player.hand.clear()
        for card in cards:
            _take_from_piles(state, card)
            player.add_card(card)

    return _set_hand


@pytest.fixture
def stack_deck() -> Callable[[GameState, Iterable[CardColor]], None]:
    """Put the given cards on top of the draw pile, first card drawn first."""

    def _stack(state: GameState, cards: Iterable[CardColor]) -> None:
        cards = list(cards)
        for card in cards:
            _take_from_piles(state, card)
        state.piles.draw_pile.extend(reversed(cards))

    return _stack
