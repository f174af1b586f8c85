"""Core data models for the Rails Europe game engine."""

from .constants import (
    CardColor,
    RouteKind,
    PlayerColor,
    Phase,
    SIMPLE_COLORS,
    MIN_PLAYERS,
    MAX_PLAYERS,
    CARDS_PER_COLOR,
    LOCOMOTIVE_CARDS,
    DECK_SIZE,
    STARTING_HAND_SIZE,
    VISIBLE_CARDS,
    INITIAL_TRAINS,
    INITIAL_STATIONS,
    STATION_VALUE,
    INITIAL_SCORE,
    STATION_COSTS,
    ROUTE_POINTS,
    END_GAME_TRAINS,
    DESTINATIONS_LABEL,
    BLIND_DRAW_LABEL,
)

from .config import GameConfig

from .board import (
    CityName,
    RouteName,
    make_city_pair,
    City,
    Route,
    Destination,
    Board,
)

from .cards import CardPiles, build_wagon_deck

from .player import Player

from .game_state import GameState

__all__ = [
    # Constants
    "CardColor",
    "RouteKind",
    "PlayerColor",
    "Phase",
    "SIMPLE_COLORS",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    "CARDS_PER_COLOR",
    "LOCOMOTIVE_CARDS",
    "DECK_SIZE",
    "STARTING_HAND_SIZE",
    "VISIBLE_CARDS",
    "INITIAL_TRAINS",
    "INITIAL_STATIONS",
    "STATION_VALUE",
    "INITIAL_SCORE",
    "STATION_COSTS",
    "ROUTE_POINTS",
    "END_GAME_TRAINS",
    "DESTINATIONS_LABEL",
    "BLIND_DRAW_LABEL",
    # Config
    "GameConfig",
    # Board
    "CityName",
    "RouteName",
    "make_city_pair",
    "City",
    "Route",
    "Destination",
    "Board",
    # Cards
    "CardPiles",
    "build_wagon_deck",
    # Player
    "Player",
    # Game State
    "GameState",
]
