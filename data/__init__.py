"""Map data loading utilities for the Rails Europe game engine."""

from .loader import (
    BoardLoader,
    BoardLoadError,
    DEFAULT_MAP,
    route_name,
    load_board,
    load_destinations,
    load_default_board,
    load_default_destinations,
    get_board_stats,
)

__all__ = [
    # Loader
    "BoardLoader",
    "BoardLoadError",
    "DEFAULT_MAP",
    "route_name",
    "load_board",
    "load_destinations",
    "load_default_board",
    "load_default_destinations",
    "get_board_stats",
]
