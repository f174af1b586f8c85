"""Map data loader for the Rails Europe game engine.

Loads and validates a map from JSON files, converting it into a Board
instance plus the short and long destination decks.

Expected format:
    {
      "cities": ["Amsterdam", ...],
      "routes": [
        {"from": "Amsterdam", "to": "London", "length": 2, "color": "GRAY",
         "kind": "ferry", "locomotives": 2},
        ...
      ],
      "destinations": {"long": [["Brest", "Petrograd", 20], ...],
                       "short": [["Amsterdam", "Pamplona", 7], ...]}
    }

Route names are "<from> - <to>"; a second route between the same cities
gets a " (2)" suffix.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from core.constants import CardColor, RouteKind, VALID_ROUTE_LENGTHS
from core.board import Board, Destination, Route, make_city_pair

logger = logging.getLogger(__name__)

DEFAULT_MAP = Path(__file__).parent / "europe.json"


class BoardLoadError(Exception):
    """Raised when map loading or validation fails."""
    pass


def route_name(city_a: str, city_b: str, index: int = 1) -> str:
    """Build the choice label of a route (index > 1 for parallel routes)."""
    name = f"{city_a} - {city_b}"
    return name if index == 1 else f"{name} ({index})"


class BoardLoader:
    """Loads and validates map data from JSON files."""

    def __init__(self, strict: bool = True):
        """Initialize the loader.

        Args:
            strict: If True, require a connected map and the legal route
                lengths. Set to False for small test boards.
        """
        self.strict = strict

    def read_file(self, file_path: str | Path) -> dict[str, Any]:
        """Read and parse a JSON map file.

        Raises:
            BoardLoadError: If the file cannot be read or parsed.
        """
        path = Path(file_path)

        if not path.exists():
            raise BoardLoadError(f"Map file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise BoardLoadError(f"Invalid JSON in map file: {e}")
        except OSError as e:
            raise BoardLoadError(f"Error reading map file: {e}")

        if not isinstance(data, dict):
            raise BoardLoadError("Map data must be a dictionary")
        return data

    def load_from_file(self, file_path: str | Path) -> Board:
        """Load a board from a JSON file."""
        return self.load_from_dict(self.read_file(file_path))

    def load_from_dict(self, data: dict[str, Any]) -> Board:
        """Load a board from a dictionary.

        Args:
            data: Dictionary containing 'cities' and 'routes' keys.

        Returns:
            A Board with every city and route, all unowned.

        Raises:
            BoardLoadError: If validation fails.
        """
        self._validate_structure(data)

        board = Board()
        for name in data["cities"]:
            if not isinstance(name, str) or not name:
                raise BoardLoadError(f"Invalid city name: {name!r}")
            if name in board.cities:
                raise BoardLoadError(f"Duplicate city: {name}")
            board.add_city(name)

        seen_pairs: dict[frozenset[str], int] = {}
        for route_data in data["routes"]:
            route = self._create_route(route_data, board, seen_pairs)
            board.add_route(route)

        self._validate_board(board)
        logger.debug("Loaded map: %d cities, %d routes", len(board.cities), len(board.routes))
        return board

    def load_destinations(self, data: dict[str, Any], board: Board) -> tuple[list[Destination], list[Destination]]:
        """Load the short and long destination decks.

        Returns:
            (short destinations, long destinations)

        Raises:
            BoardLoadError: If a destination names an unknown city.
        """
        section = data.get("destinations")
        if not isinstance(section, dict):
            raise BoardLoadError("Map data missing 'destinations' section")
        short = [self._create_destination(d, board, is_long=False) for d in section.get("short", [])]
        long = [self._create_destination(d, board, is_long=True) for d in section.get("long", [])]
        return short, long

    def _validate_structure(self, data: dict[str, Any]) -> None:
        """Validate the basic structure of the map data."""
        if "cities" not in data:
            raise BoardLoadError("Map data missing 'cities' key")

        if "routes" not in data:
            raise BoardLoadError("Map data missing 'routes' key")

        if not isinstance(data["cities"], list):
            raise BoardLoadError("'cities' must be a list")

        if not isinstance(data["routes"], list):
            raise BoardLoadError("'routes' must be a list")

        if len(data["cities"]) == 0:
            raise BoardLoadError("Map must have at least one city")

    def _create_route(
        self,
        route_data: dict[str, Any],
        board: Board,
        seen_pairs: dict[frozenset[str], int],
    ) -> Route:
        """Create a Route from a route data dictionary."""
        for field in ("from", "to", "length", "color"):
            if field not in route_data:
                raise BoardLoadError(f"Route missing required field: {field}")

        city_a, city_b = route_data["from"], route_data["to"]
        for city in (city_a, city_b):
            if city not in board.cities:
                raise BoardLoadError(f"Route references unknown city: {city}")
        if city_a == city_b:
            raise BoardLoadError(f"Route cannot loop on {city_a}")

        length = route_data["length"]
        if not isinstance(length, int) or length <= 0:
            raise BoardLoadError(f"Invalid length {length!r} for {city_a} - {city_b}")
        if self.strict and length not in VALID_ROUTE_LENGTHS:
            raise BoardLoadError(
                f"Route {city_a} - {city_b} has length {length}; "
                f"valid lengths: {sorted(VALID_ROUTE_LENGTHS)}"
            )

        try:
            color = CardColor[route_data["color"]]
        except KeyError:
            raise BoardLoadError(f"Invalid color {route_data['color']!r} for {city_a} - {city_b}")
        if color == CardColor.LOCOMOTIVE:
            raise BoardLoadError(f"Route {city_a} - {city_b} cannot be locomotive-colored")

        try:
            kind = RouteKind(route_data.get("kind", RouteKind.PLAIN.value))
        except ValueError:
            raise BoardLoadError(f"Invalid kind {route_data.get('kind')!r} for {city_a} - {city_b}")

        locomotives = route_data.get("locomotives", 0)
        if kind == RouteKind.FERRY:
            if not isinstance(locomotives, int) or not 1 <= locomotives <= length:
                raise BoardLoadError(
                    f"Ferry {city_a} - {city_b} needs between 1 and {length} locomotives, "
                    f"got {locomotives!r}"
                )
        elif locomotives:
            raise BoardLoadError(f"Only ferries require locomotives ({city_a} - {city_b})")

        pair = make_city_pair(city_a, city_b)
        seen_pairs[pair] = seen_pairs.get(pair, 0) + 1

        return Route(
            name=route_name(city_a, city_b, seen_pairs[pair]),
            city1=city_a,
            city2=city_b,
            length=length,
            color=color,
            kind=kind,
            ferry_locomotives=locomotives,
        )

    def _create_destination(self, entry: Any, board: Board, is_long: bool) -> Destination:
        if not isinstance(entry, list) or len(entry) != 3:
            raise BoardLoadError(f"Destination must be [city, city, points]: {entry!r}")
        city_a, city_b, points = entry
        for city in (city_a, city_b):
            if city not in board.cities:
                raise BoardLoadError(f"Destination references unknown city: {city}")
        if not isinstance(points, int) or points <= 0:
            raise BoardLoadError(f"Invalid points {points!r} for destination {city_a} - {city_b}")
        return Destination(city1=city_a, city2=city_b, points=points, is_long=is_long)

    def _validate_board(self, board: Board) -> None:
        """Validate the complete board."""
        if self.strict and not board.is_connected():
            unreachable = sorted(
                city for city in board.cities
                if board.graph.degree(city) == 0
            )
            raise BoardLoadError(f"Map is not connected. Isolated cities: {unreachable}")


def load_board(file_path: str | Path, strict: bool = True) -> Board:
    """Convenience function to load a board from a file.

    Args:
        file_path: Path to the JSON map file.
        strict: If True, enforce strict validation.

    Returns:
        A Board instance with the loaded topology.
    """
    loader = BoardLoader(strict=strict)
    return loader.load_from_file(file_path)


def load_destinations(file_path: str | Path) -> tuple[list[Destination], list[Destination]]:
    """Load the (short, long) destination decks of a map file."""
    loader = BoardLoader(strict=False)
    data = loader.read_file(file_path)
    return loader.load_destinations(data, loader.load_from_dict(data))


def load_default_board() -> Board:
    """Load the default Europe map.

    Raises:
        BoardLoadError: If the default map file is missing or invalid.
    """
    return load_board(DEFAULT_MAP, strict=True)


def load_default_destinations() -> tuple[list[Destination], list[Destination]]:
    """Load the (short, long) destination decks of the default map."""
    return load_destinations(DEFAULT_MAP)


def get_board_stats(board: Board) -> dict[str, Any]:
    """Get statistics about a board.

    Args:
        board: The board to analyze.

    Returns:
        Dictionary with board statistics.
    """
    kinds = {kind.value: 0 for kind in RouteKind}
    for route in board.iter_routes():
        kinds[route.kind.value] += 1
    pairs = {route.city_pair for route in board.iter_routes()}

    return {
        "num_cities": len(board.cities),
        "num_routes": len(board.routes),
        "num_double_routes": len(board.routes) - len(pairs),
        "routes_by_kind": kinds,
        "total_length": sum(route.length for route in board.iter_routes()),
    }
