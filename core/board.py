"""Board model for the Rails Europe game engine.

The board is a static multigraph of cities connected by routes:
- Cities are nodes; a player may build one station in a city that has none
- Routes are edges; two routes may join the same pair of cities
- Topology is immutable; only ownership and the claimable flag change
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

import networkx as nx

from .constants import CardColor, RouteKind, ROUTE_POINTS


# Type aliases for clarity
CityName = str
RouteName = str
CityPair = frozenset[CityName]


def make_city_pair(city_a: CityName, city_b: CityName) -> CityPair:
    """Create an order-independent key for a pair of cities."""
    return frozenset((city_a, city_b))


@dataclass
class City:
    """A city on the board.

    Attributes:
        name: Unique city name.
        owner: ID of the player who built a station here, if any.
    """

    name: CityName
    owner: Optional[int] = None

    def has_station(self) -> bool:
        """Check if a station has been built in this city."""
        return self.owner is not None

    def build_station(self, player_id: int) -> None:
        """Record a station built by a player.

        Raises:
            ValueError: If the city already has a station.
        """
        if self.owner is not None:
            raise ValueError(f"{self.name} already has a station (player {self.owner})")
        self.owner = player_id

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "owner": self.owner}


@dataclass
class Route:
    """A claimable connection between two cities.

    Plain, ferry and tunnel routes share every field; the kind selects the
    claim protocol. Ferries additionally require ``ferry_locomotives``
    locomotive cards in the payment.

    Attributes:
        name: Unique route name (used as the choice label).
        city1: First endpoint.
        city2: Second endpoint.
        length: Number of train pieces (and cards) needed.
        color: Required card color, or GRAY for any single color.
        kind: Route variant.
        ferry_locomotives: Locomotives required by a ferry (0 otherwise).
        owner: ID of the claiming player, if any.
        claimable: False once the route has been blocked by its parallel twin.
    """

    name: RouteName
    city1: CityName
    city2: CityName
    length: int
    color: CardColor
    kind: RouteKind = RouteKind.PLAIN
    ferry_locomotives: int = 0
    owner: Optional[int] = None
    claimable: bool = True

    @property
    def city_pair(self) -> CityPair:
        """Return the order-independent pair of endpoints."""
        return make_city_pair(self.city1, self.city2)

    @property
    def points(self) -> int:
        """Points scored when this route is claimed."""
        return ROUTE_POINTS.get(self.length, 0)

    def is_tunnel(self) -> bool:
        return self.kind == RouteKind.TUNNEL

    def is_ferry(self) -> bool:
        return self.kind == RouteKind.FERRY

    def is_wild(self) -> bool:
        """Check if any single color can pay for this route."""
        return self.color == CardColor.GRAY

    def is_owned(self) -> bool:
        return self.owner is not None

    def is_available(self) -> bool:
        """Check if the route can still be claimed by someone."""
        return self.owner is None and self.claimable

    def touches(self, city: CityName) -> bool:
        """Check if the route has the given city as an endpoint."""
        return city in (self.city1, self.city2)

    def claim(self, player_id: int) -> None:
        """Transfer ownership of the route to a player.

        Raises:
            ValueError: If the route is owned or blocked.
        """
        if self.owner is not None:
            raise ValueError(f"Route {self.name} is already owned by player {self.owner}")
        if not self.claimable:
            raise ValueError(f"Route {self.name} is not claimable")
        self.owner = player_id

    def block(self) -> None:
        """Permanently disable an unowned route."""
        if self.owner is None:
            self.claimable = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "city1": self.city1,
            "city2": self.city2,
            "length": self.length,
            "color": self.color.label,
            "kind": self.kind.value,
            "ferry_locomotives": self.ferry_locomotives,
            "owner": self.owner,
            "claimable": self.claimable,
        }

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Destination:
    """A destination card: connect two cities to score its points.

    Attributes:
        city1: First city.
        city2: Second city.
        points: Value gained if connected (lost if not) at game end.
        is_long: Whether this is one of the long destinations dealt at setup.
    """

    city1: CityName
    city2: CityName
    points: int
    is_long: bool = False

    @property
    def label(self) -> str:
        """Name used for this destination in choice requests."""
        return f"{self.city1} - {self.city2} ({self.points})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "city1": self.city1,
            "city2": self.city2,
            "points": self.points,
            "is_long": self.is_long,
        }

    def __str__(self) -> str:
        return self.label


@dataclass
class Board:
    """The game board as a multigraph of cities and routes.

    Route order is the order routes were added and is kept for enumeration.

    Attributes:
        cities: Mapping from city name to city state.
        routes: Mapping from route name to route state.
        graph: Topology; one multigraph edge per route, keyed by route name.
    """

    cities: dict[CityName, City] = field(default_factory=dict)
    routes: dict[RouteName, Route] = field(default_factory=dict)
    graph: nx.MultiGraph = field(default_factory=nx.MultiGraph)

    def add_city(self, name: CityName) -> City:
        """Add a city to the board.

        Raises:
            ValueError: If the city already exists.
        """
        if name in self.cities:
            raise ValueError(f"Duplicate city: {name}")
        city = City(name=name)
        self.cities[name] = city
        self.graph.add_node(name)
        return city

    def add_route(self, route: Route) -> Route:
        """Add a route between two existing cities.

        Raises:
            ValueError: If the name is taken or an endpoint is unknown.
        """
        if route.name in self.routes:
            raise ValueError(f"Duplicate route: {route.name}")
        for city in (route.city1, route.city2):
            if city not in self.cities:
                raise ValueError(f"Route {route.name} references unknown city: {city}")
        self.routes[route.name] = route
        self.graph.add_edge(route.city1, route.city2, key=route.name)
        return route

    def get_city(self, name: CityName) -> City:
        """Get a city by name.

        Raises:
            KeyError: If the city does not exist.
        """
        return self.cities[name]

    def get_route(self, name: RouteName) -> Route:
        """Get a route by name.

        Raises:
            KeyError: If the route does not exist.
        """
        return self.routes[name]

    def routes_between(self, city_a: CityName, city_b: CityName) -> list[Route]:
        """Return every route joining two cities (0, 1 or 2 on the standard map)."""
        edges = self.graph.get_edge_data(city_a, city_b) or {}
        return [self.routes[name] for name in edges]

    def parallel_routes(self, route: Route) -> list[Route]:
        """Return the other routes joining the same two cities."""
        return [r for r in self.routes_between(route.city1, route.city2) if r.name != route.name]

    def player_owns_pair(self, player_id: int, route: Route) -> bool:
        """Check if a player already owns a route between this route's cities."""
        return any(r.owner == player_id for r in self.routes_between(route.city1, route.city2))

    def iter_routes(self) -> Iterator[Route]:
        return iter(self.routes.values())

    def get_player_routes(self, player_id: int) -> list[Route]:
        """Return all routes owned by a player."""
        return [route for route in self.routes.values() if route.owner == player_id]

    def get_player_stations(self, player_id: int) -> list[City]:
        """Return all cities where a player built a station."""
        return [city for city in self.cities.values() if city.owner == player_id]

    def get_free_cities(self) -> list[City]:
        """Return all cities without a station."""
        return [city for city in self.cities.values() if not city.has_station()]

    def get_available_routes(self) -> list[Route]:
        """Return all routes that are unowned and still claimable."""
        return [route for route in self.routes.values() if route.is_available()]

    def is_connected(self) -> bool:
        """Check if every city can be reached from every other city."""
        if self.graph.number_of_nodes() == 0:
            return True
        return nx.is_connected(self.graph)

    def clone(self) -> Board:
        """Create a deep copy of this board."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Serialize ownership state of every city and route."""
        return {
            "cities": [city.to_dict() for city in self.cities.values()],
            "routes": [route.to_dict() for route in self.routes.values()],
        }
