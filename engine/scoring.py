"""End-of-game scoring for the Rails Europe game engine.

Route points and station costs are scored as the game goes. At game end:
- Each destination adds its value if its two cities are connected by the
  player's network, and subtracts it otherwise
- A station lets its owner use one route of another player touching that
  city; the routes are picked to give the best destination total
- The longest continuous path (no route used twice) earns a bonus; every
  player tied for it gets the bonus

The highest score wins; ties produce several winners.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, TYPE_CHECKING

import networkx as nx

from core.board import Board, Destination, Route, RouteName

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player

logger = logging.getLogger(__name__)


@dataclass
class PlayerScore:
    """End-of-game breakdown for one player.

    Attributes:
        player_id: The player.
        destination_points: Net points from destinations (may be negative).
        completed: Destinations connected at game end.
        failed: Destinations not connected.
        borrowed_routes: Other players' routes used through stations.
        longest_path: Length (in trains) of the longest continuous path.
        longest_path_bonus: Bonus awarded for the longest path.
        final_score: Score after end-of-game adjustments.
    """

    player_id: int
    destination_points: int = 0
    completed: list[Destination] = field(default_factory=list)
    failed: list[Destination] = field(default_factory=list)
    borrowed_routes: list[RouteName] = field(default_factory=list)
    longest_path: int = 0
    longest_path_bonus: int = 0
    final_score: int = 0


@dataclass
class GameResult:
    """Final result of a game.

    Attributes:
        winners: IDs of the players with the highest score.
        scores: Final score per player ID.
        breakdown: End-of-game scoring detail per player ID.
    """

    winners: list[int]
    scores: dict[int, int]
    breakdown: dict[int, PlayerScore] = field(default_factory=dict)


# =============================================================================
# Networks
# =============================================================================

def build_network(board: Board, player_id: int, borrowed: Iterable[Route] = ()) -> nx.Graph:
    """Build the graph of cities a player's routes connect.

    Args:
        board: The game board.
        player_id: Whose routes to use.
        borrowed: Extra routes made available through stations.

    Returns:
        Undirected graph with one edge per usable route.
    """
    network = nx.Graph()
    for route in itertools.chain(board.get_player_routes(player_id), borrowed):
        network.add_edge(route.city1, route.city2)
    return network


def is_connected(network: nx.Graph, destination: Destination) -> bool:
    """Check if a destination's cities are joined in a network."""
    if not (network.has_node(destination.city1) and network.has_node(destination.city2)):
        return False
    return nx.has_path(network, destination.city1, destination.city2)


def destination_points(network: nx.Graph, destinations: Sequence[Destination]) -> int:
    """Net destination points for a network (+value if connected, -value if not)."""
    return sum(d.points if is_connected(network, d) else -d.points for d in destinations)


def station_options(board: Board, player_id: int) -> list[list[Optional[Route]]]:
    """List, per station built by the player, the routes it could borrow.

    Each list starts with None (borrow nothing).
    """
    options = []
    for city in board.get_player_stations(player_id):
        candidates: list[Optional[Route]] = [None]
        candidates.extend(
            route for route in board.iter_routes()
            if route.touches(city.name) and route.is_owned() and route.owner != player_id
        )
        options.append(candidates)
    return options


def best_destination_points(board: Board, player: Player) -> tuple[int, list[Route]]:
    """Find the station assignment giving the best destination total.

    Returns:
        The best net destination points and the routes borrowed for it.
    """
    best_points: Optional[int] = None
    best_borrowed: list[Route] = []
    for assignment in itertools.product(*station_options(board, player.player_id)):
        borrowed = [route for route in assignment if route is not None]
        network = build_network(board, player.player_id, borrowed)
        points = destination_points(network, player.destinations)
        if best_points is None or points > best_points:
            best_points, best_borrowed = points, borrowed
    return best_points or 0, best_borrowed


def longest_path_length(board: Board, player_id: int) -> int:
    """Length in trains of the player's longest path without reusing a route."""
    network = nx.Graph()
    for route in board.get_player_routes(player_id):
        network.add_edge(route.city1, route.city2, weight=route.length)

    longest = 0

    def dfs(city: str, used: set[frozenset[str]], length: int) -> None:
        nonlocal longest
        longest = max(longest, length)
        for neighbor in network.neighbors(city):
            edge = frozenset((city, neighbor))
            if edge in used:
                continue
            used.add(edge)
            dfs(neighbor, used, length + network[city][neighbor]["weight"])
            used.remove(edge)

    for start in network.nodes():
        dfs(start, set(), 0)
    return longest


# =============================================================================
# Final scoring
# =============================================================================

def determine_winners(players: Sequence[Player]) -> list[int]:
    """Return the IDs of every player sharing the highest score."""
    if not players:
        return []
    top = max(player.score for player in players)
    return [player.player_id for player in players if player.score == top]


def score_game(state: GameState) -> GameResult:
    """Apply end-of-game scoring to every player and pick the winners.

    Destination and longest path scoring are skipped when disabled by the
    session config; the scores then only hold in-game points.

    Args:
        state: The finished game.

    Returns:
        GameResult with winners, scores and the per-player breakdown.
    """
    config = state.config
    breakdown: dict[int, PlayerScore] = {}

    for player in state.players:
        detail = PlayerScore(player_id=player.player_id)
        if config.score_destinations:
            points, borrowed = best_destination_points(state.board, player)
            network = build_network(state.board, player.player_id, borrowed)
            detail.destination_points = points
            detail.borrowed_routes = [route.name for route in borrowed]
            for destination in player.destinations:
                target = detail.completed if is_connected(network, destination) else detail.failed
                target.append(destination)
            player.add_score(points)
        detail.longest_path = longest_path_length(state.board, player.player_id)
        breakdown[player.player_id] = detail

    if config.longest_route_bonus:
        best = max((d.longest_path for d in breakdown.values()), default=0)
        if best > 0:
            for player in state.players:
                detail = breakdown[player.player_id]
                if detail.longest_path == best:
                    detail.longest_path_bonus = config.longest_route_bonus
                    player.add_score(config.longest_route_bonus)
                    state.log(f"{player.name} has the longest path ({best} trains)")

    for player in state.players:
        breakdown[player.player_id].final_score = player.score
        logger.info("%s final score: %d", player.name, player.score)

    winners = determine_winners(state.players)
    names = " and ".join(state.get_player(pid).name for pid in winners)
    state.log(f"{names} win{'s' if len(winners) == 1 else ''} the game")
    return GameResult(
        winners=winners,
        scores={player.player_id: player.score for player in state.players},
        breakdown=breakdown,
    )
