"""Tests for end-of-game scoring."""

import pytest

from core.board import Destination
from core.game_state import GameState
from core.player import Player
from engine.scoring import (
    best_destination_points,
    build_network,
    destination_points,
    determine_winners,
    is_connected,
    longest_path_length,
    score_game,
)


def own(state: GameState, player_id: int, *route_names: str) -> None:
    for name in route_names:
        state.board.get_route(name).owner = player_id


# =============================================================================
# Networks and destinations
# =============================================================================

class TestDestinations:
    """Test destination connectivity."""

    def test_connected_and_failed(self, state: GameState):
        """Connected destinations add points; the others subtract."""
        own(state, 0, "Alpha - Beta", "Beta - Gamma")
        network = build_network(state.board, 0)
        done = Destination("Alpha", "Gamma", 5)
        missed = Destination("Gamma", "Epsilon", 7)

        assert is_connected(network, done)
        assert not is_connected(network, missed)
        assert destination_points(network, [done, missed]) == -2

    def test_city_outside_network(self, state: GameState):
        """A city the player never reached is not connected."""
        network = build_network(state.board, 0)
        assert not is_connected(network, Destination("Alpha", "Beta", 4))

    def test_station_borrows_one_route(self, state: GameState):
        """A station uses one opponent route touching its city."""
        own(state, 0, "Alpha - Beta", "Beta - Gamma")
        own(state, 1, "Gamma - Delta", "Delta - Epsilon")
        state.board.get_city("Gamma").build_station(0)
        player = state.players[0]
        player.destinations = [Destination("Alpha", "Delta", 8)]

        points, borrowed = best_destination_points(state.board, player)

        assert points == 8
        assert [r.name for r in borrowed] == ["Gamma - Delta"]

    def test_station_cannot_chain_routes(self, state: GameState):
        """One station never borrows two routes."""
        own(state, 0, "Alpha - Beta", "Beta - Gamma")
        own(state, 1, "Gamma - Delta", "Delta - Epsilon")
        state.board.get_city("Gamma").build_station(0)
        player = state.players[0]
        player.destinations = [Destination("Alpha", "Epsilon", 20, is_long=True)]

        points, _ = best_destination_points(state.board, player)

        assert points == -20

    def test_best_assignment_is_chosen(self, state: GameState):
        """The borrowed route is the one that scores best."""
        own(state, 0, "Beta - Gamma")
        own(state, 1, "Alpha - Beta", "Beta - Epsilon")
        state.board.get_city("Beta").build_station(0)
        player = state.players[0]
        player.destinations = [Destination("Gamma", "Epsilon", 7), Destination("Alpha", "Gamma", 5)]

        points, borrowed = best_destination_points(state.board, player)

        assert points == 2
        assert [r.name for r in borrowed] == ["Beta - Epsilon"]


# =============================================================================
# Longest path
# =============================================================================

class TestLongestPath:
    """Test the longest continuous path."""

    def test_no_routes(self, state: GameState):
        """A player without routes has no path."""
        assert longest_path_length(state.board, 0) == 0

    def test_weighted_by_length(self, state: GameState):
        """Paths are measured in trains, not routes."""
        own(state, 0, "Alpha - Beta", "Beta - Gamma", "Beta - Epsilon")
        # Gamma - Beta - Epsilon (3 + 4) beats any path through Alpha
        assert longest_path_length(state.board, 0) == 7

    def test_cycle_uses_each_route_once(self, europe_board):
        """A loop can be run once around, never twice."""
        for name in ("Bruxelles - Paris", "Frankfurt - Paris", "Bruxelles - Frankfurt"):
            europe_board.get_route(name).owner = 0
        # 2 + 3 + 2
        assert longest_path_length(europe_board, 0) == 7


# =============================================================================
# Final scoring
# =============================================================================

class TestScoreGame:
    """Test final scores and winners."""

    def test_determine_winners_ties(self):
        """Every player sharing the top score wins."""
        players = [Player(0, "A", score=30), Player(1, "B", score=30), Player(2, "C", score=10)]
        assert determine_winners(players) == [0, 1]

    def test_full_scoring(self, state: GameState):
        """Destinations and the longest path bonus are applied."""
        own(state, 0, "Alpha - Beta", "Beta - Gamma")
        own(state, 1, "Delta - Epsilon")
        state.players[0].destinations = [Destination("Alpha", "Gamma", 5)]
        state.players[1].destinations = [Destination("Alpha", "Epsilon", 20, is_long=True)]

        result = score_game(state)

        assert result.scores == {0: 12 + 5 + 10, 1: 12 - 20}
        assert result.winners == [0]
        assert result.breakdown[0].longest_path == 5
        assert result.breakdown[0].longest_path_bonus == 10
        assert result.breakdown[1].longest_path_bonus == 0
        assert result.breakdown[1].failed == state.players[1].destinations
        assert result.breakdown[0].final_score == 27
        assert "Ada wins the game" in state.messages[-1]

    def test_longest_path_tie_shares_bonus(self, state: GameState):
        """Tied longest paths all get the bonus."""
        own(state, 0, "Alpha - Beta")
        own(state, 1, "Delta - Epsilon")
        result = score_game(state)
        assert result.scores == {0: 22, 1: 22}
        assert result.winners == [0, 1]
        assert "Ada and Bob win the game" in state.messages[-1]

    def test_destination_scoring_disabled(self, make_state):
        """score_destinations=False leaves destinations out."""
        game = make_state(score_destinations=False, longest_route_bonus=0)
        game.players[0].destinations = [Destination("Alpha", "Gamma", 5)]
        result = score_game(game)
        assert result.scores == {0: 12, 1: 12}
        assert result.breakdown[0].destination_points == 0

    def test_bonus_disabled(self, make_state):
        """longest_route_bonus=0 removes the bonus."""
        game = make_state(longest_route_bonus=0)
        own(game, 0, "Alpha - Beta")
        result = score_game(game)
        assert result.breakdown[0].longest_path == 2
        assert result.scores[0] == 12

    @pytest.mark.parametrize("bonus", [5, 25])
    def test_custom_bonus(self, make_state, bonus):
        """The bonus value comes from the config."""
        game = make_state(longest_route_bonus=bonus)
        own(game, 1, "Alpha - Beta")
        assert score_game(game).scores[1] == 12 + bonus
