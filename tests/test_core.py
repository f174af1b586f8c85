"""Tests for the core game models: constants, config, board, player and state."""

import json
from collections import Counter

import pytest

from core.constants import (
    CardColor,
    RouteKind,
    Phase,
    SIMPLE_COLORS,
    DECK_SIZE,
    INITIAL_SCORE,
    INITIAL_TRAINS,
    STARTING_HAND_SIZE,
    VISIBLE_CARDS,
    ROUTE_POINTS,
)
from core.config import GameConfig
from core.board import Board, City, Route, Destination, make_city_pair
from core.player import Player
from core.game_state import GameState


# =============================================================================
# Constants
# =============================================================================

class TestConstants:
    """Test rule constants and card colors."""

    def test_deck_size(self):
        """The wagon deck holds 8 x 12 colored cards and 14 locomotives."""
        assert len(SIMPLE_COLORS) == 8
        assert DECK_SIZE == 110

    def test_initial_score_counts_unused_stations(self):
        """Players start with 12 points: 3 stations worth 4 each."""
        assert INITIAL_SCORE == 12

    def test_route_points_table(self):
        """Route points follow the published table."""
        assert ROUTE_POINTS == {1: 1, 2: 2, 3: 4, 4: 7, 6: 15, 8: 21}

    def test_card_labels_round_trip(self):
        """Card labels are the upper-case color names."""
        assert CardColor.RED.label == "RED"
        assert CardColor.from_label("LOCOMOTIVE") == CardColor.LOCOMOTIVE

    def test_unknown_label_raises(self):
        """An unknown label raises KeyError."""
        with pytest.raises(KeyError):
            CardColor.from_label("PURPLE")

    def test_simple_colors(self):
        """Locomotive and gray are not simple colors."""
        assert CardColor.BLUE.is_simple()
        assert not CardColor.LOCOMOTIVE.is_simple()
        assert not CardColor.GRAY.is_simple()


# =============================================================================
# GameConfig
# =============================================================================

class TestGameConfig:
    """Test session configuration."""

    def test_defaults(self):
        """Default config has two players and every scoring rule on."""
        config = GameConfig()
        assert config.num_players == 2
        assert config.score_destinations
        assert config.longest_route_bonus == 10

    @pytest.mark.parametrize("names", [("Solo",), ("A", "B", "C", "D", "E", "F")])
    def test_player_count_bounds(self, names):
        """Between 2 and 5 players are allowed."""
        with pytest.raises(ValueError):
            GameConfig(player_names=names)

    def test_duplicate_names_rejected(self):
        """Player names must be unique."""
        with pytest.raises(ValueError):
            GameConfig(player_names=("Ada", "Ada"))

    def test_negative_bonus_rejected(self):
        """The longest path bonus cannot be negative."""
        with pytest.raises(ValueError):
            GameConfig(longest_route_bonus=-1)

    def test_list_names_stored_as_tuple(self):
        """Names given as a list are stored as a tuple."""
        config = GameConfig(player_names=["Ada", "Bob"])
        assert config.player_names == ("Ada", "Bob")

    def test_double_routes_block_in_small_games(self):
        """Parallel routes block each other with 2 or 3 players only."""
        assert GameConfig(player_names=("A", "B", "C")).blocks_double_routes
        assert not GameConfig(player_names=("A", "B", "C", "D")).blocks_double_routes

    def test_from_dict(self):
        """from_dict builds a config from plain data."""
        config = GameConfig.from_dict({"player_names": ["Ada", "Bob", "Cy"], "seed": 3})
        assert config.num_players == 3
        assert config.seed == 3

    def test_from_dict_unknown_key(self):
        """Unknown keys are rejected."""
        with pytest.raises(ValueError, match="Unknown config keys"):
            GameConfig.from_dict({"players": ["Ada", "Bob"]})

    def test_to_dict_round_trip(self):
        """to_dict output is accepted by from_dict."""
        config = GameConfig(player_names=("Ada", "Bob"), seed=5, longest_route_bonus=0)
        assert GameConfig.from_dict(config.to_dict()) == config


# =============================================================================
# Board
# =============================================================================

@pytest.fixture
def tiny_board() -> Board:
    """A board with two cities joined by two routes."""
    board = Board()
    board.add_city("A")
    board.add_city("B")
    board.add_city("C")
    board.add_route(Route(name="A - B", city1="A", city2="B", length=2, color=CardColor.RED))
    board.add_route(Route(name="A - B (2)", city1="A", city2="B", length=2, color=CardColor.BLUE))
    return board


class TestBoard:
    """Test the board multigraph."""

    def test_city_pair_is_unordered(self):
        """City pairs do not depend on endpoint order."""
        assert make_city_pair("A", "B") == make_city_pair("B", "A")

    def test_duplicate_city_rejected(self, tiny_board: Board):
        """Adding a city twice raises."""
        with pytest.raises(ValueError):
            tiny_board.add_city("A")

    def test_route_to_unknown_city_rejected(self, tiny_board: Board):
        """Routes must join existing cities."""
        route = Route(name="A - Z", city1="A", city2="Z", length=1, color=CardColor.RED)
        with pytest.raises(ValueError):
            tiny_board.add_route(route)

    def test_parallel_routes(self, tiny_board: Board):
        """Both routes between A and B are found, each sees the other as parallel."""
        first = tiny_board.get_route("A - B")
        assert len(tiny_board.routes_between("B", "A")) == 2
        assert [r.name for r in tiny_board.parallel_routes(first)] == ["A - B (2)"]

    def test_player_owns_pair(self, tiny_board: Board):
        """Owning one route of a pair is detected from the other route."""
        tiny_board.get_route("A - B").claim(0)
        other = tiny_board.get_route("A - B (2)")
        assert tiny_board.player_owns_pair(0, other)
        assert not tiny_board.player_owns_pair(1, other)

    def test_claim_owned_route_raises(self, tiny_board: Board):
        """A route cannot change owner."""
        route = tiny_board.get_route("A - B")
        route.claim(0)
        with pytest.raises(ValueError):
            route.claim(1)

    def test_blocked_route_not_available(self, tiny_board: Board):
        """A blocked route cannot be claimed."""
        route = tiny_board.get_route("A - B (2)")
        route.block()
        assert not route.is_available()
        with pytest.raises(ValueError):
            route.claim(0)

    def test_block_leaves_owned_route_alone(self, tiny_board: Board):
        """Blocking has no effect on an owned route."""
        route = tiny_board.get_route("A - B")
        route.claim(1)
        route.block()
        assert route.claimable

    def test_station_build(self):
        """A city holds at most one station."""
        city = City(name="A")
        city.build_station(0)
        assert city.has_station()
        with pytest.raises(ValueError):
            city.build_station(1)

    def test_connectivity(self, tiny_board: Board):
        """C has no route, so the board is not connected."""
        assert not tiny_board.is_connected()

    def test_route_points_and_kinds(self):
        """Route points come from the table; kind helpers match."""
        route = Route(name="X", city1="A", city2="B", length=6, color=CardColor.GRAY,
                      kind=RouteKind.TUNNEL)
        assert route.points == 15
        assert route.is_tunnel() and route.is_wild()
        assert not route.is_ferry()

    def test_destination_label(self):
        """Destination labels show both cities and the value."""
        destination = Destination("Brest", "Petrograd", 20, is_long=True)
        assert destination.label == "Brest - Petrograd (20)"

    def test_clone_is_independent(self, tiny_board: Board):
        """A cloned board does not share ownership with the original."""
        copy = tiny_board.clone()
        copy.get_route("A - B").claim(0)
        assert tiny_board.get_route("A - B").owner is None


# =============================================================================
# Player
# =============================================================================

@pytest.fixture
def player() -> Player:
    """A player holding 2 red, 1 blue and 1 locomotive."""
    p = Player(player_id=0, name="Ada")
    p.add_cards([CardColor.RED, CardColor.RED, CardColor.BLUE, CardColor.LOCOMOTIVE])
    return p


class TestPlayer:
    """Test player hand and resources."""

    def test_initial_resources(self):
        """A new player has 45 trains, 3 stations and 12 points."""
        p = Player(player_id=0, name="Ada")
        assert p.trains_remaining == INITIAL_TRAINS
        assert p.stations_remaining == 3
        assert p.score == 12

    def test_can_pay_fixed_color(self, player: Player):
        """Locomotives top up a fixed color."""
        assert player.can_pay(3, CardColor.RED)
        assert not player.can_pay(4, CardColor.RED)
        assert player.can_pay(2, CardColor.BLUE)

    def test_can_pay_gray_uses_best_color(self, player: Player):
        """Gray routes count the largest color group plus locomotives."""
        assert player.can_pay(3)
        assert not player.can_pay(4)

    def test_hand_labels_sorted(self, player: Player):
        """Hand labels are distinct and sorted."""
        assert player.hand_labels() == ["BLUE", "LOCOMOTIVE", "RED"]

    def test_stage_and_return(self, player: Player):
        """Staged cards leave the hand and come back on return."""
        player.stage_card(CardColor.RED)
        assert player.count(CardColor.RED) == 1
        assert player.staged == [CardColor.RED]
        player.return_staged()
        assert player.count(CardColor.RED) == 2
        assert player.staged == []

    def test_stage_missing_card(self, player: Player):
        """Staging a card not in hand raises."""
        with pytest.raises(ValueError):
            player.stage_card(CardColor.GREEN)

    def test_release_staged(self, player: Player):
        """Released cards leave both hand and buffer."""
        player.stage_card(CardColor.BLUE)
        assert player.release_staged() == [CardColor.BLUE]
        assert player.hand_size() == 3
        assert not player.staged

    def test_station_cost_ladder(self):
        """Stations cost 1, 2 then 3 cards and each costs 4 points."""
        p = Player(player_id=0, name="Ada")
        costs = []
        while p.can_build_station():
            costs.append(p.station_cost())
            p.use_station()
        assert costs == [1, 2, 3]
        assert p.score == 0
        with pytest.raises(ValueError):
            p.station_cost()

    def test_spend_trains(self):
        """Trains cannot go negative."""
        p = Player(player_id=0, name="Ada", trains_remaining=3)
        p.spend_trains(3)
        assert p.trains_remaining == 0
        with pytest.raises(ValueError):
            p.spend_trains(1)


# =============================================================================
# GameState
# =============================================================================

class TestGameState:
    """Test game creation, validation and snapshots."""

    def test_initial_deal(self, state: GameState):
        """Each player gets 4 cards and 5 cards are face up."""
        for p in state.players:
            assert p.hand_size() == STARTING_HAND_SIZE
        assert len(state.piles.visible) == VISIBLE_CARDS
        assert state.count_wagon_cards() == DECK_SIZE
        assert state.phase == Phase.SETUP

    def test_initial_state_is_valid(self, state: GameState):
        """A fresh game passes validation."""
        assert state.validate() == []

    def test_seed_reproducible(self, make_state):
        """The same seed deals the same cards."""
        first, second = make_state(seed=42), make_state(seed=42)
        assert first.piles.draw_pile == second.piles.draw_pile
        assert [p.hand for p in first.players] == [p.hand for p in second.players]

    def test_player_colors_distinct(self, make_state):
        """Every player gets a different piece color."""
        game = make_state(names=("A", "B", "C", "D", "E"))
        assert len({p.color for p in game.players}) == 5

    def test_validate_detects_lost_card(self, state: GameState):
        """Removing a card from play breaks conservation."""
        state.piles.draw_pile.pop()
        assert any("conservation" in e for e in state.validate())

    def test_validate_detects_staged_cards(self, state: GameState):
        """Cards left in a staging buffer are flagged between actions."""
        player = state.players[0]
        player.stage_card(next(iter(player.hand)))
        assert any("staged" in e for e in state.validate())
        assert state.validate(between_actions=False) == []

    def test_validate_detects_double_pair(self, state: GameState):
        """A player may not own both routes between two cities."""
        for route in state.board.routes_between("Alpha", "Beta"):
            route.owner = 0
        assert any("two routes" in e for e in state.validate())

    def test_advance_wraps(self, state: GameState):
        """Turn order wraps around."""
        state.set_current_player(1)
        assert state.advance_current_player().player_id == 0

    def test_get_player_invalid(self, state: GameState):
        """Unknown player IDs raise."""
        with pytest.raises(ValueError):
            state.get_player(5)

    def test_log_forwards_to_sinks(self, state: GameState):
        """Audit messages reach every sink; a failing sink is ignored."""
        received = []

        def broken(message):
            raise RuntimeError("viewer gone")

        state.log_sinks.extend([broken, received.append])
        state.log("hello")
        assert received == ["hello"]
        assert state.messages[-1] == "hello"

    def test_to_dict_is_json(self, state: GameState):
        """The snapshot serializes to JSON and marks the current player."""
        snapshot = state.to_dict()
        json.dumps(snapshot)
        assert snapshot["phase"] == "setup"
        assert [p["is_current"] for p in snapshot["players"]] == [True, False]
        assert len(snapshot["piles"]["visible"]) == 5
        assert Counter(snapshot["players"][0]["hand"]) == Counter(
            card.label for card in state.players[0].hand.elements()
        )
