"""Main game engine for the Rails Europe game engine.

The GameEngine is the primary interface for playing a game. It provides:
- reset(): Initialize a new game (deal cards, lay out the visible row)
- run_setup(): Run the opening destination draft
- play_turn(): Let the current player take one turn and advance the game
- run(): Play a whole game and return the result

Every decision is read from the InputChannel given to the engine, so a
game can be driven by a console, a network handler or a script.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from core.board import Board, Destination
from core.config import GameConfig
from core.constants import Phase
from core.game_state import GameState
from core.player import Player
from data.loader import load_default_board, load_default_destinations

from .phase_machine import PhaseMachine
from .prompter import ChoicePrompter, GameObserver, InputChannel
from .scoring import GameResult, score_game
from .setup import SetupManager
from .turn_engine import TurnEngine, TurnActionType, TurnResult

logger = logging.getLogger(__name__)


class GameEngine:
    """Main engine for playing Rails Europe.

    The engine owns the game state, runs the turn order and detects the end
    of the game. Rules for individual actions live in the turn engine and
    its resolvers.

    Usage:
        engine = GameEngine(channel)
        engine.reset(GameConfig(player_names=("Ada", "Bob"), seed=7))
        result = engine.run()
    """

    def __init__(
        self,
        channel: InputChannel,
        observers: Optional[Iterable[GameObserver]] = None,
        check_invariants: bool = False,
    ):
        """Initialize the game engine.

        Args:
            channel: Where player responses are read from.
            observers: Viewers notified on every choice request.
            check_invariants: Validate the state after every turn and raise
                RuntimeError on any violation.
        """
        self.channel = channel
        self.observers: list[GameObserver] = list(observers or [])
        self.check_invariants = check_invariants
        self._state: Optional[GameState] = None
        self._prompter: Optional[ChoicePrompter] = None
        self._phase_machine: Optional[PhaseMachine] = None
        self._setup_manager: Optional[SetupManager] = None
        self._turn_engine: Optional[TurnEngine] = None
        self._final_turns_taken = 0
        self._result: Optional[GameResult] = None

    @property
    def state(self) -> GameState:
        """Get the current game state.

        Raises:
            RuntimeError: If the game has not been initialized.
        """
        if self._state is None:
            raise RuntimeError("Game not initialized. Call reset() first.")
        return self._state

    @property
    def prompter(self) -> ChoicePrompter:
        if self._prompter is None:
            raise RuntimeError("Game not initialized. Call reset() first.")
        return self._prompter

    @property
    def phase(self) -> Phase:
        """Get the current game phase."""
        return self.state.phase

    @property
    def result(self) -> Optional[GameResult]:
        """The final result, once the game is over."""
        return self._result

    def is_game_over(self) -> bool:
        """Check if the game has ended."""
        return self._phase_machine is not None and self._phase_machine.is_game_over()

    # -------------------------------------------------------------------------
    # Game Initialization
    # -------------------------------------------------------------------------

    def reset(
        self,
        config: Optional[GameConfig] = None,
        board: Optional[Board] = None,
        short_destinations: Optional[Iterable[Destination]] = None,
        long_destinations: Optional[Iterable[Destination]] = None,
    ) -> GameState:
        """Initialize a new game.

        Args:
            config: Session configuration (default: two players, random seed).
            board: Optional custom board. If None, uses the default map.
            short_destinations: Optional destination deck. If None (and no
                long destinations are given either), uses the default decks.
            long_destinations: Optional long destinations dealt at setup.

        Returns:
            The initial game state, in the SETUP phase.
        """
        config = config if config is not None else GameConfig()
        board = board if board is not None else load_default_board()
        if short_destinations is None and long_destinations is None:
            short_destinations, long_destinations = load_default_destinations()

        self._state = GameState.create_initial_state(
            board,
            config,
            short_destinations=short_destinations or (),
            long_destinations=long_destinations or (),
        )
        self._prompter = ChoicePrompter(self._state, self.channel, self.observers)
        self._phase_machine = PhaseMachine(initial_phase=Phase.SETUP)
        self._setup_manager = SetupManager(self._state, self._prompter)
        self._turn_engine = TurnEngine(self._state, self._prompter)
        self._final_turns_taken = 0
        self._result = None
        return self._state

    def run_setup(self) -> None:
        """Run the destination draft and enter the main loop.

        Raises:
            RuntimeError: If the game is not in the SETUP phase.
        """
        if self.phase != Phase.SETUP:
            raise RuntimeError(f"Setup already done (phase {self.phase.value})")
        self._setup_manager.run()
        self._transition_to_phase(Phase.MAIN)
        self._check_state()

    # -------------------------------------------------------------------------
    # Turn loop
    # -------------------------------------------------------------------------

    def get_legal_actions(self) -> dict[str, TurnActionType]:
        """Return the labels the current player may pick this turn."""
        return self._turn_engine.get_legal_actions()

    def play_turn(self) -> TurnResult:
        """Let the current player take one turn, then advance the game.

        Raises:
            RuntimeError: If the game is not in the main loop or last round.
        """
        if self.phase not in (Phase.MAIN, Phase.LAST_ROUND):
            raise RuntimeError(f"Cannot play a turn in phase {self.phase.value}")

        player = self.state.get_current_player()
        result = self._turn_engine.play_turn()
        self._check_state()
        self._after_turn(player)
        return result

    def _after_turn(self, player: Player) -> None:
        machine = self._phase_machine
        if machine.should_start_last_round(player):
            self.state.last_round_trigger_idx = player.player_id
            self._final_turns_taken = 0
            self._transition_to_phase(Phase.LAST_ROUND)
            self.state.log(
                f"{player.name} has {player.trains_remaining} trains left: last round"
            )
        elif machine.is_last_round():
            self._final_turns_taken += 1

        if machine.should_game_end(self.state, self._final_turns_taken):
            self._transition_to_phase(Phase.GAME_OVER)
            self._result = score_game(self.state)
            return

        self.state.advance_current_player()

    def _transition_to_phase(self, new_phase: Phase) -> None:
        transition = self._phase_machine.transition_to(new_phase)
        if not transition.success:
            raise RuntimeError(transition.reason)
        self.state.set_phase(new_phase)
        logger.debug("Phase is now %s", new_phase.value)

    def _check_state(self) -> None:
        if not self.check_invariants:
            return
        errors = self.state.validate()
        if errors:
            raise RuntimeError("Invalid game state: " + "; ".join(errors))

    def run(self) -> GameResult:
        """Play the game to the end.

        Returns:
            The final GameResult.
        """
        if self.phase == Phase.SETUP:
            self.run_setup()
        while not self.is_game_over():
            self.play_turn()
        self.prompter.publish("Game over")
        return self._result

    # -------------------------------------------------------------------------
    # Info
    # -------------------------------------------------------------------------

    def get_current_player(self) -> Player:
        """Get the current player."""
        return self.state.get_current_player()

    def get_game_summary(self) -> dict[str, Any]:
        """Get a summary of the game state."""
        state = self.state
        summary: dict[str, Any] = {
            "phase": state.phase.value,
            "current_player": state.get_current_player().name,
            "final_turns_taken": self._final_turns_taken,
            "last_round_trigger": state.last_round_trigger_idx,
            "players": [
                {
                    "name": p.name,
                    "score": p.score,
                    "trains": p.trains_remaining,
                    "stations": p.stations_remaining,
                    "cards": p.hand_size(),
                    "destinations": len(p.destinations),
                }
                for p in state.players
            ],
        }
        if self._result is not None:
            summary["winners"] = [state.get_player(pid).name for pid in self._result.winners]
        return summary

    def __str__(self) -> str:
        if self._state is None:
            return "GameEngine(not initialized)"
        return str(self._state)
