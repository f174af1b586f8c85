"""Phase state machine for the Rails Europe game engine.

Manages phase transitions including:
- Setup (destination draft, executed once at game start)
- Main turn loop
- Last round, triggered by a player running low on trains
- End game detection

The phase machine enforces valid transitions and provides
the logic for when transitions should occur.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from core.constants import Phase, END_GAME_TRAINS

if TYPE_CHECKING:
    from core.game_state import GameState
    from core.player import Player


# Valid phase transitions
PHASE_TRANSITIONS: dict[Phase, list[Phase]] = {
    Phase.SETUP: [Phase.MAIN],
    Phase.MAIN: [Phase.LAST_ROUND],
    Phase.LAST_ROUND: [Phase.GAME_OVER],
    # Terminal
    Phase.GAME_OVER: [],
}


@dataclass
class PhaseTransitionResult:
    """Result of a phase transition attempt.

    Attributes:
        success: Whether the transition was successful.
        new_phase: The new phase if successful, None otherwise.
        reason: Description of why the transition failed (if it did).
    """

    success: bool
    new_phase: Optional[Phase]
    reason: Optional[str] = None


class PhaseMachine:
    """State machine for managing game phase transitions.

    The phase machine tracks the current phase and enforces valid
    transitions. It does not modify game state directly; it only computes
    what the next phase should be.

    Phases:
        - SETUP: every player drafts their initial destinations
        - MAIN: players take turns in order
        - LAST_ROUND: every player except the trigger takes one more turn
        - GAME_OVER: Terminal state
    """

    def __init__(self, initial_phase: Phase = Phase.SETUP):
        """Initialize the phase machine.

        Args:
            initial_phase: The starting phase (default: SETUP).
        """
        self._phase = initial_phase

    @property
    def phase(self) -> Phase:
        """Get the current phase."""
        return self._phase

    def get_valid_transitions(self) -> list[Phase]:
        """Get the list of valid next phases from the current phase."""
        return PHASE_TRANSITIONS.get(self._phase, [])

    def can_transition_to(self, target_phase: Phase) -> bool:
        """Check if a transition to the target phase is valid."""
        return target_phase in self.get_valid_transitions()

    def transition_to(self, target_phase: Phase) -> PhaseTransitionResult:
        """Attempt to transition to a new phase.

        Args:
            target_phase: The phase to transition to.

        Returns:
            PhaseTransitionResult indicating success or failure.
        """
        if not self.can_transition_to(target_phase):
            valid = self.get_valid_transitions()
            return PhaseTransitionResult(
                success=False,
                new_phase=None,
                reason=f"Cannot transition from {self._phase.value} to {target_phase.value}. "
                f"Valid transitions: {[p.value for p in valid]}",
            )

        self._phase = target_phase
        return PhaseTransitionResult(success=True, new_phase=target_phase)

    def is_game_over(self) -> bool:
        """Check if the game has ended."""
        return self._phase == Phase.GAME_OVER

    def is_last_round(self) -> bool:
        return self._phase == Phase.LAST_ROUND

    # -------------------------------------------------------------------------
    # Phase transition logic helpers
    # -------------------------------------------------------------------------

    def should_start_last_round(self, player: Player) -> bool:
        """Check if the player who just played triggers the last round.

        Only the first trigger counts: once the last round has started,
        further low train counts change nothing.
        """
        return self._phase == Phase.MAIN and player.trains_remaining <= END_GAME_TRAINS

    def should_game_end(self, state: GameState, final_turns_taken: int) -> bool:
        """Check if every other player has taken their final turn."""
        if self._phase != Phase.LAST_ROUND:
            return False
        return final_turns_taken >= state.num_players() - 1

    def compute_next_phase(
        self,
        state: GameState,
        final_turns_taken: int = 0,
    ) -> PhaseTransitionResult:
        """Compute what the next phase should be after a turn.

        Args:
            state: The current game state.
            final_turns_taken: Turns played since the last round started.

        Returns:
            PhaseTransitionResult with the recommended next phase.
        """
        current = self._phase

        if current == Phase.SETUP:
            return PhaseTransitionResult(success=True, new_phase=Phase.MAIN)

        if current == Phase.MAIN:
            if self.should_start_last_round(state.get_current_player()):
                return PhaseTransitionResult(success=True, new_phase=Phase.LAST_ROUND)
            return PhaseTransitionResult(
                success=False,
                new_phase=None,
                reason="No player is low enough on trains",
            )

        if current == Phase.LAST_ROUND:
            if self.should_game_end(state, final_turns_taken):
                return PhaseTransitionResult(success=True, new_phase=Phase.GAME_OVER)
            return PhaseTransitionResult(
                success=False,
                new_phase=None,
                reason="Some players have not taken their final turn",
            )

        return PhaseTransitionResult(
            success=False,
            new_phase=None,
            reason="Game is over",
        )
