"""Game engine for the Rails Europe game.

This module provides the game logic including:
- Choice requests, input channels and state observers
- Payment validation for routes and stations
- Turn engine and one resolver per turn action
- Phase state machine for game flow control
- End-of-game scoring
- Game engine for coordinating game play
"""

from .prompter import (
    PASS,
    ChoicePrompter,
    InputChannel,
    QueueInputChannel,
    ScriptedInputChannel,
    GameObserver,
    ScriptExhausted,
    ChannelClosed,
)

from .payment import (
    PaymentSession,
    can_afford,
)

from .phase_machine import (
    PhaseMachine,
    PhaseTransitionResult,
    PHASE_TRANSITIONS,
)

from .turn_engine import (
    TurnEngine,
    TurnActionType,
    TurnResult,
)

from .setup import (
    SetupManager,
    initialize_game,
)

from .scoring import (
    GameResult,
    PlayerScore,
    score_game,
    determine_winners,
)

from .game_engine import GameEngine

__all__ = [
    # Prompter
    "PASS",
    "ChoicePrompter",
    "InputChannel",
    "QueueInputChannel",
    "ScriptedInputChannel",
    "GameObserver",
    "ScriptExhausted",
    "ChannelClosed",
    # Payment
    "PaymentSession",
    "can_afford",
    # Phase machine
    "PhaseMachine",
    "PhaseTransitionResult",
    "PHASE_TRANSITIONS",
    # Turn engine
    "TurnEngine",
    "TurnActionType",
    "TurnResult",
    # Setup
    "SetupManager",
    "initialize_game",
    # Scoring
    "GameResult",
    "PlayerScore",
    "score_game",
    "determine_winners",
    # Game engine
    "GameEngine",
]
