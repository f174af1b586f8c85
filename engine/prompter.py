"""Choice requests for the Rails Europe game engine.

Every decision a player makes goes through ChoicePrompter.choose(), the
engine's single suspension point. The prompter:
- publishes a snapshot of the game to every GameObserver
- blocks on an InputChannel until a valid response arrives
- answers by itself when there is nothing (or only one thing) to choose

Channels and observers are swappable: QueueInputChannel is fed by another
thread (CLI, network server), ScriptedInputChannel replays canned responses.
"""

from __future__ import annotations

import logging
import queue
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Iterable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from core.game_state import GameState

logger = logging.getLogger(__name__)

# The response that means "pass" / "decline"
PASS = ""


class ScriptExhausted(RuntimeError):
    """Raised when a scripted channel runs out of responses."""


class ChannelClosed(EOFError):
    """Raised when reading from a channel whose producer has gone away."""


# =============================================================================
# Input channels
# =============================================================================

class InputChannel(ABC):
    """Abstract source of player responses, one line per decision."""

    @abstractmethod
    def read_line(self) -> str:
        """Block until the next response is available and return it."""
        pass


class QueueInputChannel(InputChannel):
    """Single-producer/single-consumer channel backed by a queue.

    The producer (an input thread or a network handler) calls submit(); the
    game thread blocks in read_line() with no timeout. Once the producer
    calls close(), every further read raises ChannelClosed.
    """

    _CLOSED = None

    def __init__(self) -> None:
        self._queue: queue.Queue[Optional[str]] = queue.Queue()

    def submit(self, line: str) -> None:
        """Hand a response to the game thread."""
        self._queue.put(line)

    def close(self) -> None:
        """Signal that no more responses will come."""
        self._queue.put(self._CLOSED)

    def read_line(self) -> str:
        line = self._queue.get()
        if line is self._CLOSED:
            self._queue.put(self._CLOSED)
            raise ChannelClosed("Input channel closed")
        return line


class ScriptedInputChannel(InputChannel):
    """Replays a fixed sequence of responses."""

    def __init__(self, lines: Iterable[str] = ()) -> None:
        self._lines: deque[str] = deque(lines)
        self.consumed: list[str] = []

    def feed(self, *lines: str) -> None:
        """Append more responses to the script."""
        self._lines.extend(lines)

    def remaining(self) -> int:
        return len(self._lines)

    def read_line(self) -> str:
        if not self._lines:
            raise ScriptExhausted("No scripted response left")
        line = self._lines.popleft()
        self.consumed.append(line)
        return line


# =============================================================================
# Observers
# =============================================================================

class GameObserver(ABC):
    """Receives game snapshots and audit messages.

    Implement this interface to push state to a viewer. Calls are
    fire-and-forget: exceptions are logged and never reach the game.
    """

    @abstractmethod
    def on_prompt(self, snapshot: dict[str, Any]) -> None:
        """Called each time a choice request is issued."""
        pass

    def on_log(self, message: str) -> None:
        """Called for every audit log message."""
        pass


# =============================================================================
# Choice prompter
# =============================================================================

class ChoicePrompter:
    """Asks the current player to pick one of a set of labels.

    Attributes:
        state: The game whose current player is asked.
        channel: Where responses are read from.
        observers: Viewers notified before each read.
    """

    def __init__(
        self,
        state: GameState,
        channel: InputChannel,
        observers: Optional[Iterable[GameObserver]] = None,
    ):
        """Initialize the prompter.

        Args:
            state: The game state (snapshots and current player).
            channel: The response source.
            observers: Optional viewers to notify.
        """
        self.state = state
        self.channel = channel
        self.observers: list[GameObserver] = list(observers or [])
        for observer in self.observers:
            self.state.log_sinks.append(observer.on_log)

    def add_observer(self, observer: GameObserver) -> None:
        self.observers.append(observer)
        self.state.log_sinks.append(observer.on_log)

    def choose(
        self,
        instruction: str,
        choices: Iterable[str],
        buttons: Iterable[str] = (),
        can_pass: bool = False,
    ) -> str:
        """Wait for the current player to pick a valid choice.

        Free-text choices and buttons are equally valid; buttons are only
        rendered differently. Duplicates between the two are merged.

        Args:
            instruction: What the player is asked to do.
            choices: Valid free-text responses.
            buttons: Valid responses shown as buttons.
            can_pass: Whether the empty response (PASS) is accepted.

        Returns:
            A member of choices or buttons, or PASS.
            PASS is returned without asking when nothing is valid, and the
            only valid choice is returned without asking when passing is
            not allowed.
        """
        buttons = list(dict.fromkeys(buttons))
        valid = list(dict.fromkeys([*choices, *buttons]))

        if not valid:
            return PASS
        if len(valid) == 1 and not can_pass:
            return valid[0]

        while True:
            self.publish(instruction, buttons, can_pass)
            response = self.channel.read_line()
            if response in valid or (can_pass and response == PASS):
                logger.debug("%s chose %r", self.state.get_current_player().name, response)
                return response
            logger.debug("Rejected response %r to %r", response, instruction)

    def publish(self, instruction: str, buttons: Iterable[str] = (), can_pass: bool = False) -> None:
        """Show a request to the viewers without waiting for a response."""
        self.state.prompt = {
            "instruction": instruction,
            "buttons": list(buttons),
            "player": self.state.get_current_player().name,
            "can_pass": can_pass,
        }
        if not self.observers:
            return
        snapshot = self.state.to_dict()
        for observer in self.observers:
            try:
                observer.on_prompt(snapshot)
            except Exception:
                logger.exception("Observer %r failed on prompt", observer)
