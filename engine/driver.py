"""Interactive CLI driver for playing Rails Europe.

This module provides a text-based interface for playing a game in a
terminal. It serves as both a playable game and a reference for how any
other front end plugs into the engine.

The driver is designed to be extensible:
- TextRenderer is a GameObserver that prints every prompt and log message
  (swap it for any other observer)
- A reader thread turns stdin lines into responses on a QueueInputChannel
  (a network handler could feed the same channel)
- GameDriver wires both to a GameEngine and runs the game

Usage:
    python -m engine.driver Ada Bob --seed 7

Or from code:
    from engine.driver import GameDriver
    driver = GameDriver(GameConfig(player_names=("Ada", "Bob")))
    driver.run()
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
import threading
from pathlib import Path
from typing import Any, Iterable, Optional, TextIO

from core.config import GameConfig
from core.constants import PlayerColor

from engine.game_engine import GameEngine
from engine.prompter import ChannelClosed, GameObserver, QueueInputChannel
from engine.scoring import GameResult

logger = logging.getLogger(__name__)


# =============================================================================
# Display (observer)
# =============================================================================

class TextRenderer(GameObserver):
    """CLI text-based renderer for game snapshots."""

    # Box drawing characters
    H_LINE = "─"
    V_LINE = "│"
    TL_CORNER = "┌"
    TR_CORNER = "┐"
    BL_CORNER = "└"
    BR_CORNER = "┘"

    # Player colors (ANSI codes)
    PLAYER_COLORS = {
        PlayerColor.YELLOW.value: "\033[93m",
        PlayerColor.RED.value: "\033[91m",
        PlayerColor.BLUE.value: "\033[94m",
        PlayerColor.GREEN.value: "\033[92m",
        PlayerColor.PINK.value: "\033[95m",
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    def __init__(self, use_colors: bool = True, stream: Optional[TextIO] = None):
        """Initialize the renderer.

        Args:
            use_colors: Whether to use ANSI color codes.
            stream: Where to print (default: stdout).
        """
        self.use_colors = use_colors
        self.stream = stream if stream is not None else sys.stdout

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def _color(self, text: str, color: Optional[str]) -> str:
        """Apply color to text if colors are enabled."""
        if self.use_colors and color:
            return f"{color}{text}{self.RESET}"
        return text

    def _box(self, title: str, content: list[str], width: int = 70) -> str:
        """Create a box around content."""
        title_space = max(width - len(title) - 4, 0)
        lines = [f"{self.TL_CORNER}{self.H_LINE}{self.H_LINE} {title} {self.H_LINE * title_space}{self.TR_CORNER}"]
        for line in content:
            padding = max(width - len(self._strip_ansi(line)) - 2, 0)
            lines.append(f"{self.V_LINE} {line}{' ' * padding}{self.V_LINE}")
        lines.append(f"{self.BL_CORNER}{self.H_LINE * width}{self.BR_CORNER}")
        return "\n".join(lines)

    def _strip_ansi(self, text: str) -> str:
        """Strip ANSI escape codes from text."""
        return re.sub(r"\033\[[0-9;]*m", "", text)

    # -------------------------------------------------------------------------
    # GameObserver
    # -------------------------------------------------------------------------

    def on_prompt(self, snapshot: dict[str, Any]) -> None:
        self._print()
        self._print(self._color("=" * 72, self.DIM))
        self.render_players(snapshot)
        self.render_piles(snapshot)
        self.render_prompt(snapshot)

    def on_log(self, message: str) -> None:
        self._print(self._color(f"  * {message}", self.DIM))

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    def render_players(self, snapshot: dict[str, Any]) -> None:
        """Render every player's public status, plus the current hand."""
        content = []
        current = None
        for player in snapshot["players"]:
            marker = " <--" if player["is_current"] else ""
            name = self._color(player["name"], self.PLAYER_COLORS.get(player["color"]))
            content.append(
                f"{name}: score={player['score']}, trains={player['trains_remaining']}, "
                f"stations={player['stations_remaining']}, cards={len(player['hand'])}{marker}"
            )
            if player["is_current"]:
                current = player
        if current is not None:
            content.append("")
            content.append(f"Hand: {' '.join(current['hand']) or '-'}")
            for destination in current["destinations"]:
                content.append(
                    f"Destination: {destination['city1']} - {destination['city2']} "
                    f"({destination['points']})"
                )
        self._print(self._box(f"Players ({snapshot['phase']})", content))

    def render_piles(self, snapshot: dict[str, Any]) -> None:
        piles = snapshot["piles"]
        owned = sum(1 for route in snapshot["routes"] if route["owner"] is not None)
        content = [
            f"Visible: {' '.join(piles['visible']) or '-'}",
            f"Draw pile: {piles['draw_pile']}  Discard: {len(piles['discard_pile'])}  "
            f"Destinations: {piles['destination_pile']}  Routes claimed: {owned}",
        ]
        self._print(self._box("Table", content))

    def render_prompt(self, snapshot: dict[str, Any]) -> None:
        prompt = snapshot.get("prompt") or {}
        self._print(self._color(f"{prompt.get('player', '')}: {prompt.get('instruction', '')}", self.BOLD))
        buttons = prompt.get("buttons") or []
        if buttons:
            self._print("  " + " | ".join(buttons))
        if prompt.get("can_pass"):
            self._print(self._color("  (empty line to pass)", self.DIM))

    def render_game_over(self, result: GameResult, engine: GameEngine) -> None:
        """Render the final scores."""
        state = engine.state
        self._print()
        self._print("=" * 72)
        self._print(self._color("GAME OVER".center(72), self.BOLD))
        self._print("=" * 72)
        ranked = sorted(state.players, key=lambda p: p.score, reverse=True)
        for rank, player in enumerate(ranked, 1):
            detail = result.breakdown.get(player.player_id)
            extra = ""
            if detail is not None:
                extra = (
                    f" (destinations {detail.destination_points:+d}, "
                    f"longest path {detail.longest_path})"
                )
            self._print(f"  {rank}. {player.name}: {player.score} points{extra}")
        names = ", ".join(state.get_player(pid).name for pid in result.winners)
        self._print(self._color(f"\nWinner: {names}", self.BOLD))


# =============================================================================
# Game Driver
# =============================================================================

class GameDriver:
    """Main driver for running an interactive game session.

    This class wires together:
    - GameEngine for game logic
    - a QueueInputChannel fed by a reader thread
    - TextRenderer (or any observer) for display
    """

    def __init__(
        self,
        config: GameConfig,
        renderer: Optional[TextRenderer] = None,
        script_lines: Iterable[str] = (),
    ):
        """Initialize the game driver.

        Args:
            config: Session configuration.
            renderer: The renderer to use (default: TextRenderer).
            script_lines: Responses replayed before reading the input stream.
        """
        self.config = config
        self.renderer = renderer or TextRenderer()
        self.script_lines = list(script_lines)
        self.channel = QueueInputChannel()
        self.engine = GameEngine(self.channel, observers=[self.renderer])

    def _read_input(self, stream: TextIO) -> None:
        for line in stream:
            self.channel.submit(line.rstrip("\r\n"))
        logger.info("Input stream closed")
        self.channel.close()

    def run(self, input_stream: Optional[TextIO] = None) -> Optional[GameResult]:
        """Run a game until it ends or the input runs out.

        Args:
            input_stream: Where responses are read from (default: stdin).

        Returns:
            The final result, or None if the input closed first.
        """
        self.engine.reset(self.config)
        for line in self.script_lines:
            self.channel.submit(line)

        reader = threading.Thread(
            target=self._read_input,
            args=(input_stream if input_stream is not None else sys.stdin,),
            name="input-reader",
            daemon=True,
        )
        reader.start()

        try:
            result = self.engine.run()
        except ChannelClosed:
            logger.warning("Game abandoned: no more input")
            return None

        self.renderer.render_game_over(result, self.engine)
        return result


# =============================================================================
# Entry Point
# =============================================================================

def build_config(args: argparse.Namespace) -> GameConfig:
    """Build the session config from a JSON file and command line options."""
    data: dict[str, Any] = {}
    if args.config:
        with open(args.config, "r", encoding="utf-8") as f:
            data = json.load(f)
    if args.players:
        data["player_names"] = args.players
    if args.seed is not None:
        data["seed"] = args.seed
    return GameConfig.from_dict(data)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Play Rails Europe in the terminal",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("players", nargs="*", help="Player names in turn order (2-5)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for the deck")
    parser.add_argument("--config", type=Path, default=None, help="JSON file with game settings")
    parser.add_argument("--script", type=Path, default=None,
                        help="File of responses to replay before reading stdin")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Diagnostic logging level")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI driver."""
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = build_config(args)
    except (OSError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    script_lines: list[str] = []
    if args.script:
        script_lines = args.script.read_text(encoding="utf-8").splitlines()

    driver = GameDriver(config, TextRenderer(use_colors=not args.no_color), script_lines)
    try:
        result = driver.run()
    except KeyboardInterrupt:
        print("\n\nGame interrupted. Goodbye!")
        return 130
    return 0 if result is not None else 1


if __name__ == "__main__":
    sys.exit(main())
