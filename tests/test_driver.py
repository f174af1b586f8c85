"""Tests for the CLI driver and text renderer."""

import io
import json

import pytest

from core.config import GameConfig
from core.game_state import GameState
from engine.driver import GameDriver, TextRenderer, build_config, main, parse_args
from engine.prompter import ChoicePrompter, ScriptedInputChannel


# =============================================================================
# Renderer
# =============================================================================

class TestTextRenderer:
    """Test snapshot rendering."""

    def test_renders_prompt(self, state: GameState):
        """A prompt shows players, table and the request."""
        stream = io.StringIO()
        renderer = TextRenderer(use_colors=False, stream=stream)
        prompter = ChoicePrompter(state, ScriptedInputChannel(), [renderer])

        prompter.publish("Discard a destination", buttons=["Alpha - Beta (4)"], can_pass=True)

        out = stream.getvalue()
        assert "Ada" in out and "Bob" in out
        assert "Hand:" in out
        assert "Visible:" in out
        assert "Ada: Discard a destination" in out
        assert "Alpha - Beta (4)" in out
        assert "empty line to pass" in out
        assert "\033[" not in out

    def test_renders_log(self):
        """Log messages are printed as they happen."""
        stream = io.StringIO()
        TextRenderer(use_colors=False, stream=stream).on_log("Ada draws RED")
        assert "Ada draws RED" in stream.getvalue()

    def test_colors(self, state: GameState):
        """Colors are applied when enabled."""
        stream = io.StringIO()
        renderer = TextRenderer(use_colors=True, stream=stream)
        renderer.on_prompt(state.to_dict())
        assert "\033[" in stream.getvalue()


# =============================================================================
# Driver
# =============================================================================

class TestGameDriver:
    """Test the threaded driver."""

    def test_input_end_abandons_game(self):
        """When the input stream ends, the game is abandoned cleanly."""
        stream = io.StringIO()
        driver = GameDriver(
            GameConfig(player_names=("Ada", "Bob"), seed=4),
            renderer=TextRenderer(use_colors=False, stream=stream),
            script_lines=["", ""],
        )

        result = driver.run(input_stream=io.StringIO("GRIS\n"))

        assert result is None
        # Setup done from the script, one draw pick from the stream
        assert len(driver.engine.state.players[0].destinations) == 4
        assert "choose an action" in stream.getvalue()


# =============================================================================
# Command line
# =============================================================================

class TestCommandLine:
    """Test argument parsing and config building."""

    def test_parse_defaults(self):
        """No arguments means a default two-player game."""
        args = parse_args([])
        assert args.players == []
        assert args.seed is None
        assert args.log_level == "WARNING"
        assert build_config(args) == GameConfig()

    def test_players_and_seed(self):
        """Positional names and --seed reach the config."""
        config = build_config(parse_args(["Ada", "Bob", "Cy", "--seed", "9"]))
        assert config.player_names == ("Ada", "Bob", "Cy")
        assert config.seed == 9

    def test_config_file(self, tmp_path):
        """Settings come from a JSON file, overridden by the command line."""
        path = tmp_path / "game.json"
        path.write_text(json.dumps({"player_names": ["X", "Y"], "longest_route_bonus": 0}))
        config = build_config(parse_args(["--config", str(path), "--seed", "1"]))
        assert config.player_names == ("X", "Y")
        assert config.longest_route_bonus == 0
        assert config.seed == 1

    def test_bad_config_exit_code(self, tmp_path):
        """An invalid config exits with status 2."""
        path = tmp_path / "game.json"
        path.write_text(json.dumps({"colour": "red"}))
        assert main(["--config", str(path)]) == 2
        assert main(["Solo"]) == 2

    def test_main_without_input(self, monkeypatch, capsys):
        """With an empty stdin the game is abandoned (status 1)."""
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        assert main(["Ada", "Bob", "--seed", "3", "--no-color"]) == 1
        assert "Ada" in capsys.readouterr().out
