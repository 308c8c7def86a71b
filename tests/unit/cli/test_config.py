"""Unit tests for the config commands."""

from pathlib import Path

from torrentprune.cli.main import app
from torrentprune.core.config import PruneConfig, load_config, save_config
from torrentprune.core.paths import get_config_path
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigCommands:
    """Tests for torrentprune config."""

    def test_path(self, isolated_config: Path) -> None:
        """config path prints the config file location."""
        result = runner.invoke(app, ["config", "path"])

        assert result.exit_code == 0
        assert result.stdout.strip() == str(isolated_config / "torrentprune" / "config.toml")

    def test_show_defaults(self) -> None:
        """config show prints the defaults when no file exists."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "defaults" in result.output
        assert "confirm = true" in result.output

    def test_show_saved_values(self) -> None:
        """config show reflects the saved file."""
        save_config(PruneConfig(surface=True))

        result = runner.invoke(app, ["config", "show"])

        assert "surface = true" in result.output

    def test_init_creates_file(self) -> None:
        """config init writes the default configuration."""
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert load_config(get_config_path()) == PruneConfig()

    def test_init_refuses_to_overwrite(self) -> None:
        """config init keeps an existing file unless forced."""
        save_config(PruneConfig(surface=True))

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 1
        assert load_config().surface is True

    def test_init_force(self) -> None:
        """config init --force resets the file."""
        save_config(PruneConfig(surface=True))

        result = runner.invoke(app, ["config", "init", "--force"])

        assert result.exit_code == 0
        assert load_config().surface is False

    def test_invalid_config_is_fatal(self) -> None:
        """Commands fail cleanly on an invalid config file."""
        path = get_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("nonsense = 1\n")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1
        assert "Failed to load config" in result.output
