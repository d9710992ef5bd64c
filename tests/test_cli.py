"""Tests for the pitz command-line interface."""

import asyncio
import textwrap

import pytest
from typer.testing import CliRunner

from pitz.cli import app, load_configuration
from pitz.storage import JsonFileStorage
from pitz.types import SettingsConfiguration

MODULE = "pitz_cli_settings"

SETTINGS_SOURCE = textwrap.dedent(
    """
    from pitz.assembly import SettingsBuilder
    from pitz.relevance import RelevanceTemplates

    AUDIO = (
        SettingsBuilder()
        .setting("audio.enabled").type("boolean").default_value(True)
        .toggle("Enable Audio")
        .setting("audio.volume").type("number").default_value(50)
        .slider("Volume", min=0, max=100)
        .depends_on(RelevanceTemplates.depends_on("audio.enabled"))
        .tab("audio", "Audio")
        .group("Output").settings(["audio.enabled", "audio.volume"])
    )


    def build_cycle():
        return (
            SettingsBuilder()
            .setting("a").type("boolean").default_value(True).toggle("A")
            .depends_on(RelevanceTemplates.depends_on("b"))
            .setting("b").type("boolean").default_value(True).toggle("B")
            .depends_on(RelevanceTemplates.depends_on("a"))
            .tab("main", "Main")
            .group("Loop").settings(["a", "b"])
            .build()
        )


    NOT_A_CONFIGURATION = 42
    """
)

runner = CliRunner()


@pytest.fixture(autouse=True)
def settings_module(tmp_path, monkeypatch):
    """Importable settings module in an isolated working directory."""
    for name in ("PITZ_STORAGE_BACKEND", "PITZ_STORAGE_PATH", "PITZ_ENCRYPTION_KEY", "PITZ_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    (tmp_path / f"{MODULE}.py").write_text(SETTINGS_SOURCE)
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _json_config(tmp_path):
    store_path = tmp_path / "settings.json"
    config_path = tmp_path / "pitz.toml"
    config_path.write_text(
        "[store]\nthrottle_ms = 0\n\n"
        f'[storage]\nbackend = "json"\npath = "{store_path.as_posix()}"\n'
    )
    return config_path, store_path


class TestLoadConfiguration:
    """Test resolving module:attribute targets."""

    def test_builder_is_built(self):
        """A builder attribute is built into a configuration."""
        configuration = load_configuration(f"{MODULE}:AUDIO")

        assert isinstance(configuration, SettingsConfiguration)
        assert configuration.structure.keys() == ["audio.enabled", "audio.volume"]

    def test_callable_is_called(self):
        """A factory function is called."""
        configuration = load_configuration(f"{MODULE}:build_cycle")
        assert [d.key for d in configuration.definitions] == ["a", "b"]


class TestCheck:
    """Test the check command."""

    def test_valid_configuration(self):
        """A valid configuration exits cleanly."""
        result = runner.invoke(app, ["check", f"{MODULE}:AUDIO"])

        assert result.exit_code == 0, result.output
        assert "Configuration is valid" in result.output

    def test_cycle_fails(self):
        """A relevance cycle is reported and exits non-zero."""
        result = runner.invoke(app, ["check", f"{MODULE}:build_cycle"])

        assert result.exit_code == 1
        assert "Circular dependency" in result.output

    def test_bad_target(self):
        """Targets without an attribute are usage errors."""
        result = runner.invoke(app, ["check", MODULE])
        assert result.exit_code != 0

    def test_wrong_object(self):
        """Targets that are not configurations are rejected."""
        result = runner.invoke(app, ["check", f"{MODULE}:NOT_A_CONFIGURATION"])
        assert result.exit_code != 0


class TestTree:
    """Test the tree command."""

    def test_dependency_order(self):
        """Dependencies print before their dependents."""
        result = runner.invoke(app, ["tree", f"{MODULE}:AUDIO"])

        assert result.exit_code == 0, result.output
        assert "Dependency order:" in result.output
        assert "audio.enabled, audio.volume" in result.output


class TestValues:
    """Test the values command."""

    def test_memory_backend_shows_defaults(self):
        """With nothing stored, defaults are listed."""
        result = runner.invoke(app, ["values", f"{MODULE}:AUDIO"])

        assert result.exit_code == 0, result.output
        assert "audio.volume" in result.output
        assert "50" in result.output

    def test_json_backend_shows_stored_values(self, settings_module):
        """Stored values and their relevance are listed."""
        config_path, store_path = _json_config(settings_module)
        asyncio.run(JsonFileStorage(store_path).set("audio.enabled", False))

        result = runner.invoke(app, ["--config", str(config_path), "values", f"{MODULE}:AUDIO"])

        assert result.exit_code == 0, result.output
        assert "False" in result.output
        assert "no" in result.output


class TestReset:
    """Test the reset command."""

    def test_reset_single_key(self, settings_module):
        """One key returns to its default."""
        config_path, store_path = _json_config(settings_module)
        asyncio.run(JsonFileStorage(store_path).set("audio.volume", 80))

        result = runner.invoke(
            app,
            ["--config", str(config_path), "reset", f"{MODULE}:AUDIO", "--key", "audio.volume"],
        )

        assert result.exit_code == 0, result.output
        assert "Reset audio.volume to default" in result.output
        assert asyncio.run(JsonFileStorage(store_path).get("audio.volume")) == 50

    def test_reset_all(self, settings_module, monkeypatch):
        """Every key returns to its default."""
        _, store_path = _json_config(settings_module)
        monkeypatch.setenv("PITZ_STORAGE_BACKEND", "json")
        monkeypatch.setenv("PITZ_STORAGE_PATH", str(store_path))

        async def seed():
            storage = JsonFileStorage(store_path)
            await storage.set("audio.enabled", False)
            await storage.set("audio.volume", 10)

        asyncio.run(seed())

        result = runner.invoke(app, ["reset", f"{MODULE}:AUDIO"])

        assert result.exit_code == 0, result.output
        assert "Reset 2 settings to defaults" in result.output
        storage = JsonFileStorage(store_path)
        assert asyncio.run(storage.get("audio.enabled")) is True
        assert asyncio.run(storage.get("audio.volume")) == 50

    def test_unknown_key(self):
        """Unknown keys exit non-zero."""
        result = runner.invoke(app, ["reset", f"{MODULE}:AUDIO", "--key", "nope"])

        assert result.exit_code == 1
        assert "Unknown setting" in result.output
