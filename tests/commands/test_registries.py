"""Tests for the registries command."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from zonectl.cli import cli


class TestRegistriesCommand:
    def test_json(self, cli_runner: CliRunner, zone_config: Path) -> None:
        result = cli_runner.invoke(cli, ["-c", str(zone_config), "--json", "registries"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        items = {item["name"]: item for item in payload["data"]["items"]}
        assert set(items) == {"broken", "primary", "scratch"}
        assert items["primary"]["available"] is True
        assert items["broken"]["available"] is False
        assert payload["warnings"] == ["registry [broken] uses unknown builder [missing]"]

    def test_human(self, cli_runner: CliRunner, zone_config: Path) -> None:
        result = cli_runner.invoke(cli, ["-c", str(zone_config), "registries"])
        assert result.exit_code == 0, result.output
        assert "primary" in result.stdout
        assert "3 registries" in result.stdout
        assert "WARNING: registry [broken]" in result.stderr

    def test_quiet_lists_names(self, cli_runner: CliRunner, zone_config: Path) -> None:
        result = cli_runner.invoke(cli, ["-c", str(zone_config), "-q", "registries"])
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ["broken", "primary", "scratch"]

    def test_local_plugin_builder(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        plugins = tmp_path / "plugins"
        plugins.mkdir()
        (plugins / "edge.py").write_text(
            "from zonectl.infrastructure.registries.memory import MemoryRegistry\n"
            "from zonectl.plugins.hookspecs import hookimpl\n\n\n"
            "class EdgePlugin:\n"
            "    @hookimpl\n"
            "    def register_registry_builders(self):\n"
            "        return {'edge': lambda params: MemoryRegistry()}\n",
            encoding="utf-8",
        )
        config = tmp_path / "zonectl.toml"
        config.write_text(
            f'[plugins]\nlocal_dir = "{plugins.as_posix()}"\n\n'
            '[registries.cdn]\nbuilder = "edge"\n',
            encoding="utf-8",
        )
        result = cli_runner.invoke(cli, ["-c", str(config), "--json", "registries"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["data"]["items"][0]["available"] is True
        assert "edge" in payload["data"]["builders"]
