"""Tests for ExecutionContext."""

from __future__ import annotations

from pathlib import Path

import pytest

from zonectl.config.settings import ZoneSettings
from zonectl.domain.errors import OperationCancelled, UnknownRoleError
from zonectl.domain.roles import GrantAuthorizer
from zonectl.infrastructure.catalog import ConfigCatalog
from zonectl.infrastructure.context import ExecutionContext
from zonectl.infrastructure.registries.builders import REGISTRY_BUILDERS

CONFIG = """\
[executor]
max_workers = 3

[registries.primary]
builder = "sqlite"
params = { path = "zones.db" }

[roles.ops]
grants = [
  { domain = "example.com", registry = "primary" },
  { domain = "example.org", subdomains = ["www", "@"], registry = "primary" },
]
"""


class TestExecutionContext:
    def test_defaults(self) -> None:
        context = ExecutionContext(catalog=ConfigCatalog())
        assert isinstance(context.authorizer, GrantAuthorizer)
        assert context.builders is REGISTRY_BUILDERS
        assert context.max_workers == 8
        assert not context.cancelled

    def test_role_lookup(self, context: ExecutionContext) -> None:
        assert context.role("web").name == "web"

    def test_unknown_role(self, context: ExecutionContext) -> None:
        with pytest.raises(UnknownRoleError) as exc_info:
            context.role("admin")
        assert exc_info.value.detail == {"role": "admin"}

    def test_cancel(self, context: ExecutionContext) -> None:
        context.raise_if_cancelled()
        context.cancel()
        assert context.cancelled
        with pytest.raises(OperationCancelled):
            context.raise_if_cancelled()


class TestFromSettings:
    def test_builds_catalog_and_roles(self, tmp_path: Path) -> None:
        config = tmp_path / "zonectl.toml"
        config.write_text(CONFIG)
        settings = ZoneSettings.from_cli(config_path=str(config))

        context = ExecutionContext.from_settings(settings)
        assert context.max_workers == 3
        assert context.catalog.names() == ["primary"]
        definition = context.catalog.lookup(context, "primary")
        assert definition.builder == "sqlite"
        assert definition.builder_params == {"path": "zones.db"}

        ops = context.role("ops")
        assert [g.domain for g in ops.grants] == ["example.com", "example.org"]
        assert ops.grants[0].subdomains == ["*"]
        assert ops.grants[1].subdomains == ["www", "@"]

    def test_custom_builders(self, tmp_path: Path) -> None:
        settings = ZoneSettings.from_cli(start=tmp_path)
        builders = {"memory": REGISTRY_BUILDERS["memory"]}
        context = ExecutionContext.from_settings(settings, builders=builders)
        assert context.builders is builders
