"""Tests for the configuration-backed registry catalog."""

from __future__ import annotations

import pytest

from zonectl.domain.errors import NotFoundError
from zonectl.infrastructure.catalog import ConfigCatalog
from zonectl.infrastructure.context import ExecutionContext
from zonectl.infrastructure.registries.base import RegistryDef


class TestConfigCatalog:
    def test_lookup(self) -> None:
        definition = RegistryDef(name="r1", builder="memory", params={"records": []})
        catalog = ConfigCatalog([definition])
        context = ExecutionContext(catalog=catalog)
        assert catalog.lookup(context, "r1") is definition
        assert definition.builder_params == {"records": []}

    def test_lookup_unknown(self) -> None:
        catalog = ConfigCatalog()
        with pytest.raises(NotFoundError) as exc_info:
            catalog.lookup(ExecutionContext(catalog=catalog), "r9")
        assert exc_info.value.code == "NOT_FOUND"
        assert exc_info.value.detail == {"registry": "r9"}

    def test_names_sorted(self) -> None:
        catalog = ConfigCatalog(
            [RegistryDef(name=n, builder="memory") for n in ("zeta", "alpha", "mid")]
        )
        assert catalog.names() == ["alpha", "mid", "zeta"]

    def test_later_definition_wins(self) -> None:
        catalog = ConfigCatalog(
            [RegistryDef(name="r1", builder="memory"), RegistryDef(name="r1", builder="sqlite")]
        )
        assert catalog.lookup(ExecutionContext(catalog=catalog), "r1").builder == "sqlite"
