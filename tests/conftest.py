"""Shared pytest fixtures and test helpers for zonectl tests."""

from __future__ import annotations

import threading
from collections.abc import Generator, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import pytest
from click.testing import CliRunner

from zonectl.domain.operations import Operation, Record
from zonectl.domain.roles import Grant, RoleDef
from zonectl.infrastructure.catalog import ConfigCatalog
from zonectl.infrastructure.context import ExecutionContext
from zonectl.infrastructure.registries.base import RegistryDef
from zonectl.infrastructure.registries.builders import BUILTIN_BUILDERS
from zonectl.services.telemetry import disable_telemetry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


# ---------------------------------------------------------------------------
# Registry doubles
# ---------------------------------------------------------------------------


class RecordingRegistry:
    """Registry double that records every call in arrival order.

    Canonical names listed in ``fail_*`` make the matching call raise.
    """

    def __init__(
        self,
        name: str,
        *,
        fail_append: Iterable[str] = (),
        fail_delete: Iterable[str] = (),
        fail_purge: Iterable[str] = (),
    ) -> None:
        self.name = name
        self.calls: list[tuple[str, str]] = []
        self.fail_append = set(fail_append)
        self.fail_delete = set(fail_delete)
        self.fail_purge = set(fail_purge)
        self._lock = threading.Lock()

    def _log(self, action: str, canonical_name: str) -> None:
        with self._lock:
            self.calls.append((action, canonical_name))

    def append_record(self, record: Record) -> None:
        self._log("append", record.canonical_name)
        if record.canonical_name in self.fail_append:
            msg = f"append refused for {record.canonical_name}"
            raise RuntimeError(msg)

    def delete_record(self, record: Record) -> None:
        self._log("delete", record.canonical_name)
        if record.canonical_name in self.fail_delete:
            msg = f"delete refused for {record.canonical_name}"
            raise RuntimeError(msg)

    def delete_all_records_with_domain(self, canonical_name: str) -> None:
        self._log("purge", canonical_name)
        if canonical_name in self.fail_purge:
            msg = f"purge refused for {canonical_name}"
            raise RuntimeError(msg)

    def actions(self, action: str) -> list[str]:
        with self._lock:
            return [name for act, name in self.calls if act == action]


@dataclass
class RecordingBackend:
    """Builder double: hands out one RecordingRegistry per registry name."""

    registries: dict[str, RecordingRegistry] = field(default_factory=dict)
    builds: list[str] = field(default_factory=list)

    def registry(self, name: str, **failures: Iterable[str]) -> RecordingRegistry:
        if failures or name not in self.registries:
            self.registries[name] = RecordingRegistry(name, **failures)
        return self.registries[name]

    def build(self, params: dict[str, Any]) -> RecordingRegistry:
        name = params["name"]
        self.builds.append(name)
        return self.registry(name)

    def total(self, action: str) -> list[str]:
        return [name for reg in self.registries.values() for name in reg.actions(action)]


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def roles() -> dict[str, RoleDef]:
    return {
        "ops": RoleDef(
            name="ops",
            grants=[
                Grant(domain="example.com", registry="r1"),
                Grant(domain="example.org", registry="r2"),
                Grant(domain="example.net", registry="ghost"),
            ],
        ),
        "web": RoleDef(
            name="web",
            grants=[Grant(domain="example.com", subdomains=["www", "@"], registry="r1")],
        ),
        "nobody": RoleDef(name="nobody"),
    }


@pytest.fixture
def context(backend: RecordingBackend, roles: dict[str, RoleDef]) -> ExecutionContext:
    """ExecutionContext over two recording registries, r1 and r2."""
    catalog = ConfigCatalog(
        [
            RegistryDef(name="r1", builder="recording", builder_params={"name": "r1"}),
            RegistryDef(name="r2", builder="recording", builder_params={"name": "r2"}),
        ]
    )
    builders = MappingProxyType({**BUILTIN_BUILDERS, "recording": backend.build})
    return ExecutionContext(catalog=catalog, builders=builders, roles=roles, max_workers=4)


@pytest.fixture
def sqlite_path(tmp_path: Path) -> Path:
    return tmp_path / "zones" / "records.db"


@pytest.fixture
def sqlite_context(sqlite_path: Path, roles: dict[str, RoleDef]) -> ExecutionContext:
    """ExecutionContext whose r1 registry is a real sqlite backend."""
    catalog = ConfigCatalog(
        [RegistryDef(name="r1", builder="sqlite", builder_params={"path": str(sqlite_path)})]
    )
    return ExecutionContext(catalog=catalog, roles=roles, max_workers=4)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def make_op(
    kind: str,
    domain: str,
    subdomain: str = "",
    *,
    rtype: str = "A",
    content: str = "192.0.2.1",
    ttl: int = 300,
) -> Operation:
    """Build an unvalidated operation."""
    return Operation(
        op=kind,
        domain=domain,
        subdomain=subdomain,
        record=Record(type=rtype, content=content, ttl=ttl),
    )


class CallbackLog:
    """Thread-safe callback that records ``(error, operation)`` pairs."""

    def __init__(self) -> None:
        self.calls: list[tuple[Exception | None, Operation]] = []
        self._lock = threading.Lock()

    def __call__(self, err: Exception | None, op: Operation) -> None:
        with self._lock:
            self.calls.append((err, op))

    @property
    def errors(self) -> list[Exception]:
        return [err for err, _ in self.calls if err is not None]

    def for_op(self, op: Operation) -> list[Exception | None]:
        return [err for err, o in self.calls if o is op]


# ---------------------------------------------------------------------------
# CLI fixtures
# ---------------------------------------------------------------------------

ZONE_CONFIG = """\
[plugins]
enabled = false

[registries.primary]
builder = "sqlite"
params = {{ path = "{db_path}" }}

[registries.scratch]
builder = "memory"

[registries.broken]
builder = "missing"

[roles.ops]
grants = [
  {{ domain = "example.com", registry = "primary" }},
  {{ domain = "example.org", registry = "scratch" }},
  {{ domain = "example.net", registry = "broken" }},
]

[roles.web]
grants = [{{ domain = "example.com", subdomains = ["www"], registry = "primary" }}]
"""


@pytest.fixture
def zone_config(tmp_path: Path) -> Path:
    """A zonectl.toml with sqlite, memory, and unbuildable registries."""
    config = tmp_path / "zonectl.toml"
    db_path = (tmp_path / "zones.db").as_posix()
    config.write_text(ZONE_CONFIG.format(db_path=db_path), encoding="utf-8")
    return config


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """``-v`` turns telemetry on for the invoking thread; turn it off again."""
    yield
    disable_telemetry()
