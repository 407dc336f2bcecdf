"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, zonectl.toml only contains
overrides. A usable config needs one ``[registries.<name>]`` table and
one ``[roles.<name>]`` table granting access to it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from zonectl.domain.roles import Grant


class ExecutorConfig(BaseModel):
    """[executor] section."""

    model_config = {"frozen": True}

    max_workers: int = Field(default=8, ge=1)


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: Path | None = None


class RegistryConfig(BaseModel):
    """[registries.<name>] section."""

    model_config = {"frozen": True}

    builder: str
    params: dict[str, Any] = Field(default_factory=dict)


class RoleConfig(BaseModel):
    """[roles.<name>] section."""

    model_config = {"frozen": True}

    grants: list[Grant] = Field(default_factory=list)
