"""Role definitions and grant-based authorization.

A role is an ordered list of grants. Each grant names one domain, the
subdomain patterns the role may touch under it, and the registry that
holds the zone. Authorization walks the grants in order and the first
match decides the target registry.

Names are compared in their normalized ASCII form, so a grant for
``bücher.example`` covers ``xn--bcher-kva.example`` and nothing else.
Subdomain patterns are ``fnmatch`` globs over that form; ASCII patterns
are lowercased, non-ASCII ones must be literal names. The apex (empty
subdomain) is matched as ``"@"``; ``"*"`` matches every name including
the apex.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Protocol

from pydantic import BaseModel, Field

from zonectl.domain.errors import AuthorizationError, InvalidNameError
from zonectl.domain.names import normalize_name

APEX = "@"


def _grant_form(name: str) -> str | None:
    """Normalized form of a configured name or pattern; None if it has none."""
    if name.isascii() and any(c in name for c in "*?[]"):
        return name.lower()
    try:
        return normalize_name(name)
    except InvalidNameError:
        return None


class Grant(BaseModel):
    """Permission to manage names under one domain in one registry."""

    model_config = {"frozen": True}

    domain: str
    subdomains: list[str] = Field(default_factory=lambda: ["*"])
    registry: str

    def matches(self, domain: str, subdomain: str) -> bool:
        """Compare normalized names.

        Raises:
            InvalidNameError: The requested domain or subdomain is malformed.
        """
        own = _grant_form(self.domain)
        if own is None or normalize_name(domain) != own:
            return False
        candidate = normalize_name(subdomain) if subdomain else APEX
        for pattern in self.subdomains:
            form = APEX if pattern == APEX else _grant_form(pattern)
            if form is not None and fnmatchcase(candidate, form):
                return True
        return False


class RoleDef(BaseModel):
    """Authorization context shared by every operation of one batch."""

    model_config = {"frozen": True}

    name: str = ""
    grants: list[Grant] = Field(default_factory=list)


class AuthorizationResult(BaseModel):
    """Outcome of a successful authorization."""

    model_config = {"frozen": True}

    registry: str
    grant: Grant | None = None


class Authorizer(Protocol):
    """Decides whether a role may act on a name and which registry holds it."""

    def authorize(self, role: RoleDef, domain: str, subdomain: str) -> AuthorizationResult:
        """Return the target registry or raise :class:`AuthorizationError`."""
        ...


class GrantAuthorizer:
    """Default authorizer: first matching grant of the role wins."""

    def authorize(self, role: RoleDef, domain: str, subdomain: str) -> AuthorizationResult:
        for grant in role.grants:
            if grant.matches(domain, subdomain):
                return AuthorizationResult(registry=grant.registry, grant=grant)

        target = f"{subdomain}.{domain}" if subdomain else domain
        msg = f"role [{role.name}] may not manage [{target}]"
        raise AuthorizationError(msg, role=role.name, domain=domain, subdomain=subdomain)
