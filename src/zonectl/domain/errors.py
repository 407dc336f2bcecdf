"""Error taxonomy for batch record operations.

Every error carries a stable ``code`` that the service layer copies into
:class:`~zonectl.services.result.ServiceError`, plus a ``detail`` dict of
string values for diagnostics.

Validation and resolution errors abort a whole batch before any registry
is touched. :class:`RegistryOperationError` is reported per operation.
"""

from __future__ import annotations


class ZoneError(Exception):
    """Base class for all zonectl errors."""

    code = "ZONE_ERROR"

    def __init__(self, message: str, **detail: str) -> None:
        super().__init__(message)
        self.detail: dict[str, str] = detail


class InvalidNameError(ZoneError):
    """A domain or subdomain is not a valid internationalized domain name."""

    code = "INVALID_NAME"


class AuthorizationError(ZoneError):
    """The role may not act on the name, or no grant maps it to a registry."""

    code = "UNAUTHORIZED"


class UnknownRoleError(ZoneError):
    """The requested role is not defined."""

    code = "UNKNOWN_ROLE"


class NotFoundError(ZoneError):
    """No registry definition exists under the requested name."""

    code = "NOT_FOUND"


class UnsupportedBuilderError(ZoneError):
    """The registry definition names a builder that is not registered."""

    code = "UNSUPPORTED_BUILDER"


class BuilderError(ZoneError):
    """A registry builder failed to construct its backend."""

    code = "BUILDER_FAILED"


class RegistryOperationError(ZoneError):
    """An append, delete, or delete-all call failed at the backend."""

    code = "REGISTRY_OPERATION_FAILED"


class OperationCancelled(ZoneError):
    """The execution context was cancelled while resolving registries."""

    code = "CANCELLED"
