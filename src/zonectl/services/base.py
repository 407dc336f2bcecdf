"""BaseService — abstract foundation for all zonectl services.

Every service receives an :class:`ExecutionContext` at construction time.
The context provides the catalog, builder table, authorizer, and roles.
Services translate :class:`ZoneError` into ``ServiceResult(ok=False)``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from zonectl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from pydantic import ValidationError

    from zonectl.domain.errors import ZoneError
    from zonectl.infrastructure.context import ExecutionContext

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class OperationService(BaseService):
            def apply(self, role_name: str, payload: list[dict]) -> ServiceResult:
                role = self._context.role(role_name)
                ...
    """

    def __init__(self, context: ExecutionContext) -> None:
        self._context = context

    @staticmethod
    def _failure(op: str, exc: ZoneError, **detail: object) -> ServiceResult:
        """Wrap a domain error as a failed ServiceResult."""
        logger.debug("%s failed: %s", op, exc)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=exc.code, message=str(exc), detail={**exc.detail, **detail}),
        )

    @staticmethod
    def _invalid_payload(op: str, exc: ValidationError) -> ServiceResult:
        """Wrap a malformed operation payload as a failed ServiceResult."""
        problems = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(
                code="INVALID_OPERATION",
                message="; ".join(problems),
                detail={"errors": problems},
            ),
        )
