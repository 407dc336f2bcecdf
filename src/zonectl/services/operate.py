"""OperationService — apply or dry-run a batch of record operations.

Pipeline: PARSE → AUTHORIZE → EXECUTE → RESPOND

Batch-level failures (malformed payload, unknown role, authorization,
names, registry resolution) produce ``ok=False`` and nothing is applied.
Per-operation registry failures keep ``ok=True`` and are listed under
``data.operations[*].errors`` with a summary warning.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import ValidationError

from zonectl.domain.errors import ZoneError
from zonectl.domain.operations import Operation, parse_operations
from zonectl.services.base import BaseService
from zonectl.services.executor import execute_all, lookup_builder, validate_operation
from zonectl.services.result import ServiceResult
from zonectl.services.telemetry import traced


def _ignore_outcome(err: Exception | None, operation: Operation) -> None:
    """Outcomes are read from the execution report instead."""


def _first_unvalidated(operations: Sequence[Operation]) -> dict[str, Any]:
    for index, operation in enumerate(operations):
        if not operation.validated:
            return {"index": index}
    return {}


class OperationService(BaseService):
    """Runs record operation batches under a configured role."""

    @traced
    def apply(self, role_name: str, payload: Iterable[Any]) -> ServiceResult:
        """Validate and apply a batch; report every operation's outcome."""
        op = "apply"
        try:
            operations = parse_operations(payload)
        except ValidationError as exc:
            return self._invalid_payload(op, exc)

        try:
            role = self._context.role(role_name)
        except ZoneError as exc:
            return self._failure(op, exc)

        try:
            report = execute_all(self._context, role, operations, _ignore_outcome)
        except ZoneError as exc:
            return self._failure(op, exc, **_first_unvalidated(operations))

        results = [
            {
                "index": index,
                **operation.describe(),
                "ok": index not in report.errors,
                "errors": [str(err) for err in report.errors.get(index, [])],
            }
            for index, operation in enumerate(operations)
        ]

        warnings: list[str] = []
        if report.failed:
            warnings.append(f"{report.failed} of {report.dispatched} operations failed")

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "role": role.name,
                "registries": report.registries,
                "purged": report.purged,
                "dispatched": report.dispatched,
                "failed": report.failed,
                "operations": results,
            },
            warnings=warnings,
        )

    @traced
    def validate(self, role_name: str, payload: Iterable[Any]) -> ServiceResult:
        """Dry run: authorize and normalize every operation, check registries.

        No registry is built and nothing is written.
        """
        op = "validate"
        try:
            operations = parse_operations(payload)
        except ValidationError as exc:
            return self._invalid_payload(op, exc)

        try:
            role = self._context.role(role_name)
            for operation in operations:
                validate_operation(self._context.authorizer, role, operation)
            registries = list(dict.fromkeys(str(o.registry) for o in operations))
            for name in registries:
                lookup_builder(self._context, name)
        except ZoneError as exc:
            return self._failure(op, exc, **_first_unvalidated(operations))

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "role": role.name,
                "count": len(operations),
                "registries": registries,
                "operations": [
                    {"index": index, **operation.describe()}
                    for index, operation in enumerate(operations)
                ],
            },
        )
