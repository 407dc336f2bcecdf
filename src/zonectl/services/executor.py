"""Batch executor — authorize, normalize, resolve, and apply record mutations.

Pipeline: VALIDATE → RESOLVE → PARTITION → PURGE → MUTATE

VALIDATE and RESOLVE run on the caller's thread and raise on the first
failure, before any registry is touched. PURGE and MUTATE fan out onto a
thread pool; their failures are reported per operation through the
callback and never abort sibling work.

INVARIANT: No registry mutation starts until every operation is validated.
INVARIANT: At most one delete-all per canonical name per batch.
INVARIANT: Each registry is built at most once per batch.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from zonectl.domain.errors import (
    BuilderError,
    RegistryOperationError,
    UnsupportedBuilderError,
    ZoneError,
)
from zonectl.domain.names import canonicalize
from zonectl.domain.operations import Operation
from zonectl.domain.types import OpKind
from zonectl.services.telemetry import carry_context, trace_span

if TYPE_CHECKING:
    from zonectl.domain.roles import Authorizer, RoleDef
    from zonectl.infrastructure.context import ExecutionContext
    from zonectl.infrastructure.registries.base import Builder, Registry, RegistryDef

log = structlog.get_logger(__name__)

Callback = Callable[[Exception | None, Operation], None]


@dataclass
class ExecutionReport:
    """Aggregate outcome of one :func:`execute_all` call.

    Attributes:
        registries: Registry names resolved for the batch, first-use order.
        purged: Canonical names wiped before appends, in batch order.
        dispatched: Operations that reached the mutate phase.
        errors: Reported errors keyed by the operation's batch index.
    """

    registries: list[str] = field(default_factory=list)
    purged: list[str] = field(default_factory=list)
    dispatched: int = 0
    errors: dict[int, list[Exception]] = field(default_factory=dict)

    @property
    def failed(self) -> int:
        """Operations with at least one reported error."""
        return len(self.errors)


class _PurgeGate:
    """Lock-guarded test-and-set of canonical names wiped within one batch."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._claimed: list[str] = []
        self._seen: set[str] = set()

    def claim(self, canonical_name: str) -> bool:
        with self._lock:
            if canonical_name in self._seen:
                return False
            self._seen.add(canonical_name)
            self._claimed.append(canonical_name)
            return True

    @property
    def claimed(self) -> list[str]:
        with self._lock:
            return list(self._claimed)


# ---------------------------------------------------------------------------
# VALIDATE
# ---------------------------------------------------------------------------


def validate_operation(authorizer: Authorizer, role: RoleDef, op: Operation) -> str:
    """Authorize *op*, then normalize its names in place.

    Sets ``op.registry``, replaces ``op.domain``/``op.subdomain`` with their
    ASCII forms, and stores the canonical name on the record.

    Returns the target registry name.

    Raises:
        AuthorizationError: The role may not act on this name.
        InvalidNameError: The domain or subdomain is malformed.
    """
    result = authorizer.authorize(role, op.domain, op.subdomain)
    op.registry = result.registry

    domain, subdomain, canonical = canonicalize(op.domain, op.subdomain)
    op.domain = domain
    op.subdomain = subdomain
    op.record.canonical_name = canonical
    return result.registry


# ---------------------------------------------------------------------------
# RESOLVE
# ---------------------------------------------------------------------------


def lookup_builder(context: ExecutionContext, name: str) -> tuple[RegistryDef, Builder]:
    """Find the definition of registry *name* and the builder it names.

    Raises:
        OperationCancelled: The context was cancelled.
        NotFoundError: *name* is not in the catalog.
        UnsupportedBuilderError: The definition names an unknown builder.
    """
    context.raise_if_cancelled()
    registry_def = context.catalog.lookup(context, name)
    builder = context.builders.get(registry_def.builder)
    if builder is None:
        msg = f"registry [{name}] builder [{registry_def.builder}] is not registered"
        raise UnsupportedBuilderError(msg, registry=name, builder=registry_def.builder)
    return registry_def, builder


def resolve_registries(
    context: ExecutionContext,
    operations: Sequence[Operation],
) -> dict[str, Registry]:
    """Build one live registry per distinct registry name in *operations*.

    Raises:
        OperationCancelled: The context was cancelled between lookups.
        NotFoundError: A registry name is not in the catalog.
        UnsupportedBuilderError: A definition names an unknown builder.
        BuilderError: A builder raised; the cause is chained.
    """
    registries: dict[str, Registry] = {}
    try:
        for op in operations:
            name = op.registry
            if name is None or name in registries:
                continue

            registry_def, builder = lookup_builder(context, name)
            try:
                registries[name] = builder(dict(registry_def.builder_params))
            except Exception as exc:
                msg = f"registry [{name}] builder [{registry_def.builder}] failed: {exc}"
                raise BuilderError(msg, registry=name, builder=registry_def.builder) from exc

            log.debug("registry.resolved", registry=name, builder=registry_def.builder)
    except ZoneError:
        close_registries(registries)
        raise
    return registries


def close_registries(registries: dict[str, Registry]) -> None:
    """Release backends that hold resources (those exposing ``close()``)."""
    for name, registry in registries.items():
        close = getattr(registry, "close", None)
        if close is None:
            continue
        try:
            close()
        except Exception:
            log.warning("registry.close_failed", registry=name, exc_info=True)


# ---------------------------------------------------------------------------
# PARTITION
# ---------------------------------------------------------------------------


def partition(
    operations: Sequence[Operation],
) -> tuple[dict[str, list[int]], dict[str, list[int]]]:
    """Split validated operations into ``(updated, deleted)`` by registry.

    Groups hold batch indexes, so an instance listed twice stays two
    entries. Input order is preserved within each group.
    """
    updated: dict[str, list[int]] = {}
    deleted: dict[str, list[int]] = {}
    for index, op in enumerate(operations):
        groups = updated if op.kind is OpKind.UPDATE else deleted
        groups.setdefault(str(op.registry), []).append(index)
    return updated, deleted


# ---------------------------------------------------------------------------
# PURGE + MUTATE
# ---------------------------------------------------------------------------


def _run_unit(
    action: Callable[[Any], None],
    argument: Any,
    op: Operation,
    report: Callable[[Exception | None], None],
    *,
    step: str,
    report_success: bool,
) -> None:
    """Run one registry call and report its outcome for *op*."""
    try:
        with trace_span(
            action.__name__, registry=str(op.registry), canonical_name=op.canonical_name
        ):
            action(argument)
    except Exception as exc:
        if isinstance(exc, RegistryOperationError):
            err = exc
        else:
            msg = f"{step} [{op.canonical_name}] on registry [{op.registry}] failed: {exc}"
            err = RegistryOperationError(
                msg, registry=str(op.registry), canonical_name=op.canonical_name
            )
            err.__cause__ = exc
        report(err)
        return
    if report_success:
        report(None)


def execute_all(
    context: ExecutionContext,
    role: RoleDef,
    operations: Sequence[Operation],
    callback: Callback,
) -> ExecutionReport:
    """Validate and apply a batch of record operations.

    Updates replace: every record under an updated canonical name is
    deleted (once per name) before the new record is appended. Deletes
    remove one matching record.

    ``callback(err, op)`` fires once per mutate-phase outcome (``err`` is
    None on success) and once more for an operation whose delete-all
    failed. All callbacks have fired when this function returns.

    Raises:
        ZoneError: Any validation or resolution failure. Nothing has been
            dispatched and the callback has not been invoked.
    """
    with trace_span("validate") as span:
        for op in operations:
            validate_operation(context.authorizer, role, op)
        if span is not None:
            span.annotate("operations", len(operations))
    log.debug("batch.validated", role=role.name, operations=len(operations))

    with trace_span("resolve") as span:
        registries = resolve_registries(context, operations)
        if span is not None:
            span.annotate("registries", len(registries))

    updated, deleted = partition(operations)
    report = ExecutionReport(registries=list(registries))
    errors_lock = threading.Lock()

    def reporter(index: int) -> Callable[[Exception | None], None]:
        op = operations[index]

        def report_outcome(err: Exception | None) -> None:
            if err is not None:
                with errors_lock:
                    report.errors.setdefault(index, []).append(err)
                log.info(
                    "operation.failed",
                    index=index,
                    op=op.kind.value,
                    canonical_name=op.canonical_name,
                    registry=op.registry,
                    error=str(err),
                )
            try:
                callback(err, op)
            except Exception:
                log.error("callback.failed", canonical_name=op.canonical_name, exc_info=True)

        return report_outcome

    def submit(
        pool: ThreadPoolExecutor,
        index: int,
        action: Callable[[Any], None],
        argument: Any,
        *,
        step: str,
        report_success: bool,
    ) -> Future[None]:
        return pool.submit(
            carry_context(_run_unit),
            action,
            argument,
            operations[index],
            reporter(index),
            step=step,
            report_success=report_success,
        )

    gate = _PurgeGate()
    try:
        with ThreadPoolExecutor(
            max_workers=context.max_workers, thread_name_prefix="zonectl"
        ) as pool:
            with trace_span("purge") as span:
                purges: list[Future[None]] = []
                for index, op in enumerate(operations):
                    if op.kind is not OpKind.UPDATE or not gate.claim(op.canonical_name):
                        continue
                    registry = registries[str(op.registry)]
                    purges.append(
                        submit(
                            pool,
                            index,
                            registry.delete_all_records_with_domain,
                            op.canonical_name,
                            step="delete all records",
                            report_success=False,
                        )
                    )
                wait(purges)
                if span is not None:
                    span.annotate("names", len(purges))

            with trace_span("mutate") as span:
                mutations: list[Future[None]] = []
                for name, indexes in updated.items():
                    for index in indexes:
                        mutations.append(
                            submit(
                                pool,
                                index,
                                registries[name].append_record,
                                operations[index].record,
                                step="append record",
                                report_success=True,
                            )
                        )
                for name, indexes in deleted.items():
                    for index in indexes:
                        mutations.append(
                            submit(
                                pool,
                                index,
                                registries[name].delete_record,
                                operations[index].record,
                                step="delete record",
                                report_success=True,
                            )
                        )
                wait(mutations)
                if span is not None:
                    span.annotate("operations", len(mutations))
    finally:
        close_registries(registries)

    report.purged = gate.claimed
    report.dispatched = len(operations)
    log.debug(
        "batch.executed",
        dispatched=report.dispatched,
        failed=report.failed,
        purged=len(report.purged),
    )
    return report
