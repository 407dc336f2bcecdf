"""Timing spans for service calls and the registry work they fan out.

Telemetry is off unless ``--verbose`` turns it on; while off, every hook
costs a single ContextVar read. While on, a ``@traced`` service method
roots a span tree that is returned in ``ServiceResult.meta["telemetry"]``.

Registry calls run on pool threads, which start with an empty context.
:func:`carry_context` snapshots the submitting thread's context so each
unit's span is attached under the phase span that submitted it.
"""

from __future__ import annotations

import contextvars
import functools
import threading
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from zonectl.services.result import ServiceResult

log = structlog.get_logger("zonectl.telemetry")

_enabled: ContextVar[bool] = ContextVar("zonectl_telemetry_enabled", default=False)
_active_span: ContextVar[Span | None] = ContextVar("zonectl_active_span", default=None)

_P = ParamSpec("_P")
_R = TypeVar("_R")


@dataclass
class Span:
    """One timed step. Children may be attached from several threads."""

    name: str
    parent: Span | None = field(default=None, repr=False)
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def child(self, name: str) -> Span:
        span = Span(name=name, parent=self)
        with self._lock:
            self.children.append(span)
        return span

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def fail(self, exc: BaseException) -> None:
        self.error = f"{type(exc).__name__}: {exc}"

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            children = list(self.children)
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.error is not None:
            data["error"] = self.error
        if children:
            data["children"] = [c.to_dict() for c in children]
        return data


@contextmanager
def trace_span(name: str, **annotations: Any) -> Generator[Span | None]:
    """Time the enclosed block as a child of the active span.

    Yields None when telemetry is off or no span is active. An exception
    leaving the block is recorded on the span and re-raised.
    """
    parent = _active_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    span = parent.child(name)
    span.annotations.update(annotations)
    token = _active_span.set(span)
    try:
        yield span
    except Exception as exc:
        span.fail(exc)
        raise
    finally:
        span.end()
        _active_span.reset(token)


def carry_context(func: Callable[_P, _R]) -> Callable[_P, _R]:
    """Bind *func* to a snapshot of the caller's context.

    The snapshot can be entered by one thread at a time, so take a fresh
    one for every unit submitted to a pool.
    """
    context = contextvars.copy_context()

    @functools.wraps(func)
    def run(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        return context.run(func, *args, **kwargs)

    return run


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Root a span tree at a service method; attach it to its ServiceResult."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        token = _active_span.set(root)
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            root.fail(exc)
            raise
        finally:
            root.end()
            _active_span.reset(token)
            log.debug(
                "span.complete",
                span_name=root.name,
                duration_ms=round(root.duration_ms, 2),
                ok=root.error is None,
                children=len(root.children),
            )

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": root.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn span collection on for the current context (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    """Turn span collection off and drop any active span."""
    _enabled.set(False)
    _active_span.set(None)
