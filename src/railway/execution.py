"""
Execution contexts — separate WHAT (pure decoding) from HOW (observability).

The decode pipeline is pure: it only describes the transformation and returns
a Result. Anything around it (timing, logging) lives in an ExecutionContext
that wraps the computation:

    ctx = LoggingExecutionContext(operation="DecodeCertificate")
    result = ctx.execute(lambda: decode_certificate(text))
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol, TypeVar, runtime_checkable

import structlog

from railway.failure import ErrorCode, FailureDescription
from railway.result import Failure, Result

T = TypeVar("T")
log = structlog.get_logger("railway.execution")


@runtime_checkable
class ExecutionContext(Protocol):
    """Anything with execute(computation) -> Result satisfies this protocol."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]: ...


class NoOpExecutionContext:
    """Passthrough execution context — runs the computation as is."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        return computation()


class LoggingExecutionContext:
    """
    Execution context that logs start, duration, and outcome of a computation.

    Wraps another context (decorator pattern). An exception escaping the
    computation is converted into an UNKNOWN_ERROR failure so callers always
    receive a Result.
    """

    def __init__(
        self,
        inner: ExecutionContext | None = None,
        operation: str = "unknown",
    ) -> None:
        self._inner = inner or NoOpExecutionContext()
        self._operation = operation

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        log.debug("execution.started", operation=self._operation)
        start = time.monotonic()

        try:
            result = self._inner.execute(computation)
        except Exception as e:
            log.error(
                "execution.crashed",
                operation=self._operation,
                elapsed_ms=round((time.monotonic() - start) * 1000, 3),
                error=str(e),
            )
            return Failure(FailureDescription(ErrorCode.UNKNOWN_ERROR, f"Execution failed: {e}", e))

        elapsed_ms = round((time.monotonic() - start) * 1000, 3)
        if result.is_success():
            log.debug("execution.completed", operation=self._operation, elapsed_ms=elapsed_ms)
        else:
            log.warning(
                "execution.failed",
                operation=self._operation,
                elapsed_ms=elapsed_ms,
                code=result.error().code.value,
            )
        return result
