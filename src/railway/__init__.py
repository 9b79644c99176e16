"""
Railway-Oriented Programming (ROP) primitives used by the certificate decoder.

    from railway import Result, ErrorCode

    def require_text(value: object) -> Result[str]:
        if not isinstance(value, str):
            return Result.failure(ErrorCode.TYPE_ERROR, "expected a text string")
        return Result.success(value)
"""

from railway.assertions import ResultAssertions
from railway.execution import (
    ExecutionContext,
    LoggingExecutionContext,
    NoOpExecutionContext,
)
from railway.failure import CodedError, ErrorCode, FailureDescription
from railway.result import Failure, Result, Success

__all__ = [
    "CodedError",
    "ErrorCode",
    "ExecutionContext",
    "Failure",
    "FailureDescription",
    "LoggingExecutionContext",
    "NoOpExecutionContext",
    "Result",
    "ResultAssertions",
    "Success",
]
