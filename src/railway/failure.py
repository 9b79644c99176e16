"""
Failure description — structured error information for the failure track.

Every decoding stage reports problems as a FailureDescription carrying one
ErrorCode. Codes are grouped by the layer of the HCERT container that
detected the problem, so a caller can tell a damaged QR scan (text layer)
from a damaged compressed stream or an unexpected CBOR shape.

Helpers deep inside a stage may raise CodedError instead of building a
Result by hand; Result.from_computation turns it back into a Failure with
the code the helper chose.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique


@unique
class ErrorCode(Enum):
    """
    Structured error codes for the failure track.

    - Text layer: ALPHABET, OVERFLOW
    - Compression layer: FRAMING, CHECKSUM
    - CBOR/schema layer: STRUCTURE, TYPE, MISSING_FIELD
    - Outer collaborators: QR_CODE, CONFIGURATION, UNKNOWN
    """

    # --- Base45 text layer ---
    ALPHABET_ERROR = "ALPHABET_ERROR"
    """Character outside the base45 alphabet, dangling single character, empty input."""

    OVERFLOW_ERROR = "OVERFLOW_ERROR"
    """A base45 group decodes to a value too large for its byte width."""

    # --- zlib layer ---
    FRAMING_ERROR = "FRAMING_ERROR"
    """Bad zlib header, malformed deflate codes, truncated stream."""

    CHECKSUM_ERROR = "CHECKSUM_ERROR"
    """Adler-32 trailer does not match the decompressed content."""

    # --- CBOR / schema layer ---
    STRUCTURE_ERROR = "STRUCTURE_ERROR"
    """Undecodable CBOR, wrong array arity, wrong container shape."""

    TYPE_ERROR = "TYPE_ERROR"
    """A recognized field holds the wrong primitive type."""

    MISSING_FIELD_ERROR = "MISSING_FIELD_ERROR"
    """A required claim is absent (strict mode only)."""

    # --- Outer collaborators ---
    QR_CODE_ERROR = "QR_CODE_ERROR"
    """The image could not be read or holds no QR symbol."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Invalid settings."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    """Unexpected/unclassified failures."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, optional exception, and timestamp.

    >>> desc = FailureDescription(ErrorCode.TYPE_ERROR, "dob must be a text string")
    >>> desc.code
    <ErrorCode.TYPE_ERROR: 'TYPE_ERROR'>
    """

    code: ErrorCode
    message: str
    exception: BaseException | None = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if any."""
        if self.exception is None:
            return self.message
        tb = "".join(
            traceback.format_exception(type(self.exception), self.exception, self.exception.__traceback__)
        )
        return f"{self.message}\n{tb}"

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class CodedError(Exception):
    """
    Exception that already knows which ErrorCode it belongs to.

    Raised by low-level decode helpers; caught at the stage boundary by
    Result.from_computation, which keeps this code instead of the default.
    """

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
