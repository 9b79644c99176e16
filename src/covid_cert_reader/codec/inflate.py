"""
zlib decompression — the compression layer of the HCERT payload.

The stream is RFC 1950 framed:

    CMF FLG | deflate body (RFC 1951) | ADLER32 (4 bytes, big-endian)

zlib.decompressobj does the inflating; this module classifies what can go
wrong so callers can tell a damaged frame from a damaged checksum:

  - header errors, preset-dictionary requests, invalid deflate codes and
    streams that never reach their final block → FRAMING_ERROR
  - trailer does not match the inflated bytes → CHECKSUM_ERROR
"""

from __future__ import annotations

import zlib

import structlog
from railway import CodedError, ErrorCode, Result

log = structlog.get_logger()

_HEADER_LENGTH = 2
_TRAILER_LENGTH = 4


def _check_header(data: bytes) -> None:
    if len(data) < _HEADER_LENGTH + _TRAILER_LENGTH:
        raise CodedError(
            ErrorCode.FRAMING_ERROR,
            f"zlib stream too short: {len(data)} bytes",
        )
    cmf, flg = data[0], data[1]
    if cmf & 0x0F != 8 or cmf >> 4 > 7:
        raise CodedError(ErrorCode.FRAMING_ERROR, f"Unsupported zlib compression method byte 0x{cmf:02x}")
    if (cmf << 8 | flg) % 31:
        raise CodedError(ErrorCode.FRAMING_ERROR, "Invalid zlib header check bits")
    if flg & 0x20:
        raise CodedError(ErrorCode.FRAMING_ERROR, "zlib stream requires a preset dictionary")


def _inflate(data: bytes) -> bytes:
    _check_header(data)

    # Raw deflate body; the Adler-32 trailer is checked by hand below.
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        inflated = decompressor.decompress(data[_HEADER_LENGTH:])
        inflated += decompressor.flush()
    except zlib.error as e:
        raise CodedError(ErrorCode.FRAMING_ERROR, f"Malformed deflate stream: {e}") from e

    if not decompressor.eof:
        raise CodedError(ErrorCode.FRAMING_ERROR, "Truncated deflate stream: final block never reached")

    remainder = decompressor.unused_data
    if len(remainder) < _TRAILER_LENGTH:
        raise CodedError(
            ErrorCode.FRAMING_ERROR,
            f"Truncated zlib stream: Adler-32 trailer has {len(remainder)} of 4 bytes",
        )

    expected = int.from_bytes(remainder[:_TRAILER_LENGTH], "big")
    actual = zlib.adler32(inflated)
    if expected != actual:
        raise CodedError(
            ErrorCode.CHECKSUM_ERROR,
            f"Adler-32 mismatch: trailer 0x{expected:08x}, computed 0x{actual:08x}",
        )

    if len(remainder) > _TRAILER_LENGTH:
        log.debug("inflate.trailing_data", ignored_bytes=len(remainder) - _TRAILER_LENGTH)
    return inflated


def inflate(data: bytes) -> Result[bytes]:
    """
    Decompress a zlib-framed deflate stream and verify its Adler-32 trailer.

    Bytes after the trailer are ignored.
    """
    return Result.from_computation(
        lambda: _inflate(data),
        ErrorCode.FRAMING_ERROR,
        "Failed to decompress zlib stream",
    )
