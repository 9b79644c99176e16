"""
Base45 codec (RFC 9285) — the text layer of the HCERT QR payload.

Base45 packs two bytes into three characters of the QR alphanumeric set:

    0-9  → 0-9      A-Z → 10-35      ' $%*+-./:' → 36-44

A 3-character group c0 c1 c2 encodes v = c0 + c1*45 + c2*45² (big-endian
two bytes, v ≤ 0xFFFF); a trailing 2-character group encodes a single byte
v = c0 + c1*45 (v ≤ 0xFF). A trailing single character cannot occur.

Only uppercase letters belong to the alphabet; there is no case folding.
"""

from __future__ import annotations

from railway import CodedError, ErrorCode, Result

BASE45_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"

_VALUES: dict[str, int] = {char: index for index, char in enumerate(BASE45_ALPHABET)}


def _symbol_value(text: str, position: int) -> int:
    value = _VALUES.get(text[position])
    if value is None:
        raise CodedError(
            ErrorCode.ALPHABET_ERROR,
            f"Invalid base45 character {text[position]!r} at position {position}",
        )
    return value


def _decode(text: str) -> bytes:
    """Decode base45 text; raises CodedError on any malformed input."""
    if not text:
        raise CodedError(ErrorCode.ALPHABET_ERROR, "Empty base45 input")
    if len(text) % 3 == 1:
        raise CodedError(
            ErrorCode.ALPHABET_ERROR,
            f"Dangling base45 character: length {len(text)} leaves a 1-character group",
        )

    out = bytearray()
    for start in range(0, len(text), 3):
        group = [_symbol_value(text, pos) for pos in range(start, min(start + 3, len(text)))]
        if len(group) == 3:
            value = group[0] + group[1] * 45 + group[2] * 45 * 45
            if value > 0xFFFF:
                raise CodedError(
                    ErrorCode.OVERFLOW_ERROR,
                    f"Base45 group at position {start} decodes to {value} (> 65535)",
                )
            out.append(value >> 8)
            out.append(value & 0xFF)
        else:
            value = group[0] + group[1] * 45
            if value > 0xFF:
                raise CodedError(
                    ErrorCode.OVERFLOW_ERROR,
                    f"Final base45 pair at position {start} decodes to {value} (> 255)",
                )
            out.append(value)
    return bytes(out)


def decode_base45(text: str) -> Result[bytes]:
    """
    Decode base45 text into bytes.

    Returns Result.failure(ALPHABET_ERROR) for characters outside the
    alphabet, a dangling single character or empty input, and
    Result.failure(OVERFLOW_ERROR) when a group exceeds its byte width.
    """
    return Result.from_computation(
        lambda: _decode(text),
        ErrorCode.ALPHABET_ERROR,
        "Failed to decode base45 text",
    )


def encode_base45(data: bytes) -> str:
    """Encode bytes as base45 text (inverse of decode_base45)."""
    chars: list[str] = []
    for start in range(0, len(data) - 1, 2):
        value = (data[start] << 8) | data[start + 1]
        value, c0 = divmod(value, 45)
        c2, c1 = divmod(value, 45)
        chars += (BASE45_ALPHABET[c0], BASE45_ALPHABET[c1], BASE45_ALPHABET[c2])
    if len(data) % 2:
        c1, c0 = divmod(data[-1], 45)
        chars += (BASE45_ALPHABET[c0], BASE45_ALPHABET[c1])
    return "".join(chars)
