"""
COSE_Sign1 envelope decoding.

    COSE_Sign1 = [
        protected   : bstr (serialized header map),
        unprotected : { ? 1 => int (alg), ? 4 => bstr (kid), * label => any },
        payload     : bstr (CWT claims),
        signature   : bstr,
    ]

HCERT producers usually wrap the array in CBOR tag 18 (COSE_Sign1) and
sometimes additionally in tag 61 (CWT); both are unwrapped.

The signature is carried through untouched. This decoder does NOT verify it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from railway import CodedError, ErrorCode, Result

from covid_cert_reader.codec.cbor import (
    loads_item,
    read_optional_bytes,
    read_optional_int,
    require_array,
    require_bytes,
    require_map,
    unwrap_tags,
)
from covid_cert_reader.domain.models import CoseHeader, Envelope

COSE_SIGN1_TAG = 18
CWT_TAG = 61

HEADER_ALGORITHM = 1
HEADER_KEY_ID = 4

_ENVELOPE_TAGS = frozenset({COSE_SIGN1_TAG, CWT_TAG})
_ENVELOPE_ARITY = 4


def header_from_map(raw: Mapping[Any, Any], label: str) -> CoseHeader:
    """Project the recognized COSE labels of a header map; other labels are ignored."""
    return CoseHeader(
        algorithm=read_optional_int(raw, HEADER_ALGORITHM, f"{label} algorithm (1)"),
        key_id=read_optional_bytes(raw, HEADER_KEY_ID, f"{label} key id (4)"),
    )


def _decode_envelope(data: bytes) -> Envelope:
    item = require_array(
        unwrap_tags(loads_item(data, "COSE_Sign1 envelope"), _ENVELOPE_TAGS),
        "COSE_Sign1 envelope",
    )
    if len(item) != _ENVELOPE_ARITY:
        raise CodedError(
            ErrorCode.STRUCTURE_ERROR,
            f"COSE_Sign1 envelope must have exactly 4 elements, got {len(item)}",
        )

    protected, unprotected, payload, signature = item
    return Envelope(
        protected_header=require_bytes(protected, "Protected header"),
        unprotected_header=header_from_map(require_map(unprotected, "Unprotected header"), "Unprotected header"),
        payload=require_bytes(payload, "Payload"),
        signature=require_bytes(signature, "Signature"),
    )


def decode_envelope(data: bytes) -> Result[Envelope]:
    """
    Decode a COSE_Sign1 message into an Envelope.

    Fails with STRUCTURE_ERROR on undecodable CBOR, a non-array envelope,
    an arity other than 4 or a non-map unprotected header, and with
    TYPE_ERROR when a byte-string element or a recognized header holds
    another type.
    """
    return Result.from_computation(
        lambda: _decode_envelope(data),
        ErrorCode.STRUCTURE_ERROR,
        "Failed to decode COSE_Sign1 envelope",
    )


def decode_protected_header(envelope: Envelope) -> Result[CoseHeader]:
    """
    Decode the serialized protected header map.

    An empty byte string stands for an empty map (RFC 9052 §3).
    """

    def _decode() -> CoseHeader:
        if not envelope.protected_header:
            return CoseHeader()
        raw = require_map(loads_item(envelope.protected_header, "Protected header"), "Protected header")
        return header_from_map(raw, "Protected header")

    return Result.from_computation(_decode, ErrorCode.STRUCTURE_ERROR, "Failed to decode protected header")


def key_id(envelope: Envelope) -> Result[bytes]:
    """
    Key identifier of the signer: protected header first, unprotected second.

    Wrapped as Success(b"") when neither header carries one, because a
    Result never holds None.
    """
    return decode_protected_header(envelope).map(
        lambda protected: protected.key_id or envelope.unprotected_header.key_id or b""
    )
