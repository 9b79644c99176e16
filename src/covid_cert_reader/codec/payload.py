"""
CWT claims decoding — the integer-keyed map inside the COSE payload.

    {
        1:    issuer country (text, ISO 3166-1 alpha-2),
        4:    expiration time (int, Unix seconds),
        6:    issued at (int, Unix seconds),
        -260: { 1: <DCC map> },      # HCERT claim, eu_DCC_v1 slot
        ...                           # anything else is ignored
    }

Claim keys are integers on the wire and are looked up as integers; they are
never translated into names before projection.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from railway import CodedError, ErrorCode, Result

from covid_cert_reader.codec.cbor import has_key, loads_item, read_int, read_map, read_text, require_map
from covid_cert_reader.codec.schema import map_certificate
from covid_cert_reader.domain.models import CertificatePayload, Envelope

log = structlog.get_logger()

CLAIM_ISSUER = 1
CLAIM_EXPIRY = 4
CLAIM_ISSUED_AT = 6
CLAIM_HCERT = -260
HCERT_EU_DCC_V1 = 1

_REQUIRED_CLAIMS = (CLAIM_ISSUER, CLAIM_EXPIRY, CLAIM_ISSUED_AT, CLAIM_HCERT)


@dataclass(frozen=True, slots=True)
class _Claims:
    issuer_country: str
    expiry: int
    issued_at: int
    certificate: Mapping[Any, Any]


def _check_required(claims: Mapping[Any, Any], strict: bool) -> None:
    missing = [key for key in _REQUIRED_CLAIMS if not has_key(claims, key)]
    if not missing:
        return
    if strict:
        raise CodedError(
            ErrorCode.MISSING_FIELD_ERROR,
            f"CWT claims missing required keys: {', '.join(str(k) for k in missing)}",
        )
    log.warning("payload.claim_missing", claims=missing)


def _read_claims(raw_payload: bytes, strict: bool) -> _Claims:
    claims = require_map(loads_item(raw_payload, "CWT payload"), "CWT payload")
    _check_required(claims, strict)

    hcert = read_map(claims, CLAIM_HCERT, "HCERT claim (-260)")
    if strict and not has_key(hcert, HCERT_EU_DCC_V1):
        raise CodedError(ErrorCode.MISSING_FIELD_ERROR, "HCERT claim (-260) has no certificate under key 1")

    return _Claims(
        issuer_country=read_text(claims, CLAIM_ISSUER, "Issuer claim (1)"),
        expiry=read_int(claims, CLAIM_EXPIRY, "Expiry claim (4)"),
        issued_at=read_int(claims, CLAIM_ISSUED_AT, "Issued-at claim (6)"),
        certificate=read_map(hcert, HCERT_EU_DCC_V1, "HCERT certificate (-260/1)"),
    )


def decode_payload(envelope: Envelope, strict_claims: bool = False) -> Result[CertificatePayload]:
    """
    Decode the CWT claims of an envelope, including the nested certificate.

    Absent claims take their zero value ("" / 0) and are logged, unless
    strict_claims is set, in which case they fail with MISSING_FIELD_ERROR.
    Wrongly typed claims always fail with TYPE_ERROR; a payload or HCERT
    wrapper that is not a map fails with STRUCTURE_ERROR.
    """
    return Result.from_computation(
        lambda: _read_claims(envelope.payload, strict_claims),
        ErrorCode.STRUCTURE_ERROR,
        "Failed to decode CWT payload",
    ).flat_map(
        lambda claims: map_certificate(claims.certificate).map(
            lambda dcc: CertificatePayload(
                issuer_country=claims.issuer_country,
                expiry=claims.expiry,
                issued_at=claims.issued_at,
                certificate=dcc,
            )
        )
    )
