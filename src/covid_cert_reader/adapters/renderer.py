"""
JSON renderer — implements the CertificateRenderer port.

Two key styles:

  names  snake_case field names of the domain model (default)
  wire   the keys used on the wire: "1", "4", "6", "-260" for the CWT
         claims and the DCC short tags (nam, gn, dob, v, dn, ...); empty
         v / r lists are omitted, matching the legacy output of earlier
         readers
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Literal

from covid_cert_reader.domain.models import (
    CertificatePayload,
    Name,
    RecoveryEntry,
    VaccineEntry,
)

KeyStyle = Literal["names", "wire"]


def _name_to_wire(name: Name) -> dict[str, Any]:
    return {
        "gn": name.first_name,
        "gnt": name.first_name_standardized,
        "fn": name.last_name,
        "fnt": name.last_name_standardized,
    }


def _vaccine_to_wire(entry: VaccineEntry) -> dict[str, Any]:
    return {
        "tg": entry.target,
        "vp": entry.vaccine_or_prophylaxis,
        "mp": entry.medicinal_product,
        "ma": entry.marketing_auth_holder,
        "dn": entry.dose_number,
        "sd": entry.total_series_of_doses,
        "dt": entry.date_of_vaccination,
        "co": entry.country_of_vaccination,
        "is": entry.certificate_issuer,
        "ci": entry.unique_certificate_identifier,
    }


def _recovery_to_wire(entry: RecoveryEntry) -> dict[str, Any]:
    return {
        "tg": entry.target,
        "fr": entry.first_positive_result_date,
        "co": entry.country_of_test,
        "is": entry.certificate_issuer,
        "df": entry.certificate_valid_from,
        "du": entry.certificate_valid_until,
        "ci": entry.unique_certificate_identifier,
    }


def to_wire_dict(payload: CertificatePayload) -> dict[str, Any]:
    """Build the wire-keyed representation of a payload."""
    dcc = payload.certificate
    certificate: dict[str, Any] = {
        "nam": _name_to_wire(dcc.name),
        "dob": dcc.date_of_birth,
        "ver": dcc.version,
    }
    if dcc.vaccine_entries:
        certificate["v"] = [_vaccine_to_wire(entry) for entry in dcc.vaccine_entries]
    if dcc.recovery_entries:
        certificate["r"] = [_recovery_to_wire(entry) for entry in dcc.recovery_entries]
    return {
        "1": payload.issuer_country,
        "4": payload.expiry,
        "6": payload.issued_at,
        "-260": {"1": certificate},
    }


def to_named_dict(payload: CertificatePayload) -> dict[str, Any]:
    """Build the field-name representation; tuples become JSON arrays."""
    return asdict(payload)


class JsonCertificateRenderer:
    """Render a CertificatePayload as JSON text."""

    def __init__(self, key_style: KeyStyle = "names", indent: int | None = 2) -> None:
        if key_style not in ("names", "wire"):
            raise ValueError(f"Unknown key style: {key_style!r}")
        self._key_style = key_style
        self._indent = indent

    def render(self, payload: CertificatePayload) -> str:
        data = to_wire_dict(payload) if self._key_style == "wire" else to_named_dict(payload)
        return json.dumps(data, indent=self._indent, ensure_ascii=False)
