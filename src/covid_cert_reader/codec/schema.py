"""
DCC schema mapping — string-tagged certificate map → DCC value objects.

Targets ehn-dcc-schema release 1.3.0:

    nam  → Name            {gn, gnt, fn, fnt}
    dob  → date of birth   (ISO 8601 partial date)
    ver  → schema version
    v    → [VaccineEntry]  {tg, vp, mp, ma, dn, sd, dt, co, is, ci}
    r    → [RecoveryEntry] {tg, fr, co, is, df, du, ci}
    t    → test entries, not supported: dropped without error

Decoding is lenient about absence and unknown tags, strict about types.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from railway import ErrorCode, Result

from covid_cert_reader.codec.cbor import read_array, read_int, read_map, read_text, require_map
from covid_cert_reader.domain.models import DCC, Name, RecoveryEntry, VaccineEntry


def _map_name(raw: Mapping[Any, Any]) -> Name:
    return Name(
        first_name=read_text(raw, "gn", "nam.gn"),
        first_name_standardized=read_text(raw, "gnt", "nam.gnt"),
        last_name=read_text(raw, "fn", "nam.fn"),
        last_name_standardized=read_text(raw, "fnt", "nam.fnt"),
    )


def _map_vaccine(raw: Any, index: int) -> VaccineEntry:
    label = f"v[{index}]"
    entry = require_map(raw, label)
    return VaccineEntry(
        target=read_text(entry, "tg", f"{label}.tg"),
        vaccine_or_prophylaxis=read_text(entry, "vp", f"{label}.vp"),
        medicinal_product=read_text(entry, "mp", f"{label}.mp"),
        marketing_auth_holder=read_text(entry, "ma", f"{label}.ma"),
        dose_number=read_int(entry, "dn", f"{label}.dn"),
        total_series_of_doses=read_int(entry, "sd", f"{label}.sd"),
        date_of_vaccination=read_text(entry, "dt", f"{label}.dt"),
        country_of_vaccination=read_text(entry, "co", f"{label}.co"),
        certificate_issuer=read_text(entry, "is", f"{label}.is"),
        unique_certificate_identifier=read_text(entry, "ci", f"{label}.ci"),
    )


def _map_recovery(raw: Any, index: int) -> RecoveryEntry:
    label = f"r[{index}]"
    entry = require_map(raw, label)
    return RecoveryEntry(
        target=read_text(entry, "tg", f"{label}.tg"),
        first_positive_result_date=read_text(entry, "fr", f"{label}.fr"),
        country_of_test=read_text(entry, "co", f"{label}.co"),
        certificate_issuer=read_text(entry, "is", f"{label}.is"),
        certificate_valid_from=read_text(entry, "df", f"{label}.df"),
        certificate_valid_until=read_text(entry, "du", f"{label}.du"),
        unique_certificate_identifier=read_text(entry, "ci", f"{label}.ci"),
    )


def _map_certificate(raw: Mapping[Any, Any]) -> DCC:
    return DCC(
        name=_map_name(read_map(raw, "nam", "nam")),
        date_of_birth=read_text(raw, "dob", "dob"),
        version=read_text(raw, "ver", "ver"),
        vaccine_entries=tuple(
            _map_vaccine(item, index) for index, item in enumerate(read_array(raw, "v", "v"))
        ),
        recovery_entries=tuple(
            _map_recovery(item, index) for index, item in enumerate(read_array(raw, "r", "r"))
        ),
    )


def map_certificate(raw: Mapping[Any, Any]) -> Result[DCC]:
    """
    Project a decoded DCC map onto the DCC model.

    Missing `v`/`r` give empty tuples; unknown keys (including `t`) are
    ignored. A wrongly typed scalar fails with TYPE_ERROR, a wrongly shaped
    container (nam, v, r or one of their elements) with STRUCTURE_ERROR.
    """
    return Result.from_computation(
        lambda: _map_certificate(raw),
        ErrorCode.STRUCTURE_ERROR,
        "Failed to map DCC certificate",
    )
