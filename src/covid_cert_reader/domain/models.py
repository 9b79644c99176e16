"""
Domain models — immutable value objects for a decoded EU Digital COVID Certificate.

The HCERT container nests three layers, each modelled here:

  Envelope            COSE_Sign1 array [protected, unprotected, payload, signature]
  CertificatePayload  CWT claims map keyed by integers (1, 4, 6, -260)
  DCC                 the health certificate itself, keyed by short string tags
                      (DCC schema 1.3.0: nam, dob, ver, v, r)

All models are frozen dataclasses. Repeated sub-records are tuples so the
whole record stays immutable and hashable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta


@dataclass(frozen=True, slots=True)
class CoseHeader:
    """
    COSE header parameters the decoder recognizes.

    Label 1 is the signature algorithm (e.g. -7 for ES256), label 4 the key
    identifier of the Document Signer Certificate. Both are optional.
    """

    algorithm: int | None = None
    key_id: bytes | None = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class Envelope:
    """
    A decoded COSE_Sign1 message.

    The signature is carried as opaque bytes and never verified; keeping the
    field means verification can be added without reshaping this type.
    """

    protected_header: bytes = field(repr=False)
    unprotected_header: CoseHeader
    payload: bytes = field(repr=False)
    signature: bytes = field(repr=False)


@dataclass(frozen=True, slots=True)
class Name:
    """Holder name: given name (gn/gnt) and family name (fn/fnt), raw and ICAO-transliterated."""

    first_name: str = ""
    first_name_standardized: str = ""
    last_name: str = ""
    last_name_standardized: str = ""


@dataclass(frozen=True, slots=True)
class VaccineEntry:
    """One vaccination event (DCC `v` array element)."""

    target: str = ""
    vaccine_or_prophylaxis: str = ""
    medicinal_product: str = ""
    marketing_auth_holder: str = ""
    dose_number: int = 0
    total_series_of_doses: int = 0
    date_of_vaccination: str = ""
    country_of_vaccination: str = ""
    certificate_issuer: str = ""
    unique_certificate_identifier: str = ""

    @property
    def completes_series(self) -> bool:
        return self.total_series_of_doses > 0 and self.dose_number >= self.total_series_of_doses


@dataclass(frozen=True, slots=True)
class RecoveryEntry:
    """One recovery statement (DCC `r` array element)."""

    target: str = ""
    first_positive_result_date: str = ""
    country_of_test: str = ""
    certificate_issuer: str = ""
    certificate_valid_from: str = ""
    certificate_valid_until: str = ""
    unique_certificate_identifier: str = ""


@dataclass(frozen=True, slots=True)
class DCC:
    """
    The Digital COVID Certificate body.

    `date_of_birth` is an ISO 8601 partial date ("1964", "1964-08" or
    "1964-08-12") and is kept as text for that reason.
    """

    name: Name = field(default_factory=Name)
    date_of_birth: str = ""
    version: str = ""
    vaccine_entries: tuple[VaccineEntry, ...] = ()
    recovery_entries: tuple[RecoveryEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class CertificatePayload:
    """
    CWT claims of an HCERT: issuer (1), expiry (4), issued-at (6) and the
    certificate found under the HCERT claim (-260 → 1).

    Timestamps are Unix seconds, exactly as they appear on the wire.
    """

    issuer_country: str
    expiry: int
    issued_at: int
    certificate: DCC

    @property
    def expires_at(self) -> datetime:
        return _utc_datetime(self.expiry)

    @property
    def issued_at_datetime(self) -> datetime:
        return _utc_datetime(self.issued_at)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Compare the expiry claim against `now` (defaults to the current UTC time)."""
        moment = now or datetime.now(UTC)
        return self.expiry <= moment.timestamp()


_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_MIN_UTC = datetime.min.replace(tzinfo=UTC)
_MAX_UTC = datetime.max.replace(tzinfo=UTC)


def _utc_datetime(seconds: int) -> datetime:
    """
    Unix seconds as an aware UTC datetime.

    Claims are int64 on the wire, far wider than datetime (years 1-9999);
    values beyond that range clamp to datetime.min / datetime.max.
    """
    try:
        return _EPOCH + timedelta(seconds=seconds)
    except OverflowError:
        return _MAX_UTC if seconds > 0 else _MIN_UTC
