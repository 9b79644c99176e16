"""
Unit tests for domain models — value objects.

Verifies frozen dataclass behavior, defaults, and computed properties.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from covid_cert_reader.domain.models import (
    DCC,
    CertificatePayload,
    CoseHeader,
    Envelope,
    Name,
    VaccineEntry,
)


class TestEnvelope:
    def test_frozen_prevents_mutation(self) -> None:
        """
        GIVEN an Envelope
        WHEN attempting to replace its signature
        THEN the assignment is rejected.
        """
        envelope = Envelope(b"", CoseHeader(), b"payload", b"sig")
        with pytest.raises(AttributeError):
            envelope.signature = b"forged"  # type: ignore[misc]

    def test_repr_hides_binary_fields(self) -> None:
        envelope = Envelope(b"\xa1\x01\x26", CoseHeader(algorithm=-7, key_id=b"kid"), b"payload", b"sig")
        text = repr(envelope)
        assert "payload" not in text
        assert "algorithm=-7" in text


class TestDCC:
    def test_defaults_are_empty(self) -> None:
        """
        GIVEN a DCC with no arguments
        WHEN accessed
        THEN strings are empty, entry sequences are empty tuples, and the name is blank.
        """
        dcc = DCC()
        assert dcc.name == Name()
        assert dcc.date_of_birth == ""
        assert dcc.vaccine_entries == ()
        assert dcc.recovery_entries == ()

    def test_is_hashable(self) -> None:
        dcc = DCC(name=Name(first_name="ERIKA"), vaccine_entries=(VaccineEntry(dose_number=1),))
        assert hash(dcc) == hash(DCC(name=Name(first_name="ERIKA"), vaccine_entries=(VaccineEntry(dose_number=1),)))


class TestVaccineEntry:
    @pytest.mark.parametrize(
        ("dose", "series", "expected"),
        [(2, 2, True), (3, 2, True), (1, 2, False), (0, 0, False)],
    )
    def test_completes_series(self, dose: int, series: int, expected: bool) -> None:
        entry = VaccineEntry(dose_number=dose, total_series_of_doses=series)
        assert entry.completes_series is expected


class TestCertificatePayload:
    def _payload(self, expiry: int = 1655294400, issued_at: int = 1622808000) -> CertificatePayload:
        return CertificatePayload(issuer_country="DE", expiry=expiry, issued_at=issued_at, certificate=DCC())

    def test_timestamps_as_utc_datetimes(self) -> None:
        payload = self._payload()
        assert payload.expires_at == datetime(2022, 6, 15, 12, 0, tzinfo=UTC)
        assert payload.issued_at_datetime == datetime(2021, 6, 4, 12, 0, tzinfo=UTC)

    def test_is_expired(self) -> None:
        payload = self._payload()
        assert payload.is_expired(datetime(2023, 1, 1, tzinfo=UTC))
        assert not payload.is_expired(datetime(2021, 7, 1, tzinfo=UTC))

    def test_far_future_expiry_never_raises(self) -> None:
        """
        GIVEN an int64 expiry far beyond the datetime range (2**62 seconds)
        WHEN asked whether it has expired and for its datetime
        THEN it is not expired and the datetime clamps to datetime.max.
        """
        payload = self._payload(expiry=2**62)
        assert not payload.is_expired(datetime(2030, 1, 1, tzinfo=UTC))
        assert payload.expires_at == datetime.max.replace(tzinfo=UTC)

    def test_far_past_timestamp_clamps_to_min(self) -> None:
        payload = self._payload(expiry=-(2**62), issued_at=-(2**63))
        assert payload.is_expired(datetime(2021, 1, 1, tzinfo=UTC))
        assert payload.issued_at_datetime == datetime.min.replace(tzinfo=UTC)

    def test_negative_timestamp_before_epoch(self) -> None:
        assert self._payload(issued_at=-86400).issued_at_datetime == datetime(1969, 12, 31, tzinfo=UTC)
