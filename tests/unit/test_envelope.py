"""
Unit tests for the COSE_Sign1 envelope decoder.

Test categories:
  - Success: tagged / untagged / CWT-tagged envelopes, header projection
  - Arity invariant: 3 and 5 elements are rejected, never truncated or padded
  - Shape errors: non-array envelope, non-map unprotected header, foreign tags
  - Type errors: byte-string elements and recognized headers with wrong types
  - Protected header: decoded on demand, never verified
"""

from __future__ import annotations

from types import MappingProxyType

import cbor2
import pytest
from railway import ErrorCode, ResultAssertions

from covid_cert_reader.codec.envelope import decode_envelope, decode_protected_header, key_id
from covid_cert_reader.domain.models import CoseHeader, Envelope
from tests.vectors import KEY_ID, SIGNATURE, cose_sign1

PAYLOAD = cbor2.dumps({1: "DE"})


def _array(*items: object, tag: int | None = 18) -> bytes:
    array = list(items)
    return cbor2.dumps(cbor2.CBORTag(tag, array) if tag is not None else array)


# ─────────────────────── Success ───────────────────────


class TestDecodeEnvelopeSuccess:
    def test_decodes_tagged_envelope(self) -> None:
        """
        GIVEN a COSE_Sign1 array wrapped in tag 18
        WHEN decoded
        THEN all four elements land in the Envelope, in order.
        """
        envelope = ResultAssertions.assert_success(decode_envelope(cose_sign1(PAYLOAD)))
        assert envelope.protected_header == cbor2.dumps({1: -7, 4: KEY_ID})
        assert envelope.payload == PAYLOAD
        assert envelope.signature == SIGNATURE

    def test_decodes_untagged_envelope(self) -> None:
        envelope = ResultAssertions.assert_success(decode_envelope(cose_sign1(PAYLOAD, tag=None)))
        assert envelope.payload == PAYLOAD

    def test_decodes_cwt_tag_around_cose_tag(self) -> None:
        inner = cbor2.CBORTag(18, [b"", {}, PAYLOAD, SIGNATURE])
        data = cbor2.dumps(cbor2.CBORTag(61, inner))
        envelope = ResultAssertions.assert_success(decode_envelope(data))
        assert envelope.payload == PAYLOAD

    def test_projects_unprotected_header(self) -> None:
        data = cose_sign1(PAYLOAD, unprotected={1: -37, 4: b"kid-1"})
        envelope = ResultAssertions.assert_success(decode_envelope(data))
        assert envelope.unprotected_header == CoseHeader(algorithm=-37, key_id=b"kid-1")

    def test_ignores_unknown_header_labels(self) -> None:
        """
        GIVEN an unprotected header with labels other than 1 and 4
        WHEN decoded
        THEN those labels are ignored, not an error.
        """
        data = cose_sign1(PAYLOAD, unprotected={3: "application/cwt", "x-vendor": b"\x00"})
        envelope = ResultAssertions.assert_success(decode_envelope(data))
        assert envelope.unprotected_header == CoseHeader()

    def test_signature_is_retained_not_checked(self) -> None:
        data = _array(b"", {}, PAYLOAD, b"not a signature")
        envelope = ResultAssertions.assert_success(decode_envelope(data))
        assert envelope.signature == b"not a signature"


class TestImmutableDecoding:
    def test_accepts_tuple_and_read_only_map(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """
        GIVEN a CBOR decoder that returns the tagged COSE_Sign1 array as a tuple
              and the unprotected header as a read-only mapping
        WHEN decoded
        THEN the envelope and its header are projected as usual.
        """
        unprotected = MappingProxyType({1: -7, 4: b"kid-1"})
        decoded = cbor2.CBORTag(18, (b"", unprotected, PAYLOAD, SIGNATURE))
        monkeypatch.setattr(cbor2, "loads", lambda data: decoded)

        envelope = ResultAssertions.assert_success(decode_envelope(b"\xd2"))
        assert envelope.unprotected_header == CoseHeader(algorithm=-7, key_id=b"kid-1")
        assert envelope.payload == PAYLOAD

    def test_decodes_tagged_envelope_with_unprotected_key_id(self) -> None:
        data = cose_sign1(PAYLOAD, protected={}, unprotected={4: KEY_ID})
        envelope = ResultAssertions.assert_success(decode_envelope(data))
        assert ResultAssertions.assert_success(key_id(envelope)) == KEY_ID

    def test_tuple_with_wrong_arity_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(cbor2, "loads", lambda data: cbor2.CBORTag(18, (b"", {}, PAYLOAD)))
        result = decode_envelope(b"\xd2")
        ResultAssertions.assert_failure(result, ErrorCode.STRUCTURE_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "exactly 4 elements, got 3")


# ─────────────────────── Arity Invariant ───────────────────────


class TestArity:
    @pytest.mark.parametrize(
        "items",
        [
            (b"", {}, PAYLOAD),
            (b"", {}, PAYLOAD, SIGNATURE, b"extra"),
            (),
        ],
        ids=["three", "five", "empty"],
    )
    def test_wrong_arity_is_structure_error(self, items: tuple[object, ...]) -> None:
        """
        GIVEN an envelope array with other than 4 elements
        WHEN decoded
        THEN STRUCTURE_ERROR — never truncated or padded.
        """
        result = decode_envelope(_array(*items))
        ResultAssertions.assert_failure(result, ErrorCode.STRUCTURE_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "exactly 4 elements")


# ─────────────────────── Shape Errors ───────────────────────


class TestStructureErrors:
    def test_map_instead_of_array(self) -> None:
        ResultAssertions.assert_failure(decode_envelope(cbor2.dumps({1: 2})), ErrorCode.STRUCTURE_ERROR)

    def test_unprotected_header_not_a_map(self) -> None:
        data = _array(b"", [1, 4], PAYLOAD, SIGNATURE)
        ResultAssertions.assert_failure(decode_envelope(data), ErrorCode.STRUCTURE_ERROR)

    def test_foreign_tag(self) -> None:
        # tag 98 is COSE_Sign (multi-signer), not COSE_Sign1
        data = _array(b"", {}, PAYLOAD, SIGNATURE, tag=98)
        ResultAssertions.assert_failure(decode_envelope(data), ErrorCode.STRUCTURE_ERROR)

    @pytest.mark.parametrize("data", [b"", b"\xff", b"\x84\x40"], ids=["empty", "break", "short-array"])
    def test_undecodable_cbor(self, data: bytes) -> None:
        ResultAssertions.assert_failure(decode_envelope(data), ErrorCode.STRUCTURE_ERROR)


# ─────────────────────── Type Errors ───────────────────────


class TestTypeErrors:
    @pytest.mark.parametrize(
        "items",
        [
            ("text", {}, PAYLOAD, SIGNATURE),
            (b"", {}, 42, SIGNATURE),
            (b"", {}, PAYLOAD, None),
        ],
        ids=["protected", "payload", "signature"],
    )
    def test_non_bytes_element(self, items: tuple[object, ...]) -> None:
        ResultAssertions.assert_failure(decode_envelope(_array(*items)), ErrorCode.TYPE_ERROR)

    def test_algorithm_as_text(self) -> None:
        data = cose_sign1(PAYLOAD, unprotected={1: "ES256"})
        ResultAssertions.assert_failure(decode_envelope(data), ErrorCode.TYPE_ERROR)

    def test_key_id_as_text(self) -> None:
        data = cose_sign1(PAYLOAD, unprotected={4: "kid"})
        ResultAssertions.assert_failure(decode_envelope(data), ErrorCode.TYPE_ERROR)


# ─────────────────────── Protected Header ───────────────────────


class TestProtectedHeader:
    def test_decodes_protected_header(self) -> None:
        envelope = ResultAssertions.assert_success(decode_envelope(cose_sign1(PAYLOAD)))
        header = ResultAssertions.assert_success(decode_protected_header(envelope))
        assert header == CoseHeader(algorithm=-7, key_id=KEY_ID)

    def test_empty_protected_header_is_empty_map(self) -> None:
        envelope = Envelope(b"", CoseHeader(), PAYLOAD, SIGNATURE)
        assert ResultAssertions.assert_success(decode_protected_header(envelope)) == CoseHeader()

    def test_protected_header_not_a_map(self) -> None:
        envelope = Envelope(cbor2.dumps([1, 2]), CoseHeader(), PAYLOAD, SIGNATURE)
        ResultAssertions.assert_failure(decode_protected_header(envelope), ErrorCode.STRUCTURE_ERROR)

    def test_key_id_prefers_protected_header(self) -> None:
        envelope = Envelope(cbor2.dumps({4: b"protected"}), CoseHeader(key_id=b"unprotected"), PAYLOAD, SIGNATURE)
        assert ResultAssertions.assert_success(key_id(envelope)) == b"protected"

    def test_key_id_falls_back_to_unprotected_header(self) -> None:
        envelope = Envelope(cbor2.dumps({1: -7}), CoseHeader(key_id=b"unprotected"), PAYLOAD, SIGNATURE)
        assert ResultAssertions.assert_success(key_id(envelope)) == b"unprotected"

    def test_key_id_absent(self) -> None:
        envelope = Envelope(b"", CoseHeader(), PAYLOAD, SIGNATURE)
        assert ResultAssertions.assert_success(key_id(envelope)) == b""
