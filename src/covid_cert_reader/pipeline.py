"""
Pipeline — the HCERT decode chain.

Pure business logic: no I/O beyond the byte transformations themselves.
Stages are connected via flat_map, forming a railway:

  strip_marker(text)
    → decode_base45(text)
      → inflate(compressed)
        → decode_envelope(cose_bytes)
          → decode_payload(envelope)        # CWT claims
            → map_certificate(dcc_map)      # nested inside decode_payload

Each stage returns Result[T]. The first failure short-circuits the rest
and reaches the caller unchanged; there is never a partial result.

run_pipeline() adds the two edges (QR reading, rendering) through ports.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import partial
from pathlib import Path

import structlog
from railway import FailureDescription, Result

from covid_cert_reader.codec.base45 import decode_base45
from covid_cert_reader.codec.envelope import decode_envelope
from covid_cert_reader.codec.inflate import inflate
from covid_cert_reader.codec.marker import HC1_MARKER, strip_marker
from covid_cert_reader.codec.payload import decode_payload
from covid_cert_reader.domain.models import CertificatePayload
from covid_cert_reader.domain.ports import CertificateRenderer, QrCodeReader

log = structlog.get_logger()


def _log_failure(error: FailureDescription) -> None:
    log.info("pipeline.decode_failed", code=error.code.value, reason=error.message)


def decode_certificate(
    text: str,
    marker: str = HC1_MARKER,
    strict_claims: bool = False,
) -> Result[CertificatePayload]:
    """
    Decode the text of a DCC QR code into a CertificatePayload.

    The marker is optional in the input. Returns the fully populated
    payload or the failure of the first stage that rejected the input.
    """
    return (
        Result.success(strip_marker(text, marker))
        .flat_map(decode_base45)
        .flat_map(inflate)
        .flat_map(decode_envelope)
        .flat_map(partial(decode_payload, strict_claims=strict_claims))
        .peek_failure(_log_failure)
    )


def decode_many(
    texts: Iterable[str],
    marker: str = HC1_MARKER,
    strict_claims: bool = False,
) -> list[Result[CertificatePayload]]:
    """Decode several payloads independently; one Result per input, in input order."""
    return [decode_certificate(text, marker, strict_claims) for text in texts]


def run_pipeline(
    path: Path,
    qr_reader: QrCodeReader,
    renderer: CertificateRenderer,
    marker: str = HC1_MARKER,
    strict_claims: bool = False,
) -> Result[str]:
    """
    Read a QR code from `path`, decode it and render the record.

    Flow:
      1. Extract the QR text (image or scanned-text adapter)
      2. Decode the HCERT chain
      3. Render the CertificatePayload

    Returns Result[str] with the rendered record on success.
    """
    return (
        qr_reader.read(path)
        .flat_map(lambda text: decode_certificate(text, marker, strict_claims))
        .map(renderer.render)
    )
