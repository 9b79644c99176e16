"""
Ports — Protocol-based interfaces for the collaborators around the decoder.

The decode pipeline itself is pure; only the edges touch the outside world:

  QrCodeReader         image (or scanned text) file → HCERT text
  CertificateRenderer  CertificatePayload → printable text

Adapters satisfy these contracts structurally — no inheritance.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from railway import Result

from covid_cert_reader.domain.models import CertificatePayload


@runtime_checkable
class QrCodeReader(Protocol):
    """
    Port: extract the text content of the QR code stored at `path`.

    Returns Result[str]; failures use ErrorCode.QR_CODE_ERROR.
    """

    def read(self, path: Path) -> Result[str]: ...


@runtime_checkable
class CertificateRenderer(Protocol):
    """Port: serialize a decoded certificate for display."""

    def render(self, payload: CertificatePayload) -> str: ...
