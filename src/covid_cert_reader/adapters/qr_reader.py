"""
QR adapters — implement the QrCodeReader port.

  - PyzbarQrCodeReader: decodes the QR symbol in an image file
    (Pillow opens the image, pyzbar/zbar locates and decodes the symbol)
  - TextFileQrCodeReader: reads a payload that a scanner app already
    exported as text

Both catch every exception at this boundary and return
Result.failure(QR_CODE_ERROR, ...) instead.
"""

from __future__ import annotations

from pathlib import Path

import structlog
from PIL import Image
from railway import CodedError, ErrorCode, Result

log = structlog.get_logger()

_QR_SYMBOL_TYPE = "QRCODE"


class PyzbarQrCodeReader:
    """Extract QR text from a PNG/JPEG (any format Pillow can open)."""

    def read(self, path: Path) -> Result[str]:
        return Result.from_computation(
            lambda: self._do_read(path),
            ErrorCode.QR_CODE_ERROR,
            f"Failed to read QR code from {path}",
        )

    def _do_read(self, path: Path) -> str:
        # zbar is a system library; it is only loaded once an image is decoded.
        from pyzbar import pyzbar

        with Image.open(path) as image:
            symbols = pyzbar.decode(image)

        qr_symbols = [symbol for symbol in symbols if symbol.type == _QR_SYMBOL_TYPE]
        if not qr_symbols:
            raise CodedError(ErrorCode.QR_CODE_ERROR, f"No QR code found in {path}")
        if len(qr_symbols) > 1:
            log.warning("qr_reader.multiple_symbols", path=str(path), count=len(qr_symbols))

        text = qr_symbols[0].data.decode("utf-8")
        log.debug("qr_reader.decoded", path=str(path), length=len(text))
        return text


class TextFileQrCodeReader:
    """Read an already scanned QR payload from a UTF-8 text file."""

    def read(self, path: Path) -> Result[str]:
        return Result.from_computation(
            lambda: self._do_read(path),
            ErrorCode.QR_CODE_ERROR,
            f"Failed to read QR payload from {path}",
        )

    def _do_read(self, path: Path) -> str:
        text = path.read_text(encoding="utf-8").strip()
        if not text:
            raise CodedError(ErrorCode.QR_CODE_ERROR, f"{path} is empty")
        return text
