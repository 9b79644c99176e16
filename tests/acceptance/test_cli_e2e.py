"""
End-to-end BDD acceptance tests for the covid-cert-reader command.

Exercises the full path: scanned text file → real text adapter → decode
chain → real JSON renderer → stdout, through the click entry point.

Each test follows Given/When/Then BDD structure in its docstring.

Markers: @pytest.mark.acceptance
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import pytest
from click.testing import CliRunner
from railway import ErrorCode, Result, ResultAssertions

from covid_cert_reader.adapters.renderer import JsonCertificateRenderer
from covid_cert_reader.main import main
from covid_cert_reader.pipeline import run_pipeline
from tests.vectors import ERIKA_RECOVERY, EXPIRY, ISSUED_AT, claims, erika_dcc, hcert_text

pytestmark = pytest.mark.acceptance


# ── Fake adapters (no camera, no zbar) ───────────────────────────────────────


@dataclass(frozen=True, slots=True)
class FakeQrCodeReader:
    """Returns a fixed QR text regardless of the path."""

    text: str

    def read(self, path: Path) -> Result[str]:
        return Result.success(self.text)


def _run_cli(tmp_path: Path, text: str, *args: str):
    path = tmp_path / "scan.txt"
    path.write_text(text, encoding="utf-8")
    return CliRunner().invoke(main, ["--text", "--log-level", "CRITICAL", *args, str(path)])


# ── Scenarios ────────────────────────────────────────────────────────────────


class TestVaccinationCertificate:
    def test_scanned_vaccination_certificate_is_printed(self, tmp_path: Path) -> None:
        """
        GIVEN a scanned HC1 vaccination certificate for ERIKA MUSTERMANN
        WHEN the command decodes it
        THEN the holder, the claims and the dose appear in the JSON output.
        """
        result = _run_cli(tmp_path, hcert_text())

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["issuer_country"] == "DE"
        assert data["issued_at"] == ISSUED_AT
        assert data["expiry"] == EXPIRY
        certificate = data["certificate"]
        assert certificate["name"]["last_name_standardized"] == "MUSTERMANN"
        assert certificate["version"] == "1.3.0"
        assert certificate["vaccine_entries"][0]["dose_number"] == 2
        assert certificate["vaccine_entries"][0]["unique_certificate_identifier"].startswith("URN:UVCI:01DE")


class TestRecoveryCertificate:
    def test_recovery_certificate_is_printed_with_wire_keys(self, tmp_path: Path) -> None:
        """
        GIVEN a recovery certificate with no vaccination entries
        WHEN the command renders it with --keys wire
        THEN the "r" list is present and the empty "v" list is omitted.
        """
        dcc = erika_dcc(r=[ERIKA_RECOVERY])
        del dcc["v"]
        result = _run_cli(tmp_path, hcert_text(claims(dcc)), "--keys", "wire")

        assert result.exit_code == 0, result.output
        certificate = json.loads(result.stdout)["-260"]["1"]
        assert "v" not in certificate
        assert certificate["r"][0]["fr"] == "2021-01-10"


class TestClaims:
    def test_missing_expiry_is_zero_filled(self, tmp_path: Path) -> None:
        """
        GIVEN a certificate whose CWT lacks the expiry claim
        WHEN decoded with default settings
        THEN decoding succeeds and the expiry is 0.
        """
        result = _run_cli(tmp_path, hcert_text(claims(drop=(4,))))

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["expiry"] == 0

    def test_missing_expiry_fails_in_strict_mode(self, tmp_path: Path) -> None:
        result = _run_cli(tmp_path, hcert_text(claims(drop=(4,))), "--strict-claims")

        assert result.exit_code == 1
        assert "MISSING_FIELD_ERROR" in result.output


class TestCorruptedScans:
    def test_truncated_scan_fails(self, tmp_path: Path) -> None:
        """
        GIVEN a scan cut off in the middle of the payload
        WHEN the command decodes it
        THEN it exits 1 with an error and prints nothing on stdout.
        """
        text = hcert_text()
        truncated = text[: len(text) - (len(text) - 4) % 3 - 30]
        result = _run_cli(tmp_path, truncated)

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "{" not in result.output


class TestRunPipeline:
    def test_run_pipeline_with_real_renderer(self) -> None:
        """
        GIVEN a QR reader returning a valid HC1 text
        WHEN run_pipeline runs with the real JSON renderer
        THEN the rendered record is returned as a success.
        """
        result = run_pipeline(
            Path("scan.png"),
            qr_reader=FakeQrCodeReader(hcert_text()),
            renderer=JsonCertificateRenderer(indent=None),
        )

        rendered = ResultAssertions.assert_success(result)
        assert json.loads(rendered)["certificate"]["date_of_birth"] == "1964-08-12"

    def test_run_pipeline_reports_reader_failure(self) -> None:
        result = run_pipeline(
            Path("scan.png"),
            qr_reader=FakeQrCodeReader("HC1:"),
            renderer=JsonCertificateRenderer(),
        )
        ResultAssertions.assert_failure(result, ErrorCode.ALPHABET_ERROR)
