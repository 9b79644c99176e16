"""
Shared test fixtures for the covid-cert-reader test suite.

Vector builders live in tests/vectors.py; these fixtures put them on disk
for the adapters and the CLI.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from tests.vectors import ERIKA_HC1


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Keep structlog configuration from leaking between tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture()
def erika_text() -> str:
    """The ERIKA MUSTERMANN vaccination certificate as QR text ("HC1:...")."""
    return ERIKA_HC1


@pytest.fixture()
def erika_text_file(tmp_path: Path) -> Path:
    """A text file holding the scanned ERIKA payload, as scanner apps export it."""
    path = tmp_path / "erika.txt"
    path.write_text(ERIKA_HC1 + "\n", encoding="utf-8")
    return path
