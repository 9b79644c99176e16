"""
Application entry point — the `covid-cert-reader` command.

Composition root: loads settings, configures structlog, picks the QR
adapter and the renderer, and hands them to the pipeline.

This is the ONLY place where concrete adapters are instantiated.

Process contract:
  - exactly one positional argument (image path, or text file with --text)
  - wrong argument count → usage message, exit 2
  - any pipeline failure → error message on stderr, exit 1
  - success → decoded record as JSON on stdout, exit 0
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import click
import structlog
from railway import ErrorCode, LoggingExecutionContext, Result

from covid_cert_reader import __version__
from covid_cert_reader.adapters.qr_reader import PyzbarQrCodeReader, TextFileQrCodeReader
from covid_cert_reader.adapters.renderer import JsonCertificateRenderer
from covid_cert_reader.config import AppSettings
from covid_cert_reader.domain.ports import QrCodeReader
from covid_cert_reader.pipeline import run_pipeline


def configure_structlog(log_level: str = "WARNING") -> None:
    """
    Configure structlog for human-readable logging on stderr.

    stdout is reserved for the decoded record. The logger resolves
    sys.stderr on every call so redirected streams are honoured.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.WARNING)
        ),
        context_class=dict,
        logger_factory=lambda *args: structlog.PrintLogger(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def _select_reader(from_text: bool) -> QrCodeReader:
    return TextFileQrCodeReader() if from_text else PyzbarQrCodeReader()


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="covid-cert-reader")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--text", "from_text", is_flag=True, help="PATH is a text file holding the scanned QR payload.")
@click.option(
    "--keys",
    "output_keys",
    type=click.Choice(["names", "wire"]),
    default=None,
    help="JSON key style: field names (default) or legacy wire keys.",
)
@click.option("--strict-claims", is_flag=True, help="Fail when a required CWT claim is absent.")
@click.option("--log-level", default=None, help="Logging level (default from COVID_CERT_LOG_LEVEL or WARNING).")
def main(
    path: Path,
    from_text: bool,
    output_keys: str | None,
    strict_claims: bool,
    log_level: str | None,
) -> None:
    """Decode the EU Digital COVID Certificate in the QR code at PATH."""
    overrides: dict[str, Any] = {}
    if output_keys is not None:
        overrides["output_keys"] = output_keys
    if strict_claims:
        overrides["strict_claims"] = True
    if log_level is not None:
        overrides["log_level"] = log_level

    loaded = Result.from_computation(
        lambda: AppSettings(**overrides),
        ErrorCode.CONFIGURATION_ERROR,
        "Invalid configuration",
    )
    if loaded.is_failure():
        click.echo(f"Error: {loaded.error()}", err=True)
        sys.exit(1)

    settings = loaded.value()
    configure_structlog(settings.log_level)
    log = structlog.get_logger()
    log.debug("cli.starting", version=__version__, path=str(path), output_keys=settings.output_keys)

    renderer = JsonCertificateRenderer(key_style=settings.output_keys, indent=settings.json_indent)
    ctx = LoggingExecutionContext(operation="DecodeCertificate")
    result = ctx.execute(
        lambda: run_pipeline(
            path,
            qr_reader=_select_reader(from_text),
            renderer=renderer,
            marker=settings.marker,
            strict_claims=settings.strict_claims,
        )
    )

    if result.is_failure():
        error = result.error()
        log.error("cli.decode_failed", code=error.code.value)
        click.echo(f"Error: {error}", err=True)
        sys.exit(1)

    click.echo(result.value())


if __name__ == "__main__":
    main()
