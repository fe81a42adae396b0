"""Exit handling for the CLI: exit codes and how catalog errors are reported."""

from typing import NoReturn

import typer

from igcrest.cli.common.output import out
from igcrest.core.errors import (
    CatalogError,
    NotFoundError,
    TransportError,
    UnsuccessfulStatusError,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def ok_exit(msg: str | None = None) -> NoReturn:
    """Exit successfully, optionally saying why there is nothing more to do."""
    if msg:
        out.info(msg)
    raise typer.Exit(EXIT_OK)


def die(msg: str, code: int = EXIT_FAILURE) -> NoReturn:
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = EXIT_OK) -> NoReturn:
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(exc: Exception, *, message: str, code: int = EXIT_FAILURE) -> NoReturn:
    """Print `message` and exit, chaining the exception that caused it."""
    out.error(message)
    raise typer.Exit(code) from exc


def exit_from_catalog_error(exc: CatalogError) -> NoReturn:
    """
    Report a catalog error in one line and exit with EXIT_FAILURE.

    Status errors keep the response body in the message since the catalog
    explains rejected queries there; run with --verbose for the request log.
    """
    if isinstance(exc, NotFoundError):
        message = str(exc)
    elif isinstance(exc, UnsuccessfulStatusError):
        message = f"Catalog rejected the request (HTTP {exc.status_code}): {exc}"
    elif isinstance(exc, TransportError):
        message = f"Unable to reach the catalog: {exc}"
    else:
        message = f"Catalog request failed: {exc}"
    exit_from_exc(exc, message=message, code=EXIT_FAILURE)
