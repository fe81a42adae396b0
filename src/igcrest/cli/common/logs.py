"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from igcrest.cli.common.output import console


def configure_logging(verbose: bool = False) -> None:
    """Route library logging through the shared Rich console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO; keep it for --verbose only
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
