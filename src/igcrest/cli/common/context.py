"""Application context management for the CLI."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from igcrest.cli.common.exits import die, exit_from_catalog_error
from igcrest.core.adapters.catalog import CatalogClient
from igcrest.core.connection import CatalogConfig, get_transport, load_config
from igcrest.core.errors import CatalogError, ConfigError

T = TypeVar("T")


@dataclass
class CatalogAppContext:
    """Application context holding the resolved connection profile."""

    profile: str | None
    config: CatalogConfig

    def open_client(self) -> CatalogClient:
        """Create a client; it must be used (and closed) inside one event loop."""
        return CatalogClient(get_transport(self.config))

    def run(self, fn: Callable[[CatalogClient], Awaitable[T]]) -> T:
        """Run `fn` against a fresh client and exit cleanly on catalog errors."""

        async def _main() -> T:
            async with self.open_client() as client:
                return await fn(client)

        try:
            return asyncio.run(_main())
        except CatalogError as exc:
            exit_from_catalog_error(exc)


def load_config_or_exit(profile: str | None) -> CatalogConfig:
    """Resolve a profile's configuration, exiting with a readable message on failure."""
    try:
        return load_config(profile)
    except ConfigError as exc:
        die(str(exc))


def build_context(profile: str | None) -> CatalogAppContext:
    """Build and return the application context for a connection profile.

    Args:
        profile: Optional profile name to use for the connection.

    Returns:
        CatalogAppContext: Application context with the resolved configuration.
    """
    return CatalogAppContext(profile=profile, config=load_config_or_exit(profile))
