"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from igcrest.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM
from igcrest.core.identity import item_identity_string

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q_try(self, fn, *args, **kwargs):
        """Call questionary prompts and drop unsupported kwargs on older versions."""
        try:
            return fn(*args, **kwargs)
        except TypeError:
            for k in ("pointer", "auto_enter"):
                kwargs.pop(k, None)
            return fn(*args, **kwargs)

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts to be IGCREST consistent."""
        return f"[IGCREST] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {escape(str(v))}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        console.print("[meta]Use y/n then Enter[/]")

        prompt = self._q_try(
            questionary.confirm,
            self._q(message),
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
            pointer="❯",
        )
        return bool(prompt.ask())

    def items_table(self, items: Iterable[Mapping[str, Any]], title: str = "Assets") -> None:
        """
        Render REST items (dicts with `_id`, `_type`, `_name`, optional `_context`).
        """
        t = Table(title=title, show_lines=False)
        t.add_column("RID", style="ok", no_wrap=True)
        t.add_column("Type", style="meta")
        t.add_column("Identity")

        for item in items:
            if "_context" in item and "_name" in item and "_type" in item:
                identity = item_identity_string(item)
            else:
                identity = str(item.get("_name", ""))
            t.add_row(str(item.get("_id", "")), str(item.get("_type", "")), identity)

        console.print(t)

    def context_table(
        self, context: Iterable[Mapping[str, Any]], title: str = "Context"
    ) -> None:
        """Render a `_context` chain, root first."""
        t = Table(title=title, show_lines=False)
        t.add_column("#", style="meta", no_wrap=True)
        t.add_column("Type", style="meta")
        t.add_column("Name")
        t.add_column("RID", style="ok", no_wrap=True)

        for depth, entry in enumerate(context):
            t.add_row(
                str(depth),
                str(entry.get("_type", "")),
                str(entry.get("_name", "")),
                str(entry.get("_id", "")),
            )

        console.print(t)

    def relationship_delta_table(self, delta, title: str = "Relationship changes") -> None:
        """
        Expects a RelationshipDelta (all_ids, dropped_ids, final_ids).
        """
        dropped = set(delta.dropped_ids)
        t = Table(title=title, show_lines=False)
        t.add_column("RID", no_wrap=True)
        t.add_column("Result")

        for rid in delta.all_ids:
            result = "[err]remove[/]" if rid in dropped else "[ok]keep[/]"
            t.add_row(str(rid), result)

        console.print(t)


out = Out()
