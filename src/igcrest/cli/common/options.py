"""Common CLI options for the CLI."""

import typer

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    help="Catalog connection profile (from ~/.igcrestcfg)",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log every request issued against the catalog",
)

PageSizeOpt = typer.Option(
    100,
    "--page-size",
    help="How many related assets to retrieve per request",
)

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Show what would change, but do nothing",
)

YesOpt = typer.Option(False, "--yes", help="Skip confirmation prompt")
