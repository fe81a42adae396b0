from __future__ import annotations

import json
from pathlib import Path

import typer

from igcrest.cli.common.context import CatalogAppContext, build_context, load_config_or_exit
from igcrest.cli.common.exits import EXIT_OK, EXIT_USAGE, die, warn_exit
from igcrest.cli.common.options import ProfileOpt
from igcrest.cli.common.output import out
from igcrest.cli.common.pairs import parse_pairs
from igcrest.core.adapters.catalog import CatalogClient
from igcrest.core.connection import get_transport
from igcrest.core.identity import item_identity_string
from igcrest.core.paging import all_pages
from igcrest.core.queries import replace_query_vars
from igcrest.core.references import context_for_id, resolve_rid

assets_app = typer.Typer(
    help="Search assets and resolve their identities.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@assets_app.callback()
def _init(ctx: typer.Context, profile: str | None = ProfileOpt):
    """Initialize catalog connection context."""
    ctx.obj = build_context(profile)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(EXIT_OK)


def _parse_pairs_or_exit(values: list[str], *, option_name: str) -> dict[str, str]:
    try:
        return parse_pairs(values, option_name=option_name)
    except ValueError as exc:
        out.error(str(exc))
        raise typer.Exit(EXIT_USAGE) from exc


def _load_query_or_exit(query_file: Path) -> dict:
    try:
        query = json.loads(query_file.read_text())
    except OSError as exc:
        out.error(f"Unable to read {query_file}: {exc}")
        raise typer.Exit(EXIT_USAGE) from exc
    except json.JSONDecodeError as exc:
        out.error(f"{query_file} is not valid JSON: {exc}")
        raise typer.Exit(EXIT_USAGE) from exc
    if not isinstance(query, dict):
        die(f"{query_file} must contain a JSON object.", code=EXIT_USAGE)
    return query


@assets_app.command("search")
def search(
    ctx: typer.Context,
    query_file: Path = typer.Argument(..., help="JSON file holding the search"),
    var: list[str] = typer.Option(
        [], "--var", help="Query variable (name=value) substituted for $name"
    ),
    all_pages_: bool = typer.Option(
        False, "--all-pages", help="Follow paging until every result is retrieved"
    ),
):
    """Run a search and list the matching assets."""
    appctx: CatalogAppContext = ctx.obj
    query = _load_query_or_exit(query_file)
    variables = _parse_pairs_or_exit(var, option_name="--var")
    try:
        query = replace_query_vars(query, variables)
    except KeyError as exc:
        die(f"Missing value for query variable {exc}.", code=EXIT_USAGE)

    async def _search(client: CatalogClient) -> list[dict]:
        results = await client.search(query)
        items = results.get("items") or []
        if all_pages_:
            items = await all_pages(client, items, results.get("paging"))
        return items

    with out.status("Searching..."):
        items = appctx.run(_search)

    if not items:
        warn_exit("No assets found.")

    out.header("Search results")
    out.info(f"Assets: {len(items)}")
    out.items_table(items, title="Assets")


@assets_app.command("context")
def context(
    ctx: typer.Context,
    rid: str = typer.Argument(..., help="RID of the asset"),
    asset_type: str = typer.Argument(..., help="REST type of the asset"),
):
    """Show the containment context of an asset."""
    appctx: CatalogAppContext = ctx.obj

    async def _context(client: CatalogClient) -> list[dict]:
        return await context_for_id(client, rid, asset_type)

    with out.status("Loading context..."):
        chain = appctx.run(_context)

    out.header("Context")
    out.context_table(chain, title=f"Context of {rid}")


@assets_app.command("identity")
def identity(
    ctx: typer.Context,
    rid: str = typer.Argument(..., help="RID of the asset"),
    asset_type: str = typer.Argument(..., help="REST type of the asset"),
    delimiter: str = typer.Option("::", "--delimiter", help="Separator between names"),
):
    """Print the identity string (ancestor names then name) of an asset."""
    appctx: CatalogAppContext = ctx.obj

    async def _item(client: CatalogClient) -> dict:
        return await client.get_asset_properties_by_id(
            rid, asset_type, ["name"], 1, include_context=True
        )

    with out.status("Loading asset..."):
        item = appctx.run(_item)

    if not item:
        die(f"No '{asset_type}' found with RID '{rid}'.")

    typer.echo(item_identity_string(item, delimiter))


@assets_app.command("resolve-rid")
def resolve_rid_cmd(
    ctx: typer.Context,
    rid: str = typer.Argument(..., help="RID of the asset in the source profile"),
    asset_type: str = typer.Argument(..., help="REST type of the asset"),
    target_profile: str = typer.Option(
        ..., "--target-profile", help="Profile of the environment to resolve in"
    ),
    replace: list[str] = typer.Option(
        [],
        "--replace",
        help="Replacement ancestor name (type=value), e.g. host_(engine)=PRODHOST",
    ),
):
    """Find the RID of an asset in another environment of the catalog."""
    appctx: CatalogAppContext = ctx.obj
    replacements = _parse_pairs_or_exit(replace, option_name="--replace")
    target_config = load_config_or_exit(target_profile)

    async def _resolve(source: CatalogClient) -> tuple[dict, str]:
        item = await source.get_asset_properties_by_id(
            rid, asset_type, ["name"], 1, include_context=True
        )
        if not item:
            die(f"No '{asset_type}' found with RID '{rid}'.")
        async with CatalogClient(get_transport(target_config)) as target:
            return item, await resolve_rid(target, item, replacements)

    with out.status("Resolving..."):
        item, target_rid = appctx.run(_resolve)

    out.kv(
        {
            "Asset": item_identity_string(item),
            "Source RID": rid,
            "Target profile": target_profile,
            "Target RID": target_rid,
        }
    )
