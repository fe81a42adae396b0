"""Commands for changing relationships between assets."""

from __future__ import annotations

import typer

from igcrest.cli.common.context import CatalogAppContext, build_context
from igcrest.cli.common.exits import EXIT_OK, EXIT_USAGE, die, ok_exit
from igcrest.cli.common.options import DryRunOpt, PageSizeOpt, ProfileOpt, YesOpt
from igcrest.cli.common.output import out
from igcrest.cli.common.pairs import build_conditions
from igcrest.core.adapters.catalog import CatalogClient
from igcrest.core.assets import Asset, RelationshipMode
from igcrest.core.queries import log_update_results
from igcrest.core.relationships import (
    add_relationship,
    plan_replace_some,
    relationship_payload,
)

rel_app = typer.Typer(
    help="Append, replace or partially replace asset relationships.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@rel_app.callback()
def _init(ctx: typer.Context, profile: str | None = ProfileOpt):
    """Initialize catalog connection context."""
    ctx.obj = build_context(profile)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(EXIT_OK)


@rel_app.command("set")
def set_relationship(
    ctx: typer.Context,
    from_rid: str = typer.Argument(..., help="RID of the asset to change"),
    from_type: str = typer.Argument(..., help="REST type of the asset to change"),
    relationship: str = typer.Argument(..., help="Relationship property to change"),
    to: list[str] = typer.Option([], "--to", help="RID to relate (repeatable)"),
    mode: RelationshipMode = typer.Option(
        RelationshipMode.APPEND, "--mode", case_sensitive=False
    ),
    replace_type: str | None = typer.Option(
        None, "--replace-type", help="Type of related assets to remove (REPLACE_SOME)"
    ),
    where: list[str] = typer.Option(
        [], "--where", help="Condition (property=value) selecting what to remove"
    ),
    page_size: int = PageSizeOpt,
    dry_run: bool = DryRunOpt,
    yes: bool = YesOpt,
):
    """Relate an asset to others, or remove a matching subset of its relationships."""
    appctx: CatalogAppContext = ctx.obj
    asset = Asset(id=from_rid, type=from_type, name=from_rid)

    if mode == RelationshipMode.REPLACE_SOME:
        if not replace_type:
            die("--replace-type is required with REPLACE_SOME.", code=EXIT_USAGE)
        if to:
            out.warn("REPLACE_SOME only removes relationships; --to is ignored.")
    elif not to:
        die("Provide at least one --to RID.", code=EXIT_USAGE)

    try:
        conditions = build_conditions(where)
    except ValueError as exc:
        out.error(str(exc))
        raise typer.Exit(EXIT_USAGE) from exc

    if mode == RelationshipMode.REPLACE_SOME:

        async def _plan(client: CatalogClient):
            return await plan_replace_some(
                client, asset, relationship, replace_type, conditions, page_size
            )

        with out.status("Reading existing relationships..."):
            delta = appctx.run(_plan)
        out.header("Planned changes")
        out.relationship_delta_table(delta)
        out.info(
            f"Existing: {len(delta.all_ids)} | Removed: {len(delta.dropped_ids)}"
            f" | Kept: {len(delta.final_ids)}"
        )
        if not delta.dropped_ids:
            ok_exit("Nothing matches; no update needed.")
    else:
        out.header("Planned update")
        out.kv(relationship_payload(relationship, to, mode))

    if dry_run:
        out.warn("DRY RUN: no changes will be made.")
        raise typer.Exit(EXIT_OK)

    if not yes:
        if not out.confirm(f"Proceed with updating '{relationship}' on {from_rid}?"):
            out.warn("Cancelled.")
            raise typer.Exit(EXIT_OK)

    async def _apply(client: CatalogClient):
        if mode == RelationshipMode.REPLACE_SOME:
            # write exactly what was previewed and confirmed
            payload = relationship_payload(relationship, delta.final_ids, mode)
            return await client.update(asset.id, payload)
        return await add_relationship(
            client,
            asset,
            to,
            relationship,
            mode,
            replace_type=replace_type,
            conditions=conditions,
            page_size=page_size,
        )

    with out.status("Updating relationships..."):
        result = appctx.run(_apply)

    log_update_results(result or {})
    out.success(f"Updated '{relationship}' on {from_rid}.")
