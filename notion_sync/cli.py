"""Notion Sync CLI - serve the API and run passes by hand."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="notion-sync",
    help="Multi-tenant Notion database sync",
    no_args_is_help=True,
)
console = Console()


def _output_result(result: dict[str, Any]) -> None:
    console.print_json(json.dumps(result, default=str, indent=2))


@app.command("serve")
def serve(
    port: int = typer.Option(8030, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Launch the sync API (webhooks, triggers, link management)."""
    import uvicorn

    console.print(f"[bold cyan]Starting Notion Sync at http://{host}:{port}[/bold cyan]")
    uvicorn.run("notion_sync.app:app", host=host, port=port, reload=reload)


@app.command("link")
def link(
    tenant_id: str = typer.Argument(..., help="Tenant identifier"),
    database_id: str = typer.Argument(..., help="Source database id"),
    type_tag: str = typer.Option(None, "--type", "-t", help="Explicit logical type tag"),
    period: str = typer.Option(None, "--period", help="Tracking period tag"),
    name: str = typer.Option(None, "--name", "-n", help="Display name"),
):
    """Connect a source database to a tenant and classify it."""
    from .database import async_session_factory
    from .services import link_svc
    from .source.client import NotionClient
    from .sync.errors import SourceUnavailable

    async def _link():
        async with NotionClient.from_settings() as source, async_session_factory() as db:
            created = await link_svc.link_database(
                db, source, tenant_id, database_id,
                display_name=name, type_tag=type_tag, period=period,
            )
            return {
                "id": str(created.id),
                "display_name": created.display_name,
                "logical_type": created.logical_type,
            }

    try:
        result = asyncio.run(_link())
    except (ValueError, SourceUnavailable) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if result["logical_type"]:
        console.print(f"[green]Linked {result['display_name']} as {result['logical_type']}[/green]")
    else:
        console.print(f"[yellow]Linked {result['display_name']} but could not classify it[/yellow]")


@app.command("links")
def links(
    tenant_id: str = typer.Argument(..., help="Tenant identifier"),
):
    """List a tenant's linked databases."""
    from .database import async_session_factory
    from .services import link_svc

    async def _list():
        async with async_session_factory() as db:
            return await link_svc.list_links(db, tenant_id)

    rows = asyncio.run(_list())
    table = Table(title=f"Linked databases ({len(rows)})")
    table.add_column("Database", style="dim", max_width=36)
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Last sync", style="white")
    for row in rows:
        table.add_row(
            row.external_database_id,
            row.display_name or "-",
            row.logical_type or "-",
            row.last_sync_at.isoformat() if row.last_sync_at else "-",
        )
    console.print(table)


@app.command("sync")
def sync(
    tenant_id: str = typer.Argument(..., help="Tenant identifier"),
    logical_type: str = typer.Argument(..., help="Record type, e.g. people or media"),
    no_assets: bool = typer.Option(False, "--no-assets", help="Skip image mirroring"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Run one full reconciliation pass for a tenant."""
    from .assets.mirror import AssetMirror
    from .config import settings
    from .database import async_session_factory
    from .source.client import NotionClient
    from .sync.errors import TenantNotConfigured
    from .sync.sync_engine import run_full_sync

    logging.basicConfig(level=settings.log_level.upper())

    async def _sync():
        mirror = None
        if settings.asset_mirror_enabled and not no_assets:
            mirror = AssetMirror.from_settings()
        try:
            async with NotionClient.from_settings() as source, async_session_factory() as db:
                return await run_full_sync(db, source, tenant_id, logical_type, mirror=mirror)
        finally:
            if mirror is not None:
                await mirror.aclose()

    try:
        result = asyncio.run(_sync())
    except (TenantNotConfigured, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if json_output:
        _output_result(result.model_dump(mode="json"))
    elif result.success:
        console.print(
            f"[green]Synced {result.synced} {logical_type} records[/green] "
            f"(+{result.added} -{result.removed}, {result.assets_mirrored} assets)"
        )
    else:
        console.print(f"[red]Sync failed:[/red] {result.error}")
    if not result.success:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
