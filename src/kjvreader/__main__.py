"""CLI entry point for KJV Reader."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from kjvreader import __version__
from kjvreader.config import Settings
from kjvreader.services import ReaderServices, build_services
from kjvreader.sources.catalog import CatalogValidationError, UnknownEditionError

console = Console()
err_console = Console(stderr=True)

SECTIONS = {
    "ot": "Old Testament",
    "nt": "New Testament",
    "apocrypha": "Apocrypha",
}


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format="%(levelname)s: %(message)s")


def _fail(message: str) -> None:
    err_console.print(f"[red]Error: {message}[/red]")
    sys.exit(1)


def _services(ctx: click.Context) -> ReaderServices:
    """Build services on first use and close them when the command ends."""
    obj = ctx.ensure_object(dict)
    services = obj.get("services")
    if services is None:
        try:
            services = build_services(obj["settings"], edition=obj.get("edition"))
        except (CatalogValidationError, UnknownEditionError) as e:
            _fail(str(e))
        obj["services"] = services
        ctx.find_root().call_on_close(services.close)
    return services


def _loaded(ctx: click.Context) -> ReaderServices:
    services = _services(ctx)
    services.repository.ensure_loaded()
    return services


def _emit_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.group()
@click.version_option(version=__version__)
@click.option("--edition", "-e", default=None, help="Edition id (e.g. KJV-1611)")
@click.option(
    "--modern/--archaic",
    default=None,
    help="Override the stored modernization setting for this command",
)
@click.option(
    "--data-root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Override data root (local store)",
)
@click.option(
    "--resources",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding edition resource folders",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="warning",
    help="Log level",
)
@click.pass_context
def cli(
    ctx: click.Context,
    edition: str | None,
    modern: bool | None,
    data_root: Path | None,
    resources: Path | None,
    log_level: str,
):
    """KJV Reader - scripture text with archaic English modernization."""
    _configure_logging(log_level)

    settings = Settings()
    if data_root:
        settings.data_root = data_root
    if resources:
        settings.resources_root = resources

    ctx.ensure_object(dict)
    ctx.obj.update(settings=settings, edition=edition, modern=modern)


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def editions(ctx: click.Context, output_json: bool):
    """List supported editions."""
    services = _services(ctx)
    current = services.repository.current_edition

    if output_json:
        _emit_json([e.to_dict() for e in services.catalog.editions.values()])
        return

    table = Table(title="Editions")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Language")
    table.add_column("Modernize", justify="center")

    for edition in services.catalog.editions.values():
        marker = " [green]*[/green]" if edition.id == current.id else ""
        table.add_row(
            f"{edition.id}{marker}",
            edition.display_name,
            edition.language.value,
            "✓" if edition.supports_modernization else "",
        )
    console.print(table)


@cli.command()
@click.option(
    "--section",
    "-s",
    type=click.Choice(list(SECTIONS)),
    default=None,
    help="Restrict to one section",
)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def books(ctx: click.Context, section: str | None, output_json: bool):
    """List books in canonical order."""
    repository = _loaded(ctx).repository

    if section is None:
        groups = {
            key: getter()
            for key, getter in (
                ("ot", repository.get_old_testament_books),
                ("nt", repository.get_new_testament_books),
                ("apocrypha", repository.get_apocrypha_books),
            )
        }
    elif section == "ot":
        groups = {"ot": repository.get_old_testament_books()}
    elif section == "nt":
        groups = {"nt": repository.get_new_testament_books()}
    else:
        groups = {"apocrypha": repository.get_apocrypha_books()}

    if output_json:
        _emit_json(groups)
        return

    for key, names in groups.items():
        if not names:
            continue
        table = Table(title=f"{SECTIONS[key]} ({len(names)})")
        table.add_column("Book")
        table.add_column("Chapters", justify="right")
        for name in names:
            table.add_row(name, str(repository.get_chapter_count(name)))
        console.print(table)


@cli.command()
@click.argument("book")
@click.argument("chapter", type=int)
@click.argument("verse", type=int, required=False)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def read(
    ctx: click.Context, book: str, chapter: int, verse: int | None, output_json: bool
):
    """Read a chapter, or a single verse.

    Example: kjvreader read Genesis 1 3
    """
    services = _loaded(ctx)
    repository = services.repository
    modern = ctx.obj.get("modern")

    if repository.get_book(book) is None:
        _fail(f"Book not found: {book}")

    if verse is not None:
        verses = [verse]
    else:
        count = repository.get_verse_count(book, chapter)
        if count == 0:
            _fail(f"{book} has no chapter {chapter}")
        verses = list(range(1, count + 1))

    lines = [
        {
            "verse": number,
            "text": repository.get_verse(book, chapter, number, modern=modern),
        }
        for number in verses
    ]

    if output_json:
        _emit_json(
            {
                "edition": repository.current_edition.id,
                "book": book,
                "chapter": chapter,
                "verses": lines,
            }
        )
        return

    body = "\n".join(f"[dim]{line['verse']}[/dim] {line['text']}" for line in lines)
    title = f"{book} {chapter}" + (f":{verse}" if verse is not None else "")
    console.print(
        Panel(body, title=title, subtitle=repository.current_edition.display_name)
    )


@cli.command()
@click.argument("query")
@click.option("--limit", "-n", default=None, type=int, help="Maximum results")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search(ctx: click.Context, query: str, limit: int | None, output_json: bool):
    """Find verses containing QUERY (case-insensitive)."""
    services = _loaded(ctx)
    results = services.search.search(
        query,
        limit=limit if limit is not None else services.settings.search_limit,
        modern=ctx.obj.get("modern"),
    )

    if output_json:
        _emit_json([r.to_dict() for r in results])
        return

    if not results:
        console.print(f"[yellow]No verses found for '{query}'[/yellow]")
        return

    table = Table(title=f"'{query}' ({len(results)} results)")
    table.add_column("Reference", style="cyan", no_wrap=True)
    table.add_column("Text")
    for result in results:
        table.add_row(result.reference, result.text)
    console.print(table)


@cli.command()
@click.argument("text", required=False)
@click.pass_context
def modernize(ctx: click.Context, text: str | None):
    """Modernize archaic English TEXT (reads stdin when omitted)."""
    if text is None:
        text = click.get_text_stream("stdin").read()
    click.echo(_services(ctx).normalizer.process_text(text, True))


@cli.command()
@click.pass_context
def reload(ctx: click.Context):
    """Drop the cached library for the current edition and load it again."""
    repository = _services(ctx).repository
    library = repository.reload().result()
    console.print(
        f"[green]✓ Reloaded {repository.current_edition.display_name}: "
        f"{len(library)} books from {library.origin}[/green]"
    )


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def status(ctx: click.Context, output_json: bool):
    """Show load state and book counts per edition."""
    repository = _loaded(ctx).repository
    rows = repository.status()

    if output_json:
        _emit_json(rows)
        return

    table = Table(title="Library status")
    table.add_column("Edition", style="cyan")
    table.add_column("Source")
    table.add_column("Books", justify="right")
    table.add_column("OT", justify="right")
    table.add_column("NT", justify="right")
    table.add_column("Apocrypha", justify="right")
    table.add_column("Verses", justify="right")
    for row in rows:
        name = row["edition"] + (" [green]*[/green]" if row["current"] else "")
        source = row["origin"] or ("loading" if row["loading"] else "[dim]-[/dim]")
        table.add_row(
            name,
            source,
            str(row["total"]),
            str(row["old_testament"]),
            str(row["new_testament"]),
            str(row["apocrypha"]),
            str(row["verses"]),
        )
    console.print(table)


# ============================================================================
# Bookmarks
# ============================================================================


@cli.group()
def bookmarks():
    """Manage bookmarks."""
    pass


@bookmarks.command("list")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def bookmarks_list(ctx: click.Context, output_json: bool):
    """List bookmarks in the order they were added."""
    items = _services(ctx).bookmarks.all()

    if output_json:
        _emit_json([b.to_dict() for b in items])
        return

    if not items:
        console.print("[dim]No bookmarks[/dim]")
        return

    table = Table(title="Bookmarks")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Reference", style="cyan", no_wrap=True)
    table.add_column("Text")
    table.add_column("Added", no_wrap=True)
    for item in items:
        table.add_row(
            item.id[:8],
            item.reference,
            item.text,
            item.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@bookmarks.command("add")
@click.argument("book")
@click.argument("chapter", type=int)
@click.argument("verse", type=int)
@click.pass_context
def bookmarks_add(ctx: click.Context, book: str, chapter: int, verse: int):
    """Bookmark a verse."""
    services = _loaded(ctx)
    repository = services.repository
    if repository.get_raw_verse(book, chapter, verse) is None:
        _fail(f"{book} {chapter}:{verse} is not available")

    text = repository.get_verse(book, chapter, verse, modern=ctx.obj.get("modern"))
    bookmark = services.bookmarks.add(book, chapter, verse, text)
    if bookmark is None:
        console.print(f"[yellow]{book} {chapter}:{verse} is already bookmarked[/yellow]")
    else:
        console.print(
            f"[green]✓ Bookmarked {bookmark.reference}[/green] "
            f"[dim]({bookmark.id[:8]})[/dim]"
        )


@bookmarks.command("remove")
@click.argument("bookmark_ids", nargs=-1, required=True)
@click.pass_context
def bookmarks_remove(ctx: click.Context, bookmark_ids: tuple[str, ...]):
    """Remove bookmarks by id (a unique prefix is enough)."""
    store = _services(ctx).bookmarks
    existing = store.all()

    resolved = []
    for prefix in bookmark_ids:
        matches = [b.id for b in existing if b.id.startswith(prefix)]
        if len(matches) != 1:
            _fail(f"'{prefix}' matches {len(matches)} bookmarks")
        resolved.append(matches[0])

    removed = store.remove_many(resolved)
    console.print(f"[green]✓ Removed {removed} bookmark(s)[/green]")


@bookmarks.command("clear")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def bookmarks_clear(ctx: click.Context, yes: bool):
    """Remove all bookmarks."""
    if not yes:
        click.confirm("Remove all bookmarks?", abort=True)
    removed = _services(ctx).bookmarks.clear()
    console.print(f"[green]✓ Removed {removed} bookmark(s)[/green]")


# ============================================================================
# Settings
# ============================================================================


@cli.group()
def settings():
    """Show or change stored preferences."""
    pass


@settings.command("show")
@click.pass_context
def settings_show(ctx: click.Context):
    """Show stored preferences."""
    services = _services(ctx)
    prefs = services.preferences.to_dict()
    edition = services.catalog.get(prefs["selected_edition"])

    console.print(
        Panel(
            f"Edition: [cyan]{edition.display_name}[/cyan] ({edition.id})\n"
            f"Modern English: {'[green]on[/green]' if prefs['use_modern_english'] else 'off'}"
            + (
                ""
                if edition.supports_modernization
                else " [dim](not applied to this edition)[/dim]"
            )
            + f"\nData root: {services.settings.data_root}",
            title="Settings",
        )
    )


@settings.command("modern")
@click.argument("state", type=click.Choice(["on", "off"]))
@click.pass_context
def settings_modern(ctx: click.Context, state: str):
    """Turn modern English on or off."""
    services = _services(ctx)
    services.repository.use_modern_english = state == "on"
    console.print(f"[green]✓ Modern English {state}[/green]")


@settings.command("edition")
@click.argument("edition_id")
@click.pass_context
def settings_edition(ctx: click.Context, edition_id: str):
    """Select the default edition."""
    services = _services(ctx)
    try:
        edition = services.catalog.get(edition_id)
    except UnknownEditionError as e:
        _fail(str(e))
    services.preferences.selected_edition = edition
    console.print(f"[green]✓ Edition set to {edition.display_name}[/green]")


# ============================================================================
# HTTP API
# ============================================================================


@cli.command()
@click.option("--host", default=None, help="Bind host")
@click.option("--port", default=None, type=int, help="Bind port")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None):
    """Start the HTTP API server."""
    import uvicorn

    from kjvreader.api.main import create_app

    services = _services(ctx)
    host = host or services.settings.api_host
    port = port or services.settings.api_port

    console.print(f"[bold blue]Starting KJV Reader API on http://{host}:{port}[/bold blue]")
    console.print(f"[dim]API docs: http://{host}:{port}/docs[/dim]")
    uvicorn.run(create_app(services), host=host, port=port)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
