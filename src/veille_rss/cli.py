"""CLI interface for Veille RSS using Typer."""

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from . import __version__
from .exceptions import VeilleError
from .main import VeilleApp
from .models import NormalizedItem


app = typer.Typer(
    name="veille-rss",
    help="Angular and Java technology watch over RSS/Atom feeds",
    add_completion=False,
)

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")]
LiveOption = Annotated[bool, typer.Option("--live", help="Fetch the feeds instead of reading the snapshot")]


def _load_app(config_file: Optional[Path], live: bool = False, verbose: bool = False) -> VeilleApp:
    try:
        app_instance = VeilleApp(config_file)
        if verbose:
            app_instance.set_verbose()
        app_instance.load(live=live)
    except (VeilleError, ValueError, OSError) as e:
        typer.echo(f"✗ Error: {e}", err=True)
        raise typer.Exit(1)
    return app_instance


def _format_item(item: NormalizedItem, favorite: bool) -> str:
    star = "★" if favorite else " "
    date = item.published_at[:10] if item.published_at else "unknown date"
    lines = [f"{star} [{item.tech}] {date}  {item.title or '(untitled)'} ({item.source_name})"]
    if item.url:
        lines.append(f"    {item.url}")
    if item.summary:
        lines.append(f"    {item.summary}")
    lines.append(f"    id: {item.id}")
    return "\n".join(lines)


@app.command("list")
def list_items(
    query: Annotated[str, typer.Option("--query", "-q", help="Free-text search")] = "",
    tech: Annotated[str, typer.Option("--tech", "-t", help="ALL, Angular, Java or Other")] = "ALL",
    source: Annotated[str, typer.Option("--source", "-s", help="Source id or ALL")] = "ALL",
    max_age: Annotated[str, typer.Option("--max-age", help="Maximum age in days or ALL")] = "ALL",
    favorites: Annotated[bool, typer.Option("--favorites", "-f", help="Only show favorites")] = False,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Maximum number of items")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print items as JSON")] = False,
    live: LiveOption = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show detailed output")] = False,
    config_file: ConfigOption = None,
) -> None:
    """List items matching the filters, newest first."""
    app_instance = _load_app(config_file, live=live, verbose=verbose)
    session = app_instance.session

    try:
        items = session.update_filters(
            query=query,
            tech=tech,
            source_id=source,
            max_age_days=max_age,
            favorites_only=favorites,
        )
    except ValidationError as e:
        typer.echo(f"✗ Invalid filter: {e.errors()[0]['msg']}", err=True)
        raise typer.Exit(2)

    if limit is not None:
        items = items[:max(limit, 0)]

    if as_json:
        typer.echo(json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False))
        return

    if not items:
        typer.echo("No item matches the filters.")
        return

    for item in items:
        typer.echo(_format_item(item, session.is_favorite(item.id)))
    typer.echo(f"\n{len(items)} item(s) shown")


@app.command()
def stats(
    live: LiveOption = False,
    config_file: ConfigOption = None,
) -> None:
    """Show aggregate counts over the whole collection."""
    app_instance = _load_app(config_file, live=live)
    session = app_instance.session
    counts = session.stats()

    typer.echo(f"Generated: {session.generated_at or 'unknown'}")
    typer.echo(f"Total: {counts.total}")
    typer.echo(f"Angular: {counts.angular}")
    typer.echo(f"Java: {counts.java}")
    typer.echo(f"Other: {counts.other}")
    typer.echo(f"New (7 days): {counts.new_7d}")

    report = session.last_report
    if report and report.errors:
        typer.echo("\nFailed sources:")
        for source_id, message in report.errors.items():
            typer.echo(f"  {source_id}: {message}")


@app.command()
def sources(
    config_file: ConfigOption = None,
) -> None:
    """List the known feed sources."""
    app_instance = _load_app(config_file)
    for source in app_instance.session.sources:
        typer.echo(f"{source.id}\t{source.name}\t{source.default_tech}\t{source.url}")


@app.command()
def fav(
    item_id: Annotated[str, typer.Argument(help="Item id")],
    add: Annotated[bool, typer.Option("--add", help="Mark as favorite")] = False,
    remove: Annotated[bool, typer.Option("--remove", help="Unmark as favorite")] = False,
    config_file: ConfigOption = None,
) -> None:
    """Toggle the favorite state of an item."""
    if add and remove:
        typer.echo("✗ Cannot specify both --add and --remove", err=True)
        raise typer.Exit(1)

    try:
        session = VeilleApp(config_file).session
        if add:
            session.add_favorite(item_id)
        elif remove:
            session.remove_favorite(item_id)
        else:
            session.toggle_favorite(item_id)
    except (VeilleError, OSError) as e:
        typer.echo(f"✗ Error: {e}", err=True)
        raise typer.Exit(1)

    if session.is_favorite(item_id):
        typer.echo(f"★ Favorite: {item_id}")
    else:
        typer.echo(f"☆ Not a favorite: {item_id}")


@app.command()
def config(
    show: Annotated[bool, typer.Option("--show", help="Show current config")] = False,
    example: Annotated[bool, typer.Option("--example", help="Generate example config")] = False,
    config_file: ConfigOption = None,
) -> None:
    """Manage Veille RSS configuration."""
    if example:
        from .config import create_example_config
        typer.echo(create_example_config())
    elif show:
        try:
            from .config import load_config
            import yaml
            config_obj = load_config(config_file)
            typer.echo(yaml.safe_dump(config_obj.model_dump(), default_flow_style=False, indent=2))
        except Exception as e:
            typer.echo(f"✗ Error loading config: {e}", err=True)
            raise typer.Exit(1)
    else:
        typer.echo("Use --show to view config or --example to generate example")


@app.command()
def info(
    config_file: ConfigOption = None,
) -> None:
    """Show version and project information."""
    typer.echo(f"Veille RSS v{__version__}")

    try:
        info_data = VeilleApp(config_file).get_info()
    except Exception as e:
        typer.echo(f"Warning: Could not load application info: {e}")
        return

    typer.echo(f"Data directory: {info_data['data_dir']}")
    typer.echo(f"Feeds: {info_data['feeds_file']}")
    typer.echo(f"Entries: {info_data['entries_file']}")
    typer.echo(f"Favorites: {info_data['favorites']} ({info_data['favorites_file']})")
    typer.echo(f"Log level: {info_data['log_level']}")


if __name__ == "__main__":
    app()
