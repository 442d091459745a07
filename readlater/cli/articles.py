"""Article commands: save, read, list, archive and search."""

from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown

from ..errors import ReadLaterError
from .common import build_service, load_settings, open_store, print_summaries

console = Console()


def _fail(e: ReadLaterError) -> None:
    console.print(f"[red]❌ {e.kind}: {e}[/red]")
    raise typer.Exit(1)


def add_command(
    url: str = typer.Argument(..., help="URL of the article to save"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Title to use if the page has none"),
) -> None:
    """Save an article, fetching it unless it is already stored."""
    config = load_settings()
    with open_store(config) as store:
        service = build_service(store, config.config)
        try:
            article = service.resolve(url, title)
        except ReadLaterError as e:
            _fail(e)
    console.print(f"[green]✅ Saved:[/green] {article.title}")
    console.print(article.url, markup=False)


def show_command(
    url: str = typer.Argument(..., help="URL of the article to read"),
) -> None:
    """Print a saved article and mark it read, saving it first if needed."""
    config = load_settings()
    with open_store(config) as store:
        service = build_service(store, config.config)
        try:
            article = service.read(url)
        except ReadLaterError as e:
            _fail(e)
    console.print(Markdown(article.contents or f"# {article.title}"))


def recent_command(
    count: int = typer.Option(5, "--count", "-n", help="Number of articles", min=1),
) -> None:
    """List unarchived articles, most recently read first."""
    config = load_settings()
    with open_store(config) as store:
        print_summaries("Recent Articles", store.list_recent(count))


def feed_command(
    count: int = typer.Option(5, "--count", "-n", help="Number of articles", min=1),
) -> None:
    """List all articles, newest saves first."""
    config = load_settings()
    with open_store(config) as store:
        print_summaries("All Articles", store.list_archive_feed(count))


def archive_command(
    url: str = typer.Argument(..., help="URL of the article"),
    undo: bool = typer.Option(False, "--undo", help="Unarchive instead"),
) -> None:
    """Archive (or unarchive) an article."""
    config = load_settings()
    with open_store(config) as store:
        try:
            store.set_archived(url, not undo)
        except ReadLaterError as e:
            _fail(e)
    console.print(f"[green]✅ {'Unarchived' if undo else 'Archived'}:[/green] {url}")


def mark_read_command(
    url: str = typer.Argument(..., help="URL of the article"),
) -> None:
    """Mark an article as read."""
    config = load_settings()
    with open_store(config) as store:
        try:
            store.mark_read(url)
        except ReadLaterError as e:
            _fail(e)
    console.print(f"[green]✅ Marked read:[/green] {url}")


def search_command(
    query: str = typer.Argument(..., help="Words to search for; quote a phrase to match it exactly"),
) -> None:
    """Search saved articles by title and contents."""
    config = load_settings()
    with open_store(config) as store:
        try:
            results = store.search(query)
        except ReadLaterError as e:
            _fail(e)
    print_summaries(f"Search: {query}", results)
