"""CLI commands for journal-sync using Typer."""

import asyncio
import re
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from journal_sync.config import Settings, get_settings
from journal_sync.core.orchestrator import PostsChangedEvent, SyncOrchestrator, create_orchestrator
from journal_sync.exceptions import StorageFailure, ValidationFailure
from journal_sync.models.credentials import DriveCredentials, FirebaseConfig
from journal_sync.models.post import CodeBlock, ContentBlock, RawBlock, TextBlock, build_post
from journal_sync.remote.base import RemoteStatus
from journal_sync.remote.drive import DriveRemoteAdapter
from journal_sync.remote.firestore import FirestoreRemoteAdapter
from journal_sync.remote.identity import create_identity_provider
from journal_sync.services.transfer import create_post_transfer
from journal_sync.utils.logging import setup_logging


app = typer.Typer(
    name="journal-sync",
    help="Personal journal post store with local and cloud sync",
    no_args_is_help=True,
)
credentials_app = typer.Typer(help="Store remote backend credentials", no_args_is_help=True)
app.add_typer(credentials_app, name="credentials")

console = Console()

STATUS_LABELS = {
    RemoteStatus.not_configured: "[dim]not configured[/dim]",
    RemoteStatus.unavailable: "[red]unavailable[/red]",
    RemoteStatus.signed_out: "[yellow]available, signed out[/yellow]",
    RemoteStatus.signed_in: "[green]available, signed in[/green]",
}

LANGUAGE_PATTERN = re.compile(r"^[A-Za-z0-9_+#.-]+$")


def parse_block_spec(spec: str) -> ContentBlock:
    """Parse ``text:<content>`` or ``code[:<language>]:<content>`` into a block.

    Anything without a ``text:``/``code:`` prefix is a text block, colons
    included. ``\\n`` in code becomes a newline.
    """
    kind, sep, rest = spec.partition(":")
    kind = kind.strip().lower()
    if sep and kind == "text":
        return TextBlock(content=rest)
    if sep and kind == "code":
        language, sep, content = rest.partition(":")
        if not sep or (language and not LANGUAGE_PATTERN.match(language)):
            language, content = "", rest
        return CodeBlock(content=content.replace("\\n", "\n"), language=language or "python")
    return TextBlock(content=spec)


def _bootstrap() -> tuple[Settings, SyncOrchestrator]:
    settings = get_settings()
    settings.ensure_directories()
    setup_logging(settings.log_level.upper(), settings.logs_dir / "journal-sync.log")
    orchestrator = create_orchestrator(settings, create_identity_provider(settings))
    orchestrator.subscribe(_announce_change)
    return settings, orchestrator


def _announce_change(event: PostsChangedEvent) -> None:
    if event.reason == "add":
        console.print(f"[green]Saved post '{event.slug}' ({event.count} posts)[/green]")
    else:
        console.print(f"[green]Imported {event.count} posts[/green]")


async def _connect(settings: Settings, orchestrator: SyncOrchestrator) -> None:
    """Sign in to the remote tier up front when a token is available.

    Skipped after an explicit `sign-out` until `sign-in` is run again.
    """
    remote = orchestrator.remote
    if remote is None or not remote.is_configured() or not settings.has_static_token:
        return
    if remote.is_signed_out():
        return
    if await remote.initialize():
        await remote.sign_in()


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except ValidationFailure as exc:
        console.print(f"[red]Invalid data:[/red] {exc}")
        raise typer.Exit(1)
    except StorageFailure as exc:
        console.print(f"[red]Local storage error:[/red] {exc}")
        raise typer.Exit(1)


# --- Read commands ---


@app.command("list")
def list_posts():
    """List all posts, newest first."""
    settings, orchestrator = _bootstrap()

    async def run():
        await _connect(settings, orchestrator)
        posts = await orchestrator.get_all_posts()

        table = Table(title=f"Posts ({len(posts)})")
        table.add_column("Date", style="cyan")
        table.add_column("Slug")
        table.add_column("Title", style="bold")
        table.add_column("Tags", style="dim")
        for post in posts:
            table.add_row(post.date, post.slug, post.title, ", ".join(post.tags))
        console.print(table)

    _run(run())


@app.command()
def show(slug: str = typer.Argument(..., help="Post slug")):
    """Show a single post."""
    settings, orchestrator = _bootstrap()

    async def run():
        await _connect(settings, orchestrator)
        post = await orchestrator.get_post_by_slug(slug)
        if post is None:
            console.print(f"[red]Post '{slug}' not found[/red]")
            raise typer.Exit(1)

        console.print(f"[bold]{post.title}[/bold]")
        console.print(f"[dim]{post.date}  {', '.join(post.tags)}[/dim]\n")
        for block in post.renderable_blocks():
            if isinstance(block, CodeBlock):
                console.print(Syntax(block.content, block.language, line_numbers=False))
            else:
                console.print(block.content)
            console.print()

        skipped = [str(block.kind or "unknown") for block in post.content if isinstance(block, RawBlock)]
        if skipped:
            console.print(f"[dim]Skipped unsupported blocks: {escape(', '.join(skipped))}[/dim]")

    _run(run())


# --- Write commands ---


@app.command()
def add(
    title: str = typer.Argument(..., help="Post title"),
    block: List[str] = typer.Option(
        ..., "--block", "-b", help="Content block: 'text:...' or 'code:<language>:...'"
    ),
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag (repeatable)"),
    slug: Optional[str] = typer.Option(None, "--slug", help="Override the derived slug"),
):
    """Create a post, or update the post with the same slug."""
    settings, orchestrator = _bootstrap()
    blocks = [parse_block_spec(spec) for spec in block]

    async def run():
        post = build_post(title, blocks, tags=tag or [], slug=slug)
        await _connect(settings, orchestrator)
        await orchestrator.add_post(post)
        await orchestrator.wait_for_sync()

    _run(run())


@app.command("export")
def export_posts(
    output_dir: Path = typer.Option(Path("."), "--output-dir", "-o", help="Directory for the backup file"),
):
    """Export locally stored posts to a JSON backup file."""
    settings, orchestrator = _bootstrap()
    transfer = create_post_transfer(orchestrator, settings.export_file_name)

    async def run():
        path = await transfer.export_posts(output_dir)
        console.print(f"[green]Exported posts to {path}[/green]")

    _run(run())


@app.command("import")
def import_posts(file: Path = typer.Argument(..., help="Backup file to import")):
    """Replace all posts with the contents of a backup file."""
    settings, orchestrator = _bootstrap()
    transfer = create_post_transfer(orchestrator, settings.export_file_name)

    async def run():
        await _connect(settings, orchestrator)
        await transfer.import_posts(file)
        await orchestrator.wait_for_sync()

    _run(run())


@app.command()
def clear(yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation")):
    """Clear all locally stored posts."""
    _, orchestrator = _bootstrap()
    if not yes and not typer.confirm("Clear all local data? This cannot be undone."):
        raise typer.Exit(0)
    try:
        orchestrator.clear_local_data()
    except StorageFailure as exc:
        console.print(f"[red]Failed to clear local data:[/red] {exc}")
        raise typer.Exit(1)
    console.print("[green]Local data cleared[/green]")


# --- Remote commands ---


def _require_remote(orchestrator: SyncOrchestrator):
    if orchestrator.remote is None:
        console.print("[yellow]No remote backend configured. Use 'credentials drive' or 'credentials firebase'.[/yellow]")
        raise typer.Exit(1)
    return orchestrator.remote


@app.command()
def status():
    """Show the remote backend state."""
    settings, orchestrator = _bootstrap()
    if orchestrator.remote is None:
        console.print(f"Remote: {STATUS_LABELS[RemoteStatus.not_configured]}")
        return

    async def run():
        remote = orchestrator.remote
        await _connect(settings, orchestrator)
        if remote.session is None:
            await remote.initialize()
        console.print(f"Remote ({remote.name}): {STATUS_LABELS[remote.status()]}")
        if remote.last_error:
            console.print(f"[dim]{remote.last_error}[/dim]")

    _run(run())


@app.command("sign-in")
def sign_in():
    """Sign in to the remote backend with the configured identity provider."""
    _, orchestrator = _bootstrap()
    remote = _require_remote(orchestrator)

    async def run():
        if not await remote.sign_in():
            console.print(f"[red]Sign in failed:[/red] {remote.last_error}")
            raise typer.Exit(1)
        console.print(f"[green]Signed in to {remote.name}[/green]")

    _run(run())


@app.command("sign-out")
def sign_out():
    """Sign out of the remote backend."""
    settings, orchestrator = _bootstrap()
    remote = _require_remote(orchestrator)

    async def run():
        await _connect(settings, orchestrator)
        if not await remote.sign_out():
            console.print("[yellow]Not signed in[/yellow]")
            return
        console.print(f"[green]Signed out of {remote.name}[/green]")

    _run(run())


@app.command("test-connection")
def test_connection():
    """Re-probe the remote backend with the stored credentials."""
    _, orchestrator = _bootstrap()
    remote = _require_remote(orchestrator)

    async def run():
        if await remote.test_connection():
            console.print(f"[green]Connected to {remote.name}[/green]")
        else:
            console.print(f"[red]Connection failed:[/red] {remote.last_error}")
            raise typer.Exit(1)

    _run(run())


@credentials_app.command("drive")
def drive_credentials(
    api_key: str = typer.Option(..., "--api-key", help="Google API key"),
    client_id: str = typer.Option("", "--client-id", help="Google OAuth client id"),
):
    """Store Google Drive API credentials."""
    settings, orchestrator = _bootstrap()
    adapter = DriveRemoteAdapter(settings, orchestrator.local_store, create_identity_provider(settings))
    if not adapter.save_credentials(DriveCredentials(client_id=client_id, api_key=api_key)):
        console.print("[red]Error saving credentials[/red]")
        raise typer.Exit(1)
    console.print("[green]Drive credentials saved[/green]")


@credentials_app.command("firebase")
def firebase_credentials(
    api_key: str = typer.Option(..., "--api-key", help="Firebase web API key"),
    project_id: str = typer.Option(..., "--project-id", help="Firebase project id"),
    auth_domain: str = typer.Option("", "--auth-domain"),
    storage_bucket: str = typer.Option("", "--storage-bucket"),
    messaging_sender_id: str = typer.Option("", "--messaging-sender-id"),
    app_id: str = typer.Option("", "--app-id"),
):
    """Store Firebase project configuration."""
    settings, orchestrator = _bootstrap()
    adapter = FirestoreRemoteAdapter(settings, orchestrator.local_store, create_identity_provider(settings))
    config = FirebaseConfig(
        api_key=api_key,
        project_id=project_id,
        auth_domain=auth_domain,
        storage_bucket=storage_bucket,
        messaging_sender_id=messaging_sender_id,
        app_id=app_id,
    )
    if not adapter.save_credentials(config):
        console.print("[red]Error saving configuration[/red]")
        raise typer.Exit(1)
    console.print("[green]Firebase configuration saved[/green]")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
