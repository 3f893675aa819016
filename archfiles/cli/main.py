"""archfiles CLI - Main commands."""
import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

from archfiles import APIConfig, ArchFilesError, AuthenticationError, FileClient
from archfiles.core.session import SQLiteSession

app = typer.Typer(
    name="archfiles",
    help="Arch file server CLI",
    add_completion=False
)
console = Console()

state = {"url": None}


# Session path: ~/.config/archfiles/session.session
def get_session_path() -> Path:
    config_dir = Path.home() / ".config" / "archfiles"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / "session"


def make_client() -> FileClient:
    """Client bound to the stored session and the selected server."""
    overrides = {"base_url": state["url"]} if state["url"] else {}
    config = APIConfig.from_env(**overrides)
    return FileClient(str(get_session_path()), config=config)


def run_async(coro):
    """Run async function, turning client errors into a failed exit."""
    try:
        return asyncio.run(coro)
    except ArchFilesError as e:
        console.print(f"[red]{e.kind.value}: {escape(e.message)}[/red]")
        raise typer.Exit(1)


def format_size(size: Optional[int]) -> str:
    if size is None:
        return "-"
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:,} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024


@app.callback()
def main_options(
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Server URL (default: $ARCHFILES_URL)"),
):
    """Browse and download files from an Arch file server."""
    state["url"] = url


async def _resume(client: FileClient) -> FileClient:
    if not client.get_session():
        console.print("[red]Not logged in. Run 'archfiles login' first.[/red]")
        raise typer.Exit(1)
    return await client.start()


@app.command()
def login(
    username: str = typer.Option(None, "--username", "-n", help="Account name"),
    password: str = typer.Option(None, "--password", "-p", help="Account password"),
):
    """Login and save session."""
    if not username:
        username = typer.prompt("Username")
    if not password:
        password = typer.prompt("Password", hide_input=True)

    async def do_login():
        client = make_client()
        try:
            session = await client.login(username, password)
            console.print(f"[green]Logged in as {session.username}[/green]")
            console.print(f"Session saved to: {client.session_file}")
        finally:
            await client.close()

    run_async(do_login())


@app.command()
def logout():
    """Logout and delete session."""
    async def do_logout():
        client = make_client()
        try:
            if not client.get_session():
                console.print("[yellow]No active session[/yellow]")
                return
            try:
                await client.start()
            except AuthenticationError as e:
                console.print(f"[yellow]Session no longer valid ({e.message}), removing it[/yellow]")
            await client.logout()
            console.print("[green]Logged out successfully[/green]")
        finally:
            await client.close()

    run_async(do_logout())


@app.command()
def whoami():
    """Show current logged in user."""
    session_file = get_session_path().with_suffix(".session")
    if not session_file.exists():
        console.print("[red]Not logged in. Run 'archfiles login' first.[/red]")
        raise typer.Exit(1)

    with SQLiteSession(str(get_session_path())) as storage:
        data = storage.load()

    if not data:
        console.print("[red]Not logged in. Run 'archfiles login' first.[/red]")
        raise typer.Exit(1)

    console.print(f"User: {data.username}")
    console.print(f"Server: {data.server_url}")
    if data.expires_at:
        status = "[red]expired[/red]" if data.is_expired() else data.expires_at.isoformat(timespec="seconds")
        console.print(f"Expires: {status}")
    console.print(f"Session: {session_file}")


@app.command()
def ls(
    path: str = typer.Argument("/", help="Path to list"),
    long: bool = typer.Option(False, "-l", "--long", help="Long format with details"),
):
    """List files and folders."""
    async def list_files():
        client = make_client()
        try:
            await _resume(client)
            listing = await client.list_directory(path)

            if long:
                table = Table()
                table.add_column("Type", style="cyan")
                table.add_column("Size", justify="right")
                table.add_column("Modified")
                table.add_column("Name")

                for entry in listing:
                    table.add_row(
                        "D" if entry.is_dir else "F",
                        "-" if entry.is_dir else format_size(entry.size),
                        entry.modified.strftime("%Y-%m-%d %H:%M") if entry.modified else "",
                        entry.name,
                    )

                console.print(table)
            else:
                for entry in listing:
                    if entry.is_dir:
                        console.print(f"[blue]{entry.name}/[/blue]")
                    else:
                        console.print(entry.name)
        finally:
            await client.close()

    run_async(list_files())


@app.command()
def info(
    path: str = typer.Argument(..., help="File or folder path"),
):
    """Show file information."""
    async def show_info():
        client = make_client()
        try:
            await _resume(client)
            file_info = await client.file_info(path)

            console.print(f"[bold]Name:[/bold] {file_info.name}")
            console.print(f"[bold]Path:[/bold] {file_info.path}")
            console.print(f"[bold]Type:[/bold] {'Folder' if file_info.is_dir else 'File'}")
            console.print(f"[bold]Size:[/bold] {file_info.size:,} bytes")
            if file_info.modified:
                console.print(f"[bold]Modified:[/bold] {file_info.modified.isoformat()}")
            if file_info.created:
                console.print(f"[bold]Created:[/bold] {file_info.created.isoformat()}")
        finally:
            await client.close()

    run_async(show_info())


@app.command()
def get(
    remote_path: str = typer.Argument(..., help="Remote file path"),
    output: Path = typer.Option(None, "--output", "-o", help="Output file or directory"),
):
    """Download a file."""
    async def do_download():
        client = make_client()
        try:
            await _resume(client)
            name = remote_path.rstrip("/").rsplit("/", 1)[-1]

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console
            ) as progress:
                task = progress.add_task(f"Downloading {name}", total=None)

                def on_progress(downloaded, total):
                    progress.update(task, completed=downloaded, total=total or None)

                target = await client.download(remote_path, output or Path("."), progress_callback=on_progress)

            console.print(f"[green]Downloaded:[/green] {target}")
        finally:
            await client.close()

    run_async(do_download())


@app.command()
def cat(
    remote_path: str = typer.Argument(..., help="Remote file path"),
):
    """Print a file to stdout."""
    async def do_cat():
        client = make_client()
        try:
            await _resume(client)
            result = await client.fetch(remote_path)
            typer.echo(result.data.decode("utf-8", errors="replace"), nl=False)
        finally:
            await client.close()

    run_async(do_cat())


@app.command()
def health():
    """Check that the server is up."""
    async def do_health():
        client = make_client()
        try:
            status = await client.health()
            console.print(f"[green]{status.get('status', 'unknown')}[/green] {status.get('timestamp', '')}")
        finally:
            await client.close()

    run_async(do_health())


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
