"""iCloud Drive CLI - Main commands."""
import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

app = typer.Typer(
    name="icdrive",
    help="iCloud Drive CLI",
    add_completion=False
)
console = Console()

# Connection settings chosen by the global options
options = {"config": None}


# Session path: ~/.config/icdrive/session.json
def get_session_path() -> Path:
    config_dir = Path.home() / ".config" / "icdrive"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / "session.json"


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def prompt_code() -> str:
    return typer.prompt("Enter 2FA code")


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    proxy: Optional[str] = typer.Option(None, "--proxy", help="HTTP(S) proxy URL"),
    insecure: bool = typer.Option(False, "--insecure", help="Skip SSL verification"),
):
    """iCloud Drive CLI."""
    from icdrive import APIConfig, setup_logging

    if verbose:
        logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s %(message)s")
        setup_logging(logging.DEBUG)

    if proxy and insecure:
        options["config"] = APIConfig.with_proxy(proxy, ssl=APIConfig.insecure().ssl)
    elif proxy:
        options["config"] = APIConfig.with_proxy(proxy)
    elif insecure:
        options["config"] = APIConfig.insecure()
    else:
        options["config"] = None


async def _authenticated_drive(client):
    """Authenticate the stored session and return its drive service."""
    from icdrive import AuthenticationState, IcloudError

    try:
        state = await client.authenticate()
    except IcloudError as e:
        console.print(f"[red]Not logged in ({escape(str(e))}). Run 'icdrive login' first.[/red]")
        raise typer.Exit(1)

    if state is not AuthenticationState.AUTHENTICATED:
        console.print(f"[red]Session is {state}. Run 'icdrive login' again.[/red]")
        raise typer.Exit(1)

    drive = await client.drive()
    if drive is None:
        console.print("[red]iCloud Drive is not available for this account.[/red]")
        raise typer.Exit(1)
    return drive


def _print_listing(folder, long: bool) -> None:
    if long:
        table = Table(title=escape(folder.name))
        table.add_column("Type", style="cyan")
        table.add_column("Size", justify="right")
        table.add_column("Modified")
        table.add_column("Name")
        table.add_column("ID", style="dim")

        for child in folder:
            if child.is_folder:
                table.add_row("D", "-", "-", escape(child.name), child.id)
            else:
                table.add_row(
                    "F",
                    f"{child.size:,}",
                    child.date_modified.strftime("%Y-%m-%d %H:%M"),
                    escape(child.name),
                    child.id
                )

        console.print(table)
    else:
        for child in folder:
            if child.is_folder:
                console.print(f"[blue]{escape(child.name)}/[/blue]")
            else:
                console.print(escape(child.name))


@app.command()
def login(
    username: str = typer.Option(None, "--username", "-u", help="Apple ID"),
    password: str = typer.Option(None, "--password", "-p", help="Apple ID password"),
):
    """Login to iCloud and save session."""
    from icdrive import ICloudClient, IcloudError

    def ask_credentials():
        user = username or typer.prompt("Enter username")
        secret = password or typer.prompt("Enter password", hide_input=True)
        return user, secret

    async def do_login():
        session_path = get_session_path()

        async with ICloudClient(session_path, config=options["config"]) as client:
            try:
                auth_state = await client.start(
                    credentials=ask_credentials,
                    code_provider=prompt_code
                )
            except IcloudError as e:
                console.print(f"[red]Login failed: {escape(str(e))}[/red]")
                raise typer.Exit(1)

            console.print(f"[green]{auth_state}[/green]")
            console.print(f"Session saved to: {session_path}")

    run_async(do_login())


@app.command()
def logout():
    """Logout and delete session."""
    session_file = get_session_path()
    if session_file.exists():
        session_file.unlink()
        console.print("[green]Logged out successfully[/green]")
    else:
        console.print("[yellow]No active session[/yellow]")


@app.command()
def whoami():
    """Show the stored session."""
    from icdrive import DecodingError, JSONFileSession

    session_file = get_session_path()
    if not session_file.exists():
        console.print("[red]Not logged in. Run 'icdrive login' first.[/red]")
        raise typer.Exit(1)

    try:
        data = JSONFileSession(session_file).load()
    except DecodingError:
        console.print("[red]Session corrupted. Run 'icdrive login' again.[/red]")
        raise typer.Exit(1)

    console.print(f"Account country: {data.account_country or '-'}")
    console.print(f"Trusted device: {'yes' if data.trust_token else 'no'}")
    console.print(f"Cookies: {len(data.cookies)}")
    for name, info in sorted(data.webservices.items()):
        console.print(f"Service {name}: {info.url}")
    console.print(f"Session: {session_file}")


@app.command()
def ls(
    folder_id: Optional[str] = typer.Argument(None, help="drivewsid of the folder (default: root)"),
    long: bool = typer.Option(False, "-l", "--long", help="Long format with details"),
):
    """List files and folders."""
    from icdrive import Folder, ICloudClient, IcloudError

    async def list_files():
        async with ICloudClient(get_session_path(), config=options["config"]) as client:
            drive = await _authenticated_drive(client)
            try:
                node = await drive.get_node(folder_id) if folder_id else await drive.root()
            except IcloudError as e:
                console.print(f"[red]Listing failed: {escape(str(e))}[/red]")
                raise typer.Exit(1)

            if not isinstance(node, Folder):
                console.print(escape(str(node)))
                return

            _print_listing(node, long)

    run_async(list_files())


@app.command()
def tree():
    """Show the root folder and the contents of each top-level folder."""
    from icdrive import Folder, ICloudClient, IcloudError

    async def show_tree():
        async with ICloudClient(get_session_path(), config=options["config"]) as client:
            drive = await _authenticated_drive(client)
            try:
                root = await drive.root()

                for item in root:
                    node = await drive.get_node(item.id)
                    console.print(escape(str(node)))
                    if isinstance(node, Folder):
                        for child in node:
                            console.print(escape(f"  {child}"))
            except IcloudError as e:
                console.print(f"[red]Tree failed: {escape(str(e))}[/red]")
                raise typer.Exit(1)

    run_async(show_tree())


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
