import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.traceback import install

from .config import DBFSConfig, get_config_path, load_config, save_config
from .db.session import mount_name, resolve_database
from .decorators import handle_mount_errors, handle_vfs_errors
from .vfs import DatabaseVFS
from .vfs.resolver import PathResolver

# Initialize Rich Traceback for better error messages
install(show_locals=False)

# Initialize Rich Console
console = Console()

# Configure logging to use Rich's RichHandler
logging.basicConfig(
    level=logging.WARNING,  # INFO with -v, DEBUG with -vv
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True)]
)
logger = logging.getLogger(__name__)

VERBOSITY_LEVELS = {0: logging.WARNING, 1: logging.INFO}

app = typer.Typer(help="Browse and mount relational databases as read-only filesystems")

# Global options, set by the callback
state = {"verbose": 0}


def set_verbosity(verbose: int) -> None:
    """Apply a verbosity count to the root logger and the dbfs loggers."""
    level = VERBOSITY_LEVELS.get(verbose, logging.DEBUG)
    logging.getLogger().setLevel(level)
    logging.getLogger("dbfs").setLevel(level)
    state["verbose"] = verbose


@app.callback()
def main(
    verbose: int = typer.Option(0, "--verbose", "-v", count=True,
                                help="Increase verbosity (-v info, -vv debug and SQL)"),
):
    """
    dbfs - browse a relational database as a read-only filesystem.

    Tables are directories, columns are subdirectories, distinct values
    are entries below them, and rows are JSON files.
    """
    set_verbosity(max(verbose, load_config().verbose))


def open_vfs(database: str, config: DBFSConfig) -> DatabaseVFS:
    return DatabaseVFS.open(
        database,
        backend=config.backend,
        marker=config.marker,
        max_bytes=config.max_bytes,
        echo=state["verbose"] >= 2,
    )


def warm_cache(vfs: DatabaseVFS, path: str) -> None:
    """List the value's column so a content-addressed name can be decoded.

    Hashed names are only known to the process that listed them; each
    CLI invocation is a fresh process.
    """
    parts = PathResolver().split(path)
    if len(parts) >= 3 and parts[2].startswith(vfs.codec.marker):
        vfs.directory("/" + "/".join(parts[:2]))


@app.command()
def about():
    """Display information about dbfs."""
    console.print("[bold cyan]dbfs - relational databases as read-only filesystems[/bold cyan]")
    console.print("")
    console.print("[bold]Path layout:[/bold]")
    console.print("  /                                  tables")
    console.print("  /<table>                           columns")
    console.print("  /<table>/<column>                  distinct values")
    console.print("  /<table>/<column>/<value>[#field]  the matching row, or indices if several")
    console.print("  /<table>/<column>/<value>/<n>      the n-th matching row")
    console.print("")
    console.print("[bold]Backends:[/bold] sqlite (file path or sqlite://), mysql://, postgresql://")
    console.print("")
    console.print("[bold]Commands:[/bold]")
    console.print("  dbfs mount <database>        Mount on ./<name> (or --mount-dir)")
    console.print("  dbfs ls <database> [path]    List a directory")
    console.print("  dbfs cat <database> <path>   Print a row or field")
    console.print("  dbfs stat <database> <path>  Show kind and size")


@app.command()
def mount(
    database: str = typer.Argument(..., help="Database URL or SQLite file"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b",
                                          help="mysql, postgresql or sqlite (default: from URL)"),
    mount_dir: Optional[Path] = typer.Option(None, "--mount-dir", "-m",
                                             help="Mount directory (default: ./<database name>)"),
    allow_other: Optional[bool] = typer.Option(None, "--allow-other/--no-allow-other",
                                               help="Allow other users to access the mount"),
    marker: Optional[str] = typer.Option(None, "--marker",
                                         help="Prefix character of hashed names"),
    max_bytes: Optional[int] = typer.Option(None, "--max-bytes",
                                            help="Bytes of a hashed value kept for lookup"),
    foreground: bool = typer.Option(False, "--foreground", "-f",
                                    help="Stay in the foreground"),
):
    """
    Mount a database as a read-only filesystem.

    The mount directory is created if it does not exist. Unless
    --foreground is given, the process detaches into the background.
    """
    config = load_config().override(
        backend=backend,
        mount_dir=str(mount_dir) if mount_dir else None,
        allow_other=allow_other,
        marker=marker,
        max_bytes=max_bytes,
    )
    try:
        config.validate()
        url, _ = resolve_database(database, config.backend)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    mountpoint = Path(config.mount_dir) if config.mount_dir else Path.cwd() / mount_name(url)
    mountpoint.mkdir(parents=True, exist_ok=True)

    console.print(f"Mounting [cyan]{database}[/cyan] on [green]{mountpoint}[/green]")
    serve(database, config, mountpoint=str(mountpoint), foreground=foreground)


@handle_mount_errors("mountpoint")
def serve(database: str, config: DBFSConfig, mountpoint: str, foreground: bool) -> None:
    from .fuse_ops import mount as fuse_mount

    vfs = open_vfs(database, config)
    fuse_mount(
        vfs,
        mountpoint,
        foreground=foreground,
        allow_other=config.allow_other,
        trace=state["verbose"] >= 2,
    )


@app.command(name="ls")
@handle_vfs_errors
def ls(
    database: str = typer.Argument(..., help="Database URL or SQLite file"),
    path: str = typer.Argument("/", help="Directory to list"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="Backend override"),
    long: bool = typer.Option(False, "--long", "-l", help="Show kind and size"),
):
    """List a directory without mounting."""
    config = load_config().override(backend=backend).validate()
    vfs = open_vfs(database, config)
    try:
        warm_cache(vfs, path)
        entries = vfs.directory(path)
        for name in entries:
            if not long:
                typer.echo(name)
                continue
            attributes = vfs.attributes(path.rstrip("/") + "/" + name)
            kind = "d" if attributes.is_directory else "-"
            typer.echo(f"{kind} {attributes.size:>10} {name}")
    finally:
        vfs.close()


@app.command()
@handle_vfs_errors
def cat(
    database: str = typer.Argument(..., help="Database URL or SQLite file"),
    path: str = typer.Argument(..., help="Row or field to print"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="Backend override"),
):
    """Print the content of a row or field without mounting."""
    config = load_config().override(backend=backend).validate()
    vfs = open_vfs(database, config)
    try:
        warm_cache(vfs, path)
        size = vfs.attributes(path).size
        typer.echo(vfs.read(path, size, 0), nl=False)
    finally:
        vfs.close()


@app.command()
@handle_vfs_errors
def stat(
    database: str = typer.Argument(..., help="Database URL or SQLite file"),
    path: str = typer.Argument(..., help="Path to describe"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="Backend override"),
):
    """Show whether a path is a directory or file, and its size."""
    config = load_config().override(backend=backend).validate()
    vfs = open_vfs(database, config)
    try:
        warm_cache(vfs, path)
        attributes = vfs.attributes(path)
        typer.echo(f"{path}: {attributes.node_type.value}, {attributes.size} bytes")
    finally:
        vfs.close()


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    backend: Optional[str] = typer.Option(None, "--backend", help="Default backend"),
    marker: Optional[str] = typer.Option(None, "--marker", help="Default hashed-name prefix"),
    max_bytes: Optional[int] = typer.Option(None, "--max-bytes", help="Default cached bytes"),
    allow_other: Optional[bool] = typer.Option(None, "--allow-other/--no-allow-other",
                                               help="Default for --allow-other"),
    verbose: Optional[int] = typer.Option(None, "--verbosity", help="Default verbosity"),
):
    """
    View or change default options.

    Examples:
        dbfs config --show
        dbfs config --marker _ --max-bytes 65536
    """
    current = load_config()
    updated = current.override(
        backend=backend, marker=marker, max_bytes=max_bytes,
        allow_other=allow_other, verbose=verbose,
    )

    if updated != current:
        try:
            updated.validate()
        except ValueError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(code=1)
        path = save_config(updated)
        console.print(f"[green]Configuration saved to {path}[/green]")

    if show or updated == current:
        table = Table(title=f"Configuration ({get_config_path()})")
        table.add_column("Option", style="cyan")
        table.add_column("Value")
        for key, value in updated.to_dict().items():
            table.add_row(key, str(value))
        console.print(table)


if __name__ == "__main__":
    app()
