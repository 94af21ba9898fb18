"""Decorators for dbfs CLI commands."""

import functools
import logging
from typing import Callable, Any

import typer
from rich.console import Console

from .vfs.resolver import IsDirectoryError, NotFoundError

logger = logging.getLogger(__name__)
console = Console(stderr=True)


def handle_vfs_errors(func: Callable) -> Callable:
    """
    Decorator to report path errors from browsing commands.

    - NotFoundError: No such table, column, value or row
    - IsDirectoryError: Path is a directory (or an ambiguous value)
    - ValueError: Invalid database argument or option
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except NotFoundError as e:
            console.print(f"[bold red]Error:[/bold red] No such file or directory: {e}")
            raise typer.Exit(code=1)
        except IsDirectoryError as e:
            console.print(f"[bold red]Error:[/bold red] Is a directory: {e}")
            raise typer.Exit(code=1)
        except ValueError as e:
            console.print(f"[bold red]Error:[/bold red] Invalid input: {e}")
            raise typer.Exit(code=1)

    return wrapper


def handle_mount_errors(mountpoint_arg: str = "mountpoint") -> Callable:
    """
    Decorator that is the last line of defence for a mount command.

    Anything escaping the wrapped function is logged, followed by a hint
    on how to unmount whatever may have been left behind.

    Args:
        mountpoint_arg: Name of the keyword argument holding the mount
            directory, used in the unmount hint
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except typer.Exit:
                raise
            except KeyboardInterrupt:
                console.print("\n[yellow]Interrupted[/yellow]")
                raise typer.Exit(code=130)
            except Exception as e:
                logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
                console.print(f"[bold red]Unexpected error:[/bold red] {e}")
                mountpoint = kwargs.get(mountpoint_arg) or "<mount directory>"
                console.print(
                    f"[yellow]If the filesystem is still mounted, run: "
                    f"fusermount -u {mountpoint}[/yellow]"
                )
                raise typer.Exit(code=1)

        return wrapper
    return decorator
