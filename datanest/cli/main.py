"""datanest CLI — inspect and edit dataset containers.

Commands:
    datanest ls <file>                List datasets with their dimensions
    datanest show <file> <path>       Print a dataset
    datanest rm <file> <path>...      Remove datasets
    datanest export <file> <path>     Export a dataset to CSV
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
import numpy as np
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from datanest import __version__
from datanest.store import AccessMode, DatasetStore
from datanest.utils.logging_config import setup_logging

console = Console()


def _open_or_exit(file: Path, mode: AccessMode) -> DatasetStore:
    store = DatasetStore()
    if not store.open(file, mode):
        console.print(f"[red]Error opening {file}: {store.last_error}[/red]")
        raise SystemExit(1)
    return store


def _format_bytes(n: int) -> str:
    for unit in ("B", "KiB", "MiB"):
        if n < 1024:
            return f"{n} {unit}" if unit == "B" else f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} GiB"


@click.group()
@click.version_option(version=__version__, prog_name="datanest")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log store operations")
def cli(verbose: bool) -> None:
    """datanest — hierarchical numeric datasets in one HDF5 file."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
def ls(file: Path) -> None:
    """List datasets with their dimensions."""
    store = _open_or_exit(file, AccessMode.READ_ONLY)
    summary = store.describe()
    store.close()

    if summary is None or not summary.datasets:
        console.print(f"[dim]{file}: no datasets[/dim]")
        return

    table = Table(title=str(file))
    table.add_column("Dataset")
    table.add_column("Dims", justify="right")
    table.add_column("Type")
    table.add_column("Size", justify="right")

    for info in summary.datasets:
        table.add_row(
            info.path,
            " x ".join(str(d) for d in info.dims) or "scalar",
            info.dtype,
            _format_bytes(info.nbytes),
        )
    console.print(table)
    console.print(
        f"[dim]{len(summary.datasets)} dataset(s), {_format_bytes(summary.total_bytes)}[/dim]"
    )


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.argument("path")
@click.option("--precision", "-p", default=6, help="Digits after the decimal point")
def show(file: Path, path: str, precision: int) -> None:
    """Print a dataset."""
    store = _open_or_exit(file, AccessMode.READ_ONLY)
    result = store.read_dataset(path)
    error = store.last_error
    store.close()

    if result is None:
        console.print(f"[red]{error}[/red]")
        raise SystemExit(1)

    dims, values = result
    with np.printoptions(precision=precision, threshold=200, suppress=True):
        body = np.array2string(values.reshape(dims))
    console.print(Panel(body, title=f"[bold]{path}[/bold]", subtitle=f"dims={dims}"))


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.argument("paths", nargs=-1, required=True)
def rm(file: Path, paths: tuple[str, ...]) -> None:
    """Remove datasets. Parent groups are kept."""
    store = _open_or_exit(file, AccessMode.READ_WRITE_APPEND)
    missing = 0
    for path in paths:
        if store.remove_dataset(path):
            console.print(f"  Removed: {path}")
        else:
            reason = store.last_error or "no such dataset"
            console.print(f"[yellow]  Skipped {path}: {reason}[/yellow]")
            missing += 1

    if not store.close():
        console.print(f"[red]Error closing {file}: {store.last_error}[/red]")
        raise SystemExit(1)
    if missing:
        raise SystemExit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.argument("path")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Output CSV file")
@click.option("--no-header", is_flag=True, default=False, help="Omit the header row")
def export(file: Path, path: str, output: Path | None, no_header: bool) -> None:
    """Export a dataset to CSV."""
    from datanest.errors import StoreError
    from datanest.export.csv import export_csv

    try:
        created = export_csv(file, path, output=output, include_header=not no_header)
    except StoreError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    console.print(f"  Created: {created}")
    console.print("[green]CSV export complete[/green]")


if __name__ == "__main__":
    cli()
