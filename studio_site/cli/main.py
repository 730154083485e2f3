# Copyright (c) 2025 Trae AI. All rights reserved.

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree
from ..core.config import Config
from ..core.errors import ConfigError, InvalidPathError, ScanError
from ..core.models import DirectoryNode
from ..services.catalog_service import MediaCatalog
from ..services.index_service import CatalogIndex

app = typer.Typer(help="Studio Site - media catalog and contact relay backend.")
console = Console()


def _load_config(config_path: str) -> Config:
    try:
        return Config.load(config_path)
    except ConfigError as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1)


def _human_size(size: int) -> str:
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"


@app.command("list")
def list_category(category: str = typer.Argument("", help="Category path, e.g. gallery/portraits"),
                  config_path: str = "config.yaml"):
    """
    List the media files in one category.
    """
    config = _load_config(config_path)
    catalog = MediaCatalog(config)

    try:
        entries = catalog.list_by_category(category)
    except InvalidPathError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    except ScanError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Media in '{category or '/'}'")
    table.add_column("Filename", style="magenta")
    table.add_column("Type", style="green")
    table.add_column("Size", style="cyan", justify="right")
    table.add_column("URL", style="yellow")

    for entry in entries:
        table.add_row(entry.filename, entry.kind.value, _human_size(entry.size_bytes), entry.url)

    console.print(table)
    console.print(f"\nFound [bold]{len(entries)}[/bold] files.")


def _add_branch(branch: Tree, node: DirectoryNode):
    for child in node.children:
        if child.type == "dir":
            _add_branch(branch.add(f"[bold blue]{child.name}/[/bold blue]"), child)
        else:
            branch.add(f"{child.name} [dim]{child.url}[/dim]")


@app.command("tree")
def show_tree(config_path: str = "config.yaml"):
    """
    Print the whole media tree.
    """
    config = _load_config(config_path)
    catalog = MediaCatalog(config)
    try:
        root = catalog.get_tree()
    except ScanError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    tree = Tree(f"[bold]{config.media_root}[/bold]")
    _add_branch(tree, root)
    console.print(tree)


@app.command("stats")
def show_stats(config_path: str = "config.yaml"):
    """
    Rescan and print snapshot statistics.
    """
    config = _load_config(config_path)
    try:
        stats = CatalogIndex(config).stats()
    except ScanError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Media Catalog Statistics", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="bold")
    table.add_row("Categories", str(stats.total_categories))
    table.add_row("Images", str(stats.total_images))
    table.add_row("Videos", str(stats.total_videos))
    table.add_row("Total files", str(stats.total_files))
    table.add_row("Total size", _human_size(stats.total_size))
    table.add_row("Last updated", stats.last_updated.isoformat() if stats.last_updated else "-")
    console.print(table)


@app.command("refresh")
def refresh_snapshot(config_path: str = "config.yaml"):
    """
    Rebuild the snapshot file from the media directory.
    """
    config = _load_config(config_path)
    try:
        snapshot = CatalogIndex(config).refresh()
    except ScanError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(
        f"[green]Snapshot written to {config.snapshot_path}:[/green] "
        f"{snapshot.total_files} files in {len(snapshot.images)} categories."
    )


@app.command("init")
def init_structure(config_path: str = "config.yaml"):
    """
    Create the default category directories under the media root.
    """
    config = _load_config(config_path)
    created = MediaCatalog(config).ensure_default_structure()
    for path in created:
        console.print(f"  [green]+[/green] {path}")
    console.print(f"Created [bold]{len(created)}[/bold] directories.")


if __name__ == "__main__":
    app()
