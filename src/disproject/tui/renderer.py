"""Rich rendering for menus, project lists and file lists."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.utils import short_path

if TYPE_CHECKING:
    from ..projects.models import Project
    from .session import MenuItem, MenuSession

console = Console()

MAX_FILES_SHOWN = 200


def _project_label(project: Project | None) -> str:
    if project is None:
        return "[dim](no project)[/dim]"
    vcs = f" [dim]{project.backend.value}[/dim]" if project.is_vcs() else ""
    where = escape(short_path(project.root))
    return f"[bold]{escape(project.name)}[/bold]{vcs}  [dim]{where}[/dim]"


def render_menu(session: MenuSession) -> None:
    scope = session.scope
    console.print()
    console.print(f"[bold]{session.title}[/bold]  {_project_label(scope.selected_project)}")
    if scope.prefer_other_window:
        console.print("  [dim]output: other window (background)[/dim]")
    render_items(session.items())


def render_items(items: Sequence[MenuItem]) -> None:
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold cyan", justify="right")
    grid.add_column()
    for item in items:
        if item.visible:
            grid.add_row(escape(item.key), escape(item.description))
    console.print(grid)


def render_projects(projects: Sequence[Project], selected: Project | None = None) -> None:
    if not projects:
        console.print("no known projects", style="dim")
        return
    for p in projects:
        marker = "*" if selected is not None and p == selected else " "
        missing = "" if p.root.is_dir() else "  [red]missing[/red]"
        console.print(f" {marker} {_project_label(p)}{missing}")


def render_files(files: Sequence[str], root: Path) -> None:
    if not files:
        console.print(f"no files in {escape(short_path(root))}", style="dim")
        return
    for f in files[:MAX_FILES_SHOWN]:
        console.print(f"  {escape(f)}", highlight=False)
    if len(files) > MAX_FILES_SHOWN:
        console.print(f"  ... {len(files) - MAX_FILES_SHOWN} more", style="dim")
    console.print(f"[dim]{len(files)} file(s)[/dim]")
