from typing import Dict, List

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from structure_organizer.models import Comment, Structure
from structure_organizer.schemas import FolderNode, ImportReport

class TreeCommands:

    def __init__(self, console: Console):
        self.console = console

    def show_structures(self, structures: List[Structure]) -> None:

        if not structures:
            self.console.print("[yellow]No structures found[/yellow]")
            return

        table = Table(title="Structures")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Position", style="green", justify="right")
        table.add_column("Description", style="dim")

        for structure in structures:
            table.add_row(
                str(structure.id),
                structure.name,
                str(structure.position),
                structure.description or ""
            )

        self.console.print(table)

    def show_tree(self, folders: List[FolderNode]) -> None:

        if not folders:
            self.console.print("[yellow]No folders found[/yellow]")
            return

        branches: Dict[int, Tree] = {}
        roots: List[Tree] = []

        # Nodes arrive depth-first, so a parent branch always exists before its children.
        for folder in folders:
            label = f"[blue]{folder.name}[/blue] [dim](#{folder.id})[/dim]"
            parent = branches.get(folder.parent_id) if folder.parent_id is not None else None
            if parent is None:
                branch = Tree(label)
                roots.append(branch)
            else:
                branch = parent.add(label)
            branches[folder.id] = branch

            for file in folder.files:
                branch.add(f"{file.name} [dim]({file.type}, #{file.id})[/dim]")

        for root in roots:
            self.console.print(root)

        file_count = sum(len(folder.files) for folder in folders)
        self.console.print(f"[dim]Folders: {len(folders)} | Files: {file_count}[/dim]")

    def show_comments(self, comments: List[Comment]) -> None:

        if not comments:
            self.console.print("[yellow]No comments found[/yellow]")
            return

        table = Table(title="Comments")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Target", style="blue")
        table.add_column("Content", style="white")
        table.add_column("Position", style="green")
        table.add_column("Updated", style="dim")

        for comment in comments:
            table.add_row(
                str(comment.id),
                f"{comment.target_type}:{comment.target_id}",
                comment.content,
                f"{comment.x:g},{comment.y:g}",
                comment.updated_at.strftime("%Y-%m-%d %H:%M") if comment.updated_at else "-"
            )

        self.console.print(table)

    def show_import_report(self, report: ImportReport) -> None:

        self.console.print(
            f"[green]Imported {report.source}[/green] into structure #{report.structure_id}: "
            f"{report.folders} folders, {report.files} files"
        )

        if report.skipped:
            table = Table(title="Skipped entries")
            table.add_column("Path", style="white")
            table.add_column("Reason", style="red")
            for entry in report.skipped:
                table.add_row(entry.path, entry.reason)
            self.console.print(table)
