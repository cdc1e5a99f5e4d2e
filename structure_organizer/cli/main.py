import asyncio
from typing import Awaitable, Callable, Optional

import click
from rich.console import Console
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from structure_organizer.config import Settings, get_settings
from structure_organizer.database import DatabaseManager
from structure_organizer.errors import Error
from structure_organizer.logging import configure_logging
from structure_organizer.models import TargetType
from structure_organizer.services import (
    ChangeNotifier, CommentService, FileService, FolderService,
    ImportService, StructureService
)
from structure_organizer.cli.commands import TreeCommands

Action = Callable[[AsyncSession], Awaitable[None]]

class OrganizerCLI:

    def __init__(self, settings: Settings):
        self.console = Console()
        self.settings = settings

        self.db_manager = DatabaseManager(settings)
        self.notifier = ChangeNotifier(settings.notifier_queue_size)
        self.structure_service = StructureService(self.notifier)
        self.folder_service = FolderService(self.notifier)
        self.file_service = FileService(self.notifier, settings.default_file_color)
        self.comment_service = CommentService(self.notifier, settings.default_comment_color)
        self.import_service = ImportService(self.structure_service, self.folder_service, self.file_service)

        self.commands = TreeCommands(self.console)

    async def run(self, action: Action) -> int:

        try:
            await self.db_manager.initialize()
            async with self.db_manager.session() as session:
                await action(session)
            return 0

        except Error as e:
            self.console.print(f"[red]Error ({e.code.value}): {e}[/red]")
            return 1
        except Exception as e:
            self.console.print(f"[bold red]Application error: {e}[/bold red]")
            logger.error(f"Application error: {e}")
            return 2

        finally:
            await self.db_manager.close()

def run_action(ctx: click.Context, action: Action) -> None:

    cli: OrganizerCLI = ctx.obj
    exit_code = asyncio.run(cli.run(action))
    if exit_code:
        ctx.exit(exit_code)

@click.group()
@click.option("--database-url", default=None, help="Override the configured database URL.")
@click.option("--log-level", default=None, help="Override the configured log level.")
@click.pass_context
def main(ctx: click.Context, database_url: Optional[str], log_level: Optional[str]) -> None:
    """Organize folders and files into named structures."""

    settings = get_settings()
    overrides = {}
    if database_url:
        overrides["database_url"] = database_url
    if log_level:
        overrides["log_level"] = log_level.upper()
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings.log_level)
    ctx.obj = OrganizerCLI(settings)

@main.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the database tables."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        cli.console.print("[green]Database ready[/green]")

    run_action(ctx, action)

@main.command("import")
@click.argument("source", type=click.Path(file_okay=False))
@click.option("--no-overwrite", is_flag=True, help="Merge into an existing structure instead of rebuilding it.")
@click.pass_context
def import_directory(ctx: click.Context, source: str, no_overwrite: bool) -> None:
    """Import a directory tree as a structure."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        with cli.console.status("[bold green]Importing...[/bold green]"):
            report = await cli.import_service.import_directory(
                session, source, allow_overwrite=not no_overwrite
            )
        cli.commands.show_import_report(report)

    run_action(ctx, action)

@main.command("structures")
@click.pass_context
def list_structures(ctx: click.Context) -> None:
    """List structures."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        cli.commands.show_structures(await cli.structure_service.list_structures(session))

    run_action(ctx, action)

@main.command("create-structure")
@click.argument("name")
@click.option("--description", default=None)
@click.option("--position", type=int, default=None)
@click.pass_context
def create_structure(ctx: click.Context, name: str, description: Optional[str], position: Optional[int]) -> None:
    """Create a structure, or show the id of the existing one."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        structure_id = await cli.structure_service.create_structure(session, name, description, position)
        cli.console.print(f"[green]Structure '{name}'[/green] (ID: {structure_id})")

    run_action(ctx, action)

@main.command("rm-structure")
@click.argument("structure_id", type=int)
@click.pass_context
def delete_structure(ctx: click.Context, structure_id: int) -> None:
    """Delete a structure with all of its folders and files."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        await cli.structure_service.delete_structure(session, structure_id)
        cli.console.print(f"[green]Deleted structure {structure_id}[/green]")

    run_action(ctx, action)

@main.command("tree")
@click.argument("structure_id", type=int, required=False)
@click.pass_context
def show_tree(ctx: click.Context, structure_id: Optional[int]) -> None:
    """Show the folder tree of one or all structures."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        cli.commands.show_tree(await cli.folder_service.list_folders(session, structure_id))

    run_action(ctx, action)

@main.command("mkdir")
@click.argument("name")
@click.option("--structure", "structure_id", type=int, required=True)
@click.option("--parent", "parent_id", type=int, default=None)
@click.pass_context
def create_folder(ctx: click.Context, name: str, structure_id: int, parent_id: Optional[int]) -> None:
    """Create a folder."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        folder_id = await cli.folder_service.create_folder(session, name, structure_id, parent_id)
        cli.console.print(f"[green]Folder '{name}'[/green] (ID: {folder_id})")

    run_action(ctx, action)

@main.command("rename-folder")
@click.argument("folder_id", type=int)
@click.argument("name")
@click.pass_context
def rename_folder(ctx: click.Context, folder_id: int, name: str) -> None:
    """Rename a folder."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        folder = await cli.folder_service.rename_folder(session, folder_id, name)
        cli.console.print(f"[green]Folder renamed:[/green] {folder.path}")

    run_action(ctx, action)

@main.command("move-folder")
@click.argument("folder_id", type=int)
@click.option("--parent", "parent_id", type=int, default=None, help="New parent; omit to make it a root folder.")
@click.pass_context
def move_folder(ctx: click.Context, folder_id: int, parent_id: Optional[int]) -> None:
    """Move a folder under another folder."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        folder = await cli.folder_service.move_folder(session, folder_id, parent_id)
        cli.console.print(f"[green]Folder moved:[/green] {folder.path}")

    run_action(ctx, action)

@main.command("rm-folder")
@click.argument("folder_id", type=int)
@click.pass_context
def delete_folder(ctx: click.Context, folder_id: int) -> None:
    """Delete a folder with everything below it."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        await cli.folder_service.delete_folder(session, folder_id)
        cli.console.print(f"[green]Deleted folder {folder_id}[/green]")

    run_action(ctx, action)

@main.command("touch")
@click.argument("name")
@click.option("--folder", "folder_id", type=int, required=True)
@click.option("--color", default=None)
@click.pass_context
def create_file(ctx: click.Context, name: str, folder_id: int, color: Optional[str]) -> None:
    """Create a file in a folder."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        folder = await cli.folder_service.get_folder(session, folder_id)
        file_id = await cli.file_service.create_file(
            session, name, folder.id, folder.structure_id, color=color
        )
        cli.console.print(f"[green]File '{name}'[/green] (ID: {file_id})")

    run_action(ctx, action)

@main.command("rename-file")
@click.argument("file_id", type=int)
@click.argument("name")
@click.pass_context
def rename_file(ctx: click.Context, file_id: int, name: str) -> None:
    """Rename a file."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        file_obj = await cli.file_service.rename_file(session, file_id, name)
        cli.console.print(f"[green]File renamed:[/green] {file_obj.path}")

    run_action(ctx, action)

@main.command("move-file")
@click.argument("file_id", type=int)
@click.argument("folder_id", type=int)
@click.pass_context
def move_file(ctx: click.Context, file_id: int, folder_id: int) -> None:
    """Move a file to another folder of the same structure."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        file_obj = await cli.file_service.move_file(session, file_id, folder_id)
        cli.console.print(f"[green]File moved:[/green] {file_obj.path}")

    run_action(ctx, action)

@main.command("rm-file")
@click.argument("file_id", type=int)
@click.pass_context
def delete_file(ctx: click.Context, file_id: int) -> None:
    """Delete a file."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        await cli.file_service.delete_file(session, file_id)
        cli.console.print(f"[green]Deleted file {file_id}[/green]")

    run_action(ctx, action)

@main.command("comment")
@click.argument("target_type", type=click.Choice([t.value for t in TargetType]))
@click.argument("target_id", type=int)
@click.argument("content")
@click.option("--color", default=None)
@click.option("--x", type=float, default=0)
@click.option("--y", type=float, default=0)
@click.pass_context
def add_comment(
    ctx: click.Context,
    target_type: str,
    target_id: int,
    content: str,
    color: Optional[str],
    x: float,
    y: float
) -> None:
    """Attach a comment to a file or folder."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        comment = await cli.comment_service.add_comment(
            session, target_id, target_type, content, color=color, x=x, y=y
        )
        cli.console.print(f"[green]Comment added[/green] (ID: {comment.id})")

    run_action(ctx, action)

@main.command("comments")
@click.argument("target_type", type=click.Choice([t.value for t in TargetType]), required=False)
@click.argument("target_id", type=int, required=False)
@click.pass_context
def list_comments(ctx: click.Context, target_type: Optional[str], target_id: Optional[int]) -> None:
    """List comments, optionally for one file or folder."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        if target_type and target_id is not None:
            comments = await cli.comment_service.get_comments(session, target_id, target_type)
        else:
            comments = await cli.comment_service.list_comments(session, target_type)
        cli.commands.show_comments(comments)

    run_action(ctx, action)

@main.command("edit-comment")
@click.argument("comment_id", type=int)
@click.option("--content", default=None)
@click.option("--color", default=None)
@click.option("--x", type=float, default=None)
@click.option("--y", type=float, default=None)
@click.pass_context
def edit_comment(
    ctx: click.Context,
    comment_id: int,
    content: Optional[str],
    color: Optional[str],
    x: Optional[float],
    y: Optional[float]
) -> None:
    """Change the text, color or position of a comment."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        await cli.comment_service.update_comment(session, comment_id, content=content, color=color, x=x, y=y)
        cli.console.print(f"[green]Comment {comment_id} updated[/green]")

    run_action(ctx, action)

@main.command("uncomment")
@click.argument("comment_id", type=int)
@click.pass_context
def delete_comment(ctx: click.Context, comment_id: int) -> None:
    """Delete a comment."""

    cli: OrganizerCLI = ctx.obj

    async def action(session: AsyncSession) -> None:
        await cli.comment_service.delete_comment(session, comment_id)
        cli.console.print(f"[green]Comment {comment_id} deleted[/green]")

    run_action(ctx, action)

if __name__ == "__main__":
    main()
