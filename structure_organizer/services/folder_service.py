from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from ..database import transaction
from ..errors import ConflictError, CyclicMoveError, NotFoundError
from ..models import File, Folder, Structure
from ..paths import compute_level, compute_path, validate_name
from ..schemas import FileEntry, FolderNode
from .cascade import (
    children_by_parent,
    collect_subtree,
    delete_folders,
    load_structure_folders,
    purge_structure,
    rebase_subtree,
)
from .notifier import ChangeNotifier

class FolderService:

    def __init__(self, notifier: ChangeNotifier):
        self.notifier = notifier

    async def get_folder(self, session: AsyncSession, folder_id: int) -> Folder:

        folder = await session.get(Folder, folder_id)
        if folder is None:
            raise NotFoundError(f"Folder {folder_id} not found")
        return folder

    async def get_folder_by_path(self, session: AsyncSession, structure_id: int, path: str) -> Optional[Folder]:

        result = await session.execute(
            select(Folder)
            .where(Folder.structure_id == structure_id)
            .where(Folder.path == path)
        )
        return result.scalar_one_or_none()

    async def create_folder(
        self,
        session: AsyncSession,
        name: str,
        structure_id: int,
        parent_id: Optional[int] = None,
        allow_overwrite: bool = False
    ) -> int:

        try:
            async with transaction(session):
                validate_name(name)

                if await session.get(Structure, structure_id) is None:
                    raise NotFoundError(f"Structure {structure_id} not found")

                parent = None
                if parent_id is not None:
                    parent = await session.get(Folder, parent_id)
                    if parent is None or parent.structure_id != structure_id:
                        raise NotFoundError(f"Parent folder {parent_id} not found in structure {structure_id}")

                path = compute_path(name, parent.path if parent else None)
                level = compute_level(parent.level if parent else None)

                existing = await self.get_folder_by_path(session, structure_id, path)
                if existing is not None:
                    if not allow_overwrite:
                        logger.debug(f"Folder already exists: {path} (id {existing.id})")
                        return existing.id

                    logger.warning(
                        f"Folder '{path}' already exists in structure {structure_id}, "
                        f"purging the structure before recreating it"
                    )
                    await purge_structure(session, structure_id)
                    if parent is not None:
                        raise NotFoundError(
                            f"Parent folder {parent_id} was removed while overwriting structure {structure_id}"
                        )

                folder = Folder(
                    name=name,
                    path=path,
                    level=level,
                    parent_id=parent_id,
                    structure_id=structure_id
                )
                session.add(folder)
                await session.flush()
                folder_id = folder.id

        except Exception as e:
            logger.error(f"Error creating folder '{name}' in structure {structure_id}: {e}")
            raise

        logger.info(f"Folder created: {path} (structure {structure_id})")
        self.notifier.notify_structural_change(structure_id)
        return folder_id

    async def rename_folder(self, session: AsyncSession, folder_id: int, new_name: str) -> Folder:

        try:
            async with transaction(session):
                validate_name(new_name)
                folder = await self.get_folder(session, folder_id)

                folders = await load_structure_folders(session, folder.structure_id)
                by_id = {f.id: f for f in folders}
                folder = by_id[folder_id]
                parent = by_id.get(folder.parent_id) if folder.parent_id is not None else None

                new_path = compute_path(new_name, parent.path if parent else None)
                if new_path != folder.path and any(f.path == new_path for f in folders):
                    raise ConflictError(f"Folder '{new_path}' already exists in structure {folder.structure_id}")

                old_path = folder.path
                folder.name = new_name
                subtree = await rebase_subtree(session, folder, parent, children_by_parent(folders))

        except Exception as e:
            logger.error(f"Error renaming folder {folder_id}: {e}")
            raise

        logger.info(f"Folder renamed: {old_path} -> {folder.path} ({len(subtree)} folders updated)")
        self.notifier.notify_structural_change(folder.structure_id)
        return folder

    async def move_folder(self, session: AsyncSession, folder_id: int, new_parent_id: Optional[int]) -> Folder:

        try:
            async with transaction(session):
                folder = await self.get_folder(session, folder_id)

                folders = await load_structure_folders(session, folder.structure_id)
                by_id = {f.id: f for f in folders}
                folder = by_id[folder_id]
                children = children_by_parent(folders)

                new_parent = None
                if new_parent_id is not None:
                    new_parent = by_id.get(new_parent_id)
                    if new_parent is None:
                        raise NotFoundError(
                            f"Folder {new_parent_id} not found in structure {folder.structure_id}"
                        )
                    if new_parent_id in {f.id for f in collect_subtree(folder, children)}:
                        raise CyclicMoveError(
                            f"Cannot move folder {folder_id} into itself or one of its descendants"
                        )

                new_path = compute_path(folder.name, new_parent.path if new_parent else None)
                if new_path != folder.path and any(f.path == new_path for f in folders):
                    raise ConflictError(f"Folder '{new_path}' already exists in structure {folder.structure_id}")

                old_path = folder.path
                folder.parent_id = new_parent_id
                subtree = await rebase_subtree(session, folder, new_parent, children)

        except Exception as e:
            logger.error(f"Error moving folder {folder_id}: {e}")
            raise

        logger.info(f"Folder moved: {old_path} -> {folder.path} ({len(subtree)} folders updated)")
        self.notifier.notify_structural_change(folder.structure_id)
        return folder

    async def delete_folder(self, session: AsyncSession, folder_id: int) -> None:

        try:
            async with transaction(session):
                folder = await self.get_folder(session, folder_id)
                structure_id = folder.structure_id
                path = folder.path

                folders = await load_structure_folders(session, structure_id)
                by_id = {f.id: f for f in folders}
                subtree = collect_subtree(by_id[folder_id], children_by_parent(folders))
                file_count = await delete_folders(session, [f.id for f in subtree])

        except Exception as e:
            logger.error(f"Error deleting folder {folder_id}: {e}")
            raise

        logger.info(f"Folder deleted: {path} ({len(subtree)} folders, {file_count} files)")
        self.notifier.notify_structural_change(structure_id)

    async def list_folders(self, session: AsyncSession, structure_id: Optional[int] = None) -> List[FolderNode]:

        folder_query = select(Folder)
        file_query = select(File).order_by(File.name)
        if structure_id is not None:
            folder_query = folder_query.where(Folder.structure_id == structure_id)
            file_query = file_query.where(File.structure_id == structure_id)

        folders = list((await session.execute(folder_query)).scalars().all())
        files = list((await session.execute(file_query)).scalars().all())

        files_by_folder = {}
        for file in files:
            files_by_folder.setdefault(file.folder_id, []).append(file)

        children = children_by_parent(folders)
        known_ids = {f.id for f in folders}
        roots = sorted(
            (f for f in folders if f.parent_id is None or f.parent_id not in known_ids),
            key=lambda f: (f.path, f.structure_id)
        )

        nodes = []
        for root in roots:
            for folder in collect_subtree(root, children):
                nodes.append(FolderNode(
                    id=folder.id,
                    name=folder.name,
                    path=folder.path,
                    level=folder.level,
                    parent_id=folder.parent_id,
                    structure_id=folder.structure_id,
                    subfolder_count=len(children.get(folder.id, [])),
                    files=[
                        FileEntry(id=f.id, name=f.name, path=f.path, type=f.type, color=f.color)
                        for f in files_by_folder.get(folder.id, [])
                    ]
                ))
        return nodes
