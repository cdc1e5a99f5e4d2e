from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from ..config import get_settings
from ..database import transaction
from ..errors import ConflictError, NotFoundError
from ..models import File, Folder, TargetType
from ..paths import compute_path, file_type, validate_name
from ..schemas import FileListing
from .cascade import delete_comments
from .notifier import ChangeNotifier

class FileService:

    def __init__(self, notifier: ChangeNotifier, default_color: Optional[str] = None):
        self.notifier = notifier
        self.default_color = default_color or get_settings().default_file_color

    async def get_file(self, session: AsyncSession, file_id: int) -> File:

        file_obj = await session.get(File, file_id)
        if file_obj is None:
            raise NotFoundError(f"File {file_id} not found")
        return file_obj

    async def get_file_by_path(self, session: AsyncSession, structure_id: int, path: str) -> Optional[File]:

        result = await session.execute(
            select(File)
            .where(File.structure_id == structure_id)
            .where(File.path == path)
        )
        return result.scalar_one_or_none()

    async def _get_folder_in_structure(self, session: AsyncSession, folder_id: int, structure_id: int) -> Folder:

        folder = await session.get(Folder, folder_id)
        if folder is None or folder.structure_id != structure_id:
            raise NotFoundError(f"Folder {folder_id} not found in structure {structure_id}")
        return folder

    async def create_file(
        self,
        session: AsyncSession,
        name: str,
        folder_id: int,
        structure_id: int,
        allow_overwrite: bool = False,
        color: Optional[str] = None
    ) -> int:

        try:
            async with transaction(session):
                validate_name(name)
                folder = await self._get_folder_in_structure(session, folder_id, structure_id)
                path = compute_path(name, folder.path)

                existing = await self.get_file_by_path(session, structure_id, path)
                if existing is not None:
                    if allow_overwrite:
                        logger.debug(f"File already exists: {path} (id {existing.id})")
                        return existing.id
                    raise ConflictError(f"File '{path}' already exists in structure {structure_id}")

                file_obj = File(
                    name=name,
                    path=path,
                    type=file_type(name),
                    color=color or self.default_color,
                    folder_id=folder_id,
                    structure_id=structure_id
                )
                session.add(file_obj)
                await session.flush()
                file_id = file_obj.id

        except Exception as e:
            logger.error(f"Error creating file '{name}' in folder {folder_id}: {e}")
            raise

        logger.info(f"File created: {path} (structure {structure_id})")
        self.notifier.notify_structural_change(structure_id)
        return file_id

    async def rename_file(self, session: AsyncSession, file_id: int, new_name: str) -> File:

        try:
            async with transaction(session):
                validate_name(new_name)
                file_obj = await self.get_file(session, file_id)
                folder = await self._get_folder_in_structure(session, file_obj.folder_id, file_obj.structure_id)

                new_path = compute_path(new_name, folder.path)
                await self._ensure_path_free(session, file_obj, new_path)

                old_path = file_obj.path
                file_obj.name = new_name
                file_obj.path = new_path
                file_obj.type = file_type(new_name)

        except Exception as e:
            logger.error(f"Error renaming file {file_id}: {e}")
            raise

        logger.info(f"File renamed: {old_path} -> {new_path}")
        self.notifier.notify_structural_change(file_obj.structure_id)
        return file_obj

    async def move_file(self, session: AsyncSession, file_id: int, new_folder_id: int) -> File:

        try:
            async with transaction(session):
                file_obj = await self.get_file(session, file_id)
                folder = await self._get_folder_in_structure(session, new_folder_id, file_obj.structure_id)

                new_path = compute_path(file_obj.name, folder.path)
                await self._ensure_path_free(session, file_obj, new_path)

                old_path = file_obj.path
                file_obj.folder_id = folder.id
                file_obj.path = new_path

        except Exception as e:
            logger.error(f"Error moving file {file_id}: {e}")
            raise

        logger.info(f"File moved: {old_path} -> {new_path}")
        self.notifier.notify_structural_change(file_obj.structure_id)
        return file_obj

    async def update_file_color(self, session: AsyncSession, file_id: int, color: str) -> File:

        async with transaction(session):
            file_obj = await self.get_file(session, file_id)
            file_obj.color = color

        logger.info(f"File color updated: {file_obj.path} -> {color}")
        self.notifier.notify_structural_change(file_obj.structure_id)
        return file_obj

    async def _ensure_path_free(self, session: AsyncSession, file_obj: File, path: str) -> None:

        if path == file_obj.path:
            return
        if await self.get_file_by_path(session, file_obj.structure_id, path) is not None:
            raise ConflictError(f"File '{path}' already exists in structure {file_obj.structure_id}")

    async def delete_file(self, session: AsyncSession, file_id: int) -> None:

        try:
            async with transaction(session):
                file_obj = await self.get_file(session, file_id)
                structure_id = file_obj.structure_id
                path = file_obj.path

                await delete_comments(session, TargetType.FILE, [file_id])
                await session.delete(file_obj)

        except Exception as e:
            logger.error(f"Error deleting file {file_id}: {e}")
            raise

        logger.info(f"File deleted: {path}")
        self.notifier.notify_structural_change(structure_id)

    async def list_files(self, session: AsyncSession, structure_id: Optional[int] = None) -> List[FileListing]:

        query = (
            select(File, Folder.path)
            .join(Folder, File.folder_id == Folder.id)
            .order_by(File.name, File.id)
        )
        if structure_id is not None:
            query = query.where(File.structure_id == structure_id)

        result = await session.execute(query)
        return [self._to_listing(file_obj, folder_path) for file_obj, folder_path in result.all()]

    async def list_files_in_folder(self, session: AsyncSession, folder_id: int) -> List[FileListing]:

        result = await session.execute(
            select(File, Folder.path)
            .join(Folder, File.folder_id == Folder.id)
            .where(File.folder_id == folder_id)
            .order_by(File.name)
        )
        return [self._to_listing(file_obj, folder_path) for file_obj, folder_path in result.all()]

    def _to_listing(self, file_obj: File, folder_path: str) -> FileListing:

        return FileListing(
            id=file_obj.id,
            name=file_obj.name,
            path=file_obj.path,
            type=file_obj.type,
            color=file_obj.color,
            folder_id=file_obj.folder_id,
            structure_id=file_obj.structure_id,
            folder_path=folder_path
        )
