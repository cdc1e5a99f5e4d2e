from typing import Set
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from ..database import transaction
from ..errors import NotFoundError
from ..models import ExpandedFolder, Folder

class ExpandedFolderService:
    """Remembers which folders each viewer has opened. Not business data."""

    async def get_expanded(self, session: AsyncSession, viewer_id: str, structure_id: int) -> Set[int]:

        result = await session.execute(
            select(ExpandedFolder.folder_id)
            .where(ExpandedFolder.viewer_id == viewer_id)
            .where(ExpandedFolder.structure_id == structure_id)
        )
        return set(result.scalars().all())

    async def set_expanded(self, session: AsyncSession, viewer_id: str, folder_id: int, expanded: bool) -> None:

        async with transaction(session):
            folder = await session.get(Folder, folder_id)
            if folder is None:
                raise NotFoundError(f"Folder {folder_id} not found")

            result = await session.execute(
                select(ExpandedFolder)
                .where(ExpandedFolder.viewer_id == viewer_id)
                .where(ExpandedFolder.folder_id == folder_id)
            )
            row = result.scalar_one_or_none()

            if expanded and row is None:
                session.add(ExpandedFolder(
                    viewer_id=viewer_id,
                    folder_id=folder_id,
                    structure_id=folder.structure_id
                ))
            elif not expanded and row is not None:
                await session.execute(delete(ExpandedFolder).where(ExpandedFolder.id == row.id))

        logger.debug(f"Folder {folder_id} {'expanded' if expanded else 'collapsed'} for {viewer_id}")
