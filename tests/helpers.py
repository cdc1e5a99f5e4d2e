from __future__ import annotations

from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from structure_organizer.models import Comment, File, Folder


async def fetch_folders(session: AsyncSession, structure_id: int) -> List[Folder]:
    result = await session.execute(
        select(Folder)
        .where(Folder.structure_id == structure_id)
        .order_by(Folder.path)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def fetch_files(session: AsyncSession, structure_id: int) -> List[File]:
    result = await session.execute(
        select(File)
        .where(File.structure_id == structure_id)
        .order_by(File.path)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def folder_paths(session: AsyncSession, structure_id: int) -> Dict[str, int]:
    """Map of path -> level for every folder of a structure."""
    return {f.path: f.level for f in await fetch_folders(session, structure_id)}


async def count_comments(session: AsyncSession) -> int:
    return (await session.execute(select(func.count(Comment.id)))).scalar_one()


async def assert_tree_consistent(session: AsyncSession, structure_id: int) -> None:
    folders = await fetch_folders(session, structure_id)
    by_id = {f.id: f for f in folders}

    for folder in folders:
        if folder.parent_id is None:
            assert folder.path == folder.name
            assert folder.level == 0
        else:
            parent = by_id[folder.parent_id]
            assert parent.structure_id == folder.structure_id
            assert folder.path == f"{parent.path}/{folder.name}"
            assert folder.level == parent.level + 1

    for file in await fetch_files(session, structure_id):
        assert file.path == f"{by_id[file.folder_id].path}/{file.name}"
