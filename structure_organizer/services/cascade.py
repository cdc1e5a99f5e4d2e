from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Comment, ExpandedFolder, File, Folder, TargetType
from ..paths import compute_level, compute_path

async def load_structure_folders(session: AsyncSession, structure_id: int) -> List[Folder]:

    result = await session.execute(
        select(Folder)
        .where(Folder.structure_id == structure_id)
        .order_by(Folder.path)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())

def children_by_parent(folders: Iterable[Folder]) -> Dict[Optional[int], List[Folder]]:

    children: Dict[Optional[int], List[Folder]] = {}
    for folder in folders:
        children.setdefault(folder.parent_id, []).append(folder)
    for siblings in children.values():
        siblings.sort(key=lambda f: f.path)
    return children

def collect_subtree(root: Folder, children: Dict[Optional[int], List[Folder]]) -> List[Folder]:
    """``root`` followed by all of its descendants, parents before children."""

    subtree = []
    stack = [root]
    while stack:
        folder = stack.pop()
        subtree.append(folder)
        stack.extend(reversed(children.get(folder.id, [])))
    return subtree

async def rebase_subtree(
    session: AsyncSession,
    root: Folder,
    parent: Optional[Folder],
    children: Dict[Optional[int], List[Folder]]
) -> List[Folder]:
    """Recompute path and level of ``root``, its descendants and their files."""

    subtree = collect_subtree(root, children)
    by_id = {folder.id: folder for folder in subtree}

    for folder in subtree:
        if folder is root:
            new_parent = parent
        else:
            new_parent = by_id[folder.parent_id]
        folder.path = compute_path(folder.name, new_parent.path if new_parent else None)
        folder.level = compute_level(new_parent.level if new_parent else None)

    result = await session.execute(
        select(File)
        .where(File.folder_id.in_(list(by_id)))
        .execution_options(populate_existing=True)
    )
    for file in result.scalars().all():
        file.path = compute_path(file.name, by_id[file.folder_id].path)

    return subtree

async def delete_comments(session: AsyncSession, target_type: TargetType, target_ids: List[int]) -> None:

    if not target_ids:
        return
    await session.execute(
        delete(Comment)
        .where(Comment.target_type == target_type)
        .where(Comment.target_id.in_(target_ids))
    )

async def delete_folders(session: AsyncSession, folder_ids: List[int]) -> int:
    """Delete folders, their files and every comment attached to either."""

    if not folder_ids:
        return 0

    result = await session.execute(select(File.id).where(File.folder_id.in_(folder_ids)))
    file_ids = list(result.scalars().all())

    await delete_comments(session, TargetType.FILE, file_ids)
    await delete_comments(session, TargetType.FOLDER, folder_ids)
    await session.execute(delete(ExpandedFolder).where(ExpandedFolder.folder_id.in_(folder_ids)))
    if file_ids:
        await session.execute(delete(File).where(File.id.in_(file_ids)))
    await session.execute(delete(Folder).where(Folder.id.in_(folder_ids)))
    return len(file_ids)

async def purge_structure(session: AsyncSession, structure_id: int) -> None:
    """Remove every folder, file and comment of a structure, keeping the structure row."""

    result = await session.execute(select(Folder.id).where(Folder.structure_id == structure_id))
    folder_ids = list(result.scalars().all())

    result = await session.execute(select(File.id).where(File.structure_id == structure_id))
    file_ids = list(result.scalars().all())

    await delete_comments(session, TargetType.FILE, file_ids)
    await delete_comments(session, TargetType.FOLDER, folder_ids)
    await session.execute(delete(ExpandedFolder).where(ExpandedFolder.structure_id == structure_id))
    await session.execute(delete(File).where(File.structure_id == structure_id))
    await session.execute(delete(Folder).where(Folder.structure_id == structure_id))
