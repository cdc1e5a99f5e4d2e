from typing import Any, List, Optional, Union
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func
from loguru import logger

from ..config import get_settings
from ..database import transaction
from ..errors import NotFoundError, TargetNotFoundError
from ..models import Comment, File, Folder, TargetType
from .notifier import ChangeNotifier

EDITABLE_FIELDS = {"content", "color", "x", "y"}

class CommentService:

    def __init__(self, notifier: ChangeNotifier, default_color: Optional[str] = None):
        self.notifier = notifier
        self.default_color = default_color or get_settings().default_comment_color

    async def add_comment(
        self,
        session: AsyncSession,
        target_id: int,
        target_type: Union[TargetType, str],
        content: str,
        color: Optional[str] = None,
        x: float = 0,
        y: float = 0
    ) -> Comment:

        target_type = TargetType(target_type)
        target_model = File if target_type is TargetType.FILE else Folder

        try:
            async with transaction(session):
                if await session.get(target_model, target_id) is None:
                    raise TargetNotFoundError(f"{target_type.value.capitalize()} {target_id} not found")

                comment = Comment(
                    content=content,
                    color=color or self.default_color,
                    target_type=target_type,
                    target_id=target_id,
                    x=x,
                    y=y
                )
                session.add(comment)
                await session.flush()
                await session.refresh(comment)

        except Exception as e:
            logger.error(f"Error adding comment to {target_type} {target_id}: {e}")
            raise

        logger.info(f"Comment {comment.id} added to {target_type} {target_id}")
        self.notifier.notify_comment_change(target_id)
        return comment

    async def get_comment(self, session: AsyncSession, comment_id: int) -> Comment:

        comment = await session.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError(f"Comment {comment_id} not found")
        return comment

    async def get_comments(
        self,
        session: AsyncSession,
        target_id: int,
        target_type: Union[TargetType, str]
    ) -> List[Comment]:

        result = await session.execute(
            select(Comment)
            .where(Comment.target_id == target_id)
            .where(Comment.target_type == TargetType(target_type))
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return list(result.scalars().all())

    async def list_comments(
        self,
        session: AsyncSession,
        target_type: Optional[Union[TargetType, str]] = None
    ) -> List[Comment]:

        query = select(Comment)
        if target_type is not None:
            query = query.where(Comment.target_type == TargetType(target_type))

        result = await session.execute(query.order_by(Comment.created_at.desc(), Comment.id.desc()))
        return list(result.scalars().all())

    async def update_comment(self, session: AsyncSession, comment_id: int, **fields: Any) -> Comment:

        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update comment fields: {', '.join(sorted(unknown))}")

        try:
            async with transaction(session):
                values = {key: value for key, value in fields.items() if value is not None}
                result = await session.execute(
                    update(Comment)
                    .where(Comment.id == comment_id)
                    .values(**values, updated_at=func.now())
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise NotFoundError(f"Comment {comment_id} not found")

                comment = await session.get(Comment, comment_id, populate_existing=True)

        except Exception as e:
            logger.error(f"Error updating comment {comment_id}: {e}")
            raise

        logger.info(f"Comment {comment_id} updated")
        self.notifier.notify_comment_change(comment.target_id)
        return comment

    async def delete_comment(self, session: AsyncSession, comment_id: int) -> None:

        try:
            async with transaction(session):
                target_id = (
                    await session.execute(select(Comment.target_id).where(Comment.id == comment_id))
                ).scalar_one_or_none()

                result = await session.execute(delete(Comment).where(Comment.id == comment_id))
                if result.rowcount == 0:
                    raise NotFoundError(f"Comment {comment_id} not found")

        except Exception as e:
            logger.error(f"Error deleting comment {comment_id}: {e}")
            raise

        logger.info(f"Comment {comment_id} deleted")
        self.notifier.notify_comment_change(target_id)
