from typing import List, Optional
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from ..database import transaction
from ..errors import ConflictError, InvalidNameError, NotFoundError
from ..models import Structure
from .cascade import purge_structure
from .notifier import ChangeNotifier

class StructureService:

    def __init__(self, notifier: ChangeNotifier):
        self.notifier = notifier

    async def get_structure(self, session: AsyncSession, structure_id: int) -> Structure:

        structure = await session.get(Structure, structure_id)
        if structure is None:
            raise NotFoundError(f"Structure {structure_id} not found")
        return structure

    async def get_structure_by_name(self, session: AsyncSession, name: str) -> Optional[Structure]:

        result = await session.execute(select(Structure).where(Structure.name == name))
        return result.scalar_one_or_none()

    async def list_structures(self, session: AsyncSession) -> List[Structure]:

        result = await session.execute(select(Structure).order_by(Structure.position, Structure.id))
        return list(result.scalars().all())

    async def create_structure(
        self,
        session: AsyncSession,
        name: str,
        description: Optional[str] = None,
        position: Optional[int] = None
    ) -> int:

        if not name or not name.strip():
            raise InvalidNameError("Structure name must not be empty")

        try:
            async with transaction(session):
                existing = await self.get_structure_by_name(session, name)
                if existing is not None:
                    logger.debug(f"Structure already exists: {name} (id {existing.id})")
                    return existing.id

                if position is None:
                    result = await session.execute(select(func.max(Structure.position)))
                    current = result.scalar()
                    position = 0 if current is None else current + 1

                structure = Structure(name=name, description=description, position=position)
                session.add(structure)
                await session.flush()
                structure_id = structure.id

        except Exception as e:
            logger.error(f"Error creating structure '{name}': {e}")
            raise

        logger.info(f"Structure created: {name} (id {structure_id})")
        self.notifier.notify_structural_change(structure_id)
        return structure_id

    async def update_structure(
        self,
        session: AsyncSession,
        structure_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        position: Optional[int] = None
    ) -> Structure:

        try:
            async with transaction(session):
                structure = await self.get_structure(session, structure_id)

                if name is not None and name != structure.name:
                    if not name.strip():
                        raise InvalidNameError("Structure name must not be empty")
                    if await self.get_structure_by_name(session, name) is not None:
                        raise ConflictError(f"Structure '{name}' already exists")
                    structure.name = name
                if description is not None:
                    structure.description = description
                if position is not None:
                    structure.position = position

        except Exception as e:
            logger.error(f"Error updating structure {structure_id}: {e}")
            raise

        logger.info(f"Structure updated: {structure.name} (id {structure_id})")
        self.notifier.notify_structural_change(structure_id)
        return structure

    async def delete_structure(self, session: AsyncSession, structure_id: int) -> None:

        try:
            async with transaction(session):
                structure = await self.get_structure(session, structure_id)
                name = structure.name

                await purge_structure(session, structure_id)
                await session.execute(delete(Structure).where(Structure.id == structure_id))

        except Exception as e:
            logger.error(f"Error deleting structure {structure_id}: {e}")
            raise

        logger.info(f"Structure deleted: {name} (id {structure_id})")
        self.notifier.notify_structural_change(structure_id)
