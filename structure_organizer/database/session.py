from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, StoreBusyError

_BUSY_MARKERS = (
    "database is locked",
    "database table is locked",
    "database is busy",
    "lock timeout",
    "lock wait timeout",
    "could not obtain lock",
    "deadlock detected",
)

def is_busy_error(error: OperationalError) -> bool:

    message = str(error.orig if error.orig is not None else error).lower()
    return any(marker in message for marker in _BUSY_MARKERS)

@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run the enclosed block as one unit of work.

    Commits when the block finishes, rolls back on any exception. Storage
    errors are translated: unique-constraint violations become
    ``ConflictError`` and lock contention becomes ``StoreBusyError``.
    """

    try:
        yield session
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise ConflictError(f"Constraint violated: {e.orig}") from e
    except OperationalError as e:
        await session.rollback()
        if is_busy_error(e):
            raise StoreBusyError(f"Storage is busy, retry later: {e.orig}") from e
        raise
    except Exception:
        await session.rollback()
        raise
