from __future__ import annotations

from typing import Any, Dict, List

import pytest

from structure_organizer.config import Settings
from structure_organizer.database import DatabaseManager
from structure_organizer.services import (
    ChangeNotifier,
    CommentService,
    ExpandedFolderService,
    FileService,
    FolderService,
    ImportService,
    StructureService,
)


class RecordingNotifier(ChangeNotifier):
    """A notifier that remembers every event it was asked to broadcast."""

    def __init__(self) -> None:
        super().__init__()
        self.events: List[Dict[str, Any]] = []

    def broadcast(self, event: Dict[str, Any]) -> None:
        self.events.append(event)
        super().broadcast(event)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'organizer.db'}",
        db_connect_retries=1,
        db_retry_delay=0,
    )


@pytest.fixture
async def db_manager(settings: Settings):
    manager = DatabaseManager(settings)
    await manager.initialize()
    yield manager
    await manager.close()


@pytest.fixture
async def session(db_manager: DatabaseManager):
    async with db_manager.session() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def structure_service(notifier: RecordingNotifier) -> StructureService:
    return StructureService(notifier)


@pytest.fixture
def folder_service(notifier: RecordingNotifier) -> FolderService:
    return FolderService(notifier)


@pytest.fixture
def file_service(notifier: RecordingNotifier) -> FileService:
    return FileService(notifier, "#000000")


@pytest.fixture
def comment_service(notifier: RecordingNotifier) -> CommentService:
    return CommentService(notifier, "#FFD700")


@pytest.fixture
def expanded_folder_service() -> ExpandedFolderService:
    return ExpandedFolderService()


@pytest.fixture
def import_service(
    structure_service: StructureService,
    folder_service: FolderService,
    file_service: FileService,
) -> ImportService:
    return ImportService(structure_service, folder_service, file_service)


@pytest.fixture
async def structure_id(session, structure_service: StructureService) -> int:
    """A "Docs" structure."""
    return await structure_service.create_structure(session, "Docs")
