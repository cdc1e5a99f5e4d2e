import asyncio
import os
from pathlib import Path
from typing import List, NamedTuple, Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from ..errors import Error, ImportSourceError
from ..schemas import ImportReport, SkippedEntry
from .file_service import FileService
from .folder_service import FolderService
from .structure_service import StructureService

DIRECTORY = "directory"
REGULAR_FILE = "file"
SYMLINK = "symlink"
OTHER = "other"

class ScannedEntry(NamedTuple):

    name: str
    kind: str
    error: Optional[str] = None

def scan_directory(path: Path) -> List[ScannedEntry]:
    """List ``path`` sorted by name, classifying entries without following symlinks."""

    entries = []
    with os.scandir(path) as iterator:
        for entry in iterator:
            try:
                if entry.is_symlink():
                    kind = SYMLINK
                elif entry.is_dir(follow_symlinks=False):
                    kind = DIRECTORY
                elif entry.is_file(follow_symlinks=False):
                    kind = REGULAR_FILE
                else:
                    kind = OTHER
                entries.append(ScannedEntry(entry.name, kind))
            except OSError as e:
                entries.append(ScannedEntry(entry.name, OTHER, str(e)))

    return sorted(entries, key=lambda e: e.name)

class ImportService:

    def __init__(
        self,
        structure_service: StructureService,
        folder_service: FolderService,
        file_service: FileService
    ):
        self.structure_service = structure_service
        self.folder_service = folder_service
        self.file_service = file_service

    async def import_directory(
        self,
        session: AsyncSession,
        source: Union[str, Path],
        allow_overwrite: bool = True
    ) -> ImportReport:

        source_path = self._resolve_source(source)
        name = source_path.name

        try:
            entries = await asyncio.to_thread(scan_directory, source_path)
        except OSError as e:
            raise ImportSourceError(f"Cannot read import source '{source_path}': {e}") from e

        logger.info(f"Importing {source_path} into structure '{name}' (overwrite: {allow_overwrite})")

        structure_id = await self.structure_service.create_structure(
            session, name, description=f"Imported from {source_path}"
        )
        root_id = await self.folder_service.create_folder(
            session, name, structure_id, None, allow_overwrite=allow_overwrite
        )

        report = ImportReport(
            source=str(source_path),
            structure_id=structure_id,
            root_folder_id=root_id,
            folders=1
        )
        await self._import_entries(session, source_path, entries, structure_id, root_id, allow_overwrite, report)

        logger.info(
            f"Import of {source_path} finished: {report.folders} folders, "
            f"{report.files} files, {len(report.skipped)} skipped"
        )
        return report

    def _resolve_source(self, source: Union[str, Path]) -> Path:

        try:
            source_path = Path(source).expanduser().resolve(strict=True)
        except OSError as e:
            raise ImportSourceError(f"Import source '{source}' does not exist: {e}") from e

        if not source_path.is_dir():
            raise ImportSourceError(f"Import source '{source_path}' is not a directory")
        if not source_path.name:
            raise ImportSourceError(f"Import source '{source_path}' has no name to use for the structure")
        return source_path

    async def _walk(
        self,
        session: AsyncSession,
        directory: Path,
        structure_id: int,
        folder_id: int,
        allow_overwrite: bool,
        report: ImportReport
    ) -> None:

        try:
            entries = await asyncio.to_thread(scan_directory, directory)
        except OSError as e:
            self._skip(report, directory, f"unreadable directory: {e}")
            return

        await self._import_entries(session, directory, entries, structure_id, folder_id, allow_overwrite, report)

    async def _import_entries(
        self,
        session: AsyncSession,
        directory: Path,
        entries: List[ScannedEntry],
        structure_id: int,
        folder_id: int,
        allow_overwrite: bool,
        report: ImportReport
    ) -> None:

        for entry in entries:
            entry_path = directory / entry.name

            if entry.error:
                self._skip(report, entry_path, entry.error)
                continue

            if entry.kind == DIRECTORY:
                try:
                    # Only the root may trigger the overwrite purge; nested folders merge.
                    child_id = await self.folder_service.create_folder(
                        session, entry.name, structure_id, folder_id, allow_overwrite=False
                    )
                except Error as e:
                    self._skip(report, entry_path, str(e))
                    continue
                report.folders += 1
                await self._walk(session, entry_path, structure_id, child_id, allow_overwrite, report)

            elif entry.kind == REGULAR_FILE:
                try:
                    await self.file_service.create_file(
                        session, entry.name, folder_id, structure_id, allow_overwrite=allow_overwrite
                    )
                except Error as e:
                    self._skip(report, entry_path, str(e))
                    continue
                report.files += 1

            else:
                self._skip(report, entry_path, f"unsupported entry type: {entry.kind}")

    def _skip(self, report: ImportReport, path: Path, reason: str) -> None:

        logger.warning(f"Skipping {path}: {reason}")
        report.skipped.append(SkippedEntry(path=str(path), reason=reason))
