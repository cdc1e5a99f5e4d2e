from typing import List, Optional

from pydantic import BaseModel, Field

class FileEntry(BaseModel):

    id: int
    name: str
    path: str
    type: str
    color: str

class FileListing(FileEntry):

    folder_id: int
    structure_id: int
    folder_path: str

class FolderNode(BaseModel):

    id: int
    name: str
    path: str
    level: int
    parent_id: Optional[int] = None
    structure_id: int
    subfolder_count: int = 0
    files: List[FileEntry] = Field(default_factory=list)

class SkippedEntry(BaseModel):

    path: str
    reason: str

class ImportReport(BaseModel):

    source: str
    structure_id: int
    root_folder_id: Optional[int] = None
    folders: int = 0
    files: int = 0
    skipped: List[SkippedEntry] = Field(default_factory=list)
