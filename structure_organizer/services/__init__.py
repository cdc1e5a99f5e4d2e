from .notifier import ChangeNotifier
from .access_guard import AccessGuard, SharedTokenGuard
from .structure_service import StructureService
from .folder_service import FolderService
from .file_service import FileService
from .comment_service import CommentService
from .expanded_folder_service import ExpandedFolderService
from .import_service import ImportService

__all__ = [
    "ChangeNotifier",
    "AccessGuard",
    "SharedTokenGuard",
    "StructureService",
    "FolderService",
    "FileService",
    "CommentService",
    "ExpandedFolderService",
    "ImportService"
]
