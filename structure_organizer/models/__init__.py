from .base import Base
from .structure import Structure
from .folder import Folder
from .file import File
from .comment import Comment, TargetType
from .expanded_folder import ExpandedFolder

__all__ = ["Base", "Structure", "Folder", "File", "Comment", "TargetType", "ExpandedFolder"]
