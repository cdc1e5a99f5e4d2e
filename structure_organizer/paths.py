import re
from typing import Optional

from .errors import InvalidNameError

SEPARATOR = "/"
DEFAULT_FILE_TYPE = "unknown"

_REPEATED_SEPARATORS = re.compile(r"/{2,}")

def validate_name(name: str) -> str:

    if not name:
        raise InvalidNameError("Name must not be empty")
    if SEPARATOR in name:
        raise InvalidNameError(f"Name must not contain '{SEPARATOR}': {name!r}")
    return name

def compute_path(name: str, parent_path: Optional[str]) -> str:

    validate_name(name)
    if parent_path is None:
        return name
    return _REPEATED_SEPARATORS.sub(SEPARATOR, f"{parent_path}{SEPARATOR}{name}")

def compute_level(parent_level: Optional[int]) -> int:

    return (parent_level if parent_level is not None else -1) + 1

def file_type(name: str) -> str:
    """Lowercase text after the last dot of ``name``, or the default type."""

    _, dot, extension = name.rpartition(".")
    if not dot or not extension:
        return DEFAULT_FILE_TYPE
    return extension.lower()
