import enum

class ErrorCode(str, enum.Enum):

    internal = "internal_error"
    invalid_name = "invalid_name"
    not_found = "not_found"
    target_not_found = "target_not_found"
    conflict = "conflict"
    cyclic_move = "cyclic_move"
    store_busy = "store_busy"
    import_source = "import_source"

class Error(Exception):
    """Base class for all errors raised by the tree store and importer."""

    code: ErrorCode = ErrorCode.internal

class InvalidNameError(Error):
    code = ErrorCode.invalid_name

class NotFoundError(Error):
    code = ErrorCode.not_found

class TargetNotFoundError(NotFoundError):
    code = ErrorCode.target_not_found

class ConflictError(Error):
    code = ErrorCode.conflict

class CyclicMoveError(Error):
    code = ErrorCode.cyclic_move

class StoreBusyError(Error):
    """The storage engine timed out waiting for a lock. Safe to retry."""

    code = ErrorCode.store_busy

class ImportSourceError(Error):
    code = ErrorCode.import_source
