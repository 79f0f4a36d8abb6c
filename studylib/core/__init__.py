from studylib.core.exceptions import (
    AppError,
    NotFoundError,
    UnauthorizedError,
    NonEmptyFolderError,
    CycleError,
    ValidationError,
    LockTimeoutError,
    PropagationError,
)

__all__ = [
    "AppError",
    "NotFoundError",
    "UnauthorizedError",
    "NonEmptyFolderError",
    "CycleError",
    "ValidationError",
    "LockTimeoutError",
    "PropagationError",
]
