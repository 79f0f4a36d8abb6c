from typing import Any, Dict, List, Optional
from starlette import status


class AppError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        code: str = "bad_request",
        field: Optional[str] = None,
        errors: Optional[List[dict]] = None,  # [{'code':..., 'message':..., 'field':...}]
        details: Optional[Dict[str, Any]] = None,  # Additional details for the error
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.field = field
        self.errors = errors
        self.details = details


class NotFoundError(AppError):
    """Referenced folder, file or parent does not exist"""

    def __init__(self, message: str = "Not found", **kwargs):
        kwargs.setdefault("status_code", status.HTTP_404_NOT_FOUND)
        kwargs.setdefault("code", "not_found")
        super().__init__(message, **kwargs)


class UnauthorizedError(AppError):
    """Record exists but belongs to another owner"""

    def __init__(self, message: str = "Unauthorized", **kwargs):
        kwargs.setdefault("status_code", status.HTTP_403_FORBIDDEN)
        kwargs.setdefault("code", "unauthorized")
        super().__init__(message, **kwargs)


class NonEmptyFolderError(AppError):
    def __init__(self, message: str, *, file_count: int = 0, subfolder_count: int = 0, **kwargs):
        kwargs.setdefault("status_code", status.HTTP_409_CONFLICT)
        kwargs.setdefault("code", "non_empty_folder")
        kwargs.setdefault("details", {"file_count": file_count, "subfolder_count": subfolder_count})
        super().__init__(message, **kwargs)
        self.file_count = file_count
        self.subfolder_count = subfolder_count


class CycleError(AppError):
    """Move would make a folder its own ancestor"""

    def __init__(self, message: str = "Cannot move a folder into itself or its descendants", **kwargs):
        kwargs.setdefault("status_code", status.HTTP_409_CONFLICT)
        kwargs.setdefault("code", "cycle")
        super().__init__(message, **kwargs)


class ValidationError(AppError):
    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("status_code", status.HTTP_422_UNPROCESSABLE_ENTITY)
        kwargs.setdefault("code", "validation_error")
        super().__init__(message, **kwargs)


class LockTimeoutError(AppError):
    def __init__(self, message: str = "Another change to this library is in progress, try again", **kwargs):
        kwargs.setdefault("status_code", status.HTTP_409_CONFLICT)
        kwargs.setdefault("code", "lock_timeout")
        super().__init__(message, **kwargs)


class PropagationError(AppError):
    """Path propagation stopped partway; re-running it converges"""

    def __init__(self, message: str, *, report: Any = None, **kwargs):
        kwargs.setdefault("status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)
        kwargs.setdefault("code", "propagation_incomplete")
        if report is not None:
            kwargs.setdefault("details", {"report": report.model_dump(mode="json")})
        super().__init__(message, **kwargs)
        self.report = report
