from typing import Any, Dict, Optional

from starlette.responses import JSONResponse
from starlette import status

from studylib.schemas.response import ApiResponse


def ok(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
    headers: Optional[Dict[str, str]] = None,
):
    body = ApiResponse[Any](success=True, message=message, data=data).model_dump(mode="json", exclude_none=True)
    return JSONResponse(content=body, status_code=status_code, headers=headers)


def created(
    data: Any = None,
    message: str = "Created",
    headers: Optional[Dict[str, str]] = None,
):
    body = ApiResponse[Any](success=True, message=message, data=data).model_dump(mode="json", exclude_none=True)
    return JSONResponse(content=body, status_code=status.HTTP_201_CREATED, headers=headers)


def multi_status(
    data: Any = None,
    message: Optional[str] = None,
    partial: bool = False,
):
    """Bulk outcome: 200 when every item succeeded, 207 when some failed"""
    status_code = status.HTTP_207_MULTI_STATUS if partial else status.HTTP_200_OK
    body = ApiResponse[Any](success=not partial, message=message, data=data).model_dump(mode="json", exclude_none=True)
    return JSONResponse(content=body, status_code=status_code)

