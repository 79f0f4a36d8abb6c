from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from studylib.api.deps import get_namespace_service
from studylib.core.exceptions import AppError
from studylib.schemas import (
    BreadcrumbResponse,
    BulkOperationReport,
    FileResponse,
    ItemResult,
    ItemStatus,
    MoveFileRequest,
    MoveFilesRequest,
    RenameFileRequest,
)
from studylib.schemas.response import ApiResponse
from studylib.services import NamespaceService
from studylib.utils import multi_status, ok
from studylib.utils.verify_token import get_owner_id

router = APIRouter()


def _file(file) -> dict:
    return FileResponse.model_validate(file).model_dump(mode="json")


@router.get("", response_model=ApiResponse[List[FileResponse]])
async def list_files(
    folder_id: Optional[str] = Query(None, description="Folder to list, omit for root"),
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    files = await namespace.files.list_by_folder(folder_id, owner_id)
    return ok(data=[_file(f) for f in files], message="Files listed successfully")


@router.post("/move", response_model=ApiResponse[BulkOperationReport])
async def move_files(
    body: MoveFilesRequest,
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    """Move several files; partial failures return 207 with per-file results"""
    report = await namespace.move_files(body.file_ids, owner_id, body.folder_id)
    return multi_status(
        data=report,
        message=report.summary("Moved"),
        partial=bool(report.failed),
    )


@router.put("/{file_id}/move", response_model=ApiResponse[FileResponse])
async def move_file(
    file_id: str,
    body: MoveFileRequest,
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    file = await namespace.move_file(file_id, owner_id, body.folder_id)
    return ok(data=_file(file), message="File moved successfully")


@router.put("/{file_id}/rename", response_model=ApiResponse[FileResponse])
async def rename_file(
    file_id: str,
    body: RenameFileRequest,
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    file = await namespace.files.rename_file(file_id, owner_id, body.name)
    return ok(data=_file(file), message="File renamed successfully")


@router.delete("/{file_id}", response_model=ApiResponse[ItemResult])
async def delete_file(
    file_id: str,
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    result = await namespace.delete_file(file_id, owner_id)
    if result.status == ItemStatus.FAILED:
        raise AppError(result.error, status_code=HTTP_500_INTERNAL_SERVER_ERROR, code="delete_failed", field="file_id")
    if result.status == ItemStatus.METADATA_ONLY:
        return ok(data=result, message="File deleted, stored object could not be removed")
    return ok(data=result, message="File deleted successfully")


@router.get("/{file_id}/breadcrumb", response_model=ApiResponse[BreadcrumbResponse])
async def get_file_breadcrumb(
    file_id: str,
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    file = await namespace.files.get(file_id, owner_id)
    path = await namespace.files.get_file_breadcrumb(file_id, owner_id)
    return ok(data=BreadcrumbResponse(folder_id=file.folder_id, path=path or []))
