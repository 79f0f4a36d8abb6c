from typing import List

from fastapi import APIRouter, Depends, Query

from studylib.api.deps import get_namespace_service
from studylib.schemas import (
    BreadcrumbResponse,
    CreateFolderRequest,
    FolderResponse,
    FolderTreeNode,
    MoveFolderRequest,
    PropagationReport,
    RenameFolderRequest,
    SubtreeDeletionReport,
)
from studylib.schemas.response import ApiResponse
from studylib.services import NamespaceService
from studylib.utils import created, multi_status, ok
from studylib.utils.verify_token import get_owner_id

router = APIRouter()


def _folder(folder) -> dict:
    return FolderResponse.model_validate(folder).model_dump(mode="json")


@router.post("", response_model=ApiResponse[FolderResponse], status_code=201)
async def create_folder(
    body: CreateFolderRequest,
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    folder = await namespace.create_folder(owner_id, body.name, body.parent_folder_id)
    return created(_folder(folder), message="Folder created successfully")


@router.get("", response_model=ApiResponse[List[FolderResponse]])
async def list_root_folders(
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    folders = await namespace.folders.list_root(owner_id)
    return ok(data=[_folder(f) for f in folders], message="Folders listed successfully")


@router.get("/all", response_model=ApiResponse[List[FolderResponse]])
async def list_all_folders(
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    folders = await namespace.folders.list_all(owner_id)
    return ok(data=[_folder(f) for f in folders], message="Folders listed successfully")


@router.get("/tree", response_model=ApiResponse[List[FolderTreeNode]])
async def get_folder_tree(
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    tree = await namespace.folders.get_tree(owner_id)
    return ok(data=tree, message="Folder tree retrieved successfully")


@router.post("/repair-paths", response_model=ApiResponse[PropagationReport])
async def repair_paths(
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    """Recompute every folder path of the caller from names and parent links"""
    report = await namespace.repair_paths(owner_id)
    return ok(data=report, message=f"Repaired {report.updated} folder path(s)")


@router.get("/{folder_id}", response_model=ApiResponse[FolderResponse])
async def get_folder(
    folder_id: str,
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    folder = await namespace.folders.get(folder_id, owner_id)
    return ok(data=_folder(folder))


@router.get("/{folder_id}/children", response_model=ApiResponse[List[FolderResponse]])
async def list_child_folders(
    folder_id: str,
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    folders = await namespace.folders.list_children(folder_id, owner_id)
    return ok(data=[_folder(f) for f in folders], message="Folders listed successfully")


@router.get("/{folder_id}/breadcrumb", response_model=ApiResponse[BreadcrumbResponse])
async def get_folder_breadcrumb(
    folder_id: str,
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    path = await namespace.breadcrumbs.resolve(folder_id, owner_id)
    return ok(data=BreadcrumbResponse(folder_id=folder_id, path=path))


@router.put("/{folder_id}/rename", response_model=ApiResponse[FolderResponse])
async def rename_folder(
    folder_id: str,
    body: RenameFolderRequest,
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    folder = await namespace.rename_folder(folder_id, owner_id, body.name)
    return ok(data=_folder(folder), message="Folder renamed successfully")


@router.put("/{folder_id}/move", response_model=ApiResponse[FolderResponse])
async def move_folder(
    folder_id: str,
    body: MoveFolderRequest,
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    folder = await namespace.move_folder(folder_id, owner_id, body.parent_folder_id)
    return ok(data=_folder(folder), message="Folder moved successfully")


@router.delete("/{folder_id}", response_model=ApiResponse[SubtreeDeletionReport])
async def delete_folder(
    folder_id: str,
    recursive: bool = Query(False, description="Also delete subfolders and files"),
    owner_id: str = Depends(get_owner_id),
    namespace: NamespaceService = Depends(get_namespace_service),
):
    if not recursive:
        await namespace.delete_folder(folder_id, owner_id)
        return ok(message="Folder deleted successfully")

    report = await namespace.delete_subtree(folder_id, owner_id)
    return multi_status(
        data=report,
        message=report.summary().capitalize(),
        partial=bool(report.files.failed or report.files.orphaned_blobs),
    )
