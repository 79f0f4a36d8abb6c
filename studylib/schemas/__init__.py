from studylib.schemas.folder import (
    FolderCreate,
    FolderUpdate,
    FolderResponse,
    FolderTreeNode,
    CreateFolderRequest,
    RenameFolderRequest,
    MoveFolderRequest,
    BreadcrumbResponse,
)
from studylib.schemas.file import (
    FileUpdate,
    FileResponse,
    MoveFileRequest,
    MoveFilesRequest,
    RenameFileRequest,
)
from studylib.schemas.result import (
    ItemStatus,
    ItemResult,
    BulkOperationReport,
    DeletionReport,
    PropagationReport,
    SubtreeDeletionReport,
)

__all__ = [
    "FolderCreate",
    "FolderUpdate",
    "FolderResponse",
    "FolderTreeNode",
    "CreateFolderRequest",
    "RenameFolderRequest",
    "MoveFolderRequest",
    "BreadcrumbResponse",
    "FileUpdate",
    "FileResponse",
    "MoveFileRequest",
    "MoveFilesRequest",
    "RenameFileRequest",
    "ItemStatus",
    "ItemResult",
    "BulkOperationReport",
    "DeletionReport",
    "PropagationReport",
    "SubtreeDeletionReport",
]
