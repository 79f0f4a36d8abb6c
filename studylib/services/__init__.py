from .minio_client_service import MinIOClientService, get_blob_store
from .redis_service import redis_service
from .lock_service import OwnerLockManager, owner_locks
from .path_propagator import PathPropagator
from .folder_service import FolderService
from .file_service import FileAssociationService
from .breadcrumb_service import BreadcrumbResolver
from .namespace_service import NamespaceService

__all__ = [
    "MinIOClientService",
    "get_blob_store",
    "redis_service",
    "OwnerLockManager",
    "owner_locks",
    "PathPropagator",
    "FolderService",
    "FileAssociationService",
    "BreadcrumbResolver",
    "NamespaceService",
]
