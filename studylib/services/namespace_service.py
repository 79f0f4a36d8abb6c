"""Entry point for structural changes to a user's library.

Wraps the folder and file services so that every mutation of one owner's tree
runs under that owner's lock, and offers ``delete_subtree`` which removes the
files of a subtree before the folders that hold them.
"""
from typing import List, Optional

from studylib.models.file import File
from studylib.models.folder import Folder
from studylib.schemas import BulkOperationReport, ItemResult, PropagationReport, SubtreeDeletionReport
from studylib.services.breadcrumb_service import BreadcrumbResolver
from studylib.services.file_service import FileAssociationService
from studylib.services.folder_service import FolderService
from studylib.services.lock_service import OwnerLockManager, owner_locks
from studylib.utils import get_logger, log_with_context

logger = get_logger(__name__)


class NamespaceService:
    def __init__(
        self,
        folders: Optional[FolderService] = None,
        files: Optional[FileAssociationService] = None,
        locks: Optional[OwnerLockManager] = None,
    ):
        self.folders = folders or FolderService()
        self.files = files or FileAssociationService(folders=self.folders)
        self.breadcrumbs = BreadcrumbResolver(self.folders)
        self.locks = locks or owner_locks

    async def create_folder(self, owner_id: str, name: str, parent_folder_id: Optional[str] = None) -> Folder:
        async with self.locks.hold(owner_id):
            return await self.folders.create(owner_id, name, parent_folder_id)

    async def rename_folder(self, folder_id: str, owner_id: str, new_name: str) -> Folder:
        async with self.locks.hold(owner_id):
            return await self.folders.rename(folder_id, owner_id, new_name)

    async def move_folder(self, folder_id: str, owner_id: str, new_parent_folder_id: Optional[str]) -> Folder:
        async with self.locks.hold(owner_id):
            return await self.folders.move(folder_id, owner_id, new_parent_folder_id)

    async def delete_folder(self, folder_id: str, owner_id: str) -> bool:
        async with self.locks.hold(owner_id):
            return await self.folders.delete(folder_id, owner_id)

    async def delete_subtree(self, folder_id: str, owner_id: str) -> SubtreeDeletionReport:
        """Delete a folder, its descendant folders and all their files

        Folder records are removed only when every file record in the subtree
        is gone; otherwise the folders stay so the operation can be retried.
        """
        async with self.locks.hold(owner_id):
            await self.folders.get(folder_id, owner_id)
            report = SubtreeDeletionReport(folder_id=folder_id)

            report.files = await self.files.delete_files_in_folder_recursively(folder_id, owner_id)
            if report.files.failed:
                logger.warning(
                    f"[SUBTREE_DELETE] Keeping folders under {folder_id}: "
                    f"{len(report.files.failed)} file record(s) could not be deleted"
                )
                return report

            report.folders_deleted = await self.folders.delete_recursively(folder_id, owner_id)
            log_with_context(
                logger, "info", f"[SUBTREE_DELETE] {report.summary()}",
                owner_id=owner_id, folder_id=folder_id, operation="delete_subtree",
            )
            return report

    async def repair_paths(self, owner_id: str) -> PropagationReport:
        async with self.locks.hold(owner_id):
            return await self.folders.propagator.repair(owner_id)

    async def move_file(self, file_id: str, owner_id: str, target_folder_id: Optional[str]) -> File:
        async with self.locks.hold(owner_id):
            return await self.files.move_file(file_id, owner_id, target_folder_id)

    async def move_files(self, file_ids: List[str], owner_id: str, target_folder_id: Optional[str]) -> BulkOperationReport:
        async with self.locks.hold(owner_id):
            return await self.files.move_files(file_ids, owner_id, target_folder_id)

    async def delete_file(self, file_id: str, owner_id: str) -> ItemResult:
        async with self.locks.hold(owner_id):
            return await self.files.delete_file(file_id, owner_id)
