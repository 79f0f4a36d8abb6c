from typing import List, Optional

from studylib.configs.settings import settings
from studylib.core.exceptions import AppError, NotFoundError, UnauthorizedError, ValidationError
from studylib.crud import FileCRUD, file_crud
from studylib.models.file import File
from studylib.schemas import (
    BulkOperationReport,
    DeletionReport,
    FileUpdate,
    ItemResult,
    ItemStatus,
)
from studylib.services.folder_service import FolderService
from studylib.services.minio_client_service import MinIOClientService, get_blob_store
from studylib.utils import get_logger

logger = get_logger(__name__)


class FileAssociationService:
    """Places files in folders and removes them together with their blobs"""

    def __init__(
        self,
        crud: Optional[FileCRUD] = None,
        folders: Optional[FolderService] = None,
        blob_store: Optional[MinIOClientService] = None,
    ):
        self.crud = crud or file_crud
        self.folders = folders or FolderService(files=self.crud)
        self._blob_store = blob_store

    @property
    def blob_store(self) -> MinIOClientService:
        if self._blob_store is None:
            self._blob_store = get_blob_store()
        return self._blob_store

    async def get(self, file_id: str, owner_id: str) -> File:
        file = await self.crud.get_by_id(file_id)
        if not file:
            raise NotFoundError("File not found", field="file_id")
        if file.owner_id != owner_id:
            logger.warning(f"[FILE] Unauthorized attempt - file_id: {file_id}, file_owner: {file.owner_id}, requester: {owner_id}")
            raise UnauthorizedError("Unauthorized: File does not belong to this user", field="file_id")
        return file

    async def _check_target(self, owner_id: str, folder_id: Optional[str]) -> None:
        if folder_id:
            try:
                await self.folders.get(folder_id, owner_id)
            except NotFoundError:
                raise NotFoundError("Target folder not found", field="folder_id")

    async def move_file(self, file_id: str, owner_id: str, target_folder_id: Optional[str]) -> File:
        """Move a file into a folder, or to root when ``target_folder_id`` is None"""
        file = await self.get(file_id, owner_id)
        await self._check_target(owner_id, target_folder_id)

        file = await self.crud.update(file, {"folder_id": target_folder_id or None})
        logger.info(f"[FILE_MOVE] Moved {file_id} to {target_folder_id or 'root'}")
        return file

    async def move_files(self, file_ids: List[str], owner_id: str, target_folder_id: Optional[str]) -> BulkOperationReport:
        """Move several files; each file succeeds or fails on its own"""
        if len(file_ids) > settings.NAMESPACE_BULK_LIMIT:
            raise ValidationError(
                f"Maximum {settings.NAMESPACE_BULK_LIMIT} files can be moved at once",
                field="file_ids",
            )
        # A bad target fails the whole request before anything moves
        await self._check_target(owner_id, target_folder_id)

        report = BulkOperationReport()
        for file_id in file_ids:
            try:
                file = await self.get(file_id, owner_id)
                await self.crud.update(file, {"folder_id": target_folder_id or None})
                report.results.append(ItemResult(id=file_id, status=ItemStatus.OK))
            except AppError as e:
                report.results.append(ItemResult(id=file_id, status=ItemStatus.FAILED, error=e.message))
            except Exception as e:
                logger.error(f"[FILE_MOVE] Failed to move file {file_id}: {str(e)}", exc_info=True)
                report.results.append(ItemResult(id=file_id, status=ItemStatus.FAILED, error=str(e)))

        logger.info(f"[FILE_MOVE] Batch move completed: {report.summary('moved')}")
        return report

    async def list_by_folder(self, folder_id: Optional[str], owner_id: str) -> List[File]:
        if folder_id:
            await self.folders.get(folder_id, owner_id)
        return await self.crud.get_by_folder(owner_id, folder_id or None)

    async def list_root(self, owner_id: str) -> List[File]:
        return await self.crud.get_by_folder(owner_id, None)

    async def rename_file(self, file_id: str, owner_id: str, new_name: str) -> File:
        """Rename file (only update database, keep MinIO object unchanged)"""
        if not new_name or not new_name.strip():
            raise ValidationError("File name is required", field="name")
        file = await self.get(file_id, owner_id)
        file = await self.crud.update(file, FileUpdate(original_name=new_name.strip()))
        logger.info(f"[FILE_RENAME] File renamed successfully: {file_id}")
        return file

    async def get_file_breadcrumb(self, file_id: str, owner_id: str) -> Optional[List[str]]:
        """Path of the folder holding a file; None when the file sits at root"""
        file = await self.get(file_id, owner_id)
        if not file.folder_id:
            return None
        try:
            folder = await self.folders.get(file.folder_id, owner_id)
        except NotFoundError:
            logger.warning(f"[FILE] File {file_id} points at missing folder {file.folder_id}")
            return None
        return list(folder.path)

    async def _delete_one(self, file: File) -> ItemResult:
        """Delete the metadata record, then the blob; the blob is kept if the record survives"""
        file_id = str(file.id)
        try:
            await self.crud.delete(file)
        except Exception as e:
            logger.error(f"[FILE_DELETE] Database deletion error - file_id: {file_id}: {str(e)}", exc_info=True)
            return ItemResult(id=file_id, status=ItemStatus.FAILED, error=f"Failed to delete file record: {str(e)}")

        try:
            await self.blob_store.async_delete_object(file.bucket, file.storage_path)
        except Exception as e:
            logger.error(
                f"[FILE_DELETE] MinIO deletion error - bucket: {file.bucket}, object: {file.storage_path}: {str(e)}",
                exc_info=True,
            )
            return ItemResult(id=file_id, status=ItemStatus.METADATA_ONLY, error=f"Failed to delete stored object: {str(e)}")

        return ItemResult(id=file_id, status=ItemStatus.OK)

    async def delete_file(self, file_id: str, owner_id: str) -> ItemResult:
        file = await self.get(file_id, owner_id)
        logger.info(f"[FILE_DELETE] Deleting {file_id} - name: {file.original_name}, path: {file.storage_path}")
        return await self._delete_one(file)

    async def _sweep_folder(self, owner_id: str, folder_id: str) -> DeletionReport:
        report = DeletionReport()
        for file in await self.crud.get_by_folder(owner_id, folder_id):
            report.results.append(await self._delete_one(file))
        return report

    async def delete_files_in_folder(self, folder_id: str, owner_id: str) -> DeletionReport:
        """Delete the files placed directly in a folder, best effort per file"""
        await self.folders.get(folder_id, owner_id)
        report = await self._sweep_folder(owner_id, folder_id)
        logger.info(f"[FILE_DELETE] Folder {folder_id}: {report.summary('deleted')}")
        return report

    async def delete_files_in_folder_recursively(self, folder_id: str, owner_id: str) -> DeletionReport:
        """Delete the files of a folder and of every descendant folder"""
        report = DeletionReport()
        for current in await self.folders.collect_subtree_ids(folder_id, owner_id):
            report.merge(await self._sweep_folder(owner_id, current))

        if report.failed or report.orphaned_blobs:
            logger.warning(
                f"[FILE_DELETE] Subtree {folder_id} completed with errors: {report.summary('deleted')}, "
                f"{len(report.orphaned_blobs)} blob(s) left behind"
            )
        else:
            logger.info(f"[FILE_DELETE] Subtree {folder_id}: {report.summary('deleted')}")
        return report
