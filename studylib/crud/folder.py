from datetime import datetime
from typing import Dict, List, Optional

from pymongo import UpdateOne

from studylib.configs.settings import settings
from studylib.crud.base import BaseCRUD, to_object_id
from studylib.models.folder import Folder
from studylib.schemas import FolderCreate, FolderUpdate


class FolderCRUD(BaseCRUD[Folder, FolderCreate, FolderUpdate]):
    def __init__(self):
        super().__init__(Folder)

    async def get_children(self, owner_id: str, parent_folder_id: Optional[str]) -> List[Folder]:
        """Direct subfolders of a folder; parent_folder_id=None lists root folders"""
        return await self.model.find({
            "owner_id": owner_id,
            "parent_folder_id": parent_folder_id,
        }).sort("name").to_list()

    async def count_children(self, owner_id: str, parent_folder_id: str) -> int:
        return await self.model.find({
            "owner_id": owner_id,
            "parent_folder_id": parent_folder_id,
        }).count()

    async def list_by_owner(self, owner_id: str) -> List[Folder]:
        """All folders of an owner"""
        return await self.model.find({"owner_id": owner_id}).sort("name").to_list()

    async def bulk_update_paths(self, owner_id: str, paths: Dict[str, List[str]]) -> int:
        """Write several folders' paths in one batch

        Args:
            owner_id: Owner guard added to every update filter
            paths: folder id -> new path

        Returns:
            Number of documents modified
        """
        if not paths:
            return 0

        now = datetime.utcnow()
        ops = [
            UpdateOne(
                {"_id": to_object_id(folder_id), "owner_id": owner_id},
                {"$set": {"path": path, "updated_at": now}},
            )
            for folder_id, path in paths.items()
        ]
        collection = self.model.get_motor_collection()

        if settings.MONGO_USE_TRANSACTIONS:
            async with await collection.database.client.start_session() as session:
                async with session.start_transaction():
                    result = await collection.bulk_write(ops, ordered=True, session=session)
        else:
            result = await collection.bulk_write(ops, ordered=True)
        return result.modified_count

    async def delete_by_id(self, owner_id: str, folder_id: str) -> bool:
        """Delete one folder record; False when it is already gone"""
        oid = to_object_id(folder_id)
        if oid is None:
            return False
        result = await self.model.find_one({"_id": oid, "owner_id": owner_id}).delete()
        return bool(result and result.deleted_count)


folder_crud = FolderCRUD()
