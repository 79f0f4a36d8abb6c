from typing import List, Optional

from studylib.crud.base import BaseCRUD
from studylib.models.file import File
from studylib.schemas.file import FileUpdate
from pydantic import BaseModel


class FileCRUD(BaseCRUD[File, BaseModel, FileUpdate]):
    def __init__(self):
        super().__init__(File)

    async def get_by_folder(self, owner_id: str, folder_id: Optional[str]) -> List[File]:
        """Files placed directly in a folder; folder_id=None lists root files"""
        return await self.model.find({
            "owner_id": owner_id,
            "folder_id": folder_id,
        }).to_list()

    async def count_in_folder(self, owner_id: str, folder_id: str) -> int:
        return await self.model.find({
            "owner_id": owner_id,
            "folder_id": folder_id,
        }).count()


file_crud = FileCRUD()
