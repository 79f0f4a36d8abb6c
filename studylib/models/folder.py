from typing import Optional, Annotated, List
from beanie import Document, Indexed
from pydantic import Field
from pymongo import IndexModel
from studylib.models.time_mixin import TimeMixin


class Folder(Document, TimeMixin):
    """Library folder with a materialized path of ancestor names"""

    owner_id: Annotated[str, Indexed(str)] = Field(..., description="User who owns the folder")
    name: str = Field(..., description="Display name")
    parent_folder_id: Optional[str] = Field(default=None, description="Parent folder ID, None at root")
    path: List[str] = Field(default_factory=list, description="Names from root to this folder inclusive")

    class Settings:
        name = "folders"
        indexes = [
            IndexModel([("owner_id", 1), ("parent_folder_id", 1)]),
            IndexModel([("owner_id", 1), ("path", 1)]),
        ]
