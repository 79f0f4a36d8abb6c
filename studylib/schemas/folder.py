from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FolderCreate(BaseModel):
    """Internal schema for creating folder with all required fields"""
    owner_id: str
    name: str
    parent_folder_id: Optional[str] = None
    path: List[str]


class FolderUpdate(BaseModel):
    """Schema for updating folder; unset fields are left untouched"""
    name: Optional[str] = None
    parent_folder_id: Optional[str] = None
    path: Optional[List[str]] = None


class FolderResponse(BaseModel):
    """Schema for returning folder information"""
    id: str
    owner_id: str
    name: str
    parent_folder_id: Optional[str] = None
    path: List[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: Any) -> str:
        return str(v)


class FolderTreeNode(BaseModel):
    id: str
    name: str
    path: List[str]
    parent_folder_id: Optional[str] = None
    children: List["FolderTreeNode"] = Field(default_factory=list)


class CreateFolderRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Folder name")
    parent_folder_id: Optional[str] = Field(None, description="Parent folder ID, omit for root")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "Biology", "parent_folder_id": "665f1f77bcf86cd799439011"}
        }
    )


class RenameFolderRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="New folder name")


class MoveFolderRequest(BaseModel):
    parent_folder_id: Optional[str] = Field(None, description="New parent folder ID, null for root")


class BreadcrumbResponse(BaseModel):
    folder_id: Optional[str] = None
    path: List[str]
