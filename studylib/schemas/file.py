from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FileUpdate(BaseModel):
    """Schema for updating an existing file"""
    original_name: Optional[str] = Field(None, min_length=1, max_length=255)
    folder_id: Optional[str] = None


class FileResponse(BaseModel):
    """Schema for returning file information"""
    id: str = Field(..., description="Unique file identifier")
    owner_id: str = Field(..., description="User who owns the file")
    folder_id: Optional[str] = Field(None, description="Containing folder, null at root")
    bucket: str = Field(..., description="Bucket name in MinIO storage")
    storage_path: str = Field(..., description="Object name in MinIO storage")
    original_name: str
    mime_type: str
    file_size: Optional[int] = None
    download_url: Optional[str] = None
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: Any) -> str:
        return str(v)


class MoveFileRequest(BaseModel):
    folder_id: Optional[str] = Field(None, description="Target folder ID, null for root")


class MoveFilesRequest(BaseModel):
    file_ids: List[str] = Field(..., min_length=1, max_length=100, description="Files to move")
    folder_id: Optional[str] = Field(None, description="Target folder ID, null for root")

    @field_validator("file_ids")
    @classmethod
    def _dedupe(cls, v: List[str]) -> List[str]:
        # Keep first occurrence order
        return list(dict.fromkeys(v))

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "file_ids": ["665f1f77bcf86cd799439011", "665f1f77bcf86cd799439012"],
                "folder_id": None
            }
        }
    )


class RenameFileRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def _strip(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("File name cannot be empty")
        return v.strip()
