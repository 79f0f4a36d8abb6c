from typing import Optional, Annotated, List
from beanie import Document, Indexed
from pydantic import Field
from pymongo import IndexModel
from studylib.models.time_mixin import TimeMixin


class File(Document, TimeMixin):
    """Uploaded file or generated note placed somewhere in the library"""

    owner_id: Annotated[str, Indexed(str)] = Field(..., description="User who owns the file")
    folder_id: Optional[str] = Field(default=None, description="Containing folder ID, None at root")

    # Blob locator in MinIO
    bucket: str = Field(..., description="Bucket name in MinIO")
    storage_path: str = Field(..., description="Object name in MinIO")

    original_name: str = Field(..., description="Name shown in the library")
    mime_type: str = Field(default="application/octet-stream", description="File MIME type")
    file_size: Optional[int] = Field(None, description="File size (bytes)")
    download_url: Optional[str] = Field(None, description="Public URL to access the file")
    category: Optional[str] = Field(None, description="Library category, e.g. note or document")
    tags: List[str] = Field(default_factory=list)

    class Settings:
        name = "files"
        indexes = [
            IndexModel([("owner_id", 1), ("folder_id", 1)]),
        ]
