import asyncio
from typing import Optional

from minio import Minio
from minio.error import S3Error

from studylib.configs.settings import settings
from studylib.utils import get_logger

logger = get_logger(__name__)

# Object already gone: deleting it again is a success
_MISSING_CODES = {"NoSuchKey", "NoSuchObject"}


class MinIOClientService:
    """Blob store used by the library; the namespace core only deletes objects"""

    def __init__(self, access_key: Optional[str] = None, secret_key: Optional[str] = None, client: Optional[Minio] = None):
        self.access_key = access_key or settings.MINIO_ACCESS_KEY
        self.secret_key = secret_key or settings.MINIO_SECRET_KEY

        self.client = client or Minio(
            endpoint=settings.MINIO_URL.replace(
                "http://", "").replace("https://", ""),
            access_key=self.access_key,
            secret_key=self.secret_key,
            secure=settings.MINIO_SSL
        )

    async def async_delete_object(self, bucket_name: str, object_name: str) -> None:
        """Delete an object, raising on storage errors (async)

        A missing object is treated as already deleted, so retries are safe.
        """
        try:
            await asyncio.to_thread(self.client.remove_object, bucket_name, object_name)
        except S3Error as e:
            if e.code in _MISSING_CODES:
                logger.info(f"[BLOB_DELETE] Object already absent - bucket: {bucket_name}, object: {object_name}")
                return
            raise


_blob_store: Optional[MinIOClientService] = None


def get_blob_store() -> MinIOClientService:
    """Lazily build the shared MinIO client from settings"""
    global _blob_store
    if _blob_store is None:
        _blob_store = MinIOClientService()
    return _blob_store
