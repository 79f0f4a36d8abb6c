"""In-memory stand-ins for the Mongo CRUDs and the MinIO client.

The fakes keep the same method names and return shapes as ``FolderCRUD`` /
``FileCRUD`` / ``MinIOClientService`` so that services run unchanged. Each
fake has a ``fail_*`` set used to inject store failures for specific ids.
"""
import itertools
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import pytest
from pydantic import BaseModel

from studylib.services import (
    FileAssociationService,
    FolderService,
    NamespaceService,
    OwnerLockManager,
)


@dataclass
class FolderRecord:
    id: str
    owner_id: str
    name: str
    parent_folder_id: Optional[str]
    path: List[str]
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class FileRecord:
    id: str
    owner_id: str
    folder_id: Optional[str]
    original_name: str
    bucket: str = "library"
    storage_path: str = ""
    mime_type: str = "application/pdf"
    file_size: Optional[int] = 1024
    download_url: Optional[str] = None
    category: Optional[str] = "document"
    tags: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


def _apply(record, obj_in) -> None:
    data = obj_in.model_dump(exclude_unset=True) if isinstance(obj_in, BaseModel) else dict(obj_in)
    for key, value in data.items():
        setattr(record, key, value)
    record.updated_at = datetime.utcnow()


class FakeFolderCRUD:
    def __init__(self):
        self.rows: Dict[str, FolderRecord] = {}
        self.bulk_calls: List[Dict[str, List[str]]] = []
        self.fail_bulk_for: set = set()
        self.fail_delete_for: set = set()
        self._ids = itertools.count(1)

    async def get_by_id(self, id: str) -> Optional[FolderRecord]:
        return self.rows.get(id)

    async def create(self, obj_in) -> FolderRecord:
        record = FolderRecord(id=f"folder{next(self._ids)}", **obj_in.model_dump())
        self.rows[record.id] = record
        return record

    async def update(self, db_obj: FolderRecord, obj_in) -> FolderRecord:
        _apply(db_obj, obj_in)
        return db_obj

    async def get_children(self, owner_id: str, parent_folder_id: Optional[str]) -> List[FolderRecord]:
        return sorted(
            (r for r in self.rows.values() if r.owner_id == owner_id and r.parent_folder_id == parent_folder_id),
            key=lambda r: r.name,
        )

    async def count_children(self, owner_id: str, parent_folder_id: str) -> int:
        return len(await self.get_children(owner_id, parent_folder_id))

    async def list_by_owner(self, owner_id: str) -> List[FolderRecord]:
        return sorted((r for r in self.rows.values() if r.owner_id == owner_id), key=lambda r: r.name)

    async def bulk_update_paths(self, owner_id: str, paths: Dict[str, List[str]]) -> int:
        if self.fail_bulk_for & set(paths):
            raise ConnectionError("bulk write interrupted")
        self.bulk_calls.append(dict(paths))
        modified = 0
        for folder_id, path in paths.items():
            record = self.rows.get(folder_id)
            if record is not None and record.owner_id == owner_id:
                record.path = list(path)
                modified += 1
        return modified

    async def delete_by_id(self, owner_id: str, folder_id: str) -> bool:
        if folder_id in self.fail_delete_for:
            raise ConnectionError("delete timed out")
        record = self.rows.get(folder_id)
        if record is None or record.owner_id != owner_id:
            return False
        del self.rows[folder_id]
        return True

    def add(self, owner_id: str, name: str, parent_folder_id: Optional[str], path: List[str], id: Optional[str] = None) -> FolderRecord:
        """Insert a row directly, bypassing the service checks"""
        record = FolderRecord(
            id=id or f"folder{next(self._ids)}",
            owner_id=owner_id,
            name=name,
            parent_folder_id=parent_folder_id,
            path=list(path),
        )
        self.rows[record.id] = record
        return record


class FakeFileCRUD:
    def __init__(self):
        self.rows: Dict[str, FileRecord] = {}
        self.fail_delete_for: set = set()
        self._ids = itertools.count(1)

    async def get_by_id(self, id: str) -> Optional[FileRecord]:
        return self.rows.get(id)

    async def update(self, db_obj: FileRecord, obj_in) -> FileRecord:
        _apply(db_obj, obj_in)
        return db_obj

    async def delete(self, db_obj: FileRecord) -> None:
        if db_obj.id in self.fail_delete_for:
            raise ConnectionError("delete timed out")
        self.rows.pop(db_obj.id, None)

    async def get_by_folder(self, owner_id: str, folder_id: Optional[str]) -> List[FileRecord]:
        return [r for r in self.rows.values() if r.owner_id == owner_id and r.folder_id == folder_id]

    async def count_in_folder(self, owner_id: str, folder_id: str) -> int:
        return len(await self.get_by_folder(owner_id, folder_id))

    def add(self, owner_id: str, folder_id: Optional[str], name: str = "lecture.pdf") -> FileRecord:
        file_id = f"file{next(self._ids)}"
        record = FileRecord(
            id=file_id,
            owner_id=owner_id,
            folder_id=folder_id,
            original_name=name,
            storage_path=f"{owner_id}/{file_id}/{name}",
        )
        self.rows[record.id] = record
        return record


class FakeBlobStore:
    def __init__(self):
        self.deleted: List[str] = []
        self.fail_for: set = set()

    async def async_delete_object(self, bucket_name: str, object_name: str) -> None:
        if object_name in self.fail_for:
            raise ConnectionError("storage unavailable")
        self.deleted.append(object_name)


@pytest.fixture
def folder_crud():
    return FakeFolderCRUD()


@pytest.fixture
def file_crud():
    return FakeFileCRUD()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def folder_service(folder_crud, file_crud):
    return FolderService(crud=folder_crud, files=file_crud)


@pytest.fixture
def file_service(file_crud, folder_service, blob_store):
    return FileAssociationService(crud=file_crud, folders=folder_service, blob_store=blob_store)


@pytest.fixture
def locks():
    return OwnerLockManager(backend="local", blocking_timeout=1.0)


@pytest.fixture
def namespace(folder_service, file_service, locks):
    return NamespaceService(folders=folder_service, files=file_service, locks=locks)
