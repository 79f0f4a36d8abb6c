"""Tests for file placement and two-phase (record, then blob) deletion."""

import pytest

from studylib.configs.settings import settings
from studylib.core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from studylib.schemas import ItemStatus

pytestmark = pytest.mark.asyncio

OWNER = "user_1"
OTHER_OWNER = "user_2"


class TestMoveFile:
    async def test_move_into_folder_and_back_to_root(self, folder_service, file_service, file_crud):
        folder = await folder_service.create(OWNER, "Biology")
        file = file_crud.add(OWNER, None)

        moved = await file_service.move_file(file.id, OWNER, folder.id)
        assert moved.folder_id == folder.id

        moved = await file_service.move_file(file.id, OWNER, None)
        assert moved.folder_id is None

    async def test_missing_file(self, file_service):
        with pytest.raises(NotFoundError):
            await file_service.move_file("missing", OWNER, None)

    async def test_foreign_file(self, file_service, file_crud):
        file = file_crud.add(OTHER_OWNER, None)

        with pytest.raises(UnauthorizedError):
            await file_service.move_file(file.id, OWNER, None)

    async def test_missing_target_folder(self, file_service, file_crud):
        file = file_crud.add(OWNER, None)

        with pytest.raises(NotFoundError) as exc_info:
            await file_service.move_file(file.id, OWNER, "missing")

        assert exc_info.value.field == "folder_id"
        assert file_crud.rows[file.id].folder_id is None

    async def test_foreign_target_folder(self, folder_service, file_service, file_crud):
        foreign = await folder_service.create(OTHER_OWNER, "Private")
        file = file_crud.add(OWNER, None)

        with pytest.raises(UnauthorizedError):
            await file_service.move_file(file.id, OWNER, foreign.id)


class TestMoveFiles:
    async def test_per_item_results(self, folder_service, file_service, file_crud):
        folder = await folder_service.create(OWNER, "Biology")
        mine = file_crud.add(OWNER, None)
        foreign = file_crud.add(OTHER_OWNER, None)

        report = await file_service.move_files([mine.id, "missing", foreign.id], OWNER, folder.id)

        assert report.total == 3
        assert report.succeeded == 1
        assert [r.id for r in report.failed] == ["missing", foreign.id]
        assert all(r.error for r in report.failed)
        assert file_crud.rows[mine.id].folder_id == folder.id
        assert file_crud.rows[foreign.id].folder_id is None
        assert report.summary("moved") == "moved 1 of 3 items"

    async def test_bad_target_fails_whole_request(self, file_service, file_crud):
        file = file_crud.add(OWNER, None)

        with pytest.raises(NotFoundError):
            await file_service.move_files([file.id], OWNER, "missing")

    async def test_bulk_limit(self, file_service, monkeypatch):
        monkeypatch.setattr(settings, "NAMESPACE_BULK_LIMIT", 2)

        with pytest.raises(ValidationError):
            await file_service.move_files(["a", "b", "c"], OWNER, None)


class TestDeleteFile:
    async def test_record_and_blob_removed(self, file_service, file_crud, blob_store):
        file = file_crud.add(OWNER, None)

        result = await file_service.delete_file(file.id, OWNER)

        assert result.status == ItemStatus.OK
        assert file.id not in file_crud.rows
        assert blob_store.deleted == [file.storage_path]

    async def test_blob_failure_is_metadata_only(self, file_service, file_crud, blob_store):
        file = file_crud.add(OWNER, None)
        blob_store.fail_for.add(file.storage_path)

        result = await file_service.delete_file(file.id, OWNER)

        assert result.status == ItemStatus.METADATA_ONLY
        assert result.succeeded
        assert "storage unavailable" in result.error
        assert file.id not in file_crud.rows

    async def test_record_failure_skips_blob(self, file_service, file_crud, blob_store):
        file = file_crud.add(OWNER, None)
        file_crud.fail_delete_for.add(file.id)

        result = await file_service.delete_file(file.id, OWNER)

        assert result.status == ItemStatus.FAILED
        assert not result.succeeded
        assert file.id in file_crud.rows
        assert blob_store.deleted == []

    async def test_foreign_file(self, file_service, file_crud):
        file = file_crud.add(OTHER_OWNER, None)

        with pytest.raises(UnauthorizedError):
            await file_service.delete_file(file.id, OWNER)


class TestDeleteFilesInFolder:
    async def test_only_direct_files(self, folder_service, file_service, file_crud):
        parent = await folder_service.create(OWNER, "A")
        child = await folder_service.create(OWNER, "B", parent.id)
        file_crud.add(OWNER, parent.id)
        nested = file_crud.add(OWNER, child.id)

        report = await file_service.delete_files_in_folder(parent.id, OWNER)

        assert report.deleted == 1
        assert list(file_crud.rows) == [nested.id]

    async def test_recursive_sweep_with_partial_failures(self, folder_service, file_service, file_crud, blob_store):
        a = await folder_service.create(OWNER, "A")
        b = await folder_service.create(OWNER, "B", a.id)
        c = await folder_service.create(OWNER, "C", b.id)
        ok_file = file_crud.add(OWNER, a.id)
        blob_broken = file_crud.add(OWNER, b.id)
        record_broken = file_crud.add(OWNER, c.id)
        outside = file_crud.add(OWNER, None)
        blob_store.fail_for.add(blob_broken.storage_path)
        file_crud.fail_delete_for.add(record_broken.id)

        report = await file_service.delete_files_in_folder_recursively(a.id, OWNER)

        assert report.total == 3
        assert report.deleted == 2
        assert [r.id for r in report.orphaned_blobs] == [blob_broken.id]
        assert [r.id for r in report.failed] == [record_broken.id]
        assert set(file_crud.rows) == {record_broken.id, outside.id}
        assert blob_store.deleted == [ok_file.storage_path]

    async def test_sweep_of_missing_folder(self, file_service):
        with pytest.raises(NotFoundError):
            await file_service.delete_files_in_folder_recursively("missing", OWNER)


class TestListAndRename:
    async def test_list_by_folder_and_root(self, folder_service, file_service, file_crud):
        folder = await folder_service.create(OWNER, "A")
        inside = file_crud.add(OWNER, folder.id)
        at_root = file_crud.add(OWNER, None)
        file_crud.add(OTHER_OWNER, None)

        assert [f.id for f in await file_service.list_by_folder(folder.id, OWNER)] == [inside.id]
        assert [f.id for f in await file_service.list_root(OWNER)] == [at_root.id]
        assert [f.id for f in await file_service.list_by_folder(None, OWNER)] == [at_root.id]

    async def test_list_foreign_folder(self, folder_service, file_service):
        foreign = await folder_service.create(OTHER_OWNER, "Private")

        with pytest.raises(UnauthorizedError):
            await file_service.list_by_folder(foreign.id, OWNER)

    async def test_rename_keeps_storage_path(self, file_service, file_crud):
        file = file_crud.add(OWNER, None, name="draft.pdf")
        storage_path = file.storage_path

        renamed = await file_service.rename_file(file.id, OWNER, "  final.pdf ")

        assert renamed.original_name == "final.pdf"
        assert renamed.storage_path == storage_path

    async def test_rename_blank(self, file_service, file_crud):
        file = file_crud.add(OWNER, None)

        with pytest.raises(ValidationError):
            await file_service.rename_file(file.id, OWNER, "   ")
