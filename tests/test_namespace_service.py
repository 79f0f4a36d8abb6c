"""Tests for the locked entry points and subtree deletion."""

import asyncio

import pytest

from studylib.core.exceptions import (
    LockTimeoutError,
    NonEmptyFolderError,
    NotFoundError,
    UnauthorizedError,
)
from studylib.schemas import ItemStatus

pytestmark = pytest.mark.asyncio

OWNER = "user_1"


class TestDeleteSubtree:
    async def test_strict_then_full_delete(self, namespace, folder_crud, file_crud, blob_store):
        x = await namespace.create_folder(OWNER, "X")
        y = await namespace.create_folder(OWNER, "Y", x.id)
        top = file_crud.add(OWNER, x.id)
        nested = file_crud.add(OWNER, y.id)

        with pytest.raises(NonEmptyFolderError):
            await namespace.delete_folder(x.id, OWNER)

        report = await namespace.delete_subtree(x.id, OWNER)

        assert report.folder_id == x.id
        assert report.folders_deleted == 2
        assert report.files.deleted == 2
        assert report.summary() == "deleted 2 of 2 files and 2 folders"
        assert folder_crud.rows == {}
        assert file_crud.rows == {}
        assert sorted(blob_store.deleted) == sorted([top.storage_path, nested.storage_path])

    async def test_orphaned_blob_does_not_block_folders(self, namespace, folder_crud, file_crud, blob_store):
        x = await namespace.create_folder(OWNER, "X")
        file = file_crud.add(OWNER, x.id)
        blob_store.fail_for.add(file.storage_path)

        report = await namespace.delete_subtree(x.id, OWNER)

        assert report.folders_deleted == 1
        assert [r.status for r in report.files.results] == [ItemStatus.METADATA_ONLY]
        assert folder_crud.rows == {}

    async def test_failed_record_keeps_folders_until_retry(self, namespace, folder_crud, file_crud):
        x = await namespace.create_folder(OWNER, "X")
        y = await namespace.create_folder(OWNER, "Y", x.id)
        stuck = file_crud.add(OWNER, y.id)
        file_crud.add(OWNER, x.id)
        file_crud.fail_delete_for.add(stuck.id)

        report = await namespace.delete_subtree(x.id, OWNER)

        assert report.folders_deleted == 0
        assert report.files.deleted == 1
        assert set(folder_crud.rows) == {x.id, y.id}
        assert list(file_crud.rows) == [stuck.id]

        file_crud.fail_delete_for.clear()
        retry = await namespace.delete_subtree(x.id, OWNER)

        assert retry.files.deleted == 1
        assert retry.folders_deleted == 2
        assert folder_crud.rows == {}
        assert file_crud.rows == {}

    async def test_foreign_subtree(self, namespace, file_crud):
        foreign = await namespace.create_folder("user_2", "Private")
        file_crud.add("user_2", foreign.id)

        with pytest.raises(UnauthorizedError):
            await namespace.delete_subtree(foreign.id, OWNER)

        assert len(file_crud.rows) == 1

    async def test_missing_subtree(self, namespace):
        with pytest.raises(NotFoundError):
            await namespace.delete_subtree("missing", OWNER)


class TestLockedOperations:
    async def test_concurrent_moves_leave_consistent_paths(self, namespace, folder_crud):
        a = await namespace.create_folder(OWNER, "A")
        b = await namespace.create_folder(OWNER, "B", a.id)
        c = await namespace.create_folder(OWNER, "C", b.id)
        target = await namespace.create_folder(OWNER, "T")

        await asyncio.gather(
            namespace.rename_folder(a.id, OWNER, "A2"),
            namespace.move_folder(b.id, OWNER, target.id),
        )

        assert folder_crud.rows[b.id].path == ["T", "B"]
        assert folder_crud.rows[c.id].path == ["T", "B", "C"]
        assert folder_crud.rows[a.id].path == ["A2"]

    async def test_operations_hold_the_owner_lock(self, namespace, locks):
        a = await namespace.create_folder(OWNER, "A")
        locks.blocking_timeout = 0.05

        async with locks.hold(OWNER):
            with pytest.raises(LockTimeoutError):
                await namespace.rename_folder(a.id, OWNER, "A2")

        assert (await namespace.folders.get(a.id, OWNER)).name == "A"

    async def test_file_moves_go_through_namespace(self, namespace, file_crud):
        folder = await namespace.create_folder(OWNER, "A")
        first = file_crud.add(OWNER, None)
        second = file_crud.add(OWNER, None)

        moved = await namespace.move_file(first.id, OWNER, folder.id)
        report = await namespace.move_files([second.id], OWNER, folder.id)
        result = await namespace.delete_file(first.id, OWNER)

        assert moved.folder_id == folder.id
        assert report.succeeded == 1
        assert result.status == ItemStatus.OK

    async def test_repair_paths(self, namespace, folder_crud):
        a = await namespace.create_folder(OWNER, "A")
        b = await namespace.create_folder(OWNER, "B", a.id)
        folder_crud.rows[b.id].path = ["Stale", "B"]

        report = await namespace.repair_paths(OWNER)

        assert report.updated == 1
        assert folder_crud.rows[b.id].path == ["A", "B"]
