import re
from collections import deque
from typing import Dict, List, Optional

from starlette import status

from studylib.configs.settings import settings
from studylib.core.exceptions import (
    AppError,
    CycleError,
    NonEmptyFolderError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from studylib.crud import FileCRUD, FolderCRUD, file_crud, folder_crud
from studylib.models.folder import Folder
from studylib.schemas import FolderCreate, FolderTreeNode
from studylib.services.path_propagator import PathPropagator
from studylib.utils import get_logger

logger = get_logger(__name__)

_INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


class FolderService:
    def __init__(
        self,
        crud: Optional[FolderCRUD] = None,
        files: Optional[FileCRUD] = None,
        propagator: Optional[PathPropagator] = None,
    ):
        self.crud = crud or folder_crud
        self.files = files or file_crud
        self.propagator = propagator or PathPropagator(self.crud)

    def _clean_name(self, name: str) -> str:
        if not name or not name.strip():
            raise ValidationError("Folder name is required", field="name")

        sanitized = _INVALID_NAME_CHARS.sub("_", name.strip())
        if sanitized != name.strip():
            logger.warning(f"Folder name sanitized: {name} -> {sanitized}")
        if len(sanitized) > settings.NAMESPACE_MAX_NAME_LENGTH:
            raise ValidationError(
                f"Folder name is longer than {settings.NAMESPACE_MAX_NAME_LENGTH} characters",
                field="name",
            )
        return sanitized

    def _check_depth(self, depth: int) -> None:
        if depth > settings.NAMESPACE_MAX_DEPTH:
            raise ValidationError(
                f"Folders cannot be nested deeper than {settings.NAMESPACE_MAX_DEPTH} levels",
                field="parent_folder_id",
            )

    async def get(self, folder_id: str, owner_id: str) -> Folder:
        """Load a folder and check that ``owner_id`` owns it"""
        folder = await self.crud.get_by_id(folder_id)
        if not folder:
            raise NotFoundError("Folder not found", field="folder_id")
        if folder.owner_id != owner_id:
            logger.warning(f"[FOLDER] Unauthorized access - folder_id: {folder_id}, owner: {folder.owner_id}, requester: {owner_id}")
            raise UnauthorizedError("Unauthorized: Folder does not belong to this user", field="folder_id")
        return folder

    async def create(self, owner_id: str, name: str, parent_folder_id: Optional[str] = None) -> Folder:
        """Create a folder at root or under ``parent_folder_id``"""
        name = self._clean_name(name)
        logger.info(f"[FOLDER_CREATE] Creating folder for user {owner_id}: {name} (parent: {parent_folder_id})")

        parent_path: List[str] = []
        if parent_folder_id:
            try:
                parent = await self.get(parent_folder_id, owner_id)
            except NotFoundError:
                raise NotFoundError("Parent folder not found", field="parent_folder_id")
            parent_path = list(parent.path)

        path = parent_path + [name]
        self._check_depth(len(path))

        try:
            folder = await self.crud.create(obj_in=FolderCreate(
                owner_id=owner_id,
                name=name,
                parent_folder_id=parent_folder_id or None,
                path=path,
            ))
        except Exception as e:
            logger.error(f"[FOLDER_CREATE] Folder creation failed: {str(e)}", exc_info=True)
            raise AppError(f"Failed to create folder: {str(e)}")

        logger.info(f"[FOLDER_CREATE] Folder created successfully: {folder.id}")
        return folder

    async def rename(self, folder_id: str, owner_id: str, new_name: str) -> Folder:
        """Rename a folder and rewrite the paths of its subtree"""
        folder = await self.get(folder_id, owner_id)
        new_name = self._clean_name(new_name)

        new_path = list(folder.path[:-1]) + [new_name]
        folder = await self.crud.update(folder, {"name": new_name, "path": new_path})
        logger.info(f"[FOLDER_RENAME] Renamed {folder_id} to {new_name}")

        await self.propagator.propagate(folder_id, owner_id, new_path)
        return folder

    async def move(self, folder_id: str, owner_id: str, new_parent_folder_id: Optional[str]) -> Folder:
        """Move a folder under another folder, or to root when ``new_parent_folder_id`` is None"""
        folder = await self.get(folder_id, owner_id)
        new_parent_folder_id = new_parent_folder_id or None

        if new_parent_folder_id == folder_id:
            raise CycleError("Cannot move folder to itself", field="parent_folder_id")

        new_parent_path: List[str] = []
        if new_parent_folder_id:
            try:
                new_parent = await self.get(new_parent_folder_id, owner_id)
            except NotFoundError:
                raise NotFoundError("New parent folder not found", field="parent_folder_id")
            await self._ensure_not_descendant(folder_id, owner_id, new_parent)
            new_parent_path = list(new_parent.path)

        new_path = new_parent_path + [folder.name]
        # The deepest descendant lands height - 1 levels below the folder itself
        height = await self._subtree_height(folder_id, owner_id)
        self._check_depth(len(new_path) + height - 1)

        folder = await self.crud.update(folder, {"parent_folder_id": new_parent_folder_id, "path": new_path})
        logger.info(f"[FOLDER_MOVE] Moved {folder_id} under {new_parent_folder_id or 'root'}")

        await self.propagator.propagate(folder_id, owner_id, new_path)
        return folder

    async def _ensure_not_descendant(self, folder_id: str, owner_id: str, candidate: Folder) -> None:
        """Walk up from ``candidate`` and fail if ``folder_id`` is one of its ancestors"""
        seen = {str(candidate.id)}
        current = candidate
        while current.parent_folder_id:
            if current.parent_folder_id == folder_id:
                raise CycleError(field="parent_folder_id")
            if current.parent_folder_id in seen or len(seen) > settings.NAMESPACE_MAX_DEPTH:
                logger.error(f"[FOLDER_MOVE] Corrupt ancestor chain above {candidate.id} - owner: {owner_id}")
                raise CycleError("Target folder has a corrupt ancestor chain", field="parent_folder_id")
            seen.add(current.parent_folder_id)

            current = await self.crud.get_by_id(current.parent_folder_id)
            if current is None or current.owner_id != owner_id:
                # Dangling parent link: the chain ends here
                return

    async def _subtree_height(self, folder_id: str, owner_id: str) -> int:
        """Levels in the subtree rooted at ``folder_id``; a leaf has height 1"""
        height = 0
        seen = {folder_id}
        level = [folder_id]
        while level:
            height += 1
            next_level = []
            for current in level:
                for child in await self.crud.get_children(owner_id, current):
                    child_id = str(child.id)
                    if child_id not in seen:
                        seen.add(child_id)
                        next_level.append(child_id)
            level = next_level
        return height

    async def delete(self, folder_id: str, owner_id: str) -> bool:
        """Delete an empty folder"""
        await self.get(folder_id, owner_id)

        file_count = await self.files.count_in_folder(owner_id, folder_id)
        subfolder_count = await self.crud.count_children(owner_id, folder_id)
        if file_count or subfolder_count:
            parts = []
            if file_count:
                parts.append(f"{file_count} file(s)")
            if subfolder_count:
                parts.append(f"{subfolder_count} subfolder(s)")
            raise NonEmptyFolderError(
                f"Cannot delete folder with {' and '.join(parts)}. Please move or delete them first.",
                file_count=file_count,
                subfolder_count=subfolder_count,
            )

        await self.crud.delete_by_id(owner_id, folder_id)
        logger.info(f"[FOLDER_DELETE] Deleted empty folder {folder_id}")
        return True

    async def collect_subtree_ids(self, folder_id: str, owner_id: str) -> List[str]:
        """The folder and all its descendants, breadth first (parents before children)"""
        await self.get(folder_id, owner_id)

        ordered: List[str] = []
        seen = {folder_id}
        worklist = deque([folder_id])
        while worklist:
            current = worklist.popleft()
            ordered.append(current)
            for child in await self.crud.get_children(owner_id, current):
                child_id = str(child.id)
                if child_id not in seen:
                    seen.add(child_id)
                    worklist.append(child_id)
        return ordered

    async def delete_recursively(self, folder_id: str, owner_id: str) -> int:
        """Delete a folder and every descendant folder record; files are not touched

        Children are removed before their parents, so an interrupted run leaves
        a smaller, still connected subtree and can simply be repeated.
        """
        subtree = await self.collect_subtree_ids(folder_id, owner_id)

        deleted_count = 0
        for current in reversed(subtree):
            try:
                removed = await self.crud.delete_by_id(owner_id, current)
            except Exception as e:
                logger.error(
                    f"[FOLDER_DELETE] Recursive delete of {folder_id} stopped at {current} "
                    f"after {deleted_count} folder(s): {str(e)}",
                    exc_info=True,
                )
                raise AppError(
                    f"Failed to delete folder {current}; run the delete again to remove the rest",
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    code="delete_failed",
                    field="folder_id",
                    details={"folders_deleted": deleted_count},
                )
            if removed:
                deleted_count += 1

        logger.info(f"[FOLDER_DELETE] Recursively deleted {deleted_count} folder(s) under {folder_id}")
        return deleted_count

    async def list_root(self, owner_id: str) -> List[Folder]:
        return await self.crud.get_children(owner_id, None)

    async def list_children(self, folder_id: str, owner_id: str) -> List[Folder]:
        await self.get(folder_id, owner_id)
        return await self.crud.get_children(owner_id, folder_id)

    async def list_all(self, owner_id: str) -> List[Folder]:
        return await self.crud.list_by_owner(owner_id)

    async def get_tree(self, owner_id: str) -> List[FolderTreeNode]:
        """Nested folder tree of an owner, siblings ordered by path

        Folders whose parent chain never reaches a root (a corrupt parent
        cycle) are listed at the top level without children.
        """
        folders = sorted(await self.crud.list_by_owner(owner_id), key=lambda f: (list(f.path), str(f.id)))
        nodes: Dict[str, FolderTreeNode] = {
            str(f.id): FolderTreeNode(
                id=str(f.id),
                name=f.name,
                path=list(f.path),
                parent_folder_id=f.parent_folder_id,
            )
            for f in folders
        }

        children: Dict[str, List[FolderTreeNode]] = {}
        tree: List[FolderTreeNode] = []
        for node in nodes.values():
            if node.parent_folder_id in nodes:
                children.setdefault(node.parent_folder_id, []).append(node)
            else:
                tree.append(node)

        placed = set()
        worklist = deque(tree)
        while worklist:
            node = worklist.popleft()
            placed.add(node.id)
            node.children = children.get(node.id, [])
            worklist.extend(node.children)

        unplaced = [node for node in nodes.values() if node.id not in placed]
        if unplaced:
            logger.warning(
                f"[FOLDER_TREE] {len(unplaced)} folder(s) unreachable from a root - owner: {owner_id}, "
                f"ids: {[node.id for node in unplaced]}"
            )
            tree.extend(unplaced)
        return tree
