"""Materialized path maintenance for folder subtrees.

Each folder stores ``path``, the names from the root down to itself. When a
folder is renamed or moved, every descendant's path must be rewritten. The
store has no cross-document transaction, so the walk is an explicit worklist
of ``(folder_id, new_path)`` items with one batched write per parent. A
failure leaves the already-written batches in place; calling ``propagate``
again recomputes from the stored names and converges.
"""
from collections import deque
from typing import Deque, List, Optional, Set, Tuple

from studylib.core.exceptions import AppError, PropagationError
from studylib.crud import FolderCRUD, folder_crud
from studylib.schemas import PropagationReport
from studylib.utils import get_logger

logger = get_logger(__name__)


class PathPropagator:
    def __init__(self, crud: Optional[FolderCRUD] = None):
        self.crud = crud or folder_crud

    async def propagate(self, folder_id: str, owner_id: str, new_path: List[str]) -> PropagationReport:
        """Rewrite the paths of every descendant of ``folder_id``

        Args:
            folder_id: Folder whose own path just changed (already persisted)
            owner_id: Owner of the subtree; other owners' folders are never touched
            new_path: The folder's new path

        Raises:
            PropagationError: a batch failed; the report covers completed batches
        """
        report = PropagationReport(root_folder_id=folder_id)
        worklist: Deque[Tuple[str, List[str]]] = deque([(folder_id, list(new_path))])
        visited: Set[str] = {folder_id}
        base_depth = len(new_path)

        while worklist:
            parent_id, parent_path = worklist.popleft()
            try:
                children = await self.crud.get_children(owner_id, parent_id)
            except AppError:
                raise
            except Exception as e:
                logger.error(f"[PATH_PROPAGATE] Failed to list children of {parent_id}: {e}", exc_info=True)
                raise PropagationError(f"Path update stopped at folder {parent_id}: {e}", report=report) from e

            changed = {}
            queued = []
            for child in children:
                child_id = str(child.id)
                if child_id in visited:
                    logger.error(f"[PATH_PROPAGATE] Folder {child_id} reached twice, parent graph has a cycle")
                    report.skipped.append(child_id)
                    continue
                visited.add(child_id)

                child_path = parent_path + [child.name]
                if list(child.path) != child_path:
                    changed[child_id] = child_path
                queued.append((child_id, child_path))

            if changed:
                try:
                    await self.crud.bulk_update_paths(owner_id, changed)
                except Exception as e:
                    logger.error(
                        f"[PATH_PROPAGATE] Batch write failed under {parent_id} "
                        f"({len(changed)} folders): {e}",
                        exc_info=True,
                    )
                    raise PropagationError(f"Path update stopped at folder {parent_id}: {e}", report=report) from e
                report.batches += 1
                report.updated += len(changed)

            report.visited += len(queued)
            if queued:
                report.depth = max(report.depth, len(queued[0][1]) - base_depth)
            worklist.extend(queued)

        logger.info(
            f"[PATH_PROPAGATE] Completed - folder: {folder_id}, visited: {report.visited}, "
            f"updated: {report.updated}, batches: {report.batches}"
        )
        return report

    async def repair(self, owner_id: str) -> PropagationReport:
        """Recompute every path of an owner from the stored names and parents

        Used to finish a propagation that was interrupted. Folders whose parent
        chain never reaches the root are reported as unreachable and left alone.
        """
        report = PropagationReport()
        roots = await self.crud.get_children(owner_id, None)
        reached: Set[str] = set()

        for root in roots:
            root_id = str(root.id)
            expected = [root.name]
            if list(root.path) != expected:
                await self.crud.bulk_update_paths(owner_id, {root_id: expected})
                report.batches += 1
                report.updated += 1
            report.visited += 1
            reached.add(root_id)

            subtree = await self.propagate(root_id, owner_id, expected)
            report.merge(subtree)

        all_folders = await self.crud.list_by_owner(owner_id)
        by_parent = {}
        for folder in all_folders:
            by_parent.setdefault(folder.parent_folder_id, []).append(str(folder.id))
        stack = list(reached)
        while stack:
            current = stack.pop()
            for child_id in by_parent.get(current, []):
                if child_id not in reached:
                    reached.add(child_id)
                    stack.append(child_id)
        report.unreachable = [str(f.id) for f in all_folders if str(f.id) not in reached]
        if report.unreachable:
            logger.warning(f"[PATH_REPAIR] {len(report.unreachable)} folders unreachable from root - owner: {owner_id}")

        logger.info(f"[PATH_REPAIR] Completed - owner: {owner_id}, updated: {report.updated}")
        return report
