"""Per-item outcome reports for bulk and cascading operations.

Bulk moves and cascading deletes never raise for a single item; each item gets
an ``ItemResult`` and the caller renders "N of M" from the report.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field


class ItemStatus(str, Enum):
    OK = "ok"
    # Metadata record removed but the blob delete failed
    METADATA_ONLY = "metadata_only"
    FAILED = "failed"


class ItemResult(BaseModel):
    id: str
    status: ItemStatus
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status != ItemStatus.FAILED


class BulkOperationReport(BaseModel):
    results: List[ItemResult] = Field(default_factory=list)

    @computed_field
    @property
    def total(self) -> int:
        return len(self.results)

    @computed_field
    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def failed(self) -> List[ItemResult]:
        return [r for r in self.results if not r.succeeded]

    def summary(self, verb: str = "processed") -> str:
        return f"{verb} {self.succeeded} of {self.total} items"


class DeletionReport(BulkOperationReport):
    """Outcome of a metadata + blob sweep"""

    @computed_field
    @property
    def deleted(self) -> int:
        """Files whose metadata record is gone, regardless of blob outcome"""
        return self.succeeded

    @property
    def orphaned_blobs(self) -> List[ItemResult]:
        return [r for r in self.results if r.status == ItemStatus.METADATA_ONLY]

    def merge(self, other: "DeletionReport") -> "DeletionReport":
        self.results.extend(other.results)
        return self


class PropagationReport(BaseModel):
    root_folder_id: Optional[str] = None
    # One batch per parent whose children needed new paths
    batches: int = 0
    visited: int = 0
    updated: int = 0
    depth: int = 0
    # Folders skipped because they were reached twice (corrupt parent graph)
    skipped: List[str] = Field(default_factory=list)
    # Repair only: folders not reachable from any root folder
    unreachable: List[str] = Field(default_factory=list)

    def merge(self, other: "PropagationReport") -> "PropagationReport":
        self.batches += other.batches
        self.visited += other.visited
        self.updated += other.updated
        self.depth = max(self.depth, other.depth)
        self.skipped.extend(other.skipped)
        return self


class SubtreeDeletionReport(BaseModel):
    folder_id: str
    folders_deleted: int = 0
    files: DeletionReport = Field(default_factory=DeletionReport)

    def summary(self) -> str:
        return (
            f"deleted {self.files.deleted} of {self.files.total} files "
            f"and {self.folders_deleted} folders"
        )
