from typing import List, Optional

from studylib.services.folder_service import FolderService


class BreadcrumbResolver:
    """Reads breadcrumbs straight from the stored materialized path"""

    def __init__(self, folders: Optional[FolderService] = None):
        self.folders = folders or FolderService()

    async def resolve(self, folder_id: str, owner_id: str) -> List[str]:
        folder = await self.folders.get(folder_id, owner_id)
        return list(folder.path)
