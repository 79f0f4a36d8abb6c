from studylib.api.folder import router as folder_router
from studylib.api.file import router as file_router

__all__ = ["folder_router", "file_router"]
