from studylib.models.time_mixin import TimeMixin
from studylib.models.folder import Folder
from studylib.models.file import File

__all__ = [
    "TimeMixin",
    "Folder",
    "File",
]

# List of all document models for Beanie initialization
DOCUMENT_MODELS = [
    Folder,
    File,
]
