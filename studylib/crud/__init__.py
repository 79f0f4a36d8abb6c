from studylib.crud.folder import folder_crud, FolderCRUD
from studylib.crud.file import file_crud, FileCRUD

__all__ = ["folder_crud", "file_crud", "FolderCRUD", "FileCRUD"]
