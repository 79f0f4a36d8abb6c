from functools import lru_cache

from studylib.services import NamespaceService


@lru_cache(maxsize=1)
def get_namespace_service() -> NamespaceService:
    """Shared service graph; overridden in tests"""
    return NamespaceService()
