from studylib.configs.settings import settings

__all__ = ["settings"]
