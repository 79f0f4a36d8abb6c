from studylib.utils.logging import get_logger, setup_logging, log_with_context
from studylib.utils.api_response import ok, created, multi_status


__all__ = [
    "get_logger",
    "setup_logging",
    "log_with_context",
    "ok",
    "created",
    "multi_status",
]
