import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

# Context keys attached to log records through ``extra=``
CONTEXT_FIELDS = ("owner_id", "folder_id", "file_id", "operation")

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Third-party loggers and the most verbose level we let through
LIBRARY_LEVELS: Dict[str, int] = {
    "uvicorn.access": logging.INFO,
    "uvicorn.error": logging.INFO,
    "fastapi": logging.INFO,
    "pymongo": logging.WARNING,
    "motor": logging.WARNING,
    "minio": logging.WARNING,
    "urllib3": logging.WARNING,
    "redis": logging.WARNING,
    "sentry_sdk": logging.WARNING,
}


class JSONFormatter(logging.Formatter):
    """One JSON object per line; namespace context goes under ``context``"""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        context = {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Copy, so other handlers still see the plain level name
        colored = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        colored.name = f"\033[94m{record.name}{self.RESET}"
        line = super().format(colored)
        context = " ".join(f"{key}={getattr(record, key)}" for key in CONTEXT_FIELDS if hasattr(record, key))
        return f"{line} [{context}]" if context else line


def _handlers(level: int, enable_json: bool, log_file: Optional[str]) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        JSONFormatter() if enable_json else ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    handlers: List[logging.Handler] = [console]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
    return handlers


def setup_logging(
    level: str = "INFO",
    app_name: str = "Studylib Library",
    enable_json: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """
    Replace the root handlers with a console handler and an optional JSON file

    Args:
        level: Logging level name; unknown names fall back to INFO
        app_name: Logger used for the confirmation message
        enable_json: JSON lines on the console instead of colors
        log_file: Path of a JSON log file, created with its parent directory
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(numeric_level)
    for handler in _handlers(numeric_level, enable_json, log_file):
        root.addHandler(handler)

    for name, library_level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(max(library_level, numeric_level))

    logging.getLogger(app_name).info(f"Logging configured - level {logging.getLevelName(numeric_level)}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: str, message: str, **context: Any) -> None:
    """Log with owner/folder/file context; keys outside CONTEXT_FIELDS are dropped"""
    extra = {key: value for key, value in context.items() if key in CONTEXT_FIELDS}
    logger.log(getattr(logging, level.upper()), message, extra=extra)
