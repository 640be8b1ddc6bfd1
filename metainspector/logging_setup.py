"""
Logging configuration for MetaInspector.
Console output for the dashboard server plus a rotating file log.

The level comes from METAINSPECTOR_LOG_LEVEL (default INFO). When the app
runs under uvicorn, the server's own error log is written to the same file
so startup failures and tracebacks sit next to the analysis records.
"""

import logging
import logging.handlers
import os
import sys
import uuid
from datetime import datetime
from typing import Iterable, Optional

from .config import LOG_DIR

LOG_FILE_NAME = "metainspector.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s.%(funcName)s: %(message)s"
SERVER_LOGGERS = ("uvicorn.error",)


def resolve_level(value: Optional[str] = None) -> int:
    """Map a level name such as "debug" to its logging constant; unknown names give INFO."""
    name = (value if value is not None else os.environ.get("METAINSPECTOR_LOG_LEVEL", "INFO"))
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    name: str = "metainspector",
    level: Optional[int] = None,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
    server_loggers: Iterable[str] = SERVER_LOGGERS,
) -> logging.Logger:
    """
    Configure the package logger with file and console output.

    File logs rotate at max_bytes, keeping backup_count old files.
    Console output goes to stderr so `analyze --json` keeps stdout clean.
    Each logger in server_loggers also gets the file handler.
    """
    if level is None:
        level = resolve_level()
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers on repeated calls
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = logging.handlers.RotatingFileHandler(
        filename=LOG_DIR / LOG_FILE_NAME,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    for server_logger_name in server_loggers:
        logging.getLogger(server_logger_name).addHandler(file_handler)

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Get a child logger for a specific module."""
    return logging.getLogger(f"metainspector.{module_name}")


class AnalysisContext:
    """
    Context manager for tracking a single page analysis.
    Logs start/end times and provides an analysis_id for correlation.
    """

    def __init__(self, logger: logging.Logger, url: str):
        self.logger = logger
        self.url = url
        self.analysis_id = uuid.uuid4().hex[:12]
        self.start_time = None
        self.outcome = "ok"
        self.overall_score = None

    def __enter__(self):
        self.start_time = datetime.utcnow()
        self.logger.info(f"[{self.analysis_id}] Analysis started: {self.url}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = datetime.utcnow() - self.start_time
        if exc_type:
            self.outcome = exc_type.__name__
            self.logger.warning(
                f"[{self.analysis_id}] Analysis failed: {self.url} | "
                f"Duration: {duration} | {exc_type.__name__}: {exc_val}"
            )
        else:
            self.logger.info(
                f"[{self.analysis_id}] Analysis completed: {self.url} | "
                f"Duration: {duration} | Score: {self.overall_score}"
            )
        return False  # Don't suppress exceptions

    def record_score(self, overall: int):
        self.overall_score = overall
