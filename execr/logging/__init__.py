"""Module de logging."""

from execr.logging.base import Logger
from execr.logging.file_logger import FileLogger

__all__ = [
    "Logger",
    "FileLogger",
]
