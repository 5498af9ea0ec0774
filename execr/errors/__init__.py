"""Module de gestion des erreurs."""

from execr.errors.exceptions import (
    CommandError,
    CommandFailedError,
    CommandSpawnError,
    ConfigurationError,
    ExecrError,
    InvalidOptionsError,
)

__all__ = [
    "ExecrError",
    "InvalidOptionsError",
    "ConfigurationError",
    "CommandError",
    "CommandSpawnError",
    "CommandFailedError",
]
