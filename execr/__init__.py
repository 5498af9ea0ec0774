"""
execr - Exécution simplifiée de commandes externes.

Modules disponibles:
- commands: Exécution synchrone et asynchrone, normalisation des
  arguments, constructeurs fluents (execute, execute_async, wrap,
  wrap_async)
- config: Chargement des options par défaut (TOML, JSON)
- errors: Exceptions (CommandFailedError, CommandSpawnError, ...)
- logging: Journalisation des exécutions (Logger, FileLogger)
"""

__version__ = "1.0.0"

from execr.logging import Logger, FileLogger
from execr.errors import (
    ExecrError,
    InvalidOptionsError,
    ConfigurationError,
    CommandError,
    CommandSpawnError,
    CommandFailedError,
)
from execr.commands import (
    ExecOptions,
    ExecResult,
    normalize_args,
    CommandExecutor,
    SyncCommandExecutor,
    AsyncCommandExecutor,
    RunningCommand,
    CommandWrapper,
    AsyncCommandWrapper,
    clear_memoize_cache,
    configure,
    execute,
    execute_async,
    wrap,
    wrap_async,
)
from execr.config import ExecOptionsLoader, read_config_file

__all__ = [
    # Raccourcis
    "configure",
    "execute",
    "execute_async",
    "wrap",
    "wrap_async",
    # Options et résultats
    "ExecOptions",
    "ExecResult",
    "normalize_args",
    "clear_memoize_cache",
    # Exécuteurs
    "CommandExecutor",
    "SyncCommandExecutor",
    "AsyncCommandExecutor",
    "RunningCommand",
    # Constructeurs
    "CommandWrapper",
    "AsyncCommandWrapper",
    # Config
    "ExecOptionsLoader",
    "read_config_file",
    # Logging
    "Logger",
    "FileLogger",
    # Erreurs
    "ExecrError",
    "InvalidOptionsError",
    "ConfigurationError",
    "CommandError",
    "CommandSpawnError",
    "CommandFailedError",
]
