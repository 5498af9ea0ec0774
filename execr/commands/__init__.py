"""Module d'exécution de commandes externes.

Classes et fonctions disponibles :
    ExecOptions : Options d'une invocation (modèle Pydantic).
    normalize_args : Normalisation des formes d'appel.
    ExecResult : Résultat immuable d'une exécution.
    CommandExecutor : Interface commune des exécuteurs.
    SyncCommandExecutor : Exécuteur bloquant via subprocess.
    AsyncCommandExecutor : Exécuteur asyncio.
    RunningCommand : Commande asynchrone en cours.
    CommandWrapper / AsyncCommandWrapper : Constructeurs fluents.
    execute / execute_async / wrap / wrap_async : Raccourcis.
"""

from execr.commands.api import (
    configure,
    execute,
    execute_async,
    wrap,
    wrap_async,
)
from execr.commands.async_runner import (
    AsyncCommandExecutor,
    RunningCommand,
)
from execr.commands.base import (
    CommandExecutor,
    ExecResult,
    SpawnOutcome,
)
from execr.commands.formatter import PlainCommandFormatter
from execr.commands.options import (
    DEFAULT_MAX_BUFFER,
    ExecOptions,
    get_default_options,
    normalize_args,
    set_default_options,
)
from execr.commands.runner import (
    MemoizeCache,
    SyncCommandExecutor,
    clear_memoize_cache,
    spawn_process,
)
from execr.commands.wrapper import AsyncCommandWrapper, CommandWrapper

__all__ = [
    # Options
    "DEFAULT_MAX_BUFFER",
    "ExecOptions",
    "normalize_args",
    "set_default_options",
    "get_default_options",
    # Structures de données
    "ExecResult",
    "SpawnOutcome",
    # Exécuteurs
    "CommandExecutor",
    "SyncCommandExecutor",
    "AsyncCommandExecutor",
    "RunningCommand",
    "spawn_process",
    "MemoizeCache",
    "clear_memoize_cache",
    # Formateur
    "PlainCommandFormatter",
    # Constructeurs
    "CommandWrapper",
    "AsyncCommandWrapper",
    # Raccourcis
    "configure",
    "execute",
    "execute_async",
    "wrap",
    "wrap_async",
]
