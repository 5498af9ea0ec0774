"""Fonctions de haut niveau : execute, execute_async, wrap, wrap_async.

Ces fonctions utilisent des exécuteurs partagés par le processus,
configurables via configure().

Example:
    Configuration puis exécution :

        import execr
        from execr.logging import FileLogger

        execr.configure(
            logger=FileLogger("/var/log/app/commands.log"),
            default_options={"cwd": "/srv/app"},
        )
        execr.execute("git", ["pull", "--ff-only"])
        status = execr.execute("git", ["diff", "--quiet"],
                               {"fail_on_error": False}).status
"""

from typing import Optional

from execr.commands.async_runner import AsyncCommandExecutor
from execr.commands.base import ExecResult
from execr.commands.options import (
    ArgsOrOptions,
    OptionsLike,
    normalize_args,
    set_default_options,
)
from execr.commands.runner import SyncCommandExecutor
from execr.commands.wrapper import AsyncCommandWrapper, CommandWrapper
from execr.logging.base import Logger

_sync_executor = SyncCommandExecutor()
_async_executor = AsyncCommandExecutor()


def configure(
    logger: Optional[Logger] = None,
    default_options: Optional[OptionsLike] = None,
) -> None:
    """Configure le logger et les options globales du processus.

    S'applique à execute(), execute_async() et aux wrappers créés
    ensuite par wrap() et wrap_async().

    Args:
        logger: Logger des exécutions, None pour désactiver.
        default_options: Options par défaut globales, None pour
            revenir aux valeurs intégrées.
    """
    global _sync_executor, _async_executor
    set_default_options(default_options)
    _sync_executor = SyncCommandExecutor(logger=logger)
    _async_executor = AsyncCommandExecutor(logger=logger)


def execute(
    command: str,
    args_or_options: ArgsOrOptions = None,
    options: Optional[OptionsLike] = None,
) -> ExecResult:
    """Exécute une commande de façon synchrone.

    Args:
        command: Commande à exécuter (ex: "git").
        args_or_options: Liste d'arguments, ou options si aucun
            argument n'est nécessaire.
        options: Options de l'appel.

    Returns:
        ExecResult ; status vaut 0 en cas de succès.

    Raises:
        InvalidOptionsError: Forme d'appel ou option invalide.
        CommandSpawnError: Lancement impossible et fail_on_error.
        CommandFailedError: Échec de la commande et fail_on_error.
    """
    args, merged = normalize_args(args_or_options, options)
    return _sync_executor.run(command, args, merged)


async def execute_async(
    command: str,
    args_or_options: ArgsOrOptions = None,
    options: Optional[OptionsLike] = None,
) -> ExecResult:
    """Exécute une commande sans bloquer la boucle d'événements.

    Même contrat que execute() ; l'option memoize est ignorée.
    """
    args, merged = normalize_args(args_or_options, options)
    return await _async_executor.run(command, args, merged)


def wrap(
    command: str,
    default_options: Optional[OptionsLike] = None,
) -> CommandWrapper:
    """Crée un wrapper synchrone pour une commande.

    Example:
        >>> git = wrap("git")
        >>> git.branch()          # execute("git", ["branch"])

    Args:
        command: Commande de base.
        default_options: Options par défaut de la commande.

    Returns:
        CommandWrapper lié à l'exécuteur synchrone configuré.
    """
    return CommandWrapper(command, default_options, _sync_executor)


def wrap_async(
    command: str,
    default_options: Optional[OptionsLike] = None,
) -> AsyncCommandWrapper:
    """Crée un wrapper asynchrone pour une commande."""
    return AsyncCommandWrapper(command, default_options, _async_executor)
