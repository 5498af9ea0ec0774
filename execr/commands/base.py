"""Structures de données et interface commune des exécuteurs.

Ce module définit :
    - SpawnOutcome : résultat brut d'un lancement de processus.
    - ExecResult : résultat immuable retourné à l'appelant.
    - CommandExecutor : interface abstraite des exécuteurs.
    - build_argv / build_env : préparation d'un lancement.
    - send_kill_signal : terminaison du groupe de processus.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from dotenv import dotenv_values

from execr.commands.formatter import PlainCommandFormatter
from execr.commands.options import ExecOptions
from execr.errors.exceptions import (
    CommandError,
    CommandFailedError,
    CommandSpawnError,
)
from execr.logging.base import Logger

SPAWN_ERROR_STATUS = -1


@dataclass(frozen=True)
class SpawnOutcome:
    """Résultat brut d'un lancement, avant application de la politique
    d'échec.

    C'est cette valeur qui est mise en cache par la mémoïsation.

    Attributes:
        returncode: Code de retour, None si le processus n'a pas
            démarré ou a été tué par un signal.
        signal: Nom du signal de terminaison, ou None.
        stdout: Sortie standard décodée.
        stderr: Sortie d'erreur décodée.
        error: Message d'erreur de lancement, ou None.
        duration: Durée d'exécution en secondes.
    """

    returncode: Optional[int]
    signal: Optional[str]
    stdout: str
    stderr: str
    error: Optional[str] = None
    duration: float = 0.0


@dataclass(frozen=True)
class ExecResult:
    """Résultat de l'exécution d'une commande.

    Attributes:
        command: Commande exécutée.
        args: Arguments de la commande.
        status: Code de retour, nom du signal si le processus a été
            tué, ou -1 si le lancement a échoué.
        stdout: Sortie standard, sans espaces en début et fin.
        stderr: Sortie d'erreur, sans espaces en début et fin.
        duration: Durée d'exécution en secondes.
    """

    command: str
    args: List[str]
    status: Union[int, str]
    stdout: str
    stderr: str
    duration: float = field(default=0.0, compare=False)

    @property
    def success(self) -> bool:
        """True si la commande s'est terminée avec le code 0."""
        return self.status == 0

    @property
    def signal(self) -> Optional[str]:
        """Nom du signal ayant terminé le processus, ou None."""
        return self.status if isinstance(self.status, str) else None

    @property
    def argv(self) -> List[str]:
        """Ligne de commande complète."""
        return [self.command] + self.args


def build_argv(
    command: str, args: List[str], options: ExecOptions
) -> List[str]:
    """Construit la ligne de commande passée au système.

    Args:
        command: Commande à exécuter.
        args: Arguments normalisés.
        options: Options de l'invocation.

    Returns:
        Liste argv. Avec options.shell, la commande et ses arguments
        sont joints par des espaces, sans protection, et interprétés
        par /bin/sh -c : variables, tubes et redirections s'appliquent.
    """
    if options.shell:
        return ["/bin/sh", "-c", " ".join([command] + args)]
    return [command] + args


def build_env(options: ExecOptions) -> Optional[Dict[str, str]]:
    """Construit l'environnement du processus fils.

    Fusionne os.environ, le fichier env_file puis env. Retourne
    None si aucun environnement personnalisé n'est demandé, le
    processus héritant alors de os.environ.

    Args:
        options: Options de l'invocation.

    Returns:
        Dictionnaire d'environnement ou None.
    """
    if options.env is None and options.env_file is None:
        return None
    merged = os.environ.copy()
    if options.env_file is not None:
        merged.update(
            {key: value
             for key, value in dotenv_values(options.env_file).items()
             if value is not None}
        )
    if options.env:
        merged.update(options.env)
    return merged


def send_kill_signal(process, options: ExecOptions) -> None:
    """Envoie kill_signal au groupe de processus de la commande.

    Les commandes sont lancées dans leur propre session
    (start_new_session), de sorte que les processus qu'elles
    lancent à leur tour reçoivent aussi le signal et libèrent
    les tubes de sortie.

    Args:
        process: subprocess.Popen ou asyncio.subprocess.Process.
        options: Options de l'invocation.
    """
    if process.returncode is not None:
        return
    try:
        os.killpg(process.pid, options.kill_signal_number)
    except ProcessLookupError:
        pass
    except OSError:
        process.send_signal(options.kill_signal_number)


class CommandExecutor(ABC):
    """Interface commune des exécuteurs synchrone et asynchrone.

    Porte la politique d'échec partagée : un code de retour non nul
    ou un signal est un échec, un lancement impossible force le
    statut à -1. Selon fail_on_error, l'échec lève une exception
    ou est simplement reporté dans le résultat.

    Attributes:
        _logger: Logger optionnel.
        _plain: Formateur des messages de log et d'erreur.
    """

    def __init__(self, logger: Optional[Logger] = None) -> None:
        """Initialise l'exécuteur.

        Args:
            logger: Logger optionnel pour tracer les exécutions.
        """
        self._logger = logger
        self._is_root: bool = os.getuid() == 0
        self._plain = PlainCommandFormatter()

    @property
    def logger(self) -> Optional[Logger]:
        """Logger utilisé par l'exécuteur."""
        return self._logger

    def _log(self, message: str) -> None:
        if self._logger:
            self._logger.log_info(message)

    def _log_warning(self, message: str) -> None:
        if self._logger:
            self._logger.log_warning(message)

    def _log_start(self, command: str, args: List[str]) -> None:
        self._log(self._plain.format_start([command] + args, self._is_root))

    def _log_result(
        self, result: ExecResult, message: Optional[str] = None
    ) -> None:
        if self._logger:
            self._logger.log_result(
                result, message or self._plain.format_result(result)
            )

    def _finish(
        self,
        command: str,
        args: List[str],
        outcome: SpawnOutcome,
        options: ExecOptions,
    ) -> ExecResult:
        """Applique la politique d'échec à un résultat brut.

        Args:
            command: Commande exécutée.
            args: Arguments de la commande.
            outcome: Résultat brut du lancement.
            options: Options de l'invocation.

        Returns:
            ExecResult avec des sorties nettoyées.

        Raises:
            CommandSpawnError: Si le lancement a échoué et
                fail_on_error est actif.
            CommandFailedError: Si la commande a échoué et
                fail_on_error est actif.
        """
        argv = [command] + args
        if outcome.error is not None:
            result = ExecResult(
                command=command,
                args=list(args),
                status=SPAWN_ERROR_STATUS,
                stdout="",
                stderr=outcome.error.strip(),
                duration=outcome.duration,
            )
            message = self._plain.format_spawn_error(argv, outcome.error)
            self._log_result(result, message)
            if options.fail_on_error:
                raise self._make_error(CommandSpawnError, message, result)
            return result

        status: Union[int, str] = (
            outcome.signal if outcome.signal else outcome.returncode or 0
        )
        result = ExecResult(
            command=command,
            args=list(args),
            status=status,
            stdout=outcome.stdout.strip(),
            stderr=outcome.stderr.strip(),
            duration=outcome.duration,
        )
        if (outcome.returncode or 0) != 0 or outcome.signal:
            message = self._plain.format_failure(
                argv, outcome.returncode, outcome.signal, outcome.stderr
            )
            self._log_result(result, message)
            if options.fail_on_error:
                raise self._make_error(CommandFailedError, message, result)
        else:
            self._log_result(result)
        return result

    @staticmethod
    def _make_error(
        error_cls: type, message: str, result: ExecResult
    ) -> CommandError:
        return error_cls(
            message,
            command=result.command,
            arguments=result.args,
            status=result.status,
            signal=result.signal,
            stdout=result.stdout,
            stderr=result.stderr,
            result=result,
        )

    @abstractmethod
    def run(
        self,
        command: str,
        args: List[str],
        options: ExecOptions,
    ):
        """Exécute une commande déjà normalisée.

        Args:
            command: Commande à exécuter.
            args: Arguments normalisés.
            options: Options fusionnées.

        Returns:
            ExecResult, ou une coroutine produisant un ExecResult
            pour l'exécuteur asynchrone.
        """
        pass
