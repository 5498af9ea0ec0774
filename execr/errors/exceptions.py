"""Exceptions levées par execr.

Toutes les exceptions héritent de ExecrError, ce qui permet de
capturer l'ensemble des erreurs du paquet avec un seul except.
"""

from typing import List, Optional, Union


class ExecrError(Exception):
    """Exception de base pour toutes les erreurs execr."""


class InvalidOptionsError(ExecrError, ValueError):
    """Levée quand les arguments ou les options d'un appel sont invalides."""


class ConfigurationError(ExecrError):
    """Levée quand un fichier de configuration est invalide."""


class CommandError(ExecrError):
    """Erreur d'exécution d'une commande.

    Attributes:
        command: Commande exécutée.
        arguments: Arguments passés à la commande.
        status: Code de retour, nom du signal ou -1.
        signal: Nom du signal ayant terminé le processus, ou None.
        stdout: Sortie standard capturée (nettoyée).
        stderr: Sortie d'erreur capturée (nettoyée).
        result: ExecResult complet ayant provoqué l'erreur.
    """

    def __init__(
        self,
        message: str,
        command: str,
        arguments: List[str],
        status: Union[int, str],
        signal: Optional[str] = None,
        stdout: str = "",
        stderr: str = "",
        result=None,
    ) -> None:
        """Initialise l'erreur avec le contexte de l'exécution.

        Args:
            message: Message lisible (commande, statut, stderr).
            command: Commande exécutée.
            arguments: Arguments de la commande.
            status: Statut de sortie.
            signal: Signal de terminaison éventuel.
            stdout: Sortie standard nettoyée.
            stderr: Sortie d'erreur nettoyée.
            result: ExecResult associé.
        """
        super().__init__(message)
        self.command = command
        self.arguments = list(arguments)
        self.status = status
        self.signal = signal
        self.stdout = stdout
        self.stderr = stderr
        self.result = result


class CommandSpawnError(CommandError):
    """Levée quand le processus n'a pas pu être lancé (status -1)."""


class CommandFailedError(CommandError):
    """Levée quand le processus se termine en erreur ou par un signal."""
