"""Interface abstraite pour le logging des exécutions."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from execr.commands.base import ExecResult


class Logger(ABC):
    """Interface de logging injectée dans les exécuteurs.

    Les exécuteurs n'écrivent rien tant qu'aucun Logger n'est fourni.
    """

    @abstractmethod
    def log_info(self, message: str) -> None:
        """Log un message d'information (lancement, cache)."""
        pass

    @abstractmethod
    def log_warning(self, message: str) -> None:
        """Log un avertissement (option ignorée)."""
        pass

    @abstractmethod
    def log_error(self, message: str) -> None:
        """Log une erreur (échec, lancement impossible)."""
        pass

    def log_result(self, result: "ExecResult", message: str) -> None:
        """Log la fin d'une exécution.

        En information si la commande a réussi, en erreur sinon.
        Les implémentations peuvent exploiter les champs du résultat
        (commande, statut, durée) au-delà du message.

        Args:
            result: Résultat de l'exécution.
            message: Message déjà formaté par l'exécuteur.
        """
        if result.success:
            self.log_info(message)
        else:
            self.log_error(message)
