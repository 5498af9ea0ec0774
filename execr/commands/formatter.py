"""Formatage des messages de log et d'erreur des exécutions.

Les messages de log portent le préfixe [ROOT] ou [user] selon les
privilèges du processus courant. Les messages d'erreur reprennent
la ligne de commande, le statut, le signal et la sortie d'erreur
capturée, afin d'être exploitables tels quels dans une trace.

Example :
    Sortie pour une commande utilisateur :
        [user] Exécution : git branch
        git branch : statut 0 (0.004s)

    Message d'erreur d'une commande échouée :
        git push a échoué. Statut 1, signal None.
        fatal: no upstream configured
"""

from typing import List, Optional


class PlainCommandFormatter:
    """Formateur texte brut, sans codes ANSI.

    Compatible avec les fichiers de log, grep et les messages
    d'exception.
    """

    _ROOT_PREFIX = "[ROOT]"
    _USER_PREFIX = "[user]"

    def _prefix(self, is_root: bool) -> str:
        return self._ROOT_PREFIX if is_root else self._USER_PREFIX

    @staticmethod
    def command_line(argv: List[str]) -> str:
        """Ligne de commande lisible, arguments séparés par un espace."""
        return " ".join(argv)

    def format_start(self, argv: List[str], is_root: bool) -> str:
        """Formate le début d'exécution avec préfixe textuel."""
        return (
            f"{self._prefix(is_root)} Exécution : "
            f"{self.command_line(argv)}"
        )

    def format_cached(self, argv: List[str], is_root: bool) -> str:
        """Formate le message d'un résultat servi par le cache."""
        return (
            f"{self._prefix(is_root)} [cache] "
            f"{self.command_line(argv)}"
        )

    def format_result(self, result) -> str:
        """Formate la ligne de fin d'une exécution (statut, durée)."""
        return (
            f"{self.command_line(result.argv)} : statut {result.status} "
            f"({result.duration:.3f}s)"
        )

    def format_failure(
        self,
        argv: List[str],
        returncode: Optional[int],
        signal: Optional[str],
        stderr: str,
    ) -> str:
        """Formate le message d'une commande terminée en échec.

        Args:
            argv: Ligne de commande exécutée.
            returncode: Code de retour, None si tuée par un signal.
            signal: Nom du signal de terminaison, ou None.
            stderr: Sortie d'erreur capturée.

        Returns:
            Message multi-lignes se terminant par stderr.
        """
        return (
            f"{self.command_line(argv)} a échoué. "
            f"Statut {returncode}, signal {signal}.\n{stderr.strip()}"
        ).strip()

    def format_spawn_error(self, argv: List[str], error: str) -> str:
        """Formate le message d'un lancement impossible."""
        return (
            f"{self.command_line(argv)} n'a pas pu être lancé.\n"
            f"{error.strip()}"
        ).strip()
