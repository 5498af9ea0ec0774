"""Journal des exécutions dans un fichier.

Chaque fin d'exécution est enregistrée avec la ligne de commande,
le statut et la durée en attributs du LogRecord, utilisables dans
le format :

    %(command)s   ligne de commande, "-" hors fin d'exécution
    %(status)s    code de retour, nom du signal ou -1
    %(duration)s  durée en secondes

Example:
    Configuration d'un journal tabulaire :

        logger = FileLogger(
            "/var/log/app/commands.log",
            config={"logging": {
                "level": "INFO",
                "format": "%(asctime)s\\t%(status)s\\t%(duration)s"
                          "\\t%(command)s",
            }},
        )
        execr.configure(logger=logger)
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from execr.logging.base import Logger

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

_RECORD_DEFAULTS = {"command": "-", "status": "-", "duration": "-"}


class _ExecRecordFilter(logging.Filter):
    """Complète les LogRecord qui ne portent pas de résultat."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, default in _RECORD_DEFAULTS.items():
            if not hasattr(record, name):
                setattr(record, name, default)
        return True


class FileLogger(Logger):
    """Logger des exécutions dans un fichier, avec option console.

    Un seul logger stdlib par fichier, sous le nom
    ``execr.<chemin>`` et sans propagation.
    """

    def __init__(
        self,
        log_file: Union[str, Path],
        config: Optional[Dict[str, Any]] = None,
        console_output: bool = False
    ) -> None:
        """
        Initialise le logger.

        Args:
            log_file: Chemin du fichier de log, son répertoire est
                créé au besoin.
            config: Configuration optionnelle ; section "logging"
                avec les clés level et format.
            console_output: Écrire aussi sur la sortie d'erreur.
        """
        self.log_file = Path(log_file)
        self.log_file.parent.mkdir(parents=True, exist_ok=True)

        settings = (config or {}).get("logging", {})
        level = logging.getLevelName(str(settings.get("level", "INFO")).upper())
        if not isinstance(level, int):
            level = logging.INFO

        self.logger = logging.getLogger(f"execr.{self.log_file}")
        self.logger.setLevel(level)
        self.logger.propagate = False

        # Un seul jeu de handlers par fichier
        if not self.logger.handlers:
            formatter = logging.Formatter(
                settings.get("format", DEFAULT_FORMAT)
            )
            handlers: list[logging.Handler] = [
                logging.FileHandler(self.log_file, encoding="utf-8")
            ]
            if console_output:
                handlers.append(logging.StreamHandler())
            for handler in handlers:
                handler.setFormatter(formatter)
                handler.addFilter(_ExecRecordFilter())
                self.logger.addHandler(handler)

        self.handler = self.logger.handlers[0]

    def _emit(
        self, level: int, message: str, extra: Optional[Dict] = None
    ) -> None:
        self.logger.log(level, message, extra=extra)
        for handler in self.logger.handlers:
            handler.flush()

    def log_info(self, message: str) -> None:
        self._emit(logging.INFO, message)

    def log_warning(self, message: str) -> None:
        self._emit(logging.WARNING, message)

    def log_error(self, message: str) -> None:
        self._emit(logging.ERROR, message)

    def log_result(self, result, message: str) -> None:
        """Enregistre une fin d'exécution avec ses champs."""
        self._emit(
            logging.INFO if result.success else logging.ERROR,
            message,
            extra={
                "command": " ".join(result.argv),
                "status": result.status,
                "duration": f"{result.duration:.3f}",
            },
        )
