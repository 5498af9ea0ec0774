"""Tests pour le module logging."""

import logging
from unittest.mock import MagicMock

from execr.commands.base import ExecResult
from execr.commands.options import ExecOptions
from execr.commands.runner import SyncCommandExecutor
from execr.logging import FileLogger, Logger


class TestFileLogger:
    """Tests pour FileLogger."""

    def test_implements_logger_interface(self, tmp_path):
        """Vérifie que FileLogger implémente l'interface Logger."""
        logger = FileLogger(str(tmp_path / "test.log"))

        assert isinstance(logger, Logger)

    def test_log_info(self, tmp_path):
        """Test du logging info."""
        log_file = tmp_path / "test.log"
        logger = FileLogger(str(log_file))

        logger.log_info("[user] Exécution : git status")

        content = log_file.read_text(encoding="utf-8")
        assert "INFO" in content
        assert "git status" in content

    def test_log_warning(self, tmp_path):
        """Test du logging warning."""
        log_file = tmp_path / "test.log"
        logger = FileLogger(str(log_file))

        logger.log_warning("Warning message")

        content = log_file.read_text()
        assert "WARNING" in content
        assert "Warning message" in content

    def test_log_error(self, tmp_path):
        """Test du logging error."""
        log_file = tmp_path / "test.log"
        logger = FileLogger(str(log_file))

        logger.log_error("Error message")

        content = log_file.read_text()
        assert "ERROR" in content
        assert "Error message" in content

    def test_creates_log_directory(self, tmp_path):
        """Test que le répertoire de log est créé si nécessaire."""
        log_file = tmp_path / "subdir" / "test.log"

        logger = FileLogger(str(log_file))
        logger.log_info("Test")

        assert log_file.exists()

    def test_config_from_dict(self, tmp_path):
        """Test de la configuration depuis un dictionnaire."""
        log_file = tmp_path / "test.log"
        config = {
            "logging": {
                "level": "WARNING",
                "format": "%(levelname)s - %(message)s"
            }
        }

        logger = FileLogger(str(log_file), config=config)
        logger.log_info("Ignoré")
        logger.log_warning("Test")

        content = log_file.read_text()
        assert "WARNING - Test" in content
        assert "Ignoré" not in content

    def test_niveau_inconnu_revient_a_info(self, tmp_path):
        """Un niveau inconnu revient à INFO."""
        logger = FileLogger(
            str(tmp_path / "test.log"),
            config={"logging": {"level": "BAVARD"}},
        )
        assert logger.logger.level == logging.INFO

    def test_utf8_encoding(self, tmp_path):
        """Test de l'encodage UTF-8."""
        log_file = tmp_path / "test.log"
        logger = FileLogger(str(log_file))

        logger.log_info("Message avec accents: éàü")

        content = log_file.read_text(encoding="utf-8")
        assert "éàü" in content

    def test_pas_de_propagation(self, tmp_path):
        """Le logger ne propage pas vers le logger racine."""
        logger = FileLogger(str(tmp_path / "test.log"))
        assert logger.logger.propagate is False


class TestFileLoggerConsole:
    """Tests pour FileLogger avec sortie console et handlers dupliqués."""

    def test_console_output_active(self, tmp_path):
        """FileLogger avec console_output=True crée un StreamHandler."""
        logger = FileLogger(str(tmp_path / "console.log"), console_output=True)

        assert len(logger.logger.handlers) == 2
        assert isinstance(logger.logger.handlers[1], logging.StreamHandler)
        logger.log_info("Test console")

    def test_logger_handler_existant_reutilise(self, tmp_path):
        """Deux FileLogger sur le même fichier partagent le handler."""
        log_file = str(tmp_path / "shared.log")

        logger1 = FileLogger(log_file)
        logger2 = FileLogger(log_file)

        assert logger2.handler is logger1.handler
        assert len(logger2.logger.handlers) == 1
        logger2.log_info("Test handler réutilisé")


class TestLogResult:
    """Tests de l'enregistrement des fins d'exécution."""

    def test_champs_dans_le_format(self, tmp_path):
        """Commande, statut et durée sont disponibles dans le format."""
        log_file = tmp_path / "commands.log"
        logger = FileLogger(
            str(log_file),
            config={"logging": {
                "format": "%(levelname)s|%(status)s|%(duration)s|%(command)s"
            }},
        )

        logger.log_result(
            ExecResult("git", ["status"], 0, "", "", duration=0.25),
            "git status : statut 0 (0.250s)",
        )
        logger.log_result(
            ExecResult("sleep", ["9"], "SIGTERM", "", ""),
            "sleep 9 a échoué.",
        )

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "INFO|0|0.250|git status"
        assert lines[1] == "ERROR|SIGTERM|0.000|sleep 9"

    def test_messages_simples_avec_format_de_resultat(self, tmp_path):
        """Les autres messages reçoivent des champs par défaut."""
        log_file = tmp_path / "commands.log"
        logger = FileLogger(
            str(log_file),
            config={"logging": {"format": "%(status)s %(message)s"}},
        )

        logger.log_info("[user] Exécution : ls")

        assert log_file.read_text(encoding="utf-8").strip() == (
            "- [user] Exécution : ls"
        )

    def test_interface_par_defaut(self):
        """Sans surcharge, log_result choisit info ou error."""
        logger = MagicMock(spec=Logger)
        ok = ExecResult("true", [], 0, "", "")
        ko = ExecResult("false", [], 1, "", "")

        Logger.log_result(logger, ok, "ok")
        Logger.log_result(logger, ko, "ko")

        logger.log_info.assert_called_once_with("ok")
        logger.log_error.assert_called_once_with("ko")

    def test_executeur_ecrit_le_resultat(self, tmp_path):
        """Une exécution réelle laisse une ligne de résultat."""
        log_file = tmp_path / "commands.log"
        logger = FileLogger(
            str(log_file),
            config={"logging": {"format": "%(status)s %(command)s"}},
        )

        SyncCommandExecutor(logger=logger).run(
            "echo", ["journal"], ExecOptions()
        )

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert lines == ["- -", "0 echo journal"]
