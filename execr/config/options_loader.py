"""Chargement des options d'exécution par défaut depuis un fichier.

Example:
    Fichier de configuration attendu :

        [execr]
        fail_on_error = true
        max_buffer = 20971520
        env_file = ".env"

        [execr.commands.git]
        cwd = "/srv/repo"

        [execr.commands.az]
        timeout = 120

    Utilisation :

        loader = ExecOptionsLoader("config/app.toml")
        execr.configure(default_options=loader.load())
        git = execr.wrap("git", loader.load_command("git"))
"""

import json
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from execr.commands.options import ExecOptions
from execr.errors.exceptions import ConfigurationError, InvalidOptionsError

ConfigReader = Callable[[Path], Dict[str, Any]]


def read_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Lit un fichier de configuration TOML ou JSON.

    Le format est déterminé par l'extension.

    Raises:
        FileNotFoundError: Si le fichier n'existe pas.
        ValueError: Si l'extension n'est pas supportée.
        ConfigurationError: Si le contenu n'est pas lisible ou
            n'est pas une table.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Fichier de configuration non trouvé: {path}"
        )

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            with open(path, "rb") as f:
                data = tomllib.load(f)
        elif suffix == ".json":
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            raise ValueError(
                f"Extension non supportée: {suffix}. "
                "Utilisez .toml ou .json"
            )
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"{path} illisible : {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} doit contenir une table.")
    return data


class ExecOptionsLoader:
    """Chargeur d'ExecOptions depuis la section [execr].

    La sous-table ``commands`` contient les options propres à
    chaque commande ; elle n'est pas une option elle-même. Les
    ExecOptions produits ne portent que les clés présentes dans
    le fichier, et se superposent donc aux défauts sans les écraser.

    Attributes:
        DEFAULT_SECTION: Section lue par défaut ("execr").
        COMMANDS_KEY: Sous-table des options par commande.
    """

    DEFAULT_SECTION: str = "execr"
    COMMANDS_KEY: str = "commands"

    def __init__(
        self,
        config_path: Union[str, Path],
        reader: Optional[ConfigReader] = None,
    ) -> None:
        """Initialise le loader en lisant le fichier.

        Args:
            config_path: Chemin vers le fichier (.toml ou .json).
            reader: Fonction de lecture injectable, read_config_file
                par défaut.

        Raises:
            FileNotFoundError: Si le fichier n'existe pas.
            ValueError: Si l'extension n'est pas supportée.
        """
        self.config_path = Path(config_path)
        self._config = (reader or read_config_file)(self.config_path)

    @property
    def config(self) -> Dict[str, Any]:
        """Retourne le contenu brut du fichier."""
        return self._config

    def _section(self, section: Optional[str]) -> Mapping[str, Any]:
        name = section or self.DEFAULT_SECTION
        if name not in self._config:
            raise KeyError(
                f"Section '{name}' non trouvée dans {self.config_path}. "
                f"Sections disponibles: {list(self._config)}"
            )
        data = self._config[name]
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"La section '{name}' doit être une table."
            )
        return data

    def _commands(self, section: Optional[str]) -> Mapping[str, Any]:
        commands = self._section(section).get(self.COMMANDS_KEY, {})
        if not isinstance(commands, dict):
            raise ConfigurationError(
                f"[{section or self.DEFAULT_SECTION}.{self.COMMANDS_KEY}] "
                "doit être une table."
            )
        return commands

    @staticmethod
    def _merge(origin: str, *layers: Any) -> ExecOptions:
        try:
            return ExecOptions.merge(*layers)
        except InvalidOptionsError as e:
            raise ConfigurationError(
                f"Options invalides dans [{origin}]: {e}"
            ) from e

    def load(self, section: Optional[str] = None) -> ExecOptions:
        """Charge les options globales.

        Args:
            section: Nom de la section, "execr" par défaut.

        Returns:
            ExecOptions ne portant que les clés du fichier.

        Raises:
            KeyError: Si la section n'existe pas.
            ConfigurationError: Si une option est invalide.
        """
        data = {
            key: value for key, value in self._section(section).items()
            if key != self.COMMANDS_KEY
        }
        return self._merge(section or self.DEFAULT_SECTION, data)

    def list_commands(self, section: Optional[str] = None) -> List[str]:
        """Liste les commandes ayant des options dédiées."""
        return list(self._commands(section))

    def load_command(
        self, command: str, section: Optional[str] = None
    ) -> ExecOptions:
        """Charge les options d'une commande, superposées aux options
        globales du fichier.

        Une commande sans sous-table reçoit les options globales.

        Args:
            command: Nom de la commande (ex: "git").
            section: Nom de la section, "execr" par défaut.

        Returns:
            ExecOptions à passer à wrap().

        Raises:
            KeyError: Si la section n'existe pas.
            ConfigurationError: Si une option est invalide.
        """
        origin = (
            f"{section or self.DEFAULT_SECTION}."
            f"{self.COMMANDS_KEY}.{command}"
        )
        specific = self._commands(section).get(command, {})
        if not isinstance(specific, dict):
            raise ConfigurationError(f"[{origin}] doit être une table.")
        return self._merge(origin, self.load(section), specific)
