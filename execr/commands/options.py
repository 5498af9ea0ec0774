"""Options d'exécution et normalisation des arguments.

Ce module définit :
    - ExecOptions : modèle Pydantic des options d'une invocation.
    - normalize_args : réconcilie les différentes formes d'appel
      en un couple (arguments, options) canonique.

Example:
    Les trois appels suivants sont équivalents :

        normalize_args(["status"], {"cwd": "/repo"})
        normalize_args(["status"], ExecOptions(cwd="/repo"))
        normalize_args(["status", None, ""], {"cwd": "/repo"})

    Un dictionnaire passé en premier est traité comme les options :

        normalize_args({"fail_on_error": False})
        # ([], ExecOptions(fail_on_error=False, ...))
"""

import signal
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from execr.errors.exceptions import InvalidOptionsError

DEFAULT_MAX_BUFFER = 1024 * 1024 * 10

OptionsLike = Union["ExecOptions", Mapping]
ArgsOrOptions = Union[List[Any], Tuple[Any, ...], str, OptionsLike, None]


class ExecOptions(BaseModel):
    """Options d'une invocation de commande.

    Les clés camelCase historiques (failOnError, maxBuffer,
    killSignal, envFile) sont acceptées comme alias.

    Attributes:
        fail_on_error: Lever une exception si la commande échoue.
        memoize: Mettre en cache les appels synchrones identiques.
        max_buffer: Taille maximale en octets de chaque sortie.
        cwd: Répertoire de travail.
        env: Variables d'environnement, fusionnées avec os.environ.
        env_file: Fichier .env chargé sous env.
        input: Texte envoyé sur l'entrée standard.
        timeout: Délai en secondes avant l'envoi de kill_signal.
        kill_signal: Signal envoyé en cas de dépassement.
        encoding: Encodage des sorties capturées.
        shell: Exécuter via /bin/sh -c.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )

    fail_on_error: bool = Field(default=True, alias="failOnError")
    memoize: bool = False
    max_buffer: int = Field(
        default=DEFAULT_MAX_BUFFER, gt=0, alias="maxBuffer"
    )
    cwd: Optional[Path] = None
    env: Optional[Dict[str, str]] = None
    env_file: Optional[Path] = Field(default=None, alias="envFile")
    input: Optional[str] = None
    timeout: Optional[float] = Field(default=None, gt=0)
    kill_signal: str = Field(default="SIGTERM", alias="killSignal")
    encoding: str = "utf-8"
    shell: bool = False

    @field_validator("kill_signal", mode="before")
    @classmethod
    def _validate_kill_signal(cls, value: Any) -> str:
        """Normalise le signal en nom canonique (ex: 15 -> SIGTERM)."""
        try:
            if isinstance(value, int):
                return signal.Signals(value).name
            name = str(value).upper()
            if not name.startswith("SIG"):
                name = f"SIG{name}"
            return signal.Signals[name].name
        except (KeyError, ValueError):
            raise ValueError(f"Signal inconnu : {value!r}")

    @property
    def kill_signal_number(self) -> int:
        """Numéro du signal de terminaison."""
        return int(signal.Signals[self.kill_signal])

    @classmethod
    def _canonical_keys(cls, data: Mapping) -> Dict[str, Any]:
        """Traduit les alias camelCase en noms de champs."""
        aliases = {
            field.alias: name
            for name, field in cls.model_fields.items()
            if field.alias
        }
        return {aliases.get(key, key): value for key, value in data.items()}

    @classmethod
    def merge(cls, *layers: Optional[OptionsLike]) -> "ExecOptions":
        """Construit des options en superposant plusieurs couches.

        Chaque couche surcharge les précédentes. Pour un ExecOptions,
        seuls les champs explicitement renseignés sont pris en compte,
        de sorte qu'une couche n'écrase jamais une valeur par défaut
        d'une couche inférieure avec sa propre valeur par défaut.

        Args:
            *layers: Dictionnaires, ExecOptions ou None (ignorés).

        Returns:
            Instance fusionnée.

        Raises:
            InvalidOptionsError: Si une couche n'est pas un mapping
                ou si une valeur est invalide.
        """
        data: Dict[str, Any] = {}
        for layer in layers:
            if layer is None:
                continue
            if isinstance(layer, ExecOptions):
                data.update(
                    {name: getattr(layer, name)
                     for name in layer.model_fields_set}
                )
            elif isinstance(layer, Mapping):
                data.update(cls._canonical_keys(layer))
            else:
                raise InvalidOptionsError(
                    f"Options invalides : {layer!r}. "
                    "Attendu un dict ou un ExecOptions."
                )
        try:
            return cls(**data)
        except ValidationError as e:
            raise InvalidOptionsError(f"Options invalides : {e}") from e


_global_defaults: Optional[ExecOptions] = None


def set_default_options(options: Optional[OptionsLike]) -> None:
    """Définit les options par défaut globales du processus.

    Args:
        options: Options appliquées sous les défauts des wrappers
            et les options d'appel. None pour réinitialiser.
    """
    global _global_defaults
    _global_defaults = (
        None if options is None else ExecOptions.merge(options)
    )


def get_default_options() -> Optional[ExecOptions]:
    """Retourne les options par défaut globales, ou None."""
    return _global_defaults


def _is_options(value: Any) -> bool:
    return isinstance(value, (ExecOptions, Mapping))


def _clean_arguments(value: Any) -> List[str]:
    """Convertit la forme positionnelle en liste d'arguments.

    None, False et les chaînes vides sont retirés ; 0 est conservé.
    """
    if value is None:
        return []
    if isinstance(value, (str, Path)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise InvalidOptionsError(
            f"Arguments invalides : {value!r}. "
            "Attendu une liste, un dict d'options ou None."
        )
    return [
        str(arg) for arg in value
        if arg is not None and arg is not False and arg != ""
    ]


def normalize_args(
    args_or_options: ArgsOrOptions = None,
    options: Optional[OptionsLike] = None,
    defaults: Optional[OptionsLike] = None,
) -> Tuple[List[str], ExecOptions]:
    """Réconcilie arguments et options en une forme canonique.

    Si le premier paramètre a la forme d'options (dict ou
    ExecOptions), aucun argument n'est fourni et ``options`` est
    ignoré. Sinon il est traité comme la liste d'arguments.

    Priorité des options : défauts globaux < ``defaults`` < appel.

    Args:
        args_or_options: Liste d'arguments, options ou None.
        options: Options de l'appel.
        defaults: Options par défaut propres à une commande enveloppée.

    Returns:
        Tuple (arguments, options).

    Raises:
        InvalidOptionsError: Si la forme d'appel ou une option
            est invalide.
    """
    if _is_options(args_or_options):
        arguments: List[str] = []
        call_options = args_or_options
    else:
        arguments = _clean_arguments(args_or_options)
        call_options = options

    merged = ExecOptions.merge(_global_defaults, defaults, call_options)
    return arguments, merged
