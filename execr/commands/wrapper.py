"""Constructeur fluent de commandes à sous-commandes.

Ce module fournit CommandWrapper et AsyncCommandWrapper, qui
accumulent des sous-commandes avant de lancer la commande de base.

Example:
    Construction explicite :

        az = CommandWrapper("az")
        az.arg("artifacts", "universal", "download").run(
            ["--file", "x"]
        )
        # Équivaut à execute("az", ["artifacts", "universal",
        #                           "download", "--file", "x"])

    Construction par attributs :

        git = CommandWrapper("git")
        git.branch()                 # git branch
        git.remote.add(["o", url])   # git remote add o <url>

Note:
    Les sous-commandes en attente sont propres à l'instance et
    vidées à chaque lancement, qu'il réussisse ou échoue. Une
    instance ne doit donc construire et lancer qu'une invocation
    à la fois : partager un wrapper entre plusieurs sites d'appel
    concurrents mélangerait leurs sous-commandes. Créer un wrapper
    par site d'appel dans ce cas.
"""

from typing import Any, Awaitable, List, Optional

from execr.commands.async_runner import AsyncCommandExecutor
from execr.commands.base import ExecResult
from execr.commands.options import (
    ArgsOrOptions,
    ExecOptions,
    OptionsLike,
    normalize_args,
)
from execr.commands.runner import SyncCommandExecutor


class CommandWrapper:
    """Commande de base enrichie de sous-commandes en attente.

    Cycle de vie : inactif (aucune sous-commande) -> accumulation
    (arg() ou accès à un attribut inconnu) -> inactif après chaque
    run() ou appel direct.

    Les noms d'attributs existants (command, pending, run, arg...)
    sont retournés tels quels ; seuls les noms inconnus et ne
    commençant pas par "_" deviennent des sous-commandes. Les
    sous-commandes invalides en Python (ex: "cherry-pick") passent
    par arg().

    Attributes:
        command: Commande de base (ex: "git").
        default_options: Options propres à cette commande,
            appliquées entre les défauts globaux et l'appel.
    """

    def __init__(
        self,
        command: str,
        default_options: Optional[OptionsLike] = None,
        executor: Optional[SyncCommandExecutor] = None,
    ) -> None:
        """Initialise le wrapper.

        Args:
            command: Commande de base.
            default_options: Options par défaut de la commande.
            executor: Exécuteur utilisé par run().

        Raises:
            ValueError: Si command est vide.
        """
        if not command or not command.strip():
            raise ValueError("La commande est requise.")
        self.command = command
        self.default_options = (
            None if default_options is None
            else ExecOptions.merge(default_options)
        )
        self._executor = executor or self._default_executor()
        self._pending: List[str] = []

    @staticmethod
    def _default_executor():
        return SyncCommandExecutor()

    @property
    def pending(self) -> List[str]:
        """Copie des sous-commandes en attente."""
        return list(self._pending)

    def arg(self, *tokens: Any) -> "CommandWrapper":
        """Ajoute une ou plusieurs sous-commandes littérales.

        Args:
            *tokens: Sous-commandes, converties en str.

        Returns:
            L'instance courante pour le chaînage.
        """
        self._pending.extend(str(token) for token in tokens)
        return self

    def __getattr__(self, name: str) -> "CommandWrapper":
        # Appelé uniquement pour les attributs inexistants
        if name.startswith("_"):
            raise AttributeError(name)
        return self.arg(name)

    def _take_pending(self) -> List[str]:
        """Détache les sous-commandes en attente et vide la liste."""
        tokens, self._pending = self._pending, []
        return tokens

    def _prepare(
        self,
        args_or_options: ArgsOrOptions,
        options: Optional[OptionsLike],
    ):
        tokens = self._take_pending()
        args, merged = normalize_args(
            args_or_options, options, self.default_options
        )
        return tokens + args, merged

    def run(
        self,
        args_or_options: ArgsOrOptions = None,
        options: Optional[OptionsLike] = None,
    ) -> ExecResult:
        """Lance la commande avec les sous-commandes accumulées.

        Args:
            args_or_options: Arguments finaux ou options.
            options: Options de l'appel.

        Returns:
            ExecResult de l'exécution.

        Raises:
            InvalidOptionsError: Si les options sont invalides.
            CommandSpawnError: Lancement impossible et fail_on_error.
            CommandFailedError: Échec et fail_on_error.
        """
        args, merged = self._prepare(args_or_options, options)
        return self._executor.run(self.command, args, merged)

    def __call__(
        self,
        args_or_options: ArgsOrOptions = None,
        options: Optional[OptionsLike] = None,
    ) -> ExecResult:
        return self.run(args_or_options, options)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(command={self.command!r}, "
            f"pending={self._pending!r})"
        )


class AsyncCommandWrapper(CommandWrapper):
    """Variante asynchrone de CommandWrapper.

    run() vide les sous-commandes dès son appel et retourne une
    coroutine à attendre :

        git = AsyncCommandWrapper("git")
        result = await git.log(["-1", "--oneline"])
    """

    def __init__(
        self,
        command: str,
        default_options: Optional[OptionsLike] = None,
        executor: Optional[AsyncCommandExecutor] = None,
    ) -> None:
        super().__init__(command, default_options, executor)

    @staticmethod
    def _default_executor():
        return AsyncCommandExecutor()

    def run(
        self,
        args_or_options: ArgsOrOptions = None,
        options: Optional[OptionsLike] = None,
    ) -> Awaitable[ExecResult]:
        """Lance la commande et retourne la coroutine du résultat.

        Les sous-commandes sont vidées avant le retour, même si
        la coroutine n'est jamais attendue.
        """
        args, merged = self._prepare(args_or_options, options)
        return self._executor.run(self.command, args, merged)
