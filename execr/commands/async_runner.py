"""Exécuteur asynchrone de commandes via asyncio.

Ce module fournit :
    - AsyncCommandExecutor : même contrat que SyncCommandExecutor,
      sans bloquer la boucle d'événements.
    - RunningCommand : poignée sur une commande en cours, exposant
      le processus sous-jacent et des valeurs attendables par champ.

Les sorties sont accumulées par blocs au fil de leur arrivée. La
commande est terminée quand le processus se ferme (code ou signal)
ou quand son lancement échoue.

Example :
    Attente du résultat agrégé :

        executor = AsyncCommandExecutor()
        args, options = normalize_args(["--version"])
        result = await executor.run("git", args, options)

    Accès au processus et aux champs individuels :

        running = await executor.start("sleep", ["1"], options)
        print(running.process.pid)
        status = await running.status()
"""

import asyncio
import time
from typing import Dict, List, Optional, Union

from execr.commands.base import (
    CommandExecutor,
    ExecResult,
    SpawnOutcome,
    build_argv,
    build_env,
    send_kill_signal,
)
from execr.commands.options import ExecOptions
from execr.commands.runner import signal_name

_READ_SIZE = 32768
_EXIT_POLL = 0.01


class _OutputOverflow(Exception):
    """Levée en interne quand une sortie dépasse max_buffer."""


class RunningCommand:
    """Commande asynchrone en cours d'exécution.

    Chaque accesseur applique la même politique d'échec que run() :
    si fail_on_error est actif et que la commande échoue, l'attente
    de status(), stdout(), stderr() ou result() lève l'erreur.

    Attributes:
        command: Commande exécutée.
        args: Arguments de la commande.
        options: Options de l'invocation.
        process: Processus asyncio, None si le lancement a échoué.
    """

    def __init__(
        self,
        executor: "AsyncCommandExecutor",
        command: str,
        args: List[str],
        options: ExecOptions,
        process: Optional[asyncio.subprocess.Process],
        outcome: "asyncio.Future[SpawnOutcome]",
    ) -> None:
        self._executor = executor
        self.command = command
        self.args = args
        self.options = options
        self.process = process
        self._outcome = outcome

    @property
    def done(self) -> bool:
        """True quand le processus est terminé."""
        return self._outcome.done()

    async def result(self) -> ExecResult:
        """Attend la fin de la commande et retourne son résultat."""
        outcome = await asyncio.shield(self._outcome)
        return self._executor._finish(
            self.command, self.args, outcome, self.options
        )

    async def status(self) -> Union[int, str]:
        """Attend la fin de la commande et retourne son statut."""
        return (await self.result()).status

    async def stdout(self) -> str:
        """Attend la fin de la commande et retourne stdout nettoyé."""
        return (await self.result()).stdout

    async def stderr(self) -> str:
        """Attend la fin de la commande et retourne stderr nettoyé."""
        return (await self.result()).stderr

    def __await__(self):
        return self.result().__await__()

    def __repr__(self) -> str:
        pid = self.process.pid if self.process else None
        return (
            f"RunningCommand(command={self.command!r}, "
            f"args={self.args!r}, pid={pid}, done={self.done})"
        )


class AsyncCommandExecutor(CommandExecutor):
    """Exécuteur asynchrone basé sur asyncio.create_subprocess_exec.

    L'option memoize n'est pas prise en charge : elle est ignorée
    avec un avertissement dans le log.
    """

    async def _read_stream(
        self,
        stream: asyncio.StreamReader,
        buffer: bytearray,
        options: ExecOptions,
    ) -> None:
        while True:
            chunk = await stream.read(_READ_SIZE)
            if not chunk:
                return
            buffer += chunk
            if len(buffer) > options.max_buffer:
                del buffer[options.max_buffer:]
                raise _OutputOverflow()

    async def _write_input(
        self,
        process: asyncio.subprocess.Process,
        options: ExecOptions,
    ) -> None:
        if process.stdin is None:
            return
        try:
            if options.input:
                process.stdin.write(options.input.encode(options.encoding))
                await process.stdin.drain()
            process.stdin.close()
            await process.stdin.wait_closed()
        except (BrokenPipeError, ConnectionResetError):
            pass  # le processus a fermé son entrée avant la fin

    @staticmethod
    async def _wait_exit(process: asyncio.subprocess.Process) -> int:
        # wait() attend aussi la fermeture des tubes, que des processus
        # survivant au signal peuvent garder ouverts
        while process.returncode is None:
            await asyncio.sleep(_EXIT_POLL)
        return process.returncode

    async def _collect(
        self,
        process: asyncio.subprocess.Process,
        options: ExecOptions,
        start: float,
    ) -> SpawnOutcome:
        """Accumule les sorties et attend la fermeture du processus."""
        outputs: Dict[str, bytearray] = {
            "stdout": bytearray(),
            "stderr": bytearray(),
        }
        tasks = [
            asyncio.ensure_future(
                self._read_stream(process.stdout, outputs["stdout"], options)
            ),
            asyncio.ensure_future(
                self._read_stream(process.stderr, outputs["stderr"], options)
            ),
            asyncio.ensure_future(self._write_input(process, options)),
        ]
        killed = False
        try:
            await asyncio.wait_for(
                asyncio.gather(*tasks), timeout=options.timeout
            )
        except (_OutputOverflow, asyncio.TimeoutError):
            send_kill_signal(process, options)
            killed = True
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        returncode: Optional[int] = (
            await self._wait_exit(process) if killed
            else await process.wait()
        )
        killed_by: Optional[str] = None
        if returncode is not None and returncode < 0:
            killed_by = signal_name(-returncode)
            returncode = None

        return SpawnOutcome(
            returncode=returncode,
            signal=killed_by,
            stdout=bytes(outputs["stdout"]).decode(
                options.encoding, errors="replace"
            ),
            stderr=bytes(outputs["stderr"]).decode(
                options.encoding, errors="replace"
            ),
            duration=time.monotonic() - start,
        )

    async def start(
        self,
        command: str,
        args: List[str],
        options: ExecOptions,
    ) -> RunningCommand:
        """Lance la commande sans attendre sa fin.

        Args:
            command: Commande à exécuter.
            args: Arguments normalisés.
            options: Options fusionnées.

        Returns:
            RunningCommand exposant le processus et ses résultats.
        """
        if options.memoize:
            self._log_warning(
                "memoize ignoré par l'exécuteur asynchrone : "
                f"{self._plain.command_line([command] + args)}"
            )
        loop = asyncio.get_running_loop()
        start = time.monotonic()
        self._log_start(command, args)
        try:
            process = await asyncio.create_subprocess_exec(
                *build_argv(command, args, options),
                stdin=(
                    asyncio.subprocess.PIPE if options.input is not None
                    else asyncio.subprocess.DEVNULL
                ),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=options.cwd,
                env=build_env(options),
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            outcome: "asyncio.Future[SpawnOutcome]" = loop.create_future()
            outcome.set_result(
                SpawnOutcome(
                    returncode=None,
                    signal=None,
                    stdout="",
                    stderr="",
                    error=str(e),
                    duration=time.monotonic() - start,
                )
            )
            return RunningCommand(self, command, args, options, None, outcome)

        task = asyncio.ensure_future(self._collect(process, options, start))
        return RunningCommand(self, command, args, options, process, task)

    async def run(
        self,
        command: str,
        args: List[str],
        options: ExecOptions,
    ) -> ExecResult:
        """Exécute la commande et attend son résultat.

        Args:
            command: Commande à exécuter.
            args: Arguments normalisés.
            options: Options fusionnées.

        Returns:
            ExecResult avec sorties nettoyées.

        Raises:
            CommandSpawnError: Lancement impossible et fail_on_error.
            CommandFailedError: Échec de la commande et fail_on_error.
        """
        running = await self.start(command, args, options)
        return await running.result()
