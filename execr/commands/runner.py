"""Exécuteur synchrone de commandes via subprocess.

Ce module fournit SyncCommandExecutor, qui lance une commande,
bloque jusqu'à sa terminaison et capture ses sorties, ainsi que
le cache de mémoïsation partagé par tout le processus.

Les deux sorties sont lues en parallèle via selectors, ce qui
permet d'appliquer max_buffer et timeout pendant la lecture :
un dépassement envoie kill_signal au groupe de processus de la
commande, et l'échec est alors reporté comme une terminaison
par signal.

Example :
    Exécution simple :

        from execr.commands import SyncCommandExecutor, normalize_args

        executor = SyncCommandExecutor(logger=logger)
        args, options = normalize_args(["-la"], {"cwd": "/tmp"})
        result = executor.run("ls", args, options)
        print(result.stdout)
"""

import json
import os
import selectors
import signal
import subprocess  # nosec B404
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from execr.commands.base import (
    CommandExecutor,
    ExecResult,
    SpawnOutcome,
    build_argv,
    build_env,
    send_kill_signal,
)
from execr.commands.options import ExecOptions
from execr.logging.base import Logger

Spawner = Callable[[List[str], ExecOptions], SpawnOutcome]

_READ_SIZE = 32768
_WRITE_SIZE = 4096


def signal_name(signum: int) -> str:
    """Retourne le nom d'un signal (ex: 15 -> SIGTERM)."""
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"SIG{signum}"


def _pump(
    proc: subprocess.Popen,
    options: ExecOptions,
    deadline: Optional[float],
) -> Tuple[bytes, bytes]:
    """Lit stdout et stderr, écrit stdin, jusqu'à EOF ou dépassement.

    Returns:
        Tuple (stdout, stderr) brut, tronqué à max_buffer.
    """
    outputs: Dict[int, bytearray] = {
        proc.stdout.fileno(): bytearray(),
        proc.stderr.fileno(): bytearray(),
    }
    pending = b""
    if options.input is not None:
        pending = options.input.encode(options.encoding)

    with selectors.DefaultSelector() as selector:
        selector.register(proc.stdout, selectors.EVENT_READ)
        selector.register(proc.stderr, selectors.EVENT_READ)
        if proc.stdin is not None:
            if pending:
                selector.register(proc.stdin, selectors.EVENT_WRITE)
            else:
                proc.stdin.close()

        while selector.get_map():
            wait = None
            if deadline is not None:
                wait = deadline - time.monotonic()
                if wait <= 0:
                    send_kill_signal(proc, options)
                    break
            for key, _ in selector.select(wait):
                if key.fileobj is proc.stdin:
                    try:
                        written = os.write(key.fd, pending[:_WRITE_SIZE])
                    except BrokenPipeError:
                        written = len(pending)
                    pending = pending[written:]
                    if not pending:
                        selector.unregister(key.fileobj)
                        proc.stdin.close()
                    continue

                chunk = os.read(key.fd, _READ_SIZE)
                if not chunk:
                    selector.unregister(key.fileobj)
                    continue
                buffer = outputs[key.fd]
                buffer += chunk
                if len(buffer) > options.max_buffer:
                    del buffer[options.max_buffer:]
                    send_kill_signal(proc, options)
                    return (
                        bytes(outputs[proc.stdout.fileno()]),
                        bytes(outputs[proc.stderr.fileno()]),
                    )

    return (
        bytes(outputs[proc.stdout.fileno()]),
        bytes(outputs[proc.stderr.fileno()]),
    )


def spawn_process(argv: List[str], options: ExecOptions) -> SpawnOutcome:
    """Lance un processus et attend sa terminaison.

    Primitive de lancement utilisée par SyncCommandExecutor, et
    seule fonction appelée par la mémoïsation.

    Args:
        argv: Ligne de commande complète.
        options: Options de l'invocation.

    Returns:
        SpawnOutcome brut. Les erreurs de lancement (commande
        introuvable, permission refusée, répertoire absent, octet
        nul dans un argument) sont reportées dans ``error`` et ne
        sont jamais levées.
    """
    start = time.monotonic()
    try:
        proc = subprocess.Popen(  # nosec B603
            argv,
            stdin=(
                subprocess.PIPE if options.input is not None
                else subprocess.DEVNULL
            ),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=options.cwd,
            env=build_env(options),
            start_new_session=True,
        )
    except (OSError, ValueError) as e:
        return SpawnOutcome(
            returncode=None,
            signal=None,
            stdout="",
            stderr="",
            error=str(e),
            duration=time.monotonic() - start,
        )

    deadline = start + options.timeout if options.timeout else None
    with proc:
        raw_stdout, raw_stderr = _pump(proc, options, deadline)
        proc.wait()

    returncode: Optional[int] = proc.returncode
    killed_by: Optional[str] = None
    if returncode is not None and returncode < 0:
        killed_by = signal_name(-returncode)
        returncode = None

    return SpawnOutcome(
        returncode=returncode,
        signal=killed_by,
        stdout=raw_stdout.decode(options.encoding, errors="replace"),
        stderr=raw_stderr.decode(options.encoding, errors="replace"),
        duration=time.monotonic() - start,
    )


class MemoizeCache:
    """Cache des lancements synchrones, partagé par le processus.

    La clé est la sérialisation JSON complète de l'invocation
    (commande, arguments, options). Les entrées ne sont jamais
    évincées ; clear() vide le cache.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, SpawnOutcome] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(command: str, args: List[str], options: ExecOptions) -> str:
        """Calcule la clé d'une invocation."""
        return json.dumps(
            [command, args, options.model_dump(mode="json")],
            sort_keys=True,
        )

    def get(self, key: str) -> Optional[SpawnOutcome]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, outcome: SpawnOutcome) -> SpawnOutcome:
        """Enregistre un résultat ; le premier enregistré est conservé."""
        with self._lock:
            return self._entries.setdefault(key, outcome)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


MEMOIZE_CACHE = MemoizeCache()


def clear_memoize_cache() -> None:
    """Vide le cache de mémoïsation du processus."""
    MEMOIZE_CACHE.clear()


class SyncCommandExecutor(CommandExecutor):
    """Exécuteur synchrone : bloque le thread appelant jusqu'à la fin
    de la commande.

    Prévu pour des commandes courtes. Avec memoize=True, deux
    invocations identiques ne lancent le processus qu'une fois ; la
    politique d'échec est appliquée à chaque appel, y compris sur un
    résultat servi par le cache.

    Attributes:
        _spawner: Primitive de lancement (spawn_process par défaut).
        _cache: Cache de mémoïsation.
    """

    def __init__(
        self,
        logger: Optional[Logger] = None,
        spawner: Optional[Spawner] = None,
        cache: Optional[MemoizeCache] = None,
    ) -> None:
        """Initialise l'exécuteur synchrone.

        Args:
            logger: Logger optionnel.
            spawner: Primitive de lancement injectable (tests).
            cache: Cache de mémoïsation, partagé par défaut.
        """
        super().__init__(logger)
        self._spawner = spawner
        self._cache = cache if cache is not None else MEMOIZE_CACHE

    def _spawn(
        self, command: str, args: List[str], options: ExecOptions
    ) -> SpawnOutcome:
        argv = build_argv(command, args, options)
        spawner = self._spawner or spawn_process
        if not options.memoize:
            self._log_start(command, args)
            return spawner(argv, options)

        key = self._cache.key(command, args, options)
        cached = self._cache.get(key)
        if cached is not None:
            self._log(
                self._plain.format_cached([command] + args, self._is_root)
            )
            return cached
        self._log_start(command, args)
        return self._cache.put(key, spawner(argv, options))

    def run(
        self,
        command: str,
        args: List[str],
        options: ExecOptions,
    ) -> ExecResult:
        """Exécute la commande et retourne son résultat.

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
        outcome = self._spawn(command, args, options)
        return self._finish(command, args, outcome, options)
