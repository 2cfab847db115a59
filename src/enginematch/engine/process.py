"""Engine child process with a duplex line channel."""

from __future__ import annotations

import logging
import math
import queue
import shlex
import subprocess
import threading
from collections.abc import Sequence
from typing import TextIO

from enginematch.engine.errors import TransportError

_LOGGER = logging.getLogger(__name__)

_EOF = object()
_TEARDOWN_TIMEOUT_S = 5.0
_QUIT_GRACE_S = 2.0


class TrafficLog:
    """Shared sink mirroring every protocol line, tagged by engine name.

    Lines are written as ``name <- line`` (sent) and ``name -> line``
    (received) and flushed immediately.
    """

    __slots__ = ("_stream", "_lock")

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def sent(self, name: str, line: str) -> None:
        self._write(f"{name} <- {line}\n")

    def received(self, name: str, line: str) -> None:
        self._write(f"{name} -> {line}\n")

    def _write(self, text: str) -> None:
        with self._lock:
            self._stream.write(text)
            self._stream.flush()


class EngineProcess:
    """Owning handle for one engine subprocess.

    Output is pumped by a daemon thread into a queue so reads can be
    bounded by a deadline. Any I/O failure raises :class:`TransportError`;
    nothing is retried. :meth:`terminate` is idempotent and must be the
    last call made on the handle.
    """

    __slots__ = (
        "_process",
        "_name",
        "_log",
        "_lines",
        "_reader",
        "_terminated",
    )

    def __init__(
        self,
        process: subprocess.Popen[str],
        *,
        name: str,
        log: TrafficLog | None = None,
    ) -> None:
        self._process = process
        self._name = name
        self._log = log
        self._lines: queue.Queue[object] = queue.Queue()
        self._terminated = False
        self._reader = threading.Thread(
            target=self._pump,
            name=f"engine-reader-{process.pid}",
            daemon=True,
        )
        self._reader.start()

    @classmethod
    def spawn(
        cls,
        command: str | Sequence[str],
        *,
        name: str = "",
        log: TrafficLog | None = None,
    ) -> EngineProcess:
        """Start *command* with its stdin/stdout plugged into pipes."""
        if isinstance(command, str):
            args = shlex.split(command)
            display = command
        else:
            args = list(command)
            display = shlex.join(args)
        if not args:
            raise TransportError(name or "<none>", "spawn", "empty engine command")

        try:
            process = subprocess.Popen(
                args,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as exc:
            raise TransportError(
                name or display, "spawn", f"could not execute engine: {exc}"
            ) from exc

        _LOGGER.debug("Spawned engine '%s' (pid %d)", name or display, process.pid)
        return cls(process, name=name or display, log=log)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def is_terminated(self) -> bool:
        return self._terminated

    # ── Line channel ─────────────────────────────────────────────────────

    def write_line(self, text: str) -> None:
        if self._terminated:
            raise TransportError(self._name, "write", "engine was terminated")
        stdin = self._process.stdin
        if stdin is None:
            raise TransportError(self._name, "write", "no input pipe")
        try:
            stdin.write(text + "\n")
            stdin.flush()
        except (OSError, ValueError) as exc:
            raise TransportError(self._name, "write", repr(exc)) from exc
        if self._log is not None:
            self._log.sent(self._name, text)

    def read_line(self, timeout: float | None = None) -> str | None:
        """Return the next line, or *None* if *timeout* seconds elapse first.

        A closed stream raises :class:`TransportError`, on this and every
        later call.
        """
        if self._terminated:
            raise TransportError(self._name, "read", "engine was terminated")
        if timeout is not None:
            timeout = None if math.isinf(timeout) else max(timeout, 0.0)

        try:
            item = self._lines.get(timeout=timeout)
        except queue.Empty:
            return None

        if item is _EOF:
            self._lines.put(_EOF)
            raise TransportError(self._name, "read", "engine closed its output")

        line = str(item)
        if self._log is not None:
            self._log.received(self._name, line)
        return line

    # ── Teardown ─────────────────────────────────────────────────────────

    def terminate(self) -> None:
        """Close the input pipe, wait briefly, then send SIGTERM once.

        ``Popen.terminate`` is a no-op for a child that has already exited
        and been reaped during the grace period.
        """
        if self._terminated:
            return
        self._terminated = True

        if self._process.stdin is not None:
            try:
                self._process.stdin.close()
            except OSError as exc:
                _LOGGER.debug("Closing input of '%s': %r", self._name, exc)

        # Let the child act on a pending ``quit`` and the closed input first.
        try:
            self._process.wait(timeout=_QUIT_GRACE_S)
        except subprocess.TimeoutExpired:
            _LOGGER.debug("Engine '%s' did not exit on its own", self._name)
        self._process.terminate()
        try:
            self._process.wait(timeout=_TEARDOWN_TIMEOUT_S)
        except subprocess.TimeoutExpired:
            _LOGGER.warning(
                "Engine '%s' (pid %d) still running after SIGTERM",
                self._name,
                self._process.pid,
            )

        self._reader.join(timeout=_TEARDOWN_TIMEOUT_S)
        if self._process.stdout is not None and not self._reader.is_alive():
            self._process.stdout.close()
        _LOGGER.debug("Terminated engine '%s'", self._name)

    def __enter__(self) -> EngineProcess:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.terminate()

    # ── Internal ─────────────────────────────────────────────────────────

    def _pump(self) -> None:
        stdout = self._process.stdout
        try:
            if stdout is not None:
                for line in stdout:
                    self._lines.put(line.rstrip("\r\n"))
        except (OSError, ValueError) as exc:
            _LOGGER.debug("Reader for '%s' stopped: %r", self._name, exc)
        finally:
            self._lines.put(_EOF)
