"""Producers that feed raw varnishlog lines into a LineChannel.

Each producer runs on its own daemon thread and closes the channel when its
input ends, which is what lets the reader see end of stream.
"""

import logging
import os
import shlex
import subprocess
import threading
from typing import Iterable

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from varnishlog.channel import LineChannel

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "varnishlog -g vxid"


def feed_lines(lines: Iterable[str], channel: LineChannel) -> None:
    """Put every line on the channel, then close it (also on failure)."""
    try:
        for line in lines:
            channel.put(line)
    finally:
        channel.close()


def start_file_feeder(path: str, channel: LineChannel) -> threading.Thread:
    """Read a finished log file into the channel from a daemon thread.

    The file is opened before the thread starts, so a missing file raises here.
    """
    f = open(path, "r", encoding="utf-8", errors="replace")

    def _run():
        logger.debug("Reading %s", path)
        with f:
            feed_lines(f, channel)

    t = threading.Thread(target=_run, name="varnishlog-file", daemon=True)
    t.start()
    return t


class FileFollower(FileSystemEventHandler):
    """Follows a growing log file (``varnishlog > file``) and feeds new lines.

    Lines are pushed only once complete; a trailing partial line waits for
    the rest of its text. ``stop`` closes the channel, dropping any partial line.
    """

    def __init__(self, path: str, channel: LineChannel, from_start: bool = True):
        super().__init__()
        self._path = os.path.abspath(path)
        self._channel = channel
        self._from_start = from_start
        self._fh = None
        self._partial = ""
        self._lock = threading.Lock()
        self._observer = None
        self._stopped = False

    @property
    def path(self) -> str:
        return self._path

    def _open(self):
        if self._fh is not None:
            return
        try:
            fh = open(self._path, "r", encoding="utf-8", errors="replace")
        except FileNotFoundError:
            logger.debug("File not found yet: %s", self._path)
            return
        if not self._from_start:
            fh.seek(0, os.SEEK_END)
        self._fh = fh
        logger.info("Following %s", self._path)

    def _read_new_lines(self):
        """Read from current position to EOF and put complete lines."""
        with self._lock:
            if self._stopped:
                return
            self._open()
            if self._fh is None:
                return

            try:
                size = os.path.getsize(self._path)
            except FileNotFoundError:
                logger.warning("File disappeared: %s", self._path)
                return
            if size < self._fh.tell():
                logger.info("File truncated, restarting from the top: %s", self._path)
                self._fh.seek(0)
                self._partial = ""

            data = self._fh.read()
            if not data:
                return

            data = self._partial + data
            lines = data.split("\n")
            self._partial = lines.pop()

            for line in lines:
                self._channel.put(line)

    def on_created(self, event):
        if not event.is_directory and os.path.abspath(event.src_path) == self._path:
            self._read_new_lines()

    def on_modified(self, event):
        if not event.is_directory and os.path.abspath(event.src_path) == self._path:
            self._read_new_lines()

    def start(self) -> None:
        self._read_new_lines()
        self._observer = Observer()
        self._observer.schedule(self, os.path.dirname(self._path), recursive=False)
        self._observer.start()

    def stop(self, timeout: float = 5.0) -> None:
        if self._stopped:
            return
        self._stopped = True

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=timeout)
            self._observer = None

        self._channel.close()
        if self._partial:
            logger.debug("Dropping partial line at stop: %r", self._partial)
        if self._fh is not None:
            self._fh.close()
            self._fh = None


class VarnishlogProcess:
    """Runs varnishlog as a subprocess and pumps its stdout into a channel."""

    def __init__(self, command: str | list[str], channel: LineChannel):
        if isinstance(command, str):
            command = shlex.split(command)
        self._command = command
        self._channel = channel
        self._proc: subprocess.Popen | None = None
        self._pump: threading.Thread | None = None

    @property
    def command(self) -> list[str]:
        return list(self._command)

    @property
    def returncode(self) -> int | None:
        return self._proc.returncode if self._proc else None

    def start(self) -> None:
        logger.info("Starting %s", " ".join(self._command))
        self._proc = subprocess.Popen(
            self._command,
            stdout=subprocess.PIPE,
            text=True,
            bufsize=1,
        )
        self._pump = threading.Thread(target=self._run, name="varnishlog-pump", daemon=True)
        self._pump.start()

    def _run(self):
        feed_lines(self._proc.stdout, self._channel)
        code = self._proc.wait()
        logger.info("%s exited with code %d", self._command[0], code)

    def wait(self, timeout: float | None = None) -> int:
        """Wait for the process to exit and return its exit code."""
        return self._proc.wait(timeout=timeout)

    def stop(self, timeout: float = 5.0) -> None:
        """Terminate the process (kill it after timeout) and wait for the pump."""
        if self._proc is None:
            return
        if self._proc.poll() is None:
            self._proc.terminate()
            try:
                self._proc.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                logger.warning("%s did not exit, killing", self._command[0])
                self._proc.kill()
                self._proc.wait()
        if self._pump is not None:
            self._pump.join(timeout=timeout)
