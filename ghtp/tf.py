"""Running ``terraform``/``tofu`` plan and show for the current directory."""

from __future__ import annotations

import contextlib
import itertools
import logging
import os
import shutil
import signal
import subprocess
import sys
import threading
from collections.abc import Iterator
from typing import TextIO

from ghtp.errors import (
    BinaryNotFoundError,
    FilePathError,
    OperationInterrupted,
    TpError,
)
from ghtp.tools import validate_file_path

SPINNER_INTERVAL = 0.1
SHOW_TIMEOUT = 30.0

_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
_log = logging.getLogger(__name__)


def _is_terminal(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class Spinner:
    """A terminal spinner; it stays silent when the stream is not a terminal."""

    def __init__(
        self,
        suffix: str = "",
        interval: float = SPINNER_INTERVAL,
        stream: TextIO | None = None,
    ) -> None:
        self.suffix = suffix
        self.interval = interval
        self._stream = stream if stream is not None else sys.stderr
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def active(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        """Begin animating, unless already running or not on a terminal."""
        if self._thread is not None or not _is_terminal(self._stream):
            return
        self._stopped.clear()
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop animating and clear the spinner line."""
        if self._thread is None:
            return
        self._stopped.set()
        self._thread.join()
        self._thread = None
        self._stream.write("\r\x1b[K")
        self._stream.flush()

    def _spin(self) -> None:
        for frame in itertools.cycle(_FRAMES):
            self._stream.write(f"\r{frame}{self.suffix}")
            self._stream.flush()
            if self._stopped.wait(self.interval):
                break

    def __enter__(self) -> Spinner:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


@contextlib.contextmanager
def _interrupt_watch() -> Iterator[threading.Event]:
    """Record SIGINT/SIGTERM in an event instead of letting them abort."""
    interrupted = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield interrupted
        return

    def handler(signum: int, _frame: object) -> None:
        _log.warning(
            "Signal %s received by process. Setting interruption flag.",
            signal.Signals(signum).name,
        )
        interrupted.set()

    watched = [signal.SIGINT, signal.SIGTERM]
    previous = {sig: signal.signal(sig, handler) for sig in watched}
    try:
        yield interrupted
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)
        _log.debug("Signal handler resources cleanup finished.")


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        pass


def create_plan(binary: str, plan_file: str) -> str:
    """Run a plan into ``plan_file`` and return the human-readable plan text."""
    if not binary:
        raise TpError("binary not configured: No path provided via config or default")
    try:
        plan_path = validate_file_path(plan_file)
    except FilePathError as exc:
        raise FilePathError(
            f"invalid 'planFile' (\"{plan_file}\"): {exc}", plan_file
        ) from exc

    executable = shutil.which(binary)
    if executable is None:
        raise BinaryNotFoundError(f"binary '{binary}' not found in PATH")

    command = [
        executable,
        "plan",
        "-no-color",
        "-input=false",
        "-detailed-exitcode",
        f"-out={plan_path}",
    ]
    _log.debug("Running %s plan (outputting to %s)...", binary, plan_path)

    failure: str | None = None
    with _interrupt_watch() as interrupted:
        with Spinner(" Creating Plan..."):
            try:
                result = subprocess.run(
                    command, capture_output=True, text=True, check=False
                )
            except OSError as exc:
                failure = str(exc)
            else:
                # With -detailed-exitcode, 2 means the plan holds changes.
                if result.returncode not in (0, 2):
                    failure = f"exit status {result.returncode}"
                    if result.stderr.strip():
                        failure += f"\n{result.stderr.strip()}"

    if interrupted.is_set():
        _log.warning("Interruption flag set. Plan process likely interrupted.")
        raise OperationInterrupted()

    if failure is not None:
        _log.error("Plan finished with non-interruption error: %s", failure)
        _remove_quietly(plan_path)
        raise TpError(f"terraform plan failed: {failure}")

    _log.debug("Terraform plan completed successfully.")
    return show_plan(binary, plan_path)


def show_plan(binary: str, plan_path: str) -> str:
    """Return the plain-text rendering of the saved plan at ``plan_path``."""
    _log.debug("Generating plan output...")
    executable = shutil.which(binary) or binary
    try:
        result = subprocess.run(
            [executable, "show", "-no-color", plan_path],
            capture_output=True,
            text=True,
            timeout=SHOW_TIMEOUT,
            check=True,
        )
    except subprocess.CalledProcessError as exc:
        detail = f"exit status {exc.returncode}"
        if exc.stderr and exc.stderr.strip():
            detail += f"\n{exc.stderr.strip()}"
        _log.error("Plan created, but failed to show plan file %r: %s", plan_path, detail)
        raise TpError(f'failed to show plan file "{plan_path}": {detail}') from exc
    except (OSError, subprocess.SubprocessError) as exc:
        _log.error("Plan created, but failed to show plan file %r: %s", plan_path, exc)
        raise TpError(f'failed to show plan file "{plan_path}": {exc}') from exc
    _log.debug("Plan output generated successfully.")
    return result.stdout