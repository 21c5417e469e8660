# src/combinator/core/sink.py
import logging
import os
import sys
import tempfile
from typing import Optional, TextIO

from combinator.config import MODE_CLIPBOARD, MODE_TEMP, SHM_DIR, TEMP_PREFIX, TEMP_SUFFIX
from combinator.errors import OutputWriteError, UnknownModeError
from combinator.models import RunConfig
from combinator.utils.trace import get_logger


def pick_tmp_dir(ram_dir: Optional[str] = None) -> str:
    """
    Chooses where the temp file goes: the explicit --ram-dir, then on Linux
    $XDG_RUNTIME_DIR and /dev/shm (RAM-backed), else the system temp dir.
    """
    if ram_dir:
        return ram_dir
    if sys.platform.startswith("linux"):
        xdg = os.environ.get("XDG_RUNTIME_DIR")
        if xdg and os.path.exists(xdg):
            return xdg
        if os.path.exists(SHM_DIR):
            return SHM_DIR
    return tempfile.gettempdir()


def write_temp_file(text: str, directory: str, log: Optional[logging.Logger] = None) -> str:
    """Writes `text` to a new combined-*.txt file in `directory` and returns its absolute path."""
    log = log or get_logger("sink")
    try:
        f = tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="",
            prefix=TEMP_PREFIX,
            suffix=TEMP_SUFFIX,
            dir=directory,
            delete=False,
        )
    except OSError as e:
        raise OutputWriteError(f"Failed to create temp file in {directory}: {e}") from e

    path = os.path.abspath(f.name)
    log.debug("Writing %d chars to %s", len(text), path)
    try:
        with f:
            f.write(text)
    except OSError as e:
        try:
            os.unlink(path)
        except OSError:
            pass
        raise OutputWriteError(f"Failed to write content to {path}: {e}") from e
    return path


def write_output(
    text: str,
    config: RunConfig,
    log: Optional[logging.Logger] = None,
    stdout: Optional[TextIO] = None,
) -> Optional[str]:
    """
    Emits the combined text according to config.mode.

    clipboard: the text itself goes to stdout.
    temp: the text goes to a kept temp file and its path goes to stdout.
    """
    log = log or get_logger("sink")
    out = stdout if stdout is not None else sys.stdout

    if config.mode == MODE_CLIPBOARD:
        log.debug("Output mode: clipboard, %d chars", len(text))
        out.write(text)
        out.flush()
        return None

    if config.mode == MODE_TEMP:
        directory = pick_tmp_dir(config.ram_dir)
        log.debug("Output mode: temp file in %s", directory)
        path = write_temp_file(text, directory, log)
        out.write(path + "\n")
        out.flush()
        return path

    raise UnknownModeError(config.mode)
