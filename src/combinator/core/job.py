# src/combinator/core/job.py
import json
import logging
import sys
from typing import Optional, TextIO

from combinator.config import EXAMPLE_JSON, EXPECTED_JSON_SHAPE, PROG_NAME
from combinator.errors import EmptyInputError, MalformedJsonError, NoPathsError, UsageError
from combinator.models import Job
from combinator.utils.trace import get_logger

USAGE_EXAMPLE = (
    "This command expects JSON on stdin (pipe).\n\n"
    "Example:\n"
    f"  echo '{{\"paths\":[\".\"]}}' | {PROG_NAME} --mode temp\n"
    "Use --help for details."
)


def ensure_stdin_is_piped(stream: TextIO) -> None:
    """Raises UsageError when stdin is an interactive terminal. Nothing is read."""
    isatty = getattr(stream, "isatty", None)
    if isatty is not None and isatty():
        raise UsageError(USAGE_EXAMPLE)


def _read_all(stream) -> str:
    # Prefer the raw bytes so decoding does not depend on the locale
    raw = getattr(stream, "buffer", stream).read()
    if isinstance(raw, bytes):
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedJsonError(f"Failed to read from stdin: input is not valid UTF-8 ({e})") from e
    return raw


def _malformed(reason: str) -> MalformedJsonError:
    return MalformedJsonError(
        f"Failed to parse JSON input. Expected format: {EXPECTED_JSON_SHAPE}\n\nCaused by: {reason}"
    )


def _is_valid_text(s: str) -> bool:
    try:
        s.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def parse_job(text: str, log: Optional[logging.Logger] = None) -> Job:
    """
    Validates the stdin payload and builds a Job.

    Accepts `workspaceRoot` as a legacy alias of `workspace_root`; giving
    both is treated as malformed input. Unknown keys are ignored.
    """
    log = log or get_logger("job")

    if not text.strip():
        raise EmptyInputError(f"No input provided. Expected JSON on stdin like: {EXAMPLE_JSON}")

    log.debug("Input JSON: %s", text.strip())

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise _malformed(str(e)) from e

    if not isinstance(data, dict):
        raise _malformed(f"expected a JSON object, got {type(data).__name__}")

    if "paths" not in data:
        raise _malformed("missing field `paths`")
    paths = data["paths"]
    if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
        raise _malformed("`paths` must be an array of strings")

    if "workspace_root" in data and "workspaceRoot" in data:
        raise _malformed("duplicate field `workspace_root` (also given as `workspaceRoot`)")
    workspace_root = data.get("workspace_root", data.get("workspaceRoot"))
    if workspace_root is not None and not isinstance(workspace_root, str):
        raise _malformed("`workspace_root` must be a string")

    # json accepts lone surrogate escapes ("\ud800"); they are not valid Unicode text
    for value in paths + ([workspace_root] if workspace_root is not None else []):
        if not _is_valid_text(value):
            raise _malformed(f"lone surrogate in string {value!r}")

    log.debug("Parsed input: paths=%r, workspace_root=%r", paths, workspace_root)

    if not paths:
        raise NoPathsError("No paths provided in input JSON")

    return Job(paths=tuple(paths), workspace_root=workspace_root)


def read_job(stream: Optional[TextIO] = None, log: Optional[logging.Logger] = None) -> Job:
    """Reads the whole of stdin and parses it into a Job."""
    stream = stream if stream is not None else sys.stdin
    return parse_job(_read_all(stream), log)
