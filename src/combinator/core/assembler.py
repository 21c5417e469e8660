# src/combinator/core/assembler.py
import logging
import os
from typing import List, Optional, Sequence, Tuple

from combinator.config import SKIPPED_BINARY, SKIPPED_TOO_LARGE
from combinator.errors import MetadataError, ReadError
from combinator.models import AssemblyResult, RunConfig
from combinator.utils.tokenizer import Tokenizer
from combinator.utils.trace import get_logger

BINARY_CONTROL_RATIO = 0.02

# Unicode White_Space. str.isspace() also counts \x1c-\x1f, which must survive trimming.
TRAILING_WHITESPACE = (
    "\t\n\x0b\x0c\r \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)


def unescape(s: str) -> str:
    """Decodes the literal pairs \\n, \\r and \\t. No other escapes exist."""
    return s.replace("\\n", "\n").replace("\\r", "\r").replace("\\t", "\t")


def is_binary(buf: bytes) -> bool:
    """
    NUL anywhere means binary. Otherwise binary when more than 2% of the
    bytes are control characters other than \\t, \\n, \\v, \\f and \\r.
    """
    if not buf:
        return False
    if b"\0" in buf:
        return True
    non_text = sum(1 for b in buf if b < 9 or 14 <= b < 32)
    return non_text > BINARY_CONTROL_RATIO * len(buf)


def _lossy(path: str) -> str:
    return os.fsencode(path).decode("utf-8", errors="replace")


def display_basename(path: str) -> str:
    name = os.path.basename(path)
    if not name:
        return "unknown"
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        # Undecodable bytes from the filesystem (surrogate escapes)
        return "unknown"
    return name


def display_relpath(path: str, workspace_root: Optional[str]) -> str:
    """
    Lexical path of `path` relative to `workspace_root`.

    Falls back to `path` unchanged when there is no root, when exactly one of
    the two is absolute, or when no relative path exists (different drives).
    """
    if workspace_root is None:
        return _lossy(path)
    if os.path.isabs(path) != os.path.isabs(workspace_root):
        return _lossy(path)
    try:
        return _lossy(os.path.relpath(path, workspace_root))
    except ValueError:
        return _lossy(path)


def render_header(template: str, index: int, basename: str, relpath: str) -> str:
    # Chained plain replacements; anything else in the template is verbatim
    return (
        template.replace("${index}", str(index))
        .replace("${basename}", basename)
        .replace("${relpath}", relpath)
    )


class ContentAssembler:
    """
    Builds the combined text: for each file a header, then its content or a
    skip marker, with the separator between files only.

    Per-file stat and read failures abort the whole run, unlike the
    access errors tolerated during expansion.
    """

    def __init__(self, config: RunConfig, log: Optional[logging.Logger] = None, workspace_root: Optional[str] = None):
        self.config = config
        self.log = log or get_logger("assembler")
        self.workspace_root = workspace_root

    def _content(self, path: str) -> Tuple[str, bool]:
        """Returns (text to append, skipped)."""
        max_bytes = self.config.max_bytes
        try:
            size = os.stat(path).st_size
        except OSError as e:
            raise MetadataError(f"Failed to get metadata for {path}: {e}") from e

        if size > max_bytes:
            self.log.debug("  -> Skipped: too large (%d bytes > %d bytes)", size, max_bytes)
            return SKIPPED_TOO_LARGE, True

        try:
            with open(path, "rb") as f:
                buf = f.read()
        except OSError as e:
            raise ReadError(f"Failed to read file {path}: {e}") from e

        if self.config.skip_binary and is_binary(buf):
            self.log.debug("  -> Skipped: binary file detected")
            return SKIPPED_BINARY, True

        self.log.debug("  -> Added: %d bytes", len(buf))
        return buf.decode("utf-8", errors="replace").rstrip(TRAILING_WHITESPACE), False

    def assemble(self, files: Sequence[str]) -> AssemblyResult:
        parts: List[str] = []
        processed = 0
        skipped = 0
        total = len(files)

        self.log.debug("Starting file processing...")

        for i, path in enumerate(files, start=1):
            self.log.debug("Processing file %d of %d: %s", i, total, path)

            header = render_header(
                self.config.header_format,
                i,
                display_basename(path),
                display_relpath(path, self.workspace_root),
            )
            parts.append(header + "\n")

            content, was_skipped = self._content(path)
            parts.append(content + "\n")
            if was_skipped:
                skipped += 1
            else:
                processed += 1

            if i != total:
                parts.append(self.config.separator)

        text = "".join(parts)
        if self.log.isEnabledFor(logging.DEBUG):
            self.log.debug(
                "File processing complete: %d processed, %d skipped (~%d tokens)",
                processed, skipped, Tokenizer.count(text),
            )
        return AssemblyResult(text=text, processed=processed, skipped=skipped)


def assemble(
    files: Sequence[str],
    config: RunConfig,
    log: Optional[logging.Logger] = None,
    workspace_root: Optional[str] = None,
) -> AssemblyResult:
    return ContentAssembler(config, log, workspace_root).assemble(files)
