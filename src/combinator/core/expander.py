# src/combinator/core/expander.py
import logging
import os
import stat
from pathlib import PurePath
from typing import List, Optional, Sequence

import pathspec

from combinator.core.ignore import is_excluded
from combinator.errors import NoAccessibleFilesError, NoFilesFoundError
from combinator.utils.trace import get_logger


class PathExpander:
    """
    Turns a mix of file and directory paths into a flat, ordered list of files.

    Access problems are collected instead of raised; the run only fails when
    nothing usable is left at the end.
    """

    def __init__(self, log: Optional[logging.Logger] = None, exclude: Optional[pathspec.PathSpec] = None):
        self.log = log or get_logger("expander")
        self.exclude = exclude
        self.errors: List[str] = []

    def _error(self, msg: str) -> None:
        self.log.debug("  -> Error: %s", msg)
        self.errors.append(msg)

    def _walk_dir(self, top: str) -> List[str]:
        found: List[str] = []

        def _on_walk_error(exc: OSError) -> None:
            self._error(f"Failed to access {top}: {exc}")

        # Top-down walk; sorting dirs in place fixes the traversal order and
        # lets excluded directories be pruned before they are entered.
        for dirpath, dirs, files in os.walk(top, onerror=_on_walk_error, followlinks=False):
            dirs.sort()
            if self.exclude is not None:
                for d in list(dirs):
                    rel = PurePath(os.path.relpath(os.path.join(dirpath, d), top)).as_posix()
                    if is_excluded(self.exclude, rel, is_directory=True):
                        self.log.debug("    -> Pruning directory: %s", os.path.join(dirpath, d))
                        dirs.remove(d)

            for name in sorted(files):
                fp = os.path.join(dirpath, name)
                if self.exclude is not None:
                    rel = PurePath(os.path.relpath(fp, top)).as_posix()
                    if is_excluded(self.exclude, rel):
                        self.log.debug("    -> Excluded: %s", fp)
                        continue
                try:
                    st = os.lstat(fp)
                except (OSError, ValueError) as e:
                    self._error(f"Failed to access {top}: {e}")
                    continue
                # Symlinks inside a directory are not followed
                if stat.S_ISREG(st.st_mode):
                    self.log.debug("    -> Found file in dir: %s", fp)
                    found.append(fp)
        return found

    def expand(self, paths: Sequence[str]) -> List[str]:
        out: List[str] = []
        self.errors = []

        for p in paths:
            self.log.debug("Processing path: %s", p)
            # Invalid path strings (embedded NUL) are access errors too
            try:
                st = os.stat(p)
            except (OSError, ValueError) as e:
                self._error(f"Cannot access {p}: {e}")
                continue

            if stat.S_ISREG(st.st_mode):
                self.log.debug("  -> Found file: %s", p)
                out.append(p)
            elif stat.S_ISDIR(st.st_mode):
                self.log.debug("  -> Expanding directory: %s", p)
                dir_files = self._walk_dir(p)
                self.log.debug("  -> Found %d files in directory", len(dir_files))
                out.extend(dir_files)
            else:
                self._error(f"{p} is neither file nor directory")

        if self.errors and not out:
            raise NoAccessibleFilesError(self.errors)

        if self.errors:
            self.log.debug(
                "Some errors occurred but %d files found:\n%s", len(out), "\n".join(self.errors)
            )

        if not out:
            raise NoFilesFoundError(paths)

        return out


def expand_paths(
    paths: Sequence[str],
    log: Optional[logging.Logger] = None,
    exclude: Optional[pathspec.PathSpec] = None,
) -> List[str]:
    return PathExpander(log, exclude).expand(paths)
