# src/combinator/core/ignore.py
from pathlib import Path
from typing import Iterable, List, Optional

import pathspec

from combinator.errors import IgnoreFileError


def load_ignore_file(ignore_file: Path) -> List[str]:
    """Reads gitignore-style patterns, one per line."""
    try:
        with open(ignore_file, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except OSError as e:
        raise IgnoreFileError(f"Failed to read ignore file {ignore_file}: {e}") from e


def build_exclude_spec(
    patterns: Iterable[str] = (),
    ignore_file: Optional[Path] = None,
) -> Optional[pathspec.PathSpec]:
    """
    Compiles --exclude patterns and the lines of --ignore-file into a PathSpec.
    Returns None when there is nothing to exclude, so expansion stays unfiltered.
    """
    lines = list(patterns)
    if ignore_file is not None:
        lines.extend(load_ignore_file(ignore_file))

    # Comments and blanks compile to no-op patterns; skip them for the emptiness check
    if not any(line.strip() and not line.lstrip().startswith("#") for line in lines):
        return None

    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def is_excluded(spec: Optional[pathspec.PathSpec], rel_path: str, is_directory: bool = False) -> bool:
    """
    Matches a path relative to the expanded directory, in POSIX form.
    Directories get a trailing slash so that patterns like "build/" apply.
    """
    if spec is None:
        return False
    if is_directory and not rel_path.endswith("/"):
        rel_path += "/"
    return spec.match_file(rel_path)
