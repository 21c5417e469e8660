# src/combinator/models.py
from dataclasses import dataclass
from typing import Optional, Tuple

@dataclass(frozen=True)
class Job:
    """The parsed stdin request."""
    paths: Tuple[str, ...]
    workspace_root: Optional[str] = None

@dataclass(frozen=True)
class RunConfig:
    """Resolved CLI options. `separator` is already escape-decoded."""
    mode: str
    header_format: str
    separator: str
    max_kb: int
    skip_binary: bool = False
    ram_dir: Optional[str] = None
    verbose: bool = False
    exclude: Tuple[str, ...] = ()

    @property
    def max_bytes(self) -> int:
        return self.max_kb * 1024

@dataclass(frozen=True)
class AssemblyResult:
    text: str
    processed: int
    skipped: int
