# src/combinator/errors.py


class CombinatorError(Exception):
    """Base class for every failure the CLI reports. `exit_code` is the process status."""
    exit_code = 1


class UsageError(CombinatorError):
    exit_code = 2


class EmptyInputError(CombinatorError):
    exit_code = 3


class MalformedJsonError(CombinatorError):
    exit_code = 4


class NoPathsError(CombinatorError):
    exit_code = 5


class NoAccessibleFilesError(CombinatorError):
    exit_code = 6

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("No accessible files found. Errors:\n" + "\n".join(self.errors))


class NoFilesFoundError(CombinatorError):
    exit_code = 7

    def __init__(self, paths):
        self.paths = list(paths)
        super().__init__(f"No files found from provided paths: {self.paths!r}")


class MetadataError(CombinatorError):
    exit_code = 8


class ReadError(CombinatorError):
    exit_code = 9


class UnknownModeError(CombinatorError):
    exit_code = 10

    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(f"Unknown mode '{mode}'. Use 'clipboard' or 'temp'")


class OutputWriteError(CombinatorError):
    exit_code = 11


class IgnoreFileError(CombinatorError):
    exit_code = 12
