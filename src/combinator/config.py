# src/combinator/config.py

VERSION = "0.1.0"
PROG_NAME = "the-great-combinator"

MODE_CLIPBOARD = "clipboard"
MODE_TEMP = "temp"
VALID_MODES = (MODE_CLIPBOARD, MODE_TEMP)

DEFAULT_MODE = MODE_TEMP
DEFAULT_HEADER_FORMAT = "file ${index}: ${relpath}"
# Kept escaped; decoded by unescape() at startup
DEFAULT_SEPARATOR = "\\n\\n"
DEFAULT_MAX_KB = 1024

SKIPPED_TOO_LARGE = "<skipped: too large>"
SKIPPED_BINARY = "<skipped: binary>"

TEMP_PREFIX = "combined-"
TEMP_SUFFIX = ".txt"
SHM_DIR = "/dev/shm"

EXPECTED_JSON_SHAPE = '{"paths":["path1","path2"],"workspace_root":"optional"}'
EXAMPLE_JSON = '{"paths":["./file.txt"],"workspace_root":"."}'
