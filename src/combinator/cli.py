# src/combinator/cli.py
import sys
import argparse
from pathlib import Path

# Module imports
from combinator import config
from combinator.core.assembler import assemble, unescape
from combinator.core.expander import expand_paths
from combinator.core.ignore import build_exclude_spec
from combinator.core.job import ensure_stdin_is_piped, read_job
from combinator.core.sink import write_output
from combinator.errors import CombinatorError
from combinator.models import RunConfig
from combinator.utils.trace import setup_trace_logger


def _non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'")
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog=config.PROG_NAME,
        description="Combine files and directories listed in a JSON job on stdin into one text, "
                    "printed to stdout or written to a temp file.",
        epilog='Example: echo \'{"paths":["."]}\' | %(prog)s --mode clipboard',
    )
    parser.add_argument(
        "--mode",
        type=str,
        default=config.DEFAULT_MODE,
        help="clipboard | temp (default: %(default)s)",
    )
    parser.add_argument(
        "--header-format",
        type=str,
        default=config.DEFAULT_HEADER_FORMAT,
        help="Header template, supports ${index}, ${basename}, ${relpath}",
    )
    parser.add_argument(
        "--separator",
        type=str,
        default=config.DEFAULT_SEPARATOR,
        help="Separator between files, supports \\n, \\t, \\r",
    )
    parser.add_argument(
        "--max-kb",
        type=_non_negative_int,
        default=config.DEFAULT_MAX_KB,
        help="Max size per file in KB (default: %(default)s)",
    )
    parser.add_argument("--skip-binary", action="store_true", help="Skip binary-like files")
    parser.add_argument(
        "--ram-dir",
        type=str,
        default=None,
        help="Directory for the temp file (Linux default: $XDG_RUNTIME_DIR or /dev/shm)",
    )
    parser.add_argument(
        "--exclude",
        metavar="PATTERN",
        action="append",
        default=[],
        help="gitignore-style pattern to skip inside expanded directories (repeatable)",
    )
    parser.add_argument(
        "--ignore-file",
        type=str,
        default=None,
        help="File with gitignore-style patterns, one per line",
    )
    parser.add_argument(
        "-v", "--verbose", "--debug",
        dest="verbose",
        action="store_true",
        help="Enable verbose debug output on stderr",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {config.VERSION}")
    return parser


def build_run_config(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        mode=args.mode,
        header_format=args.header_format,
        separator=unescape(args.separator),
        max_kb=args.max_kb,
        skip_binary=args.skip_binary,
        ram_dir=args.ram_dir,
        verbose=args.verbose,
        exclude=tuple(args.exclude),
    )


def run(args: argparse.Namespace) -> None:
    """Job Reader -> Path Expander -> Content Assembler -> Output Sink."""
    log = setup_trace_logger(args.verbose)
    run_config = build_run_config(args)
    log.debug("Args: %r", run_config)

    job = read_job(sys.stdin, log)

    ignore_file = Path(args.ignore_file) if args.ignore_file else None
    exclude = build_exclude_spec(run_config.exclude, ignore_file)

    files = expand_paths(job.paths, log, exclude)
    log.debug("Expanded %d paths to %d files", len(job.paths), len(files))

    result = assemble(files, run_config, log, job.workspace_root)
    write_output(result.text, run_config, log, sys.stdout)


def main(argv=None):
    # 1. Setup
    parser = create_arg_parser()
    args = parser.parse_args(argv)

    try:
        # 2. Nothing is read from a terminal
        ensure_stdin_is_piped(sys.stdin)
        run(args)

    except CombinatorError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(e.exit_code)

    except BrokenPipeError:
        # Reader went away; nothing left to report
        sys.exit(0)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
