# tests/test_cli.py
import io
import json
import os
import sys
from unittest.mock import patch

import pytest

from combinator.cli import create_arg_parser, main
from combinator.utils.tokenizer import Tokenizer


class TtyStdin(io.StringIO):
    def isatty(self):
        return True


def run_cli(monkeypatch, payload, args):
    """Runs main() with `payload` piped on stdin. Returns the exit code."""
    if not isinstance(payload, str):
        payload = json.dumps(payload)
    monkeypatch.setattr(sys, "stdin", io.StringIO(payload))
    try:
        main(args)
    except SystemExit as e:
        return e.code
    return 0


@pytest.fixture
def two_files(tmp_path):
    (tmp_path / "hello.txt").write_text("Hello, World!", encoding="utf-8")
    (tmp_path / "world.txt").write_text("Goodbye, Universe!", encoding="utf-8")
    return tmp_path


# --- Argument parsing ---

def test_defaults():
    args = create_arg_parser().parse_args([])
    assert args.mode == "temp"
    assert args.header_format == "file ${index}: ${relpath}"
    assert args.separator == "\\n\\n"
    assert args.max_kb == 1024
    assert args.skip_binary is False
    assert args.ram_dir is None
    assert args.verbose is False
    assert args.exclude == []


@pytest.mark.parametrize("flag", ["-v", "--verbose", "--debug"])
def test_verbose_aliases(flag):
    assert create_arg_parser().parse_args([flag]).verbose is True


def test_negative_max_kb_rejected(capsys):
    with pytest.raises(SystemExit) as exc:
        create_arg_parser().parse_args(["--max-kb", "-1"])
    assert exc.value.code == 2


# --- End-to-end ---

def test_terminal_stdin_exits_with_usage(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", TtyStdin('{"paths": ["x"]}'))
    with pytest.raises(SystemExit) as exc:
        main(["--mode", "clipboard"])
    assert exc.value.code == 2
    captured = capsys.readouterr()
    assert "expects JSON on stdin" in captured.err
    assert captured.out == ""


def test_single_relative_file(tmp_path, monkeypatch, capsys):
    (tmp_path / "a.txt").write_text("Hello, World!", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    code = run_cli(monkeypatch, {"paths": ["a.txt"]}, ["--mode", "clipboard"])

    assert code == 0
    assert capsys.readouterr().out == "file 1: a.txt\nHello, World!\n"


def test_clipboard_content_exact_match(two_files, monkeypatch, capsys):
    payload = {
        "paths": [str(two_files / "hello.txt"), str(two_files / "world.txt")],
        "workspace_root": str(two_files),
    }
    code = run_cli(monkeypatch, payload, [
        "--mode", "clipboard",
        "--header-format", "=== File ${index}: ${basename} ===",
        "--separator", "\\n---SEPARATOR---\\n",
    ])

    assert code == 0
    expected = (
        "=== File 1: hello.txt ===\nHello, World!\n"
        "\n---SEPARATOR---\n"
        "=== File 2: world.txt ===\nGoodbye, Universe!"
    )
    assert capsys.readouterr().out.strip() == expected


def test_directory_with_relative_paths(tmp_path, monkeypatch, capsys):
    (tmp_path / "root.txt").write_text("root content", encoding="utf-8")
    (tmp_path / "subdir").mkdir()
    (tmp_path / "subdir" / "nested.txt").write_text("nested content", encoding="utf-8")

    payload = {"paths": [str(tmp_path)], "workspaceRoot": str(tmp_path)}
    code = run_cli(monkeypatch, payload, ["--mode", "clipboard", "--header-format", "${index}. ${relpath}"])

    assert code == 0
    out = capsys.readouterr().out
    assert out == (
        "1. root.txt\nroot content\n"
        "\n\n"
        f"2. {os.path.join('subdir', 'nested.txt')}\nnested content\n"
    )


def test_header_and_separator_counts(tmp_path, monkeypatch, capsys):
    for name in ("one.txt", "two.txt", "three.txt"):
        (tmp_path / name).write_text(f"body of {name}", encoding="utf-8")

    code = run_cli(monkeypatch, {"paths": [str(tmp_path)]}, [
        "--mode", "clipboard", "--header-format", "## ${basename}", "--separator", "@@\\t@@",
    ])

    assert code == 0
    out = capsys.readouterr().out
    assert out.count("## ") == 3
    assert out.count("@@\t@@") == 2


def test_large_and_binary_files_are_replaced(tmp_path, monkeypatch, capsys):
    (tmp_path / "big.txt").write_text("Z" * 3000, encoding="utf-8")
    (tmp_path / "blob.bin").write_bytes(b"HIDDEN\x00PAYLOAD")
    (tmp_path / "ok.txt").write_text("visible", encoding="utf-8")

    code = run_cli(monkeypatch, {"paths": [str(tmp_path)]}, [
        "--mode", "clipboard", "--max-kb", "2", "--skip-binary",
    ])

    assert code == 0
    out = capsys.readouterr().out
    assert "<skipped: too large>" in out
    assert "<skipped: binary>" in out
    assert "ZZZ" not in out
    assert "HIDDEN" not in out
    assert "visible" in out


def test_temp_mode_matches_clipboard_output(two_files, monkeypatch, capsys):
    payload = {"paths": [str(two_files / "hello.txt"), str(two_files / "world.txt")]}
    out_dir = two_files / "out"
    out_dir.mkdir()

    assert run_cli(monkeypatch, payload, ["--mode", "clipboard"]) == 0
    clipboard_text = capsys.readouterr().out

    assert run_cli(monkeypatch, payload, ["--ram-dir", str(out_dir)]) == 0
    printed = capsys.readouterr().out
    path = printed.strip()

    assert printed == path + "\n"
    assert os.path.isabs(path)
    assert os.path.exists(path)
    with open(path, "r", encoding="utf-8", newline="") as f:
        assert f.read() == clipboard_text


def test_sys_argv_entry_point(two_files, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO(json.dumps({"paths": [str(two_files / "hello.txt")]})))
    with patch.object(sys, "argv", ["the-great-combinator", "--mode", "clipboard"]):
        main()
    assert "Hello, World!" in capsys.readouterr().out


def test_exclude_flag(tmp_path, monkeypatch, capsys):
    (tmp_path / "keep.py").write_text("keep", encoding="utf-8")
    (tmp_path / "drop.log").write_text("drop", encoding="utf-8")
    (tmp_path / "build").mkdir()
    (tmp_path / "build" / "out.py").write_text("generated", encoding="utf-8")

    code = run_cli(monkeypatch, {"paths": [str(tmp_path)]}, [
        "--mode", "clipboard", "--exclude", "*.log", "--exclude", "build/",
    ])

    assert code == 0
    out = capsys.readouterr().out
    assert "keep" in out
    assert "drop" not in out
    assert "generated" not in out


def test_verbose_trace_goes_to_stderr(two_files, monkeypatch, capsys):
    monkeypatch.setattr(Tokenizer, "count", staticmethod(lambda text: 7))
    payload = {"paths": [str(two_files / "hello.txt")]}

    code = run_cli(monkeypatch, payload, ["--mode", "clipboard", "-v"])

    assert code == 0
    captured = capsys.readouterr()
    assert captured.out == f"file 1: {two_files / 'hello.txt'}\nHello, World!\n"
    assert "[DEBUG] Processing file 1 of 1" in captured.err
    assert "[DEBUG] Output mode: clipboard" in captured.err
    assert "[DEBUG]" not in captured.out


# --- Failures ---

def test_job_errors_have_distinct_exit_codes(monkeypatch, capsys):
    empty = run_cli(monkeypatch, "", ["--mode", "clipboard"])
    err_empty = capsys.readouterr().err
    bad = run_cli(monkeypatch, "not-json", ["--mode", "clipboard"])
    err_bad = capsys.readouterr().err
    no_paths = run_cli(monkeypatch, {"paths": []}, ["--mode", "clipboard"])
    err_no_paths = capsys.readouterr().err

    assert 0 not in (empty, bad, no_paths)
    assert len({empty, bad, no_paths}) == 3
    assert "No input provided" in err_empty and "Expected JSON" in err_empty
    assert "Failed to parse JSON" in err_bad and "Expected format" in err_bad
    assert "No paths provided" in err_no_paths


def test_path_with_nul_byte_is_skipped(tmp_path, monkeypatch, capsys):
    ok = tmp_path / "ok.txt"
    ok.write_text("still combined", encoding="utf-8")

    code = run_cli(monkeypatch, {"paths": ["bad\u0000name", str(ok)]}, ["--mode", "clipboard"])

    assert code == 0
    assert capsys.readouterr().out == f"file 1: {ok}\nstill combined\n"


def test_lone_surrogate_path_is_malformed_json(tmp_path, monkeypatch, capsys):
    ok = tmp_path / "ok.txt"
    ok.write_text("x", encoding="utf-8")
    payload = '{"paths": ["\\ud800", %s]}' % json.dumps(str(ok))

    code = run_cli(monkeypatch, payload, ["--mode", "clipboard"])

    assert code == 4
    captured = capsys.readouterr()
    assert "Failed to parse JSON" in captured.err
    assert captured.out == ""


def test_no_accessible_files(tmp_path, monkeypatch, capsys):
    code = run_cli(monkeypatch, {"paths": [str(tmp_path / "missing")]}, ["--mode", "clipboard"])
    assert code != 0
    captured = capsys.readouterr()
    assert "No accessible files found" in captured.err
    assert "missing" in captured.err
    assert captured.out == ""


def test_no_files_found(tmp_path, monkeypatch, capsys):
    (tmp_path / "empty").mkdir()
    code = run_cli(monkeypatch, {"paths": [str(tmp_path / "empty")]}, ["--mode", "clipboard"])
    assert code != 0
    assert "No files found" in capsys.readouterr().err


def test_unknown_mode(two_files, monkeypatch, capsys):
    code = run_cli(monkeypatch, {"paths": [str(two_files)]}, ["--mode", "printer"])
    assert code != 0
    captured = capsys.readouterr()
    assert "Unknown mode 'printer'" in captured.err
    assert captured.out == ""


def test_temp_dir_that_does_not_exist(two_files, monkeypatch, capsys):
    code = run_cli(monkeypatch, {"paths": [str(two_files / "hello.txt")]}, [
        "--mode", "temp", "--ram-dir", str(two_files / "nope"),
    ])
    assert code != 0
    assert "Failed to create temp file" in capsys.readouterr().err
