from __future__ import annotations

from pathlib import Path

import pytest

from question_importer.cli.__main__ import EXIT_FATAL, EXIT_REJECTED, EXIT_SUCCESS, main

"""Exit code contract tests (contracts/summary_output.md)."""


def test_exit_code_values():
    assert (EXIT_SUCCESS, EXIT_FATAL, EXIT_REJECTED) == (0, 1, 2)


def test_exit_code_fatal_startup(temp_workdir: Path, capsys):
    # no config and no catalog -> catalog file missing
    code = main(["q.csv"])
    captured = capsys.readouterr()
    assert code == EXIT_FATAL
    assert "ERROR config: catalog file not found" in captured.out


@pytest.mark.parametrize(
    "content, expected",
    [
        ("Question\nIs X?\n", EXIT_SUCCESS),
        ("Question,Type\nPick,Multiple Choice\n", EXIT_REJECTED),
        ("Question,Tags\nIs X?,Unknown\n", EXIT_REJECTED),
        ("Question,Type\n,text\n", EXIT_REJECTED),
        ("Prompt\nIs X?\n", EXIT_FATAL),
        ("", EXIT_FATAL),
    ],
)
def test_exit_code_per_outcome(write_config, temp_workdir: Path, content: str, expected: int):
    path = temp_workdir / "data" / "q.csv"
    path.write_text(content, encoding="utf-8")
    assert main([str(path)]) == expected


def test_exit_code_unsupported_file_type(write_config, temp_workdir: Path, capsys):
    path = temp_workdir / "data" / "q.txt"
    path.write_text("Question\nIs X?\n", encoding="utf-8")
    assert main([str(path)]) == EXIT_FATAL
    assert "ERROR Invalid file type." in capsys.readouterr().out
