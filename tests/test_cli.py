import json
import subprocess
from pathlib import Path
from unittest import mock

import pytest

from rustlings.cli import (
    build_parser,
    find_exercise,
    list_exercises,
    main,
    rustc_exists,
)
from rustlings.exercise import Exercise, Mode

PENDING_SOURCE = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED_SOURCE = "// fake_exercise\n\nfn main() {\n\n}\n"


def _rustc_ok():
    return mock.patch(
        "rustlings.cli.subprocess.run",
        return_value=subprocess.CompletedProcess(["rustc", "--version"], 0),
    )


@pytest.fixture
def state_exercises(tmp_path):
    pending = tmp_path / "pending_exercise.rs"
    pending.write_text(PENDING_SOURCE, encoding="utf-8")
    finished = tmp_path / "finished_exercise.rs"
    finished.write_text(FINISHED_SOURCE, encoding="utf-8")
    return [
        Exercise("pending_exercise", pending, Mode.COMPILE, ""),
        Exercise("finished_exercise", finished, Mode.COMPILE, ""),
    ]


@pytest.fixture
def fixture_dir(tmp_path, monkeypatch):
    (tmp_path / "testFailure.rs").write_text(
        "#[test]\nfn passing() {\n    asset!(true);\n}\n", encoding="utf-8"
    )
    (tmp_path / "info.toml").write_text(
        "[[exercises]]\n"
        'name = "testFailure"\n'
        'path = "testFailure.rs"\n'
        'mode = "test"\n'
        'hint = "Hello!"\n',
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_parser_list_options():
    args = build_parser().parse_args(["list", "-p", "-f", "if", "-u"])
    assert args.command == "list"
    assert args.paths is True
    assert args.filter == "if"
    assert args.unsolved is True
    assert args.solved is False


def test_parser_nocapture_run():
    args = build_parser().parse_args(["--nocapture", "run", "testSuccess"])
    assert args.nocapture is True
    assert args.command == "run"
    assert args.name == "testSuccess"


def test_parser_watch_success_hints():
    args = build_parser().parse_args(["watch", "--success-hints"])
    assert args.success_hints is True


def test_find_exercise_by_name(state_exercises):
    assert find_exercise("finished_exercise", state_exercises).name == "finished_exercise"


def test_find_exercise_next_is_first_pending(state_exercises):
    assert find_exercise("next", state_exercises).name == "pending_exercise"


def test_find_exercise_missing(state_exercises):
    with pytest.raises(LookupError, match="No exercise found for 'nope'!"):
        find_exercise("nope", state_exercises)


def test_find_exercise_next_when_all_done(state_exercises):
    with pytest.raises(LookupError, match="Congratulations"):
        find_exercise("next", state_exercises[1:])


def test_list_both_done_and_pending(state_exercises, capsys):
    done = list_exercises(state_exercises)
    out = capsys.readouterr().out
    assert done == 1
    assert "Done" in out and "Pending" in out
    assert "Progress: You completed 1 / 2 exercises (50.0 %)." in out


def test_list_solved_hides_pending(state_exercises, capsys):
    list_exercises(state_exercises, solved=True)
    out = capsys.readouterr().out
    assert "Pending" not in out
    assert "finished_exercise" in out


def test_list_unsolved_hides_done(state_exercises, capsys):
    list_exercises(state_exercises, unsolved=True)
    out = capsys.readouterr().out
    assert "Done" not in out
    assert "pending_exercise" in out


def test_list_names_with_filter(state_exercises, capsys):
    list_exercises(state_exercises, names=True, filter="FINISHED")
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "finished_exercise"
    assert len(lines) == 2


def test_list_paths_only(state_exercises, capsys):
    list_exercises(state_exercises, paths=True)
    lines = capsys.readouterr().out.splitlines()
    assert lines[:2] == [str(e.path) for e in state_exercises]


def test_rustc_exists_true():
    with _rustc_ok():
        assert rustc_exists() is True


def test_rustc_exists_false_on_failure():
    with mock.patch(
        "rustlings.cli.subprocess.run",
        return_value=subprocess.CompletedProcess(["rustc"], 1),
    ):
        assert rustc_exists() is False


def test_rustc_exists_false_when_missing():
    with mock.patch("rustlings.cli.subprocess.run", side_effect=FileNotFoundError):
        assert rustc_exists() is False


def test_version(capsys):
    assert main(["--version"]) == 0
    assert capsys.readouterr().out == "v5.5.1\n"


def test_fails_when_in_wrong_dir(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main([]) == 1
    assert "must be run from the rustlings directory" in capsys.readouterr().out


def test_runs_without_arguments(fixture_dir, capsys):
    with _rustc_ok():
        assert main([]) == 0
    assert "Thanks for installing Rustlings!" in capsys.readouterr().out


def test_get_hint_for_single_test(fixture_dir, capsys):
    with _rustc_ok():
        assert main(["hint", "testFailure"]) == 0
    assert capsys.readouterr().out == "Hello!\n"


def test_run_unknown_exercise(fixture_dir, capsys):
    with _rustc_ok():
        assert main(["run", "compNoExercise.rs"]) == 1
    assert "No exercise found for 'compNoExercise.rs'!" in capsys.readouterr().out


def test_missing_rustc(fixture_dir, capsys):
    with mock.patch("rustlings.cli.subprocess.run", side_effect=FileNotFoundError):
        assert main(["hint", "testFailure"]) == 1
    assert "We cannot find `rustc`." in capsys.readouterr().out


def test_reset_no_exercise(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["reset"])
    assert excinfo.value.code == 1
    assert "the following arguments are required: name" in capsys.readouterr().err


def test_run_single_test_no_filename(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["run"])
    assert excinfo.value.code == 1


def test_lsp_writes_project(fixture_dir, monkeypatch, capsys):
    exercises = fixture_dir / "exercises"
    exercises.mkdir()
    (exercises / "a.rs").write_text("fn main() {}\n", encoding="utf-8")
    (exercises / "notes.txt").write_text("x", encoding="utf-8")
    monkeypatch.setenv("RUST_SRC_PATH", "/opt/rust/library")
    with _rustc_ok():
        assert main(["lsp"]) == 0
    assert "Successfully generated rust-project.json" in capsys.readouterr().out
    data = json.loads(Path("rust-project.json").read_text(encoding="utf-8"))
    assert data["sysroot_src"] == "/opt/rust/library"
    assert len(data["crates"]) == 1
    assert data["crates"][0]["root_module"].endswith("a.rs")
    assert data["crates"][0]["cfg"] == ["test"]


def test_lsp_without_exercises(fixture_dir, monkeypatch, capsys):
    monkeypatch.setenv("RUST_SRC_PATH", "/opt/rust/library")
    with _rustc_ok():
        assert main(["lsp"]) == 0
    assert "Failed find any exercises" in capsys.readouterr().out
    assert not Path("rust-project.json").exists()