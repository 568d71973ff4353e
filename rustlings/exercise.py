"""Exercises: loading, compiling, running and checking their state."""

from __future__ import annotations

import enum
import os
import re
import subprocess
import threading
import tomllib
from dataclasses import dataclass
from pathlib import Path

from rustlings.ui import no_emoji

__all__ = [
    "Mode",
    "ContextLine",
    "ExerciseState",
    "ExerciseOutput",
    "CompilationError",
    "ExerciseRunError",
    "Exercise",
    "CompiledExercise",
    "temp_file_path",
    "load_exercises",
]

RUSTC_COLOR_ARGS = ("--color", "always")
RUSTC_EDITION_ARGS = ("--edition", "2021")
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"
BUILD_SCRIPT_CARGO_TOML_PATH = "./exercises/tests/Cargo.toml"


def temp_file_path() -> str:
    """Return a per-process, per-thread path for the compiled binary."""
    thread_id = "".join(ch for ch in str(threading.get_ident()) if ch.isalnum())
    return f"./temp_{os.getpid()}_{thread_id}"


def _clean() -> None:
    try:
        os.remove(temp_file_path())
    except OSError:
        pass


class Mode(enum.Enum):
    """How an exercise is checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"
    BUILD_SCRIPT = "buildscript"


@dataclass(frozen=True)
class ContextLine:
    """A source line shown around the pending marker."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class ExerciseState:
    """Done when there is no context; pending otherwise."""

    context: tuple[ContextLine, ...] = ()

    @property
    def done(self) -> bool:
        return not self.context

    @property
    def pending(self) -> bool:
        return bool(self.context)


@dataclass(frozen=True)
class ExerciseOutput:
    """Captured output of a compiler or binary."""

    stdout: str
    stderr: str


class CompilationError(Exception):
    """Compiling an exercise failed."""

    def __init__(self, exercise: "Exercise", output: ExerciseOutput) -> None:
        super().__init__(f"compilation of {exercise} failed")
        self.exercise = exercise
        self.output = output


class ExerciseRunError(Exception):
    """Running a compiled exercise failed."""

    def __init__(self, exercise: "Exercise", output: ExerciseOutput) -> None:
        super().__init__(f"running {exercise} failed")
        self.exercise = exercise
        self.output = output


def _output_of(result: subprocess.CompletedProcess) -> ExerciseOutput:
    return ExerciseOutput(
        stdout=(result.stdout or b"").decode("utf-8", errors="replace"),
        stderr=(result.stderr or b"").decode("utf-8", errors="replace"),
    )


def _run_command(args: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(args, capture_output=True)


def _source_lines(source: str) -> list[str]:
    if not source:
        return []
    pieces = source.split("\n")
    if pieces[-1] == "":
        pieces.pop()
    return [piece[:-1] if piece.endswith("\r") else piece for piece in pieces]


def _cargo_toml(name: str) -> str:
    return (
        "[package]\n"
        f'name = "{name}"\n'
        'version = "0.0.1"\n'
        'edition = "2021"\n'
        "[[bin]]\n"
        f'name = "{name}"\n'
        f'path = "{name}.rs"'
    )


def _write_cargo_toml(path: str, name: str) -> None:
    message = (
        "Failed to write Clippy Cargo.toml file."
        if no_emoji()
        else "Failed to write \U0001f4ce Clippy \U0001f4ce Cargo.toml file."
    )
    try:
        Path(path).write_text(_cargo_toml(name), encoding="utf-8")
    except OSError as exc:
        raise OSError(f"{message} {exc}") from exc


@dataclass
class Exercise:
    """An exercise as described in ``info.toml``."""

    name: str
    path: Path
    mode: Mode
    hint: str

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.mode = Mode(self.mode)

    def __str__(self) -> str:
        return str(self.path)

    def compile(self) -> "CompiledExercise":
        """Compile the exercise; raise CompilationError on failure."""
        target = temp_file_path()
        source = str(self.path)
        rustc_flags = [*RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS]

        if self.mode is Mode.COMPILE:
            result = _run_command(["rustc", source, "-o", target, *rustc_flags])
        elif self.mode is Mode.TEST:
            result = _run_command(["rustc", "--test", source, "-o", target, *rustc_flags])
        elif self.mode is Mode.CLIPPY:
            _write_cargo_toml(CLIPPY_CARGO_TOML_PATH, self.name)
            # Build a binary as well so the exercise can be run afterwards;
            # a failure here shows up again in clippy's own output.
            _run_command(["rustc", source, "-o", target, *rustc_flags])
            _run_command(
                ["cargo", "clean", "--manifest-path", CLIPPY_CARGO_TOML_PATH, *RUSTC_COLOR_ARGS]
            )
            result = _run_command(
                [
                    "cargo",
                    "clippy",
                    "--manifest-path",
                    CLIPPY_CARGO_TOML_PATH,
                    *RUSTC_COLOR_ARGS,
                    "--",
                    "-D",
                    "warnings",
                    "-D",
                    "clippy::float_cmp",
                ]
            )
        else:
            _write_cargo_toml(BUILD_SCRIPT_CARGO_TOML_PATH, self.name)
            result = _run_command(
                ["cargo", "test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH]
            )

        if result.returncode == 0:
            return CompiledExercise(self)
        _clean()
        raise CompilationError(self, _output_of(result))

    def state(self) -> ExerciseState:
        """Return whether the exercise still carries the pending marker."""
        source = self.path.read_text(encoding="utf-8")
        if not I_AM_DONE_REGEX.search(source):
            return ExerciseState()

        lines = _source_lines(source)
        matched = next(
            (index for index, line in enumerate(lines) if I_AM_DONE_REGEX.search(line)),
            None,
        )
        if matched is None:
            raise RuntimeError(f"pending marker in {self} does not sit on a single line")

        first = max(matched - CONTEXT, 0)
        last = matched + CONTEXT
        context = tuple(
            ContextLine(line=line, number=index + 1, important=index == matched)
            for index, line in enumerate(lines[first : last + 1], start=first)
        )
        return ExerciseState(context)

    def looks_done(self) -> bool:
        """True when the pending marker has been removed."""
        return self.state().done


class CompiledExercise:
    """A successful compilation; removes the binary when closed."""

    def __init__(self, exercise: Exercise) -> None:
        self.exercise = exercise
        self.closed = False

    def __enter__(self) -> "CompiledExercise":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def run(self) -> ExerciseOutput:
        """Run the binary; raise ExerciseRunError on a non-zero exit."""
        mode = self.exercise.mode
        if mode is Mode.BUILD_SCRIPT:
            return ExerciseOutput(stdout="", stderr="")
        arg = "--show-output" if mode is Mode.TEST else ""
        result = _run_command([temp_file_path(), arg])
        output = _output_of(result)
        if result.returncode != 0:
            raise ExerciseRunError(self.exercise, output)
        return output

    def close(self) -> None:
        """Remove the compiled binary."""
        if not self.closed:
            self.closed = True
            _clean()


def load_exercises(path: str | os.PathLike = "info.toml") -> list[Exercise]:
    """Read the exercise list from a TOML file."""
    with open(path, "rb") as handle:
        data = tomllib.load(handle)
    try:
        entries = data["exercises"]
        return [
            Exercise(
                name=entry["name"],
                path=Path(entry["path"]),
                mode=Mode(entry["mode"]),
                hint=entry["hint"],
            )
            for entry in entries
        ]
    except KeyError as exc:
        raise ValueError(f"missing field {exc.args[0]!r} in {path}") from exc