"""Verification of exercises: compile, run, test and prompt for completion."""

from __future__ import annotations

import enum
from collections.abc import Iterable

from rich.console import Console
from rich.status import Status
from rich.text import Text

from rustlings.exercise import (
    CompilationError,
    CompiledExercise,
    Exercise,
    ExerciseRunError,
    Mode,
)
from rustlings.ui import no_emoji, success, warn

__all__ = ["VerificationFailed", "verify", "test"]

_BAR_WIDTH = 60
_SEPARATOR = "===================="


class VerificationFailed(Exception):
    """An exercise failed to compile, run, pass its tests, or is still pending."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"{exercise} did not pass")
        self.exercise = exercise


class _RunMode(enum.Enum):
    INTERACTIVE = enum.auto()
    NON_INTERACTIVE = enum.auto()


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True)


class _Spinner:
    """A status spinner shown only when stdout is a terminal."""

    def __init__(self, message: str) -> None:
        console = _console()
        self._status: Status | None = None
        if console.is_terminal:
            self._status = console.status(message)
            self._status.start()

    def update(self, message: str) -> None:
        if self._status is not None:
            self._status.update(message)

    def finish(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


class _ProgressBar:
    """Overall progress, drawn only when stdout is a terminal."""

    def __init__(self, position: int, total: int) -> None:
        self._console = _console()
        self.position = position
        self.total = total
        self.percentage = position / total * 100.0 if total else 0.0
        self._draw()

    def advance(self) -> None:
        if self.total:
            self.percentage += 100.0 / self.total
        self.position += 1
        self._draw()

    def _draw(self) -> None:
        if not self._console.is_terminal:
            return
        if self.total:
            filled = min(_BAR_WIDTH, _BAR_WIDTH * self.position // self.total)
        else:
            filled = _BAR_WIDTH
        head = ">" if filled < _BAR_WIDTH else ""
        rest = _BAR_WIDTH - filled - len(head)
        text = Text("Progress: [")
        text.append("#" * filled + head, style="green")
        text.append("-" * rest, style="red")
        text.append(f"] {self.position}/{self.total} ({self.percentage:.1f} %)")
        self._console.print(text)


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool = False,
    success_hints: bool = False,
) -> None:
    """Check exercises in order; raise VerificationFailed at the first that fails."""
    num_done, total = progress
    bar = _ProgressBar(num_done, total)

    for exercise in exercises:
        if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
            passed = _compile_and_test(exercise, _RunMode.INTERACTIVE, verbose, success_hints)
        elif exercise.mode is Mode.COMPILE:
            passed = _compile_and_run_interactively(exercise, success_hints)
        else:
            passed = _compile_only(exercise, success_hints)
        if not passed:
            raise VerificationFailed(exercise)
        bar.advance()


def test(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run the test harness of an exercise, without prompting."""
    _compile_and_test(exercise, _RunMode.NON_INTERACTIVE, verbose, False)


def _compile(exercise: Exercise, spinner: _Spinner) -> CompiledExercise:
    try:
        return exercise.compile()
    except CompilationError as exc:
        spinner.finish()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(exc.output.stderr)
        raise VerificationFailed(exercise) from exc


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    spinner = _Spinner(f"Compiling {exercise}...")
    _compile(exercise, spinner).close()
    spinner.finish()
    return _prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    spinner = _Spinner(f"Compiling {exercise}...")
    with _compile(exercise, spinner) as compiled:
        spinner.update(f"Running {exercise}...")
        try:
            output = compiled.run()
        except ExerciseRunError as exc:
            spinner.finish()
            warn(f"Ran {exercise} with errors")
            print(exc.output.stdout)
            print(exc.output.stderr)
            raise VerificationFailed(exercise) from exc
        spinner.finish()
        return _prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, run_mode: _RunMode, verbose: bool, success_hints: bool
) -> bool:
    spinner = _Spinner(f"Testing {exercise}...")
    with _compile(exercise, spinner) as compiled:
        try:
            output = compiled.run()
        except ExerciseRunError as exc:
            spinner.finish()
            warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
            print(exc.output.stdout)
            raise VerificationFailed(exercise) from exc
        spinner.finish()

        if verbose:
            print(output.stdout)
        if run_mode is _RunMode.INTERACTIVE:
            return _prompt_for_completion(exercise, None, success_hints)
        return True


def _separator() -> Text:
    return Text(_SEPARATOR, style="bold")


def _prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    state = exercise.state()
    if state.done:
        return True

    if exercise.mode is Mode.COMPILE:
        success(f"Successfully ran {exercise}!")
    elif exercise.mode is Mode.TEST:
        success(f"Successfully tested {exercise}!")
    else:
        success(f"Successfully compiled {exercise}!")

    plain = no_emoji()
    clippy_message = (
        "The code is compiling, and Clippy is happy!"
        if plain
        else "The code is compiling, and \U0001f4ce Clippy \U0001f4ce is happy!"
    )
    success_message = {
        Mode.COMPILE: "The code is compiling!",
        Mode.TEST: "The code is compiling, and the tests pass!",
        Mode.CLIPPY: clippy_message,
        Mode.BUILD_SCRIPT: "Build script works!",
    }[exercise.mode]

    console = _console()
    print()
    if plain:
        print(f"~*~ {success_message} ~*~")
    else:
        print(f"\U0001f389 \U0001f389  {success_message} \U0001f389 \U0001f389")
    print()

    if prompt_output is not None:
        print("Output:")
        console.print(_separator())
        print(prompt_output)
        console.print(_separator())
        print()
    if success_hints:
        print("Hints:")
        console.print(_separator())
        print(exercise.hint)
        console.print(_separator())
        print()

    print("You can keep working on this exercise,")
    console.print(
        Text.assemble(
            "or jump into the next one by removing the ",
            ("`I AM NOT DONE`", "bold"),
            " comment:",
        )
    )
    print()
    for context_line in state.context:
        console.print(
            Text.assemble(
                (f"{context_line.number:>2}", "bold blue"),
                " ",
                ("|", "blue"),
                "  ",
                (context_line.line, "bold" if context_line.important else ""),
            )
        )

    return False