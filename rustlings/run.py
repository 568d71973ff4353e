"""Running a single exercise and resetting it."""

from __future__ import annotations

import subprocess

from rustlings.exercise import CompilationError, Exercise, ExerciseRunError, Mode
from rustlings.ui import success, warn
from rustlings.verify import VerificationFailed, _Spinner, test

__all__ = ["run", "reset"]


def run(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run, or test, one exercise; raise VerificationFailed on failure."""
    if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
        test(exercise, verbose)
    else:
        _compile_and_run(exercise)


def reset(exercise: Exercise) -> None:
    """Discard changes to the exercise with ``git stash``."""
    process = subprocess.Popen(["git", "stash", "--", str(exercise.path)])
    process.wait()


def _compile_and_run(exercise: Exercise) -> None:
    spinner = _Spinner(f"Compiling {exercise}...")
    try:
        compiled = exercise.compile()
    except CompilationError as exc:
        spinner.finish()
        warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
        print(exc.output.stderr)
        raise VerificationFailed(exercise) from exc

    with compiled:
        spinner.update(f"Running {exercise}...")
        try:
            output = compiled.run()
        except ExerciseRunError as exc:
            spinner.finish()
            print(exc.output.stdout)
            print(exc.output.stderr)
            warn(f"Ran {exercise} with errors")
            raise VerificationFailed(exercise) from exc
        spinner.finish()

    print(output.stdout)
    success(f"Successfully ran {exercise}")