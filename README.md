# rustlings

A command-line companion for working through small Rust exercises. It does
four things:

- reads the list of exercises from `info.toml` in the current directory;
- compiles each exercise with `rustc`, or with `cargo` for clippy and
  build-script exercises;
- runs the result, or its test harness;
- tracks which exercises still carry an `I AM NOT DONE` marker.

## Installation

```
pip install .
```

To install with the test dependencies, use `pip install .[test]`.

`rustc` must be on your `PATH`. Before it does anything else, the command
checks that `rustc --version` succeeds and that `info.toml` exists in the
current directory. If either check fails, it exits with status 1.

## The exercise list

`info.toml` holds an array of `[[exercises]]` tables, each with four fields:

- `name` is the name used on the command line.
- `path` is the path of the exercise's `.rs` file.
- `mode` is one of:
  - `compile`: built with `rustc`, then run.
  - `test`: built with `rustc --test`, then run with `--show-output`.
  - `clippy`: linted with `cargo clippy` through
    `./exercises/clippy/Cargo.toml`, which is written for you.
  - `buildscript`: run with `cargo test` through
    `./exercises/tests/Cargo.toml`, which is written for you.
- `hint` is the text shown by `rustlings hint`.

An exercise counts as pending while some line of its file matches
`// I AM NOT DONE`, with one or three slashes and any amount of spacing.
Remove that line to mark the exercise done.

## Usage

```
rustlings                  # show the welcome text
rustlings --version        # print the version
rustlings watch            # re-verify exercises whenever a file changes
rustlings verify           # verify every exercise in order
rustlings run <name>       # compile and run (or test) one exercise
rustlings run next         # run the first exercise that is not done yet
rustlings hint <name>      # print the hint for an exercise
rustlings reset <name>     # restore an exercise with `git stash -- <file>`
rustlings list             # list exercises and their status
rustlings lsp              # write rust-project.json for rust-analyzer
rustlings cicvverify       # grade all exercises and write a JSON report
```

Pass `--nocapture` before the subcommand to show the output of test
exercises.

`verify` stops at the first exercise that does not compile, fails or is still
pending. When it stops, it shows the lines around the `I AM NOT DONE` marker
and exits with status 1. `run` exits with status 1 when the exercise does not
compile or run. An unknown exercise name or a wrong argument also gives
status 1.

### Listing

`rustlings list` prints a table of names, paths and `Done`/`Pending` status,
followed by a progress line. It accepts these options:

- `-p`/`--paths` shows only the paths.
- `-n`/`--names` shows only the names.
- `-f`/`--filter a,b` keeps exercises whose name or path contains any of the
  comma-separated patterns.
- `-u`/`--unsolved` shows only pending exercises.
- `-s`/`--solved` shows only finished exercises.

### Watch mode

`rustlings watch` first verifies every exercise. It then watches
`./exercises` for new or changed `.rs` files. After each change it re-verifies
the changed exercise first and then the other pending ones. Use
`--success-hints` to also print an exercise's hint when it passes but is still
marked pending.

Inside watch mode you can type these commands:

- `hint` prints the hint for the exercise that last failed.
- `clear` clears the screen.
- `quit` leaves watch mode.
- `!<cmd>` runs a command, for example `!rustc --explain E0381`.
- `help` shows these commands.

### rust-analyzer support

`rustlings lsp` writes `rust-project.json` into the current directory. The
file lists one crate for every `.rs` file below `./exercises`. The standard
library sources are taken from `RUST_SRC_PATH` when it is set. Otherwise they
are found through `rustc --print sysroot`.

### Grading

`rustlings cicvverify` runs every exercise concurrently, always showing test
output. It prints a progress line for each exercise as it finishes, then
writes a report to `.github/result/check_result.json`. That directory must
already exist. The report lists each exercise with its result, plus the total
number of exercises, successes, failures and the time taken in seconds.

### Environment

Set `NO_EMOJI` in the environment to replace emoji with plain symbols.

## Library use

The modules can also be used directly:

- `rustlings.exercise`:
  - `load_exercises` reads `info.toml`.
  - `Exercise.compile` raises `CompilationError`.
  - `CompiledExercise.run` raises `ExerciseRunError`.
  - `Exercise.state` and `Exercise.looks_done` check the pending marker.
- `rustlings.verify`: `verify` and `test` raise `VerificationFailed`.
- `rustlings.run`: `run` and `reset`.
- `rustlings.watch`: `watch` and `WatchShell`.
- `rustlings.checks`: `cicv_verify` returns an `ExerciseCheckList`.
- `rustlings.project`: `RustAnalyzerProject`.
- `rustlings.cli`: `main`, `find_exercise` and `list_exercises`.

## What it does not include

The package contains the runner only. It ships no exercises and no `info.toml`.
You supply them in the working directory. It does not install Rust, `cargo` or
clippy either.