"""Watch mode: re-verify exercises whenever their files change."""

from __future__ import annotations

import enum
import itertools
import os
import queue
import subprocess
import sys
import threading
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import TextIO

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from rustlings.exercise import Exercise
from rustlings.verify import VerificationFailed, verify

__all__ = ["WatchStatus", "WatchShell", "watch"]

EXERCISES_DIR = "./exercises"
_POLL_SECONDS = 1.0
_DEBOUNCE_SECONDS = 0.2

_HELP_TEXT = """Commands available to you in watch mode:
  hint   - prints the current exercise's hint
  clear  - clears the screen
  quit   - quits watch mode
  !<cmd> - executes a command, like `!rustc --explain E0381`
  help   - displays this help message

Watch mode automatically re-evaluates the current exercise
when you edit a file's contents."""


class WatchStatus(enum.Enum):
    """How watch mode ended."""

    FINISHED = enum.auto()
    UNFINISHED = enum.auto()


class WatchShell:
    """The interactive command line that runs alongside watch mode."""

    def __init__(self, hint: str | None = None) -> None:
        self._lock = threading.Lock()
        self._hint = hint
        self.should_quit = threading.Event()

    @property
    def hint(self) -> str | None:
        with self._lock:
            return self._hint

    @hint.setter
    def hint(self, value: str | None) -> None:
        with self._lock:
            self._hint = value

    def handle_command(self, line: str) -> None:
        """Carry out one command typed by the user."""
        command = line.strip()
        if command == "hint":
            hint = self.hint
            if hint is not None:
                print(hint)
        elif command == "clear":
            print("\x1b[2J\x1b[1;1H")
        elif command == "quit":
            self.should_quit.set()
            print("Bye!")
        elif command == "help":
            print(_HELP_TEXT)
        elif command.startswith("!"):
            shell_command = command[1:]
            parts = shell_command.split()
            if not parts:
                print("no command provided")
                return
            try:
                subprocess.run(parts)
            except OSError as exc:
                print(f"failed to execute command `{shell_command}`: {exc}")
        else:
            print(f"unknown command: {command}")

    def start(self, stream: TextIO | None = None) -> threading.Thread:
        """Read commands from ``stream`` (stdin by default) in a daemon thread."""
        print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        thread = threading.Thread(
            target=self._read_loop, args=(stream or sys.stdin,), daemon=True
        )
        thread.start()
        return thread

    def _read_loop(self, stream: TextIO) -> None:
        while True:
            try:
                line = stream.readline()
            except (OSError, ValueError) as exc:
                print(f"error reading command: {exc}")
                return
            if not line:
                return
            self.handle_command(line)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, events: "queue.Queue[Path]") -> None:
        super().__init__()
        self._events = events

    def on_created(self, event: FileSystemEvent) -> None:
        self._push(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._push(event)

    def _push(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._events.put(Path(os.fsdecode(event.src_path)))


def _clear_screen() -> None:
    print("\x1bc")


def _ends_with(path: Path, suffix: Path) -> bool:
    suffix_parts = Path(suffix).parts
    if not suffix_parts or len(suffix_parts) > len(path.parts):
        return False
    return path.parts[-len(suffix_parts):] == suffix_parts


def _debounced(first: Path, events: "queue.Queue[Path]") -> list[Path]:
    paths = [first]
    while True:
        try:
            path = events.get(timeout=_DEBOUNCE_SECONDS)
        except queue.Empty:
            return paths
        if path not in paths:
            paths.append(path)


def _changed_order(filepath: Path, exercises: Sequence[Exercise]) -> Iterator[Exercise]:
    changed = next((e for e in exercises if _ends_with(filepath, e.path)), None)
    others = (
        e for e in exercises if not e.looks_done() and not _ends_with(filepath, e.path)
    )
    head = [changed] if changed is not None else []
    return itertools.chain(head, others)


def watch(
    exercises: Sequence[Exercise], verbose: bool = False, success_hints: bool = False
) -> WatchStatus:
    """Verify exercises, then re-verify on every change until done or told to quit."""
    if not Path(EXERCISES_DIR).is_dir():
        raise FileNotFoundError(f"cannot watch {EXERCISES_DIR}: no such directory")

    events: "queue.Queue[Path]" = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeHandler(events), EXERCISES_DIR, recursive=True)
    observer.start()
    try:
        _clear_screen()
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
        except VerificationFailed as exc:
            shell = WatchShell(exc.exercise.hint)
        else:
            return WatchStatus.FINISHED

        shell.start()
        while True:
            try:
                first = events.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                pass
            else:
                for path in _debounced(first, events):
                    if path.suffix != ".rs" or not path.exists():
                        continue
                    filepath = path.resolve()
                    num_done = sum(1 for e in exercises if e.looks_done())
                    _clear_screen()
                    try:
                        verify(
                            _changed_order(filepath, exercises),
                            (num_done, len(exercises)),
                            verbose,
                            success_hints,
                        )
                    except VerificationFailed as exc:
                        shell.hint = exc.exercise.hint
                    else:
                        return WatchStatus.FINISHED
            if shell.should_quit.is_set():
                return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()