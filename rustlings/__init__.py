"""Command-line runner, checker and grader for small Rust exercises listed in info.toml."""

__version__ = "5.5.1"