"""Coloured status messages printed to the terminal."""

from __future__ import annotations

import os

from rich.console import Console
from rich.text import Text

__all__ = ["no_emoji", "warn", "success"]


def no_emoji() -> bool:
    """Return True when the ``NO_EMOJI`` environment variable is set."""
    return "NO_EMOJI" in os.environ


def _styled_line(prefix: str, message: str, style: str) -> None:
    text = Text()
    text.append(prefix, style=style)
    text.append(" ")
    text.append(message, style=style)
    Console(highlight=False, soft_wrap=True).print(text)


def warn(message: str) -> None:
    """Print a red warning line."""
    prefix = "!" if no_emoji() else "\u26a0\ufe0f "
    _styled_line(prefix, message, "red")


def success(message: str) -> None:
    """Print a green success line."""
    prefix = "\u2713" if no_emoji() else "\u2705"
    _styled_line(prefix, message, "green")