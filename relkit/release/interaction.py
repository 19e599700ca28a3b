"""Operator interaction.

Steps ask questions through InteractionPort. Prompter implements it on top of
a LineReader, a callable that shows a prompt and returns one line of input,
or None once the input stream is closed.

In non-interactive mode (release run with defaults) the reader is never
called: confirm and ask resolve to their default, ask_freeform to None.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol

import typer

__all__ = [
    "InteractionPort",
    "LineReader",
    "Prompter",
    "ScriptedReader",
    "terminal_reader",
]

LineReader = Callable[[str], str | None]

_YES = frozenset({"y", "yes"})


class InteractionPort(Protocol):
    def confirm(self, prompt: str, default: bool) -> bool:
        """Yes/no question. Anything but an explicit yes answer is a no."""
        ...

    def ask(self, prompt: str, default: str) -> str | None:
        """Question with a suggested answer; empty input means the default."""
        ...

    def ask_freeform(self, prompt: str) -> str | None:
        """Question without a default; None if no input can be read."""
        ...


class Prompter:
    def __init__(self, reader: LineReader, *, non_interactive: bool = False) -> None:
        self._reader = reader
        self.non_interactive = non_interactive

    def confirm(self, prompt: str, default: bool) -> bool:
        if self.non_interactive:
            return default
        line = self._reader(prompt)
        if line is None:
            return False
        answer = line.strip().lower()
        if not answer:
            return default
        return answer in _YES

    def ask(self, prompt: str, default: str) -> str | None:
        if self.non_interactive:
            return default
        line = self._reader(prompt)
        if line is None:
            return None
        return line.strip() or default

    def ask_freeform(self, prompt: str) -> str | None:
        if self.non_interactive:
            return None
        line = self._reader(prompt)
        return line.strip() if line is not None else None


def terminal_reader(prompt: str) -> str | None:
    """Read one line from the terminal; blocks until the operator answers."""
    try:
        value: str = typer.prompt(prompt, default="", show_default=False, prompt_suffix="")
    except (typer.Abort, EOFError):
        return None
    return value


def _no_answers() -> list[str | None]:
    return []


@dataclass
class ScriptedReader:
    """LineReader replaying canned answers.

    Prompts are recorded in order. Once the answers run out the stream
    counts as closed and None is returned.
    """

    answers: list[str | None] = field(default_factory=_no_answers)
    prompts: list[str] = field(default_factory=list)

    @classmethod
    def of(cls, answers: Iterable[str | None]) -> ScriptedReader:
        return cls(answers=list(answers))

    def __call__(self, prompt: str) -> str | None:
        self.prompts.append(prompt)
        if not self.answers:
            return None
        return self.answers.pop(0)
