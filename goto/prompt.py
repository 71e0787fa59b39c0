"""
Prompter backends for interactive input.

The interactor only talks to a Prompter. The CLI picks one at startup
(a terminal prompter for people, a scripted one for tests and piped
input) and passes it down.
"""

from collections import deque
from typing import Iterable, Optional, Protocol, Sequence, runtime_checkable

import typer

from .errors import PromptCancelled


@runtime_checkable
class Prompter(Protocol):
    """
    Line, choice and confirmation input.

    read_line and confirm raise PromptCancelled when the user backs
    out. choose returns None instead.
    """

    def read_line(
        self,
        prompt: str,
        default: str = "",
        allow_empty: bool = True,
    ) -> str: ...

    def choose(
        self,
        prompt: str,
        items: Sequence[str],
        default: int = 0,
    ) -> Optional[int]: ...

    def confirm(self, prompt: str, default: bool = False) -> bool: ...


class TerminalPrompter:
    """Prompts on the controlling terminal via typer."""

    def read_line(self, prompt: str, default: str = "", allow_empty: bool = True) -> str:
        try:
            if allow_empty:
                value = typer.prompt(prompt, default=default, show_default=bool(default))
            else:
                value = typer.prompt(prompt, default=default or None)
        except typer.Abort:
            raise PromptCancelled(prompt) from None
        return value.strip()

    def choose(self, prompt: str, items: Sequence[str], default: int = 0) -> Optional[int]:
        if not items:
            return None
        width = len(str(len(items)))
        for i, item in enumerate(items, start=1):
            typer.echo(f"{i:>{width}}) {item}", err=True)
        while True:
            try:
                choice = typer.prompt(prompt, default=default + 1, type=int)
            except typer.Abort:
                return None
            if 1 <= choice <= len(items):
                return choice - 1
            typer.echo(f"Error: {choice} is not in the range 1-{len(items)}", err=True)

    def confirm(self, prompt: str, default: bool = False) -> bool:
        try:
            return typer.confirm(prompt, default=default)
        except typer.Abort:
            raise PromptCancelled(prompt) from None


class ScriptedPrompter:
    """
    Replays canned answers in order.

    Answers for read_line are strings, for choose an int index (or None
    to cancel), for confirm a bool. A PromptCancelled instance in the
    queue is raised when reached, as is running out of answers.
    """

    def __init__(self, answers: Iterable = ()):
        self._answers = deque(answers)
        self.prompts: list[str] = []

    def _next(self, prompt: str):
        self.prompts.append(prompt)
        if not self._answers:
            raise PromptCancelled(prompt)
        answer = self._answers.popleft()
        if isinstance(answer, PromptCancelled):
            raise answer
        return answer

    def read_line(self, prompt: str, default: str = "", allow_empty: bool = True) -> str:
        answer = self._next(prompt)
        if answer is None:
            answer = default
        return str(answer).strip()

    def choose(self, prompt: str, items: Sequence[str], default: int = 0) -> Optional[int]:
        answer = self._next(prompt)
        if answer is None:
            return None
        if not 0 <= answer < len(items):
            raise IndexError(f"Choice {answer} out of range for {prompt!r}")
        return answer

    def confirm(self, prompt: str, default: bool = False) -> bool:
        answer = self._next(prompt)
        return default if answer is None else bool(answer)

    @property
    def remaining(self) -> int:
        return len(self._answers)
