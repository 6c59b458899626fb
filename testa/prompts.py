"""Interactive prompting capability.

Everything that asks the user a question goes through a :class:`Prompter`.
The CLI passes a :class:`RichPrompter` bound to the terminal; tests and
non-interactive runs (``--yes``) pass a :class:`ScriptedPrompter`, which
answers from a fixed script and otherwise accepts each default.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Iterable, Optional, Protocol

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.table import Table

from testa.utils import console as default_console


class Prompter(Protocol):
    """Questions the CLI needs answered."""

    def ask(self, message: str, default: str = "") -> str: ...

    def confirm(self, message: str, default: bool = True) -> bool: ...

    def select(self, message: str, choices: list[str], default: int = 0) -> int:
        """Return the index of the chosen entry in *choices*."""
        ...

    def checkbox(
        self, message: str, choices: list[str], checked: Iterable[int] = ()
    ) -> list[int]:
        """Return the indexes of all chosen entries, in ascending order."""
        ...


# ---------------------------------------------------------------------------
# Terminal prompter
# ---------------------------------------------------------------------------

class RichPrompter:
    """Rich-based prompts for an attached terminal."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or default_console

    def ask(self, message: str, default: str = "") -> str:
        return Prompt.ask(message, default=default, console=self.console)

    def confirm(self, message: str, default: bool = True) -> bool:
        return Confirm.ask(message, default=default, console=self.console)

    def select(self, message: str, choices: list[str], default: int = 0) -> int:
        self._print_choices(message, choices)
        valid = [str(i) for i in range(1, len(choices) + 1)]
        answer = Prompt.ask(
            "Choice",
            choices=valid,
            default=str(default + 1),
            show_choices=False,
            console=self.console,
        )
        return int(answer) - 1

    def checkbox(
        self, message: str, choices: list[str], checked: Iterable[int] = ()
    ) -> list[int]:
        self._print_choices(message, choices)
        default = ",".join(str(i + 1) for i in sorted(checked))
        while True:
            answer = Prompt.ask(
                "Numbers, comma separated",
                default=default,
                console=self.console,
            )
            try:
                picked = sorted({int(part) - 1 for part in answer.split(",") if part.strip()})
            except ValueError:
                self.console.print("[red]Please enter numbers separated by commas.[/red]")
                continue
            if all(0 <= i < len(choices) for i in picked):
                return picked
            self.console.print(f"[red]Choose numbers between 1 and {len(choices)}.[/red]")

    def _print_choices(self, message: str, choices: list[str]) -> None:
        self.console.print(f"\n[bold blue]{escape(message)}[/bold blue]")
        table = Table(show_header=False, box=None)
        for i, choice in enumerate(choices, 1):
            table.add_row(f"[cyan]{i})[/cyan]", escape(choice))
        self.console.print(table)


# ---------------------------------------------------------------------------
# Scripted prompter
# ---------------------------------------------------------------------------

class ScriptedPrompter:
    """Answers prompts from a script, falling back to each prompt's default.

    Answers are consumed in order.  ``ask`` takes a string, ``confirm`` a
    bool, ``select`` an index or the chosen label, ``checkbox`` a list of
    indexes.  ``None`` in the script means "use the default".
    """

    def __init__(self, answers: Iterable[Any] = ()) -> None:
        self._answers: deque[Any] = deque(answers)
        self.asked: list[str] = []

    def _next(self, message: str) -> Any:
        self.asked.append(message)
        if self._answers:
            return self._answers.popleft()
        return None

    def ask(self, message: str, default: str = "") -> str:
        answer = self._next(message)
        return default if answer is None else str(answer)

    def confirm(self, message: str, default: bool = True) -> bool:
        answer = self._next(message)
        return default if answer is None else bool(answer)

    def select(self, message: str, choices: list[str], default: int = 0) -> int:
        answer = self._next(message)
        if answer is None:
            return default
        if isinstance(answer, str):
            return choices.index(answer)
        return int(answer)

    def checkbox(
        self, message: str, choices: list[str], checked: Iterable[int] = ()
    ) -> list[int]:
        answer = self._next(message)
        if answer is None:
            return sorted(checked)
        return sorted(int(i) for i in answer)
