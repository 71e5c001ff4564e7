"""Decision sources for interactive questions.

Commands never talk to the terminal directly when they need a decision from
the user. They receive a DecisionSource:

- RichPrompts asks on the terminal using rich.prompt,
- AutoDecisions answers every question with its default, which is the safe
  choice for headless runs and tests (e.g. "keep both" for conflicts).
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from rich.console import Console
from rich.prompt import Confirm, Prompt

# (label, value) pairs offered by choose()
Option = Tuple[str, str]


class DecisionSource(ABC):
    """Capability to ask the user for decisions."""

    @abstractmethod
    def choose(self, prompt: str, options: Sequence[Option], default: str, description: str = "") -> str:
        """Ask for one of several options and return the chosen value."""

    @abstractmethod
    def confirm(self, prompt: str, default: bool = False, description: str = "") -> bool:
        """Ask a yes/no question."""

    @abstractmethod
    def ask(self, prompt: str, default: Optional[str] = None, password: bool = False) -> str:
        """Ask for free text."""

    @abstractmethod
    def select_many(self, prompt: str, options: Sequence[str], selected: Sequence[str]) -> List[str]:
        """Ask for a subset of options; ``selected`` are pre-selected."""


class AutoDecisions(DecisionSource):
    """Non-interactive decision source that always takes the default.

    Free-text questions without a default get the values given at
    construction time, keyed by prompt.

    Example:
        >>> decisions = AutoDecisions(answers={"Username": "alice"})
        >>> decisions.ask("Username")
        'alice'
    """

    def __init__(self, answers: Optional[dict] = None):
        self.answers = answers or {}

    def choose(self, prompt: str, options: Sequence[Option], default: str, description: str = "") -> str:
        return default

    def confirm(self, prompt: str, default: bool = False, description: str = "") -> bool:
        return self.answers.get(prompt, default)

    def ask(self, prompt: str, default: Optional[str] = None, password: bool = False) -> str:
        if prompt in self.answers:
            return self.answers[prompt]
        return default or ""

    def select_many(self, prompt: str, options: Sequence[str], selected: Sequence[str]) -> List[str]:
        return [option for option in options if option in selected]


class RichPrompts(DecisionSource):
    """Terminal decision source built on rich.prompt."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def choose(self, prompt: str, options: Sequence[Option], default: str, description: str = "") -> str:
        self.console.print(f"[bold]{prompt}[/bold]")
        if description:
            self.console.print(f"[yellow]{description}[/yellow]")

        default_index = "1"
        for index, (label, value) in enumerate(options, start=1):
            self.console.print(f"  {index}. {label}")
            if value == default:
                default_index = str(index)

        answer = Prompt.ask(
            "Choice",
            choices=[str(i) for i in range(1, len(options) + 1)],
            default=default_index,
            console=self.console,
        )
        return options[int(answer) - 1][1]

    def confirm(self, prompt: str, default: bool = False, description: str = "") -> bool:
        if description:
            self.console.print(description)
        return Confirm.ask(prompt, default=default, console=self.console)

    def ask(self, prompt: str, default: Optional[str] = None, password: bool = False) -> str:
        if default is None:
            return Prompt.ask(prompt, password=password, console=self.console)
        return Prompt.ask(prompt, default=default, password=password, console=self.console)

    def select_many(self, prompt: str, options: Sequence[str], selected: Sequence[str]) -> List[str]:
        chosen = {option for option in options if option in selected}
        self.console.print(f"[bold]{prompt}[/bold]")
        for index, option in enumerate(options, start=1):
            mark = "x" if option in chosen else " "
            self.console.print(f"  [{mark}] {index}. {option}", markup=False)

        answer = Prompt.ask(
            "Numbers to toggle (comma separated, empty to keep)",
            default="",
            show_default=False,
            console=self.console,
        )
        for token in answer.replace(" ", "").split(","):
            if not token:
                continue
            if not token.isdigit() or not 1 <= int(token) <= len(options):
                self.console.print(f"[yellow]Ignoring invalid choice: {token}[/yellow]")
                continue
            option = options[int(token) - 1]
            if option in chosen:
                chosen.remove(option)
            else:
                chosen.add(option)

        return [option for option in options if option in chosen]
