"""Choice wizards used for scenario selection and confirmation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol

from rich.console import Console
from rich.prompt import IntPrompt

CANCEL = "cancel"
PROCEED = "proceed"


@dataclass(frozen=True)
class WizardChoice:
    key: Any
    label: str
    default: bool = False


class Wizard(Protocol):
    def choose(self, title: str, description: str, choices: List[WizardChoice]) -> Any:
        ...


class RichWizard:
    """Numbered menu on the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def choose(self, title: str, description: str, choices: List[WizardChoice]) -> Any:
        if not choices:
            raise ValueError("Wizard needs at least one choice")

        self.console.print(f"\n[bold]{title}[/bold]")
        if description:
            self.console.print(description)

        default_index = next((i for i, c in enumerate(choices, start=1) if c.default), 1)
        for index, choice in enumerate(choices, start=1):
            self.console.print(f"  {index}. {choice.label}", markup=False)

        selected = IntPrompt.ask(
            "Select an option",
            console=self.console,
            choices=[str(i) for i in range(1, len(choices) + 1)],
            default=default_index,
        )
        return choices[selected - 1].key
