"""Interactive menus on top of ``rich.prompt``.

``Prompter`` is the only place that reads from the terminal; the flows take
it as a dependency so tests can substitute a scripted fake.
"""

from __future__ import annotations

from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, IntPrompt


class Prompter:
    """Numbered choice lists and yes/no confirmations."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def choose(
        self,
        message: str,
        options: Sequence[str],
        exit_label: str = "Exit",
    ) -> Optional[int]:
        """Show *options* as a numbered list followed by ``0  <exit_label>``.

        Returns:
            The index into *options* of the chosen entry, or ``None`` when
            the exit entry was picked (also the answer on a bare Enter).
        """
        self.console.print(f"\n[bold]{escape(message)}[/bold]")
        for number, label in enumerate(options, start=1):
            self.console.print(f"  [cyan]{number:>2}[/cyan]  {escape(label)}")
        self.console.print(f"  [dim]{0:>2}  {escape(exit_label)}[/dim]")

        answer = IntPrompt.ask(
            "Choice",
            console=self.console,
            choices=[str(n) for n in range(len(options) + 1)],
            show_choices=False,
            default=0,
        )
        return None if answer == 0 else answer - 1

    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask a yes/no question."""
        return Confirm.ask(escape(message), console=self.console, default=default)
