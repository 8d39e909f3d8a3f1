from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.prompt import Prompt

from .errors import NoTemplatesAvailable, SelectionCancelled
from .registry import TemplateRegistry
from .source import TemplateSource

# Returns the chosen name, or None when the user backs out.
Chooser = Callable[[Sequence[str]], Optional[str]]


def prompt_choice(names: Sequence[str], console: Optional[Console] = None) -> Optional[str]:
    console = console or Console()
    console.print("[bold]Select a template[/]")
    for i, name in enumerate(names, start=1):
        console.print(f"  [cyan]{i}[/]) {name}")
    try:
        choice = Prompt.ask(
            "Template",
            choices=[str(i) for i in range(1, len(names) + 1)],
            default="1",
            console=console,
        )
    except (KeyboardInterrupt, EOFError):
        console.print()
        return None
    return names[int(choice) - 1]


class Selector:
    def __init__(self, registry: TemplateRegistry, chooser: Chooser = prompt_choice) -> None:
        self.registry = registry
        self.chooser = chooser

    def select(self, template_name: Optional[str] = None) -> TemplateSource:
        """Resolve ``template_name``, or ask the user to pick one."""
        if template_name is not None:
            return self.registry.resolve(template_name)

        names = self.registry.names()
        if not names:
            raise NoTemplatesAvailable(str(self.registry.backend))
        chosen = self.chooser(names)
        if chosen is None:
            raise SelectionCancelled("Template selection cancelled")
        return self.registry.resolve(chosen)
