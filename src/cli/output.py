"""Rich-based terminal output for the gm-vault CLI.

Status lines, a spinner for network calls, validation reports and the
category/page tree all go through OutputHandler so --no-color and the
verbosity level apply uniformly. Diagnostic logging stays on the 'src'
logger configured by the CLI entry point.
"""

from contextlib import contextmanager
from typing import Iterator, List

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.spinner import Spinner
from rich.tree import Tree

from src.vault.models import Category, Config, Page


class OutputHandler:
    """Writes user-facing CLI output to a Rich console.

    Attributes:
        verbosity: 0 prints status lines only, 1 adds info, 2 adds debug
        console: Console all output is written to

    Example:
        >>> out = OutputHandler(verbosity=1)
        >>> out.print_validation(result.errors)
        >>> with out.spinner("Fetching page..."):
        ...     blocks = fetcher.get_blocks(page)
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(escape(message))

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Show an animated spinner while the wrapped block runs."""
        with Live(Spinner("dots", text=message), console=self.console, refresh_per_second=10):
            yield

    def print_validation(self, errors: List[str]) -> None:
        """Display every validation error, or a success line."""
        if not errors:
            self.success("Vault configuration is valid")
            return

        self.console.print(f"\n[bold red]{len(errors)} validation error(s):[/bold red]")
        for error in errors:
            self.console.print(f"  • {escape(error)}")

    def print_tree(self, config: Config, title: str = "Vault") -> None:
        """Display the category/page tree."""
        root = Tree(f"[bold]{escape(title)}[/bold]")
        for category in config.categories:
            self._add_category(root, category)
        if not config.categories:
            root.add("[dim](empty)[/dim]")
        self.console.print(root)

    def _add_category(self, parent: Tree, category: Category) -> None:
        marker = " [dim](collapsed)[/dim]" if category.collapsed else ""
        branch = parent.add(f"[bold blue]{escape(category.name)}[/bold blue]{marker}")
        for page in category.pages:
            branch.add(self._page_label(page))
        for sub in category.categories:
            self._add_category(branch, sub)

    @staticmethod
    def _page_label(page: Page) -> str:
        visibility = "[green]👁[/green] " if page.visible_to_players else ""
        icon = f"{page.icon.value} " if page.icon and page.icon.kind.value == "emoji" else ""
        return (
            f"{visibility}{escape(icon)}{escape(page.name)} "
            f"[dim]({page.content_type.value})[/dim]"
        )
