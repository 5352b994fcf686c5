"""Terminal presentation for gcm.

All output meant for a human goes through :class:`Presenter`, which wraps a
rich ``Console``. The generation and interaction code only ever talks to a
presenter, so it can run headless in tests by handing it a console that
writes to a string buffer.
"""

import re
import time
from typing import Iterable, Optional

from rich.box import DOUBLE, ROUNDED
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from gcm.utils import console as default_console

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

BANNER_TITLE = "Git Commit Message Generator"

OPTION_LABELS = {
    "c": "Commit with this message",
    "e": "Edit this message",
    "g": "Generate again with some context",
    "d": "Discard",
}


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences from model output."""
    return ANSI_ESCAPE.sub("", text)


class Presenter:
    """Console front-end used by every interactive component.

    Args:
        console: The rich console to write to. Defaults to the shared one.
        type_delay: Seconds to pause after each character in ``type_out``.
    """

    def __init__(self, console: Optional[Console] = None, type_delay: float = 0.002) -> None:
        self.console = console or default_console
        self.type_delay = type_delay

    def show_line(self, text: str = "", style: Optional[str] = None) -> None:
        # Model output may contain square brackets, so markup stays off.
        self.console.print(text, style=style, markup=False, highlight=False, soft_wrap=True)

    def banner(self) -> None:
        title = Text(BANNER_TITLE, style="bold blue", justify="center")
        self.console.print(Panel(title, box=DOUBLE, border_style="bold blue"))

    def header(self, title: str) -> None:
        self.console.print()
        self.console.print(Rule(style="bold blue"))
        self.console.print(title, style="bold blue", markup=False)
        self.console.print(Rule(style="bold blue"))

    def boxed_title(self, title: str) -> None:
        self.console.print()
        self.console.print(Panel(Text(title), box=ROUNDED, border_style="bold blue"))

    def separator(self) -> None:
        self.show_line("----------------", style="bold blue")

    def label(self, text: str) -> None:
        self.show_line(text, style="bold cyan")

    def show_diff(self, diff: str) -> None:
        """Print a diff with additions in green and deletions in red."""
        for line in diff.splitlines():
            if line.startswith("+"):
                style = "green"
            elif line.startswith("-"):
                style = "red"
            else:
                style = "bright_black"
            self.show_line(line, style=style)

    def type_out(self, text: str, indent: str = "", style: Optional[str] = None) -> None:
        """Render one line character by character, like someone typing it."""
        self.console.print(indent, end="", markup=False, highlight=False, soft_wrap=True)
        for char in strip_ansi(text):
            self.console.print(char, end="", style=style, markup=False,
                               highlight=False, soft_wrap=True)
            if self.type_delay:
                time.sleep(self.type_delay)
        self.console.print()

    def type_message(self, message: str) -> None:
        for line in message.splitlines():
            self.type_out(line)

    def show_options(self, available: Iterable[str]) -> None:
        self.console.print()
        self.console.print("Options:", style="bold blue")
        for letter in available:
            self.console.print(f"  [bold]({letter})[/bold] {OPTION_LABELS[letter]}")

    def prompt(self, text: str) -> str:
        """Read one line of input and return it stripped."""
        return self.console.input(f"[bold yellow]{text}[/bold yellow]").strip()

    def info(self, text: str) -> None:
        self.show_line(text, style="bold yellow")

    def success(self, text: str) -> None:
        self.show_line(f"✅ {text}", style="bold green")

    def warning(self, text: str) -> None:
        self.show_line(text, style="yellow")

    def error(self, text: str) -> None:
        self.show_line(f"❌ {text}", style="bold red")
