"""Rich-based interactive shell over a :class:`TerminalSession`."""

from __future__ import annotations

import os
import shlex
import subprocess
import tempfile
from concurrent.futures import Future
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.syntax import Syntax
from rich.table import Table

from .session import TerminalSession

HELP = """[bold]j[/]/[bold]k[/] next/previous   [bold]<n>[/] select row n   [bold]r[/] refresh
[bold]/text[/] filter   [bold]c[/] clear filter   [bold]a[/] add   [bold]e[/] edit   [bold]d[/] delete
[bold]s[/] share link   [bold]o[/] open in browser   [bold]?[/] toggle help   [bold]q[/] quit"""


def edit_in_editor(initial: str = "", suffix: str = ".txt") -> str | None:
    """Open ``$VISUAL``/``$EDITOR`` on a temp file and return what was saved."""
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR") or "vi"
    with tempfile.NamedTemporaryFile("w", suffix=suffix, delete=False, encoding="utf-8") as handle:
        handle.write(initial)
        path = Path(handle.name)
    try:
        result = subprocess.call([*shlex.split(editor), str(path)])
        if result != 0:
            return None
        return path.read_text(encoding="utf-8")
    finally:
        path.unlink(missing_ok=True)


class SnippetShell:
    def __init__(self, session: TerminalSession, console: Console | None = None) -> None:
        self.session = session
        self.console = console or Console()
        self.show_help = False
        self.running = True
        session.waiter = self._wait

    def _wait(self, future: Future) -> Any:
        with self.console.status("[cyan]Talking to server...[/cyan]", spinner="dots"):
            return future.result()

    def run(self) -> None:
        self.session.refresh()
        try:
            while self.running:
                self.render()
                try:
                    command = Prompt.ask("[bold green]sipp[/bold green]", console=self.console, default="", show_default=False)
                except (KeyboardInterrupt, EOFError):
                    break
                self.dispatch(command.strip())
        finally:
            self.session.close()

    def render(self) -> None:
        self.console.clear()
        mode = "remote" if self.session.facade.is_remote else "local"
        title = f"sipp ({mode})"
        if self.session.filter:
            title += f"  filter: {self.session.filter!r}"

        table = Table(title=title, box=box.SIMPLE, expand=True)
        table.add_column("#", justify="right", style="dim", width=4)
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="bold")
        table.add_column("Created", style="dim", no_wrap=True)
        for index, snippet in enumerate(self.session.snippets):
            style = "reverse" if index == self.session.selected else None
            table.add_row(
                str(index + 1),
                snippet.short_id,
                snippet.name,
                snippet.created_label("%Y-%m-%d %H:%M"),
                style=style,
            )
        self.console.print(table)

        current = self.session.current
        if current is not None:
            lexer = current.language or Syntax.guess_lexer(current.name, code=current.content)
            syntax = Syntax(current.content, lexer, line_numbers=True, word_wrap=True)
            self.console.print(Panel(syntax, title=current.name, border_style="blue"))
        elif not self.session.snippets:
            self.console.print("[dim]No snippets. Press a to add one.[/dim]")

        if self.show_help:
            self.console.print(Panel(HELP, title="Keys", border_style="green"))

        status = self.session.status
        if status is not None:
            color = "red" if status.error else "green"
            self.console.print(f"[{color}]{status.text}[/{color}]")

    def dispatch(self, command: str) -> None:
        if not command:
            return
        if command.startswith("/"):
            self.session.search(command[1:])
            return
        if command.isdigit():
            self.session.select(int(command) - 1)
            return

        handlers = {
            "q": self._quit,
            "j": lambda: self.session.move(1),
            "k": lambda: self.session.move(-1),
            "r": self.session.refresh,
            "c": self.session.clear_search,
            "a": self._add,
            "e": self._edit,
            "d": self._delete,
            "s": self.session.share_link,
            "o": self.session.open_in_browser,
            "?": self._toggle_help,
        }
        handler = handlers.get(command.lower())
        if handler is None:
            self.session.notify(f"Unknown command: {command}", error=True)
            return
        handler()

    def _quit(self) -> None:
        self.running = False

    def _toggle_help(self) -> None:
        self.show_help = not self.show_help

    def _add(self) -> None:
        name = Prompt.ask("Name", console=self.console, default="", show_default=False)
        if not name.strip():
            self.session.notify("Name cannot be empty", error=True)
            return
        content = self._editor("", Path(name).suffix or ".txt")
        if content is None:
            return
        self.session.create(name, content)

    def _edit(self) -> None:
        current = self.session.current
        if current is None:
            self.session.notify("Nothing selected", error=True)
            return
        name = Prompt.ask("Name", console=self.console, default=current.name)
        content = self._editor(current.content, Path(name).suffix or ".txt")
        if content is None:
            return
        self.session.edit(
            name=name if name != current.name else None,
            content=content if content != current.content else None,
        )

    def _delete(self) -> None:
        current = self.session.current
        if current is None:
            self.session.notify("Nothing selected", error=True)
            return
        if Confirm.ask(f"Delete {current.name!r}?", console=self.console, default=False):
            self.session.delete()

    def _editor(self, initial: str, suffix: str) -> str | None:
        try:
            content = edit_in_editor(initial, suffix)
        except OSError as exc:
            self.session.notify(f"Editor error: {exc}", error=True)
            return None
        if content is None:
            self.session.notify("Editor exited with an error; nothing saved", error=True)
        return content


__all__ = ["SnippetShell", "edit_in_editor"]
