import io

import pytest
from rich.console import Console

from sipp.backend import AccessFacade, LocalBackend
from sipp.snippet import SnippetStore, StoreConfig
from sipp.tui import shell as shell_module
from sipp.tui.session import TerminalSession
from sipp.tui.shell import SnippetShell


@pytest.fixture
def shell(tmp_path):
    store = SnippetStore.open(StoreConfig(db_path=str(tmp_path / "shell.sqlite")))
    session = TerminalSession(AccessFacade(LocalBackend(store)))
    output = io.StringIO()
    shell = SnippetShell(session, Console(file=output, width=120, force_terminal=False))
    yield shell
    session.close()


def test_add_uses_prompted_name_and_editor_content(shell, monkeypatch):
    monkeypatch.setattr(shell_module.Prompt, "ask", lambda *args, **kwargs: "hello.py")
    monkeypatch.setattr(shell_module, "edit_in_editor", lambda initial, suffix: "print('hi')\n")

    shell.dispatch("a")

    assert [s.name for s in shell.session.snippets] == ["hello.py"]
    assert shell.session.current.content == "print('hi')\n"


def test_editor_failure_leaves_snippet_unchanged(shell, monkeypatch):
    shell.session.create("keep.txt", "original")
    monkeypatch.setattr(shell_module.Prompt, "ask", lambda *args, **kwargs: "keep.txt")
    monkeypatch.setattr(shell_module, "edit_in_editor", lambda initial, suffix: None)

    shell.dispatch("e")

    assert shell.session.current.content == "original"
    assert shell.session.status.error


def test_delete_asks_for_confirmation(shell, monkeypatch):
    shell.session.create("a.txt", "a")
    monkeypatch.setattr(shell_module.Confirm, "ask", lambda *args, **kwargs: False)
    shell.dispatch("d")
    assert len(shell.session.snippets) == 1

    monkeypatch.setattr(shell_module.Confirm, "ask", lambda *args, **kwargs: True)
    shell.dispatch("d")
    assert shell.session.snippets == []


def test_render_lists_snippets_and_status(shell):
    shell.session.create("render.py", "x = 1\n")
    shell.dispatch("?")
    shell.dispatch("zzz")

    shell.render()

    text = shell.console.file.getvalue()
    assert "render.py" in text
    assert "Unknown command: zzz" in text
    assert "share link" in text
    assert "open in browser" in text


def test_quit_and_filter_commands(shell):
    shell.session.create("apple.txt", "a")
    shell.session.create("pear.txt", "p")

    shell.dispatch("/apple")
    assert [s.name for s in shell.session.snippets] == ["apple.txt"]

    shell.dispatch("q")
    assert shell.running is False


def test_o_opens_selected_snippet_in_browser(shell, monkeypatch):
    opened = []
    monkeypatch.setattr("sipp.tui.session.webbrowser.open", lambda url: opened.append(url) or True)
    created = shell.session.create("page.html", "<p>hi</p>")

    shell.dispatch("o")

    assert opened == [shell.session.facade.share_link(created.short_id)]
    assert shell.session.status.text == "Opened in browser"


def test_edit_in_editor_returns_saved_text(monkeypatch):
    monkeypatch.delenv("VISUAL", raising=False)
    monkeypatch.setenv("EDITOR", "true")
    assert shell_module.edit_in_editor("unchanged\n") == "unchanged\n"

    monkeypatch.setenv("EDITOR", "false")
    assert shell_module.edit_in_editor("ignored") is None
