import threading

import pytest

from sipp.backend import AccessFacade, LocalBackend
from sipp.errors import RemoteUnavailable, Unauthorized
from sipp.snippet import Snippet, SnippetStore, StoreConfig
from sipp.tui.session import STATUS_TTL, TerminalSession


class _Clock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def session(tmp_path):
    store = SnippetStore.open(StoreConfig(db_path=str(tmp_path / "tui.sqlite")))
    session = TerminalSession(AccessFacade(LocalBackend(store)), clock=_Clock())
    yield session
    session.close()


def test_create_prepends_and_selects(session):
    first = session.create("one.txt", "1")
    second = session.create("two.txt", "2")

    assert [s.short_id for s in session.snippets] == [second.short_id, first.short_id]
    assert session.current == second
    assert session.status.text == f"Created {second.short_id}"


def test_create_and_edit_reject_empty_name_locally(session):
    assert session.create("  ", "body") is None
    assert session.status.error
    assert session.facade.list() == []

    session.create("ok.txt", "body")
    assert session.edit(name="") is None
    assert session.current.name == "ok.txt"


def test_edit_updates_the_selected_snippet(session):
    session.create("draft.md", "v1")

    updated = session.edit(content="v2")

    assert updated.content == "v2"
    assert session.current.content == "v2"
    assert session.facade.get(updated.short_id).content == "v2"


def test_delete_removes_and_clamps_selection(session):
    session.create("a", "a")
    session.create("b", "b")
    session.select(1)

    assert session.delete() is True
    assert [s.name for s in session.snippets] == ["b"]
    assert session.selected == 0

    assert session.delete() is True
    assert session.snippets == []
    assert session.current is None
    assert session.delete() is False


def test_move_wraps_around(session):
    for name in ("a", "b", "c"):
        session.create(name, name)
    session.select(0)

    session.move(-1)
    assert session.current.name == "a"
    session.move(1)
    assert session.current.name == "c"


def test_search_and_clear(session):
    session.create("apple.txt", "fruit")
    session.create("carrot.txt", "vegetable")
    session.refresh()

    assert session.search("APPLE")
    assert [s.name for s in session.snippets] == ["apple.txt"]
    assert session.filter == "APPLE"

    assert session.clear_search()
    assert session.filter is None
    assert len(session.snippets) == 2


def test_refresh_keeps_selection_on_same_snippet(session):
    session.create("a", "a")
    target = session.create("b", "b")
    session.select(0)
    session.facade.create("c", "c")

    session.refresh()

    assert session.current.short_id == target.short_id
    assert len(session.snippets) == 3


def test_share_link_uses_public_url(session):
    created = session.create("a", "a")

    assert session.share_link() == f"http://localhost:3000/s/{created.short_id}"


def test_open_in_browser_opens_share_link(session, monkeypatch):
    opened = []
    monkeypatch.setattr("sipp.tui.session.webbrowser.open", lambda url: opened.append(url) or True)
    created = session.create("a", "a")

    assert session.open_in_browser() is True
    assert opened == [f"http://localhost:3000/s/{created.short_id}"]
    assert session.status.text == "Opened in browser"
    assert not session.status.error


def test_open_in_browser_reports_missing_browser(session, monkeypatch):
    monkeypatch.setattr("sipp.tui.session.webbrowser.open", lambda url: False)
    session.create("a", "a")

    assert session.open_in_browser() is False
    assert session.status.error
    assert session.status.text.startswith("Could not open a browser")


def test_open_in_browser_needs_a_selection(session, monkeypatch):
    opened = []
    monkeypatch.setattr("sipp.tui.session.webbrowser.open", lambda url: opened.append(url) or True)

    assert session.open_in_browser() is False
    assert opened == []
    assert session.status.text == "Nothing selected"


def test_status_message_expires(session):
    session.notify("hello")
    clock = session._clock

    clock.now += STATUS_TTL - 0.5
    assert session.status.text == "hello"
    clock.now += 1.0
    assert session.status is None


class _FailingFacade:
    is_remote = False

    def __init__(self, error):
        self.error = error

    def list(self, query=None, *, refresh=True):
        raise self.error

    def close(self):
        pass


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (RemoteUnavailable("Could not reach server"), "Could not reach server"),
        (Unauthorized(), "Unauthorized: Invalid or missing API key"),
    ],
)
def test_backend_errors_become_status_messages(error, expected):
    session = TerminalSession(_FailingFacade(error))

    assert session.refresh() is False
    assert session.status.error
    assert session.status.text == expected


LATE = Snippet(short_id="late", name="late.txt", content="late result")


class _SlowRemoteFacade:
    is_remote = True

    def __init__(self):
        self.release = threading.Event()

    def list(self, query=None, *, refresh=True):
        self.release.wait(5)
        return [LATE]

    def close(self):
        self.release.set()


def test_interrupted_remote_call_is_discarded():
    facade = _SlowRemoteFacade()

    def interrupted(future):
        raise KeyboardInterrupt

    session = TerminalSession(facade, waiter=interrupted)
    try:
        assert session.refresh() is False
        assert session.snippets == []
        assert session.status.error
        assert "Cancelled" in session.status.text
    finally:
        session.close()


def test_remote_calls_run_through_the_waiter():
    facade = _SlowRemoteFacade()
    facade.release.set()
    waited = []

    def waiter(future):
        waited.append(future)
        return future.result()

    session = TerminalSession(facade, waiter=waiter)
    try:
        assert session.refresh() is True
        assert session.snippets == [LATE]
        assert len(waited) == 1
    finally:
        session.close()
