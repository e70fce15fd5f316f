"""State and actions of the interactive terminal client, independent of rendering."""

from __future__ import annotations

import logging
import time
import webbrowser
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, List, TypeVar

from ..backend import AccessFacade
from ..errors import SippError, Unauthorized
from ..snippet import Snippet

logger = logging.getLogger("sipp")

STATUS_TTL = 2.0

T = TypeVar("T")


class ActionCancelled(SippError):
    default_message = "Cancelled"


@dataclass(slots=True)
class StatusMessage:
    text: str
    created: float
    error: bool = False


class TerminalSession:
    """Displayed snippets, selection, filter and the transient status line.

    Remote calls run on a single worker thread; ``waiter`` blocks on the
    future (the shell installs one that shows a spinner). A Ctrl-C while
    waiting abandons the call and leaves the session untouched.
    """

    def __init__(
        self,
        facade: AccessFacade,
        *,
        clock: Callable[[], float] = time.monotonic,
        waiter: Callable[[Future], Any] | None = None,
    ) -> None:
        self.facade = facade
        self.snippets: List[Snippet] = []
        self.selected: int | None = None
        self.filter: str | None = None
        self._clock = clock
        self._status: StatusMessage | None = None
        self.waiter = waiter or (lambda future: future.result())
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sipp-remote") if facade.is_remote else None

    # status

    @property
    def status(self) -> StatusMessage | None:
        if self._status and self._clock() - self._status.created > STATUS_TTL:
            self._status = None
        return self._status

    def notify(self, text: str, *, error: bool = False) -> None:
        self._status = StatusMessage(text, self._clock(), error)

    def _fail(self, exc: SippError) -> None:
        text = exc.message
        if isinstance(exc, Unauthorized):
            text = f"Unauthorized: {exc.message}"
        logger.debug("Action failed: %s", text)
        self.notify(text, error=True)

    # calls

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        if self._executor is None:
            return fn(*args, **kwargs)

        future = self._executor.submit(fn, *args, **kwargs)
        try:
            return self.waiter(future)
        except KeyboardInterrupt:
            future.cancel()
            raise ActionCancelled("Cancelled; the result will be ignored") from None

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self.facade.close()

    # selection

    @property
    def current(self) -> Snippet | None:
        if self.selected is None or not self.snippets:
            return None
        return self.snippets[self.selected]

    def select(self, index: int) -> None:
        if not self.snippets:
            self.selected = None
            return
        self.selected = max(0, min(index, len(self.snippets) - 1))

    def move(self, delta: int) -> None:
        if not self.snippets:
            self.selected = None
            return
        start = self.selected if self.selected is not None else 0
        self.selected = (start + delta) % len(self.snippets)

    def _replace_listing(self, snippets: List[Snippet]) -> None:
        previous = self.current.short_id if self.current else None
        self.snippets = snippets
        for index, snippet in enumerate(snippets):
            if snippet.short_id == previous:
                self.selected = index
                return
        self.select(self.selected if self.selected is not None else 0)

    # actions

    def refresh(self) -> bool:
        try:
            snippets = self.call(self.facade.list, self.filter, refresh=True)
        except SippError as exc:
            self._fail(exc)
            return False
        self._replace_listing(snippets)
        self.notify("Refreshed")
        return True

    def search(self, query: str | None) -> bool:
        query = (query or "").strip() or None
        try:
            snippets = self.call(self.facade.list, query, refresh=False)
        except SippError as exc:
            self._fail(exc)
            return False
        self.filter = query
        self._replace_listing(snippets)
        if query is None:
            self.notify("Filter cleared")
        else:
            self.notify(f"{len(snippets)} match(es) for {query!r}")
        return True

    def clear_search(self) -> bool:
        return self.search(None)

    def create(self, name: str, content: str, language: str | None = None) -> Snippet | None:
        if not name or not name.strip():
            self.notify("Name cannot be empty", error=True)
            return None
        try:
            snippet = self.call(self.facade.create, name, content, language)
        except SippError as exc:
            self._fail(exc)
            return None
        self.snippets.insert(0, snippet)
        self.selected = 0
        self.notify(f"Created {snippet.short_id}")
        return snippet

    def edit(self, *, name: str | None = None, content: str | None = None) -> Snippet | None:
        snippet = self.current
        if snippet is None:
            self.notify("Nothing selected", error=True)
            return None
        if name is not None and not name.strip():
            self.notify("Name cannot be empty", error=True)
            return None
        try:
            updated = self.call(self.facade.update, snippet.short_id, name=name, content=content)
        except SippError as exc:
            self._fail(exc)
            return None
        self.snippets[self.selected] = updated  # type: ignore[index]
        self.notify("Saved")
        return updated

    def delete(self) -> bool:
        snippet = self.current
        if snippet is None:
            self.notify("Nothing selected", error=True)
            return False
        try:
            removed = self.call(self.facade.delete, snippet.short_id)
        except SippError as exc:
            self._fail(exc)
            return False
        if not removed:
            self.notify("Snippet not found", error=True)
            return False
        index = self.selected or 0
        self.snippets.pop(index)
        self.select(index)
        self.notify("Deleted")
        return True

    def share_link(self) -> str | None:
        snippet = self.current
        if snippet is None:
            self.notify("Nothing selected", error=True)
            return None
        link = self.facade.share_link(snippet.short_id)
        self.notify(link)
        return link

    def open_in_browser(self) -> bool:
        snippet = self.current
        if snippet is None:
            self.notify("Nothing selected", error=True)
            return False
        link = self.facade.share_link(snippet.short_id)
        try:
            opened = webbrowser.open(link)
        except webbrowser.Error as exc:
            logger.debug("Browser failed for %s", link, exc_info=exc)
            opened = False
        if not opened:
            self.notify(f"Could not open a browser for {link}", error=True)
            return False
        self.notify("Opened in browser")
        return True


__all__ = ["ActionCancelled", "STATUS_TTL", "StatusMessage", "TerminalSession"]
