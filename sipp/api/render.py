"""HTML and plain-text rendering for share pages."""

from __future__ import annotations

import html
from typing import Iterable

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name, get_lexer_for_filename, guess_lexer
from pygments.util import ClassNotFound

from ..snippet import Snippet

HIGHLIGHT_STYLE = "default"

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: sans-serif; margin: 2rem; }}
.meta {{ color: #666; font-size: 0.9rem; }}
{css}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def user_agent_product(user_agent: str | None) -> str:
    """Return the lowercased product token of a User-Agent (``curl/8.5.0`` -> ``curl``)."""
    parts = (user_agent or "").split()
    if not parts:
        return ""
    return parts[0].split("/", 1)[0].lower()


def is_script_client(user_agent: str | None, allow_list: Iterable[str]) -> bool:
    product = user_agent_product(user_agent)
    if not product:
        return False
    return product in {item.lower() for item in allow_list}


def pick_lexer(snippet: Snippet) -> Lexer:
    if snippet.language:
        try:
            return get_lexer_by_name(snippet.language, stripnl=False)
        except ClassNotFound:
            pass
    try:
        return get_lexer_for_filename(snippet.name, snippet.content, stripnl=False)
    except ClassNotFound:
        pass
    try:
        return guess_lexer(snippet.content, stripnl=False)
    except ClassNotFound:
        return get_lexer_by_name("text", stripnl=False)


def render_snippet_page(snippet: Snippet) -> str:
    formatter = HtmlFormatter(style=HIGHLIGHT_STYLE, linenos="table", cssclass="highlight")
    code = highlight(snippet.content, pick_lexer(snippet), formatter)
    created = snippet.created_label()
    body = (
        f"<h1>{html.escape(snippet.name)}</h1>\n"
        f'<p class="meta">{html.escape(snippet.short_id)} &middot; {created} &middot; '
        f'<a href="/s/{html.escape(snippet.short_id)}/raw">raw</a></p>\n'
        f"{code}"
    )
    return _PAGE.format(
        title=html.escape(snippet.name),
        css=formatter.get_style_defs(".highlight"),
        body=body,
    )


def render_index_page(message: str | None = None) -> str:
    notice = f'<p class="meta">{html.escape(message)}</p>\n' if message else ""
    body = (
        "<h1>sipp</h1>\n"
        f"{notice}"
        '<form method="post" action="/snippets">\n'
        '<p><input name="name" placeholder="name" size="60" required></p>\n'
        '<p><textarea name="content" rows="20" cols="100" required></textarea></p>\n'
        '<p><button type="submit">Share</button></p>\n'
        "</form>"
    )
    return _PAGE.format(title="sipp", css="", body=body)


def render_not_found_page(short_id: str) -> str:
    body = (
        "<h1>Snippet not found</h1>\n"
        f'<p class="meta">No snippet with id {html.escape(short_id)}. '
        '<a href="/">Share a new one</a></p>'
    )
    return _PAGE.format(title="Snippet not found", css="", body=body)


__all__ = [
    "is_script_client",
    "pick_lexer",
    "render_index_page",
    "render_not_found_page",
    "render_snippet_page",
    "user_agent_product",
]
