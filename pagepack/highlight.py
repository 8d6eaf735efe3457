from __future__ import annotations

import html
import re
from typing import Union

from bs4 import BeautifulSoup, Tag
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .document import append_element, parse
from .errors import UnsupportedFormat

DEFAULT_THEME = "default"
CODE_CLASS = "hljs"
FENCED_CODE_RE = re.compile(
    r'^\s*<code class="(?:[^"]*\s)?language-(?P<lang>[\w#+.-]+)[^"]*">(?P<code>.*?)</code>\s*$',
    re.DOTALL,
)


def resolve_theme(value: Union[bool, str]) -> str:
    return value if isinstance(value, str) and value else DEFAULT_THEME


def theme_stylesheet(theme: str) -> str:
    try:
        formatter = HtmlFormatter(style=theme)
    except ClassNotFound as exc:
        raise UnsupportedFormat(f"Unknown syntax highlighting theme: {theme}") from exc
    return formatter.get_style_defs(f".{CODE_CLASS}")


def highlight_code(source: str, language: str) -> str | None:
    try:
        lexer = get_lexer_by_name(language, stripnl=False)
    except ClassNotFound:
        return None
    return highlight(source, lexer, HtmlFormatter(nowrap=True))


def highlight_pre(pre: Tag) -> bool:
    match = FENCED_CODE_RE.match(pre.decode_contents())
    if match is None:
        return False
    # The converter escaped the code; the highlighter escapes it again.
    source = html.unescape(match.group("code"))
    highlighted = highlight_code(source, match.group("lang"))
    if highlighted is None:
        return False
    pre.clear()
    pre.append(parse(f'<code class="{CODE_CLASS}">{highlighted}</code>'))
    return True


def apply_highlighting(document: BeautifulSoup, head: Tag, body: Tag, hljs: Union[bool, str]) -> None:
    append_element(document, head, "style", text=theme_stylesheet(resolve_theme(hljs)))
    for pre in body.find_all("pre"):
        highlight_pre(pre)
