from __future__ import annotations

import os
import re
from pathlib import Path

from .utils import is_linkable_url, is_remote_url

SLOT_MARKER = "$slot"
TITLE_MARKER = "$title"

DEFAULT_HTML_LAYOUT = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>$title</title>
  </head>
  <body>
    $slot
  </body>
</html>
"""

FULL_DOCUMENT_RE = re.compile(r"<html(?:\s[^>]*)?>.*?</html>", re.IGNORECASE | re.DOTALL)
FUNCTION_URL_RE = re.compile(r"(\{\{\s*(?:embed|render|data_url)\s+)(.*?)(\s*\}\})")
TEMPLATE_FUNCTION_RE = re.compile(r"\{\{\s*(?:embed|render|data_url)\s+\S.*?\}\}", re.DOTALL)
TAG_URL_RE = re.compile(
    r"""(<(?P<tag>[a-zA-Z][\w-]*)\b[^>]*?\s(?:href|src)=)(?P<quote>["'])(?P<url>.*?)(?P=quote)""",
    re.DOTALL,
)


def is_full_html_document(html_text: str) -> bool:
    return FULL_DOCUMENT_RE.search(html_text) is not None


def _prefix_url(url: str, prefix: str) -> str:
    stripped = url.strip()
    if not is_linkable_url(stripped) or is_remote_url(stripped) or stripped.startswith("data:"):
        return url
    return os.path.normpath(os.path.join(prefix, stripped))


def prefix_relative_urls(html_text: str, prefix: str | Path) -> str:
    """Anchor a layout's relative asset URLs to the layout's own directory."""
    prefix = str(prefix)

    def function_repl(match: re.Match) -> str:
        return f"{match.group(1)}{_prefix_url(match.group(2), prefix)}{match.group(3)}"

    def tag_repl(match: re.Match) -> str:
        # Anchors point at pages, not assets; link rewriting handles them later.
        if match.group("tag").lower() == "a":
            return match.group(0)
        url = _prefix_url(match.group("url"), prefix)
        quote = match.group("quote")
        return f"{match.group(1)}{quote}{url}{quote}"

    html_text = FUNCTION_URL_RE.sub(function_repl, html_text)
    return TAG_URL_RE.sub(tag_repl, html_text)


def protect_template_functions(text: str) -> str:
    """Mark {{ embed|render|data_url path }} as raw so Jinja leaves it for expansion."""
    return TEMPLATE_FUNCTION_RE.sub(lambda match: "{% raw %}" + match.group(0) + "{% endraw %}", text)


def fill_slot(layout: str, content: str) -> str:
    return layout.replace(SLOT_MARKER, content)


def fill_title(html_text: str, title: str) -> str:
    return html_text.replace(TITLE_MARKER, title)


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
