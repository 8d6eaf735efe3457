from __future__ import annotations

from typing import Optional

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from .errors import ConfigurationError, DocumentStructureError
from .pages import PAGE_LINK_RE
from .utils import is_remote_url

PARSER = "html.parser"


def parse(html_text: str) -> BeautifulSoup:
    return BeautifulSoup(html_text, PARSER)


def query_or_throw(selector: str, root: Tag) -> Tag:
    try:
        element = root.select_one(selector)
    except SelectorSyntaxError as exc:
        raise ConfigurationError(f"Invalid target selector {selector!r}: {exc}") from exc
    if element is None:
        raise DocumentStructureError(f"Element not found with selector: {selector}")
    return element


def append_element(
    document: BeautifulSoup,
    parent: Tag,
    name: str,
    attrs: Optional[dict] = None,
    text: Optional[str] = None,
) -> Tag:
    element = document.new_tag(name, attrs=attrs or {})
    if text is not None:
        element.string = text
    parent.append(element)
    parent.append("\n")
    return element


def has_title(head: Tag) -> bool:
    title = head.find("title")
    return title is not None and len(title.get_text()) > 0


def set_title(document: BeautifulSoup, head: Tag, title: str) -> None:
    element = head.find("title")
    if element is None:
        append_element(document, head, "title", text=title)
    else:
        element.string = title


def remove_favicons(head: Tag) -> None:
    for link in head.find_all("link"):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if link.get("href") is not None and any("icon" in value.lower() for value in rel):
            link.decompose()


def convert_local_links_to_html(body: Tag) -> None:
    for anchor in body.find_all("a", href=True):
        href = anchor["href"]
        if not is_remote_url(href):
            anchor["href"] = PAGE_LINK_RE.sub(".html", href)
