from __future__ import annotations

from pathlib import Path
from typing import Optional

import markdown
from jinja2 import Environment, FileSystemLoader, TemplateError

from . import sources
from .config import AppConfig
from .content import parse_front_matter
from .errors import ConfigurationError, UnsupportedPageType
from .models import Page, ResolvedPageMeta
from .pages import resolve_page_meta
from .render import protect_template_functions

MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]
MARKDOWN_EXTS = {".md", ".markdown"}
HTML_EXTS = {".html", ".htm"}
JINJA_EXTS = {".jinja", ".j2"}
PAGE_EXTS = MARKDOWN_EXTS | HTML_EXTS | JINJA_EXTS


def convert_markdown(text: str) -> str:
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS)
    return md.convert(text)


def convert_jinja(text: str, search_path: Optional[Path] = None) -> str:
    loader = FileSystemLoader(str(search_path)) if search_path is not None else None
    env = Environment(loader=loader, autoescape=False, keep_trailing_newline=True)
    try:
        return env.from_string(protect_template_functions(text)).render()
    except TemplateError as exc:
        raise ConfigurationError(f"Template error: {exc}") from exc


def convert_raw(text: str, ext: str, search_path: Optional[Path] = None) -> tuple[str, dict]:
    ext = ext.lower()
    if ext in MARKDOWN_EXTS:
        meta, body = parse_front_matter(text)
        return convert_markdown(body), meta
    if ext in HTML_EXTS:
        return text, {}
    if ext in JINJA_EXTS:
        return convert_jinja(text, search_path), {}
    raise UnsupportedPageType(f"Unsupported page type: {ext or '(none)'}")


def convert_text(text: str, ext: str, search_path: Optional[Path] = None) -> str:
    """Render text in any page format to HTML, dropping its metadata."""
    return convert_raw(text, ext, search_path)[0]


def convert_page(page: Page, config: AppConfig) -> tuple[str, ResolvedPageMeta]:
    if page.ext.lower() not in PAGE_EXTS:
        raise UnsupportedPageType(f"Unsupported page type: {page.ext}")
    text = sources.read_text(str(page.src))
    html_text, raw_meta = convert_raw(text, page.ext, page.src_dir)
    return html_text, resolve_page_meta(raw_meta, page, config)
