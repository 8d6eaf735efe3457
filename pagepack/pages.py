from __future__ import annotations

import re
from pathlib import Path

from .config import AppConfig
from .errors import ConfigurationError
from .models import Page, ResolvedPageMeta
from .resources import LazyResource
from .utils import list_files

PAGE_FILE_RE = re.compile(r"^(?P<name>.+?)\.page(?P<ext>\.\w+)$")
PAGE_LINK_RE = re.compile(r"\.page\.(?:html?|md|markdown|jinja|j2)(?=$|[?#])", re.IGNORECASE)


def is_page_file(path: str | Path) -> bool:
    return PAGE_FILE_RE.match(Path(path).name) is not None


def resolve_page(src: str | Path, config: AppConfig) -> Page:
    src = Path(src)
    match = PAGE_FILE_RE.match(src.name)
    if match is None:
        raise ConfigurationError(f"Not a page file: {src}")
    relative = src.parent.relative_to(config.src_dir)
    dst = config.dst_dir / relative / f"{match.group('name')}.html"
    return Page(src=src, dst=dst, ext=match.group("ext"), src_dir=src.parent, dst_dir=dst.parent)


def discover_pages(config: AppConfig) -> list[Page]:
    pages = []
    for path in list_files(config.src_dir):
        if path.is_relative_to(config.dst_dir):
            continue
        if is_page_file(path):
            pages.append(resolve_page(path, config))
    return pages


def relative_page_path(page: Page, config: AppConfig) -> str:
    try:
        return page.src.relative_to(config.src_dir).as_posix()
    except ValueError:
        return page.src.as_posix()


def resolve_page_meta(meta: dict, page: Page, config: AppConfig) -> ResolvedPageMeta:
    hljs = meta.get("hljs", False)
    if not isinstance(hljs, (bool, str)):
        raise ConfigurationError(f"hljs must be a boolean or a theme name: {page.src}")
    title = meta.get("title") or ""
    layout = None
    if meta.get("layout"):
        layout_value = meta["layout"]
        if not isinstance(layout_value, str):
            raise ConfigurationError(f"layout must be a path or URL: {page.src}")
        layout = LazyResource.from_descriptor({"url": layout_value}, page, config)
    favicon = None
    if meta.get("favicon"):
        favicon = LazyResource.from_descriptor(meta["favicon"], page, config)
    resources = []
    declared = meta.get("resources") or []
    if not isinstance(declared, list):
        raise ConfigurationError(f"resources must be a list: {page.src}")
    for resource in declared:
        resources.append(LazyResource.from_descriptor(resource, page, config))
    return ResolvedPageMeta(hljs=hljs, title=str(title), layout=layout, favicon=favicon, resources=resources)
