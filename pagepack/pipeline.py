from __future__ import annotations

import logging
import re
from pathlib import Path

from bs4 import BeautifulSoup, Tag

from . import document as dom
from . import sources, transforms
from .config import AppConfig
from .content import get_title
from .converters import convert_page, convert_text
from .embedding import process_resource
from .errors import ConfigurationError, DocumentStructureError, PagepackError, TemplateFunctionError, UnsupportedResourceType
from .highlight import apply_highlighting
from .mime import parse_file_mime_type
from .models import Page, ResolvedPageMeta
from .pages import discover_pages, relative_page_path
from .render import DEFAULT_HTML_LAYOUT, fill_slot, fill_title, is_full_html_document, prefix_relative_urls, write_text
from .resources import LazyResource
from .utils import is_data_url, is_linkable_url, is_remote_url, resolve_src_location, url_extension

logger = logging.getLogger("pagepack.pipeline")

PAGE_FUNCTION_RE = re.compile(r"\{\{\s*(\w+)\s+(.*?)\s*\}\}", re.DOTALL)
MAX_INCLUDE_DEPTH = 100
DO_NOT_EMBED_ATTR = "data-do-not-embed"
MEDIA_TAG_NAMES = {
    "application": "embed",
    "audio": "audio",
    "image": "img",
    "video": "video",
}
# Elements whose tag already says how the resource is used.
KEEP_TAG_NAMES = {"link", "script", "source", "track", "iframe", "input", "object", "use", "image"}
SKIP_TAG_NAMES = {"base", "form"}
NON_RESOURCE_LINK_RELS = {"alternate", "author", "canonical", "dns-prefetch", "help", "license", "me", "next", "preconnect", "prev", "search"}


def process_directory(config: AppConfig) -> tuple[int, int]:
    built = failed = 0
    for page in discover_pages(config):
        if try_process_page(page, config):
            built += 1
        else:
            failed += 1
    return built, failed


def try_process_page(page: Page, config: AppConfig) -> bool:
    try:
        process_page(page, config)
    except PagepackError as exc:
        logger.error("ERROR %s (page file: %s)", exc, relative_page_path(page, config))
        return False
    except Exception as exc:  # pylint: disable=broad-except
        logger.error("ERROR %s: %s (page file: %s)", type(exc).__name__, exc, relative_page_path(page, config))
        logger.debug("Traceback for %s", page.src, exc_info=True)
        return False
    return True


def process_page(page: Page, config: AppConfig) -> None:
    html_text, meta = convert_page(page, config)
    html_text = apply_layout(html_text, page, meta)
    html_text = process_page_functions(html_text, page.src_dir)
    html_text = process_page_variables(html_text, page, meta)

    document = dom.parse(html_text)
    head = dom.query_or_throw("head", document)
    body = dom.query_or_throw("body", document)

    if not dom.has_title(head):
        dom.set_title(document, head, get_title(page, meta.title))

    process_hard_coded_resources(document, page, config)

    if meta.favicon is not None:
        add_favicon(document, head, meta.favicon)

    if meta.hljs:
        apply_highlighting(document, head, body, meta.hljs)

    for resource in meta.resources:
        process_resource(resource, document)

    dom.convert_local_links_to_html(body)
    write_text(page.dst, str(document))
    logger.info("PAGE %s", page.dst)

    if config.minify:
        minified = transforms.minify_html(page.dst.read_text(encoding="utf-8"))
        write_text(page.dst, minified)
        logger.info("MINIFY %s", page.dst)


def apply_layout(html_text: str, page: Page, meta: ResolvedPageMeta) -> str:
    if meta.layout is not None:
        if is_full_html_document(html_text):
            raise DocumentStructureError(f"Cannot add layout, the page is a full HTML document already: {page.src}")
        layout_file = meta.layout.file
        layout = convert_text(layout_file.read_text(), layout_file.extension(), _search_path(layout_file.url))
        if layout_file.is_local:
            layout = prefix_relative_urls(layout, Path(layout_file.url).parent)
        return fill_slot(layout, html_text)
    if not is_full_html_document(html_text):
        return fill_slot(DEFAULT_HTML_LAYOUT, html_text)
    return html_text


def _search_path(url: str) -> Path | None:
    return None if is_remote_url(url) else Path(url).parent


def process_page_functions(
    html_text: str,
    working_directory: str | Path,
    included_from: tuple[str, ...] = (),
) -> str:
    """Expand {{ name argument }} markers until none are left.

    Embedded and rendered content is expanded in turn, so includes may include
    further files. A file that ends up including itself is an error.
    """

    def expand(match: re.Match) -> str:
        full_match, function_name, unresolved_src = match.group(0), match.group(1), match.group(2)
        if not is_linkable_url(unresolved_src):
            raise TemplateFunctionError(f"Template function argument is not a file or URL: {full_match}")
        src = resolve_src_location(unresolved_src, working_directory)
        if function_name == "data_url":
            return sources.url_to_data_url(src)
        if function_name == "embed":
            replacement = sources.read_text(src)
        elif function_name == "render":
            replacement = convert_text(sources.read_text(src), url_extension(src), _search_path(src))
        else:
            raise TemplateFunctionError(f"Unknown template function: {full_match}")
        if src in included_from:
            raise TemplateFunctionError(f"Template function includes itself: {full_match} ({src})")
        if len(included_from) >= MAX_INCLUDE_DEPTH:
            raise TemplateFunctionError(f"Template functions nested more than {MAX_INCLUDE_DEPTH} levels deep: {src}")
        return process_page_functions(replacement, working_directory, (*included_from, src))

    return PAGE_FUNCTION_RE.sub(expand, html_text)


def process_page_variables(html_text: str, page: Page, meta: ResolvedPageMeta) -> str:
    return fill_title(html_text, get_title(page, meta.title))


def _is_hard_coded_resource(element: Tag) -> bool:
    if element.name in SKIP_TAG_NAMES:
        return False
    if element.has_attr("src"):
        return True
    if element.name == "a" or not element.has_attr("href"):
        return False
    if element.name == "link":
        rel = {value.lower() for value in element.get("rel") or []}
        return not rel & NON_RESOURCE_LINK_RELS
    return True


def process_hard_coded_resources(document: BeautifulSoup, page: Page, config: AppConfig) -> None:
    for element in document.find_all(_is_hard_coded_resource):
        url_attribute = "src" if element.has_attr("src") else "href"
        url = element[url_attribute].strip()
        if is_data_url(url) or not is_linkable_url(url):
            continue

        embed = not element.has_attr(DO_NOT_EMBED_ATTR)
        resource = LazyResource.from_descriptor({"url": url, "embed": embed}, page, config)
        mime_type = parse_file_mime_type(resource.file.extension())

        if embed:
            element[url_attribute] = resource.file.to_data_url()
        else:
            if resource.is_remote:
                raise ConfigurationError(f"Cannot copy a remote file without embedding it: {resource.src}")
            element[url_attribute] = resource.web_friendly_dst
            resource.copy_if_missing()

        if element.name in KEEP_TAG_NAMES:
            if not element.has_attr("type"):
                element["type"] = str(mime_type)
            continue
        tag_name = MEDIA_TAG_NAMES.get(mime_type.type)
        if tag_name is None:
            raise UnsupportedResourceType(f"Unsupported resource mime type {mime_type}: {resource.src}")
        element["type"] = str(mime_type)
        element.name = tag_name
        if tag_name in {"audio", "video"}:
            element["controls"] = ""


def add_favicon(document: BeautifulSoup, head: Tag, favicon: LazyResource) -> None:
    dom.remove_favicons(head)
    if favicon.embed:
        href = favicon.file.to_data_url()
    else:
        href = favicon.web_friendly_dst
        favicon.copy_if_missing()
    dom.append_element(document, head, "link", {"rel": "icon", "href": href})
