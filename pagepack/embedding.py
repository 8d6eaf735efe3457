"""Decide how a declared resource lands in a document: inlined or copied and linked."""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Callable

from bs4 import BeautifulSoup, Tag

from . import transforms
from .document import append_element, query_or_throw
from .errors import ConfigurationError, UnsupportedResourceType
from .mime import ResourceKind, classify_resource
from .models import MimeType
from .resources import LazyResource
from .utils import replace_extension, to_web_friendly_url

logger = logging.getLogger("pagepack.embedding")

MEDIA_TAGS = {
    ResourceKind.IMAGE: "img",
    ResourceKind.AUDIO: "audio",
    ResourceKind.VIDEO: "video",
    ResourceKind.APPLICATION: "embed",
}


def _set_or_append(document: BeautifulSoup, target: Tag, name: str, attrs: dict) -> None:
    if target.name == name:
        for key, value in attrs.items():
            target[key] = value
    else:
        append_element(document, target, name, attrs)


def _append_inline(document: BeautifulSoup, target: Tag, name: str, text: str) -> None:
    if target.name == name:
        target.append(text)
    else:
        append_element(document, target, name, text=text)


def _write_compiled(resource: LazyResource, ext: str, compile_text: Callable[[str], str]) -> str:
    dst = replace_extension(resource.dst, ext)
    resource.file.process_text_and_copy(dst, compile_text)
    logger.info("RESOURCE %s", dst)
    return to_web_friendly_url(dst, resource.page.dst_dir)


def _include_path(resource: LazyResource) -> str | None:
    return str(Path(resource.src).parent) if resource.is_local else None


def _embed_html(document: BeautifulSoup, target: Tag, resource: LazyResource, mime_type: MimeType) -> None:
    src = resource.file.to_data_url() if resource.embed else resource.web_friendly_dst
    _set_or_append(document, target, "embed", {"type": "text/html", "src": src})
    if not resource.embed:
        resource.copy_if_missing()


def _embed_stylesheet(document: BeautifulSoup, target: Tag, resource: LazyResource, mime_type: MimeType) -> None:
    if resource.embed:
        _append_inline(document, target, "style", resource.read_text())
        return
    resource.copy_if_missing()
    if target.name == "link":
        target["href"] = resource.web_friendly_dst
    else:
        append_element(document, target, "link", {"rel": "stylesheet", "href": resource.web_friendly_dst})


def _embed_preprocessed_stylesheet(document: BeautifulSoup, target: Tag, resource: LazyResource, mime_type: MimeType) -> None:
    include_path = _include_path(resource)
    if resource.file.extension().lower() == ".less":
        compile_text = partial(transforms.compile_less, include_path=include_path)
    else:
        compile_text = partial(transforms.compile_scss, include_path=include_path)
    if resource.embed:
        _append_inline(document, target, "style", compile_text(resource.read_text()))
        return
    href = _write_compiled(resource, ".css", compile_text)
    if target.name == "link":
        target["href"] = href
    else:
        append_element(document, target, "link", {"rel": "stylesheet", "href": href})


def _embed_script(document: BeautifulSoup, target: Tag, resource: LazyResource, mime_type: MimeType) -> None:
    if resource.embed:
        _append_inline(document, target, "script", resource.read_text())
        return
    resource.copy_if_missing()
    _set_or_append(document, target, "script", {"src": resource.web_friendly_dst})


def _embed_transpiled_script(document: BeautifulSoup, target: Tag, resource: LazyResource, mime_type: MimeType) -> None:
    if resource.embed:
        _append_inline(document, target, "script", transforms.transpile_typescript(resource.read_text()))
        return
    src = _write_compiled(resource, ".js", transforms.transpile_typescript)
    _set_or_append(document, target, "script", {"src": src})


def _embed_media(document: BeautifulSoup, target: Tag, resource: LazyResource, mime_type: MimeType, kind: ResourceKind) -> None:
    tag = MEDIA_TAGS[kind]
    src = resource.file.to_data_url() if resource.embed else resource.web_friendly_dst
    attrs = {"type": str(mime_type), "src": src}
    if target.name == tag:
        for key, value in attrs.items():
            target[key] = value
    else:
        if kind in (ResourceKind.AUDIO, ResourceKind.VIDEO):
            attrs["controls"] = ""
        append_element(document, target, tag, attrs)
    if not resource.embed:
        resource.copy_if_missing()


TEXT_HANDLERS = {
    ResourceKind.HTML: _embed_html,
    ResourceKind.STYLESHEET: _embed_stylesheet,
    ResourceKind.STYLESHEET_PREPROCESSED: _embed_preprocessed_stylesheet,
    ResourceKind.SCRIPT: _embed_script,
    ResourceKind.SCRIPT_TRANSPILED: _embed_transpiled_script,
}


def process_resource(resource: LazyResource, document: BeautifulSoup) -> None:
    if not resource.embed and resource.is_remote:
        raise ConfigurationError(f"Cannot add a remote resource without embedding it: {resource.src}")
    mime_type, kind = classify_resource(resource.file.extension())
    target = query_or_throw(resource.target, document)
    if kind in TEXT_HANDLERS:
        TEXT_HANDLERS[kind](document, target, resource, mime_type)
    elif kind in MEDIA_TAGS:
        _embed_media(document, target, resource, mime_type, kind)
    else:
        raise UnsupportedResourceType(f"Unsupported resource type: {resource.src}")
