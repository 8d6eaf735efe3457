from __future__ import annotations

import enum
import mimetypes

from .errors import UnsupportedResourceType
from .models import MIME_TYPES, MimeType

# Built-in defaults only; system mime.types files differ between hosts.
_mimetypes = mimetypes.MimeTypes()
for _type, _ext in (
    ("text/html", ".html"),
    ("text/html", ".htm"),
    ("text/css", ".css"),
    ("text/x-scss", ".scss"),
    ("text/x-less", ".less"),
    ("text/javascript", ".js"),
    ("text/javascript", ".mjs"),
    ("text/x-typescript", ".ts"),
    ("text/markdown", ".md"),
    ("image/x-icon", ".ico"),
    ("image/svg+xml", ".svg"),
    ("image/webp", ".webp"),
    ("image/avif", ".avif"),
    ("audio/mpeg", ".mp3"),
    ("audio/ogg", ".ogg"),
    ("audio/wav", ".wav"),
    ("video/mp4", ".mp4"),
    ("video/webm", ".webm"),
    ("font/woff", ".woff"),
    ("font/woff2", ".woff2"),
    ("application/pdf", ".pdf"),
):
    _mimetypes.add_type(_type, _ext)

STYLE_EXTENSIONS = {".css", ".scss", ".less"}


class ResourceKind(enum.Enum):
    HTML = "html"
    STYLESHEET = "stylesheet"
    STYLESHEET_PREPROCESSED = "stylesheet-preprocessed"
    SCRIPT = "script"
    SCRIPT_TRANSPILED = "script-transpiled"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    APPLICATION = "application"


TEXT_KINDS = {
    ".htm": ResourceKind.HTML,
    ".html": ResourceKind.HTML,
    ".css": ResourceKind.STYLESHEET,
    ".scss": ResourceKind.STYLESHEET_PREPROCESSED,
    ".less": ResourceKind.STYLESHEET_PREPROCESSED,
    ".js": ResourceKind.SCRIPT,
    ".mjs": ResourceKind.SCRIPT,
    ".ts": ResourceKind.SCRIPT_TRANSPILED,
}

BINARY_KINDS = {
    "image": ResourceKind.IMAGE,
    "audio": ResourceKind.AUDIO,
    "video": ResourceKind.VIDEO,
    "application": ResourceKind.APPLICATION,
}


def parse_mime_type(value: str) -> MimeType:
    essence = value.split(";", 1)[0].strip().lower()
    major, _, subtype = essence.partition("/")
    if major not in MIME_TYPES or not subtype:
        raise UnsupportedResourceType(f"Unsupported mime type: {value}")
    return MimeType(type=major, subtype=subtype)


def guess_type(extension: str) -> str | None:
    return _mimetypes.types_map[True].get(extension.lower())


def guess_extension(content_type: str) -> str | None:
    essence = content_type.split(";", 1)[0].strip().lower()
    return _mimetypes.guess_extension(essence)


def parse_file_mime_type(extension: str) -> MimeType:
    mime_type = guess_type(extension)
    if mime_type is None:
        raise UnsupportedResourceType(f"Mime type lookup failed for extension: {extension or '(none)'}")
    return parse_mime_type(mime_type)


def classify_resource(extension: str) -> tuple[MimeType, ResourceKind]:
    mime_type = parse_file_mime_type(extension)
    if mime_type.type == "text":
        kind = TEXT_KINDS.get(extension.lower())
    else:
        kind = BINARY_KINDS.get(mime_type.type)
    if kind is None:
        raise UnsupportedResourceType(f"Unsupported resource type: {mime_type} ({extension})")
    return mime_type, kind


def default_resource_target(extension: str) -> str:
    return "head" if extension.lower() in STYLE_EXTENSIONS else "body"
