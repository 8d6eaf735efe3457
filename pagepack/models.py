"""Plain data types shared by the build pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from .resources import LazyResource

MIME_TYPES = {"application", "audio", "example", "font", "image", "model", "text", "video"}


@dataclass(frozen=True)
class ResolvedSource:
    """A raw URL classified as remote or local; local paths are absolute."""

    url: str
    is_remote: bool


@dataclass(frozen=True)
class MimeType:
    type: str
    subtype: str

    def __str__(self) -> str:
        return f"{self.type}/{self.subtype}"


@dataclass(frozen=True)
class Page:
    """A page source file and where its HTML output goes."""

    src: Path
    dst: Path
    ext: str
    src_dir: Path
    dst_dir: Path


@dataclass
class ResolvedPageMeta:
    hljs: Union[bool, str] = False
    title: str = ""
    layout: Optional["LazyResource"] = None
    favicon: Optional["LazyResource"] = None
    resources: list["LazyResource"] = field(default_factory=list)
