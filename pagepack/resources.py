from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional, Union

from . import mime, sources
from .config import AppConfig
from .errors import ConfigurationError
from .models import Page, ResolvedSource
from .render import write_text
from .utils import is_data_url, relative_path_to_absolute, resolve_source, to_web_friendly_url, url_extension

logger = logging.getLogger("pagepack.resources")

Resource = Union[str, dict]

_MISSING = object()


class LazyFile:
    """A local, remote or data-URL source whose I/O happens on first use.

    Every operation is memoized for the lifetime of the instance, so a file
    referenced several times during a page build is read at most once.
    """

    def __init__(self, url: str, working_directory: str | Path | None = None) -> None:
        self.source: ResolvedSource = resolve_source(url, working_directory or os.getcwd())
        self._cache: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"LazyFile({self.url!r})"

    def _memo(self, key: str, compute: Callable[[], Any]) -> Any:
        value = self._cache.get(key, _MISSING)
        if value is _MISSING:
            value = compute()
            self._cache[key] = value
        return value

    @property
    def url(self) -> str:
        return self.source.url

    @property
    def is_remote(self) -> bool:
        return self.source.is_remote

    @property
    def is_local(self) -> bool:
        return not self.source.is_remote

    @property
    def is_data_url(self) -> bool:
        return is_data_url(self.url)

    def exists(self) -> bool:
        def compute() -> bool:
            if self.is_data_url:
                return True
            if self.is_remote:
                return sources.remote_exists(self.url)
            return sources.local_file_exists(self.url)

        return self._memo("exists", compute)

    def content_type(self) -> str:
        def compute() -> str:
            if self.is_data_url:
                return self.url[len("data:"):].split(";", 1)[0]
            if self.is_remote:
                return sources.head_content_type(self.url)
            return sources.local_content_type(self.url)

        return self._memo("content-type", compute)

    def extension(self) -> str:
        def compute() -> str:
            ext = url_extension(self.url)
            if ext:
                return ext
            if self.is_remote or self.is_data_url:
                return mime.guess_extension(self.content_type()) or ".txt"
            return ".txt"

        return self._memo("extension", compute)

    def to_data_url(self) -> str:
        return self._memo("data-url", lambda: sources.url_to_data_url(self.url))

    def read_text(self) -> str:
        return self._memo("text", lambda: sources.read_text(self.url))

    def copy(self, dst: str | Path) -> bytes:
        data = self._memo("copy", lambda: sources.read_bytes(self.url))
        sources.write_bytes(dst, data)
        return data

    def process_text_and_copy(self, dst: str | Path, transform: Callable[[str], str]) -> str:
        processed = transform(self.read_text())
        write_text(Path(dst), processed)
        return processed


class LazyResource:
    """A LazyFile placed into a page: where it goes and whether it is inlined."""

    def __init__(self, file: LazyFile, page: Page, config: AppConfig, embed: bool = True, target: Optional[str] = None) -> None:
        self.file = file
        self.page = page
        self.config = config
        self.embed = embed
        self._target = target

    def __repr__(self) -> str:
        return f"LazyResource({self.src!r}, embed={self.embed}, target={self._target!r})"

    @classmethod
    def from_descriptor(cls, resource: Resource, page: Page, config: AppConfig) -> "LazyResource":
        if isinstance(resource, str):
            return cls(LazyFile(resource, page.src_dir), page, config)
        if not isinstance(resource, dict):
            raise ConfigurationError(f"Invalid resource descriptor {resource!r}: {page.src}")
        url = resource.get("url")
        if not isinstance(url, str) or not url.strip():
            raise ConfigurationError(f"Resource URL is missing: {page.src}")
        embed = resource.get("embed")
        target = resource.get("target")
        return cls(
            LazyFile(url.strip(), page.src_dir),
            page,
            config,
            embed=embed if isinstance(embed, bool) else True,
            target=target if isinstance(target, str) and target.strip() else None,
        )

    @property
    def target(self) -> str:
        if self._target is None:
            self._target = mime.default_resource_target(self.file.extension())
        return self._target

    @property
    def src(self) -> str:
        return self.file.url

    @property
    def is_remote(self) -> bool:
        return self.file.is_remote

    @property
    def is_local(self) -> bool:
        return self.file.is_local

    @property
    def dst(self) -> Path:
        if self.embed:
            raise ConfigurationError(f"Cannot get the destination of an embedded resource: {self.src}")
        if self.is_remote or self.file.is_data_url:
            raise ConfigurationError(f"Cannot get the destination of a remote resource: {self.src}")
        src = Path(self.src)
        if not src.is_relative_to(self.config.src_dir):
            raise ConfigurationError(f"Cannot copy a resource from outside the project directory: {self.src}")
        return Path(relative_path_to_absolute(str(src.relative_to(self.config.src_dir)), self.config.dst_dir))

    @property
    def web_friendly_dst(self) -> str:
        """The copied file's URL relative to the page's own output directory."""
        if self.embed or not self.is_local or self.file.is_data_url:
            return ""
        return to_web_friendly_url(self.dst, self.page.dst_dir)

    def copy(self, dst: str | Path) -> None:
        self.file.copy(dst)
        logger.info("RESOURCE %s", dst)

    def copy_if_missing(self) -> None:
        if not sources.local_file_exists(self.dst):
            self.copy(self.dst)

    def read_text(self) -> str:
        return self.file.read_text()
