from __future__ import annotations

import os
import re
import shutil
from pathlib import Path
from urllib.parse import urlsplit

from .errors import ConfigurationError
from .models import ResolvedSource

REMOTE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
DATA_URL_RE = re.compile(r"^data:[\w.+-]+/[\w.+-]+;base64,.+$", re.DOTALL)
SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
TRAILING_SEP_RE = re.compile(r"[/\\]+$")
EXTENSION_RE = re.compile(r"\.\w+$")


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def is_remote_url(url: str) -> bool:
    return REMOTE_URL_RE.match(url) is not None


def is_data_url(url: str) -> bool:
    return DATA_URL_RE.match(url) is not None


def is_linkable_url(url: str) -> bool:
    """False for empty, fragment-only and non-HTTP scheme URLs such as mailto:."""
    url = url.strip()
    if not url or url.startswith("#"):
        return False
    if is_remote_url(url) or is_data_url(url):
        return True
    # Windows drive letters look like a scheme.
    return SCHEME_RE.match(url) is None or re.match(r"^[a-zA-Z]:[/\\]", url) is not None


def relative_path_to_absolute(path: str, working_directory: str | Path) -> str:
    path = TRAILING_SEP_RE.sub("", path) or os.sep
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(str(working_directory), path))


def resolve_source(url: str, working_directory: str | Path) -> ResolvedSource:
    if is_remote_url(url):
        return ResolvedSource(url=url, is_remote=True)
    if is_data_url(url):
        return ResolvedSource(url=url, is_remote=False)
    return ResolvedSource(url=relative_path_to_absolute(url, working_directory), is_remote=False)


def resolve_src_location(src: str, working_directory: str | Path) -> str:
    return resolve_source(src.strip(), working_directory).url


def url_extension(url: str) -> str:
    if is_data_url(url):
        return ""
    if is_remote_url(url):
        return os.path.splitext(urlsplit(url).path)[1]
    return os.path.splitext(url)[1]


def replace_extension(path: str | Path, ext: str) -> Path:
    return Path(EXTENSION_RE.sub(ext, str(path)))


def to_web_friendly_url(path: str | Path, base_dir: str | Path) -> str:
    relative = Path(os.path.relpath(path, base_dir)).as_posix()
    if relative.startswith("../"):
        return relative
    return f"./{relative}"


def list_files(root: Path) -> list[Path]:
    if not root.exists():
        return []
    return sorted((path for path in root.rglob("*") if path.is_file()), key=lambda p: p.as_posix())


def clean_output_dir(output_dir: Path, project_dir: Path) -> None:
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    project_resolved = project_dir.resolve()
    if output_resolved == project_resolved or project_resolved.is_relative_to(output_resolved):
        raise ConfigurationError(f"Refusing to clean a directory containing the project: {output_dir}")
    shutil.rmtree(output_dir)
