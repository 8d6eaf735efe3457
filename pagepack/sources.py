from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path
from urllib.parse import unquote_to_bytes

import requests

from . import mime
from .errors import SourceNotFound
from .utils import is_data_url, is_remote_url, url_extension

logger = logging.getLogger("pagepack.sources")

REQUEST_TIMEOUT = 30
DEFAULT_CONTENT_TYPE = "text/plain"

_session = requests.Session()


def _fetch(url: str, method: str = "GET") -> requests.Response:
    try:
        response = _session.request(method, url, timeout=REQUEST_TIMEOUT, allow_redirects=True)
    except requests.RequestException as exc:
        raise SourceNotFound(url, f"Request failed ({exc})") from exc
    if not response.ok:
        raise SourceNotFound(url, f"{response.status_code} {response.reason}")
    return response


def _split_data_url(url: str) -> tuple[str, bytes]:
    header, _, payload = url.partition(",")
    content_type = header[len("data:"):].split(";", 1)[0] or DEFAULT_CONTENT_TYPE
    try:
        return content_type, base64.b64decode(payload, validate=False)
    except binascii.Error:
        return content_type, unquote_to_bytes(payload)


def remote_exists(url: str) -> bool:
    try:
        response = _session.head(url, timeout=REQUEST_TIMEOUT, allow_redirects=True)
    except requests.RequestException:
        return False
    return response.ok


def local_file_exists(path: str | Path) -> bool:
    return Path(path).is_file()


def head_content_type(url: str) -> str:
    response = _fetch(url, "HEAD")
    return response.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE


def local_content_type(path: str) -> str:
    return mime.guess_type(url_extension(path)) or DEFAULT_CONTENT_TYPE


def fetch(url: str) -> tuple[bytes, str]:
    """Read a source, returning its bytes and content type."""
    if is_data_url(url):
        content_type, data = _split_data_url(url)
        return data, content_type
    if is_remote_url(url):
        response = _fetch(url)
        return response.content, response.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE
    return read_bytes(url), local_content_type(url)


def read_bytes(url: str) -> bytes:
    if is_remote_url(url) or is_data_url(url):
        return fetch(url)[0]
    path = Path(url)
    if not path.is_file():
        raise SourceNotFound(url)
    return path.read_bytes()


def read_text(url: str) -> str:
    if is_remote_url(url):
        response = _fetch(url)
        if response.encoding is None:
            response.encoding = "utf-8"
        return response.text
    return read_bytes(url).decode("utf-8")


def to_data_url(data: bytes, content_type: str) -> str:
    content_type = content_type.split(";", 1)[0].strip() or DEFAULT_CONTENT_TYPE
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def url_to_data_url(url: str) -> str:
    if is_data_url(url):
        return url
    data, content_type = fetch(url)
    return to_data_url(data, content_type)


def write_bytes(path: str | Path, data: bytes) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
