import os

import pytest

from pagepack.utils import (
    is_data_url,
    is_linkable_url,
    is_remote_url,
    relative_path_to_absolute,
    replace_extension,
    resolve_source,
    to_web_friendly_url,
    url_extension,
)


@pytest.mark.parametrize("url", ["style.css", "./a/b/../c.png", "img/", "../shared/x.js", "a//b///"])
def test_local_urls_resolve_to_absolute_normalized_paths(tmp_path, url):
    source = resolve_source(url, tmp_path)
    assert source.is_remote is False
    assert os.path.isabs(source.url)
    assert source.url == os.path.normpath(source.url)
    assert not source.url.endswith(os.sep)


def test_remote_urls_are_kept_as_is(tmp_path):
    source = resolve_source("https://example.com/a.css?x=1", tmp_path)
    assert source.is_remote is True
    assert source.url == "https://example.com/a.css?x=1"


def test_data_urls_are_local_and_opaque(tmp_path):
    url = "data:image/png;base64,iVBORw0KGgo="
    source = resolve_source(url, tmp_path)
    assert source.is_remote is False
    assert source.url == url


def test_relative_path_to_absolute_keeps_absolute_paths():
    assert relative_path_to_absolute("/var/www/", "/ignored") == "/var/www"


def test_url_classifiers():
    assert is_remote_url("http://a.b/c")
    assert not is_remote_url("ftp://a.b/c")
    assert is_data_url("data:text/css;base64,Ym9keXt9")
    assert not is_data_url("data:text/css,body{}")
    assert not is_linkable_url("#top")
    assert not is_linkable_url("mailto:me@example.com")
    assert not is_linkable_url("  ")
    assert is_linkable_url("img/cat.png")


def test_url_extension_ignores_query_for_remote_urls():
    assert url_extension("https://cdn.example.com/lib.js?v=3") == ".js"
    assert url_extension("/tmp/x/style.scss") == ".scss"
    assert url_extension("data:text/css;base64,Ym9keXt9") == ""


def test_replace_extension():
    assert replace_extension("/out/css/site.scss", ".css").as_posix() == "/out/css/site.css"


def test_web_friendly_url_is_relative_to_the_page_directory(tmp_path):
    assert to_web_friendly_url(tmp_path / "favicon.ico", tmp_path) == "./favicon.ico"
    assert to_web_friendly_url(tmp_path / "img" / "a.png", tmp_path) == "./img/a.png"
    assert to_web_friendly_url(tmp_path / "a.png", tmp_path / "blog") == "../a.png"
