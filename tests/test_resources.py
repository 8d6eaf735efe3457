import base64

import pytest

from pagepack import sources
from pagepack.errors import ConfigurationError, SourceNotFound
from pagepack.pages import resolve_page
from pagepack.resources import LazyFile, LazyResource


@pytest.fixture
def page(src_dir, config, write):
    write(src_dir / "index.page.md", "# Hi\n")
    return resolve_page(src_dir / "index.page.md", config)


def counting(monkeypatch, name):
    calls = []
    original = getattr(sources, name)

    def wrapper(url, *args, **kwargs):
        calls.append(url)
        return original(url, *args, **kwargs)

    monkeypatch.setattr(sources, name, wrapper)
    return calls


def test_read_text_is_memoized(monkeypatch, src_dir, write):
    write(src_dir / "a.txt", "hello")
    calls = counting(monkeypatch, "read_text")
    file = LazyFile("a.txt", src_dir)
    assert file.read_text() == "hello"
    assert file.read_text() == "hello"
    assert len(calls) == 1


def test_copy_reads_the_source_once(monkeypatch, src_dir, tmp_path, write):
    write(src_dir / "logo.png", b"\x89PNG-data")
    calls = counting(monkeypatch, "read_bytes")
    file = LazyFile("logo.png", src_dir)
    file.copy(tmp_path / "one" / "logo.png")
    file.copy(tmp_path / "two" / "logo.png")
    assert len(calls) == 1
    assert (tmp_path / "two" / "logo.png").read_bytes() == b"\x89PNG-data"


def test_exists_and_content_type_for_local_files(src_dir, write):
    write(src_dir / "style.css", "body{}")
    assert LazyFile("style.css", src_dir).exists() is True
    assert LazyFile("missing.css", src_dir).exists() is False
    assert LazyFile("style.css", src_dir).content_type() == "text/css"


def test_data_url_encodes_content_with_its_type(src_dir, write):
    write(src_dir / "style.css", "body{}")
    data_url = LazyFile("style.css", src_dir).to_data_url()
    assert data_url == "data:text/css;base64," + base64.b64encode(b"body{}").decode()


def test_missing_local_file_raises_source_not_found(src_dir):
    with pytest.raises(SourceNotFound) as info:
        LazyFile("nope.css", src_dir).read_text()
    assert info.value.url.endswith("nope.css")


def test_process_text_and_copy_writes_transformed_text(src_dir, tmp_path, write):
    write(src_dir / "a.txt", "abc")
    out = LazyFile("a.txt", src_dir).process_text_and_copy(tmp_path / "x" / "a.txt", str.upper)
    assert out == "ABC"
    assert (tmp_path / "x" / "a.txt").read_text() == "ABC"


def test_remote_extension_falls_back_to_content_type(monkeypatch):
    head_requests = []

    def fake_head(url):
        head_requests.append(url)
        return "text/css; charset=utf-8"

    monkeypatch.setattr(sources, "head_content_type", fake_head)
    file = LazyFile("https://fonts.example.com/css2?family=Inter")
    assert file.extension() == ".css"
    assert file.extension() == ".css"
    assert head_requests == ["https://fonts.example.com/css2?family=Inter"]


def test_bare_url_descriptor_embeds_and_targets_by_extension(page, config):
    css = LazyResource.from_descriptor("style.css", page, config)
    js = LazyResource.from_descriptor("app.js", page, config)
    assert css.embed is True and css.target == "head"
    assert js.embed is True and js.target == "body"


def test_structured_descriptor(page, config):
    resource = LazyResource.from_descriptor({"url": "img/a.png", "embed": False, "target": "#hero"}, page, config)
    assert resource.embed is False
    assert resource.target == "#hero"


def test_descriptor_without_url_names_the_page(page, config):
    with pytest.raises(ConfigurationError) as info:
        LazyResource.from_descriptor({"embed": False}, page, config)
    assert "index.page.md" in str(info.value)


def test_embedded_resources_have_no_destination(page, config):
    resource = LazyResource.from_descriptor("style.css", page, config)
    with pytest.raises(ConfigurationError):
        resource.dst
    assert resource.web_friendly_dst == ""


def test_remote_resources_have_no_destination(page, config):
    resource = LazyResource.from_descriptor({"url": "https://example.com/a.css", "embed": False}, page, config)
    with pytest.raises(ConfigurationError):
        resource.dst
    assert resource.web_friendly_dst == ""


def test_linked_resource_destination_mirrors_the_source_tree(page, config, src_dir, dst_dir):
    resource = LazyResource.from_descriptor({"url": "assets/img/a.png", "embed": False}, page, config)
    assert resource.dst == dst_dir / "assets" / "img" / "a.png"
    assert resource.web_friendly_dst == "./assets/img/a.png"


def test_linked_resource_outside_the_project_is_rejected(page, config):
    resource = LazyResource.from_descriptor({"url": "../elsewhere/a.png", "embed": False}, page, config)
    with pytest.raises(ConfigurationError):
        resource.dst


def test_default_target_uses_the_remote_content_type(monkeypatch, page, config):
    monkeypatch.setattr(sources, "head_content_type", lambda url: "text/css; charset=utf-8")
    resource = LazyResource.from_descriptor("https://fonts.example.com/css2?family=Inter", page, config)
    assert resource.target == "head"


def test_explicit_target_skips_the_head_request(monkeypatch, page, config):
    def fail(url):
        raise AssertionError("unexpected HEAD request")

    monkeypatch.setattr(sources, "head_content_type", fail)
    resource = LazyResource.from_descriptor({"url": "https://fonts.example.com/css2", "target": "#fonts"}, page, config)
    assert resource.target == "#fonts"


def test_linked_resource_url_is_relative_to_the_page_directory(config, src_dir, dst_dir, write):
    write(src_dir / "blog" / "post.page.md", "# Post\n")
    post = resolve_page(src_dir / "blog" / "post.page.md", config)
    resource = LazyResource.from_descriptor({"url": "../assets/a.png", "embed": False}, post, config)
    assert resource.dst == dst_dir / "assets" / "a.png"
    assert resource.web_friendly_dst == "../assets/a.png"
