import pytest

from pagepack.errors import UnsupportedResourceType
from pagepack.mime import ResourceKind, classify_resource, default_resource_target, parse_file_mime_type


@pytest.mark.parametrize(
    "extension, kind",
    [
        (".css", ResourceKind.STYLESHEET),
        (".scss", ResourceKind.STYLESHEET_PREPROCESSED),
        (".less", ResourceKind.STYLESHEET_PREPROCESSED),
        (".js", ResourceKind.SCRIPT),
        (".ts", ResourceKind.SCRIPT_TRANSPILED),
        (".html", ResourceKind.HTML),
        (".png", ResourceKind.IMAGE),
        (".mp3", ResourceKind.AUDIO),
        (".mp4", ResourceKind.VIDEO),
        (".pdf", ResourceKind.APPLICATION),
    ],
)
def test_classify_resource(extension, kind):
    mime_type, resolved = classify_resource(extension)
    assert resolved is kind


def test_text_types_are_text():
    for extension in (".css", ".scss", ".less", ".ts", ".js"):
        assert classify_resource(extension)[0].type == "text"


@pytest.mark.parametrize("extension", [".unknownext", "", ".md"])
def test_unknown_or_unsupported_extensions_fail(extension):
    with pytest.raises(UnsupportedResourceType):
        classify_resource(extension)


def test_parse_file_mime_type():
    mime_type = parse_file_mime_type(".ico")
    assert (mime_type.type, mime_type.subtype) == ("image", "x-icon")
    assert str(mime_type) == "image/x-icon"


def test_default_targets():
    assert default_resource_target(".css") == "head"
    assert default_resource_target(".SCSS") == "head"
    assert default_resource_target(".js") == "body"
    assert default_resource_target(".png") == "body"
