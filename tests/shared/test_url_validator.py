# tests/shared/test_url_validator.py
import pytest

from fluxo.errors.custom_errors import ErrorCode, InvalidUrlError
from fluxo.shared.utils.url_validator import (
    extract_extension,
    is_likely_image,
    is_valid_url,
    validate_url,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://example.com/photos/sunset.jpg", "https://example.com/photos/sunset.jpg"),
        ("http://example.com", "http://example.com/"),
        ("  https://Example.COM/a.png  ", "https://example.com/a.png"),
        ("https://example.com/image?id=123", "https://example.com/image?id=123"),
        ("https://image.example.com/12345", "https://image.example.com/12345"),
        ("https://example.com:8443/x.gif#top", "https://example.com:8443/x.gif"),
        ("https://127.0.0.1/x.jpg", "https://127.0.0.1/x.jpg"),
        ("https://[::1]/x.jpg", "https://[::1]/x.jpg"),
    ],
)
def test_validate_accepts_http_urls(raw, expected):
    assert validate_url(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        "not-a-url",
        "example.com",
        "https://",
        "https:///x",
        "ftp://example.com/x.jpg",
        "file:///etc/passwd",
        "data:image/png;base64,AAAA",
        "javascript:alert(1)",
        "blob:https://example.com/123",
        "://example.com/x.jpg",
        "https://exa mple.com/x.jpg",
        "https://example.com:99999/x.jpg",
        "https://bad_host..com/x.jpg",
        "https://trusted.com@evil.com/x.jpg",
        "https://example.com/\x00.jpg",
        None,
        42,
    ],
)
def test_validate_rejects_everything_else(raw):
    with pytest.raises(InvalidUrlError) as exc_info:
        validate_url(raw)
    assert exc_info.value.code == ErrorCode.INVALID_URL
    assert exc_info.value.reason
    assert not is_valid_url(raw)


# Интернациональные хосты принимаются и попадают в ключ в punycode
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://bücher.de/a.jpg", "https://xn--bcher-kva.de/a.jpg"),
        ("https://BÜCHER.de/a.jpg", "https://xn--bcher-kva.de/a.jpg"),
        ("https://xn--bcher-kva.de/a.jpg", "https://xn--bcher-kva.de/a.jpg"),
        ("http://пример.рф:8080/фото.png", "http://xn--e1afmkfd.xn--p1ai:8080/фото.png"),
    ],
)
def test_validate_encodes_idn_host(raw, expected):
    assert validate_url(raw) == expected
    assert is_valid_url(raw)


def test_invalid_url_error_carries_message_and_name():
    with pytest.raises(InvalidUrlError) as exc_info:
        validate_url("ftp://example.com/x.jpg")

    err = exc_info.value
    assert str(err) == "Invalid image URL: ftp://example.com/x.jpg"
    assert err.name == "InvalidUrlError"
    assert "ftp" in err.reason


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com/a/b/photo.JPG", "jpg"),
        ("https://example.com/a/b/photo.tar.gz?x=1", "gz"),
        ("https://example.com/a/b/photo", None),
        ("https://example.com/", None),
        ("https://example.com/a/photo%2Epng", "png"),
    ],
)
def test_extract_extension(url, expected):
    assert extract_extension(url) == expected


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com/photo.webp", True),
        ("https://example.com/photo.SVG", True),
        ("https://example.com/api/image?id=1", True),
        ("https://images.example.com/12345", True),
        ("https://example.com/doc.pdf", False),
        ("https://example.com/", False),
        ("ftp://example.com/photo.jpg", False),
        ("not-a-url", False),
    ],
)
def test_is_likely_image(url, expected):
    assert is_likely_image(url) is expected
