# tests/infrastructure/images/test_image_actions.py
from unittest.mock import MagicMock

import pytest

from fluxo.errors.custom_errors import InvalidUrlError
from fluxo.infrastructure.images.image_actions import (
    ActionOptions,
    ImageActions,
    SearchEngine,
    build_search_url,
)

from fakes import (
    FakeClipboard,
    FakeDimensionProbe,
    FakeDownloader,
    FakeHeaderProbe,
    FakeLinker,
    FakeNotifier,
    FakeSharer,
)

URL = "https://example.com/photos/sunset.jpg"


# ──────────────────────────────────────────────────────────────────────────────
#                               🧪 Вспомогалки
# ──────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def make_actions(make_cache, notifier):
    def _make(
        *,
        downloader=None,
        sharer=None,
        clipboard=None,
        linker=None,
        cache=None,
    ) -> ImageActions:
        return ImageActions(
            cache or make_cache(),
            downloader=downloader or FakeDownloader(),
            sharer=sharer or FakeSharer(),
            clipboard=clipboard or FakeClipboard(),
            linker=linker or FakeLinker(),
            notifier=notifier,
        )

    return _make


def _callbacks():
    return MagicMock(name="on_success"), MagicMock(name="on_error")


# ──────────────────────────────────────────────────────────────────────────────
#                               📥 download
# ──────────────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_download_uses_safe_filename(make_actions, notifier):
    downloader = FakeDownloader()
    on_success, on_error = _callbacks()
    actions = make_actions(downloader=downloader)

    ok = await actions.download(URL, ActionOptions(on_success=on_success, on_error=on_error))

    assert ok is True
    assert downloader.calls == [(URL, "sunset.jpg")]
    assert notifier.alerts == [("Download Started", "sunset.jpg is being downloaded.")]
    on_success.assert_called_once_with()
    on_error.assert_not_called()


@pytest.mark.asyncio
async def test_download_appends_resolved_extension(make_cache, make_actions):
    downloader = FakeDownloader()
    actions = make_actions(downloader=downloader, cache=make_cache(headers=FakeHeaderProbe("image/webp")))

    await actions.download("https://cdn.example.com/media/98765")

    assert downloader.calls[0][1] == "98765.webp"


@pytest.mark.asyncio
async def test_download_custom_message_and_silent_mode(make_actions, notifier):
    on_success, _ = _callbacks()
    actions = make_actions()

    await actions.download(URL, ActionOptions(custom_success_message="Saving…"))
    await actions.download(URL, ActionOptions(show_success_alert=False, on_success=on_success))

    assert notifier.alerts == [("Download Started", "Saving…")]
    on_success.assert_called_once_with()


@pytest.mark.asyncio
async def test_download_falls_back_to_browser(make_actions, notifier):
    linker = FakeLinker()
    on_success, on_error = _callbacks()
    actions = make_actions(downloader=FakeDownloader(fail=True), linker=linker)

    ok = await actions.download(URL, ActionOptions(on_success=on_success, on_error=on_error))

    assert ok is True
    assert linker.opened == [URL]
    assert notifier.alerts == [("Download", "Opening in browser for download")]
    on_success.assert_called_once_with()
    on_error.assert_not_called()


@pytest.mark.asyncio
async def test_download_chain_exhausted(make_actions, notifier):
    on_success, on_error = _callbacks()
    actions = make_actions(downloader=FakeDownloader(fail=True), linker=FakeLinker(fail=True))

    ok = await actions.download(URL, ActionOptions(on_success=on_success, on_error=on_error))

    assert ok is False
    assert notifier.alerts == [("Error", "Failed to download image")]
    on_success.assert_not_called()
    on_error.assert_called_once()
    assert isinstance(on_error.call_args.args[0], OSError)   # исходная ошибка загрузки


@pytest.mark.asyncio
async def test_download_rejects_invalid_url(make_actions, notifier):
    downloader = FakeDownloader()
    actions = make_actions(downloader=downloader)

    with pytest.raises(InvalidUrlError):
        await actions.download("javascript:alert(1)")

    assert downloader.calls == []
    assert notifier.alerts == []


# ──────────────────────────────────────────────────────────────────────────────
#                               📤 share
# ──────────────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_share_builds_message_from_metadata(make_actions, notifier):
    sharer = FakeSharer()
    actions = make_actions(sharer=sharer)

    ok = await actions.share(URL)

    assert ok is True
    assert sharer.calls == [{"message": "Check out this JPEG (1920×1080)", "url": URL, "title": "Share Image"}]
    assert notifier.alerts == [("Success", "Image shared successfully")]


@pytest.mark.asyncio
async def test_share_message_degrades_without_metadata(make_cache, make_actions):
    sharer = FakeSharer()
    cache = make_cache(probe=FakeDimensionProbe(always_fail=True), headers=FakeHeaderProbe(None))
    actions = make_actions(sharer=sharer, cache=cache)

    await actions.share("https://example.com/render?id=1")

    assert sharer.calls[0]["message"] == "Check out this image"


@pytest.mark.asyncio
async def test_share_falls_back_to_clipboard(make_actions, notifier):
    clipboard = FakeClipboard()
    on_success, on_error = _callbacks()
    actions = make_actions(sharer=FakeSharer(fail=True), clipboard=clipboard)

    ok = await actions.share(URL, ActionOptions(on_success=on_success, on_error=on_error))

    assert ok is True
    assert clipboard.texts == [URL]
    assert notifier.alerts == [("Shared via Clipboard", "Image URL copied for sharing")]
    on_success.assert_called_once_with()
    on_error.assert_not_called()


@pytest.mark.asyncio
async def test_share_chain_exhausted(make_actions, notifier):
    on_success, on_error = _callbacks()
    actions = make_actions(sharer=FakeSharer(fail=True), clipboard=FakeClipboard(fail=True))

    ok = await actions.share(URL, ActionOptions(on_success=on_success, on_error=on_error))

    assert ok is False
    assert notifier.alerts == [("Error", "Failed to share image")]
    on_error.assert_called_once()
    on_success.assert_not_called()


# ──────────────────────────────────────────────────────────────────────────────
#                               📋 copy_url
# ──────────────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_copy_url(make_actions, notifier):
    clipboard = FakeClipboard()
    actions = make_actions(clipboard=clipboard)

    assert await actions.copy_url(URL) is True
    assert clipboard.texts == [URL]
    assert notifier.alerts == [("Copied", "Image URL copied to clipboard")]


@pytest.mark.asyncio
async def test_copy_url_failure(make_actions, notifier):
    on_success, on_error = _callbacks()
    actions = make_actions(clipboard=FakeClipboard(fail=True))

    ok = await actions.copy_url(URL, ActionOptions(on_success=on_success, on_error=on_error))

    assert ok is False
    assert notifier.alerts == [("Error", "Failed to copy image URL")]
    on_error.assert_called_once()
    on_success.assert_not_called()


# ──────────────────────────────────────────────────────────────────────────────
#                               🔍 search
# ──────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "engine, expected",
    [
        (
            SearchEngine.GOOGLE,
            "https://lens.google.com/uploadbyurl?url=https%3A%2F%2Fexample.com%2Fa%2520b.jpg%3Fx%3D1%26y%3D2",
        ),
        (
            "bing",
            "https://www.bing.com/images/search?view=detailv2&iss=sbi&q=imgurl:"
            "https%3A%2F%2Fexample.com%2Fa%2520b.jpg%3Fx%3D1%26y%3D2",
        ),
        (
            "Yandex",
            "https://yandex.com/images/search?rpt=imageview&url="
            "https%3A%2F%2Fexample.com%2Fa%2520b.jpg%3Fx%3D1%26y%3D2",
        ),
    ],
)
def test_build_search_url(engine, expected):
    assert build_search_url("https://example.com/a%20b.jpg?x=1&y=2", engine) == expected


def test_build_search_url_rejects_bad_input():
    with pytest.raises(InvalidUrlError):
        build_search_url("file:///etc/passwd")
    with pytest.raises(ValueError):
        build_search_url(URL, "altavista")


@pytest.mark.asyncio
async def test_search_opens_link(make_actions, notifier):
    linker = FakeLinker()
    on_success, _ = _callbacks()
    actions = make_actions(linker=linker)

    search_url = await actions.search(URL, "bing", ActionOptions(on_success=on_success))

    assert linker.opened == [search_url]
    assert search_url.startswith("https://www.bing.com/images/search?")
    assert notifier.alerts == [("Search Started", "Searching for similar images on Bing")]
    on_success.assert_called_once_with()


@pytest.mark.asyncio
async def test_search_open_failure(make_actions, notifier):
    on_success, on_error = _callbacks()
    actions = make_actions(linker=FakeLinker(fail=True))

    search_url = await actions.search(URL, options=ActionOptions(on_success=on_success, on_error=on_error))

    assert search_url.startswith("https://lens.google.com/uploadbyurl?url=")
    assert notifier.alerts == [("Error", "Failed to open image search")]
    on_error.assert_called_once()
    on_success.assert_not_called()


@pytest.mark.asyncio
async def test_search_rejects_invalid_url(make_actions):
    linker = FakeLinker()
    actions = make_actions(linker=linker)

    with pytest.raises(InvalidUrlError):
        await actions.search("ftp://example.com/a.jpg")

    assert linker.opened == []
