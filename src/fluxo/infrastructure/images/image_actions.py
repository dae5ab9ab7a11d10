# 🎬 fluxo/infrastructure/images/image_actions.py
"""
🎬 Фасад дій над зображенням для UI-шару: завантаження, шаринг, копіювання URL, пошук.

🔹 Метадані (формат, розміри) беруться з кешу.
🔹 Побічні ефекти делегуються зовнішнім сервісам (`IDownloadService`, `IShareService`, ...).
🔹 Кожна дія має ланцюжок fallback; користувач бачить помилку лише коли ланцюжок вичерпано.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging															# 🧾 Логування
from dataclasses import dataclass										# 🧱 Опції дій
from enum import Enum													# 🏷️ Пошукові системи
from typing import TYPE_CHECKING, Callable, Optional, Union				# 🧰 Типізація
from urllib.parse import quote											# 🔐 Percent-encoding

# 🧩 Внутрішні модулі проєкту
from fluxo.domain.images.entities import ImageMetadata					# 🖼️ Метадані
from fluxo.domain.images.interfaces import (							# 📐 Контракти побічних ефектів
    IClipboard,
    IDownloadService,
    ILinkOpener,
    INotifier,
    IShareService,
)
from fluxo.shared.utils.filename import synthesize_filename				# 📁 Безпечне імʼя файлу
from fluxo.shared.utils.logger import LOG_NAME							# 🏷️ Базове імʼя логера
from fluxo.shared.utils.url_validator import validate_url				# 🔗 Валідація

if TYPE_CHECKING:
    from fluxo.shared.cache.image_metadata_cache import ImageMetadataCache

logger = logging.getLogger(f"{LOG_NAME}.actions")

# ================================
# 🔍 ПОШУКОВІ СИСТЕМИ
# ================================
_URI_COMPONENT_SAFE = "-_.!~*'()"										# 🔐 Те саме, що лишає encodeURIComponent


class SearchEngine(str, Enum):
    """🔍 Провайдери зворотного пошуку зображень."""

    GOOGLE = "google"
    BING = "bing"
    YANDEX = "yandex"

    @classmethod
    def _missing_(cls, value: object) -> Optional["SearchEngine"]:
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def template(self) -> str:
        return _SEARCH_TEMPLATES[self]


_SEARCH_TEMPLATES = {
    SearchEngine.GOOGLE: "https://lens.google.com/uploadbyurl?url=",
    SearchEngine.BING: "https://www.bing.com/images/search?view=detailv2&iss=sbi&q=imgurl:",
    SearchEngine.YANDEX: "https://yandex.com/images/search?rpt=imageview&url=",
}


def build_search_url(url: str, engine: Union[SearchEngine, str] = SearchEngine.GOOGLE) -> str:
    """
    🔗 Будує посилання на зворотний пошук.

    Raises:
        InvalidUrlError: Якщо джерельний URL невалідний.
        ValueError: Якщо пошукова система невідома.
    """
    key = validate_url(url)
    provider = SearchEngine(engine)
    return provider.template + quote(key, safe=_URI_COMPONENT_SAFE)


# ================================
# 🧱 ОПЦІЇ ДІЙ
# ================================
@dataclass(frozen=True)
class ActionOptions:
    """Налаштування однієї дії (поведінка алертів і колбеки)."""

    show_success_alert: bool = True										# 🔔 Лише для алертів успіху
    custom_success_message: Optional[str] = None						# 🗒️ Замість стандартного тексту
    on_success: Optional[Callable[[], None]] = None						# ✅ Раз на успіх (включно з fallback)
    on_error: Optional[Callable[[BaseException], None]] = None			# ❌ Лише коли ланцюжок вичерпано


DEFAULT_ACTION_OPTIONS = ActionOptions()


# ================================
# 🎬 ФАСАД
# ================================
class ImageActions:
    """🎬 Тонка оркестрація дій над зображенням."""

    def __init__(
        self,
        cache: "ImageMetadataCache",
        *,
        downloader: IDownloadService,
        sharer: IShareService,
        clipboard: IClipboard,
        linker: ILinkOpener,
        notifier: INotifier,
    ) -> None:
        self._cache = cache
        self._downloader = downloader
        self._sharer = sharer
        self._clipboard = clipboard
        self._linker = linker
        self._notifier = notifier

    # ================================
    # 📥 ЗАВАНТАЖЕННЯ
    # ================================
    async def download(self, url: str, options: Optional[ActionOptions] = None) -> bool:
        """
        📥 Завантажує зображення під безпечним імʼям.

        Ланцюжок: завантаження → відкрити URL у переглядачі → алерт помилки.
        Повертає True, якщо спрацював будь-який крок.
        """
        opts = options or DEFAULT_ACTION_OPTIONS
        key = validate_url(url)
        metadata = await self._metadata(key)
        filename = synthesize_filename(key, metadata.format)

        try:
            await self._downloader.download(key, filename)
        except Exception as exc:  # noqa: BLE001
            logger.warning("⚠️ Download failed for %s: %s", key, exc)
            return await self._download_fallback(key, exc, opts)

        logger.info("📥 Download started: %s → %s", key, filename)
        self._succeed(opts, "Download Started", f"{filename} is being downloaded.")
        return True

    async def _download_fallback(self, key: str, error: Exception, opts: ActionOptions) -> bool:
        try:
            await self._linker.open_url(key)
        except Exception as fallback_exc:  # noqa: BLE001
            logger.error("❌ Download chain exhausted for %s: %s", key, fallback_exc)
            return self._fail(opts, "Failed to download image", error)
        self._notifier.alert("Download", "Opening in browser for download")
        self._fire_success(opts)
        return True

    # ================================
    # 📤 ШАРИНГ
    # ================================
    async def share(self, url: str, options: Optional[ActionOptions] = None) -> bool:
        """📤 Ділиться зображенням; fallback — копіювання URL у буфер обміну."""
        opts = options or DEFAULT_ACTION_OPTIONS
        key = validate_url(url)
        metadata = await self._metadata(key)
        message = f"Check out this {metadata.describe()}"

        try:
            await self._sharer.share(message=message, url=key, title="Share Image")
        except Exception as exc:  # noqa: BLE001
            logger.warning("⚠️ Share failed for %s: %s", key, exc)
            return await self._share_fallback(key, exc, opts)

        self._succeed(opts, "Success", "Image shared successfully")
        return True

    async def _share_fallback(self, key: str, error: Exception, opts: ActionOptions) -> bool:
        try:
            await self._clipboard.set_text(key)
        except Exception as fallback_exc:  # noqa: BLE001
            logger.error("❌ Share chain exhausted for %s: %s", key, fallback_exc)
            return self._fail(opts, "Failed to share image", error)
        self._notifier.alert("Shared via Clipboard", "Image URL copied for sharing")
        self._fire_success(opts)
        return True

    # ================================
    # 📋 КОПІЮВАННЯ URL
    # ================================
    async def copy_url(self, url: str, options: Optional[ActionOptions] = None) -> bool:
        """📋 Копіює URL як є (без валідації: користувач може копіювати будь-що)."""
        opts = options or DEFAULT_ACTION_OPTIONS
        try:
            await self._clipboard.set_text(url)
        except Exception as exc:  # noqa: BLE001
            logger.error("❌ Copy failed: %s", exc)
            return self._fail(opts, "Failed to copy image URL", exc)
        self._succeed(opts, "Copied", "Image URL copied to clipboard")
        return True

    # ================================
    # 🔍 ПОШУК
    # ================================
    async def search(
        self,
        url: str,
        engine: Union[SearchEngine, str] = SearchEngine.GOOGLE,
        options: Optional[ActionOptions] = None,
    ) -> str:
        """
        🔍 Відкриває зворотний пошук зображення й повертає побудоване посилання.

        Raises:
            InvalidUrlError: Якщо джерельний URL невалідний.
            ValueError: Якщо пошукова система невідома.
        """
        opts = options or DEFAULT_ACTION_OPTIONS
        provider = SearchEngine(engine)
        search_url = build_search_url(url, provider)

        try:
            await self._linker.open_url(search_url)
        except Exception as exc:  # noqa: BLE001
            logger.error("❌ Could not open %s search: %s", provider.label, exc)
            self._fail(opts, "Failed to open image search", exc)
            return search_url

        self._succeed(opts, "Search Started", f"Searching for similar images on {provider.label}")
        return search_url

    # ================================
    # 🔧 ХЕЛПЕРИ
    # ================================
    async def _metadata(self, key: str) -> ImageMetadata:
        return await self._cache.resolve(key)

    def _succeed(self, opts: ActionOptions, title: str, default_message: str) -> None:
        if opts.show_success_alert:
            self._notifier.alert(title, opts.custom_success_message or default_message)
        self._fire_success(opts)

    @staticmethod
    def _fire_success(opts: ActionOptions) -> None:
        if opts.on_success is not None:
            opts.on_success()

    def _fail(self, opts: ActionOptions, message: str, error: BaseException) -> bool:
        self._notifier.alert("Error", message)
        if opts.on_error is not None:
            opts.on_error(error)
        return False


__all__ = [
    "ActionOptions",
    "DEFAULT_ACTION_OPTIONS",
    "ImageActions",
    "SearchEngine",
    "build_search_url",
]
