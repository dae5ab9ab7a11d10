# 🏷️ fluxo/infrastructure/images/format_resolver.py
"""
🏷️ Визначення формату зображення за URL.

🔹 Спершу легка HEAD-проба (`Content-Type`), потім розширення з шляху URL.
🔹 `resolve` ніколи не кидає: невідомий формат — це `None`.
🔹 `require_format` — для викликачів, яким формат обовʼязковий (`FormatDetectionError`).
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging															# 🧾 Логування
from dataclasses import dataclass										# 🧱 DTO результату
from typing import Optional												# 🧰 Типізація

# 🧩 Внутрішні модулі проєкту
from fluxo.domain.images.entities import FORMAT_TOKENS, ImageFormat		# 🏷️ Таблиця форматів
from fluxo.domain.images.interfaces import IHeaderProbe, Url			# 📐 Контракт проби
from fluxo.errors.custom_errors import FormatDetectionError				# ⚠️ Помилка для викликача
from fluxo.infrastructure.images.retry import with_retry				# 🔁 Таймаут + метрики
from fluxo.shared.utils.logger import LOG_NAME							# 🏷️ Базове імʼя логера
from fluxo.shared.utils.url_validator import extract_extension			# 🔍 Розширення з шляху

logger = logging.getLogger(f"{LOG_NAME}.format")


@dataclass(frozen=True, slots=True)
class FormatResolution:
    """Формат і побічний сигнал розміру, отримані під час визначення."""

    format: Optional[ImageFormat] = None
    size_bytes: Optional[int] = None
    source: str = "none"												# 🧭 header / extension / none


# ================================
# 🔍 ЧИСТІ МАПІНГИ
# ================================
def format_from_content_type(content_type: Optional[str]) -> Optional[ImageFormat]:
    """`image/svg+xml; charset=utf-8` → `SVG`; невідоме → None."""
    if not content_type:
        return None
    mime = content_type.split(";", 1)[0].strip().lower()
    if not mime.startswith("image/"):
        return None
    subtype = mime[len("image/"):]
    return FORMAT_TOKENS.get(subtype) or FORMAT_TOKENS.get(subtype.split("+", 1)[0])


def format_from_extension(url: str) -> Optional[ImageFormat]:
    ext = extract_extension(url)
    return FORMAT_TOKENS.get(ext) if ext else None


# ================================
# 🏷️ РЕЗОЛВЕР
# ================================
class FormatResolver:
    """🏷️ Визначає формат: заголовки → розширення → None."""

    def __init__(self, header_probe: Optional[IHeaderProbe] = None, *, timeout_s: float = 3.0) -> None:
        self._header_probe = header_probe								# 📡 Може бути відсутньою (лише розширення)
        self._timeout_s = float(timeout_s)								# ⏱️ Коротка межа для HEAD

    async def detect(self, url: Url) -> FormatResolution:
        """Повний результат визначення (формат, розмір у байтах, джерело)."""
        size_bytes: Optional[int] = None
        if self._header_probe is not None:
            outcome = await with_retry(
                lambda: self._header_probe.fetch_headers(url),
                max_attempts=1,
                timeout_s=self._timeout_s,
                probe="headers",
                url=url,
            )
            if outcome.ok and outcome.value is not None:
                size_bytes = outcome.value.content_length
                fmt = format_from_content_type(outcome.value.content_type)
                if fmt is not None:
                    logger.debug("🏷️ %s → %s (header)", url, fmt)
                    return FormatResolution(format=fmt, size_bytes=size_bytes, source="header")
                logger.debug("❓ Unmapped content-type %r for %s", outcome.value.content_type, url)

        fmt = format_from_extension(url)
        if fmt is not None:
            logger.debug("🏷️ %s → %s (extension)", url, fmt)
            return FormatResolution(format=fmt, size_bytes=size_bytes, source="extension")

        logger.debug("❓ Format unknown for %s", url)
        return FormatResolution(size_bytes=size_bytes)

    async def resolve(self, url: Url) -> Optional[ImageFormat]:
        """Найкраща мітка формату або None; ніколи не кидає."""
        return (await self.detect(url)).format

    async def require_format(self, url: Url) -> ImageFormat:
        """Як `resolve`, але відсутній формат — це `FormatDetectionError`."""
        fmt = await self.resolve(url)
        if fmt is None:
            raise FormatDetectionError(url)
        return fmt


__all__ = [
    "FormatResolution",
    "FormatResolver",
    "format_from_content_type",
    "format_from_extension",
]
