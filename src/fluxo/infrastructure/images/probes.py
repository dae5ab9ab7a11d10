# 📡 fluxo/infrastructure/images/probes.py
"""
📡 Реальні мережеві проби для кешу метаданих зображень.

🔹 `HttpxHeaderProbe` — HEAD-запит за `Content-Type`/`Content-Length` (GET-fallback на 405/501).
🔹 `PillowDimensionProbe` — стримить GET і годує `PIL.ImageFile.Parser`, доки заголовок не дасть розмір.
🔹 Обидві проби кидають лише `ProbeError` (через стратегію httpx).
"""

from __future__ import annotations

# 🌐 Зовнішні бібліотеки
import httpx															# 🌐 HTTP-клієнт
from PIL import ImageFile												# 🖼️ Інкрементальний парсер заголовків

# 🔠 Системні імпорти
import logging															# 🧾 Логування
from contextlib import asynccontextmanager								# 🧰 Спільний/власний клієнт
from typing import AsyncIterator, Dict, Optional						# 🧰 Типізація

# 🧩 Внутрішні модулі проєкту
from fluxo.config.image_options import DEFAULT_USER_AGENT				# 🕵️ UA за замовчуванням
from fluxo.domain.images.entities import HeaderInfo, ImageSize			# 📡 Результати проб
from fluxo.errors.custom_errors import ProbeError						# ⚠️ Помилка проби
from fluxo.errors.strategies import to_probe_error						# 📜 httpx → ProbeError
from fluxo.shared.utils.logger import LOG_NAME							# 🏷️ Базове імʼя логера

logger = logging.getLogger(f"{LOG_NAME}.probes")


# ================================
# 📦 КОНСТАНТИ
# ================================
HEAD_FALLBACK_STATUSES = frozenset({405, 501})							# 🔁 Сервер не вміє HEAD
DEFAULT_CHUNK_SIZE = 16 * 1024											# 📦 Розмір шматка стримінгу


def _default_headers(user_agent: str) -> Dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
    }


def _parse_length(raw: Optional[str]) -> Optional[int]:
    """`Content-Length` → int ≥ 0 або None."""
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if value >= 0 else None


# ================================
# 🧱 БАЗОВИЙ КЛАС
# ================================
class _HttpxProbe:
    """Спільна логіка клієнта: або інʼєктований `AsyncClient`, або власний на кожен виклик."""

    def __init__(
        self,
        *,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout_s: float = 5.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._client = client											# 🌐 Спільний клієнт (не закриваємо)
        self._transport = transport										# 🧪 Для MockTransport у тестах
        self.timeout_s = float(timeout_s)								# ⏳ Таймаут запиту
        self.headers = _default_headers(user_agent)						# 📨 Заголовки проби

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(
            headers=self.headers,
            timeout=httpx.Timeout(self.timeout_s),
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            yield client


# ================================
# 🏷️ HEAD-ПРОБА
# ================================
class HttpxHeaderProbe(_HttpxProbe):
    """🏷️ Читає `Content-Type` та `Content-Length` без завантаження тіла."""

    async def fetch_headers(self, url: str) -> HeaderInfo:
        try:
            async with self._session() as client:
                response = await client.head(url, headers=self.headers)
                if response.status_code in HEAD_FALLBACK_STATUSES:
                    logger.debug("🔁 HEAD %s → %d, falling back to GET", url, response.status_code)
                    async with client.stream("GET", url, headers=self.headers) as streamed:
                        streamed.raise_for_status()
                        return self._to_info(streamed)
                response.raise_for_status()
                return self._to_info(response)
        except httpx.HTTPError as exc:
            raise to_probe_error(exc, url=url) from exc

    @staticmethod
    def _to_info(response: httpx.Response) -> HeaderInfo:
        return HeaderInfo(
            content_type=response.headers.get("Content-Type"),
            content_length=_parse_length(response.headers.get("Content-Length")),
        )


# ================================
# 📐 ПРОБА РОЗМІРІВ
# ================================
class PillowDimensionProbe(_HttpxProbe):
    """📐 Визначає ширину й висоту з перших байтів зображення."""

    def __init__(
        self,
        *,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout_s: float = 5.0,
        user_agent: str = DEFAULT_USER_AGENT,
        max_bytes: int = 512 * 1024,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        super().__init__(client=client, transport=transport, timeout_s=timeout_s, user_agent=user_agent)
        self.max_bytes = int(max_bytes)									# 📏 Стеля читання
        self.chunk_size = int(chunk_size)								# 📦 Розмір шматка

    async def probe_size(self, url: str) -> ImageSize:
        try:
            async with self._session() as client:
                async with client.stream("GET", url, headers=self.headers) as response:
                    response.raise_for_status()
                    return await self._read_size(response, url)
        except httpx.HTTPError as exc:
            raise to_probe_error(exc, url=url) from exc

    async def _read_size(self, response: httpx.Response, url: str) -> ImageSize:
        parser = ImageFile.Parser()
        bytes_read = 0
        async for chunk in response.aiter_bytes(self.chunk_size):
            if not chunk:
                continue
            try:
                parser.feed(chunk)
            except EOFError:										# 📦 Заголовок ще неповний (GIF)
                logger.debug("📦 Need more bytes for %s (read=%d)", url, bytes_read + len(chunk))
            bytes_read += len(chunk)
            if parser.image is not None:
                width, height = parser.image.size
                logger.debug("📐 %s → %dx%d after %d bytes", url, width, height, bytes_read)
                return ImageSize(width=width, height=height)
            if bytes_read >= self.max_bytes:
                raise ProbeError(
                    "Image header not found within byte limit",
                    url=url,
                    details=f"read={bytes_read} limit={self.max_bytes}",
                )

        if bytes_read == 0:
            raise ProbeError("Empty response body", url=url)
        raise ProbeError("Could not decode image header", url=url, details=f"read={bytes_read}")


__all__ = ["HttpxHeaderProbe", "PillowDimensionProbe", "HEAD_FALLBACK_STATUSES"]
