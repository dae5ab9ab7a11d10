# 📜 fluxo/errors/strategies.py
"""
📜 Стратегії конвертації сторонніх винятків у `ProbeError`.

🔹 Тримають знання про httpx поза кодом проб.
🔹 Можна додавати нові стратегії, не змінюючи проби.
"""

from __future__ import annotations

# 🌐 Зовнішні бібліотеки
import httpx															# 🌐 HTTP-клієнт (винятки)

# 🔠 Системні імпорти
import logging															# 🧾 Логування стратегій
from typing import Iterable, Optional, Protocol							# 📐 Типи

# 🧩 Внутрішні модулі проєкту
from fluxo.errors.custom_errors import ProbeError						# ⚠️ Доменна помилка проби
from fluxo.shared.utils.logger import LOG_NAME							# 🏷️ Базове імʼя логера


# ================================
# 🧾 ЛОГЕР
# ================================
logger = logging.getLogger(f"{LOG_NAME}.errors.strategies")


# ================================
# 🧠 КОНТРАКТ СТРАТЕГІЙ
# ================================
class IErrorHandlingStrategy(Protocol):
    """🧠 Контракт, що визначає єдиний метод `handle`."""

    def handle(self, error: Exception) -> Optional[ProbeError]:
        """Вертає `ProbeError`, якщо виняток розпізнано, або None."""


def _request_url(error: Exception) -> str:
    try:
        return str(error.request.url)  # type: ignore[attr-defined]
    except (AttributeError, RuntimeError):								# ⚠️ httpx кидає RuntimeError без request
        return "N/A"


# ================================
# 🌐 HTTPX-СТРАТЕГІЯ
# ================================
class HttpxErrorStrategy:
    """🌐 Перетворює httpx-помилки на `ProbeError`."""

    def handle(self, error: Exception) -> Optional[ProbeError]:
        if isinstance(error, httpx.TimeoutException):					# ⏱️ Будь-який таймаут
            url = _request_url(error)
            logger.debug("⏱️ httpx timeout", extra={"url": url})
            return ProbeError("Probe timed out", url=url, details=str(error))

        if isinstance(error, httpx.HTTPStatusError):					# 🔢 Неочікуваний статус
            url = _request_url(error)
            status = error.response.status_code
            logger.debug("🔢 httpx status error", extra={"url": url, "status": status})
            return ProbeError(f"Unexpected HTTP status {status}", url=url, status_code=status, details=str(error))

        if isinstance(error, httpx.TransportError):						# 🌐 Зʼєднання/протокол
            url = _request_url(error)
            logger.debug("🌐 httpx transport error", extra={"url": url})
            return ProbeError("Connection failed", url=url, details=str(error))

        if isinstance(error, httpx.HTTPError):							# 🌐 Інші помилки httpx
            return ProbeError("HTTP error", url=_request_url(error), details=str(error))

        return None


DEFAULT_STRATEGIES: tuple = (HttpxErrorStrategy(),)


def to_probe_error(
    error: Exception,
    *,
    url: Optional[str] = None,
    strategies: Iterable[IErrorHandlingStrategy] = DEFAULT_STRATEGIES,
) -> ProbeError:
    """Повертає `ProbeError` для будь-якого винятку проби (fallback — загальний збій)."""
    if isinstance(error, ProbeError):
        return error
    for strategy in strategies:
        mapped = strategy.handle(error)
        if mapped is not None:
            if mapped.url in (None, "N/A") and url:
                mapped.url = url
            return mapped
    logger.debug("❓ Unmapped probe error", extra={"exc_type": type(error).__name__})
    return ProbeError("Probe failed", url=url, details=f"{type(error).__name__}: {error}")


__all__ = ["IErrorHandlingStrategy", "HttpxErrorStrategy", "to_probe_error"]
