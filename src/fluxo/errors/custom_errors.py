# 🚨 fluxo/errors/custom_errors.py
"""
🚨 Ієрархія помилок підсистеми метаданих зображень.

🔹 `ImageManagerError` — базовий клас із машинним кодом і деталями.
🔹 `InvalidUrlError` / `FormatDetectionError` — єдині помилки, видимі викликачу.
🔹 `ProbeError` — внутрішній збій мережевої проби; кеш ніколи не випускає його назовні.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging														# 🧾 Логування створення помилок
from typing import Dict, Optional									# 📐 Типізація

# 🧩 Внутрішні модулі проєкту
from fluxo.shared.utils.logger import LOG_NAME						# 🏷️ Базове імʼя логера


# ================================
# 🧾 ЛОГЕР
# ================================
logger = logging.getLogger(f"{LOG_NAME}.errors")					# 🧾 Локальний логер


# ================================
# ⚠️ КОДИ ПОМИЛОК
# ================================
class ErrorCode:
    """⚠️ Машинні коди, які бачить UI-шар."""

    INVALID_URL = "INVALID_URL"										# 🔗 URL не пройшов валідацію
    FORMAT_DETECTION = "FORMAT_DETECTION"							# 🏷️ Формат не визначено
    PROBE_FAILED = "PROBE_FAILED"									# 🌐 Мережева проба впала
    UNKNOWN = "UNKNOWN"												# ❓ Резервний код


# ================================
# 🧠 БАЗОВИЙ ВИНЯТОК
# ================================
class ImageManagerError(Exception):
    """🧠 Базова помилка підсистеми зображень."""

    def __init__(self, message: str, code: str = ErrorCode.UNKNOWN, *, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message											# 🗒️ Людський опис
        self.code = code												# 🏷️ Машинний код
        self.details = details											# 🔍 Технічні подробиці

    @property
    def name(self) -> str:
        """Імʼя класу помилки (для UI та логів)."""
        return type(self).__name__

    def to_log_extra(self) -> Dict[str, object]:
        """📦 Формує словник для `logger.extra`."""
        extra: Dict[str, object] = {"error_code": self.code}
        if self.details:
            extra["details"] = self.details
        return extra


# ================================
# 👀 ПОМИЛКИ, ВИДИМІ ВИКЛИКАЧУ
# ================================
class InvalidUrlError(ImageManagerError):
    """🔗 URL не пройшов перевірку схеми/хоста/парсингу."""

    def __init__(self, url: object, *, reason: Optional[str] = None) -> None:
        super().__init__(f"Invalid image URL: {url}", ErrorCode.INVALID_URL, details=reason)
        self.url = url if isinstance(url, str) else repr(url)			# 🔗 Оригінальний ввід
        self.reason = reason											# 🧾 Чому відхилено
        logger.debug("🔗 InvalidUrlError created", extra={"url": self.url, "reason": reason})

    def to_log_extra(self) -> Dict[str, object]:
        extra = super().to_log_extra()
        extra["url"] = self.url
        return extra


class FormatDetectionError(ImageManagerError):
    """🏷️ Жоден спосіб не дав формат, а викликач його вимагає."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Could not detect image format: {url}", ErrorCode.FORMAT_DETECTION)
        self.url = url

    def to_log_extra(self) -> Dict[str, object]:
        extra = super().to_log_extra()
        extra["url"] = self.url
        return extra


# ================================
# 🌐 ВНУТРІШНІ ПОМИЛКИ ПРОБ
# ================================
class ProbeError(ImageManagerError):
    """🌐 Збій мережевої проби (таймаут, зʼєднання, статус, декодування)."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, ErrorCode.PROBE_FAILED, details=details)
        self.url = url													# 🔗 URL проби
        self.status_code = status_code									# 🔢 HTTP-код, якщо був

    def to_log_extra(self) -> Dict[str, object]:
        extra = super().to_log_extra()
        if self.url:
            extra["url"] = self.url
        if self.status_code is not None:
            extra["status_code"] = self.status_code
        return extra


__all__ = [
    "ErrorCode",
    "ImageManagerError",
    "InvalidUrlError",
    "FormatDetectionError",
    "ProbeError",
]
