# 🖼️ fluxo/domain/images/entities.py
"""
🖼️ Доменні сутності метаданих зображень.

🔹 `ImageFormat` — канонічні мітки форматів (str-enum, порівнюється з рядком).
🔹 `ImageMetadata` — незмінний знімок, який кеш віддає викликачам.
🔹 `ImageSize` / `HeaderInfo` — результати зовнішніх проб.
"""

from __future__ import annotations

# 🔠 Системні імпорти
from dataclasses import dataclass, field, replace					# 🧱 Незмінні DTO
from enum import Enum												# 🏷️ Канонічні формати
from types import MappingProxyType									# 🧊 Незмінні таблиці
from typing import Mapping, Optional									# 🧰 Типізація


# ================================
# 🏷️ ФОРМАТИ
# ================================
class ImageFormat(str, Enum):
    """Канонічні мітки форматів зображень."""

    JPEG = "JPEG"
    PNG = "PNG"
    WEBP = "WebP"
    AVIF = "AVIF"
    HEIC = "HEIC"
    HEIF = "HEIF"
    GIF = "GIF"
    BMP = "BMP"
    SVG = "SVG"

    def __str__(self) -> str:
        return self.value

    @property
    def extension(self) -> str:
        """Розширення файлу в нижньому регістрі (`JPEG` → `jpg`)."""
        return _EXTENSIONS[self]


_EXTENSIONS: Mapping[ImageFormat, str] = MappingProxyType(
    {
        ImageFormat.JPEG: "jpg",
        ImageFormat.PNG: "png",
        ImageFormat.WEBP: "webp",
        ImageFormat.AVIF: "avif",
        ImageFormat.HEIC: "heic",
        ImageFormat.HEIF: "heif",
        ImageFormat.GIF: "gif",
        ImageFormat.BMP: "bmp",
        ImageFormat.SVG: "svg",
    }
)

# 🔁 MIME-підтип / розширення → формат (одна таблиця для обох шляхів)
FORMAT_TOKENS: Mapping[str, ImageFormat] = MappingProxyType(
    {
        "jpeg": ImageFormat.JPEG,
        "jpg": ImageFormat.JPEG,
        "pjpeg": ImageFormat.JPEG,
        "png": ImageFormat.PNG,
        "webp": ImageFormat.WEBP,
        "gif": ImageFormat.GIF,
        "svg": ImageFormat.SVG,
        "svg+xml": ImageFormat.SVG,
        "bmp": ImageFormat.BMP,
        "x-ms-bmp": ImageFormat.BMP,
        "avif": ImageFormat.AVIF,
        "heic": ImageFormat.HEIC,
        "heif": ImageFormat.HEIF,
    }
)


# ================================
# 📡 РЕЗУЛЬТАТИ ПРОБ
# ================================
@dataclass(frozen=True, slots=True)
class ImageSize:
    """Розміри, отримані від проби розмірів."""

    width: int
    height: int


@dataclass(frozen=True, slots=True)
class HeaderInfo:
    """Заголовки, отримані від HEAD-проби."""

    content_type: Optional[str] = None									# 🏷️ Content-Type як є
    content_length: Optional[int] = None								# 📏 Content-Length, якщо сервер його дав


# ================================
# 🖼️ МЕТАДАНІ
# ================================
@dataclass(frozen=True, slots=True)
class ImageMetadata:
    """
    Незмінний знімок метаданих зображення.

    Поля обліку (`inserted_at`, `last_accessed_at`, `access_count`) не беруть
    участі у порівнянні: повторне читання з кешу дорівнює першому.
    """

    url: str															# 🔗 Нормалізований URL (ключ кешу)
    width: Optional[int] = None											# ↔️ Відсутнє, якщо проба впала
    height: Optional[int] = None										# ↕️ Відсутнє, якщо проба впала
    format: Optional[str] = None										# 🏷️ Канонічна мітка формату
    size_bytes: Optional[int] = None									# 📏 Best-effort розмір
    inserted_at: float = field(default=0.0, compare=False)				# ⏱️ Монотонний час вставки
    last_accessed_at: float = field(default=0.0, compare=False)			# ⏱️ Останній хіт
    access_count: int = field(default=0, compare=False)					# 🔢 Кількість хітів

    @property
    def has_dimensions(self) -> bool:
        return self.width is not None and self.height is not None

    def touched(self, now: float) -> "ImageMetadata":
        """Повертає копію з оновленим обліком доступу."""
        return replace(self, last_accessed_at=now, access_count=self.access_count + 1)

    def describe(self) -> str:
        """Людський опис для повідомлень (`JPEG (1920×1080)`)."""
        label = self.format or "image"
        if self.has_dimensions:
            return f"{label} ({self.width}×{self.height})"
        return label


__all__ = [
    "ImageFormat",
    "FORMAT_TOKENS",
    "ImageSize",
    "HeaderInfo",
    "ImageMetadata",
]
