# 📐 fluxo/domain/images/interfaces.py
"""
📐 Контракти зовнішніх примітивів, з якими працює кеш і фасад дій.

🔹 Проби: `IDimensionProbe` (розміри), `IHeaderProbe` (Content-Type).
🔹 Побічні ефекти фасаду: завантаження, шаринг, буфер обміну, відкриття посилань, алерти.
"""

from __future__ import annotations

# 🔠 Системні імпорти
from typing import Protocol, runtime_checkable						# 🧰 Структурна типізація

# 🧩 Внутрішні модулі проєкту
from fluxo.domain.images.entities import HeaderInfo, ImageSize		# 📡 Результати проб

Url = str															# 🌐 Простий аліас для URL


# ================================
# 📡 ПРОБИ
# ================================
@runtime_checkable
class IDimensionProbe(Protocol):
    """Повертає розміри зображення або кидає виняток."""

    async def probe_size(self, url: Url) -> ImageSize:
        ...


@runtime_checkable
class IHeaderProbe(Protocol):
    """Повертає заголовки відповіді або кидає виняток."""

    async def fetch_headers(self, url: Url) -> HeaderInfo:
        ...


# ================================
# 🎬 ПОБІЧНІ ЕФЕКТИ ФАСАДУ
# ================================
class IDownloadService(Protocol):
    """Запускає завантаження на диск; повертає ідентифікатор завантаження."""

    async def download(self, url: Url, filename: str) -> object:
        ...


class IShareService(Protocol):
    """Відкриває системне меню «Поділитися»."""

    async def share(self, *, message: str, url: Url, title: str) -> object:
        ...


class IClipboard(Protocol):
    """Записує текст у буфер обміну."""

    async def set_text(self, text: str) -> None:
        ...


class ILinkOpener(Protocol):
    """Відкриває посилання у зовнішньому переглядачі."""

    async def open_url(self, url: Url) -> None:
        ...


class INotifier(Protocol):
    """Показує користувачу коротке повідомлення (alert/toast)."""

    def alert(self, title: str, message: str) -> None:
        ...


__all__ = [
    "Url",
    "IDimensionProbe",
    "IHeaderProbe",
    "IDownloadService",
    "IShareService",
    "IClipboard",
    "ILinkOpener",
    "INotifier",
]
