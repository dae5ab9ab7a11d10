# 📦 fluxo/config/setup/container.py
"""
📦 Композиційний корінь підсистеми метаданих зображень.

🔹 Створює рівно один `ImageMetadataCache` на контейнер (і на процес, якщо контейнер один).
🔹 Збирає проби, резолвер формату та фасад дій із конфігурації.
🔹 Приймає інʼєктовані колаборатори: тести й UI підставляють власні реалізації.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                           # 🧾 Базові засоби логування
from typing import Any, Optional                                         # 🧮 Допоміжні типи

# 🧩 Внутрішні модулі проєкту
from fluxo.config.config_service import ConfigService                    # 🗂️ Джерело конфігурацій
from fluxo.config.image_options import ImageCacheOptions                 # 🧾 Опції кешу
from fluxo.domain.images.interfaces import (                             # 📐 Контракти колабораторів
    IClipboard,
    IDimensionProbe,
    IDownloadService,
    IHeaderProbe,
    ILinkOpener,
    INotifier,
    IShareService,
)
from fluxo.infrastructure.images.format_resolver import FormatResolver   # 🏷️ Визначення формату
from fluxo.infrastructure.images.image_actions import ImageActions       # 🎬 Фасад дій
from fluxo.infrastructure.images.metrics import maybe_start_prometheus   # 📈 Bootstrap метрик
from fluxo.infrastructure.images.probes import HttpxHeaderProbe, PillowDimensionProbe  # 📡 Реальні проби
from fluxo.shared.cache.image_metadata_cache import ImageMetadataCache   # ♻️ Кеш
from fluxo.shared.utils.logger import LOG_NAME, init_logging_from_config  # 🧾 Конфіг логування

logger = logging.getLogger(f"{LOG_NAME}.container")


def _int_or_default(value: Any, default: int) -> int:
    """Повертає ціле число або запасне значення, якщо каст неможливий."""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ================================
# 🏛️ КОНТЕЙНЕР
# ================================
class ImageContainer:
    """Координує створення кешу, проб і фасаду дій."""

    def __init__(
        self,
        config: Optional[ConfigService] = None,
        *,
        options: Optional[ImageCacheOptions] = None,
        dimension_probe: Optional[IDimensionProbe] = None,
        header_probe: Optional[IHeaderProbe] = None,
        downloader: Optional[IDownloadService] = None,
        sharer: Optional[IShareService] = None,
        clipboard: Optional[IClipboard] = None,
        linker: Optional[ILinkOpener] = None,
        notifier: Optional[INotifier] = None,
        configure_logging: bool = False,
    ) -> None:
        self.config = config or ConfigService()
        if configure_logging:
            init_logging_from_config(self.config.section("logging"))
        logger.info("🚀 Building image container")

        self.options = options or ImageCacheOptions.from_dict(self.config.section("image_cache"))
        self._bootstrap_metrics_if_enabled()

        self.header_probe: IHeaderProbe = header_probe or HttpxHeaderProbe(
            timeout_s=self.options.header_timeout_sec,
            user_agent=self.options.user_agent,
        )
        self.dimension_probe: IDimensionProbe = dimension_probe or PillowDimensionProbe(
            timeout_s=self.options.probe_timeout_sec,
            user_agent=self.options.user_agent,
            max_bytes=self.options.max_probe_bytes,
        )
        self.format_resolver = FormatResolver(self.header_probe, timeout_s=self.options.header_timeout_sec)
        self.cache = ImageMetadataCache(self.dimension_probe, self.format_resolver, options=self.options)

        self._downloader = downloader
        self._sharer = sharer
        self._clipboard = clipboard
        self._linker = linker
        self._notifier = notifier
        self._actions: Optional[ImageActions] = None
        logger.info("✅ Image container ready (max_cache_size=%d)", self.options.max_cache_size)

    # ================================
    # 🎬 ФАСАД
    # ================================
    @property
    def actions(self) -> ImageActions:
        """Фасад дій; потребує всіх колабораторів побічних ефектів."""
        if self._actions is None:
            collaborators = {
                "downloader": self._downloader,
                "sharer": self._sharer,
                "clipboard": self._clipboard,
                "linker": self._linker,
                "notifier": self._notifier,
            }
            missing = sorted(name for name, value in collaborators.items() if value is None)
            if missing:
                raise RuntimeError(f"Image actions need collaborators: {', '.join(missing)}")
            self._actions = ImageActions(
                self.cache,
                downloader=self._downloader,  # type: ignore[arg-type]
                sharer=self._sharer,  # type: ignore[arg-type]
                clipboard=self._clipboard,  # type: ignore[arg-type]
                linker=self._linker,  # type: ignore[arg-type]
                notifier=self._notifier,  # type: ignore[arg-type]
            )
        return self._actions

    async def aclose(self) -> None:
        """🛑 Зупиняє незавершені проби кешу."""
        await self.cache.aclose()

    # ================================
    # 📈 МЕТРИКИ
    # ================================
    def _bootstrap_metrics_if_enabled(self) -> None:
        """Стартує Prometheus-експортер, якщо це дозволено конфігурацією."""
        if not bool(self.config.get("metrics.enabled", False)):
            logger.debug("📉 Prometheus disabled by config")
            return
        exporter_name = str(self.config.get("metrics.exporter", "prometheus") or "prometheus").lower()
        if exporter_name != "prometheus":
            logger.debug("📉 Exporter %s is not supported", exporter_name)
            return
        port = _int_or_default(self.config.get("metrics.prometheus.port"), 9108)
        try:
            maybe_start_prometheus(port)
        except OSError:
            logger.exception("⚠️ Could not start metrics exporter on port %s", port)


__all__ = ["ImageContainer"]
