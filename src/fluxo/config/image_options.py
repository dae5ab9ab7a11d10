# 🧾 fluxo/config/image_options.py
"""
🧾 Налаштування кешу метаданих зображень та мережевих проб.

🔹 Визначає іммутабельні опції (ємність, TTL, debounce, таймаути, ретраї, User-Agent).
🔹 Підтримує зчитування з ENV (префікс `IMAGE_CACHE_`), зі словника та мердж оверрайдів.
🔹 Експортує дефолтний обʼєкт `DEFAULT_IMAGE_CACHE_OPTIONS`.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging	# 🧾 Логування валідації
import os	# 🌱 Зчитування ENV
from dataclasses import asdict, dataclass, fields	# 🧱 Dataclass для опцій
from typing import Any, Callable, Dict, Mapping, Optional	# 🧰 Типи

# 🧩 Внутрішні модулі проєкту
from fluxo.shared.utils.logger import LOG_NAME	# 🏷️ Базове імʼя логера

# ================================
# 🧾 ЛОГЕР ТА КОНСТАНТИ
# ================================
logger = logging.getLogger(f"{LOG_NAME}.config.image_options")

DEFAULT_USER_AGENT = "Mozilla/5.0 (Linux; Android 14) FluxoBrowser/1.0"	# 🕵️ UA для проб
ENV_PREFIX = "IMAGE_CACHE_"	# 🌱 Префікс змінних середовища


# ================================
# 🛠️ ХЕЛПЕРИ КОНВЕРСІЙ
# ================================
def _to_int(val: Optional[str], default_val: int) -> int:
    """🔢 Конвертує рядок у int із захистом від помилок."""
    if val is None:
        return default_val
    try:
        return int(val.strip())
    except ValueError:
        logger.warning("⚠️ Cannot convert '%s' to int → fallback=%s.", val, default_val)
        return default_val


def _to_float(val: Optional[str], default_val: float) -> float:
    """🔢 Конвертує рядок у float із fallback."""
    if val is None:
        return default_val
    try:
        return float(val.strip())
    except ValueError:
        logger.warning("⚠️ Cannot convert '%s' to float → fallback=%s.", val, default_val)
        return default_val


def _to_str(val: Optional[str], default_val: str) -> str:
    return val.strip() if val and val.strip() else default_val


# 🔁 Поле → конвертер рядка (ENV, YAML-рядки)
_READERS: Dict[str, Callable[[Optional[str], Any], Any]] = {
    "max_cache_size": _to_int,
    "max_cache_age_sec": _to_float,
    "max_debounce_wait_ms": _to_int,
    "probe_timeout_sec": _to_float,
    "header_timeout_sec": _to_float,
    "retry_attempts": _to_int,
    "retry_backoff_sec": _to_float,
    "max_probe_bytes": _to_int,
    "user_agent": _to_str,
}


# ================================
# 🧱 МОДЕЛЬ ОПЦІЙ
# ================================
@dataclass(frozen=True, slots=True)
class ImageCacheOptions:
    """🧱 Іммутабельні параметри кешу метаданих і проб."""

    max_cache_size: int = 50	# 📦 Максимум записів у кеші
    max_cache_age_sec: float = 24 * 60 * 60	# ⏳ Вік, після якого запис вважається відсутнім
    max_debounce_wait_ms: int = 1000	# 🐢 Стеля для продовження debounce-вікна
    probe_timeout_sec: float = 5.0	# ⏱️ Таймаут однієї спроби проби розмірів
    header_timeout_sec: float = 3.0	# ⏱️ Таймаут HEAD-проби
    retry_attempts: int = 3	# 🔁 Загальна кількість спроб
    retry_backoff_sec: float = 0.1	# 🐢 Лінійний бекофф між спробами
    max_probe_bytes: int = 512 * 1024	# 📏 Скільки байтів читаємо, шукаючи заголовок зображення
    user_agent: str = DEFAULT_USER_AGENT	# 🕵️ User-Agent проб

    def __post_init__(self) -> None:
        """🛡️ Валідує інваріанти одразу після створення."""
        if self.max_cache_size < 1:
            raise ValueError("max_cache_size must be >= 1")
        if self.max_cache_age_sec <= 0:
            raise ValueError("max_cache_age_sec must be > 0")
        if self.max_debounce_wait_ms < 0:
            raise ValueError("max_debounce_wait_ms must be >= 0")
        if self.probe_timeout_sec <= 0:
            raise ValueError("probe_timeout_sec must be > 0")
        if self.header_timeout_sec <= 0:
            raise ValueError("header_timeout_sec must be > 0")
        if self.retry_attempts < 1:
            raise ValueError("retry_attempts must be >= 1")
        if self.retry_backoff_sec < 0:
            raise ValueError("retry_backoff_sec must be >= 0")
        if self.max_probe_bytes < 1024:
            raise ValueError("max_probe_bytes must be >= 1024")
        if not self.user_agent:
            raise ValueError("user_agent must not be empty")

    # ================================
    # 🧱 КОНСТРУКТОРИ
    # ================================
    @classmethod
    def default(cls) -> "ImageCacheOptions":
        """🧾 Повертає дефолтний набір опцій."""
        return cls()

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "ImageCacheOptions":
        """🌱 Будує опції з ENV (некоректні значення → дефолт із попередженням)."""
        defaults = cls.default()
        kwargs = {
            name: reader(os.getenv(f"{prefix}{name.upper()}"), getattr(defaults, name))
            for name, reader in _READERS.items()
        }
        logger.info("🌱 ImageCacheOptions built from ENV (prefix=%s).", prefix)
        return cls.from_dict(kwargs)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ImageCacheOptions":
        """🧾 Складання опцій зі словника (зайві ключі ігноруються)."""
        if not data:
            return cls.default()
        defaults = cls.default()
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            value = data.get(f.name)
            if value is None:
                continue
            if isinstance(value, str):
                value = _READERS[f.name](value, getattr(defaults, f.name))  # 🔢 "7" з ENV/YAML → 7
            kwargs[f.name] = value
        logger.debug("🧾 ImageCacheOptions.from_dict keys=%s", sorted(kwargs))
        try:
            return cls(**kwargs)
        except (TypeError, ValueError) as exc:
            logger.warning("⚠️ Invalid image cache options (%s) → defaults.", exc)
            return cls.default()

    # ================================
    # 🧰 УТИЛІТИ ЕКЗЕМПЛЯРА
    # ================================
    def merge(self, **overrides: Any) -> "ImageCacheOptions":
        """🔀 Повертає новий екземпляр із підмінними полями (None ігнорується)."""
        base = self.to_kwargs()
        base.update({key: value for key, value in overrides.items() if value is not None})
        return ImageCacheOptions(**base)

    def to_kwargs(self) -> Dict[str, Any]:
        """📦 Представляє опції як dict."""
        return asdict(self)


# ================================
# 📦 ГЛОБАЛЬНИЙ ДЕФОЛТ
# ================================
DEFAULT_IMAGE_CACHE_OPTIONS = ImageCacheOptions.default()

__all__ = ["ImageCacheOptions", "DEFAULT_IMAGE_CACHE_OPTIONS", "ENV_PREFIX"]
