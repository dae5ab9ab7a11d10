# 📁 fluxo/shared/utils/filename.py
"""
📁 Безпечне імʼя локального файлу з недовіреного URL.

🔹 Бере останній сегмент шляху (без query та fragment).
🔹 Санітизує символи, прибирає `..` та роздільники шляху.
🔹 Дописує розширення визначеного формату й обмежує довжину основи 200 символами.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import re                                                  # 🔤 Санітизація символів
import time                                                # ⏱️ Мітка для fallback-імені
from typing import Optional, Tuple                         # 🧰 Типізація
from urllib.parse import unquote, urlsplit                 # 🌐 Розбір шляху

# 🧩 Внутрішні модулі проєкту
from fluxo.domain.images.entities import FORMAT_TOKENS, ImageFormat  # 🏷️ Формати та розширення
from fluxo.shared.utils.url_validator import is_valid_url  # 🔗 Валідність джерела


# ================================
# 🧾 КОНСТАНТИ
# ================================
MAX_STEM_LENGTH = 200                                      # 📏 Ліміт основи імені
MAX_FILENAME_LENGTH = MAX_STEM_LENGTH + 4                  # 📏 Основа + `.jpg`; довше розширення зʼїдає основу
MAX_EXTENSION_LENGTH = 5                                   # 📏 Довше — це вже не розширення
FALLBACK_EXTENSION = "jpg"                                 # 🖼️ Розширення за замовчуванням

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._-]")                # 🚫 Все поза білим списком
_SEPARATORS_RE = re.compile(r"[/\\]")                      # 🚫 Роздільники шляху


def _format_extension(fmt: Optional[object]) -> Optional[str]:
    """`PNG` / `ImageFormat.PNG` / `image/png`-підтип → `png`."""
    if fmt is None:
        return None
    if isinstance(fmt, ImageFormat):
        return fmt.extension
    token = str(fmt).strip().lower()
    resolved = FORMAT_TOKENS.get(token)
    return resolved.extension if resolved else None


def _fallback_name(ext: Optional[str], now_ms: Optional[int]) -> str:
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"image_{stamp}.{ext or FALLBACK_EXTENSION}"


def _last_segment(url: str) -> str:
    path = unquote(urlsplit(url).path)                     # 🔓 %2F теж стає роздільником
    return _SEPARATORS_RE.split(path)[-1]


def _sanitize(segment: str) -> str:
    name = _UNSAFE_RE.sub("_", segment)
    while ".." in name:                                    # 🛡️ Жодних `..` після санітизації
        name = name.replace("..", ".")
    return name.strip(".")                                 # 🙈 Без прихованих файлів і хвостових крапок


def _split_extension(name: str) -> Tuple[str, Optional[str]]:
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem or not ext or len(ext) > MAX_EXTENSION_LENGTH:
        return name, None
    return stem, ext


# ================================
# 🚀 ПУБЛІЧНИЙ API
# ================================
def synthesize_filename(url: object, fmt: Optional[object] = None, *, now_ms: Optional[int] = None) -> str:
    """
    Повертає безпечне імʼя файлу для URL. Функція тотальна: ніколи не кидає.

    Args:
        url: Джерельний URL (може бути невалідним).
        fmt: Визначений формат (`ImageFormat` або мітка на кшталт `"PNG"`).
        now_ms: Фіксований час для fallback-імені (для тестів).
    """
    format_ext = _format_extension(fmt)
    if not is_valid_url(url):
        return _fallback_name(format_ext, now_ms)

    name = _sanitize(_last_segment(str(url).strip()))
    if not name.strip("_"):                                # 🕳️ Порожній або суцільно санітизований сегмент
        return _fallback_name(format_ext, now_ms)

    stem, ext = _split_extension(name)
    if format_ext:
        current = FORMAT_TOKENS.get(ext.lower()) if ext else None
        if current is None or current.extension != format_ext:
            stem, ext = name, format_ext                   # ➕ Дописуємо розширення формату
    limit = min(MAX_STEM_LENGTH, MAX_FILENAME_LENGTH - len(ext) - 1) if ext else MAX_STEM_LENGTH
    stem = stem[:limit].rstrip(".")                        # ✂️ Обрізання не лишає `..` перед розширенням
    return f"{stem}.{ext}" if ext else stem


__all__ = ["synthesize_filename", "MAX_STEM_LENGTH", "MAX_FILENAME_LENGTH"]
