# 🔗 fluxo/shared/utils/url_validator.py
"""
🔗 url_validator.py — Валідація та нормалізація недовірених URL зображень.

🔹 `validate_url` — пропускає лише http/https з коректним хостом, інакше `InvalidUrlError`.
🔹 `is_likely_image` — поблажлива евристика «схоже на картинку» (не валідація).
🔹 `extract_extension` — хвостове розширення шляху для виведення формату.

Модуль без стану: жодних мережевих викликів і жодних suspend-точок.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import re                                                  # 🔤 Перевірка хоста та префікса
from typing import FrozenSet, Optional                     # 🧰 Типізація
from urllib.parse import SplitResult, unquote, urlsplit, urlunsplit  # 🌐 Парсинг URL

# 🧩 Внутрішні модулі проєкту
from fluxo.errors.custom_errors import InvalidUrlError     # 🚨 Єдина помилка валідації


# ================================
# 🧾 КОНСТАНТИ
# ================================
ALLOWED_SCHEMES: FrozenSet[str] = frozenset({"http", "https"})                       # ✅ Дозволені схеми
IMAGE_EXTENSIONS: FrozenSet[str] = frozenset({"jpg", "jpeg", "png", "gif", "webp", "svg", "bmp"})  # 🖼️ Евристика

_PREFIX_RE = re.compile(r"^https?://[^/?#\s]+", re.IGNORECASE)                     # 🔍 Мінімальна форма
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")                                         # 🚫 Керуючі символи
_LABEL_RE = re.compile(r"^[a-z0-9_](?:[a-z0-9_-]{0,61}[a-z0-9_])?$")                # 🏷️ DNS-мітка
_IPV6_RE = re.compile(r"^[0-9a-f:.]+$")                                              # 🔢 IPv6 без дужок


# ================================
# 🕵️‍♂️ ПРИВАТНІ ХЕЛПЕРИ
# ================================
def _is_valid_host(host: str) -> bool:
    """Перевіряє hostname (DNS-імʼя або IP-літерал)."""
    if ":" in host:                                        # 🔢 IPv6 (urlsplit вже зняв дужки)
        return bool(_IPV6_RE.match(host))
    labels = host[:-1].split(".") if host.endswith(".") else host.split(".")
    return all(_LABEL_RE.match(label) for label in labels)


def _ascii_host(host: str, raw: object) -> str:
    """IDN-хост → punycode (`bücher.de` → `xn--bcher-kva.de`); ASCII лишається як є."""
    if host.isascii():
        return host
    try:
        return host.encode("idna").decode("ascii")
    except UnicodeError as exc:
        raise InvalidUrlError(raw, reason="malformed internationalized host") from exc


def _split(raw: object) -> SplitResult:
    """Розбирає рядок і відкидає все, що не є http(s)-URL з хостом."""
    if not isinstance(raw, str):
        raise InvalidUrlError(raw, reason="not a string")
    candidate = raw.strip()
    if not candidate:
        raise InvalidUrlError(raw, reason="empty")
    if _CONTROL_RE.search(candidate):
        raise InvalidUrlError(raw, reason="control characters")
    if not _PREFIX_RE.match(candidate):
        scheme = candidate.split(":", 1)[0].lower() if ":" in candidate else ""
        if scheme and scheme not in ALLOWED_SCHEMES:
            reason = f"scheme '{scheme}' not allowed"
        elif "://" in candidate:
            reason = "missing host"
        else:
            reason = "missing scheme separator"
        raise InvalidUrlError(raw, reason=reason)

    try:
        parts = urlsplit(candidate)
        host = parts.hostname                              # 🌐 Вже в нижньому регістрі
        _ = parts.port                                     # 🔢 Кидає ValueError на битий порт
    except ValueError as exc:
        raise InvalidUrlError(raw, reason=f"unparsable: {exc}") from exc

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidUrlError(raw, reason=f"scheme '{parts.scheme}' not allowed")
    if not host or not _is_valid_host(_ascii_host(host, raw)):
        raise InvalidUrlError(raw, reason="empty or malformed host")
    if parts.username is not None or parts.password is not None:
        raise InvalidUrlError(raw, reason="credentials in authority")  # 🎭 Захист від `trusted.com@evil.com`
    return parts


# ================================
# 🚀 ПУБЛІЧНИЙ API
# ================================
def validate_url(raw: object) -> str:
    """
    Валідує та нормалізує URL зображення.

    Returns:
        str: Абсолютний URL (схема й хост у нижньому регістрі, порожній шлях → `/`, без фрагмента).
    Raises:
        InvalidUrlError: Якщо рядок не розбирається, схема не http(s) або хост порожній/битий.
    """
    parts = _split(raw)
    netloc = _ascii_host(parts.hostname or "", raw)             # 🌍 Ключ завжди в punycode
    if ":" in netloc:
        netloc = f"[{netloc}]"                             # 🔢 Повертаємо дужки IPv6
    if parts.port is not None:
        netloc = f"{netloc}:{parts.port}"
    return urlunsplit((parts.scheme.lower(), netloc, parts.path or "/", parts.query, ""))


def is_valid_url(raw: object) -> bool:
    """Булева обгортка над `validate_url`."""
    try:
        validate_url(raw)
    except InvalidUrlError:
        return False
    return True


def extract_extension(url: str) -> Optional[str]:
    """Повертає хвостове розширення останнього сегмента шляху (`a/b.JPG` → `jpg`)."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return None
    segment = unquote(path).rsplit("/", 1)[-1]
    if "." not in segment:
        return None
    ext = segment.rsplit(".", 1)[-1].lower()
    return ext or None


def is_likely_image(url: object) -> bool:
    """
    🖼️ Поблажлива евристика: відоме розширення АБО `image` у шляху/хості.

    Багато CDN віддають картинки без розширення, тому перевірка навмисно широка.
    Невалідний URL → False (виняток не кидається).
    """
    try:
        parts = _split(url)
    except InvalidUrlError:
        return False
    path = unquote(parts.path).lower()
    if extract_extension(parts.geturl()) in IMAGE_EXTENSIONS:
        return True
    return "image" in path or "image" in (parts.hostname or "")


__all__ = [
    "ALLOWED_SCHEMES",
    "IMAGE_EXTENSIONS",
    "validate_url",
    "is_valid_url",
    "is_likely_image",
    "extract_extension",
]
