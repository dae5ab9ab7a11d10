# 📜 fluxo/shared/utils/logger.py
"""
📜 Логування підсистеми зображень.

🔹 Один кореневий логер `fluxo`; модулі беруть дочірні через `get_logger("cache")`.
🔹 Консоль + файл із добовою ротацією; файл може писатися у JSON (extra-поля зберігаються).
🔹 Шумні бібліотеки (httpx, PIL) приглушуються з розділу `logging.suppress`.
"""
from __future__ import annotations

# 🔠 Системні імпорти
import json
import logging
import sys
import threading
from dataclasses import dataclass, field
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

# ================================
# 🧾 КОНСТАНТИ
# ================================
LOG_NAME: str = "fluxo"											# 🏷️ Префікс усіх логерів підсистеми
FILE_FORMAT: str = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT: str = "%(levelname).1s %(name)s | %(message)s"
DEFAULT_LOG_FILE: str = "logs/fluxo.log"

# 🚫 Атрибути, які LogRecord має завжди; все інше вважаємо extra
_STANDARD_RECORD_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

_init_lock = threading.Lock()


# ================================
# ⚙️ НАЛАШТУВАННЯ
# ================================
@dataclass(frozen=True)
class LogSettings:
    level: str = "INFO"
    console: bool = True
    json: bool = False
    file: Optional[str] = DEFAULT_LOG_FILE							# 📁 None — без файлу
    backup_count: int = 7
    suppress: Dict[str, str] = field(default_factory=dict)
    console_level: Optional[str] = None								# ⬅️ None — як `level`
    file_level: Optional[str] = None

    @classmethod
    def from_mapping(cls, node: Mapping[str, Any]) -> "LogSettings":
        """Будує налаштування з розділу `logging` (`to_file: false` вимикає файл)."""
        file = node.get("file") or DEFAULT_LOG_FILE
        return cls(
            level=str(node.get("level") or "INFO"),
            console=bool(node.get("console", True)),
            json=bool(node.get("json", False)),
            file=file if node.get("to_file", True) else None,
            backup_count=int(node.get("backup_count", 7)),
            suppress=dict(node.get("suppress") or {}),
            console_level=node.get("console_level"),
            file_level=node.get("file_level"),
        )


class JsonFormatter(logging.Formatter):
    """Один рядок JSON на запис; extra-поля потрапляють у корінь обʼєкта."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "where": f"{record.module}:{record.lineno}",
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key in _STANDARD_RECORD_KEYS or key.startswith("_") or key in payload:
                continue
            payload[key] = value if _is_json_safe(value) else str(value)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _is_json_safe(value: Any) -> bool:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return False
    return True


def _level(value: Union[str, int, None], fallback: int) -> int:
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(str(value).upper()) if value else fallback
    return resolved if isinstance(resolved, int) else fallback


def _build_handlers(settings: LogSettings) -> List[logging.Handler]:
    base = _level(settings.level, logging.INFO)
    handlers: List[logging.Handler] = []

    if settings.console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        console.setLevel(_level(settings.console_level, base))
        handlers.append(console)

    if settings.file:
        path = Path(settings.file)
        path.parent.mkdir(parents=True, exist_ok=True)				# 📂 logs/ може ще не існувати
        rotating = TimedRotatingFileHandler(
            path, when="midnight", backupCount=settings.backup_count, encoding="utf-8"
        )
        rotating.setFormatter(JsonFormatter() if settings.json else logging.Formatter(FILE_FORMAT))
        rotating.setLevel(_level(settings.file_level, base))
        handlers.append(rotating)

    return handlers


# ================================
# 🚀 ПУБЛІЧНИЙ API
# ================================
def init_logging(
    *,
    level: Optional[str] = None,
    console: bool = True,
    json_mode: bool = False,
    file: Optional[str] = None,
    to_file: bool = True,
    suppress: Optional[Dict[str, str]] = None,
) -> logging.Logger:
    """Переналаштовує кореневий логер `fluxo` (повторний виклик замінює хендлери)."""
    return configure(
        LogSettings(
            level=level or "INFO",
            console=console,
            json=json_mode,
            file=(file or DEFAULT_LOG_FILE) if to_file else None,
            suppress=dict(suppress or {}),
        )
    )


def init_logging_from_config(config: Optional[Mapping[str, Any]]) -> logging.Logger:
    """Ініціалізує логування з розділу `logging` у `ConfigService`."""
    return configure(LogSettings.from_mapping(config or {}))


def configure(settings: LogSettings) -> logging.Logger:
    with _init_lock:
        root = logging.getLogger(LOG_NAME)
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

        handlers = _build_handlers(settings)
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(min([_level(settings.level, logging.INFO)] + [h.level for h in handlers]))

        for name, lvl in settings.suppress.items():
            logging.getLogger(name).setLevel(_level(lvl, logging.WARNING))

    root.info(
        "✅ Logging ready | level=%s console=%s file=%s json=%s",
        settings.level.upper(),
        settings.console,
        settings.file or "off",
        settings.json,
    )
    return root


def get_logger(suffix: Optional[str] = None) -> logging.Logger:
    """`get_logger("cache")` → логер `fluxo.cache`."""
    return logging.getLogger(f"{LOG_NAME}.{suffix}" if suffix else LOG_NAME)


__all__ = [
    "LOG_NAME",
    "LogSettings",
    "JsonFormatter",
    "configure",
    "init_logging",
    "init_logging_from_config",
    "get_logger",
]
