# ⚙️ fluxo/config/config_service.py
"""
⚙️ config_service.py — Сервіс для доступу до статичної конфігурації.

🔹 Клас `ConfigService`:
- Завантажує конфігурацію з .env та config.yaml.
- Надає єдиний метод .get() для доступу до будь-якого параметра за крапковим ключем.
- Створюється композиційним коренем (без прихованого синглтона), тож тести можуть підкласти свій YAML.
"""

# 🌐 Зовнішні бібліотеки
import yaml                                  # 📦 YAML-парсинг
from dotenv import load_dotenv              # 🔐 Завантаження змінних із .env

# 🔠 Системні імпорти
import logging                              # 🧾 Логування
import os                                   # 📁 Доступ до змінних середовища
from pathlib import Path                    # 📁 Побудова шляху до файлів
from typing import Any, Dict, Mapping, Optional, Union  # 🧩 Типізація

# 🧩 Внутрішні модулі проєкту
from fluxo.shared.utils.logger import LOG_NAME  # 🏷️ Базове імʼя логера

logger = logging.getLogger(f"{LOG_NAME}.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"  # 📘 Пакетний YAML

# 🔐 ENV-ключ → крапковий шлях у конфігурації
ENV_OVERRIDES: Mapping[str, str] = {
    "FLUXO_LOG_LEVEL": "logging.level",
    "FLUXO_LOG_FILE": "logging.file",
    "FLUXO_IMAGE_CACHE_SIZE": "image_cache.max_cache_size",
    "FLUXO_IMAGE_CACHE_AGE_SEC": "image_cache.max_cache_age_sec",
}


# ============================
# ⚙️ СЕРВІС ДОСТУПУ ДО КОНФІГІВ
# ============================
class ConfigService:
    """
    ⚙️ Надає доступ до конфігураційних параметрів підсистеми.
    Пріоритет: config.yaml → .env / змінні середовища (останнє перемагає).
    """

    def __init__(
        self,
        yaml_path: Optional[Union[str, Path]] = None,
        *,
        load_env: bool = True,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._config: Dict[str, Any] = {}
        self._yaml_path = Path(yaml_path) if yaml_path else DEFAULT_CONFIG_PATH
        self._load_all_configs(load_env)
        if overrides:
            self._deep_update(self._config, overrides)  # 🧪 Явні оверрайди (тести/композиційний корінь)

    def _load_all_configs(self, load_env: bool) -> None:
        """📥 Завантажує всі джерела конфігурації в один словник."""
        # --- 1. YAML-файл ---
        try:
            logger.debug("📘 Loading %s", self._yaml_path)
            with open(self._yaml_path, "r", encoding="utf-8") as f:
                self._deep_update(self._config, yaml.safe_load(f) or {})
        except (FileNotFoundError, yaml.YAMLError) as e:
            logger.warning("⚠️ Could not load %s: %s", self._yaml_path, e)

        # --- 2. .env змінні ---
        if load_env:
            load_dotenv()  # 🔐 Ініціалізує змінні середовища з файлу .env
        env_vars = {path: os.getenv(name) for name, path in ENV_OVERRIDES.items()}
        env_vars = {path: value for path, value in env_vars.items() if value is not None}
        self._deep_update(self._config, self._unflatten_dict(env_vars))

        logger.info("✅ Configuration loaded.")

    def get(self, key: str, default: Any = None) -> Any:
        """
        🔑 Отримує значення конфігурації за ключем (наприклад: 'image_cache.max_cache_size').

        Args:
            key (str): Ключ у форматі з крапкою.
            default (Any): Значення за замовчуванням, якщо ключ не знайдено.
        """
        value: Any = self._config
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                logger.debug("❓ Key '%s' not found, using default", key)
                return default
        return value

    def section(self, key: str) -> Dict[str, Any]:
        """📂 Повертає розділ-словник (або порожній словник)."""
        node = self.get(key, {})
        return dict(node) if isinstance(node, dict) else {}

    # ===============================
    # 🔧 ДОПОМІЖНІ МЕТОДИ ЗЛИТТЯ КОНФІГІВ
    # ===============================

    @staticmethod
    def _unflatten_dict(d: Dict[str, Any]) -> Dict[str, Any]:
        """🔁 'image_cache.max_cache_size' → {'image_cache': {'max_cache_size': ...}}"""
        result: Dict[str, Any] = {}
        for key, value in d.items():
            parts = key.split(".")
            d_ref = result
            for part in parts[:-1]:
                d_ref = d_ref.setdefault(part, {})
            d_ref[parts[-1]] = value
        return result

    def _deep_update(self, source: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        """🔁 Рекурсивно обʼєднує два словники."""
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(source.get(key), dict):
                self._deep_update(source[key], value)
            else:
                source[key] = value


__all__ = ["ConfigService", "DEFAULT_CONFIG_PATH"]
