# tests/config/test_config_service.py
"""
🧪 test_config_service.py — unit-тести для ConfigService

Перевіряє:
- Завантаження YAML і крапковий доступ
- Перекриття значень зі змінних середовища
- Явні оверрайди композиційного кореня
"""

import pytest

from fluxo.config.config_service import ConfigService
from fluxo.config.image_options import ImageCacheOptions


@pytest.fixture
def yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "image_cache:\n"
        "  max_cache_size: 20\n"
        "  retry_attempts: 2\n"
        "logging:\n"
        "  level: DEBUG\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("FLUXO_LOG_LEVEL", "FLUXO_LOG_FILE", "FLUXO_IMAGE_CACHE_SIZE", "FLUXO_IMAGE_CACHE_AGE_SEC"):
        monkeypatch.delenv(name, raising=False)


def test_dotted_lookup(yaml_file):
    cfg = ConfigService(yaml_file, load_env=False)

    assert cfg.get("image_cache.max_cache_size") == 20
    assert cfg.get("logging.level") == "DEBUG"
    assert cfg.get("image_cache.missing", "fallback") == "fallback"
    assert cfg.get("logging.level.deeper") is None


def test_section_returns_copy(yaml_file):
    cfg = ConfigService(yaml_file, load_env=False)

    section = cfg.section("image_cache")
    section["max_cache_size"] = 1

    assert cfg.get("image_cache.max_cache_size") == 20
    assert cfg.section("nope") == {}


def test_env_overrides_yaml(yaml_file, monkeypatch):
    monkeypatch.setenv("FLUXO_IMAGE_CACHE_SIZE", "7")
    cfg = ConfigService(yaml_file, load_env=False)

    assert cfg.get("image_cache.max_cache_size") == "7"
    assert cfg.get("image_cache.retry_attempts") == 2
    assert ImageCacheOptions.from_dict(cfg.section("image_cache")).max_cache_size == 7


def test_explicit_overrides_win(yaml_file):
    cfg = ConfigService(yaml_file, load_env=False, overrides={"image_cache": {"retry_attempts": 9}})

    assert cfg.get("image_cache.retry_attempts") == 9
    assert cfg.get("image_cache.max_cache_size") == 20


def test_missing_yaml_is_tolerated(tmp_path):
    cfg = ConfigService(tmp_path / "absent.yaml", load_env=False)
    assert cfg.get("image_cache") is None


def test_packaged_yaml_has_defaults():
    cfg = ConfigService(load_env=False)

    assert cfg.get("image_cache.max_cache_size") == 50
    assert cfg.get("metrics.enabled") is False
