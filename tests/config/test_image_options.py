# tests/config/test_image_options.py
import os
from contextlib import contextmanager

import pytest

from fluxo.config.image_options import DEFAULT_IMAGE_CACHE_OPTIONS, ImageCacheOptions


@contextmanager
def _env(**pairs):
    old = {k: os.environ.get(k) for k in pairs}
    try:
        for k, v in pairs.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = str(v)
        yield
    finally:
        for k, v in old.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v


def test_defaults():
    opts = DEFAULT_IMAGE_CACHE_OPTIONS
    assert opts.max_cache_size == 50
    assert opts.max_cache_age_sec == 24 * 60 * 60
    assert opts.retry_attempts == 3
    assert opts.max_debounce_wait_ms == 1000


def test_defaults_when_env_empty():
    with _env(IMAGE_CACHE_MAX_CACHE_SIZE=None, IMAGE_CACHE_PROBE_TIMEOUT_SEC=None):
        opts = ImageCacheOptions.from_env()
        assert opts == ImageCacheOptions()


def test_override_with_default_prefix():
    with _env(IMAGE_CACHE_MAX_CACHE_SIZE="7", IMAGE_CACHE_PROBE_TIMEOUT_SEC="2.5"):
        opts = ImageCacheOptions.from_env()
        assert opts.max_cache_size == 7
        assert opts.probe_timeout_sec == 2.5


def test_custom_prefix():
    with _env(BROWSER_IMG_RETRY_ATTEMPTS="5", IMAGE_CACHE_RETRY_ATTEMPTS=None):
        opts = ImageCacheOptions.from_env(prefix="BROWSER_IMG_")
        assert opts.retry_attempts == 5


def test_invalid_values_fall_back_to_defaults():
    with _env(IMAGE_CACHE_MAX_CACHE_SIZE="-5", IMAGE_CACHE_RETRY_ATTEMPTS="abc"):
        # from_env не бросает — __post_init__ валидирует, остаются дефолты
        opts = ImageCacheOptions.from_env()
        assert opts.max_cache_size == 50
        assert opts.retry_attempts == 3


def test_from_dict_ignores_unknown_keys_and_coerces_strings():
    opts = ImageCacheOptions.from_dict({"max_cache_size": "12", "retry_backoff_sec": 0, "colour": "blue"})
    assert opts.max_cache_size == 12
    assert opts.retry_backoff_sec == 0


def test_from_dict_empty_is_default():
    assert ImageCacheOptions.from_dict(None) == ImageCacheOptions()
    assert ImageCacheOptions.from_dict({}) == ImageCacheOptions()


@pytest.mark.parametrize(
    "field, value",
    [
        ("max_cache_size", 0),
        ("max_cache_age_sec", 0),
        ("max_debounce_wait_ms", -1),
        ("probe_timeout_sec", 0),
        ("header_timeout_sec", -1),
        ("retry_attempts", 0),
        ("retry_backoff_sec", -0.5),
        ("max_probe_bytes", 10),
        ("user_agent", ""),
    ],
)
def test_construction_validates(field, value):
    with pytest.raises(ValueError):
        ImageCacheOptions(**{field: value})


def test_merge_returns_new_instance():
    base = ImageCacheOptions()
    merged = base.merge(max_cache_size=3, retry_attempts=None)

    assert merged.max_cache_size == 3
    assert merged.retry_attempts == base.retry_attempts
    assert base.max_cache_size == 50
    assert merged.to_kwargs()["max_cache_size"] == 3
