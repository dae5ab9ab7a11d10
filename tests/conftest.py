# tests/conftest.py
import sys
from pathlib import Path

# Добавляем src в sys.path, чтобы работал импорт "fluxo.…" без установки пакета,
# и саму папку tests — ради общего модуля фейков
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
TESTS = Path(__file__).resolve().parent
for path in (SRC, TESTS):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import pytest  # noqa: E402

from fluxo.config.image_options import ImageCacheOptions  # noqa: E402
from fluxo.infrastructure.images.format_resolver import FormatResolver  # noqa: E402
from fluxo.shared.cache.image_metadata_cache import ImageMetadataCache  # noqa: E402

from fakes import FakeClock, FakeDimensionProbe, FakeHeaderProbe  # noqa: E402


# ──────────────────────────────────────────────────────────────────────────────
#                               🧪 Фикстуры
# ──────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def dimension_probe() -> FakeDimensionProbe:
    return FakeDimensionProbe()


@pytest.fixture
def header_probe() -> FakeHeaderProbe:
    return FakeHeaderProbe()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_cache(dimension_probe, header_probe, clock):
    """Фабрика кеша: без пауз между ретраями, остальные опции — по желанию теста."""

    def _make(*, probe=None, headers=None, **overrides) -> ImageMetadataCache:
        options = ImageCacheOptions(retry_backoff_sec=0.0).merge(**overrides)
        return ImageMetadataCache(
            probe or dimension_probe,
            FormatResolver(headers or header_probe, timeout_s=1.0),
            options=options,
            clock=clock,
        )

    return _make
