# 📈 fluxo/infrastructure/images/metrics.py
"""
📈 Prometheus-метрики для кешу метаданих зображень.

🔹 `IMAGE_CACHE_HITS` / `IMAGE_CACHE_MISSES` / `IMAGE_CACHE_EVICTIONS` — лічильники кешу.
🔹 `IMAGE_PROBE_ATTEMPTS` / `IMAGE_PROBE_FAILURES` — спроби та збої проб (мітка `probe`).
🔹 `IMAGE_RESOLVE_LATENCY` — гістограма часу розвʼязання промаху.
🔹 Хелпери `inc_*` / `observe_*` ніколи не дозволяють метрикам зламати розвʼязання.
"""

from __future__ import annotations

# 🌐 Зовнішні бібліотеки
from prometheus_client import Counter, Histogram, start_http_server	# 📊 Prometheus-метрики

# 🔠 Системні імпорти
import logging															# 🧾 Логування збоїв метрик
import threading														# 🔒 Одноразовий старт експортера
from typing import Optional												# 🧰 Типізація

# 🧩 Внутрішні модулі проєкту
from fluxo.shared.utils.logger import LOG_NAME							# 🏷️ Базове імʼя логера

logger = logging.getLogger(f"{LOG_NAME}.metrics")


# ================================
# 📊 ЛІЧИЛЬНИКИ КЕША
# ================================
IMAGE_CACHE_HITS = Counter(
    "image_metadata_cache_hits_total",									# 🏷️ Імʼя метрики
    "Cache hits for image metadata",									# 📝 Опис у Prometheus
)

IMAGE_CACHE_MISSES = Counter(
    "image_metadata_cache_misses_total",
    "Cache misses for image metadata",
)

IMAGE_CACHE_EVICTIONS = Counter(
    "image_metadata_cache_evictions_total",
    "Entries evicted from the image metadata cache",
    ["reason"],															# 🏷️ lru / expired / trim
)

# ================================
# 📡 ЛІЧИЛЬНИКИ ПРОБ
# ================================
IMAGE_PROBE_ATTEMPTS = Counter(
    "image_probe_attempts_total",
    "Network probe attempts",
    ["probe"],															# 🏷️ dimensions / headers
)

IMAGE_PROBE_FAILURES = Counter(
    "image_probe_failures_total",
    "Failed network probe attempts",
    ["probe"],
)

# ================================
# ⏱️ ГІСТОГРАМА ЛАТЕНТНОСТІ
# ================================
IMAGE_RESOLVE_LATENCY = Histogram(
    "image_metadata_resolve_seconds",
    "Time to resolve image metadata on a cache miss",
)


# ================================
# 🧰 БЕЗПЕЧНІ ХЕЛПЕРИ
# ================================
def inc_hit() -> None:
    try:
        IMAGE_CACHE_HITS.inc()
    except Exception as exc:  # noqa: BLE001
        logger.debug("📉 metric inc failed: %s", exc)


def inc_miss() -> None:
    try:
        IMAGE_CACHE_MISSES.inc()
    except Exception as exc:  # noqa: BLE001
        logger.debug("📉 metric inc failed: %s", exc)


def inc_eviction(reason: str, amount: int = 1) -> None:
    """🔢 Фіксує витіснення (`lru`, `expired`, `trim`)."""
    if amount <= 0:
        return
    try:
        IMAGE_CACHE_EVICTIONS.labels(reason=reason).inc(amount)
    except Exception as exc:  # noqa: BLE001
        logger.debug("📉 metric inc failed: %s", exc)


def inc_probe_attempt(probe: str) -> None:
    try:
        IMAGE_PROBE_ATTEMPTS.labels(probe=probe).inc()
    except Exception as exc:  # noqa: BLE001
        logger.debug("📉 metric inc failed: %s", exc)


def inc_probe_failure(probe: str) -> None:
    try:
        IMAGE_PROBE_FAILURES.labels(probe=probe).inc()
    except Exception as exc:  # noqa: BLE001
        logger.debug("📉 metric inc failed: %s", exc)


def observe_resolve(seconds: float) -> None:
    try:
        IMAGE_RESOLVE_LATENCY.observe(max(0.0, seconds))
    except Exception as exc:  # noqa: BLE001
        logger.debug("📉 metric observe failed: %s", exc)


# ================================
# 📤 ЕКСПОРТЕР
# ================================
_exporter_lock = threading.Lock()
_exporter_port: Optional[int] = None


def maybe_start_prometheus(port: int) -> bool:
    """📤 Підіймає HTTP-експортер один раз на процес; повертає True, якщо запустили зараз."""
    global _exporter_port
    with _exporter_lock:
        if _exporter_port is not None:
            logger.debug("📤 Prometheus exporter already running on %s", _exporter_port)
            return False
        start_http_server(port)
        _exporter_port = port
    logger.info("📤 Prometheus exporter listening on %s", port)
    return True


__all__ = [
    "maybe_start_prometheus",
    "IMAGE_CACHE_HITS",
    "IMAGE_CACHE_MISSES",
    "IMAGE_CACHE_EVICTIONS",
    "IMAGE_PROBE_ATTEMPTS",
    "IMAGE_PROBE_FAILURES",
    "IMAGE_RESOLVE_LATENCY",
    "inc_hit",
    "inc_miss",
    "inc_eviction",
    "inc_probe_attempt",
    "inc_probe_failure",
    "observe_resolve",
]
