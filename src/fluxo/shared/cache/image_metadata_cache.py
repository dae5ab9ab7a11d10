# ♻️ fluxo/shared/cache/image_metadata_cache.py
"""
♻️ LRU+TTL кеш метаданих зображень з дедуплікацією та debounce.

🔹 Обмеження за кількістю записів (LRU за токеном давності) та віком (ліниве протухання).
🔹 На ключ існує не більше одного запиту «в польоті»; всі паралельні викликачі чекають на нього.
🔹 Debounce — таймер на ключ, який пізніший виклик може переозброїти (зі стелею очікування).
🔹 Мережеві збої деградують до відсутніх полів; назовні виходить лише `InvalidUrlError`.

Усі мутації стану (вставка, витіснення, бамп давності, зняття запиту) виконуються
синхронно під `RLock`, тож між ними немає suspend-точок.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import asyncio															# 🧵 Futures, таймери, задачі
import logging															# 🧾 Логування
import math																# ➗ floor для trim
import threading														# 🔒 Захист стану
import time																# ⏱️ Монотонний годинник
from collections import OrderedDict									# 🔁 Порядок давності
from dataclasses import dataclass										# 🧱 Внутрішні записи
from typing import Callable, Dict, Iterable, List, Optional				# 🧰 Типізація

# 🧩 Внутрішні модулі проєкту
from fluxo.config.image_options import DEFAULT_IMAGE_CACHE_OPTIONS, ImageCacheOptions
from fluxo.domain.images.entities import ImageMetadata, ImageSize		# 🖼️ Доменні сутності
from fluxo.domain.images.interfaces import IDimensionProbe				# 📐 Проба розмірів
from fluxo.errors.custom_errors import InvalidUrlError					# 🚨 Єдина видима помилка
from fluxo.infrastructure.images import metrics							# 📈 Prometheus
from fluxo.infrastructure.images.format_resolver import FormatResolution, FormatResolver
from fluxo.infrastructure.images.retry import RetryOutcome, with_retry	# 🔁 Ретраї проби
from fluxo.shared.utils.logger import LOG_NAME							# 🏷️ Базове імʼя логера
from fluxo.shared.utils.url_validator import validate_url				# 🔗 Валідація ключа

logger = logging.getLogger(f"{LOG_NAME}.cache")


# ================================
# 🧱 ВНУТРІШНІ ЗАПИСИ
# ================================
@dataclass(slots=True)
class _CacheEntry:
    metadata: ImageMetadata												# 🖼️ Поточний знімок
    token: int															# 🔢 Токен давності (більший — свіжіший)


@dataclass(slots=True)
class _InFlightRequest:
    key: str															# 🔗 Нормалізований URL
    future: "asyncio.Future[ImageMetadata]"								# 🤝 Спільний результат
    created_at: float													# ⏱️ Час створення (loop.time())
    debounce_ms: int = 0												# ⏳ Вікно першого виклику (стеля його не вкорочує)
    debounce_handle: Optional[asyncio.TimerHandle] = None				# ⏳ Відкладений старт
    task: Optional["asyncio.Task[None]"] = None							# 🚀 Запущена проба

    @property
    def started(self) -> bool:
        return self.task is not None


# ================================
# ♻️ КЕШ
# ================================
class ImageMetadataCache:
    """♻️ Кеш метаданих, один на процес (створюється композиційним коренем)."""

    def __init__(
        self,
        dimension_probe: IDimensionProbe,
        format_resolver: FormatResolver,
        *,
        options: ImageCacheOptions = DEFAULT_IMAGE_CACHE_OPTIONS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._probe = dimension_probe
        self._format_resolver = format_resolver
        self._options = options
        self._clock = clock												# ⏱️ Для віку записів (підміняється в тестах)

        self._lock = threading.RLock()
        self._entries: "OrderedDict[str, _CacheEntry]" = OrderedDict()	# 🗂️ Від найстарішого до найсвіжішого
        self._in_flight: Dict[str, _InFlightRequest] = {}
        self._next_token = 0

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._probes = 0

    @property
    def options(self) -> ImageCacheOptions:
        return self._options

    # ================================
    # 🚀 ПУБЛІЧНИЙ API
    # ================================
    def resolve(self, url: str, debounce_ms: int = 0) -> "asyncio.Future[ImageMetadata]":
        """
        🔎 Повертає awaitable з метаданими для `url`.

        Валідація відбувається синхронно: невалідний URL кидає `InvalidUrlError`
        ще до створення будь-якої асинхронної роботи. Кожен викликач отримує
        власну обгортку над спільним результатом, тож скасування одного не
        зачіпає інших.

        Args:
            url: Недовірений URL.
            debounce_ms: Вікно debounce; 0 — стартувати одразу.
        Raises:
            InvalidUrlError: Якщо URL не пройшов валідацію.
        """
        key = validate_url(url)
        loop = asyncio.get_running_loop()

        with self._lock:
            entry = self._live_entry(key)
            if entry is not None:
                snapshot = self._touch(key, entry)
                self._hits += 1
                metrics.inc_hit()
                logger.debug("🎯 Cache hit: %s (accesses=%d)", key, snapshot.access_count)
                done: "asyncio.Future[ImageMetadata]" = loop.create_future()
                done.set_result(snapshot)
                return done

            request = self._in_flight.get(key)
            if request is None:
                self._misses += 1
                metrics.inc_miss()
                request = _InFlightRequest(
                    key=key, future=loop.create_future(), created_at=loop.time(), debounce_ms=max(debounce_ms, 0)
                )
                self._in_flight[key] = request
                logger.debug("🆕 Cache miss: %s (debounce=%dms)", key, debounce_ms)
            else:
                logger.debug("🤝 Attached to in-flight request: %s", key)

            if not request.started:
                self._schedule(request, debounce_ms, loop)

        return asyncio.shield(request.future)

    def get_cache_size(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear_cache(self) -> None:
        """🧹 Видаляє всі записи; запити в польоті не скасовуються і можуть знову наповнити кеш."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        logger.info("🧹 Image metadata cache cleared (%d entries)", removed)

    def trim_cache(self, ratio: float) -> int:
        """
        ✂️ Видаляє `floor(ratio × size)` найдавніше використаних записів.

        Returns:
            int: Скільки записів видалено.
        Raises:
            ValueError: Якщо `ratio` поза межами [0, 1].
        """
        if not 0.0 <= ratio <= 1.0:
            raise ValueError(f"ratio must be within [0, 1], got {ratio!r}")
        with self._lock:
            count = math.floor(ratio * len(self._entries))
            for _ in range(count):
                self._entries.popitem(last=False)
            self._evictions += count
        metrics.inc_eviction("trim", count)
        logger.debug("✂️ Trimmed %d entries (ratio=%.2f)", count, ratio)
        return count

    def preload(self, urls: Iterable[str]) -> "asyncio.Future[List[object]]":
        """
        🔮 Best-effort розвʼязання списку URL.

        Невалідні URL та будь-які збої мовчки пропускаються (лише debug-лог).
        Повернутий future можна не чекати; він ніколи не завершується винятком.
        """
        loop = asyncio.get_running_loop()
        pending: List["asyncio.Future[ImageMetadata]"] = []
        for url in urls:
            try:
                pending.append(self.resolve(url))
            except InvalidUrlError as exc:
                logger.debug("🔮 Preload skipped invalid URL: %s", exc.reason, extra=exc.to_log_extra())
        if not pending:
            empty: "asyncio.Future[List[object]]" = loop.create_future()
            empty.set_result([])
            return empty
        logger.debug("🔮 Preloading %d URLs", len(pending))
        return asyncio.gather(*pending, return_exceptions=True)

    def stats(self) -> Dict[str, int]:
        """📊 Лічильники кешу для діагностики."""
        with self._lock:
            return {
                "size": len(self._entries),
                "in_flight": len(self._in_flight),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "probes": self._probes,
            }

    def prune_expired(self) -> int:
        """🧹 Необовʼязковий прохід: видаляє всі протухлі записи, повертає їх кількість."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
            for key in expired:
                del self._entries[key]
            self._evictions += len(expired)
        metrics.inc_eviction("expired", len(expired))
        if expired:
            logger.debug("⏰ Pruned %d expired entries", len(expired))
        return len(expired)

    async def aclose(self) -> None:
        """🛑 Скасовує відкладені та запущені проби (для завершення процесу й тестів)."""
        with self._lock:
            requests = list(self._in_flight.values())
            self._in_flight.clear()
        tasks = []
        for request in requests:
            if request.debounce_handle is not None:
                request.debounce_handle.cancel()
            if request.task is not None:
                request.task.cancel()
                tasks.append(request.task)
            if not request.future.done():
                request.future.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ================================
    # ⏳ DEBOUNCE ТА СТАРТ
    # ================================
    def _schedule(self, request: _InFlightRequest, debounce_ms: int, loop: asyncio.AbstractEventLoop) -> None:
        """Переозброює таймер debounce або стартує пробу одразу (перший тригер перемагає)."""
        if request.debounce_handle is not None:
            request.debounce_handle.cancel()
            request.debounce_handle = None

        if debounce_ms <= 0:
            self._start(request, loop)
            return

        # 🐢 Стеля обмежує лише переозброєння: власне вікно першого виклику відпрацьовує повністю
        ceiling = request.created_at + max(request.debounce_ms, self._options.max_debounce_wait_ms) / 1000.0
        fire_at = min(loop.time() + debounce_ms / 1000.0, ceiling)		# 🐢 Не довше за стелю
        request.debounce_handle = loop.call_at(fire_at, self._start, request, loop)

    def _start(self, request: _InFlightRequest, loop: asyncio.AbstractEventLoop) -> None:
        with self._lock:
            if request.started or self._in_flight.get(request.key) is not request:
                return
            request.debounce_handle = None
            self._probes += 1
            request.task = loop.create_task(self._fetch(request))

    # ================================
    # 📡 РОЗВʼЯЗАННЯ ПРОМАХУ
    # ================================
    async def _fetch(self, request: _InFlightRequest) -> None:
        key = request.key
        started = time.perf_counter()
        try:
            try:
                resolution, outcome = await asyncio.gather(
                    self._format_resolver.detect(key),
                    with_retry(
                        lambda: self._probe.probe_size(key),
                        max_attempts=self._options.retry_attempts,
                        backoff_s=self._options.retry_backoff_sec,
                        timeout_s=self._options.probe_timeout_sec,
                        probe="dimensions",
                        url=key,
                    ),
                )
                metadata = self._build(key, resolution, outcome)
            except Exception:  # noqa: BLE001
                # 💥 Зламаний контракт проби деградує до порожніх полів, а не вішає викликачів
                logger.exception("💥 Metadata resolution crashed for %s", key)
                metadata = self._build(key, FormatResolution(), RetryOutcome())
            with self._lock:
                self._insert(key, metadata)
        except asyncio.CancelledError:
            if not request.future.done():
                request.future.cancel()
            raise
        finally:
            with self._lock:
                if self._in_flight.get(key) is request:
                    del self._in_flight[key]

        metrics.observe_resolve(time.perf_counter() - started)
        if not request.future.done():
            request.future.set_result(metadata)

    def _build(self, key: str, resolution: FormatResolution, outcome: RetryOutcome[ImageSize]) -> ImageMetadata:
        size = outcome.value if outcome.ok else None
        if size is None:
            logger.warning("⚠️ Dimensions unknown for %s", key, extra={"attempts": outcome.attempts})
        now = self._clock()
        return ImageMetadata(
            url=key,
            width=size.width if size else None,
            height=size.height if size else None,
            format=str(resolution.format) if resolution.format else None,
            size_bytes=resolution.size_bytes,
            inserted_at=now,
            last_accessed_at=now,
        )

    # ================================
    # 🗂️ БУХГАЛТЕРІЯ ЗАПИСІВ (під self._lock)
    # ================================
    def _take_token(self) -> int:
        self._next_token += 1
        return self._next_token

    def _is_expired(self, entry: _CacheEntry, now: float) -> bool:
        return now - entry.metadata.inserted_at >= self._options.max_cache_age_sec

    def _live_entry(self, key: str) -> Optional[_CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._entries[key]										# ⏰ Протухлий запис вважається відсутнім
            self._evictions += 1
            metrics.inc_eviction("expired")
            logger.debug("⏰ Expired entry dropped: %s", key)
            return None
        return entry

    def _touch(self, key: str, entry: _CacheEntry) -> ImageMetadata:
        entry.token = self._take_token()
        entry.metadata = entry.metadata.touched(self._clock())
        self._entries.move_to_end(key, last=True)						# 🔁 Найсвіжіше використання — в кінець
        return entry.metadata

    def _insert(self, key: str, metadata: ImageMetadata) -> None:
        if key not in self._entries and len(self._entries) >= self._options.max_cache_size:
            evicted_key, _ = self._entries.popitem(last=False)			# 🚮 Найменший токен — в голові
            self._evictions += 1
            metrics.inc_eviction("lru")
            logger.debug("🚮 LRU eviction: %s", evicted_key)
        self._entries[key] = _CacheEntry(metadata=metadata, token=self._take_token())
        self._entries.move_to_end(key, last=True)


__all__ = ["ImageMetadataCache"]
