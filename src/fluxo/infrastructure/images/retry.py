# 🔁 fluxo/infrastructure/images/retry.py
"""
🔁 Контролер ретраїв для мережевих проб.

🔹 `with_retry` викликає асинхронну операцію до `max_attempts` разів.
🔹 Кожна спроба обмежена таймаутом; між спробами лінійна пауза `backoff × attempt`.
🔹 Ніколи не кидає (окрім `CancelledError`): повертає `RetryOutcome` з останньою помилкою.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import asyncio															# ⏳ Таймаути та паузи
import logging															# 🧾 Логування спроб
from dataclasses import dataclass										# 🧱 DTO результату
from typing import Awaitable, Callable, Generic, Optional, TypeVar		# 🧰 Типізація

# 🧩 Внутрішні модулі проєкту
from fluxo.errors.custom_errors import ProbeError						# ⚠️ Уніфікована помилка проби
from fluxo.errors.strategies import to_probe_error						# 📜 httpx → ProbeError
from fluxo.infrastructure.images.metrics import inc_probe_attempt, inc_probe_failure
from fluxo.shared.utils.logger import LOG_NAME							# 🏷️ Базове імʼя логера

logger = logging.getLogger(f"{LOG_NAME}.retry")

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[None]]


# ================================
# 📚 DTO РЕЗУЛЬТАТУ
# ================================
@dataclass(frozen=True, slots=True)
class RetryOutcome(Generic[T]):
    """📚 Результат ретраїв: або значення, або остання помилка."""

    value: Optional[T] = None											# ✅ Результат успішної спроби
    error: Optional[ProbeError] = None									# ❌ Остання помилка
    attempts: int = 0													# 🔢 Скільки спроб зроблено

    @property
    def ok(self) -> bool:
        return self.error is None


# ================================
# 🔁 РЕТРАЙ-РУШІЙ
# ================================
async def with_retry(
    op: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    backoff_s: float = 0.0,
    timeout_s: Optional[float] = None,
    probe: str = "dimensions",
    url: Optional[str] = None,
    sleep: Sleeper = asyncio.sleep,
) -> RetryOutcome[T]:
    """
    🔁 Викликає `op` до `max_attempts` разів і повертає перший успіх.

    Args:
        op: Фабрика корутини однієї спроби (викликається заново на кожну спробу).
        max_attempts: Загальна кількість спроб (мінімум 1).
        backoff_s: Базова пауза; перед спробою N+1 чекаємо `backoff_s × N`.
        timeout_s: Таймаут однієї спроби (None — без обмеження).
        probe: Мітка для метрик і логів.
        url: URL для контексту логів.
        sleep: Підміняється в тестах.
    """
    attempts_total = max(1, int(max_attempts))
    last_error: Optional[ProbeError] = None

    for attempt in range(1, attempts_total + 1):
        inc_probe_attempt(probe)
        try:
            if timeout_s is not None:
                value = await asyncio.wait_for(op(), timeout=timeout_s)
            else:
                value = await op()
            if attempt > 1:
                logger.debug("🔁 %s probe succeeded on attempt %d/%d", probe, attempt, attempts_total, extra={"url": url})
            return RetryOutcome(value=value, attempts=attempt)
        except asyncio.TimeoutError as exc:
            last_error = ProbeError("Probe timed out", url=url, details=f"timeout={timeout_s}s: {exc!r}")
        except Exception as exc:  # noqa: BLE001
            last_error = to_probe_error(exc, url=url)

        inc_probe_failure(probe)
        logger.debug(
            "⚠️ %s probe failed [attempt %d/%d]: %s",
            probe,
            attempt,
            attempts_total,
            last_error.message,
            extra=last_error.to_log_extra(),
        )
        if attempt < attempts_total and backoff_s > 0:
            await sleep(backoff_s * attempt)							# 🐢 Лінійний бекофф

    logger.warning(
        "❌ %s probe exhausted after %d attempts: %s",
        probe,
        attempts_total,
        last_error.message if last_error else "unknown",
        extra={"url": url},
    )
    return RetryOutcome(error=last_error, attempts=attempts_total)


__all__ = ["RetryOutcome", "with_retry"]
