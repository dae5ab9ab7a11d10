# 🖼️ fluxo/infrastructure/images/__init__.py
"""🖼️ Інфраструктура метаданих зображень: проби, формат, ретраї, фасад дій."""

from .format_resolver import FormatResolver
from .image_actions import ActionOptions, ImageActions, SearchEngine
from .probes import HttpxHeaderProbe, PillowDimensionProbe
from .retry import RetryOutcome, with_retry

__all__ = [
    "ActionOptions",
    "FormatResolver",
    "HttpxHeaderProbe",
    "ImageActions",
    "PillowDimensionProbe",
    "RetryOutcome",
    "SearchEngine",
    "with_retry",
]
