# ♻️ fluxo/shared/cache/__init__.py
"""♻️ Кеш метаданих зображень."""

from .image_metadata_cache import ImageMetadataCache

__all__ = ["ImageMetadataCache"]
