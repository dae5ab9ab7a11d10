# ⚙️ fluxo/config/__init__.py
"""⚙️ Конфігурація підсистеми зображень."""

from .config_service import ConfigService
from .image_options import DEFAULT_IMAGE_CACHE_OPTIONS, ImageCacheOptions

__all__ = ["ConfigService", "ImageCacheOptions", "DEFAULT_IMAGE_CACHE_OPTIONS"]
