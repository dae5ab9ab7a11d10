# 🖼️ fluxo/domain/images/__init__.py
"""🖼️ Доменний шар метаданих зображень."""

from .entities import FORMAT_TOKENS, HeaderInfo, ImageFormat, ImageMetadata, ImageSize

__all__ = ["FORMAT_TOKENS", "HeaderInfo", "ImageFormat", "ImageMetadata", "ImageSize"]
