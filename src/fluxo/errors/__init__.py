# 🚨 fluxo/errors/__init__.py
"""🚨 Помилки підсистеми зображень."""

from .custom_errors import (
    ErrorCode,
    FormatDetectionError,
    ImageManagerError,
    InvalidUrlError,
    ProbeError,
)

__all__ = [
    "ErrorCode",
    "ImageManagerError",
    "InvalidUrlError",
    "FormatDetectionError",
    "ProbeError",
]
