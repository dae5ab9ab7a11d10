"""🧩 fluxo — підсистема метаданих зображень мобільного браузера."""

__version__ = "0.1.0"
