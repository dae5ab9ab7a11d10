# 📦 fluxo/config/setup/__init__.py
"""📦 Композиційний корінь."""
