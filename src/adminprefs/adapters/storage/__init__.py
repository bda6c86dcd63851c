"""Object storage adapters."""

from __future__ import annotations

from .filesystem import LocalObjectStorage

__all__ = ["LocalObjectStorage"]
