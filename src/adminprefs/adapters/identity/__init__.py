"""Public interface for the identity provider adapter."""

from __future__ import annotations

from .client import IdentityToolkitClient

__all__ = ["IdentityToolkitClient"]
