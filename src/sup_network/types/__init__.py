"""Reusable type definitions for sup-network."""

from .base import CamelModel, StrictBaseModel

__all__ = [
    "CamelModel",
    "StrictBaseModel",
]
