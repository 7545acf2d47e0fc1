"""Domain layer - Contratos."""

from .status_source import IStatusSource, StaticStatusSource

__all__ = ["IStatusSource", "StaticStatusSource"]
