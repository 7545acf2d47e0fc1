"""Redis layer - INFO snapshot y conexión.

``connection`` is imported directly by callers; it depends on the domain
contracts, which themselves depend on ``info``.
"""

from .info import StatusInfo, parse_info_text

__all__ = ["StatusInfo", "parse_info_text"]
