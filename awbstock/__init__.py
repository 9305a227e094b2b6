# AWB Stock
# =========
# Air Waybill number validation, series generation and stock entry.

from .core.version import VERSION as __version__

__all__ = ["__version__"]
