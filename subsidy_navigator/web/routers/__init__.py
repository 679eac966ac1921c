"""API routers."""

from . import runs, subsidies

__all__ = ["runs", "subsidies"]
