"""Common middleware for the cPOP backend."""

from .observability import StructlogContextMiddleware

__all__ = ["StructlogContextMiddleware"]
