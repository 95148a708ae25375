"""Observability utilities for the cPOP backend."""

from .tracing import init_tracing

__all__ = ["init_tracing"]
