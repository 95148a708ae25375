"""Observability middleware for context enrichment."""

import typing as t
import uuid

import structlog
from django.http import HttpRequest, HttpResponse
from opentelemetry import trace


class StructlogContextMiddleware:
    """Binds request metadata to the structlog context for the request lifecycle.

    Every log line emitted while handling the request carries the request id,
    method, path and client IP. The request id is echoed in X-Request-ID so
    clients can quote it when reporting a failed claim.
    """

    def __init__(self, get_response: t.Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()

        context: dict[str, t.Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.path,
            "ip_address": get_client_ip(request),
        }

        span = trace.get_current_span()
        if span and span.get_span_context().is_valid:
            # 16 bytes -> 32 hex chars, matches the exporter's format
            context["trace_id"] = format(span.get_span_context().trace_id, "032x")

        structlog.contextvars.bind_contextvars(**context)

        response = self.get_response(request)
        response["X-Request-ID"] = request_id

        structlog.contextvars.clear_contextvars()
        return response


def get_client_ip(request: HttpRequest) -> str:
    """Extract the client IP, preferring the first X-Forwarded-For hop."""
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return str(x_forwarded_for.split(",")[0].strip())
    return str(request.META.get("REMOTE_ADDR", "unknown"))
