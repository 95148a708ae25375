"""Exception handlers for the API."""

import typing as t
from copy import deepcopy

import orjson
import structlog
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.errors import ValidationError as NinjaValidationError
from ninja.responses import Response

from cpops.exceptions import (
    AlreadyClaimedError,
    ClaimNotAllowedError,
    InvalidInputError,
    MintingError,
    MintingNotConfiguredError,
    SupplyExhaustedError,
)

logger = structlog.get_logger(__name__)


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    json_payload = None
    if request.method in ("POST", "PUT", "PATCH") and request.headers.get("Content-Type") == "application/json":
        try:
            body = orjson.loads(request.body)
            json_payload = obfuscate(body) if isinstance(body, dict) else body
        except orjson.JSONDecodeError:  # pragma: no cover
            json_payload = None
    logger.exception(
        "INTERNAL_SERVER_ERROR",
        exc_info=exc,
        method=request.method,
        path=request.path,
        headers=obfuscate(dict(request.headers)),
        query=obfuscate(request.GET.dict()),
        json_payload=json_payload,
    )
    return Response(status=500, data={"detail": "Internal Server Error."})


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    logger.warning("VALIDATION_ERROR", path=request.path, errors=exc.messages)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": exc.messages}
    return Response(status=400, data={"errors": error_dict})


def handle_request_validation_error(
    request: HttpRequest, exc: NinjaValidationError | t.Type[NinjaValidationError]
) -> Response:
    """Handle a request that does not match the endpoint's schema."""
    return Response(status=400, data={"detail": exc.errors})


def handle_invalid_input_error(request: HttpRequest, exc: InvalidInputError | t.Type[InvalidInputError]) -> Response:
    """Handle malformed claim input."""
    return Response(status=400, data={"detail": str(exc)})


def handle_claim_not_allowed_error(
    request: HttpRequest, exc: ClaimNotAllowedError | t.Type[ClaimNotAllowedError]
) -> Response:
    """Handle a claim from too far away or outside the claim window."""
    return Response(status=403, data=exc.eligibility.model_dump(mode="json"))


def handle_already_claimed_error(
    request: HttpRequest, exc: AlreadyClaimedError | t.Type[AlreadyClaimedError]
) -> Response:
    """Handle an already claimed error."""
    return Response(status=409, data={"detail": str(exc) or "This wallet has already claimed this cPOP."})


def handle_supply_exhausted_error(
    request: HttpRequest, exc: SupplyExhaustedError | t.Type[SupplyExhaustedError]
) -> Response:
    """Handle a fully claimed cPOP."""
    return Response(status=409, data={"detail": str(exc) or "All tokens of this cPOP have been claimed."})


def handle_minting_error(request: HttpRequest, exc: MintingError | t.Type[MintingError]) -> Response:
    """Handle a minting service failure."""
    return Response(status=502, data={"detail": "Minting failed. Please try again."})


def handle_minting_not_configured_error(
    request: HttpRequest, exc: MintingNotConfiguredError | t.Type[MintingNotConfiguredError]
) -> Response:
    """Handle a missing minting service."""
    return Response(status=503, data={"detail": "Minting is not available."})


SENSITIVE_KEYS = {"password", "token", "x-api-key", "authorization", "authentication", "cookie"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
