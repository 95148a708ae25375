from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.errors import ValidationError as NinjaValidationError
from ninja_extra import NinjaExtraAPI

from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle
from cpops.controllers import CPOP_CONTROLLERS
from cpops.exceptions import (
    AlreadyClaimedError,
    ClaimNotAllowedError,
    InvalidInputError,
    MintingError,
    MintingNotConfiguredError,
    SupplyExhaustedError,
)

from .exception_handlers import (
    handle_already_claimed_error,
    handle_claim_not_allowed_error,
    handle_django_validation_error,
    handle_general_exception,
    handle_invalid_input_error,
    handle_minting_error,
    handle_minting_not_configured_error,
    handle_request_validation_error,
    handle_supply_exhausted_error,
)

api = NinjaExtraAPI(
    title="cPOP Creator API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"cPOP Creator API {settings.VERSION}",
    app_name=f"cpop-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse}, url_name="version")
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk}, url_name="healthcheck")
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, ResponseOk()


api.register_controllers(*CPOP_CONTROLLERS)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    NinjaValidationError: handle_request_validation_error,
    InvalidInputError: handle_invalid_input_error,
    ClaimNotAllowedError: handle_claim_not_allowed_error,
    AlreadyClaimedError: handle_already_claimed_error,
    SupplyExhaustedError: handle_supply_exhausted_error,
    MintingError: handle_minting_error,
    MintingNotConfiguredError: handle_minting_not_configured_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
