import secrets
import typing as t

import structlog
from django.conf import settings
from django.http import HttpRequest
from ninja.security import HttpBearer

logger = structlog.get_logger(__name__)


class ApiTokenAuth(HttpBearer):
    """Bearer authentication against the shared server-to-server API token.

    Used by trusted backends that claim on behalf of a wallet. When no token is
    configured every request is rejected.

    Usage:
        @route.post("/endpoint", auth=ApiTokenAuth())
        def my_endpoint(request):
            ...
    """

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Return the token if it matches the configured one, None otherwise."""
        expected = settings.CPOP_API_TOKEN
        if not expected:
            logger.warning("api_token_not_configured", path=request.path)
            return None
        if not secrets.compare_digest(token.encode(), expected.encode()):
            logger.info("api_token_rejected", path=request.path)
            return None
        return token
