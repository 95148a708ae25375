"""Token issuing for cPOP claims."""

from django.apps import apps
from django.conf import settings

from .client import MintingServiceClient, UnconfiguredTokenIssuer
from .errors import MintingError, MintingNotConfiguredError
from .protocols import MintReceipt, PreparedMint, TokenIssuer


def build_token_issuer() -> TokenIssuer:
    """Build the issuer described by the settings."""
    if not settings.MINTING_SERVICE_URL:
        return UnconfiguredTokenIssuer()
    return MintingServiceClient(
        base_url=settings.MINTING_SERVICE_URL,
        token=settings.MINTING_SERVICE_TOKEN,
        timeout=settings.MINTING_SERVICE_TIMEOUT,
    )


def get_token_issuer() -> TokenIssuer:
    """Return the issuer built when the cpops app became ready."""
    issuer: TokenIssuer | None = apps.get_app_config("cpops").token_issuer  # type: ignore[attr-defined]
    if issuer is None:
        raise MintingNotConfiguredError("Token issuer is not initialized.")
    return issuer


__all__ = [
    "MintReceipt",
    "MintingError",
    "MintingNotConfiguredError",
    "MintingServiceClient",
    "PreparedMint",
    "TokenIssuer",
    "UnconfiguredTokenIssuer",
    "build_token_issuer",
    "get_token_issuer",
]
