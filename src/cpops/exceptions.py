"""Domain exceptions raised by the cPOP services."""

from .minting.errors import MintingError, MintingNotConfiguredError
from .service.eligibility import ClaimNotAllowedError, InvalidInputError


class AlreadyClaimedError(Exception):
    """Raised when the wallet already holds a claim for this cPOP."""


class SupplyExhaustedError(Exception):
    """Raised when every token of a cPOP has been claimed."""


__all__ = [
    "AlreadyClaimedError",
    "ClaimNotAllowedError",
    "InvalidInputError",
    "MintingError",
    "MintingNotConfiguredError",
    "SupplyExhaustedError",
]
