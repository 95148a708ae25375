import re

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

# Base58 alphabet (no 0, O, I, l); a 32-byte public key encodes to 32-44 characters.
WALLET_ADDRESS_REGEX = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def is_valid_wallet_address(value: str) -> bool:
    """Whether the value looks like a base58-encoded public key."""
    return isinstance(value, str) and bool(WALLET_ADDRESS_REGEX.fullmatch(value))


def validate_wallet_address(value: str) -> None:
    """Validate a wallet address.

    Args:
        value (str): base58-encoded public key.
    """
    if not is_valid_wallet_address(value):
        raise ValidationError(_("Enter a valid wallet address."))


# A 64-byte ed25519 signature encodes to 87-88 base58 characters.
TRANSACTION_SIGNATURE_REGEX = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{64,88}$")
