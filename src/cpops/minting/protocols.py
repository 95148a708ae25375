"""Protocol definitions for token issuers.

A token issuer mints compressed NFTs for claimants, prepares unsigned mint
transactions for wallets that sign on their own, and stores token metadata.
The chain-specific work happens behind this protocol.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from cpops.models import Cpop


@dataclass(frozen=True)
class MintReceipt:
    """A submitted mint."""

    signature: str


@dataclass(frozen=True)
class PreparedMint:
    """An unsigned mint transaction, base64 encoded."""

    transaction: str


class TokenIssuer(Protocol):
    """Protocol for token issuers."""

    def mint(self, cpop: "Cpop", wallet_address: str) -> MintReceipt:
        """Mint one token of the cPOP to the wallet and submit it.

        Args:
            cpop: The cPOP whose collection and tree are minted from.
            wallet_address: Recipient wallet.

        Returns:
            The receipt carrying the transaction signature.
        """
        ...

    def prepare_mint(self, cpop: "Cpop", wallet_address: str) -> PreparedMint:
        """Build an unsigned mint transaction for the wallet to sign.

        Args:
            cpop: The cPOP whose collection and tree are minted from.
            wallet_address: Recipient and fee payer.

        Returns:
            The serialized transaction.
        """
        ...

    def upload_metadata(self, metadata: dict[str, Any]) -> str:
        """Store token metadata.

        Returns:
            The URI the metadata can be fetched from.
        """
        ...
