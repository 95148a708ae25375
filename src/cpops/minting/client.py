"""HTTP client for the external minting service.

The minting service owns the signing keypair and talks to the chain. This
client only speaks its JSON API:

- POST /mint            {tree, collection, uri, name, symbol, recipient} -> {signature}
- POST /mint/prepare    {tree, collection, uri, name, symbol, recipient} -> {transaction}
- POST /metadata        {...metadata}                                     -> {uri}
"""

import typing as t

import httpx
import structlog

from .errors import MintingError, MintingNotConfiguredError
from .protocols import MintReceipt, PreparedMint

if t.TYPE_CHECKING:
    from cpops.models import Cpop

logger = structlog.get_logger(__name__)


class MintingServiceClient:
    """TokenIssuer backed by the minting service."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Root URL of the minting service.
            token: Bearer token sent with every request, if set.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def mint(self, cpop: "Cpop", wallet_address: str) -> MintReceipt:
        data = self._post("/mint", self._mint_payload(cpop, wallet_address))
        return MintReceipt(signature=self._require_str(data, "signature"))

    def prepare_mint(self, cpop: "Cpop", wallet_address: str) -> PreparedMint:
        data = self._post("/mint/prepare", self._mint_payload(cpop, wallet_address))
        return PreparedMint(transaction=self._require_str(data, "transaction"))

    def upload_metadata(self, metadata: dict[str, t.Any]) -> str:
        data = self._post("/metadata", metadata)
        return self._require_str(data, "uri")

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _mint_payload(cpop: "Cpop", wallet_address: str) -> dict[str, t.Any]:
        metadata = cpop.token_metadata or {}
        return {
            "tree": cpop.token_id,
            "collection": cpop.token_address,
            "uri": cpop.token_uri,
            "name": metadata.get("name") or cpop.event_name,
            "symbol": metadata.get("symbol", ""),
            "recipient": wallet_address,
        }

    def _post(self, path: str, payload: dict[str, t.Any]) -> dict[str, t.Any]:
        try:
            response = self._client.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.error("minting_service_unreachable", path=path, error=str(e))
            raise MintingError(f"Minting service request failed: {e}") from e

        if response.is_error:
            logger.error(
                "minting_service_error",
                path=path,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise MintingError(
                f"Minting service returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MintingError("Minting service returned a malformed body", status_code=response.status_code) from e
        if not isinstance(data, dict):
            raise MintingError("Minting service returned a malformed body", status_code=response.status_code)
        return data

    @staticmethod
    def _require_str(data: dict[str, t.Any], key: str) -> str:
        value = data.get(key)
        if not isinstance(value, str) or not value:
            raise MintingError(f"Minting service response is missing '{key}'")
        return value


class UnconfiguredTokenIssuer:
    """TokenIssuer used when no minting service is configured."""

    def mint(self, cpop: "Cpop", wallet_address: str) -> MintReceipt:
        raise MintingNotConfiguredError("Minting service is not configured.")

    def prepare_mint(self, cpop: "Cpop", wallet_address: str) -> PreparedMint:
        raise MintingNotConfiguredError("Minting service is not configured.")

    def upload_metadata(self, metadata: dict[str, t.Any]) -> str:
        raise MintingNotConfiguredError("Minting service is not configured.")
