"""cPOP claim and minting configuration."""

from decouple import Choices, config

# Default geofence for new cPOPs; each cPOP stores its own radius.
CPOP_CLAIM_RADIUS_METERS: float = config("CPOP_CLAIM_RADIUS_METERS", default=200.0, cast=float)

# When False, a claim without coordinates skips the geofence instead of being rejected.
CPOP_REQUIRE_CLAIM_LOCATION: bool = config("CPOP_REQUIRE_CLAIM_LOCATION", default=True, cast=bool)

# server_signed: the minting service signs and submits, the claim response carries the signature.
# client_signed: the minting service builds an unsigned transaction that the claimant signs.
CPOP_CLAIM_MODE: str = config(
    "CPOP_CLAIM_MODE",
    default="server_signed",
    cast=Choices(["server_signed", "client_signed"]),
)

# Bearer token for the server-to-server claim endpoint. Empty disables that endpoint.
CPOP_API_TOKEN: str = config("CPOP_API_TOKEN", default="")

# New cPOPs are pushed here so they show up on the public map. Empty disables publishing.
CPOP_MAP_WEBHOOK_URL: str = config("CPOP_MAP_WEBHOOK_URL", default="")

MINTING_SERVICE_URL: str = config("MINTING_SERVICE_URL", default="")
MINTING_SERVICE_TOKEN: str = config("MINTING_SERVICE_TOKEN", default="")
MINTING_SERVICE_TIMEOUT: float = config("MINTING_SERVICE_TIMEOUT", default=30.0, cast=float)

# Unconfirmed client_signed claims are released after this long. Keep it above the
# lifetime of a prepared transaction's blockhash so a released slot can't still land.
CPOP_PREPARED_CLAIM_TTL_SECONDS: int = config("CPOP_PREPARED_CLAIM_TTL_SECONDS", default=300, cast=int)
