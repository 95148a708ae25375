import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field, StringConstraints, field_validator

from common.schema import OneToTwoFiftyFiveString, StrippedString
from cpops.models import Claim, Cpop
from cpops.service.eligibility import EligibilityResult

from .validators import TRANSACTION_SIGNATURE_REGEX, WALLET_ADDRESS_REGEX

WalletAddress = t.Annotated[str, StringConstraints(strip_whitespace=True, pattern=WALLET_ADDRESS_REGEX.pattern)]
Latitude = t.Annotated[float, Field(ge=-90.0, le=90.0)]
Longitude = t.Annotated[float, Field(ge=-180.0, le=180.0)]


class CpopCreateSchema(Schema):
    event_name: OneToTwoFiftyFiveString
    organizer_name: OneToTwoFiftyFiveString
    description: StrippedString = ""
    website: StrippedString = ""
    location: t.Annotated[str, StringConstraints(min_length=1, max_length=512, strip_whitespace=True)]
    start_date: AwareDatetime
    end_date: AwareDatetime
    amount: int = Field(..., ge=1, description="Maximum number of tokens that can be claimed")
    image_url: StrippedString = ""
    latitude: Latitude
    longitude: Longitude
    claim_radius_meters: float | None = Field(None, ge=1, description="Defaults to the server's claim radius in meters")
    creator_address: WalletAddress
    token_address: StrippedString = Field("", description="Collection mint address")
    token_id: StrippedString = Field("", description="Merkle tree address")
    token_type: Cpop.TokenType = Cpop.TokenType.METAPLEX
    token_uri: StrippedString
    token_metadata: dict[str, t.Any] = Field(default_factory=dict)


class CpopSchema(ModelSchema):
    class Meta:
        model = Cpop
        fields = [
            "id",
            "created_at",
            "event_name",
            "organizer_name",
            "description",
            "website",
            "location",
            "start_date",
            "end_date",
            "amount",
            "image_url",
            "latitude",
            "longitude",
            "claim_radius_meters",
            "creator_address",
            "token_address",
            "token_id",
            "token_type",
            "token_uri",
            "token_metadata",
        ]


class CpopInListSchema(CpopSchema):
    claim_count: int = 0


class CpopDetailSchema(CpopSchema):
    claimed: bool | None = Field(None, description="Whether the given wallet already claimed; null without a wallet")


class EligibilityResponseSchema(EligibilityResult):
    claimed: bool | None = None


class ClaimRequestSchema(Schema):
    cpop_id: UUID
    wallet_address: StrippedString
    latitude: float | None = None
    longitude: float | None = None


class ClaimResponseSchema(EligibilityResult):
    claim_id: UUID
    status: Claim.ClaimStatus
    signature: str | None = None
    transaction: str | None = Field(None, description="Base64 unsigned transaction for the wallet to sign")


class ClaimConfirmSchema(Schema):
    cpop_id: UUID
    wallet_address: WalletAddress
    signature: t.Annotated[str, StringConstraints(strip_whitespace=True, pattern=TRANSACTION_SIGNATURE_REGEX.pattern)]


class ClaimConfirmResponseSchema(Schema):
    claim_id: UUID
    status: Claim.ClaimStatus
    signature: str


class TreeSizeSchema(Schema):
    leaves: int
    tree_depth: int
    canopy_depth: int
    concurrency_buffer: int
    tree_cost: float
    cost_per_cnft: float


class TreeSizesResponseSchema(Schema):
    options: list[TreeSizeSchema]
    recommended: TreeSizeSchema | None = None


class MetadataUploadSchema(Schema):
    metadata: dict[str, t.Any]

    @field_validator("metadata")
    @classmethod
    def metadata_not_empty(cls, value: dict[str, t.Any]) -> dict[str, t.Any]:
        if not value:
            raise ValueError("Metadata is required")
        return value


class MetadataUploadResponseSchema(Schema):
    uri: str


class CoordinatesQuerySchema(Schema):
    lat: float | None = None
    lng: float | None = None


class EligibilityQuerySchema(CoordinatesQuerySchema):
    wallet_address: StrippedString | None = None


class ClaimQuerySchema(CoordinatesQuerySchema):
    wallet_address: StrippedString
    id: UUID = Field(..., description="cPOP id")
