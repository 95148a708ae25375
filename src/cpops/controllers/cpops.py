import typing as t
from uuid import UUID

from django.db.models import QuerySet
from ninja import Query
from ninja_extra import ControllerBase, api_controller, route

from common.throttling import WriteThrottle
from cpops import schema
from cpops.minting import get_token_issuer
from cpops.models import Cpop
from cpops.service import cpop_service
from cpops.service.claim_service import get_claim_service
from cpops.tree_config import TREE_SIZES, recommend_tree_size
from cpops.validators import is_valid_wallet_address


@api_controller("/cpops", tags=["cPOPs"])
class CpopController(ControllerBase):
    def get_one(self, cpop_id: UUID) -> Cpop:
        return t.cast(Cpop, self.get_object_or_exception(Cpop, pk=cpop_id))

    @route.get("/", url_name="list_cpops", response=list[schema.CpopInListSchema])
    def list_cpops(self, creator_address: str) -> QuerySet[Cpop]:
        """List the cPOPs created by a wallet, newest first, with how many were claimed."""
        return cpop_service.list_cpops_for_creator(creator_address)

    @route.post("/", url_name="create_cpop", response={201: schema.CpopSchema}, throttle=WriteThrottle())
    def create_cpop(self, payload: schema.CpopCreateSchema) -> tuple[int, Cpop]:
        """Register a new cPOP drop.

        The collection, merkle tree and metadata URI must already exist on chain.
        The drop is published to the public map in the background.
        """
        return 201, cpop_service.create_cpop(payload)

    @route.get("/tree-sizes", url_name="list_tree_sizes", response=schema.TreeSizesResponseSchema)
    def list_tree_sizes(
        self,
        amount: int | None = Query(None, ge=1),  # type: ignore[type-arg]
    ) -> schema.TreeSizesResponseSchema:
        """Merkle tree sizes and their costs, with the smallest one that fits `amount`."""
        recommended = recommend_tree_size(amount) if amount is not None else None
        return schema.TreeSizesResponseSchema(
            options=[schema.TreeSizeSchema(**vars(size)) for size in TREE_SIZES],
            recommended=schema.TreeSizeSchema(**vars(recommended)) if recommended else None,
        )

    @route.post(
        "/metadata",
        url_name="upload_metadata",
        response=schema.MetadataUploadResponseSchema,
        throttle=WriteThrottle(),
    )
    def upload_metadata(self, payload: schema.MetadataUploadSchema) -> schema.MetadataUploadResponseSchema:
        """Store token metadata and return its URI."""
        return schema.MetadataUploadResponseSchema(uri=get_token_issuer().upload_metadata(payload.metadata))

    @route.get("/{uuid:cpop_id}", url_name="get_cpop", response=schema.CpopDetailSchema)
    def get_cpop(self, cpop_id: UUID, wallet_address: str | None = None) -> Cpop:
        """Get a cPOP. With `wallet_address`, also tells whether that wallet already claimed it."""
        cpop = self.get_one(cpop_id)
        cpop.claimed = None  # type: ignore[attr-defined]
        if wallet_address and is_valid_wallet_address(wallet_address):
            cpop.claimed = cpop_service.has_claimed(cpop, wallet_address)  # type: ignore[attr-defined]
        return cpop

    @route.get(
        "/{uuid:cpop_id}/eligibility",
        url_name="check_claim_eligibility",
        response=schema.EligibilityResponseSchema,
    )
    def check_eligibility(
        self,
        cpop_id: UUID,
        params: schema.EligibilityQuerySchema = Query(...),  # type: ignore[type-arg]
    ) -> schema.EligibilityResponseSchema:
        """Dry-run the claim checks without minting.

        Returns whether a claim from the given coordinates would be accepted right now,
        with the distance to the event and the claim radius.
        """
        cpop = self.get_one(cpop_id)
        eligibility = get_claim_service().check(cpop, latitude=params.lat, longitude=params.lng)
        claimed = None
        if params.wallet_address and is_valid_wallet_address(params.wallet_address):
            claimed = cpop_service.has_claimed(cpop, params.wallet_address)
        return schema.EligibilityResponseSchema(**eligibility.model_dump(), claimed=claimed)
