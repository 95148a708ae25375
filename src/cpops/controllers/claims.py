import typing as t
from uuid import UUID

import structlog
from ninja import Query
from ninja_extra import ControllerBase, api_controller, route

from common.authentication import ApiTokenAuth
from common.throttling import ClaimThrottle
from cpops import schema
from cpops.models import Claim, Cpop
from cpops.service.claim_service import ClaimOutcome, get_claim_service

logger = structlog.get_logger(__name__)


def _claim_response(outcome: ClaimOutcome) -> schema.ClaimResponseSchema:
    return schema.ClaimResponseSchema(
        **outcome.eligibility.model_dump(),
        claim_id=outcome.claim.id,
        status=outcome.claim.status,
        signature=outcome.signature,
        transaction=outcome.transaction,
    )


@api_controller("/claim", tags=["Claims"])
class ClaimController(ControllerBase):
    def get_one(self, cpop_id: UUID) -> Cpop:
        return t.cast(Cpop, self.get_object_or_exception(Cpop, pk=cpop_id))

    @route.get("/", url_name="claim_cpop", response=schema.ClaimResponseSchema, throttle=ClaimThrottle())
    def claim(
        self,
        params: schema.ClaimQuerySchema = Query(...),  # type: ignore[type-arg]
    ) -> schema.ClaimResponseSchema:
        """Claim a cPOP for a wallet.

        The claimant must be within the cPOP's radius of the event, between its start
        and end date, and must not have claimed it before. Depending on the server's
        claim mode the response carries the mint signature or an unsigned transaction
        for the wallet to sign.
        """
        cpop = self.get_one(params.id)
        outcome = get_claim_service().claim(
            cpop, params.wallet_address, latitude=params.lat, longitude=params.lng
        )
        return _claim_response(outcome)

    @route.post("/", url_name="claim_cpop_for_wallet", response=schema.ClaimResponseSchema, auth=ApiTokenAuth())
    def claim_for_wallet(self, payload: schema.ClaimRequestSchema) -> schema.ClaimResponseSchema:
        """Claim a cPOP on behalf of a wallet. Requires the server API token."""
        cpop = self.get_one(payload.cpop_id)
        logger.info("claim_on_behalf", cpop_id=str(cpop.id), wallet_address=payload.wallet_address)
        outcome = get_claim_service().claim(
            cpop, payload.wallet_address, latitude=payload.latitude, longitude=payload.longitude
        )
        return _claim_response(outcome)

    @route.post(
        "/confirm",
        url_name="confirm_claim",
        response=schema.ClaimConfirmResponseSchema,
        throttle=ClaimThrottle(),
    )
    def confirm(self, payload: schema.ClaimConfirmSchema) -> schema.ClaimConfirmResponseSchema:
        """Confirm a client-signed claim with the signature of the submitted transaction.

        Unconfirmed prepared claims are released after a while so the wallet can claim again.
        """
        claim = t.cast(
            Claim,
            self.get_object_or_exception(Claim, cpop_id=payload.cpop_id, wallet_address=payload.wallet_address),
        )
        claim = get_claim_service().confirm(claim, payload.signature)
        return schema.ClaimConfirmResponseSchema(claim_id=claim.id, status=claim.status, signature=claim.signature)
