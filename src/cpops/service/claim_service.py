"""Claim orchestration: eligibility, duplicate and supply checks, minting, recording."""

import datetime
import enum
from dataclasses import dataclass

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.translation import gettext as _

from cpops.exceptions import AlreadyClaimedError, SupplyExhaustedError
from cpops.minting import TokenIssuer, get_token_issuer
from cpops.models import Claim, Cpop
from cpops.validators import is_valid_wallet_address
from geo.types import GeoPoint

from .eligibility import (
    ClaimNotAllowedError,
    Claimant,
    ClaimTarget,
    EligibilityResult,
    Enforced,
    EventWindow,
    InvalidInputError,
    LocationCheck,
    Skipped,
    evaluate_claim,
)

logger = structlog.get_logger(__name__)


class ClaimMode(enum.StrEnum):
    SERVER_SIGNED = "server_signed"
    CLIENT_SIGNED = "client_signed"


@dataclass(frozen=True)
class ClaimOutcome:
    """A recorded claim, plus whatever the issuer handed back."""

    claim: Claim
    eligibility: EligibilityResult
    signature: str | None = None
    transaction: str | None = None


def build_location_check(
    latitude: float | None, longitude: float | None, require_location: bool = True
) -> LocationCheck:
    """Turn optional request coordinates into a location check.

    Raises:
        InvalidInputError: if only one coordinate is given, or none while location is required.
    """
    if latitude is None and longitude is None:
        if require_location:
            raise InvalidInputError(_("Your location is required to claim this cPOP."))
        return Skipped()
    if latitude is None or longitude is None:
        raise InvalidInputError(_("Both latitude and longitude must be provided."))
    return Enforced(GeoPoint(latitude=latitude, longitude=longitude))


def target_for(cpop: Cpop) -> ClaimTarget:
    return ClaimTarget(
        location=cpop.point,
        window=EventWindow(start=cpop.start_date, end=cpop.end_date),
        radius_meters=cpop.claim_radius_meters,
        event_id=cpop.id,
    )


class ClaimService:
    """Runs a claim attempt from validation to minting.

    Every check happens before the issuer is called. A failed mint removes the
    reservation so the claimant can try again. In client_signed mode the claim
    stays prepared until the wallet confirms it or its TTL runs out.
    """

    def __init__(self, token_issuer: TokenIssuer, mode: ClaimMode, require_location: bool = True) -> None:
        self.token_issuer = token_issuer
        self.mode = ClaimMode(mode)
        self.require_location = require_location

    def check(
        self,
        cpop: Cpop,
        latitude: float | None = None,
        longitude: float | None = None,
        now: datetime.datetime | None = None,
    ) -> EligibilityResult:
        """Dry-run the eligibility gate for a claim attempt."""
        claimant = Claimant(
            location=build_location_check(latitude, longitude, self.require_location),
            now=now or timezone.now(),
        )
        return evaluate_claim(target_for(cpop), claimant)

    def claim(
        self,
        cpop: Cpop,
        wallet_address: str,
        latitude: float | None = None,
        longitude: float | None = None,
        now: datetime.datetime | None = None,
    ) -> ClaimOutcome:
        """Claim one token of the cPOP for the wallet.

        Returns:
            ClaimOutcome

        Raises:
            InvalidInputError: malformed wallet address or coordinates.
            ClaimNotAllowedError: out of range or outside the claim window.
            AlreadyClaimedError: the wallet already claimed this cPOP.
            SupplyExhaustedError: every token has been claimed.
            MintingError: the issuer failed. Any issuer error removes the reservation.
        """
        now = now or timezone.now()
        if not is_valid_wallet_address(wallet_address):
            raise InvalidInputError(_("Invalid wallet address."))

        eligibility = self.check(cpop, latitude, longitude, now=now)
        if not eligibility.allowed:
            logger.info(
                "claim_rejected",
                cpop_id=str(cpop.id),
                wallet_address=wallet_address,
                reason_code=eligibility.reason_code,
                distance_meters=eligibility.distance_meters,
            )
            raise ClaimNotAllowedError(eligibility.reason or _("You cannot claim this cPOP."), eligibility=eligibility)

        if Claim.objects.holding(now).filter(cpop=cpop, wallet_address=wallet_address).exists():
            raise AlreadyClaimedError(_("This wallet has already claimed this cPOP."))

        claim = self._reserve(cpop, wallet_address, eligibility.distance_meters, now)

        try:
            if self.mode == ClaimMode.SERVER_SIGNED:
                receipt = self.token_issuer.mint(cpop, wallet_address)
                signature, prepared_transaction = receipt.signature, None
            else:
                prepared = self.token_issuer.prepare_mint(cpop, wallet_address)
                signature, prepared_transaction = None, prepared.transaction
        except Exception:
            Claim.objects.filter(pk=claim.pk).delete()
            logger.exception("claim_minting_failed", cpop_id=str(cpop.id), wallet_address=wallet_address)
            raise

        if signature is not None:
            claim.status = Claim.ClaimStatus.CLAIMED
            claim.signature = signature
        else:
            claim.status = Claim.ClaimStatus.PREPARED
        claim.save(update_fields=["status", "signature", "updated_at"])

        logger.info(
            "cpop_claimed",
            cpop_id=str(cpop.id),
            claim_id=str(claim.id),
            wallet_address=wallet_address,
            mode=self.mode,
        )
        return ClaimOutcome(
            claim=claim,
            eligibility=eligibility,
            signature=signature,
            transaction=prepared_transaction,
        )

    def confirm(self, claim: Claim, signature: str) -> Claim:
        """Record the signature of a prepared claim the wallet submitted on chain.

        Raises:
            AlreadyClaimedError: the claim was already confirmed.
        """
        if claim.status != Claim.ClaimStatus.PREPARED:
            raise AlreadyClaimedError(_("This claim has already been confirmed."))
        claim.status = Claim.ClaimStatus.CLAIMED
        claim.signature = signature
        claim.save(update_fields=["status", "signature", "updated_at"])
        logger.info("claim_confirmed", cpop_id=str(claim.cpop_id), claim_id=str(claim.id), signature=signature)
        return claim

    @transaction.atomic
    def _reserve(
        self, cpop: Cpop, wallet_address: str, distance_meters: float | None, now: datetime.datetime
    ) -> Claim:
        """Write the pending claim row while holding a lock on the cPOP.

        Expired prepared claims are released first so their wallets and slots are free again.
        """
        locked = Cpop.objects.select_for_update().get(pk=cpop.pk)
        released, _counts = Claim.objects.filter(cpop=locked).expired_prepared(now).delete()
        if released:
            logger.info("prepared_claims_released", cpop_id=str(locked.id), count=released)
        claims = Claim.objects.filter(cpop=locked)
        if claims.filter(wallet_address=wallet_address).exists():
            raise AlreadyClaimedError(_("This wallet has already claimed this cPOP."))
        if claims.count() >= locked.amount:
            raise SupplyExhaustedError(_("All tokens of this cPOP have been claimed."))

        try:
            with transaction.atomic():
                return Claim.objects.create(
                    cpop=locked,
                    wallet_address=wallet_address,
                    status=Claim.ClaimStatus.PENDING,
                    distance_meters=distance_meters,
                )
        except IntegrityError as e:
            raise AlreadyClaimedError(_("This wallet has already claimed this cPOP.")) from e


def get_claim_service() -> ClaimService:
    """Build a ClaimService from the settings and the app's token issuer."""
    return ClaimService(
        token_issuer=get_token_issuer(),
        mode=ClaimMode(settings.CPOP_CLAIM_MODE),
        require_location=settings.CPOP_REQUIRE_CLAIM_LOCATION,
    )


__all__ = [
    "ClaimMode",
    "ClaimOutcome",
    "ClaimService",
    "build_location_check",
    "get_claim_service",
    "target_for",
]
