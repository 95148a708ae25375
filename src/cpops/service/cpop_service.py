"""Service layer for creating and reading cPOPs."""

from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from cpops import schema
from cpops.models import Claim, Cpop, CpopQuerySet
from cpops.tasks import publish_cpop_to_map

logger = structlog.get_logger(__name__)


@transaction.atomic
def create_cpop(payload: schema.CpopCreateSchema) -> Cpop:
    """Persist a new cPOP and publish it to the map once committed.

    Failing to enqueue the publish is logged by Django and does not fail creation.

    Args:
        payload: The cPOP creation data

    Returns:
        The created cPOP
    """
    data = payload.model_dump()
    if data["claim_radius_meters"] is None:
        data["claim_radius_meters"] = settings.CPOP_CLAIM_RADIUS_METERS
    cpop = Cpop.objects.create(**data)
    logger.info(
        "cpop_created",
        cpop_id=str(cpop.id),
        creator_address=cpop.creator_address,
        amount=cpop.amount,
    )
    cpop_id = str(cpop.id)
    transaction.on_commit(lambda: publish_cpop_to_map.delay(cpop_id), robust=True)
    return cpop


def list_cpops_for_creator(creator_address: str) -> CpopQuerySet:
    """A creator's cPOPs, newest first, with their claim counts."""
    return Cpop.objects.for_creator(creator_address).with_claim_count().order_by("-created_at")


def get_cpop(cpop_id: UUID) -> Cpop:
    """Raises Cpop.DoesNotExist."""
    return Cpop.objects.get(pk=cpop_id)


def has_claimed(cpop: Cpop, wallet_address: str) -> bool:
    """Whether the wallet holds a claim on the cPOP. Expired prepared claims don't count."""
    return Claim.objects.holding(timezone.now()).filter(cpop=cpop, wallet_address=wallet_address).exists()
