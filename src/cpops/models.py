"""Models for cPOP drops and their claims."""

import datetime
import typing as t

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Count
from django.utils.translation import gettext_lazy as _

from common.models import TimeStampedModel
from geo.types import GeoPoint

from .validators import validate_wallet_address


def default_claim_radius() -> float:
    return float(settings.CPOP_CLAIM_RADIUS_METERS)


class CpopQuerySet(models.QuerySet["Cpop"]):
    def for_creator(self, creator_address: str) -> t.Self:
        """Drops registered by a given organizer wallet."""
        return self.filter(creator_address=creator_address)

    def with_claim_count(self) -> t.Self:
        """Annotate each drop with the number of claims recorded against it."""
        return self.annotate(claim_count=Count("claims"))


def prepared_claim_cutoff(now: datetime.datetime) -> datetime.datetime:
    """Prepared claims last updated before this instant no longer hold their slot."""
    return now - datetime.timedelta(seconds=settings.CPOP_PREPARED_CLAIM_TTL_SECONDS)


class Cpop(TimeStampedModel):
    """A compressed proof-of-attendance drop for one event.

    Attendees can claim one token per wallet while they are within
    `claim_radius_meters` of the event and between `start_date` and `end_date`.
    """

    class TokenType(models.TextChoices):
        METAPLEX = "metaplex", "Metaplex compressed NFT"

    event_name = models.CharField(max_length=255)
    organizer_name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    website = models.URLField(blank=True, default="")
    location = models.CharField(max_length=512, help_text="Human readable address of the event.")
    start_date = models.DateTimeField(db_index=True)
    end_date = models.DateTimeField(db_index=True)
    amount = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Maximum number of tokens that can be claimed.",
    )
    image_url = models.URLField(max_length=1024, blank=True, default="")
    latitude = models.FloatField(validators=[MinValueValidator(-90.0), MaxValueValidator(90.0)])
    longitude = models.FloatField(validators=[MinValueValidator(-180.0), MaxValueValidator(180.0)])
    claim_radius_meters = models.FloatField(default=default_claim_radius, validators=[MinValueValidator(1.0)])
    creator_address = models.CharField(max_length=44, db_index=True, validators=[validate_wallet_address])

    token_address = models.CharField(max_length=44, blank=True, default="", help_text="Collection mint address.")
    token_id = models.CharField(max_length=44, blank=True, default="", help_text="Merkle tree address.")
    token_type = models.CharField(max_length=20, choices=TokenType.choices, default=TokenType.METAPLEX)
    token_uri = models.URLField(max_length=1024, help_text="Token metadata URI.")
    token_metadata = models.JSONField(default=dict, blank=True)

    objects = CpopQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "cPOP"
        verbose_name_plural = "cPOPs"

    def __str__(self) -> str:
        return f"{self.event_name} ({self.organizer_name})"

    def clean(self) -> None:
        """Reject windows that end before they start."""
        super().clean()
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValidationError({"end_date": [_("End date must be after start date.")]})

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)


class ClaimQuerySet(models.QuerySet["Claim"]):
    def expired_prepared(self, now: datetime.datetime) -> t.Self:
        """Prepared claims the wallet never confirmed within the TTL."""
        return self.filter(status=Claim.ClaimStatus.PREPARED, updated_at__lt=prepared_claim_cutoff(now))

    def holding(self, now: datetime.datetime) -> t.Self:
        """Claims that still count against the wallet and the supply."""
        return self.exclude(status=Claim.ClaimStatus.PREPARED, updated_at__lt=prepared_claim_cutoff(now))


class Claim(TimeStampedModel):
    """One wallet's claim of a cPOP.

    The row is written before minting so that the unique constraint serialises
    concurrent claims from the same wallet. A prepared claim that the wallet does
    not confirm within `CPOP_PREPARED_CLAIM_TTL_SECONDS` is released.
    """

    class ClaimStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        CLAIMED = "claimed", "Claimed"
        PREPARED = "prepared", "Transaction prepared"

    cpop = models.ForeignKey(Cpop, on_delete=models.CASCADE, related_name="claims")
    wallet_address = models.CharField(max_length=44, db_index=True, validators=[validate_wallet_address])
    status = models.CharField(max_length=20, choices=ClaimStatus.choices, default=ClaimStatus.PENDING, db_index=True)
    signature = models.CharField(max_length=128, blank=True, default="")
    distance_meters = models.FloatField(null=True, blank=True)

    objects = ClaimQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["cpop", "wallet_address"],
                name="unique_claim_per_wallet",
            )
        ]

    def __str__(self) -> str:
        return f"{self.wallet_address} -> {self.cpop_id}"
