"""Types and exceptions for the claim eligibility system."""

import datetime
import uuid
from dataclasses import dataclass

from pydantic import BaseModel

from geo.types import GeoPoint

from .enums import ReasonCode, WindowPhase


class InvalidInputError(ValueError):
    """Raised for malformed eligibility input (non-finite coordinates, naive or missing instants)."""


@dataclass(frozen=True)
class EventWindow:
    """The period during which a cPOP can be claimed. Both bounds are inclusive."""

    start: datetime.datetime
    end: datetime.datetime


@dataclass(frozen=True)
class Enforced:
    """Location check that must pass: the claimant reported where they are."""

    point: GeoPoint


@dataclass(frozen=True)
class Skipped:
    """Location check deliberately not performed."""


LocationCheck = Enforced | Skipped


@dataclass(frozen=True)
class ClaimTarget:
    """What a claimant is measured against."""

    location: GeoPoint
    window: EventWindow
    radius_meters: float
    event_id: uuid.UUID | None = None


@dataclass(frozen=True)
class Claimant:
    """Who is claiming, from where, and when."""

    location: LocationCheck
    now: datetime.datetime


@dataclass(frozen=True)
class TimeWindowResult:
    allowed: bool
    phase: WindowPhase


class EligibilityResult(BaseModel):
    """Result of an eligibility check for a claim attempt."""

    allowed: bool
    reason_code: ReasonCode
    reason: str | None = None
    distance_meters: float | None = None
    radius_meters: float | None = None
    phase: WindowPhase | None = None
    event_id: uuid.UUID | None = None


class ClaimNotAllowedError(Exception):
    """Exception raised when a claimant is out of range or outside the claim window."""

    def __init__(self, message: str, eligibility: EligibilityResult) -> None:
        """Initialize the exception with eligibility details."""
        super().__init__(message)
        self.eligibility = eligibility
