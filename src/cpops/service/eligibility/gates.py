"""Eligibility gate classes for the claim eligibility system.

Each gate performs a specific eligibility check. Gates are composed together
by the ClaimEligibilityService to determine if a claim attempt may proceed.
"""

from __future__ import annotations

import abc
import datetime
import typing as t

from django.utils.translation import gettext as _

from .enums import ReasonCode, Reasons, WindowPhase
from .types import EligibilityResult, EventWindow, InvalidInputError, Skipped, TimeWindowResult

if t.TYPE_CHECKING:
    from .service import ClaimEligibilityService


def evaluate_location(distance_meters: float, radius_meters: float) -> bool:
    """Whether a distance falls inside the claim radius (boundary included)."""
    return distance_meters <= radius_meters


def ensure_aware(value: datetime.datetime, name: str) -> datetime.datetime:
    """Reject anything that is not a timezone-aware datetime.

    Naive datetimes are ambiguous; instants are compared as absolute UTC moments only.
    """
    if not isinstance(value, datetime.datetime):
        raise InvalidInputError(f"{name} must be a datetime, got {type(value).__name__}.")
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidInputError(f"{name} must be timezone-aware.")
    return value


def evaluate_time_window(now: datetime.datetime, window: EventWindow) -> TimeWindowResult:
    """Place `now` relative to the window. Both bounds are inclusive."""
    ensure_aware(now, "now")
    ensure_aware(window.start, "window start")
    ensure_aware(window.end, "window end")

    if now < window.start:
        return TimeWindowResult(allowed=False, phase=WindowPhase.BEFORE)
    if now > window.end:
        return TimeWindowResult(allowed=False, phase=WindowPhase.AFTER)
    return TimeWindowResult(allowed=True, phase=WindowPhase.WITHIN)


class BaseClaimGate(abc.ABC):
    """Abstract Base Class for a composable claim check."""

    def __init__(self, handler: ClaimEligibilityService) -> None:
        """Initialize the claim check."""
        self.handler = handler
        self.target = handler.target
        self.claimant = handler.claimant

    @abc.abstractmethod
    def check(self) -> EligibilityResult | None:
        """Perform the eligibility check.

        Returns:
            EligibilityResult if this gate blocks the claim, None to continue to next gate.
        """


class LocationGate(BaseClaimGate):
    """Gate #1: Blocks claimants farther than the claim radius from the event."""

    def check(self) -> EligibilityResult | None:
        """Check the claimant's distance to the event."""
        if isinstance(self.claimant.location, Skipped):
            return None

        distance = t.cast(float, self.handler.distance_meters)
        radius = self.target.radius_meters
        if evaluate_location(distance, radius):
            return None

        return EligibilityResult(
            allowed=False,
            reason_code=ReasonCode.OUT_OF_RANGE,
            reason=_(Reasons.OUT_OF_RANGE).format(radius=round(radius), distance=round(distance)),
            distance_meters=distance,
            radius_meters=radius,
            phase=self.handler.time_window.phase,
            event_id=self.target.event_id,
        )


class TimeWindowGate(BaseClaimGate):
    """Gate #2: Blocks claims outside the event window."""

    def check(self) -> EligibilityResult | None:
        """Check that the claim happens between start and end."""
        window = self.handler.time_window
        if window.allowed:
            return None

        if window.phase == WindowPhase.BEFORE:
            reason_code, reason = ReasonCode.BEFORE_WINDOW, _(Reasons.BEFORE_WINDOW)
        else:
            reason_code, reason = ReasonCode.AFTER_WINDOW, _(Reasons.AFTER_WINDOW)

        return EligibilityResult(
            allowed=False,
            reason_code=reason_code,
            reason=reason,
            distance_meters=self.handler.distance_meters,
            radius_meters=self.target.radius_meters,
            phase=window.phase,
            event_id=self.target.event_id,
        )


# Order matters: location is reported before the time window.
CLAIM_GATES: list[type[BaseClaimGate]] = [
    LocationGate,
    TimeWindowGate,
]
