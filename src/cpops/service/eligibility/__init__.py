"""Claim eligibility package.

Pure decision logic that tells whether a claim attempt is close enough to the
event and inside its time window.
"""

from .enums import ReasonCode, Reasons, WindowPhase
from .gates import evaluate_location, evaluate_time_window
from .service import ClaimEligibilityService, evaluate_claim
from .types import (
    ClaimNotAllowedError,
    Claimant,
    ClaimTarget,
    EligibilityResult,
    Enforced,
    EventWindow,
    InvalidInputError,
    LocationCheck,
    Skipped,
    TimeWindowResult,
)

__all__ = [
    "ReasonCode",
    "Reasons",
    "WindowPhase",
    "evaluate_location",
    "evaluate_time_window",
    "evaluate_claim",
    "ClaimEligibilityService",
    "ClaimNotAllowedError",
    "Claimant",
    "ClaimTarget",
    "EligibilityResult",
    "Enforced",
    "EventWindow",
    "InvalidInputError",
    "LocationCheck",
    "Skipped",
    "TimeWindowResult",
]
