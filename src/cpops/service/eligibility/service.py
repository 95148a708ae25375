"""ClaimEligibilityService for checking whether a claim attempt may proceed."""

import math

from geo.distance import compute_distance_meters
from geo.types import InvalidCoordinateError, ensure_finite

from .enums import ReasonCode
from .gates import CLAIM_GATES, BaseClaimGate, evaluate_time_window
from .types import Claimant, ClaimTarget, EligibilityResult, Enforced, InvalidInputError


class ClaimEligibilityService:
    """The Claim Eligibility Service Class.

    Validates the inputs once, derives the distance and the window phase, and then
    runs the gates in order. It performs no I/O and holds no shared state, so it is
    safe to use from any number of concurrent requests.
    """

    def __init__(self, target: ClaimTarget, claimant: Claimant) -> None:
        """Initialize the service, failing fast on malformed input."""
        try:
            ensure_finite(target.location)
            if isinstance(claimant.location, Enforced):
                ensure_finite(claimant.location.point)
        except InvalidCoordinateError as e:
            raise InvalidInputError(str(e)) from e
        if not math.isfinite(target.radius_meters):
            raise InvalidInputError("radius_meters must be finite.")

        self.target = target
        self.claimant = claimant

        self.distance_meters: float | None = None
        if isinstance(claimant.location, Enforced):
            self.distance_meters = compute_distance_meters(claimant.location.point, target.location)
        self.time_window = evaluate_time_window(claimant.now, target.window)

        self._gates: list[BaseClaimGate] = [gate(self) for gate in CLAIM_GATES]

    def check_eligibility(self) -> EligibilityResult:
        """Run every gate and return the first blocking result, or an OK result."""
        for gate in self._gates:
            if result := gate.check():
                return result

        return EligibilityResult(
            allowed=True,
            reason_code=ReasonCode.OK,
            distance_meters=self.distance_meters,
            radius_meters=self.target.radius_meters,
            phase=self.time_window.phase,
            event_id=self.target.event_id,
        )


def evaluate_claim(target: ClaimTarget, claimant: Claimant) -> EligibilityResult:
    """Decide whether a claim may proceed."""
    return ClaimEligibilityService(target, claimant).check_eligibility()
