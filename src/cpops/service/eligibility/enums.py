"""Enums for the claim eligibility system."""

from enum import StrEnum

from django.utils.translation import gettext_noop


class ReasonCode(StrEnum):
    """Machine readable outcome of a claim eligibility check."""

    OK = "OK"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    BEFORE_WINDOW = "BEFORE_WINDOW"
    AFTER_WINDOW = "AFTER_WINDOW"


class WindowPhase(StrEnum):
    """Where an instant falls relative to an event window."""

    BEFORE = "before"
    WITHIN = "within"
    AFTER = "after"


class Reasons(StrEnum):
    """Human readable reasons why a claim is not allowed.

    Note: Strings are marked with _noop() for translation extraction.
    The actual translation happens in gates.py when using _(Reasons.XXX).
    """

    OUT_OF_RANGE = gettext_noop(
        "You must be within {radius}m of the event location. Current distance: {distance}m"
    )
    BEFORE_WINDOW = gettext_noop("The claiming period for this event has not started yet.")
    AFTER_WINDOW = gettext_noop("The claiming period for this event is over.")
