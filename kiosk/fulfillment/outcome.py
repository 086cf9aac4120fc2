"""
Maps the result of a kiosk transaction to a presentation neutral outcome
"""
from enum import StrEnum, auto

from kiosk.api.errors import AuthenticationFailure
from kiosk.fulfillment.bid_placement import BidResolution


class Outcome(StrEnum):
    """
    Kiosk transaction outcome
    """

    # registration only
    REGISTERED = auto()
    UPDATED = auto()

    # bid placement
    BID_SUBMITTED_UNRESOLVED = auto()
    RESERVE_NOT_MET = auto()
    HIGHEST_BIDDER = auto()
    OUTBID_AFTER_PLACEMENT = auto()

    # failures
    REGISTRATION_FAILED = auto()
    BID_FAILED = auto()
    # credentials or PIN were rejected
    WRONG_CREDENTIALS = auto()


def classify(placing_bid: bool, resolution: BidResolution) -> Outcome:
    """
    Reserve not met takes precedence over being the highest bidder.
    """
    if placing_bid:
        if not resolution.bid_is_resolved:
            return Outcome.BID_SUBMITTED_UNRESOLVED
        if resolution.reserve_not_met:
            return Outcome.RESERVE_NOT_MET
        if resolution.is_highest_bidder:
            return Outcome.HIGHEST_BIDDER
        return Outcome.OUTBID_AFTER_PLACEMENT

    if resolution.created_new_bidder:
        return Outcome.REGISTERED
    return Outcome.UPDATED


def classify_failure(placing_bid: bool, error: Exception) -> Outcome:
    """
    Rejected credentials or PIN are reported as such, so that the bidder can re-enter them.
    Otherwise, when bidding, a bid failure is reported regardless of whether the bidder was also registering.
    """
    if is_wrong_pin(error):
        return Outcome.WRONG_CREDENTIALS
    return Outcome.BID_FAILED if placing_bid else Outcome.REGISTRATION_FAILED


def is_wrong_pin(error: Exception) -> bool:
    """
    :return: True if the error means the PIN or credentials entered at the kiosk were rejected
    """
    return isinstance(error, AuthenticationFailure)
