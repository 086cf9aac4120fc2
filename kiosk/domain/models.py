"""
Auction API records
"""
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


def _require(json: Any, key: str) -> Any:
    if not isinstance(json, dict):
        raise ValueError(f"expected a JSON object, but got: {type(json).__name__}")
    value = json.get(key)
    if value is None:
        raise ValueError(f"missing field: {key}")
    return value


@dataclass(slots=True, frozen=True)
class Bidder:
    """
    Per auction registration record - distinct from the user account
    """

    id: str
    pin: str | None = None

    @classmethod
    def from_json(cls, json: Any) -> "Bidder":
        pin = json.get("pin") if isinstance(json, dict) else None
        return cls(id=str(_require(json, "id")), pin=str(pin) if pin is not None else None)


@dataclass(slots=True, frozen=True)
class User:
    """
    Authenticated user profile
    """

    id: str
    paddle_number: str | None = None
    name: str | None = None

    @classmethod
    def from_json(cls, json: Any) -> "User":
        paddle_number = json.get("paddle_number") if isinstance(json, dict) else None
        return cls(
            id=str(_require(json, "id")),
            paddle_number=str(paddle_number) if paddle_number is not None else None,
            name=json.get("name"),
        )


@dataclass(slots=True, frozen=True)
class Card:
    """
    Payment card on file
    """

    id: str
    last_digits: str | None = None

    @classmethod
    def from_json(cls, json: Any) -> "Card":
        return cls(id=str(_require(json, "id")), last_digits=json.get("last_digits"))


@dataclass(slots=True, frozen=True)
class BidderPosition:
    """
    The bidder's standing maximum bid on a lot.

    The position is processed asynchronously by the API - until `processed_at` is set, `active` is meaningless.
    """

    id: str
    processed_at: str | None = None
    # True if this position is currently the highest bid on the lot
    active: bool = False

    @property
    def processed(self) -> bool:
        return self.processed_at is not None

    @classmethod
    def from_json(cls, json: Any) -> "BidderPosition":
        return cls(
            id=str(_require(json, "id")),
            processed_at=json.get("processed_at"),
            active=bool(json.get("active", False)),
        )


class ReserveStatus(StrEnum):
    NO_RESERVE = "no_reserve"
    RESERVE_NOT_MET = "reserve_not_met"
    RESERVE_MET = "reserve_met"


@dataclass(slots=True, frozen=True)
class SaleArtwork:
    """
    A lot in an auction
    """

    id: str
    reserve_status: ReserveStatus = ReserveStatus.NO_RESERVE
    highest_bid_amount_cents: int | None = None

    @property
    def reserve_not_met(self) -> bool:
        return self.reserve_status == ReserveStatus.RESERVE_NOT_MET

    @classmethod
    def from_json(cls, json: Any) -> "SaleArtwork":
        artwork_id = _require(json, "id")
        reserve_status = json.get("reserve_status") or ReserveStatus.NO_RESERVE
        return cls(
            id=str(artwork_id),
            reserve_status=ReserveStatus(reserve_status),
            highest_bid_amount_cents=json.get("highest_bid_amount_cents"),
        )
