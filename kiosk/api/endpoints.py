"""
Auction API endpoint descriptors.

An Endpoint describes what is being requested. How it is put on the wire is the transport's concern.
"""
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any


class HttpMethod(StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"


class EndpointAuth(StrEnum):
    """
    Credentials an endpoint requires
    """

    # kiosk app token only
    XAPP = auto()
    # user credentials, i.e., an access token or bidder PIN
    USER = auto()


@dataclass(slots=True, frozen=True)
class Endpoint:
    """
    Endpoint descriptor
    """

    name: str
    method: HttpMethod
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    auth: EndpointAuth = EndpointAuth.USER

    def __repr__(self) -> str:
        # params may contain passwords and card tokens
        return f"Endpoint({self.name}, {self.method} {self.path})"


def find_existing_email_registration(email: str) -> Endpoint:
    """
    404 means no user is registered with the email
    """
    return Endpoint(
        "FindExistingEmailRegistration",
        HttpMethod.GET,
        "/api/v1/user",
        {"email": email},
        EndpointAuth.XAPP,
    )


def create_user(
    email: str, password: str, phone: str, post_code: str, name: str
) -> Endpoint:
    return Endpoint(
        "CreateUser",
        HttpMethod.POST,
        "/api/v1/user",
        {
            "email": email,
            "password": password,
            "phone": phone,
            "location": {"postal_code": post_code},
            "name": name,
        },
        EndpointAuth.XAPP,
    )


def update_me(email: str, phone: str, post_code: str, name: str) -> Endpoint:
    return Endpoint(
        "UpdateMe",
        HttpMethod.PUT,
        "/api/v1/me",
        {
            "email": email,
            "phone": phone,
            "location": {"postal_code": post_code},
            "name": name,
        },
    )


def xauth(email: str, password: str) -> Endpoint:
    """
    Exchanges credentials for an access token. The transport adds the client id and secret.
    """
    return Endpoint(
        "XAuth",
        HttpMethod.GET,
        "/oauth2/access_token",
        {
            "email": email,
            "password": password,
            "grant_type": "credentials",
            "scope": "offline_access",
        },
        EndpointAuth.XAPP,
    )


def register_card(stripe_token: str, swiped: bool) -> Endpoint:
    return Endpoint(
        "RegisterCard",
        HttpMethod.POST,
        "/api/v1/me/credit_cards",
        {"provider": "stripe", "token": stripe_token, "created_by_trusted_client": swiped},
    )


def my_credit_cards() -> Endpoint:
    return Endpoint("MyCreditCards", HttpMethod.GET, "/api/v1/me/credit_cards")


def my_bidders_for_auction(auction_id: str) -> Endpoint:
    return Endpoint(
        "MyBiddersForAuction",
        HttpMethod.GET,
        "/api/v1/me/bidders",
        {"sale_id": auction_id},
    )


def register_to_bid(auction_id: str) -> Endpoint:
    return Endpoint(
        "RegisterToBid",
        HttpMethod.POST,
        "/api/v1/bidder",
        {"sale_id": auction_id},
    )


def create_pin_for_bidder(bidder_id: str) -> Endpoint:
    return Endpoint(
        "CreatePINForBidder",
        HttpMethod.POST,
        f"/api/v1/bidder/{bidder_id}/pin",
    )


def me() -> Endpoint:
    return Endpoint("Me", HttpMethod.GET, "/api/v1/me")


def bidder_details_notification(auction_id: str, identifier: str) -> Endpoint:
    """
    Asks the API to send the bidder number and PIN to the email or phone number registered for the auction
    """
    return Endpoint(
        "BidderDetailsNotification",
        HttpMethod.POST,
        "/api/v1/bidder/bidding_details_notification",
        {"sale_id": auction_id, "identifier": identifier},
        EndpointAuth.XAPP,
    )


def place_a_bid(auction_id: str, artwork_id: str, max_bid_cents: int) -> Endpoint:
    return Endpoint(
        "PlaceABid",
        HttpMethod.POST,
        "/api/v1/me/bidder_position",
        {
            "sale_id": auction_id,
            "artwork_id": artwork_id,
            "max_bid_amount_cents": max_bid_cents,
        },
    )


def my_bid_position(position_id: str) -> Endpoint:
    return Endpoint(
        "MyBidPosition",
        HttpMethod.GET,
        f"/api/v1/me/bidder_position/{position_id}",
    )


def auction_info_for_artwork(auction_id: str, artwork_id: str) -> Endpoint:
    return Endpoint(
        "AuctionInfoForArtwork",
        HttpMethod.GET,
        f"/api/v1/sale/{auction_id}/sale_artwork/{artwork_id}",
        auth=EndpointAuth.XAPP,
    )
