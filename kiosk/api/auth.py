"""
Per request credentials.

Every request is made with explicitly supplied credentials - there is no shared "logged in" provider.
`None` means the request is made with the kiosk app token only.
"""
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class AccessToken:
    """
    Bearer token obtained by exchanging the user's email and password
    """

    token: str

    def __post_init__(self):
        if not self.token:
            raise ValueError("access token must not be empty")

    def __repr__(self) -> str:
        return "AccessToken(***)"


@dataclass(slots=True, frozen=True)
class BidderPIN:
    """
    Returning bidders authenticate using their phone number and the PIN issued for the auction
    """

    pin: str
    number: str
    auction_id: str

    def __repr__(self) -> str:
        return f"BidderPIN(number={self.number!r}, auction_id={self.auction_id!r})"


Credentials = AccessToken | BidderPIN
