"""
Bid fulfillment session state.

A `BidDetails` instance is created when a bidder approaches the kiosk and discarded when the transaction ends.
It accumulates what later steps depend on: credentials, bidder ID and PIN, paddle number, and the bid amount.
"""
from dataclasses import dataclass, field

from ulid import ULID

from kiosk.api.auth import AccessToken, BidderPIN, Credentials


@dataclass(slots=True)
class NewUser:
    """
    Details collected from the person at the kiosk
    """

    # pylint: disable=too-many-instance-attributes

    email: str | None = None
    password: str | None = None
    phone: str | None = None
    post_code: str | None = None
    name: str | None = None

    # Stripe token for a card collected at the kiosk, cleared once attached to the account
    credit_card_token: str | None = None
    swiped_credit_card: bool = False

    # set once the user has been registered as a bidder on the auction, i.e., not when the user account is created
    has_been_registered: bool = False

    def __repr__(self) -> str:
        return (
            f"NewUser(email={self.email!r}, has_card_token={self.credit_card_token is not None}, "
            f"has_been_registered={self.has_been_registered})"
        )


@dataclass(slots=True)
class BidDetails:
    """
    Session state owned by a single kiosk transaction

    Notes
    -----
    - `auction_id` is immutable for the session
    - `bidder_id` and `bidder_pin` are never cleared once set
    - `bidder_id` must be set before a bid can be placed
    """

    # pylint: disable=too-many-instance-attributes

    auction_id: str
    new_user: NewUser = field(default_factory=NewUser)
    # lot being bid on
    artwork_id: str | None = None
    bid_amount_cents: int = 0

    bidder_id: str | None = None
    bidder_pin: str | None = None
    paddle_number: str | None = None

    access_token: str | None = None
    # set when a returning bidder signs in with their phone number and PIN
    pin_credentials: BidderPIN | None = None

    # used to correlate log messages for the transaction
    session_id: ULID = field(default_factory=ULID)

    def __post_init__(self):
        if not self.auction_id:
            raise ValueError("auction_id is required")
        if self.bid_amount_cents < 0:
            raise ValueError("bid_amount_cents must not be negative")

    def __setattr__(self, name, value):
        if name == "auction_id" and getattr(self, "auction_id", None) is not None:
            raise AttributeError("auction_id cannot be changed")
        if name in ("bidder_id", "bidder_pin") and not value and getattr(self, name, None):
            raise AttributeError(f"{name} cannot be cleared")
        object.__setattr__(self, name, value)

    @property
    def authenticated(self) -> bool:
        return self.credentials is not None

    @property
    def credentials(self) -> Credentials | None:
        """
        :return: the access token if present, else the bidder PIN credentials if present, else None
        """
        if self.access_token:
            return AccessToken(self.access_token)
        return self.pin_credentials

    @property
    def created_new_user(self) -> bool:
        return self.new_user.has_been_registered

    def record_bidder(self, bidder_id: str, pin: str | None = None):
        """
        Records the bidder ID, and the PIN if known
        """
        if not bidder_id:
            raise ValueError("bidder_id must not be empty")
        self.bidder_id = bidder_id
        if pin:
            self.bidder_pin = pin

    def __repr__(self) -> str:
        return (
            f"BidDetails(session_id={self.session_id}, auction_id={self.auction_id!r}, "
            f"bidder_id={self.bidder_id!r}, paddle_number={self.paddle_number!r}, "
            f"authenticated={self.authenticated}, bid_amount_cents={self.bid_amount_cents})"
        )
