"""
Identity Client

Wraps the auction API requests made on behalf of the person at the kiosk. Each operation is a single request,
apart from the authentication gates, which exchange credentials for an access token first.

The client owns the authentication state of the session: the access token obtained by `authenticate()` and the
PIN credentials obtained by `authenticate_with_pin()` are stored on the session's `BidDetails` and used for every
request that requires user credentials.
"""
from typing import Any, Callable, TypeVar

from kiosk.api import endpoints
from kiosk.api.auth import AccessToken, BidderPIN, Credentials
from kiosk.api.endpoints import Endpoint, EndpointAuth
from kiosk.api.errors import (
    AuthenticationFailure,
    NetworkFailure,
    NotAuthenticated,
    ServerRejection,
)
from kiosk.api.transport import Response, Transport
from kiosk.core.cancellation import CancellationToken
from kiosk.core.logging import get_logger
from kiosk.domain.models import Bidder, BidderPosition, Card, SaleArtwork, User
from kiosk.domain.session import BidDetails

T = TypeVar("T")

# status codes returned when credentials are rejected
AUTH_FAILURE_STATUS_CODES = (401, 403)


class IdentityClient:
    """
    Auction API client bound to a single kiosk session
    """

    def __init__(self, transport: Transport, bid_details: BidDetails):
        self.__transport = transport
        self.__bid_details = bid_details
        self._logger = get_logger(self)
        # when cancelled, no further requests are sent
        self.cancellation: CancellationToken | None = None

    @property
    def bid_details(self) -> BidDetails:
        return self.__bid_details

    # ---------- users ----------

    async def email_exists(self, email: str) -> bool:
        """
        :return: False if the API responds 404 for the email, True for any 2xx response
        :exception ServerRejection: for any other status code
        """
        context = "Checking for an existing user failed."
        response = await self._send(
            endpoints.find_existing_email_registration(email), context
        )
        if response.status_code == 404:
            return False
        if not response.successful:
            raise self._rejection(context, response)
        return True

    async def create_user(self):
        """
        Creates the user account from the details collected at the kiosk, and then authenticates the new user.
        """
        new_user = self.__bid_details.new_user
        if not (new_user.email and new_user.password and new_user.phone):
            raise ValueError("email, password, and phone are required to create a user")

        await self._request(
            endpoints.create_user(
                email=new_user.email,
                password=new_user.password,
                phone=new_user.phone,
                post_code=new_user.post_code or "",
                name=new_user.name or "",
            ),
            "Creating user failed.",
        )
        self._logger.info("[%s] user created", self.__bid_details.session_id)
        await self.authenticate()

    async def update_user(self):
        """
        Pushes the details collected at the kiosk to the user's account.
        The session is authenticated first, if necessary.
        """
        new_user = self.__bid_details.new_user
        if not (new_user.email and new_user.phone):
            raise ValueError("email and phone are required to update a user")

        await self.authenticate_if_necessary()
        await self._request(
            endpoints.update_me(
                email=new_user.email,
                phone=new_user.phone,
                post_code=new_user.post_code or "",
                name=new_user.name or "",
            ),
            "Updating user failed.",
        )
        self._logger.info("[%s] user updated", self.__bid_details.session_id)

    # ---------- authentication ----------

    async def authenticate(
        self, email: str | None = None, password: str | None = None
    ) -> str:
        """
        Exchanges credentials for an access token, which is stored on the session.

        :param email: defaults to the session's email
        :param password: defaults to the session's password
        :return: access token
        :exception AuthenticationFailure: if the credentials were rejected
        """
        context = "Getting Access Token failed."
        email = email or self.__bid_details.new_user.email
        password = password or self.__bid_details.new_user.password
        if not (email and password):
            raise NotAuthenticated(f"{context} Email and password are required.")

        body = await self._request(
            endpoints.xauth(email, password), context, auth_failure=True
        )
        access_token = body.get("access_token") if isinstance(body, dict) else None
        if not access_token:
            self._logger.error("%s response did not contain an access token", context)
            raise ServerRejection(context, 200, body)

        self.__bid_details.access_token = access_token
        self._logger.info("[%s] authenticated", self.__bid_details.session_id)
        return access_token

    async def authenticate_if_necessary(self):
        """
        Authenticates using the session's email and password, unless the session already holds credentials.
        """
        if not self.__bid_details.authenticated:
            await self.authenticate()

    async def authenticate_with_pin(self, pin: str) -> User:
        """
        Returning bidders sign in with the phone number on file and their auction PIN.
        On success, the PIN credentials are used for all subsequent requests.

        :exception AuthenticationFailure: wrong PIN or phone number
        """
        if not pin:
            raise ValueError("pin must not be empty")

        credentials = BidderPIN(
            pin=pin,
            number=self.__bid_details.new_user.phone or "",
            auction_id=self.__bid_details.auction_id,
        )
        user = await self._request(
            endpoints.me(),
            "Authenticating with PIN failed.",
            parse=User.from_json,
            credentials=credentials,
            auth_failure=True,
        )
        self.__bid_details.pin_credentials = credentials
        self.__bid_details.bidder_pin = pin
        self._logger.info("[%s] authenticated with PIN", self.__bid_details.session_id)
        return user

    # ---------- cards ----------

    async def attach_card(self) -> bool:
        """
        Attaches the card collected at the kiosk to the user's account.

        Notes
        -----
        - If there is no pending card token, then this is a noop, i.e., the user already has a card on file or the
          card was already attached by a previous attempt.
        - The pending card token is cleared only after the card was successfully attached.

        :return: True if a card was attached
        """
        new_user = self.__bid_details.new_user
        token = new_user.credit_card_token
        if not token:
            return False

        await self._request(
            endpoints.register_card(token, new_user.swiped_credit_card),
            "Adding Card to User failed.",
        )
        new_user.credit_card_token = None
        self._logger.info("[%s] card attached", self.__bid_details.session_id)
        return True

    async def fetch_credit_cards(self) -> list[Card]:
        body = await self._request(
            endpoints.my_credit_cards(), "Getting credit cards failed."
        )
        return self._parse_list("Getting credit cards failed.", body, Card.from_json)

    # ---------- bidders ----------

    async def fetch_bidders_for_auction(self, auction_id: str | None = None) -> list[Bidder]:
        """
        :param auction_id: defaults to the session's auction
        :return: the authenticated user's bidders registered on the auction
        """
        context = "Getting user bidders failed."
        body = await self._request(
            endpoints.my_bidders_for_auction(auction_id or self.__bid_details.auction_id),
            context,
        )
        return self._parse_list(context, body, Bidder.from_json)

    async def register_to_auction(self) -> Bidder:
        """
        Registers the user as a bidder on the session's auction
        """
        bidder = await self._request(
            endpoints.register_to_bid(self.__bid_details.auction_id),
            "Registering for Auction Failed.",
            parse=Bidder.from_json,
        )
        self.__bid_details.record_bidder(bidder.id)
        self.__bid_details.new_user.has_been_registered = True
        self._logger.info(
            "[%s] registered bidder: %s", self.__bid_details.session_id, bidder.id
        )
        return bidder

    async def create_pin(self, bidder_id: str) -> str:
        context = "Generating a PIN for bidder has failed."
        body = await self._request(endpoints.create_pin_for_bidder(bidder_id), context)
        pin = body.get("pin") if isinstance(body, dict) else None
        if not pin:
            self._logger.error("%s response did not contain a PIN", context)
            raise ServerRejection(context, 200, body)

        self.__bid_details.bidder_pin = str(pin)
        return str(pin)

    async def fetch_paddle_number(self) -> str | None:
        user = await self._request(
            endpoints.me(), "Getting paddle number failed.", parse=User.from_json
        )
        self.__bid_details.paddle_number = user.paddle_number
        return user.paddle_number

    async def send_bidder_details(self, identifier: str, auction_id: str | None = None):
        """
        Asks the API to send the bidder number and PIN to the bidder's registered email or phone
        """
        await self._request(
            endpoints.bidder_details_notification(
                auction_id or self.__bid_details.auction_id, identifier
            ),
            "Sending bidder details failed.",
        )

    # ---------- bidding ----------

    async def place_bid(self, artwork_id: str, max_bid_cents: int) -> BidderPosition:
        return await self._request(
            endpoints.place_a_bid(self.__bid_details.auction_id, artwork_id, max_bid_cents),
            "Placing bid failed.",
            parse=BidderPosition.from_json,
        )

    async def fetch_bid_position(self, position_id: str) -> BidderPosition:
        return await self._request(
            endpoints.my_bid_position(position_id),
            "Checking bid status failed.",
            parse=BidderPosition.from_json,
        )

    async def fetch_sale_artwork(self, artwork_id: str) -> SaleArtwork:
        return await self._request(
            endpoints.auction_info_for_artwork(self.__bid_details.auction_id, artwork_id),
            "Getting lot details failed.",
            parse=SaleArtwork.from_json,
        )

    # ---------- helpers ----------

    async def _request(
        self,
        endpoint: Endpoint,
        context: str,
        parse: Callable[[Any], T] | None = None,
        credentials: Credentials | None = None,
        auth_failure: bool = False,
    ) -> Any:
        """
        Sends the request and rejects any non-2xx response.

        :param parse: if specified, then the response body is parsed - a body that cannot be parsed is rejected
        :param credentials: overrides the session credentials
        :param auth_failure: if True, then 401 and 403 are raised as AuthenticationFailure
        """
        response = await self._send(endpoint, context, credentials)
        if not response.successful:
            raise self._rejection(context, response, auth_failure)

        if parse is None:
            return response.body
        try:
            return parse(response.body)
        except (ValueError, AttributeError) as err:
            self._logger.error("%s unexpected response: %s", context, err)
            raise ServerRejection(context, response.status_code, response.body) from err

    async def _send(
        self,
        endpoint: Endpoint,
        context: str,
        credentials: Credentials | None = None,
    ) -> Response:
        if credentials is None and endpoint.auth == EndpointAuth.USER:
            credentials = self.__bid_details.credentials
            if credentials is None:
                raise NotAuthenticated(context)

        response = await self._transport_request(endpoint, context, credentials)

        # an expired access token is replaced and the request is retried once
        if (
            response.status_code == 401
            and isinstance(credentials, AccessToken)
            and self.__bid_details.new_user.password
        ):
            self._logger.info(
                "[%s] access token was rejected by %s - re-authenticating",
                self.__bid_details.session_id,
                endpoint.name,
            )
            self.__bid_details.access_token = None
            token = await self.authenticate()
            response = await self._transport_request(
                endpoint, context, AccessToken(token)
            )

        return response

    async def _transport_request(
        self,
        endpoint: Endpoint,
        context: str,
        credentials: Credentials | None,
    ) -> Response:
        """
        :exception OperationCancelled: if the client's cancellation token is cancelled
        """
        if self.cancellation is not None:
            self.cancellation.raise_if_cancelled()
        try:
            return await self.__transport.request(endpoint, credentials)
        except NetworkFailure as err:
            self._logger.error("%s %s", context, err.cause)
            raise NetworkFailure(context, err.cause) from err

    def _rejection(
        self, context: str, response: Response, auth_failure: bool = False
    ) -> ServerRejection:
        error_class = (
            AuthenticationFailure
            if auth_failure and response.status_code in AUTH_FAILURE_STATUS_CODES
            else ServerRejection
        )
        rejection = error_class(context, response.status_code, response.body)
        self._logger.error(
            "%s status=%s detail=%s", context, response.status_code, rejection.detail
        )
        return rejection

    def _parse_list(
        self, context: str, body: Any, parse: Callable[[Any], T]
    ) -> list[T]:
        if not isinstance(body, list):
            self._logger.error("%s expected a JSON array", context)
            raise ServerRejection(context, 200, body)
        try:
            return [parse(item) for item in body]
        except ValueError as err:
            self._logger.error("%s unexpected response: %s", context, err)
            raise ServerRejection(context, 200, body) from err
