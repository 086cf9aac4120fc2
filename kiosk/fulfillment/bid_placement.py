"""
Bid Placement & Resolution

Runs bidder registration, and then, if a bid is being placed, submits the bid and polls the bidder position until
the API has processed it.
"""
from dataclasses import dataclass
from typing import Any

from reactivex import Observable

from kiosk.api.errors import MissingBidder, ServerRejection
from kiosk.config import BiddingConfig
from kiosk.core.cancellation import CancellationToken, OperationCancelled
from kiosk.core.logging import get_logger
from kiosk.domain.models import BidderPosition
from kiosk.fulfillment.bidder_registration import BidderRegistration
from kiosk.fulfillment.steps import run_step


@dataclass(slots=True, frozen=True)
class BidResolution:
    """
    Terminal state of a kiosk transaction
    """

    placing_bid: bool
    created_new_bidder: bool = False

    # the fields below are only meaningful when placing a bid

    # False means the bid was submitted, but was not processed before polling gave up
    bid_is_resolved: bool = False
    is_highest_bidder: bool = False
    reserve_not_met: bool = False
    position_id: str | None = None

    @property
    def can_place_higher_bid(self) -> bool:
        return self.placing_bid and (not self.is_highest_bidder or self.reserve_not_met)

    @property
    def can_return_to_auction(self) -> bool:
        return (
            self.can_place_higher_bid
            or self.is_highest_bidder
            or (not self.placing_bid and not self.created_new_bidder)
        )


def is_outbid_rejection(error: ServerRejection) -> bool:
    """
    The API rejects a bid that is already below another bidder's maximum bid. This is not a failure: the bid is
    resolved, and the bidder is not the highest bidder.
    """
    if error.status_code != 400:
        return False
    return "outbid" in f"{error.error_type or ''} {error.detail}".lower()


class BidPlacement:
    """
    Bid placement orchestrator - one instance per kiosk transaction
    """

    def __init__(
        self,
        bidder_registration: BidderRegistration,
        placing_bid: bool,
        config: BiddingConfig | None = None,
        actions_complete: Observable[Any] | None = None,
    ):
        """
        :param bidder_registration: bound to the transaction's session
        :param placing_bid: if False, then only bidder registration is performed
        :param config: polling and retry settings
        :param actions_complete: emits or completes when the caller no longer wants the result, e.g., the kiosk
                                 screen is being dismissed
        """
        self.__registration = bidder_registration
        self.__client = bidder_registration.identity_client
        self.__placing_bid = placing_bid
        self.__config = config or BiddingConfig()
        self.__actions_complete = actions_complete
        self._logger = get_logger(self)

    @property
    def placing_bid(self) -> bool:
        return self.__placing_bid

    async def perform_actions(
        self, cancellation: CancellationToken | None = None
    ) -> BidResolution | None:
        """
        :param cancellation: cancelled together with the `actions_complete` signal
        :return: the terminal state, or None if cancelled - session state updated by the steps that completed
                 before cancellation is kept
        :exception KioskError: if registration or bid placement failed
        """
        token = cancellation or CancellationToken()
        if self.__actions_complete is not None:
            token.cancel_on(self.__actions_complete)

        previous_cancellation = self.__client.cancellation
        self.__client.cancellation = token
        try:
            return await self._perform_actions(token)
        except OperationCancelled:
            self._logger.info(
                "[%s] cancelled - result discarded",
                self.__registration.bid_details.session_id,
            )
            return None
        finally:
            self.__client.cancellation = previous_cancellation
            token.dispose()

    async def _perform_actions(self, token: CancellationToken) -> BidResolution:
        await self.__registration.create_or_get_bidder(token)
        created_new_bidder = self.__registration.created_new_user

        if not self.__placing_bid:
            return BidResolution(placing_bid=False, created_new_bidder=created_new_bidder)

        position = await self._place_bid(token)
        if position is None:
            self._logger.info("[%s] outbid", self.__registration.bid_details.session_id)
            return BidResolution(
                placing_bid=True,
                created_new_bidder=created_new_bidder,
                bid_is_resolved=True,
                is_highest_bidder=False,
            )

        return await self._poll_for_resolution(position, created_new_bidder, token)

    async def _place_bid(self, token: CancellationToken) -> BidderPosition | None:
        """
        :return: None if the bid was rejected because the bidder was outbid
        """
        bid_details = self.__registration.bid_details
        if not bid_details.bidder_id:
            raise MissingBidder("Placing bid failed. Bidder is not registered.")
        if not bid_details.artwork_id:
            raise ValueError("artwork_id is required to place a bid")
        if bid_details.bid_amount_cents <= 0:
            raise ValueError("bid_amount_cents must be greater than zero")

        token.raise_if_cancelled()
        try:
            # a bid is never retried automatically - a retry could place a second bid
            position = await token.run(
                self.__client.place_bid(bid_details.artwork_id, bid_details.bid_amount_cents)
            )
        except ServerRejection as err:
            if is_outbid_rejection(err):
                return None
            raise

        self._logger.info(
            "[%s] bid placed: position_id=%s, amount_cents=%s",
            bid_details.session_id,
            position.id,
            bid_details.bid_amount_cents,
        )
        return position

    async def _poll_for_resolution(
        self,
        position: BidderPosition,
        created_new_bidder: bool,
        token: CancellationToken,
    ) -> BidResolution:
        bid_details = self.__registration.bid_details
        artwork_id: str = bid_details.artwork_id  # type: ignore

        for attempt in range(1, self.__config.max_poll_attempts + 1):
            if await token.sleep(self.__config.poll_interval_seconds):
                raise OperationCancelled

            position = await run_step(
                "check bid status",
                lambda: self.__client.fetch_bid_position(position.id),
                token,
                self._logger,
                network_retries=self.__config.network_retries,
            )
            if not position.processed:
                self._logger.debug("bid position not yet processed (attempt %s)", attempt)
                continue

            sale_artwork = await run_step(
                "get lot details",
                lambda: self.__client.fetch_sale_artwork(artwork_id),
                token,
                self._logger,
                network_retries=self.__config.network_retries,
            )
            resolution = BidResolution(
                placing_bid=True,
                created_new_bidder=created_new_bidder,
                bid_is_resolved=True,
                is_highest_bidder=position.active,
                reserve_not_met=sale_artwork.reserve_not_met,
                position_id=position.id,
            )
            self._logger.info(
                "[%s] bid resolved: is_highest_bidder=%s, reserve_not_met=%s",
                bid_details.session_id,
                resolution.is_highest_bidder,
                resolution.reserve_not_met,
            )
            return resolution

        self._logger.warning(
            "[%s] bid position %s was not processed after %s attempts",
            bid_details.session_id,
            position.id,
            self.__config.max_poll_attempts,
        )
        return BidResolution(
            placing_bid=True,
            created_new_bidder=created_new_bidder,
            bid_is_resolved=False,
            position_id=position.id,
        )
