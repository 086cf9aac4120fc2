"""
Bidder Registration

Provisions the person at the kiosk as a bidder on the auction:

1. create the user account, or update it if a user is already registered with the email
2. attach the card collected at the kiosk, if any
3. look up the user's bidder on the auction - if none is found, then register the user to bid and generate a PIN
4. look up the user's paddle number

Each step is gated on the previous step's success. The first failure aborts the sequence and is raised to the
caller. Re-running after a failure is safe: the existence checks and the session state written by the steps that
succeeded prevent duplicate accounts, bidders, and card submissions.
"""
from reactivex import Observable
from reactivex.operators import observe_on
from reactivex.subject import BehaviorSubject

from kiosk.core.cancellation import CancellationToken
from kiosk.core.logging import get_logger
from kiosk.core.rx import default_scheduler
from kiosk.domain.session import BidDetails
from kiosk.fulfillment.steps import run_step
from kiosk.identity.client import IdentityClient


class BidderRegistration:
    """
    Bidder registration orchestrator - one instance per kiosk transaction
    """

    def __init__(self, identity_client: IdentityClient, network_retries: int = 0):
        """
        :param identity_client: bound to the transaction's session
        :param network_retries: number of times a step is retried when it fails with a NetworkFailure
        """
        self.__client = identity_client
        self.__network_retries = network_retries
        self.__in_progress = False
        self._logger = get_logger(self)

        self.__created_new_user_subject: BehaviorSubject[bool] = BehaviorSubject(
            self.bid_details.created_new_user
        )
        self.__created_new_user_observable: Observable[
            bool
        ] = self.__created_new_user_subject.pipe(observe_on(default_scheduler))

    @property
    def identity_client(self) -> IdentityClient:
        return self.__client

    @property
    def bid_details(self) -> BidDetails:
        return self.__client.bid_details

    @property
    def created_new_user(self) -> bool:
        """
        :return: True if the user was registered as a new bidder on the auction during this session
        """
        return self.bid_details.created_new_user

    @property
    def created_new_user_observable(self) -> Observable[bool]:
        """
        Publishes the current value on subscription, and then each time it changes
        """
        return self.__created_new_user_observable

    async def create_or_get_bidder(self, cancellation: CancellationToken | None = None):
        """
        Completes when the bidder is fully provisioned.

        :param cancellation: when cancelled, no further requests are sent and the in-flight request is discarded
        :exception KioskError: the first step failure - carries the step's context
        :exception OperationCancelled: if cancelled
        """
        if self.__in_progress:
            raise RuntimeError("bidder registration is already in progress")

        cancellation = cancellation or CancellationToken()
        previous_cancellation = self.__client.cancellation
        self.__client.cancellation = cancellation
        self.__in_progress = True
        self._logger.info("[%s] registering bidder", self.bid_details.session_id)
        try:
            await self.__run("create or update user", self._create_or_update_user, cancellation)
            await self.__run("add card to user", self.__client.attach_card, cancellation)
            await self.__run("create or get bidder", self._create_or_get_bidder, cancellation)
            await self.__run("get paddle number", self.__client.fetch_paddle_number, cancellation)
        finally:
            self.__in_progress = False
            self.__client.cancellation = previous_cancellation

        self._logger.info(
            "[%s] bidder is provisioned: bidder_id=%s, paddle_number=%s, created_new_user=%s",
            self.bid_details.session_id,
            self.bid_details.bidder_id,
            self.bid_details.paddle_number,
            self.created_new_user,
        )

    async def _create_or_update_user(self):
        bid_details = self.bid_details
        email = bid_details.new_user.email
        if not email and bid_details.pin_credentials is not None:
            # returning bidder signed in with their PIN and did not provide any new details
            self._logger.debug("no user details to push for PIN authenticated bidder")
            return
        if not email:
            raise ValueError("email is required to create or update a user")

        if await self.__client.email_exists(email):
            await self.__client.update_user()
        else:
            await self.__client.create_user()

    async def _create_or_get_bidder(self):
        bid_details = self.bid_details

        if bid_details.bidder_id is None:
            bidders = await self.__client.fetch_bidders_for_auction()
            if bidders:
                bidder = bidders[0]
                bid_details.record_bidder(bidder.id, bidder.pin)
                self._logger.info(
                    "[%s] found existing bidder: %s", bid_details.session_id, bidder.id
                )
                return

            await self.__client.register_to_auction()
            self.__created_new_user_subject.on_next(True)

        # the bidder was registered during this session, but generating the PIN has not succeeded yet
        if bid_details.new_user.has_been_registered and not bid_details.bidder_pin:
            await self.__client.create_pin(bid_details.bidder_id)  # type: ignore

    async def __run(self, name: str, action, cancellation: CancellationToken):
        await run_step(
            name,
            action,
            cancellation,
            self._logger,
            network_retries=self.__network_retries,
        )
