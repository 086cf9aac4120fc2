"""
Returning bidders confirm their identity with the phone number on file and their auction PIN.
"""
from dataclasses import dataclass

from reactivex import Observable, Subject
from reactivex.operators import observe_on

from kiosk.api.errors import AuthenticationFailure
from kiosk.core.logging import get_logger
from kiosk.core.rx import default_scheduler
from kiosk.domain.models import User
from kiosk.identity.client import IdentityClient


@dataclass(slots=True, frozen=True)
class PINConfirmationResult:
    user: User
    # True if the account has no card on file, i.e., a card must be collected before bidding
    needs_card: bool


class PINConfirmation:
    """
    Confirms the PIN entered on the kiosk keypad.

    When the PIN is rejected, the keypad entry is reset and an event is published on `resets`.
    The session state collected so far is kept.
    """

    def __init__(self, identity_client: IdentityClient):
        self.__client = identity_client
        self._logger = get_logger(self)
        self.pin_entry = ""

        self.__resets: Subject[None] = Subject()
        self.__resets_observable: Observable[None] = self.__resets.pipe(
            observe_on(default_scheduler)
        )

    @property
    def resets(self) -> Observable[None]:
        return self.__resets_observable

    async def confirm(self, pin: str | None = None) -> PINConfirmationResult:
        """
        1. sign in with the phone number and PIN
        2. push the details collected at the kiosk to the user's account
        3. check whether the account has a card on file

        :param pin: defaults to the keypad entry
        :exception AuthenticationFailure: wrong PIN
        """
        pin = self.pin_entry if pin is None else pin
        try:
            user = await self.__client.authenticate_with_pin(pin)
        except AuthenticationFailure:
            self._logger.info(
                "[%s] wrong PIN", self.__client.bid_details.session_id
            )
            self.reset_entry()
            raise

        if self.__client.bid_details.new_user.email:
            await self.__client.update_user()

        cards = await self.__client.fetch_credit_cards()
        return PINConfirmationResult(user=user, needs_card=not cards)

    def reset_entry(self):
        self.pin_entry = ""
        self.__resets.on_next(None)

    async def forgot_pin(self):
        """
        Sends the bidder details to the phone number collected at the kiosk
        """
        await self.__client.send_bidder_details(
            self.__client.bid_details.new_user.phone or ""
        )
        self._logger.info(
            "[%s] sent forgot PIN request", self.__client.bid_details.session_id
        )
