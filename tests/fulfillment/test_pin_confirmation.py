import asyncio
import unittest

from kiosk.api.errors import AuthenticationFailure
from kiosk.domain.session import BidDetails, NewUser
from kiosk.fulfillment.outcome import is_wrong_pin
from kiosk.fulfillment.pin_confirmation import PINConfirmation
from kiosk.identity.client import IdentityClient
from tests.support.transport import StubTransport, ok, status
from tests.test_support import KioskIsolatedAsyncioTestCase


def pin_confirmation(transport: StubTransport, email: str | None = None) -> PINConfirmation:
    bid_details = BidDetails(
        auction_id="auction-1",
        new_user=NewUser(email=email, phone="555-0100"),
    )
    return PINConfirmation(IdentityClient(transport, bid_details))


class PINConfirmationTestCase(KioskIsolatedAsyncioTestCase):
    async def test_confirm(self):
        transport = StubTransport(
            Me=ok({"id": "user-1", "paddle_number": "909"}),
            MyCreditCards=ok([{"id": "card-1"}]),
        )
        confirmation = pin_confirmation(transport)
        confirmation.pin_entry = "9999"

        result = await confirmation.confirm()

        self.assertEqual("user-1", result.user.id)
        self.assertFalse(result.needs_card)
        self.assertEqual(["Me", "MyCreditCards"], transport.names)
        self.assertEqual("9999", transport.last("Me")[1].pin)

    async def test_confirm_pushes_new_details(self):
        transport = StubTransport(
            Me=ok({"id": "user-1"}),
            UpdateMe=ok({"id": "user-1"}),
            MyCreditCards=ok([]),
        )
        confirmation = pin_confirmation(transport, email="alice@example.com")

        result = await confirmation.confirm("9999")

        self.assertTrue(result.needs_card)
        self.assertEqual(["Me", "UpdateMe", "MyCreditCards"], transport.names)

    async def test_wrong_pin_resets_the_entry(self):
        transport = StubTransport(Me=status(401))
        confirmation = pin_confirmation(transport)
        confirmation.pin_entry = "0000"

        resets: list[None] = []
        confirmation.resets.subscribe(resets.append)

        with self.assertRaises(AuthenticationFailure) as err:
            await confirmation.confirm()

        self.assertTrue(is_wrong_pin(err.exception))
        self.assertEqual("", confirmation.pin_entry)
        for _ in range(100):
            if resets:
                break
            await asyncio.sleep(0.01)
        self.assertEqual([None], resets)

    async def test_forgot_pin(self):
        transport = StubTransport(BidderDetailsNotification=ok())
        confirmation = pin_confirmation(transport)

        await confirmation.forgot_pin()

        endpoint, _ = transport.last("BidderDetailsNotification")
        self.assertEqual("555-0100", endpoint.params["identifier"])


if __name__ == "__main__":
    unittest.main()
