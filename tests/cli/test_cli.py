import json
import logging
import unittest
from pathlib import Path

from click.testing import CliRunner, Result

from kiosk.cli.main import kiosk
from tests.support.transport import (
    StubTransport,
    new_bidder_transport,
    ok,
    returning_bidder_transport,
    status,
)
from tests.test_support import KioskTestCase

CONFIG_TOML = """
[api]
base_url = "https://api.example.com"
xapp_token = "xapp-token"
client_id = "client-id"
client_secret = "client-secret"

[bidding]
poll_interval_seconds = 0
max_poll_attempts = 3
"""

USER_ARGS = [
    "--auction",
    "auction-1",
    "--email",
    "alice@example.com",
    "--password",
    "secret",
    "--phone",
    "555-0100",
]


class KioskCliTestCase(KioskTestCase):
    def setUp(self) -> None:
        self.root_handlers = logging.getLogger().handlers[:]
        self.root_level = logging.getLogger().level

    def tearDown(self) -> None:
        # the CLI points the root logger at the runner's output stream
        root = logging.getLogger()
        root.handlers.clear()
        root.setLevel(self.root_level)
        for handler in self.root_handlers:
            root.addHandler(handler)

    def invoke(self, transport: StubTransport | None, *args: str) -> Result:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("kiosk.toml").write_text(CONFIG_TOML)
            return runner.invoke(
                kiosk,
                ["--config-file", "kiosk.toml", *args],
                obj={"transport_factory": lambda config: transport},
            )

    def test_show_config(self):
        result = self.invoke(None, "show-config")
        self.assertEqual(0, result.exit_code, result.output)
        config = json.loads(result.output)
        self.assertEqual("https://api.example.com", config["api"]["base_url"])
        self.assertEqual("***", config["api"]["client_secret"])
        self.assertEqual(3, config["bidding"]["max_poll_attempts"])

    def test_register(self):
        with self.subTest("new bidder"):
            result = self.invoke(new_bidder_transport(), "register", *USER_ARGS)
            self.assertEqual(0, result.exit_code, result.output)
            lines = result.output.splitlines()
            self.assertEqual("registered", lines[0])
            self.assertIn("bidder_id: bidder-1", lines)
            self.assertIn("paddle_number: 101", lines)
            self.assertIn("pin: 1234", lines)

        with self.subTest("existing bidder"):
            result = self.invoke(returning_bidder_transport(), "register", *USER_ARGS)
            self.assertEqual(0, result.exit_code, result.output)
            lines = result.output.splitlines()
            self.assertEqual("updated", lines[0])
            self.assertIn("bidder_id: bidder-9", lines)
            self.assertNotIn("pin: 9999", lines)

        with self.subTest("registration failure"):
            transport = new_bidder_transport(CreateUser=status(500, {"message": "BOOM!"}))
            result = self.invoke(transport, "register", *USER_ARGS)
            self.assertEqual(1, result.exit_code)
            self.assertIn("registration_failed", result.output)
            self.assertIn("Creating user failed.", result.output)

    def test_bid(self):
        transport = returning_bidder_transport(
            PlaceABid=ok({"id": "position-1"}),
            MyBidPosition=ok({"id": "position-1", "processed_at": "now", "active": True}),
            AuctionInfoForArtwork=ok({"id": "artwork-1", "reserve_status": "no_reserve"}),
        )
        result = self.invoke(
            transport,
            "bid",
            *USER_ARGS,
            "--artwork",
            "artwork-1",
            "--amount-cents",
            "500",
        )
        self.assertEqual(0, result.exit_code, result.output)
        self.assertEqual("highest_bidder", result.output.splitlines()[0])
        self.assertEqual(500, transport.last("PlaceABid")[0].params["max_bid_amount_cents"])

        with self.subTest("bid failure"):
            transport = returning_bidder_transport(
                PlaceABid=status(400, {"message": "Sale is closed"}),
            )
            result = self.invoke(
                transport,
                "bid",
                *USER_ARGS,
                "--artwork",
                "artwork-1",
                "--amount-cents",
                "500",
            )
            self.assertEqual(1, result.exit_code)
            self.assertIn("bid_failed", result.output)
            self.assertIn("Sale is closed", result.output)

    def test_send_bidder_details(self):
        transport = StubTransport(BidderDetailsNotification=ok())
        result = self.invoke(
            transport, "send-bidder-details", "--auction", "auction-1", "555-0100"
        )
        self.assertEqual(0, result.exit_code, result.output)
        self.assertIn("Your details have been sent", result.output)

        with self.subTest("identifier is required"):
            result = self.invoke(
                StubTransport(), "send-bidder-details", "--auction", "auction-1", " "
            )
            self.assertEqual(1, result.exit_code)


if __name__ == "__main__":
    unittest.main()
