import tempfile
import unittest
from pathlib import Path

from kiosk.config import BiddingConfig, KioskConfig
from tests.test_support import KioskTestCase

CONFIG_TOML = """
[api]
base_url = "https://api.example.com"
xapp_token = "xapp-token"
client_id = "client-id"
client_secret = "client-secret"
timeout_seconds = 5

[bidding]
poll_interval_seconds = 0.5
max_poll_attempts = 10
network_retries = 2
"""


class KioskConfigTestCase(KioskTestCase):
    def test_from_config_file(self):
        with tempfile.TemporaryDirectory() as config_dir:
            config_file = Path(config_dir) / "kiosk.toml"
            config_file.write_text(CONFIG_TOML)

            config = KioskConfig.from_config_file(config_file)

        self.assertEqual("https://api.example.com", config.api.base_url)
        self.assertEqual("xapp-token", config.api.xapp_token)
        self.assertEqual(5.0, config.api.timeout_seconds)
        self.assertEqual(
            BiddingConfig(poll_interval_seconds=0.5, max_poll_attempts=10, network_retries=2),
            config.bidding,
        )

    def test_defaults(self):
        config = KioskConfig.from_dict({"api": {"base_url": "https://api.example.com"}})
        self.assertIsNone(config.api.xapp_token)
        self.assertEqual(15.0, config.api.timeout_seconds)
        self.assertEqual(BiddingConfig(), config.bidding)
        self.assertEqual(20, config.bidding.max_poll_attempts)

    def test_invalid_config(self):
        with self.subTest("base_url is required"):
            with self.assertRaises(ValueError):
                KioskConfig.from_dict({"api": {}})
            with self.assertRaises(ValueError):
                KioskConfig.from_dict({})

        for bidding in [
            {"poll_interval_seconds": -1},
            {"max_poll_attempts": 0},
            {"network_retries": -1},
        ]:
            with self.subTest(bidding=bidding):
                with self.assertRaises(ValueError):
                    KioskConfig.from_dict(
                        {"api": {"base_url": "https://api.example.com"}, "bidding": bidding}
                    )

    def test_secrets_are_masked(self):
        config = KioskConfig.from_dict(
            {
                "api": {
                    "base_url": "https://api.example.com",
                    "xapp_token": "xapp-token",
                    "client_secret": "client-secret",
                }
            }
        )
        self.assertEqual("***", config.to_dict()["api"]["xapp_token"])
        self.assertEqual("***", config.to_dict()["api"]["client_secret"])
        self.assertNotIn("client-secret", repr(config))


if __name__ == "__main__":
    unittest.main()
