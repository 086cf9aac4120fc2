"""
Kiosk configuration

Configuration is loaded from a TOML file:

    [api]
    base_url = "https://api.example.com"
    xapp_token = "..."
    client_id = "..."
    client_secret = "..."
    timeout_seconds = 15

    [bidding]
    poll_interval_seconds = 1.0
    max_poll_attempts = 20
    network_retries = 0
"""
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True, frozen=True)
class ApiConfig:
    """
    Auction API connection settings
    """

    base_url: str
    xapp_token: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    timeout_seconds: float = 15.0

    def __repr__(self) -> str:
        return f"ApiConfig(base_url={self.base_url!r}, timeout_seconds={self.timeout_seconds})"


@dataclass(slots=True, frozen=True)
class BiddingConfig:
    """
    Bid placement settings
    """

    # how often the bid position is polled after a bid is placed
    poll_interval_seconds: float = 1.0
    # when exceeded, the bid is reported as submitted but unresolved
    max_poll_attempts: int = 20
    # number of times a step is retried automatically when it fails with a NetworkFailure
    network_retries: int = 0

    def __post_init__(self):
        if self.poll_interval_seconds < 0:
            raise ValueError("poll_interval_seconds must not be negative")
        if self.max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
        if self.network_retries < 0:
            raise ValueError("network_retries must not be negative")


@dataclass(slots=True, frozen=True)
class KioskConfig:
    """
    Kiosk config
    """

    api: ApiConfig
    bidding: BiddingConfig = field(default_factory=BiddingConfig)

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "KioskConfig":
        """
        :exception ValueError: if a required setting is missing
        """
        api = config.get("api")
        if not api or not api.get("base_url"):
            raise ValueError("missing required config: api.base_url")

        return cls(
            api=ApiConfig(
                base_url=api["base_url"],
                xapp_token=api.get("xapp_token"),
                client_id=api.get("client_id"),
                client_secret=api.get("client_secret"),
                timeout_seconds=float(api.get("timeout_seconds", 15.0)),
            ),
            bidding=BiddingConfig(**config.get("bidding", {})),
        )

    @classmethod
    def from_config_file(cls, file: Path) -> "KioskConfig":
        """
        Loads the config from the specified TOML config file
        """
        with open(file, "rb") as config_file:
            config = tomllib.load(config_file)
        return cls.from_dict(config)

    def to_dict(self) -> dict[str, Any]:
        """
        :return: config with secrets masked
        """
        return {
            "api": {
                "base_url": self.api.base_url,
                "xapp_token": "***" if self.api.xapp_token else None,
                "client_id": self.api.client_id,
                "client_secret": "***" if self.api.client_secret else None,
                "timeout_seconds": self.api.timeout_seconds,
            },
            "bidding": {
                "poll_interval_seconds": self.bidding.poll_interval_seconds,
                "max_poll_attempts": self.bidding.max_poll_attempts,
                "network_retries": self.bidding.network_retries,
            },
        }
