"""
Bid fulfillment error taxonomy

Every error carries the context of the step that failed, e.g., "Registering for Auction Failed.", which is what
the kiosk staff see when they long-press the error message.
"""
from dataclasses import dataclass
from typing import Any


@dataclass
class KioskError(Exception):
    """
    Kiosk base exception
    """

    context: str

    def __str__(self) -> str:
        return self.context


@dataclass
class NetworkFailure(KioskError):
    """
    Transport level failure, e.g., timeout or connectivity.

    The step that failed can be retried - session state that was already updated guards against duplicate
    side effects.
    """

    cause: Exception | str | None = None

    def __str__(self) -> str:
        return f"{self.context} [network failure] {self.cause}"


@dataclass
class ServerRejection(KioskError):
    """
    The API responded with a non-2xx status code
    """

    status_code: int = 0
    # decoded response body
    body: Any = None

    @property
    def detail(self) -> str:
        """
        :return: the human-readable error provided by the server, if any
        """
        if isinstance(self.body, dict):
            for key in ("message", "error_description", "error", "detail"):
                if value := self.body.get(key):
                    return str(value)
        if isinstance(self.body, str):
            return self.body
        return ""

    @property
    def error_type(self) -> str | None:
        if isinstance(self.body, dict) and self.body.get("type"):
            return str(self.body["type"])
        return None

    def __str__(self) -> str:
        return f"{self.context} [{self.status_code}] {self.detail}".rstrip()


class AuthenticationFailure(ServerRejection):
    """
    Credentials or bidder PIN were rejected
    """


class NotAuthenticated(KioskError):
    """
    A request that requires user credentials was attempted before the session was authenticated
    """


class MissingBidder(KioskError):
    """
    Bid placement was attempted before the bidder was registered
    """
