"""
Transport protocol
"""
from dataclasses import dataclass
from typing import Any, Protocol

from kiosk.api.auth import Credentials
from kiosk.api.endpoints import Endpoint


@dataclass(slots=True, frozen=True)
class Response:
    """
    HTTP response with its decoded body
    """

    status_code: int
    # decoded JSON, or the raw text if the body is not JSON, or None if empty
    body: Any = None

    @property
    def successful(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    """
    Executes requests against the auction API.

    Implementations own timeouts and connection management.
    """

    async def request(
        self,
        endpoint: Endpoint,
        credentials: Credentials | None = None,
    ) -> Response:
        """
        :param endpoint: what to request
        :param credentials: user credentials - None means the request is made with the kiosk app token only
        :return: the response - non-2xx status codes are returned, not raised
        :exception NetworkFailure: if the request could not be completed, e.g., timeout, connection error
        """
        ...
