"""
httpx based Transport
"""
from typing import Any

import httpx

from kiosk.api.auth import AccessToken, BidderPIN, Credentials
from kiosk.api.endpoints import Endpoint, HttpMethod
from kiosk.api.errors import NetworkFailure
from kiosk.api.transport import Response
from kiosk.config import ApiConfig
from kiosk.core.async_service import AsyncService
from kiosk.core.service import ServiceError


class HttpxTransport(AsyncService):
    """
    Sends requests to the auction API using a pooled `httpx.AsyncClient`.

    The client is created when the service starts and closed when it stops.
    """

    def __init__(
        self,
        config: ApiConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        :param config: API config
        :param transport: overrides the httpx network transport, e.g., `httpx.MockTransport` for testing
        """
        super().__init__()
        self.__config = config
        self.__transport = transport
        self.__client: httpx.AsyncClient | None = None

    async def _start(self):
        headers = {"Accept": "application/json"}
        if self.__config.xapp_token:
            headers["X-Xapp-Token"] = self.__config.xapp_token

        self.__client = httpx.AsyncClient(
            base_url=self.__config.base_url,
            headers=headers,
            timeout=self.__config.timeout_seconds,
            transport=self.__transport,
        )

    async def _stop(self):
        if self.__client is not None:
            await self.__client.aclose()
            self.__client = None

    async def request(
        self,
        endpoint: Endpoint,
        credentials: Credentials | None = None,
    ) -> Response:
        if self.__client is None:
            raise ServiceError(self.name, "transport is not running")

        params: dict[str, Any] = dict(endpoint.params)
        headers: dict[str, str] = {}
        match credentials:
            case AccessToken(token=token):
                headers["X-Access-Token"] = token
            case BidderPIN(pin=pin, number=number, auction_id=auction_id):
                params.update(auction_pin=pin, number=number, sale_id=auction_id)

        if endpoint.name == "XAuth":
            params.update(
                client_id=self.__config.client_id,
                client_secret=self.__config.client_secret,
            )

        try:
            if endpoint.method == HttpMethod.GET:
                response = await self.__client.request(
                    endpoint.method, endpoint.path, params=params, headers=headers
                )
            else:
                response = await self.__client.request(
                    endpoint.method, endpoint.path, json=params, headers=headers
                )
        except httpx.TransportError as err:
            self._logger.warning("%s request failed: %r", endpoint.name, err)
            raise NetworkFailure(f"{endpoint.name} request failed.", err) from err

        self._logger.debug(
            "%s %s -> %s", endpoint.method, endpoint.path, response.status_code
        )
        return Response(response.status_code, self._decode(response))

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
