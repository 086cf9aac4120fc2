import logging
import unittest
from logging import Logger

from kiosk.services.asyncio.logging_service import AsyncLoggingService

logging_service = AsyncLoggingService(level=logging.DEBUG)


class KioskTestCase(unittest.TestCase):
    maxDiff = None

    def get_logger(self, name: str) -> Logger:
        return logging.getLogger(f"{self.__class__.__name__}.{name}")


class KioskIsolatedAsyncioTestCase(unittest.IsolatedAsyncioTestCase):
    maxDiff = None

    async def asyncSetUp(self) -> None:
        if logging_service.running:
            return
        await logging_service.start()
        await logging_service.await_running()

    def get_logger(self, name: str) -> Logger:
        return logging.getLogger(f"{self.__class__.__name__}.{name}")


if __name__ == "__main__":
    unittest.main()
