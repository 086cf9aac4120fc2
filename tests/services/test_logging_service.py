import logging
import threading
import unittest
from logging import LogRecord
from logging.handlers import QueueHandler

from kiosk.services.asyncio.logging_service import AsyncLoggingService

logger = logging.getLogger(__name__)


class FooLogHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        # (message, name of the thread that handled the record)
        self.records: list[tuple[str, str]] = []

    def emit(self, record: LogRecord) -> None:
        self.records.append((record.getMessage(), threading.current_thread().name))


class LoggingServiceWithHandlersTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.handler = FooLogHandler()
        self.logging_service = AsyncLoggingService(
            level=logging.DEBUG, handlers=[self.handler]
        )
        await self.logging_service.start()
        await self.logging_service.await_running()

    async def asyncTearDown(self) -> None:
        await self.logging_service.stop()
        await self.logging_service.await_stopped()

    async def test_records_are_handled_off_the_event_loop_thread(self):
        root = logging.getLogger()
        self.assertEqual(1, len(root.handlers))
        self.assertIsInstance(root.handlers[0], QueueHandler)

        logger.info("Ciao Mundo!")

        await self.logging_service.stop()
        threads = [thread for message, thread in self.handler.records if message == "Ciao Mundo!"]
        self.assertEqual(1, len(threads))
        self.assertNotEqual(threading.current_thread().name, threads[0])

        with self.subTest("handlers are restored when the service is stopped"):
            self.assertEqual([self.handler], logging.getLogger().handlers)


if __name__ == "__main__":
    unittest.main()
