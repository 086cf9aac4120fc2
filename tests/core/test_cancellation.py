import asyncio
import unittest

from reactivex import Subject

from kiosk.core.cancellation import CancellationToken, OperationCancelled
from tests.test_support import KioskIsolatedAsyncioTestCase


class CancellationTokenTestCase(KioskIsolatedAsyncioTestCase):
    async def test_cancel(self):
        token = CancellationToken()
        self.assertFalse(token.cancelled)
        token.raise_if_cancelled()

        token.cancel()
        self.assertTrue(token.cancelled)
        with self.assertRaises(OperationCancelled):
            token.raise_if_cancelled()

    async def test_cancelled_by_observable(self):
        with self.subTest("on_next"):
            signal: Subject[None] = Subject()
            token = CancellationToken.from_observable(signal)
            self.assertFalse(token.cancelled)
            signal.on_next(None)
            await asyncio.wait_for(token.wait(), 1)
            self.assertTrue(token.cancelled)

        with self.subTest("on_completed"):
            signal = Subject()
            token = CancellationToken.from_observable(signal)
            signal.on_completed()
            await asyncio.wait_for(token.wait(), 1)
            self.assertTrue(token.cancelled)

        with self.subTest("signal on the event loop thread cancels immediately"):
            signal = Subject()
            token = CancellationToken.from_observable(signal)
            signal.on_next(None)
            self.assertTrue(token.cancelled)

        with self.subTest("signal that already completed cancels on subscription"):
            signal = Subject()
            signal.on_completed()
            token = CancellationToken.from_observable(signal)
            self.assertTrue(token.cancelled)

        with self.subTest("signal from another thread"):
            signal = Subject()
            token = CancellationToken.from_observable(signal)
            await asyncio.to_thread(signal.on_next, None)
            await asyncio.wait_for(token.wait(), 1)
            self.assertTrue(token.cancelled)

        with self.subTest("disposed token ignores the signal"):
            signal = Subject()
            token = CancellationToken.from_observable(signal)
            token.dispose()
            signal.on_next(None)
            await asyncio.sleep(0.01)
            self.assertFalse(token.cancelled)

    async def test_run(self):
        with self.subTest("result is returned when not cancelled"):
            token = CancellationToken()

            async def answer() -> int:
                await asyncio.sleep(0)
                return 42

            self.assertEqual(42, await token.run(answer()))

        with self.subTest("errors are propagated"):

            async def fail():
                raise ValueError("BOOM!")

            with self.assertRaises(ValueError):
                await token.run(fail())

        with self.subTest("in-flight awaitable is cancelled"):
            token = CancellationToken()
            in_flight_cancelled = asyncio.Event()

            async def hang():
                try:
                    await asyncio.sleep(60)
                except asyncio.CancelledError:
                    in_flight_cancelled.set()
                    raise

            asyncio.get_running_loop().call_later(0.01, token.cancel)
            with self.assertRaises(OperationCancelled):
                await token.run(hang())
            self.assertTrue(in_flight_cancelled.is_set())

        with self.subTest("awaitable is never started when already cancelled"):
            started = False

            async def action():
                nonlocal started
                started = True

            with self.assertRaises(OperationCancelled):
                await token.run(action())
            self.assertFalse(started)

    async def test_sleep(self):
        token = CancellationToken()
        self.assertFalse(await token.sleep(0.01))

        asyncio.get_running_loop().call_later(0.01, token.cancel)
        # wakes up early when cancelled
        self.assertTrue(await asyncio.wait_for(token.sleep(60), 1))


if __name__ == "__main__":
    unittest.main()
