"""
Cooperative cancellation for kiosk transactions.

The UI signals that it no longer wants the result of a transaction (e.g., the screen is being dismissed) by
publishing on an Observable. The signal is bridged into the asyncio event loop, where orchestrators check it
between steps and race each in-flight request against it.
"""
import asyncio
import threading
from contextlib import suppress
from typing import Any, Awaitable, TypeVar

from reactivex import Observable
from reactivex.abc import DisposableBase

T = TypeVar("T")


class OperationCancelled(Exception):
    """
    Raised inside an orchestrator when the cancellation signal fires.
    The in-flight request result, if any, is discarded.
    """


class CancellationToken:
    """
    Cancellation token checked by orchestrators before every request and while awaiting responses.
    """

    def __init__(self):
        self.__event = asyncio.Event()
        self.__subscriptions: list[DisposableBase] = []

    @classmethod
    def from_observable(cls, signal: Observable[Any]) -> "CancellationToken":
        """
        Creates a token that is cancelled the first time `signal` emits or completes.
        """
        token = cls()
        token.cancel_on(signal)
        return token

    def cancel_on(self, signal: Observable[Any]) -> None:
        """
        Cancels the token the first time `signal` emits or completes.

        Must be called from within the running event loop. The Observable may emit on any thread.
        A signal that already fired, or fires on the event loop thread, cancels the token immediately.
        """
        loop = asyncio.get_running_loop()
        loop_thread_id = threading.get_ident()

        def on_signal(_: Any = None) -> None:
            if threading.get_ident() == loop_thread_id:
                self.cancel()
            elif not loop.is_closed():
                loop.call_soon_threadsafe(self.cancel)

        self.__subscriptions.append(
            signal.subscribe(on_next=on_signal, on_completed=on_signal)
        )

    @property
    def cancelled(self) -> bool:
        return self.__event.is_set()

    def cancel(self) -> None:
        self.__event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled

    async def wait(self) -> None:
        await self.__event.wait()

    async def sleep(self, seconds: float) -> bool:
        """
        Sleeps for the specified duration, waking up early if cancelled.

        :return: True if cancelled
        """
        with suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self.__event.wait(), seconds)
        return self.cancelled

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Awaits the result unless the token is cancelled first.

        :exception OperationCancelled: if cancelled before the awaitable completed. The awaitable is cancelled.
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise OperationCancelled

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self.__event.wait())
        try:
            done, _pending = await asyncio.wait(
                {task, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        raise OperationCancelled

    def dispose(self) -> None:
        """
        Unsubscribes from the cancellation signals
        """
        for subscription in self.__subscriptions:
            subscription.dispose()
        self.__subscriptions.clear()
