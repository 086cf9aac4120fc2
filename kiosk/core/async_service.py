"""
Async Service
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import timedelta

from kiosk.core.service import (
    ServiceLifecycleState,
    ServiceStartError,
    ServiceStopError,
)


class AsyncService(ABC):
    """
    Base class for resources that must be started before use and stopped when the kiosk shuts down,
    e.g., the HTTP transport's connection pool.

    Subclasses implement the `_start` and `_stop` hooks.
    """

    def __init__(self):
        self.__state = ServiceLifecycleState.NEW
        self._logger = logging.getLogger(self.__class__.__name__)

        self.__running = asyncio.Event()
        self.__stopped = asyncio.Event()

    @property
    def state(self) -> ServiceLifecycleState:
        return self.__state

    @property
    def running(self) -> bool:
        """
        :return: True is service is running
        """
        return self.__state == ServiceLifecycleState.RUNNING

    @property
    def stopped(self) -> bool:
        """
        :return: True if service is stopped
        """
        return self.__state == ServiceLifecycleState.STOPPED

    @property
    def name(self) -> str:
        """
        By default, the type class name is used.
        """
        return self.__class__.__name__

    async def await_running(self, timeout: timedelta | None = None):
        """
        Used to await the service is running
        """
        if timeout:
            await asyncio.wait_for(self.__running.wait(), timeout.total_seconds())
        else:
            await self.__running.wait()

    async def await_stopped(self, timeout: timedelta | None = None):
        """
        Used to await service shutdown
        """
        if timeout:
            await asyncio.wait_for(self.__stopped.wait(), timeout.total_seconds())
        else:
            await self.__stopped.wait()

    async def start(self):
        """
        Start the service

        Notes
        -----
        - The service can only be started when service state in [NEW, STOPPED]
        - When state is in [RUNNING, STARTING], then this is a noop
        - If the startup hook fails, then the service is stopped to give it a chance to release
          any resources it acquired, and ServiceStartError is raised
        """
        if self.__state in (
            ServiceLifecycleState.RUNNING,
            ServiceLifecycleState.STARTING,
        ):
            return

        if self.__state not in (ServiceLifecycleState.NEW, ServiceLifecycleState.STOPPED):
            raise ServiceStartError(
                self.name,
                f"service cannot be started when state is: {self.__state.name}",
            )

        self.__set_state(ServiceLifecycleState.STARTING)
        try:
            await self._start()
        except Exception as err:
            self.__set_state(ServiceLifecycleState.START_FAILED)
            try:
                await self.stop()
            except ServiceStopError as stop_err:
                self._logger.error("failed to stop after failed start: %s", stop_err)
            raise ServiceStartError(self.name, "error occurred while starting") from err

        self.__set_state(ServiceLifecycleState.RUNNING)

    async def stop(self):
        """
        Stop the service

        Notes
        -----
        - The service can only be stopped when state is in [RUNNING, START_FAILED, NEW]
        - When state in [STOPPED, STOPPING], then this is a noop
        - If the shutdown hook fails, the service is still marked STOPPED and ServiceStopError is raised
        """
        match self.__state:
            case ServiceLifecycleState.STOPPED | ServiceLifecycleState.STOPPING:
                return
            case ServiceLifecycleState.NEW:
                self.__set_state(ServiceLifecycleState.STOPPED)
            case ServiceLifecycleState.STARTING:
                raise ServiceStopError(
                    self.name,
                    f"service cannot be stopped when state is: {self.__state.name}",
                )
            case _:
                self.__set_state(ServiceLifecycleState.STOPPING)
                try:
                    await self._stop()
                except Exception as err:
                    raise ServiceStopError(
                        self.name, "error occurred while stopping"
                    ) from err
                finally:
                    self.__set_state(ServiceLifecycleState.STOPPED)

    def __set_state(self, state: ServiceLifecycleState):
        self._logger.info("state transition: %s -> %s", self.__state.name, state.name)

        self.__state = state

        match state:
            case ServiceLifecycleState.STARTING:
                self.__stopped.clear()
            case ServiceLifecycleState.RUNNING:
                self.__running.set()
            case ServiceLifecycleState.STOPPING:
                self.__running.clear()
            case ServiceLifecycleState.STOPPED:
                self.__running.clear()
                self.__stopped.set()

    @abstractmethod
    async def _start(self):
        """
        Service startup hook
        """

    @abstractmethod
    async def _stop(self):
        """
        Service shutdown hook
        """
