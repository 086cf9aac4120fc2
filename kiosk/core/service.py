"""
Service lifecycle states and errors
"""
from dataclasses import dataclass
from enum import IntEnum, auto


class ServiceLifecycleState(IntEnum):
    """
    Service lifecycle states

    Normal service lifecycle: NEW -> STARTING -> RUNNING -> STOPPING -> STOPPED

    A stopped service can be restarted, i.e., STOPPED -> STARTING
    """

    NEW = auto()

    STARTING = auto()

    START_FAILED = auto()

    RUNNING = auto()

    STOPPING = auto()

    STOPPED = auto()


@dataclass(slots=True)
class ServiceError(Exception):
    """
    Service base exception
    """

    service_name: str
    cause: Exception | str

    def __str__(self) -> str:
        return f"[{self.service_name}] [{self.__class__.__name__}] {self.cause}"


class ServiceStartError(ServiceError):
    """
    Service failed to start
    """


class ServiceStopError(ServiceError):
    """
    Error occurred while trying to stop the service.
    """
