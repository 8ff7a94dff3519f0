"""Status models for the operations a pagination controller runs."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OperationKind(str, Enum):
    """The three operations a consumer can trigger."""

    INITIAL_LOAD = "initial_load"
    REFRESH = "refresh"
    NEXT_PAGE = "next_page"


class OperationStatus(str, Enum):
    """Whether an operation currently has a fetch outstanding."""

    IDLE = "idle"
    IN_FLIGHT = "in_flight"


class OperationState(BaseModel):
    """Immutable snapshot of one operation's status.

    ``last_error`` holds the error of the most recent failed execution and
    is cleared when a new execution starts.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: OperationStatus = OperationStatus.IDLE
    in_flight_count: int = Field(
        default=0,
        ge=0,
        description="Executions started but not yet completed",
    )
    last_error: Exception | None = Field(
        default=None,
        description="Error raised by the most recent failed execution",
    )

    @property
    def is_in_flight(self) -> bool:
        return self.status is OperationStatus.IN_FLIGHT
