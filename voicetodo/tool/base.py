import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr

# Loosely-typed tool argument: string | number | boolean | null
ArgValue = Union[StrictStr, StrictBool, StrictInt, StrictFloat, None]
ToolArguments = dict[str, ArgValue]

PERMISSION_DENIED_MESSAGE = "Permission denied by user"


class ToolCallStatus(str, Enum):
    """Lifecycle status of a tool call"""

    PENDING_APPROVAL = "pending_approval"  # Waiting for user to approve/deny
    EXECUTING = "executing"  # Approved, first attempt running
    RETRYING = "retrying"  # Transient failure, retry attempt running
    SUCCESS = "success"
    FAILED = "failed"  # Fatal failure or retries exhausted
    DENIED = "denied"  # User denied

    @property
    def is_terminal(self) -> bool:
        return self in (
            ToolCallStatus.SUCCESS,
            ToolCallStatus.FAILED,
            ToolCallStatus.DENIED,
        )


class ToolCallRequest(BaseModel):
    """An intent to invoke a named tool. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    tool_name: str = Field(min_length=1)
    arguments: ToolArguments = Field(default_factory=dict)


@dataclass(frozen=True)
class ToolCallOutcome:
    """Terminal result of one tool call"""

    success: bool
    result: str | None = None  # Tool-defined payload on success
    error: str | None = None  # Diagnostic on failure
    retry_count: int = 0
    permission_denied: bool = False

    def __post_init__(self) -> None:
        if not self.success and not self.error:
            raise ValueError("Failed ToolCallOutcome requires an error message")

    @classmethod
    def succeeded(cls, result: str, retry_count: int = 0) -> "ToolCallOutcome":
        return cls(success=True, result=result, retry_count=retry_count)

    @classmethod
    def failed(cls, error: str, retry_count: int = 0) -> "ToolCallOutcome":
        return cls(success=False, error=error, retry_count=retry_count)

    @classmethod
    def denied(cls) -> "ToolCallOutcome":
        return cls(
            success=False,
            error=PERMISSION_DENIED_MESSAGE,
            permission_denied=True,
        )

    @property
    def status(self) -> ToolCallStatus:
        if self.success:
            return ToolCallStatus.SUCCESS
        if self.permission_denied:
            return ToolCallStatus.DENIED
        return ToolCallStatus.FAILED


def format_arg_value(value: Any) -> str:
    """Render an argument value for display and audit storage."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class ToolCallRecord:
    """
    Snapshot of a tool call at one lifecycle status.

    Published to lifecycle hooks and completion subscribers; the
    conversation layer renders and persists it.
    """

    id: str
    tool_name: str
    arguments: ToolArguments
    status: ToolCallStatus
    result: str | None = None  # Result on success, error text otherwise
    approved: bool = False
    denied: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_request(
        cls,
        request: ToolCallRequest,
        status: ToolCallStatus,
        result: str | None = None,
        approved: bool = False,
        denied: bool = False,
    ) -> "ToolCallRecord":
        return cls(
            id=request.id,
            tool_name=request.tool_name,
            arguments=dict(request.arguments),
            status=status,
            result=result,
            approved=approved,
            denied=denied,
        )

    def arguments_for_display(self) -> dict[str, str]:
        return {k: format_arg_value(v) for k, v in self.arguments.items()}


class BaseTool(ABC):
    """Common interface that every concrete tool must implement."""

    def __init__(self) -> None:
        self.name = self.get_name()
        self.description = self.get_description()

    @abstractmethod
    def get_name(self) -> str:
        """Return the tool name."""

    @abstractmethod
    def get_description(self) -> str:
        """Return the tool description used for prompting."""

    @abstractmethod
    def get_parameters(self) -> dict[str, Any]:
        """Return the JSON schema describing `execute` parameters."""

    @abstractmethod
    async def execute(self, parameters: dict[str, Any]) -> str:
        """
        Run the tool and return a human-readable result.

        Raise an exception to report failure; its message decides whether
        the call is retried.
        """

    def to_openai_schema(self) -> dict:
        """Convert to OpenAI function calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.get_parameters(),
            },
        }
