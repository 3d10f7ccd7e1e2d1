"""Wire models for tool calls, function results and execution records."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from toolrunner.foundation.errors import JsonDict


class FunctionCall(BaseModel):
    """Function part of a tool call. `arguments` is raw JSON text.

    An empty name is accepted here and fails later as an unknown function.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    arguments: str = "{}"


class ToolCall(BaseModel):
    """A model-issued request to invoke a named function.

    Example:
        >>> ToolCall.model_validate({"id": "call_1", "function": {"name": "calculate", "arguments": "{}"}})
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    type: Literal["function"] = "function"
    function: FunctionCall

    @classmethod
    def create(cls, call_id: str, name: str, arguments: str = "{}") -> ToolCall:
        return cls(id=call_id, function=FunctionCall(name=name, arguments=arguments))


class FunctionMessage(BaseModel):
    """Normalized function-result message, ready to append to chat history.

    Success and failure share this shape; failures carry the JSON error
    payload in `content`. `is_error` is local metadata and is not serialized.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    role: Literal["function"] = "function"
    name: str
    tool_call_id: str
    content: str
    is_error: bool = Field(default=False, exclude=True)

    def to_dict(self) -> JsonDict:
        """`{"role", "name", "toolCallId", "content"}`"""
        return self.model_dump(by_alias=True)


class ExecutionStatus(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ExecutionEntry(BaseModel):
    """Immutable audit record of one function-call attempt."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=_utcnow)
    function_name: str
    arguments: JsonDict = Field(default_factory=dict)
    status: ExecutionStatus
    result: str | None = None
    error: str | None = None
    error_code: str | None = None
    duration: Annotated[float, Field(ge=0.0)] = 0.0
    call_id: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is ExecutionStatus.SUCCEEDED
