"""
Message Models

Tagged-union chat log entries recorded during an agent run, and the
agent status values owned by the conversation state.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union, get_args
from pydantic import BaseModel, ConfigDict, Field


AgentStatus = Literal["idle", "loading", "reviewingToolCall", "error"]

AGENT_STATUSES: tuple[str, ...] = get_args(AgentStatus)


class _ChatMessageBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=datetime.utcnow, description="When the message was recorded")


class UserChatMessage(_ChatMessageBase):
    """Request from the user (or the orchestrator speaking for them)."""

    type: Literal["user"] = "user"
    text: str
    context: Optional[str] = Field(default=None, description="Additional context supplied with the request")
    selection: Optional[str] = Field(default=None, description="Editor selection the request refers to")


class AiChatMessage(_ChatMessageBase):
    """Free text produced by the model."""

    type: Literal["ai"] = "ai"
    text: str


class ToolCallChatMessage(_ChatMessageBase):
    """A tool invocation proposed by the model."""

    type: Literal["toolCall"] = "toolCall"
    tool_name: str
    tool_call_id: str
    arguments: Any = None


class ToolCallResultChatMessage(_ChatMessageBase):
    """The string result a tool handed back to the model."""

    type: Literal["toolCallResult"] = "toolCallResult"
    tool_name: str
    tool_call_id: str
    result: str
    is_error: bool = False


class CheckpointChatMessage(_ChatMessageBase):
    """Marker that a checkpoint was taken at this point of the log."""

    type: Literal["checkpoint"] = "checkpoint"
    checkpoint_id: str
    metadata: dict[str, Any] = Field(default_factory=dict)


ChatMessage = Annotated[
    Union[
        UserChatMessage,
        AiChatMessage,
        ToolCallChatMessage,
        ToolCallResultChatMessage,
        CheckpointChatMessage,
    ],
    Field(discriminator="type"),
]


class ConversationSummary(BaseModel):
    total_messages: int
    user_messages: int
    ai_messages: int
    tool_calls: int
    tool_errors: int
    checkpoints: int


# Factory Functions

def create_user_message(
    text: str,
    context: Optional[str] = None,
    selection: Optional[str] = None,
) -> UserChatMessage:
    return UserChatMessage(text=text, context=context or None, selection=selection or None)


def create_ai_message(text: str) -> AiChatMessage:
    return AiChatMessage(text=text)


def create_tool_call(tool_name: str, tool_call_id: str, arguments: Any) -> ToolCallChatMessage:
    return ToolCallChatMessage(tool_name=tool_name, tool_call_id=tool_call_id, arguments=arguments)


def create_tool_call_result(
    tool_name: str,
    tool_call_id: str,
    result: str,
    is_error: bool = False,
) -> ToolCallResultChatMessage:
    return ToolCallResultChatMessage(
        tool_name=tool_name,
        tool_call_id=tool_call_id,
        result=result,
        is_error=is_error,
    )
