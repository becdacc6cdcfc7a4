"""
Conversation State

Owns the append-only chat log, the agent status and a free-form metadata
side channel (plan, final summary, course metadata) used by tools.
"""

import logging
from typing import Any, Optional
from pydantic import BaseModel, Field

from lesson_agent.exceptions import StateValidationError
from lesson_agent.models.checkpoint import Checkpoint
from lesson_agent.models.messages import (
    AGENT_STATUSES,
    AgentStatus,
    AiChatMessage,
    ChatMessage,
    CheckpointChatMessage,
    ConversationSummary,
    ToolCallChatMessage,
    ToolCallResultChatMessage,
    UserChatMessage,
    create_ai_message,
    create_tool_call,
    create_tool_call_result,
    create_user_message,
)


logger = logging.getLogger(__name__)


class ConversationState(BaseModel):
    """
    Chat log + agent status.

    Status semantics (no enforced transition table):
    - idle: no request in flight
    - loading: request in flight
    - reviewingToolCall: paused, awaiting external approval of a tool call
    - error: last run failed
    """

    status: AgentStatus = "idle"
    messages: list[ChatMessage] = Field(default_factory=list)
    checkpoint_ids: list[str] = Field(default_factory=list)
    current_checkpoint_id: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def add_user_message(
        self,
        text: str,
        context: Optional[str] = None,
        selection: Optional[str] = None,
    ) -> UserChatMessage:
        message = create_user_message(text, context=context, selection=selection)
        self.messages.append(message)
        return message

    def add_ai_message(self, text: str) -> AiChatMessage:
        message = create_ai_message(text)
        self.messages.append(message)
        return message

    def add_tool_call(self, tool_name: str, tool_call_id: str, arguments: Any) -> ToolCallChatMessage:
        message = create_tool_call(tool_name, tool_call_id, arguments)
        self.messages.append(message)
        return message

    def add_tool_call_result(
        self,
        tool_name: str,
        tool_call_id: str,
        result: str,
        is_error: bool = False,
    ) -> ToolCallResultChatMessage:
        message = create_tool_call_result(tool_name, tool_call_id, result, is_error=is_error)
        self.messages.append(message)
        return message

    def add_checkpoint(self, checkpoint: Checkpoint) -> CheckpointChatMessage:
        message = CheckpointChatMessage(checkpoint_id=checkpoint.id, metadata=dict(checkpoint.metadata))
        self.messages.append(message)
        self.checkpoint_ids.append(checkpoint.id)
        self.current_checkpoint_id = checkpoint.id
        return message

    def get_messages(self) -> list[ChatMessage]:
        return list(self.messages)

    def get_messages_for_ai(self) -> list[dict[str, Any]]:
        """
        Project the log into {role, content} messages for an LLM call.

        Tool-call entries are rebuilt by the LLM-calling layer and checkpoint
        markers are never shown to the model, so both are omitted.
        """
        ai_messages: list[dict[str, Any]] = []

        for message in self.messages:
            if isinstance(message, UserChatMessage):
                ai_messages.append({"role": "user", "content": message.text})
            elif isinstance(message, AiChatMessage):
                ai_messages.append({"role": "assistant", "content": message.text})
            elif isinstance(message, ToolCallResultChatMessage):
                ai_messages.append({
                    "role": "tool",
                    "content": message.result,
                    "tool_call_id": message.tool_call_id,
                })

        return ai_messages

    def get_summary(self) -> ConversationSummary:
        return ConversationSummary(
            total_messages=len(self.messages),
            user_messages=sum(1 for m in self.messages if m.type == "user"),
            ai_messages=sum(1 for m in self.messages if m.type == "ai"),
            tool_calls=sum(1 for m in self.messages if m.type == "toolCall"),
            tool_errors=sum(1 for m in self.messages if m.type == "toolCallResult" and m.is_error),
            checkpoints=len(self.checkpoint_ids),
        )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def set_status(self, status: AgentStatus) -> None:
        if status not in AGENT_STATUSES:
            raise StateValidationError("status", f"unknown agent status '{status}'")
        if status != self.status:
            logger.debug(f"Agent status {self.status} -> {status}")
        self.status = status

    def get_status(self) -> AgentStatus:
        return self.status

    def is_idle(self) -> bool:
        return self.status == "idle"

    def is_loading(self) -> bool:
        return self.status == "loading"

    def is_reviewing_tool_call(self) -> bool:
        return self.status == "reviewingToolCall"

    def has_error(self) -> bool:
        return self.status == "error"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self.messages = []
        self.status = "idle"
        self.checkpoint_ids = []
        self.current_checkpoint_id = None

    def reset_to(
        self,
        messages: list[ChatMessage],
        metadata: dict[str, Any],
        checkpoint_id: Optional[str] = None,
    ) -> None:
        """Replace log and metadata wholesale (checkpoint restore). Status returns to idle."""
        self.messages = messages
        self.metadata = metadata
        # Only markers still present in the restored log count.
        self.checkpoint_ids = [m.checkpoint_id for m in messages if m.type == "checkpoint"]
        self.current_checkpoint_id = checkpoint_id
        self.status = "idle"

    def clone(self) -> "ConversationState":
        return self.model_copy(deep=True)
