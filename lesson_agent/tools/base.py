"""
Base Tool for the Lesson Agent

Abstract base class for all LLM-callable tools, the execution context they
operate on, and the result shape they hand back.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Type

from pydantic import BaseModel, Field

from lesson_agent.state.conversation_state import ConversationState
from lesson_agent.state.document_state import DocumentState
from lesson_agent.utils.schema_utils import get_tool_schema


class ToolResult(BaseModel):
    """Outcome of one tool call. result is what the model sees."""

    success: bool
    result: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class ProgressUpdate(BaseModel):
    step: str = "agent_running"
    percentage: int = Field(ge=0, le=100)
    message: str
    current_action: Optional[str] = None
    step_number: Optional[int] = None
    total_steps: Optional[int] = None


# Extended Markdown -> document dict. Supplied by the caller; may raise.
MarkdownParser = Callable[[str], Any]
ProgressCallback = Callable[[ProgressUpdate], None]


@dataclass
class ToolExecutionContext:
    """Live state a tool call reads and mutates."""

    document_state: DocumentState
    conversation_state: ConversationState
    markdown_parser: Optional[MarkdownParser] = None
    on_progress: Optional[ProgressCallback] = None


class EmptyArgs(BaseModel):
    """Tools that take no arguments."""


class AgentTool(ABC):
    """
    Abstract base class for tools.

    Subclasses set name, description and args_model, and implement run().
    Expected failures are returned as unsuccessful ToolResults; hierarchy and
    argument errors may be raised and are converted by the registry.
    """

    name: str = ""
    description: str = ""
    args_model: Type[BaseModel] = EmptyArgs
    is_final: bool = False

    @abstractmethod
    def run(self, args: BaseModel, context: ToolExecutionContext) -> ToolResult:
        ...

    def definition(self, strict: bool = False) -> dict[str, Any]:
        """OpenAI-style function tool definition."""
        function = {
            "name": self.name,
            "description": self.description,
            "parameters": get_tool_schema(self.args_model, strict=strict),
        }
        if strict:
            function["strict"] = True
        return {"type": "function", "function": function}
