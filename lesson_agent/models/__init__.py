"""Lesson agent models."""
from lesson_agent.models.document import (
    Document,
    BaseNode,
    BlockNode,
    TextNode,
    OpaqueNode,
    Node,
    empty_document,
    parse_document,
    parse_nodes,
)
from lesson_agent.models.chunk import DocumentChunk
from lesson_agent.models.course import Lesson, LessonSection
from lesson_agent.models.messages import AgentStatus, ChatMessage, ConversationSummary
from lesson_agent.models.checkpoint import Checkpoint
from lesson_agent.models.tool_logs import ToolLogEntry, ToolLogStore
