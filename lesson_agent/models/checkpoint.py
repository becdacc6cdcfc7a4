"""
Checkpoint Model

Immutable snapshot of conversation + document state for rollback.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field
import uuid

from lesson_agent.models.course import Lesson
from lesson_agent.models.document import Document
from lesson_agent.models.messages import ChatMessage


class Checkpoint(BaseModel):
    """Deep-copied agent state. Never shares references with live state."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique checkpoint identifier")
    conversation_messages: list[ChatMessage] = Field(default_factory=list)
    document_snapshot: Document
    lessons_snapshot: list[Lesson] = Field(default_factory=list)
    current_lesson_index: Optional[int] = None
    current_section_index: Optional[int] = None
    conversation_metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    metadata: dict[str, Any] = Field(default_factory=dict, description="Caller-supplied context (e.g. agent step)")
