"""
Read Tools

Tools for reading and navigating document chunks.
"""

import json
from typing import Optional

from pydantic import BaseModel

from lesson_agent.models.chunk import DocumentChunk
from lesson_agent.tools.base import AgentTool, ToolExecutionContext, ToolResult


def serialize_chunk_for_ai(chunk: Optional[DocumentChunk]) -> str:
    """Render a chunk as a header plus pretty-printed document JSON."""
    if chunk is None:
        return "[Empty chunk]"

    lines = [
        f"=== Chunk {chunk.index + 1} of {chunk.total_chunks} ===",
        f"Characters: {chunk.character_count}",
        f"Nodes: {chunk.start_node_index}-{chunk.end_node_index}" if chunk.node_count else "Nodes: none",
        "",
        "Content (document JSON):",
        json.dumps(chunk.content.to_wire(), indent=2, ensure_ascii=False),
        "",
    ]
    return "\n".join(lines)


def _chunk_result(chunk: DocumentChunk) -> ToolResult:
    return ToolResult(
        success=True,
        result=serialize_chunk_for_ai(chunk),
        metadata={
            "chunk_index": chunk.index,
            "total_chunks": chunk.total_chunks,
            "character_count": chunk.character_count,
        },
    )


class ReadFirstChunkTool(AgentTool):
    name = "read_first_chunk"
    description = "Start reading the document from the beginning. Returns the first chunk of content."

    def run(self, args: BaseModel, context: ToolExecutionContext) -> ToolResult:
        chunk = context.document_state.read_first_chunk()
        if chunk is None:
            return ToolResult(success=False, result="Document is empty")
        return _chunk_result(chunk)


class ReadNextChunkTool(AgentTool):
    name = "read_next_chunk"
    description = (
        "Navigate to and read the next chunk of the document. "
        "Use this after reading the first chunk to continue reading."
    )

    def run(self, args: BaseModel, context: ToolExecutionContext) -> ToolResult:
        chunk = context.document_state.read_next_chunk()
        if chunk is None:
            current = context.document_state.get_current_chunk()
            position = f" ({current.index + 1} of {current.total_chunks})" if current else ""
            return ToolResult(success=False, result=f"Already at the last chunk{position}")
        return _chunk_result(chunk)


class ReadPreviousChunkTool(AgentTool):
    name = "read_previous_chunk"
    description = (
        "Navigate to and read the previous chunk of the document. "
        "Use this to go back and review earlier content."
    )

    def run(self, args: BaseModel, context: ToolExecutionContext) -> ToolResult:
        chunk = context.document_state.read_previous_chunk()
        if chunk is None:
            return ToolResult(success=False, result="Already at the first chunk")
        return _chunk_result(chunk)


def create_read_tools() -> list[AgentTool]:
    return [ReadFirstChunkTool(), ReadNextChunkTool(), ReadPreviousChunkTool()]
