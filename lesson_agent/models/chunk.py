"""
Document Chunk Model

A contiguous, node-aligned slice of a document's top-level nodes.
"""

from pydantic import BaseModel, Field

from lesson_agent.models.document import Document


class DocumentChunk(BaseModel):
    """One page of a chunked document."""

    index: int = Field(ge=0, description="0-based chunk index")
    total_chunks: int = Field(ge=1, description="Number of chunks in the set")
    content: Document = Field(description="Doc holding this chunk's top-level nodes")
    character_count: int = Field(ge=0, description="Text characters in this chunk")
    start_node_index: int = Field(ge=0, description="First top-level node index in the full document")
    end_node_index: int = Field(ge=0, description="Last top-level node index in the full document (inclusive)")

    @property
    def node_count(self) -> int:
        return len(self.content.content)

    @property
    def is_last(self) -> bool:
        return self.index == self.total_chunks - 1
