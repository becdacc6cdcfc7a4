"""
Document chunker.

Splits a document into chunks for paged reading by a token-limited model.
Chunk boundaries always fall between top-level nodes; a node is never split.
"""

import logging
from typing import Optional, Sequence

from lesson_agent.models.chunk import DocumentChunk
from lesson_agent.models.document import BaseNode, Document
from lesson_agent.utils.tree_utils import count_node_characters


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 32000


def chunk_document(document: Document, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[DocumentChunk]:
    """
    Split a document into node-aligned chunks of roughly chunk_size characters.

    Algorithm:
    1. Walk the top-level nodes in order, keeping a running character count
    2. When the next node would overflow a non-empty chunk, close the chunk
    3. Add the node to the (possibly new) current chunk
    4. Flush the remainder, then stamp total_chunks on every chunk

    A node larger than chunk_size gets a chunk of its own. An empty document
    yields a single empty chunk.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    nodes = document.content or []
    if not nodes:
        return [
            DocumentChunk(
                index=0,
                total_chunks=1,
                content=Document(content=[]),
                character_count=0,
                start_node_index=0,
                end_node_index=0,
            )
        ]

    pending: list[tuple[list[BaseNode], int, int, int]] = []
    current_nodes: list[BaseNode] = []
    current_count = 0
    start_index = 0

    for node_index, node in enumerate(nodes):
        node_count = count_node_characters(node)

        if current_count + node_count > chunk_size and current_nodes:
            pending.append((current_nodes, current_count, start_index, node_index - 1))
            current_nodes = []
            current_count = 0
            start_index = node_index

        current_nodes.append(node)
        current_count += node_count

    if current_nodes:
        pending.append((current_nodes, current_count, start_index, len(nodes) - 1))

    total_chunks = len(pending)
    chunks = [
        DocumentChunk(
            index=index,
            total_chunks=total_chunks,
            content=Document(content=[node.model_copy(deep=True) for node in chunk_nodes]),
            character_count=count,
            start_node_index=start,
            end_node_index=end,
        )
        for index, (chunk_nodes, count, start, end) in enumerate(pending)
    ]

    logger.debug(f"Chunked {len(nodes)} nodes into {total_chunks} chunk(s) (chunk_size={chunk_size})")
    return chunks


def get_chunk(chunks: Sequence[DocumentChunk], index: int) -> Optional[DocumentChunk]:
    if index < 0 or index >= len(chunks):
        return None
    return chunks[index]


def merge_chunks(chunks: Sequence[DocumentChunk]) -> Document:
    """Rebuild a full document from chunks, in index order."""
    nodes: list[BaseNode] = []
    for chunk in sorted(chunks, key=lambda c: c.index):
        nodes.extend(node.model_copy(deep=True) for node in chunk.content.content)
    return Document(content=nodes)


def rechunk_document(document: Document, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[DocumentChunk]:
    """
    Re-chunk a document after modification.

    Boundaries are not maintained incrementally; the whole document is
    partitioned again.
    """
    return chunk_document(document, chunk_size)
