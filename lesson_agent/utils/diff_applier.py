"""
Diff applier.

Anchored, node-granular edits for LLM callers that do not know node
indices: locate a text snippet, delete whole blocks containing some text,
and splice new blocks after the anchor. Also structural validation and
repair of documents received at the tool boundary.
"""

import bisect
import logging
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field, ValidationError

from lesson_agent.config import get_settings
from lesson_agent.models.document import BaseNode, Document, parse_nodes
from lesson_agent.utils.tree_utils import extract_text, flatten_document, max_depth


logger = logging.getLogger(__name__)


class DeleteScope(str, Enum):
    """Which blocks a delete string removes."""

    ALL_MATCHES = "all_matches"
    FIRST_AFTER_ANCHOR = "first_after_anchor"


class DiffResult(BaseModel):
    success: bool
    document: Document
    message: str
    nodes_inserted: int = 0
    nodes_deleted: int = 0


class ValidationReport(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def _preview(text: str, limit: int) -> str:
    return f'"{text[:limit]}..."'


def locate_text(document: Document, search_text: str) -> Optional[int]:
    """
    Find search_text in the flattened document text.

    Returns the index of the top-level node containing the start of the
    first match, or None when the text does not occur.
    """
    if not search_text or not document.content:
        return None

    flat_text, starts = flatten_document(document)
    position = flat_text.find(search_text)
    if position < 0:
        return None

    # Empty nodes share a start offset with their successor; bisect_right
    # lands on the last of them, which is the one that owns the character.
    return bisect.bisect_right(starts, position) - 1


def _nodes_to_delete(
    nodes: Sequence[BaseNode],
    delete_content: str,
    scope: DeleteScope,
    anchor_index: Optional[int],
) -> list[int]:
    if scope == DeleteScope.FIRST_AFTER_ANCHOR and anchor_index is not None:
        for index in range(anchor_index, len(nodes)):
            if delete_content in extract_text(nodes[index]):
                return [index]
        return []

    return [index for index, node in enumerate(nodes) if delete_content in extract_text(node)]


def apply_diff(
    document: Document,
    before_content: Optional[str],
    delete_content: Optional[str],
    insert_nodes: Optional[Sequence[Union[BaseNode, dict[str, Any]]]],
    delete_scope: DeleteScope = DeleteScope.ALL_MATCHES,
) -> DiffResult:
    """
    Apply an anchored edit to a document.

    Args:
        document: Current document (never mutated)
        before_content: Text locating the edit position; blank appends to the end
        delete_content: Text whose containing block(s) are removed; ignored when appending
        insert_nodes: Nodes (or wire dicts) to splice after the anchor block
        delete_scope: Remove every containing block, or only the first one at/after the anchor

    Returns:
        DiffResult. On failure, document is the unmodified input.
    """
    preview_chars = get_settings().anchor_preview_chars

    try:
        new_nodes = [node.model_copy(deep=True) for node in parse_nodes(insert_nodes or [])]
    except ValidationError as e:
        return DiffResult(
            success=False,
            document=document,
            message=f"Invalid insert content: {e.error_count()} validation error(s): {e.errors()[0]['msg']}",
        )

    working = document.model_copy(deep=True)
    nodes = list(working.content)

    anchor_index: Optional[int] = None
    if not _is_blank(before_content):
        anchor_index = locate_text(working, before_content)
        if anchor_index is None:
            logger.warning(f"apply_diff anchor not found: {before_content[:preview_chars]!r}")
            return DiffResult(
                success=False,
                document=document,
                message=f"Could not find beforeContent: {_preview(before_content, preview_chars)}",
            )

    deleted: list[int] = []
    if anchor_index is None and not _is_blank(delete_content):
        logger.debug("apply_diff without beforeContent appends only; deleteContent ignored")
    elif not _is_blank(delete_content):
        if locate_text(working, delete_content) is None:
            logger.warning(f"apply_diff delete text not found: {delete_content[:preview_chars]!r}")
            return DiffResult(
                success=False,
                document=document,
                message=f"Could not find deleteContent: {_preview(delete_content, preview_chars)}",
            )

        deleted = _nodes_to_delete(nodes, delete_content, delete_scope, anchor_index)
        if not deleted:
            reason = (
                "after beforeContent"
                if delete_scope == DeleteScope.FIRST_AFTER_ANCHOR
                else "inside a single block (the text spans several blocks)"
            )
            return DiffResult(
                success=False,
                document=document,
                message=f"Could not find deleteContent {reason}: {_preview(delete_content, preview_chars)}",
            )

        deleted_set = set(deleted)
        nodes = [node for index, node in enumerate(nodes) if index not in deleted_set]

    if anchor_index is None:
        insert_at = len(nodes)
    else:
        # Shift for deleted blocks before the anchor; if the anchor block was
        # itself deleted, insert where it used to be.
        shift = sum(1 for index in deleted if index < anchor_index)
        insert_at = anchor_index - shift + (0 if anchor_index in deleted else 1)

    nodes[insert_at:insert_at] = new_nodes
    working.content = nodes

    if anchor_index is None:
        message = f"Appended {len(new_nodes)} node(s) to end of document"
    else:
        message = f"Inserted {len(new_nodes)} node(s) after {_preview(before_content, 30)}"
    if deleted:
        message += f" (deleted {len(deleted)} node(s))"

    return DiffResult(
        success=True,
        document=working,
        message=message,
        nodes_inserted=len(new_nodes),
        nodes_deleted=len(deleted),
    )


def validate_document(document: Union[Document, Mapping[str, Any], Any]) -> ValidationReport:
    """
    Structural sanity check of a document (built or raw wire dict).

    Checks the root type, that content is a list, that every top-level node
    carries a type, and that nesting stays within the configured depth.
    Unknown node types pass.
    """
    if isinstance(document, Document):
        document = document.to_wire()

    errors: list[str] = []

    if not isinstance(document, Mapping):
        return ValidationReport(valid=False, errors=["Document must be an object"])

    if document.get("type") != "doc":
        errors.append('Document type must be "doc"')

    content = document.get("content")
    if not isinstance(content, list):
        errors.append("Document content must be an array")
        content = []

    for index, node in enumerate(content):
        if not isinstance(node, Mapping):
            errors.append(f"Node at index {index} must be an object")
        elif not isinstance(node.get("type"), str) or not node.get("type"):
            errors.append(f"Node at index {index} missing type")

    depth_limit = get_settings().max_node_depth
    if max_depth(document) > depth_limit:
        errors.append(f"Document nesting exceeds maximum depth of {depth_limit}")

    return ValidationReport(valid=not errors, errors=errors)


def _sanitize_nodes(nodes: list[Any]) -> list[Any]:
    cleaned = []
    for node in nodes:
        if not isinstance(node, Mapping):
            continue
        if not node.get("type"):
            logger.warning(f"Dropping node without type: {str(node)[:100]}")
            continue
        if node["type"] == "text" and not isinstance(node.get("text"), str):
            continue

        node = dict(node)
        if isinstance(node.get("content"), list):
            node["content"] = _sanitize_nodes(node["content"])
        cleaned.append(node)
    return cleaned


def sanitize_document(raw: Any) -> Any:
    """
    Repair common AI generation mistakes in a raw document.

    Wraps a non-doc root (or a bare node list) in a doc, then drops
    non-object entries, nodes without a type and text nodes without string
    text, at every level. Returns a new dict; the input is not modified.
    """
    if isinstance(raw, list):
        return {"type": "doc", "content": _sanitize_nodes(raw)}
    if not isinstance(raw, Mapping):
        return raw

    if raw.get("type") != "doc":
        return {"type": "doc", "content": _sanitize_nodes([raw])}

    repaired = dict(raw)
    if isinstance(repaired.get("content"), list):
        repaired["content"] = _sanitize_nodes(repaired["content"])
    return repaired
