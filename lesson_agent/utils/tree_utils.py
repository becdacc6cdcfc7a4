"""
Tree traversal utilities.

Character counting, text flattening and depth measurement for document trees.
Traversal uses an explicit stack so malformed, deeply nested input cannot
exhaust the interpreter's recursion limit.
"""

from typing import Any, Iterator, Mapping, Union

from lesson_agent.models.document import BaseNode, Document, TextNode


def iter_text_nodes(node: Union[BaseNode, Document]) -> Iterator[TextNode]:
    """Yield every descendant text node (including *node* itself) in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, TextNode):
            yield current
            continue
        children = getattr(current, "content", None)
        if children:
            stack.extend(reversed(children))


def extract_text(node: Union[BaseNode, Document]) -> str:
    """Concatenate all descendant text, depth first, with no separators."""
    return "".join(text.text for text in iter_text_nodes(node))


def count_node_characters(node: Union[BaseNode, Document]) -> int:
    """Sum of text lengths below *node*; markup is not counted."""
    return sum(len(text.text) for text in iter_text_nodes(node))


def flatten_document(document: Document) -> tuple[str, list[int]]:
    """
    Flatten a document to one string.

    Returns the text and, for each top-level node, the offset at which its
    text starts in that string.
    """
    parts: list[str] = []
    starts: list[int] = []
    offset = 0
    for node in document.content:
        starts.append(offset)
        node_text = extract_text(node)
        parts.append(node_text)
        offset += len(node_text)
    return "".join(parts), starts


def document_to_text(document: Document, separator: str = "\n") -> str:
    """Plain-text rendering with one line per top-level node."""
    return separator.join(extract_text(node) for node in document.content)


def count_words(document: Document) -> int:
    return len(document_to_text(document, separator="\n\n").split())


def max_depth(raw: Any) -> int:
    """Nesting depth of a raw (wire) tree. A childless node has depth 1."""
    deepest = 0
    stack = [(raw, 1)]
    while stack:
        current, depth = stack.pop()
        if not isinstance(current, Mapping):
            continue
        deepest = max(deepest, depth)
        children = current.get("content")
        if isinstance(children, list):
            stack.extend((child, depth + 1) for child in children)
    return deepest
