"""
Document Tree Models

Block-content tree exchanged with the editor/renderer:
{"type": "doc", "content": [Node, ...]}.

Known node kinds are typed models. Any other node type parses as an
OpaqueNode, which keeps its attrs, content and extra keys untouched.
"""

from typing import Annotated, Any, Iterable, Literal, Optional, Union
from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
    model_validator,
)


CALLOUT_KINDS = ("tip", "warning", "note", "info", "success", "error")
OPAQUE_TAG = "opaque"


class BaseNode(BaseModel):
    """Common shape of every tree element. Unknown keys are preserved."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(description="Node type tag")


class TextNode(BaseNode):
    """Leaf node carrying literal text and optional inline marks."""

    type: Literal["text"] = "text"
    text: str = Field(description="Literal text")
    marks: Optional[list[dict[str, Any]]] = Field(default=None, description="Inline marks (bold, italic, link...)")

    @model_validator(mode="after")
    def _reject_children(self) -> "TextNode":
        if self.model_extra and "content" in self.model_extra:
            raise ValueError("text nodes cannot have child content")
        return self


class BlockNode(BaseNode):
    """Non-text node: optional attributes and ordered children."""

    attrs: Optional[dict[str, Any]] = Field(default=None, description="Scalar node attributes")
    content: Optional[list["Node"]] = Field(default=None, description="Ordered child nodes")

    @model_validator(mode="after")
    def _reject_literal_text(self) -> "BlockNode":
        if self.model_extra and "text" in self.model_extra:
            raise ValueError(f"'{self.type}' nodes cannot carry literal text; wrap it in a text node")
        return self


class ParagraphNode(BlockNode):
    type: Literal["paragraph"] = "paragraph"


class HeadingNode(BlockNode):
    type: Literal["heading"] = "heading"

    @field_validator("attrs")
    @classmethod
    def _check_level(cls, attrs: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
        if attrs and "level" in attrs:
            level = attrs["level"]
            if isinstance(level, bool) or not isinstance(level, int) or not 1 <= level <= 6:
                raise ValueError("heading level must be an integer between 1 and 6")
        return attrs


class CodeBlockNode(BlockNode):
    type: Literal["codeBlockEnhanced"] = "codeBlockEnhanced"


class CalloutNode(BlockNode):
    type: Literal["callout"] = "callout"

    @field_validator("attrs")
    @classmethod
    def _check_kind(cls, attrs: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
        if attrs and "type" in attrs and attrs["type"] not in CALLOUT_KINDS:
            raise ValueError(f"callout type must be one of: {', '.join(CALLOUT_KINDS)}")
        return attrs


class BulletListNode(BlockNode):
    type: Literal["bulletList"] = "bulletList"


class OrderedListNode(BlockNode):
    type: Literal["orderedList"] = "orderedList"


class ListItemNode(BlockNode):
    type: Literal["listItem"] = "listItem"


class QuizQuestionNode(BlockNode):
    type: Literal["quizQuestion"] = "quizQuestion"


class QuizOptionNode(BlockNode):
    type: Literal["quizOption"] = "quizOption"


class FlipCardGroupNode(BlockNode):
    type: Literal["flipCardGroup"] = "flipCardGroup"


class FlipCardNode(BlockNode):
    type: Literal["flipCard"] = "flipCard"


class FlipCardFrontNode(BlockNode):
    type: Literal["flipCardFront"] = "flipCardFront"


class FlipCardBackNode(BlockNode):
    type: Literal["flipCardBack"] = "flipCardBack"


class DragOrderExerciseNode(BlockNode):
    type: Literal["dragOrderExercise"] = "dragOrderExercise"


class DragOrderItemNode(BlockNode):
    type: Literal["dragOrderItem"] = "dragOrderItem"


class HorizontalRuleNode(BlockNode):
    type: Literal["horizontalRule"] = "horizontalRule"


class OpaqueNode(BlockNode):
    """Fallback for node kinds defined by the rendering collaborator."""

    type: str = Field(description="Node type tag not known to this package")


_KNOWN_NODE_CLASSES = (
    TextNode,
    ParagraphNode,
    HeadingNode,
    CodeBlockNode,
    CalloutNode,
    BulletListNode,
    OrderedListNode,
    ListItemNode,
    QuizQuestionNode,
    QuizOptionNode,
    FlipCardGroupNode,
    FlipCardNode,
    FlipCardFrontNode,
    FlipCardBackNode,
    DragOrderExerciseNode,
    DragOrderItemNode,
    HorizontalRuleNode,
)

NODE_TYPES: dict[str, type[BaseNode]] = {
    cls.model_fields["type"].default: cls for cls in _KNOWN_NODE_CLASSES
}


def _node_tag(value: Any) -> Optional[str]:
    """Pick the union member for raw dicts and already-built nodes."""
    if isinstance(value, OpaqueNode):
        return OPAQUE_TAG
    if isinstance(value, BaseNode):
        return value.type
    if isinstance(value, dict):
        node_type = value.get("type")
        if not isinstance(node_type, str) or not node_type:
            return None
        return node_type if node_type in NODE_TYPES else OPAQUE_TAG
    return None


Node = Annotated[
    Union[
        Annotated[TextNode, Tag("text")],
        Annotated[ParagraphNode, Tag("paragraph")],
        Annotated[HeadingNode, Tag("heading")],
        Annotated[CodeBlockNode, Tag("codeBlockEnhanced")],
        Annotated[CalloutNode, Tag("callout")],
        Annotated[BulletListNode, Tag("bulletList")],
        Annotated[OrderedListNode, Tag("orderedList")],
        Annotated[ListItemNode, Tag("listItem")],
        Annotated[QuizQuestionNode, Tag("quizQuestion")],
        Annotated[QuizOptionNode, Tag("quizOption")],
        Annotated[FlipCardGroupNode, Tag("flipCardGroup")],
        Annotated[FlipCardNode, Tag("flipCard")],
        Annotated[FlipCardFrontNode, Tag("flipCardFront")],
        Annotated[FlipCardBackNode, Tag("flipCardBack")],
        Annotated[DragOrderExerciseNode, Tag("dragOrderExercise")],
        Annotated[DragOrderItemNode, Tag("dragOrderItem")],
        Annotated[HorizontalRuleNode, Tag("horizontalRule")],
        Annotated[OpaqueNode, Tag(OPAQUE_TAG)],
    ],
    Discriminator(_node_tag),
]


class Document(BaseModel):
    """Root node. Top-level order is significant and never changed implicitly."""

    model_config = ConfigDict(extra="allow")

    type: Literal["doc"] = "doc"
    content: list[Node] = Field(default_factory=list, description="Top-level block nodes")

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the editor/renderer JSON shape."""
        return self.model_dump(exclude_none=True)


for _cls in (*_KNOWN_NODE_CLASSES, BlockNode, OpaqueNode, Document):
    _cls.model_rebuild()

_node_list_adapter = TypeAdapter(list[Node])


# Factory Functions

def empty_document() -> Document:
    return Document(content=[])


def parse_document(raw: Union[Document, dict[str, Any]]) -> Document:
    """Build a Document from its wire dict. Raises pydantic.ValidationError."""
    if isinstance(raw, Document):
        return raw
    return Document.model_validate(raw)


def parse_nodes(raw: Iterable[Union[BaseNode, dict[str, Any]]]) -> list[BaseNode]:
    """Build nodes from wire dicts (or pass built nodes through)."""
    return _node_list_adapter.validate_python(list(raw))


def text_node(text: str, marks: Optional[list[dict[str, Any]]] = None) -> TextNode:
    return TextNode(text=text, marks=marks)


def paragraph(text: str) -> ParagraphNode:
    return ParagraphNode(content=[text_node(text)])


def heading(text: str, level: int = 1) -> HeadingNode:
    return HeadingNode(attrs={"level": level}, content=[text_node(text)])
