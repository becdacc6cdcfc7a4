"""Pytest configuration and shared fixtures."""
import pytest

from lesson_agent.config import reset_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Each test sees default settings unless it sets LESSON_AGENT_* itself."""
    reset_settings()
    yield
    reset_settings()


def make_paragraph(text):
    return {"type": "paragraph", "content": [{"type": "text", "text": text}]}


def make_heading(text, level=1):
    return {"type": "heading", "attrs": {"level": level}, "content": [{"type": "text", "text": text}]}


@pytest.fixture
def three_paragraph_document():
    """Document with 'Keep this' / 'Delete this' / 'Keep this too'."""
    from lesson_agent.models.document import parse_document

    return parse_document({
        "type": "doc",
        "content": [
            make_paragraph("Keep this"),
            make_paragraph("Delete this"),
            make_paragraph("Keep this too"),
        ],
    })


@pytest.fixture
def rich_document():
    """Document mixing known and editor-specific node kinds."""
    from lesson_agent.models.document import parse_document

    return parse_document({
        "type": "doc",
        "content": [
            make_heading("Understanding useState"),
            make_paragraph("State lets a component remember things."),
            {
                "type": "callout",
                "attrs": {"type": "tip"},
                "content": [make_paragraph("Call hooks at the top level.")],
            },
            {
                "type": "codeBlockEnhanced",
                "attrs": {"language": "javascript", "filename": "Counter.jsx"},
                "content": [{"type": "text", "text": "const [count, setCount] = useState(0);"}],
            },
            {
                "type": "mathBlock",
                "attrs": {"latex": "x^2"},
                "customFlag": True,
            },
        ],
    })


@pytest.fixture
def document_state():
    """Fresh, empty document state."""
    from lesson_agent.state.document_state import DocumentState

    return DocumentState()


@pytest.fixture
def conversation_state():
    """Fresh, idle conversation state."""
    from lesson_agent.state.conversation_state import ConversationState

    return ConversationState()


@pytest.fixture
def tool_context(document_state, conversation_state):
    """Tool execution context without a Markdown parser or progress callback."""
    from lesson_agent.tools.base import ToolExecutionContext

    return ToolExecutionContext(document_state=document_state, conversation_state=conversation_state)


@pytest.fixture
def registry():
    """Registry with the default tool set."""
    from lesson_agent.tools.registry import create_default_registry

    return create_default_registry()
