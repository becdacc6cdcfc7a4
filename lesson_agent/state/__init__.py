"""Live agent state."""
from lesson_agent.state.document_state import DocumentState, ChunkInfo
from lesson_agent.state.conversation_state import ConversationState
