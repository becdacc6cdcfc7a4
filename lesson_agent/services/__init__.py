"""Checkpoint service."""
from lesson_agent.services.checkpoint_service import CheckpointManager, create_checkpoint, restore_checkpoint

__all__ = [
    "CheckpointManager",
    "create_checkpoint",
    "restore_checkpoint",
]
