from src.draft_manager.checkpoints import Checkpoint, CheckpointManager
from src.draft_manager.draft_actions import ACTION_HANDLERS, get_handler
from src.draft_manager.draft_initializer import DraftInitializer
from src.draft_manager.draft_rules import (
    AlreadyDrafted,
    DraftActionError,
    DuplicateName,
    Forbidden,
    InvalidInput,
    NotFound,
    NotInitialized,
    NotYourTurn,
    StaleWrite,
    UnknownDrafter,
    current_drafter,
)
from src.draft_manager.draft_state import (
    Celebrity,
    DraftConfig,
    Drafter,
    DraftState,
    DraftStatus,
    Pick,
)
from src.draft_manager.history import HistoryStack
from src.draft_manager.state_persistence import (
    BlobStore,
    InMemoryBlobStore,
    JsonFileBlobStore,
    StoreError,
    VersionConflict,
)

__all__ = [
    "ACTION_HANDLERS",
    "AlreadyDrafted",
    "BlobStore",
    "Celebrity",
    "Checkpoint",
    "CheckpointManager",
    "DraftActionError",
    "DraftConfig",
    "DraftInitializer",
    "DraftState",
    "DraftStatus",
    "Drafter",
    "DuplicateName",
    "Forbidden",
    "HistoryStack",
    "InMemoryBlobStore",
    "InvalidInput",
    "JsonFileBlobStore",
    "NotFound",
    "NotInitialized",
    "NotYourTurn",
    "Pick",
    "StaleWrite",
    "StoreError",
    "UnknownDrafter",
    "VersionConflict",
    "current_drafter",
    "get_handler",
]
