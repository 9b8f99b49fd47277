"""mindspace - local persistent store for a personal wellness journal."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mindspace")
except PackageNotFoundError:
    __version__ = "0+local"
from mindspace.backends import FileBackend, MemoryBackend, StorageBackend
from mindspace.config import MindspaceConfig
from mindspace.controller import Action, ActionType, AppController, AppState, EntityUpdate, reduce
from mindspace.events import ChangeKind, StorageChangeEvent, StorageEvents
from mindspace.exceptions import (
    DocumentValidationError,
    MindspaceConfigError,
    MindspaceError,
    StorageError,
    StorageQuotaError,
    StorageUnavailableError,
    StorageWriteError,
)
from mindspace.models import (
    ActivityPlan,
    CBTProgress,
    CrisisContact,
    Goal,
    GoalCategory,
    Habit,
    HabitFrequency,
    JournalEntry,
    Milestone,
    MoodEntry,
    Profile,
    SafetyPlan,
    ThoughtRecord,
    UserData,
)
from mindspace.store import ImportResult, MutationResult, SaveResult, UserDataStore

__all__ = [
    "__version__",
    "Action",
    "ActionType",
    "ActivityPlan",
    "AppController",
    "AppState",
    "CBTProgress",
    "ChangeKind",
    "CrisisContact",
    "DocumentValidationError",
    "EntityUpdate",
    "FileBackend",
    "Goal",
    "GoalCategory",
    "Habit",
    "HabitFrequency",
    "ImportResult",
    "JournalEntry",
    "MemoryBackend",
    "Milestone",
    "MindspaceConfig",
    "MindspaceConfigError",
    "MindspaceError",
    "MoodEntry",
    "MutationResult",
    "Profile",
    "SafetyPlan",
    "SaveResult",
    "StorageBackend",
    "StorageChangeEvent",
    "StorageError",
    "StorageEvents",
    "StorageQuotaError",
    "StorageUnavailableError",
    "StorageWriteError",
    "ThoughtRecord",
    "UserData",
    "UserDataStore",
    "reduce",
]
