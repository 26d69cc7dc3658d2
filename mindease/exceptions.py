"""
MindEase exception hierarchy.

    MindEaseError (base)
    ├── StorageError          session key-value store read/write failed
    ├── TaskRepositoryError   task document store call failed
    ├── TimerStateError       timer operation invalid for the current phase
    └── DialogActionError     dialog action not offered / no dialog open
"""


class MindEaseError(Exception):
    """Base exception for all MindEase errors."""


class StorageError(MindEaseError):
    """The session-scoped key-value store could not be read or written."""


class TaskRepositoryError(MindEaseError):
    """The external task repository rejected or failed a request."""


class TimerStateError(MindEaseError):
    """A timer operation was requested in a phase that does not allow it.

    Raised when:
        - pausing a focus timer that is not running
        - resuming a focus timer that is not paused
    """


class DialogActionError(MindEaseError):
    """A session-complete dialog action cannot be performed.

    Raised when:
        - the dialog is not open
        - the action is not offered (e.g. finish_task with open subtasks)
    """
