"""Error types raised by the task engine and its collaborators.

None of these are fatal: the CLI catches them at the boundary and prints a
message while the in-memory board stays the source of truth.
"""


class SuperchargedError(Exception):
    """Base class for all application errors."""


class ValidationError(SuperchargedError):
    """A task draft failed a required-field or range check."""

    def __init__(self, message: str, field: str = ''):
        super().__init__(message)
        self.field = field


class PreconditionError(SuperchargedError):
    """A state transition was invoked on a task in the wrong state."""


class ImportRowError(SuperchargedError):
    """A single malformed row during CSV import (row is skipped)."""

    def __init__(self, row_number: int, reason: str):
        super().__init__(f"Skipping row {row_number}: {reason}")
        self.row_number = row_number
        self.reason = reason


class ImportFileError(SuperchargedError):
    """The CSV text as a whole cannot be imported."""


class ExportError(SuperchargedError):
    """Nothing (or nothing valid) to export."""


class PersistenceError(SuperchargedError):
    """Snapshot or file read/write failure."""
