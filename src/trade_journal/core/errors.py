"""Custom exception hierarchy for the trade journal."""


class JournalError(Exception):
    """Base exception for all trade journal errors."""


# --- Configuration ---
class ConfigError(JournalError):
    """Invalid or missing configuration."""


# --- Ingest ---
class IngestError(JournalError):
    """Uploaded file could not be turned into trade rows."""


class ParseError(IngestError):
    """The file could not be tokenized into a header and rows.

    The underlying exception is kept on ``__cause__`` and on ``cause``.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class RowValidationError(IngestError):
    """A data row failed normalization. Fatal for the whole batch."""

    def __init__(self, row_number: int, field: str, message: str):
        self.row_number = row_number
        self.field = field
        self.message = message
        super().__init__(f"Row {row_number} [{field}]: {message}")


# --- Open positions ---
class PositionError(JournalError):
    """Open position lifecycle error."""


class PositionNotFoundError(PositionError):
    """No open position with the requested id."""


class PositionStateError(PositionError):
    """Requested action is not allowed in the position's current state."""
