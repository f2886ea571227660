"""
import_engine.errors - Exceptions raised by the import pipeline.
"""


class ImportEngineError(Exception):
    """Base class for import pipeline failures."""
    pass


class UnreadableFileError(ImportEngineError):
    """The uploaded content cannot be decoded as text.  Fatal for the import."""

    def __init__(self, message: str = "Could not read the PAT export file."):
        super().__init__(message)


class RowError(ImportEngineError):
    """Raised when a line does not follow the PAT row grammar."""
    pass
