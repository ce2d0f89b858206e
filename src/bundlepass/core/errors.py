"""
Error taxonomy for bundlepass.

Every error here is scoped to a single file. None of them is fatal to a run:
the processor catches them at the task boundary, logs them and moves on.
"""

from pathlib import Path
from typing import Optional, Union


class BundlePassError(Exception):
    """Base class for all bundlepass errors."""


class ParseError(BundlePassError):
    """
    Raised when source text cannot be scanned for imports.

    Attributes:
        message: Human-readable error message.
        file_path: The file being scanned, when known.
    """

    def __init__(self, message: str, file_path: Optional[Union[str, Path]] = None):
        self.message = message
        self.file_path = file_path
        super().__init__(f"{file_path}: {message}" if file_path else message)


class StructuralError(BundlePassError):
    """
    Raised when an HTML document has zero or several matches for a tag that
    must appear exactly once.

    Attributes:
        message: Human-readable error message.
        document: The offending document, kept for diagnosis.
    """

    def __init__(self, message: str, document: str = ""):
        self.message = message
        self.document = document
        super().__init__(f"{message}:\n{document}" if document else message)


class MissingFileError(BundlePassError):
    """Raised when a traced import resolves to a file that cannot be read."""

    def __init__(self, file_path: Union[str, Path], cause: Optional[Exception] = None):
        self.file_path = file_path
        self.cause = cause
        message = f"could not locate {file_path}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)


class TaskError(BundlePassError):
    """
    Catch-all for any other per-file failure.

    Attributes:
        file_path: The file whose task failed.
        cause: The underlying exception.
    """

    def __init__(self, file_path: Union[str, Path], cause: Exception):
        self.file_path = file_path
        self.cause = cause
        super().__init__(f"{file_path}: {cause}")
