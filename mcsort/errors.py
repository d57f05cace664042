"""Custom exception classes for MCSORT."""

from __future__ import annotations

from typing import Optional


class MCSORTError(Exception):
    """Base exception for all MCSORT errors."""

    pass


class InvalidGeometry(MCSORTError, ValueError):
    """Raised when a bounding box has non-positive or non-finite size."""

    def __init__(self, message: str, bbox: Optional[tuple] = None):
        self.bbox = bbox
        super().__init__(message)


class DirectoryNotFound(MCSORTError, FileNotFoundError):
    """Raised when a sequence image directory does not exist."""

    pass


class FileOpenFailure(MCSORTError, OSError):
    """Raised when an input or output file cannot be opened."""

    pass


class OutputAlreadyExists(MCSORTError, FileExistsError):
    """Raised when a tracking output file is already present."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ModelLoadError(MCSORTError, RuntimeError):
    """Raised when a detection model cannot be loaded."""

    pass
