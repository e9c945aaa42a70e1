"""Custom exception classes for the manifest builder."""

from typing import Optional


class ManifestBuilderError(Exception):
    """
    Base exception class for all manifest builder errors.
    """
    pass


class InvalidSettingsError(ManifestBuilderError):
    """
    Raised when builder settings are out of range or inconsistent.
    """
    pass


class ScanError(ManifestBuilderError):
    """
    Raised when the input tree cannot be walked or a file cannot be stat'ed.
    """
    pass


class ChunkIOError(ManifestBuilderError):
    """
    Raised when an open/seek/read/write/close step on a source file or a
    chunk artifact fails.
    """
    pass


class DirectoryCreationError(ManifestBuilderError):
    """
    Raised when the chunk output directory or the manifest's parent
    directory cannot be created.
    """
    pass


class SerializationError(ManifestBuilderError):
    """
    Raised when the manifest cannot be encoded, written or read back.
    """
    pass


class GenerationError(ManifestBuilderError):
    """
    Raised when processing a single file fails. Carries the offending path.
    """

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: {cause}" if cause is not None else path)
