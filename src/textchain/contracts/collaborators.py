"""Protocols for the external collaborators the pipeline consumes.

Implementations live outside the core (desktop clipboard, recordings
database, settings UI). Failures are reported by raising CollaboratorError;
"not found" is None, not an exception.
"""

from typing import Protocol

from textchain.contracts.definitions import Recording, Transformation


class ClipboardReader(Protocol):
    """Reads the current clipboard text."""

    def read_text(self) -> str:
        """Return clipboard text.

        Raises:
            CollaboratorError: If the clipboard cannot be read
        """
        ...


class RecordingLookup(Protocol):
    """Looks up stored recordings by id."""

    def get_recording(self, recording_id: str) -> Recording | None: ...


class TransformationSource(Protocol):
    """Read-only access to transformation definitions."""

    def get_transformation(self, transformation_id: str) -> Transformation | None: ...
