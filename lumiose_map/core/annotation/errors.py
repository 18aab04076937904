"""
Exceptions raised by the annotation core.

The store raises these; :class:`~.session.MapSession` catches them at the
operation boundary and turns them into notices for the presentation layer.
"""


class AnnotationError(Exception):
    """Base class for all annotation core errors."""


class MarkerNotFoundError(AnnotationError, KeyError):
    def __init__(self, marker_id: str):
        super().__init__(marker_id)
        self.marker_id = marker_id

    def __str__(self):
        return f"No marker with id {self.marker_id!r}"


class MarkerLockedError(AnnotationError):
    """A locked marker rejected a move, edit or deletion."""

    def __init__(self, marker_id: str):
        super().__init__(f"Marker {marker_id!r} is locked")
        self.marker_id = marker_id


class DuplicateIdError(AnnotationError, ValueError):
    pass


class UnknownStickerError(AnnotationError, ValueError):
    def __init__(self, name: str):
        super().__init__(f"Unknown sticker: {name}")
        self.name = name


class ImportFailedError(AnnotationError):
    """An import payload was unparsable or structurally invalid."""


class ModeError(AnnotationError):
    """An operation was attempted in a mode that does not allow it."""
