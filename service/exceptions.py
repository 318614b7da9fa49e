"""
Exception types raised by the timetable services.

Move rejections are not exceptions: they come back as MoveResult values.
"""


class TimetableError(Exception):
    """Base class for all timetable service errors."""
    pass


class ConfigurationError(TimetableError):
    """Required setup (e.g. the provider API key) is missing. Fatal at startup."""
    pass


class GenerationError(TimetableError):
    """The generation provider failed: network, provider-side error or unreadable output."""
    pass


class ContentValidationError(TimetableError):
    """The provider answered, but not with the room-keyed shape that was requested."""

    def __init__(self, message: str, received_rooms: int = None, expected_rooms: int = None):
        super().__init__(message)
        self.received_rooms = received_rooms
        self.expected_rooms = expected_rooms


class MoveConsistencyError(TimetableError):
    """The source slot of a move does not hold the class being moved."""
    pass


class SessionNotFoundError(TimetableError):
    pass


class GenerationInProgressError(TimetableError):
    """A generation request is already outstanding for the session."""
    pass
