"""Exceptions raised by LuminaShot."""


class LuminashotError(Exception):
    """Base class for failures that abort a screenshot run."""
    pass


class QueryError(LuminashotError):
    """Raised when a hyprctl query fails or returns unexpected output."""
    pass


class SpawnError(LuminashotError):
    """Raised when the selector process cannot be started or fed."""
    pass


class ResolutionError(LuminashotError):
    """Raised when the selected window no longer exists."""
    pass


class CaptureError(LuminashotError):
    """Raised when capture fails."""
    pass
