"""Service-layer exceptions."""


class SaveLoadError(Exception):
    """Raised when save or load operations fail."""


class StorySessionError(Exception):
    """Raised when a story session cannot be constructed."""
