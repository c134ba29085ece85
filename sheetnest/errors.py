"""Exceptions and warnings raised by sheetnest."""


class NestingError(Exception):
    """Base class for nesting failures."""


class MissingRequiredInput(NestingError, ValueError):
    """A required parameter (e.g. sheet width or height) was not supplied."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing required input: {name}")


class InvalidInput(NestingError, ValueError):
    """A parameter was supplied but is out of range or malformed."""


class DegenerateGeometryError(NestingError):
    """A shape cannot produce a bounding rectangle."""

    def __init__(self, message: str, part_index: int = None):
        self.part_index = part_index
        super().__init__(message)


class Cancelled(NestingError):
    """The operation was cancelled before completion."""


class OversizedPartWarning(UserWarning):
    """A rectangle is larger than the sheet and will overflow its outline."""
