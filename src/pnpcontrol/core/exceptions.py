"""Common exceptions for the pick and place controller."""

from enum import IntEnum


class PnPError(Exception):
    """Base exception for all controller errors."""

    pass


class ValidationError(PnPError):
    """Input validation error."""

    pass


class ConfigurationError(PnPError):
    """Configuration error."""

    pass


class SequencerError(PnPError):
    """A sequencer invariant would be violated."""

    pass


class CentroidFileStatus(IntEnum):
    """Result codes for reading the centroid (placement list) file"""

    PRESENT_AND_READ = 0
    NOT_PRESENT = 1
    UNREADABLE = 2
    INVALID = 3
    TOO_MANY_COMPONENTS = 4


class CentroidFileError(PnPError):
    """Placement list could not be obtained."""

    def __init__(self, code: CentroidFileStatus, message: str):
        super().__init__(message)
        self.code = code

    def __str__(self) -> str:
        return f"{super().__str__()} (error code {int(self.code)})"
