"""Exception types raised by the chunking pipeline."""

from typing import Optional


class ChunkerError(Exception):
    """Base class for all chunker errors."""


class VendorPathError(ChunkerError):
    """The vendored-dependency directory could not be resolved to an absolute path.

    This is the only condition that aborts a run.
    """


class PackageLoadError(ChunkerError):
    """A load pass failed, possibly after producing some units.

    The units that were produced before the failure are kept on ``units`` so
    callers can carry on with them.
    """

    def __init__(self, message: str, units: Optional[list] = None):
        super().__init__(message)
        self.units = units or []


class ChunkOutputError(ChunkerError):
    """Chunks could not be serialized or written."""
