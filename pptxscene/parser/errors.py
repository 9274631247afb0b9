"""Error taxonomy for package reconstruction.

Only MalformedPackage escapes PPTXReader.read(). The other kinds are
absorbed where they happen and recorded as Diagnostic entries.
"""

from typing import Optional


class PackageError(Exception):
    """Base class for all reconstruction errors."""

    kind = "PackageError"

    def __init__(self, message: str, part: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.part = part


class MalformedPackage(PackageError):
    """The archive cannot be opened, or the presentation part is unusable."""

    kind = "MalformedPackage"


class MissingPart(PackageError):
    """A referenced part is absent from the archive."""

    kind = "MissingPart"


class MissingRelationship(PackageError):
    """A relationship id is absent from a part's relationship map."""

    kind = "MissingRelationship"


class UnresolvedMedia(PackageError):
    """A relationship target matches no archive entry."""

    kind = "UnresolvedMedia"


class UnsupportedNodeKind(PackageError):
    """A shape tree child of a kind that is not reconstructed."""

    kind = "UnsupportedNodeKind"


class ExtractionFailed(PackageError):
    """An unexpected error while building one element or slide."""

    kind = "ExtractionFailed"
