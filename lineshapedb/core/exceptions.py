"""
Exception hierarchy for lineshapedb.

Every failure raised by the morphing core or the line-shape store derives
from :class:`LineShapeError`. The concrete classes also derive from the
matching built-in exception so that callers catching ``ValueError`` or
``LookupError`` keep working.
"""

from typing import Any, Optional


class LineShapeError(Exception):
    """Base class for all lineshapedb errors."""


class DegenerateInputError(LineShapeError, ValueError):
    """Too few samples, non-monotone abscissae, or a curve with no mass."""


class EmptyDomainError(LineShapeError, ValueError):
    """Two curves do not overlap on an interval of positive length."""


class OutOfDomainError(LineShapeError, ValueError):
    """An interpolant was evaluated outside its sample range."""


class NoBracketError(LineShapeError, LookupError):
    """
    The query (n, T) is not surrounded by measured datasets.

    Attributes
    ----------
    corners : CornerSet or None
        The partially filled corner set found before giving up
    """

    def __init__(self, message: str, corners: Optional[Any] = None):
        super().__init__(message)
        self.corners = corners


class MissingDatasetError(LineShapeError, LookupError):
    """A corner dataset could not be fetched while interpolating."""


class NotFoundError(LineShapeError, LookupError):
    """A store lookup by id returned nothing."""


class DatabaseError(LineShapeError):
    """The line-shape database could not be opened, verified or written."""
