"""Exceptions raised by the structured matrix containers."""


class IndexOutOfRangeError(IndexError):
    """A logical ``(row, column)`` index lies outside the matrix."""


class ConstructionError(ValueError):
    """A container could not be built from the supplied data."""


class DimensionMismatchError(ValueError):
    """Requested dimensions are incompatible with the stored data."""


class CursorMismatchError(RuntimeError):
    """Two cursors were combined that do not traverse the same line of a matrix."""
