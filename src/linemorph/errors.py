"""
Exceptions raised by the geometry adapter and the correspondence engine.
"""

from typing import Optional


class LineMorphError(Exception):
    """Base class for all linemorph failures."""


class ConversionError(LineMorphError):
    """A geometry could not be converted between the two models."""


class UnsupportedGeometryType(ConversionError):
    """The geometry type has no counterpart in the target model."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Unhandled geometry type: {type_name}")


class DegenerateRing(ConversionError):
    """A ring has too few positions or is not closed."""

    def __init__(self, size: int, closed: bool = True):
        self.size = size
        self.closed = closed
        if closed:
            msg = f"Ring with less than 4 points ({size} positions)"
        else:
            msg = f"Ring is not closed ({size} positions)"
        super().__init__(msg)


class InteriorRingConversionFailure(ConversionError):
    """An interior ring of a polygon could not be converted."""

    def __init__(self, index: int, reason: Optional[str] = None):
        self.index = index
        self.reason = reason
        msg = f"Interior ring {index} could not be converted"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class MemberConversionFailure(ConversionError):
    """A member of a collection could not be converted."""

    def __init__(self, container: str, index: int, reason: Optional[str] = None):
        self.container = container
        self.index = index
        self.reason = reason
        msg = f"{container} member {index} could not be converted"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class DegenerateLine(LineMorphError):
    """A zero-length line was used for a curvilinear abscissa lookup."""

    def __init__(self, role: str = "line"):
        self.role = role
        super().__init__(f"Cannot parameterise zero-length {role}")
