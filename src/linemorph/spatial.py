"""
Native geometry model: direct positions and the closed set of geometry variants.

All variants are frozen dataclasses with structural equality, so a converted
geometry never aliases mutable state of its source.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class DirectPosition:
    """A 2D or 3D coordinate. ``z`` is None for 2D positions."""

    x: float
    y: float
    z: Optional[float] = None

    @property
    def is_3d(self) -> bool:
        return self.z is not None

    @property
    def coords(self) -> tuple:
        if self.z is None:
            return (self.x, self.y)
        return (self.x, self.y, self.z)

    def distance_2d(self, other: "DirectPosition") -> float:
        """Planar distance, ignoring z."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def to_2d(self) -> "DirectPosition":
        return DirectPosition(self.x, self.y)

    def equals_2d(self, other: "DirectPosition") -> bool:
        return self.x == other.x and self.y == other.y


def _as_tuple(obj, name: str) -> None:
    """Freeze a sequence attribute of a frozen dataclass."""
    object.__setattr__(obj, name, tuple(getattr(obj, name)))


@dataclass(frozen=True)
class Point:
    """A single position; an empty point has no position."""

    position: Optional[DirectPosition] = None
    crs: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.position is None

    def coord(self) -> tuple:
        if self.position is None:
            return ()
        return (self.position,)


@dataclass(frozen=True)
class LineString:
    """An open or closed polyline."""

    positions: tuple = ()
    crs: Optional[int] = None

    def __post_init__(self):
        _as_tuple(self, "positions")

    @property
    def is_empty(self) -> bool:
        return len(self.positions) == 0

    def coord(self) -> tuple:
        return self.positions

    def num_points(self) -> int:
        return len(self.positions)

    def is_closed(self) -> bool:
        return bool(self.positions) and self.positions[0].equals_2d(self.positions[-1])


@dataclass(frozen=True)
class Ring:
    """A closed polyline bounding a surface.

    Kept as a distinct type rather than a LineString flag; a valid ring is
    closed and has at least four positions, which the adapter checks.
    """

    positions: tuple = ()
    crs: Optional[int] = None

    def __post_init__(self):
        _as_tuple(self, "positions")

    @property
    def is_empty(self) -> bool:
        return len(self.positions) == 0

    def coord(self) -> tuple:
        return self.positions

    def num_points(self) -> int:
        return len(self.positions)

    def is_closed(self) -> bool:
        return bool(self.positions) and self.positions[0].equals_2d(self.positions[-1])


@dataclass(frozen=True)
class Polygon:
    """One exterior ring and zero or more interior rings (holes)."""

    exterior: Optional[Ring] = None
    interiors: tuple = ()
    crs: Optional[int] = None

    def __post_init__(self):
        _as_tuple(self, "interiors")

    @property
    def is_empty(self) -> bool:
        return self.exterior is None or self.exterior.is_empty

    def coord(self) -> tuple:
        if self.exterior is None:
            return ()
        positions = list(self.exterior.positions)
        for ring in self.interiors:
            positions.extend(ring.positions)
        return tuple(positions)


@dataclass(frozen=True)
class _Collection(ABC):
    """Shared behaviour of the collection variants."""

    @property
    @abstractmethod
    def members(self) -> tuple:
        """Members in order."""

    @property
    def is_empty(self) -> bool:
        return all(member.is_empty for member in self.members)

    def coord(self) -> tuple:
        positions = []
        for member in self.members:
            positions.extend(member.coord())
        return tuple(positions)

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self):
        return iter(self.members)


@dataclass(frozen=True)
class MultiPoint(_Collection):
    points: tuple = ()
    crs: Optional[int] = None

    def __post_init__(self):
        _as_tuple(self, "points")

    @property
    def members(self) -> tuple:
        return self.points


@dataclass(frozen=True)
class MultiCurve(_Collection):
    curves: tuple = ()
    crs: Optional[int] = None

    def __post_init__(self):
        _as_tuple(self, "curves")

    @property
    def members(self) -> tuple:
        return self.curves


@dataclass(frozen=True)
class MultiSurface(_Collection):
    surfaces: tuple = ()
    crs: Optional[int] = None

    def __post_init__(self):
        _as_tuple(self, "surfaces")

    @property
    def members(self) -> tuple:
        return self.surfaces


@dataclass(frozen=True)
class Aggregate(_Collection):
    """Heterogeneous collection of geometries."""

    geometries: tuple = ()
    crs: Optional[int] = None

    def __post_init__(self):
        _as_tuple(self, "geometries")

    @property
    def members(self) -> tuple:
        return self.geometries


@dataclass(frozen=True)
class Solid(_Collection):
    """A volume described by the ordered list of its bounding faces."""

    faces: tuple = field(default=())
    crs: Optional[int] = None

    def __post_init__(self):
        _as_tuple(self, "faces")

    @property
    def members(self) -> tuple:
        return self.faces


def geometry_type(geom) -> str:
    """Name of a geometry's variant, used in error messages."""
    return type(geom).__name__
