"""
Structural conversion between native geometries and shapely geometries.

Both directions copy the data structures directly (no WKT round trip). Every
position is duplicated, so the result never shares state with its input and
either side can be discarded after conversion.

Dispatch is by exact geometry type through closed tables; a type missing from
a table raises UnsupportedGeometryType.
"""

import logging
import math
from typing import Callable, Optional, Sequence

import shapely
from shapely import geometry as sg
from shapely.geometry.base import BaseGeometry

from .constants import MIN_RING_POSITIONS
from .errors import (
    ConversionError,
    DegenerateRing,
    InteriorRingConversionFailure,
    MemberConversionFailure,
    UnsupportedGeometryType,
)
from .spatial import (
    Aggregate,
    DirectPosition,
    LineString,
    MultiCurve,
    MultiPoint,
    MultiSurface,
    Point,
    Polygon,
    Ring,
    Solid,
    geometry_type,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Positions and coordinates
# ---------------------------------------------------------------------------


def to_coordinate(position: DirectPosition) -> tuple:
    """Coordinate tuple of a position, 2D or 3D."""
    return position.coords


def to_coordinate_sequence(positions: Optional[Sequence[DirectPosition]]) -> list[tuple]:
    """Coordinate tuples for a position sequence.

    shapely needs a uniform dimension, so when only some positions carry a z
    the others get NaN.
    """
    if not positions:
        return []
    if any(p.is_3d for p in positions):
        return [
            (p.x, p.y, p.z if p.z is not None else math.nan) for p in positions
        ]
    return [(p.x, p.y) for p in positions]


def to_direct_position(coord: Sequence[float]) -> DirectPosition:
    z = None
    if len(coord) > 2 and not math.isnan(coord[2]):
        z = float(coord[2])
    return DirectPosition(float(coord[0]), float(coord[1]), z)


def to_position_list(coords: Sequence[Sequence[float]]) -> list[DirectPosition]:
    """Positions for a raw coordinate array.

    When the first and last coordinates are at the same place, the closing
    position is the first converted position itself rather than a copy of
    the last coordinate, so ring closure holds by identity.
    """
    coords = list(coords)
    positions: list[DirectPosition] = []
    if not coords:
        return positions
    first, last = coords[0], coords[-1]
    closed = first[0] == last[0] and first[1] == last[1]
    for coord in coords[:-1]:
        positions.append(to_direct_position(coord))
    if closed and positions:
        positions.append(positions[0])
    else:
        positions.append(to_direct_position(last))
    return positions


def to_2d_coordinates(coords: Sequence[Sequence[float]]) -> list[tuple[float, float]]:
    """Drop the z ordinate from raw coordinates."""
    return [(float(c[0]), float(c[1])) for c in coords]


def to_2d_positions(positions: Sequence[DirectPosition]) -> list[DirectPosition]:
    """Drop z from every position, keeping a shared closing position shared."""
    if not positions:
        return []
    flat = [p.to_2d() for p in positions]
    if len(positions) > 1 and positions[-1] is positions[0]:
        flat[-1] = flat[0]
    return flat


# ---------------------------------------------------------------------------
# Native -> shapely
# ---------------------------------------------------------------------------


def _point_to_shapely(geom: Point) -> BaseGeometry:
    if geom.is_empty:
        return sg.Point()
    return sg.Point(to_coordinate(geom.position))


def _line_string_to_shapely(geom: LineString) -> BaseGeometry:
    coords = to_coordinate_sequence(geom.coord())
    return sg.LineString(coords) if coords else sg.LineString()


def _ring_to_shapely(geom: Ring) -> Optional[BaseGeometry]:
    """LinearRing for a closed ring; None when the ring is not closed."""
    positions = geom.coord()
    if not positions:
        return sg.LinearRing()
    if len(positions) < MIN_RING_POSITIONS:
        logger.debug("Degenerate ring %r", positions)
        raise DegenerateRing(len(positions))
    coords = to_coordinate_sequence(positions)
    first, last = coords[0], coords[-1]
    if first[0] == last[0] and first[1] == last[1]:
        return sg.LinearRing(coords)
    logger.debug("Ring is not closed, no linear ring built: %r", positions)
    return None


def _polygon_to_shapely(geom: Polygon) -> BaseGeometry:
    if geom.is_empty:
        if geom.interiors:
            raise ConversionError(
                f"Polygon without exterior has {len(geom.interiors)} interior rings"
            )
        return sg.Polygon()
    shell = _ring_to_shapely(geom.exterior)
    if shell is None:
        raise DegenerateRing(geom.exterior.num_points(), closed=False)

    holes = []
    for index, ring in enumerate(geom.interiors):
        try:
            hole = _ring_to_shapely(ring)
        except DegenerateRing as exc:
            raise InteriorRingConversionFailure(index, str(exc)) from exc
        if hole is None:
            raise InteriorRingConversionFailure(index, "ring is not closed")
        if hole.is_empty:
            raise InteriorRingConversionFailure(index, "ring is empty")
        holes.append(hole)
    return sg.Polygon(shell, holes)


def _convert_members(members, expected: type, container: str) -> list:
    """Convert each member in order; any failure aborts the whole call.

    Failures of a member are raised as MemberConversionFailure carrying the
    member index, chained from the underlying error.
    """
    parts = []
    for index, member in enumerate(members):
        try:
            part = to_shapely(member)
        except ConversionError as exc:
            raise MemberConversionFailure(container, index, str(exc)) from exc
        if part is None:
            # Only unclosed rings convert to nothing
            raise MemberConversionFailure(container, index, "ring is not closed")
        if not isinstance(part, expected):
            raise UnsupportedGeometryType(
                f"{geometry_type(member)} in {container} member {index}"
            )
        parts.append(part)
    return parts


def _multi_point_to_shapely(geom: MultiPoint) -> BaseGeometry:
    return sg.MultiPoint(_convert_members(geom.points, sg.Point, "MultiPoint"))


def _multi_curve_to_shapely(geom: MultiCurve) -> BaseGeometry:
    return sg.MultiLineString(
        _convert_members(geom.curves, sg.LineString, "MultiCurve")
    )


def _multi_surface_to_shapely(geom: MultiSurface) -> BaseGeometry:
    return sg.MultiPolygon(
        _convert_members(geom.surfaces, sg.Polygon, "MultiSurface")
    )


def _aggregate_to_shapely(geom: Aggregate) -> BaseGeometry:
    return sg.GeometryCollection(
        _convert_members(geom.geometries, BaseGeometry, "Aggregate")
    )


def _solid_to_shapely(geom: Solid) -> BaseGeometry:
    # Solids have no simple-feature counterpart: keep their faces only
    return sg.MultiPolygon(_convert_members(geom.faces, sg.Polygon, "Solid"))


_TO_SHAPELY: dict[type, Callable] = {
    Point: _point_to_shapely,
    LineString: _line_string_to_shapely,
    Ring: _ring_to_shapely,
    Polygon: _polygon_to_shapely,
    MultiPoint: _multi_point_to_shapely,
    MultiCurve: _multi_curve_to_shapely,
    MultiSurface: _multi_surface_to_shapely,
    Aggregate: _aggregate_to_shapely,
    Solid: _solid_to_shapely,
}


def to_shapely(geom) -> Optional[BaseGeometry]:
    """Convert a native geometry to a shapely geometry.

    Returns None for None, and for a ring that has enough positions but is
    not closed; callers must check for that case. The CRS code is copied
    to the SRID of the result.

    Raises UnsupportedGeometryType, DegenerateRing or
    InteriorRingConversionFailure; the first failure aborts the conversion.
    """
    if geom is None:
        return None
    converter = _TO_SHAPELY.get(type(geom))
    if converter is None:
        raise UnsupportedGeometryType(geometry_type(geom))
    result = converter(geom)
    if result is None:
        return None
    if geom.crs is not None:
        result = shapely.set_srid(result, geom.crs)
    return result


# ---------------------------------------------------------------------------
# shapely -> native
# ---------------------------------------------------------------------------


def _point_from_shapely(geom, crs):
    if geom.is_empty:
        return Point(crs=crs)
    return Point(to_direct_position(geom.coords[0]), crs=crs)


def _linear_ring_from_shapely(geom, crs):
    return Ring(to_position_list(geom.coords), crs=crs)


def _line_string_from_shapely(geom, crs):
    return LineString(to_position_list(geom.coords), crs=crs)


def _polygon_from_shapely(geom, crs):
    if geom.is_empty:
        return Polygon(crs=crs)
    exterior = Ring(to_position_list(geom.exterior.coords))
    interiors = [_to_native(ring) for ring in geom.interiors]
    return Polygon(exterior, interiors, crs=crs)


def _multi_point_from_shapely(geom, crs):
    return MultiPoint([_to_native(g) for g in geom.geoms], crs=crs)


def _multi_line_string_from_shapely(geom, crs):
    return MultiCurve([_to_native(g) for g in geom.geoms], crs=crs)


def _multi_polygon_from_shapely(geom, crs):
    return MultiSurface([_to_native(g) for g in geom.geoms], crs=crs)


def _geometry_collection_from_shapely(geom, crs):
    return Aggregate([_to_native(g) for g in geom.geoms], crs=crs)


_FROM_SHAPELY: dict[type, Callable] = {
    sg.Point: _point_from_shapely,
    sg.LinearRing: _linear_ring_from_shapely,
    sg.LineString: _line_string_from_shapely,
    sg.Polygon: _polygon_from_shapely,
    sg.MultiPoint: _multi_point_from_shapely,
    sg.MultiLineString: _multi_line_string_from_shapely,
    sg.MultiPolygon: _multi_polygon_from_shapely,
    sg.GeometryCollection: _geometry_collection_from_shapely,
}


def _to_native(geom, crs: Optional[int] = None):
    converter = _FROM_SHAPELY.get(type(geom))
    if converter is None:
        raise UnsupportedGeometryType(type(geom).__name__)
    return converter(geom, crs)


def from_shapely(geom: Optional[BaseGeometry]):
    """Convert a shapely geometry to a native geometry.

    The SRID of ``geom`` is copied to ``crs`` of the result (an SRID of 0
    means no CRS); members of collections carry no CRS of their own.
    Raises UnsupportedGeometryType for geometry types with no counterpart.
    """
    if geom is None:
        return None
    if type(geom) not in _FROM_SHAPELY:
        raise UnsupportedGeometryType(type(geom).__name__)
    srid = int(shapely.get_srid(geom))
    return _to_native(geom, srid or None)


# ---------------------------------------------------------------------------
# 2D reduction
# ---------------------------------------------------------------------------


def _reduce_ring(ring: Optional[Ring]) -> Optional[Ring]:
    if ring is None:
        return None
    return Ring(to_2d_positions(ring.positions), crs=ring.crs)


_TO_2D: dict[type, Callable] = {
    Point: lambda g: Point(
        None if g.is_empty else g.position.to_2d(), crs=g.crs
    ),
    LineString: lambda g: LineString(to_2d_positions(g.positions), crs=g.crs),
    Ring: _reduce_ring,
    Polygon: lambda g: Polygon(
        _reduce_ring(g.exterior),
        [_reduce_ring(r) for r in g.interiors],
        crs=g.crs,
    ),
    MultiPoint: lambda g: MultiPoint([reduce_to_2d(m) for m in g.points], crs=g.crs),
    MultiCurve: lambda g: MultiCurve([reduce_to_2d(m) for m in g.curves], crs=g.crs),
    MultiSurface: lambda g: MultiSurface(
        [reduce_to_2d(m) for m in g.surfaces], crs=g.crs
    ),
    Aggregate: lambda g: Aggregate([reduce_to_2d(m) for m in g.geometries], crs=g.crs),
    Solid: lambda g: Solid([reduce_to_2d(m) for m in g.faces], crs=g.crs),
}


def reduce_to_2d(geom):
    """Rebuild a native geometry with every z ordinate dropped."""
    if geom is None:
        return None
    reducer = _TO_2D.get(type(geom))
    if reducer is None:
        raise UnsupportedGeometryType(geometry_type(geom))
    return reducer(geom)


# ---------------------------------------------------------------------------
# Type mapping
# ---------------------------------------------------------------------------

_SHAPELY_TYPES: dict[type, type] = {
    Point: sg.Point,
    LineString: sg.LineString,
    Ring: sg.LinearRing,
    Polygon: sg.Polygon,
    MultiPoint: sg.MultiPoint,
    MultiCurve: sg.MultiLineString,
    MultiSurface: sg.MultiPolygon,
    Aggregate: sg.GeometryCollection,
    Solid: sg.MultiPolygon,
}

_NATIVE_TYPES: dict[type, type] = {
    sg.Point: Point,
    sg.LineString: LineString,
    sg.LinearRing: Ring,
    sg.Polygon: Polygon,
    sg.MultiPoint: MultiPoint,
    sg.MultiLineString: MultiCurve,
    sg.MultiPolygon: MultiSurface,
    sg.GeometryCollection: Aggregate,
}


def to_shapely_type(geometry_class: type) -> type:
    """shapely class equivalent to a native geometry class."""
    return _SHAPELY_TYPES.get(geometry_class, BaseGeometry)


def from_shapely_type(geometry_class: type) -> Optional[type]:
    """Native class equivalent to a shapely class, None if there is none."""
    return _NATIVE_TYPES.get(geometry_class)
