"""
Curve arithmetic on native line strings: arc length, curvilinear abscissa,
concatenation of consecutive sub-lines and envelopes.

Lookups run on the shapely counterpart of a line; only the cumulative
vertex lengths, from which the correspondences derive exact ratios, are
computed here.
"""

from typing import Optional, Sequence

import numpy as np
import shapely
from shapely.geometry import MultiPoint as ShapelyMultiPoint
from shapely.geometry import Point as ShapelyPoint

from .adapter import to_coordinate_sequence, to_shapely
from .constants import ToleranceConfig
from .errors import DegenerateLine
from .spatial import DirectPosition, LineString


def _xy(positions: Sequence[DirectPosition]) -> np.ndarray:
    """(N, 2) array of planar coordinates."""
    if not positions:
        return np.empty((0, 2), dtype=float)
    return np.array([(p.x, p.y) for p in positions], dtype=float)


def cumulative_lengths(line: LineString) -> np.ndarray:
    """Arc length from the start of the line to each of its vertices.

    The first entry is always 0 and the last one is the line length; both
    the morph and the vertex matching derive their ratios from this array
    so the last ratio is exactly 1.
    """
    xy = _xy(line.coord())
    if len(xy) == 0:
        return np.zeros(0, dtype=float)
    seg = np.hypot(np.diff(xy[:, 0]), np.diff(xy[:, 1]))
    return np.concatenate(([0.0], np.cumsum(seg)))


def line_length(line: LineString) -> float:
    if line.num_points() < 2:
        return 0.0
    return float(to_shapely(line).length)


def start_point(line: LineString) -> Optional[DirectPosition]:
    positions = line.coord()
    return positions[0] if positions else None


def end_point(line: LineString) -> Optional[DirectPosition]:
    positions = line.coord()
    return positions[-1] if positions else None


def _parameterisable(line: LineString, role: str):
    """shapely counterpart of ``line``; DegenerateLine if it has no length."""
    if line.num_points() < 2:
        raise DegenerateLine(role)
    shape = to_shapely(line)
    if shape.length <= ToleranceConfig.ZERO_LENGTH:
        raise DegenerateLine(role)
    return shape


def _planar(point) -> DirectPosition:
    return DirectPosition(float(point.x), float(point.y))


def point_at_abscissa(line: LineString, abscissa: float) -> DirectPosition:
    """Point of ``line`` at curvilinear abscissa ``abscissa``.

    Values below 0 or above the line length are clamped to the end points so
    that accumulated floating point drift never falls off the line.
    Raises DegenerateLine for a zero-length line.
    """
    shape = _parameterisable(line, "target line")
    positions = line.coord()
    if abscissa <= 0.0:
        return positions[0].to_2d()
    if abscissa >= shape.length:
        return positions[-1].to_2d()
    return _planar(shape.interpolate(abscissa))


def points_at_ratios(line: LineString, ratios: Sequence[float]) -> list[DirectPosition]:
    """Points of ``line`` at fractions of its length, in order.

    Ratios are clamped to [0, 1]; a ratio of exactly 1 gives the end point.
    Raises DegenerateLine for a zero-length line.
    """
    shape = _parameterisable(line, "target line")
    ratios = np.clip(np.asarray(ratios, dtype=float), 0.0, 1.0)
    points = shapely.line_interpolate_point(shape, ratios, normalized=True)
    return [_planar(p) for p in points]


def compile_arcs(lines: Sequence[LineString]) -> LineString:
    """Concatenate consecutive sub-lines into one line.

    The first vertex of a sub-line is dropped when it coincides with the end
    of the previous one; no other simplification is done.
    """
    merged: list[DirectPosition] = []
    crs = None
    for line in lines:
        coords = list(line.coord())
        if not coords:
            continue
        if crs is None:
            crs = line.crs
        if merged and merged[-1].equals_2d(coords[0]):
            merged.extend(coords[1:])
        else:
            merged.extend(coords)
    return LineString(merged, crs=crs)


def envelope(geom) -> Optional[tuple[float, float, float, float]]:
    """Bounding box ``(minx, miny, maxx, maxy)`` of a native geometry."""
    coords = to_coordinate_sequence(geom.coord())
    if not coords:
        return None
    minx, miny, maxx, maxy = ShapelyMultiPoint(coords).bounds
    return float(minx), float(miny), float(maxx), float(maxy)


def distance_to_line(position: DirectPosition, line: LineString) -> float:
    """Shortest planar distance from a position to a line."""
    positions = line.coord()
    if not positions:
        return float("inf")
    if len(positions) == 1:
        return position.distance_2d(positions[0])
    return float(ShapelyPoint(position.x, position.y).distance(to_shapely(line)))
