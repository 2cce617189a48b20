"""
Curvilinear correspondences between an initial linear feature and its final
counterpart: parametric morphs and explicit vertex pairings.

A vertex at arc length ``d`` on a line of length ``L`` corresponds to the point
at curvilinear abscissa ``d / L * L'`` on the other line of length ``L'``.
"""

import logging
from enum import Enum
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .constants import ToleranceConfig
from .curves import compile_arcs, cumulative_lengths, end_point, points_at_ratios, start_point
from .errors import DegenerateLine
from .spatial import DirectPosition, LineString

logger = logging.getLogger(__name__)


class CorrespondenceType(Enum):
    """Matching pattern between initial and final features."""

    ONE_TO_ONE = "C1"
    # One initial line split into several consecutive final sub-lines
    SPLIT = "C3"
    # Several consecutive initial sub-lines collapsed into one final line
    MERGE = "C3_"


class MatchingSide(Enum):
    """Which line is walked when pairing vertices: the one with more vertices."""

    INITIAL_IS_LONGER = "initial"
    FINAL_IS_LONGER = "final"


def curvilinear_mapping(source: LineString, target: LineString) -> list[DirectPosition]:
    """Counterpart on ``target`` of every vertex of ``source``, in order.

    The first vertex maps to the start of ``target``. Raises DegenerateLine
    when either line has zero length.
    """
    positions = source.coord()
    cum = cumulative_lengths(source)
    if len(positions) < 2 or cum[-1] <= ToleranceConfig.ZERO_LENGTH:
        raise DegenerateLine("source line")
    return [start_point(target)] + points_at_ratios(target, cum[1:] / cum[-1])


def _pair_vertices(
    source: LineString,
    target: LineString,
    source_out: list,
    target_out: list,
) -> None:
    """Append each vertex of ``source`` and its counterpart on ``target``."""
    positions = source.coord()
    mapping = curvilinear_mapping(source, target)
    if positions[0] not in source_out:
        source_out.append(positions[0])
        target_out.append(mapping[0])
    for position, counterpart in zip(positions[1:], mapping[1:]):
        source_out.append(position)
        target_out.append(counterpart)


def _interleave_features(lines: Sequence[LineString]) -> list:
    """Start point of the first line, then each line followed by its end point."""
    features: list = [start_point(lines[0])]
    for line in lines:
        features.append(line)
        features.append(end_point(line))
    return features


class LineCorrespondence:
    """Immutable pairing of initial line(s) with final line(s).

    Subclasses fix the matching pattern and the feature lists; morphing and
    vertex matching always run between the merged initial line and the
    merged final line.
    """

    correspondence_type: CorrespondenceType

    def __init__(
        self,
        initial_lines: Sequence[LineString],
        final_lines: Sequence[LineString],
    ):
        if not initial_lines or not final_lines:
            raise ValueError("A correspondence needs initial and final lines")
        self._initial_lines = tuple(initial_lines)
        self._final_lines = tuple(final_lines)

    @property
    def initial_lines(self) -> tuple:
        return self._initial_lines

    @property
    def final_lines(self) -> tuple:
        return self._final_lines

    @property
    def type(self) -> CorrespondenceType:
        return self.correspondence_type

    def merged_initial(self) -> LineString:
        return compile_arcs(self._initial_lines)

    def merged_final(self) -> LineString:
        return compile_arcs(self._final_lines)

    def matched_features_initial(self) -> list:
        return list(self._initial_lines)

    def matched_features_final(self) -> list:
        return list(self._final_lines)

    def morph(self, t: float) -> list[DirectPosition]:
        """Positions of the morph at interpolation factor ``t`` in [0, 1].

        One 2D position per vertex of the merged initial line, blended towards
        its curvilinear counterpart on the final line. ``morph(0)`` is the
        merged initial line; ``morph(1)`` is that same vertex count resampled
        onto the final line, which differs from the final line's own vertices
        whenever the vertex counts differ.
        """
        if not 0.0 <= t <= 1.0:
            raise ValueError(f"Interpolation factor must be in [0, 1], got {t}")
        merged = self.merged_initial()
        mapping = curvilinear_mapping(merged, self.merged_final())
        return [
            DirectPosition(p.x + t * (q.x - p.x), p.y + t * (q.y - p.y))
            for p, q in zip(merged.coord(), mapping)
        ]

    def morph_line(self, t: float) -> LineString:
        return LineString(self.morph(t), crs=self.merged_initial().crs)

    def matching_side(self) -> MatchingSide:
        if self.merged_initial().num_points() > self.merged_final().num_points():
            return MatchingSide.INITIAL_IS_LONGER
        return MatchingSide.FINAL_IS_LONGER

    def match_vertices(
        self,
        initial_coords: Optional[list] = None,
        final_coords: Optional[list] = None,
    ) -> tuple[list, list]:
        """Pair the vertices of the initial and final lines.

        The line with more vertices is walked; its vertices are copied as-is
        and their counterparts on the other line are interpolated. The first
        vertex is only appended if its list does not already hold it. Both
        lists are extended in place and returned, always with equal lengths.
        """
        if initial_coords is None:
            initial_coords = []
        if final_coords is None:
            final_coords = []
        merged = self.merged_initial()
        final = self.merged_final()

        side = self.matching_side()
        if side is MatchingSide.INITIAL_IS_LONGER:
            _pair_vertices(merged, final, initial_coords, final_coords)
        else:
            _pair_vertices(final, merged, final_coords, initial_coords)
        logger.debug(
            "%s: matched %d vertex pairs (%s)",
            self.type.name,
            len(initial_coords),
            side.value,
        )
        return initial_coords, final_coords

    def match_table(self) -> pd.DataFrame:
        """Vertex pairs with the planar offset between each pair."""
        initial_coords, final_coords = self.match_vertices()
        initial_xy = np.array([(p.x, p.y) for p in initial_coords], dtype=float)
        final_xy = np.array([(p.x, p.y) for p in final_coords], dtype=float)
        offset = np.hypot(
            final_xy[:, 0] - initial_xy[:, 0], final_xy[:, 1] - initial_xy[:, 1]
        )
        return pd.DataFrame(
            {
                "initial_x": initial_xy[:, 0],
                "initial_y": initial_xy[:, 1],
                "final_x": final_xy[:, 0],
                "final_y": final_xy[:, 1],
                "offset": offset,
            }
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({len(self._initial_lines)} initial, "
            f"{len(self._final_lines)} final)"
        )


class OneToOneCorrespondence(LineCorrespondence):
    """One initial line matched with one final line."""

    correspondence_type = CorrespondenceType.ONE_TO_ONE

    def __init__(self, initial_line: LineString, final_line: LineString):
        super().__init__([initial_line], [final_line])


class SplitCorrespondence(LineCorrespondence):
    """One initial line matched with several consecutive final sub-lines."""

    correspondence_type = CorrespondenceType.SPLIT

    def __init__(self, initial_line: LineString, final_lines: Sequence[LineString]):
        super().__init__([initial_line], final_lines)
        self._final_features = _interleave_features(self._final_lines)

    def matched_features_final(self) -> list:
        return list(self._final_features)


class MergeCorrespondence(LineCorrespondence):
    """Several consecutive initial sub-lines matched with one final line."""

    correspondence_type = CorrespondenceType.MERGE

    def __init__(self, final_line: LineString, initial_lines: Sequence[LineString]):
        super().__init__(initial_lines, [final_line])
        self._initial_features = _interleave_features(self._initial_lines)

    @property
    def final_line(self) -> LineString:
        return self._final_lines[0]

    def matched_features_initial(self) -> list:
        return list(self._initial_features)


def build_correspondence(
    correspondence_type: CorrespondenceType,
    initial_lines: Sequence[LineString],
    final_lines: Sequence[LineString],
) -> LineCorrespondence:
    """Build the correspondence matching a pattern from ordered line lists."""
    if correspondence_type is CorrespondenceType.ONE_TO_ONE:
        if len(initial_lines) != 1 or len(final_lines) != 1:
            raise ValueError("ONE_TO_ONE needs exactly one initial and one final line")
        return OneToOneCorrespondence(initial_lines[0], final_lines[0])
    if correspondence_type is CorrespondenceType.SPLIT:
        if len(initial_lines) != 1:
            raise ValueError("SPLIT needs exactly one initial line")
        return SplitCorrespondence(initial_lines[0], final_lines)
    if len(final_lines) != 1:
        raise ValueError("MERGE needs exactly one final line")
    return MergeCorrespondence(final_lines[0], initial_lines)
