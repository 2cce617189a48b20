"""
Constants for linemorph: tolerances, feature roles, and morph defaults.
"""

# Feature roles in input and output GeoJSON
ROLE_INITIAL = "initial"
ROLE_FINAL = "final"
ROLE_MORPH = "morph"
ROLE_MATCH = "match"

# Number of intervals between t=0 and t=1 when exporting morphs
DEFAULT_MORPH_STEPS = 10

# Minimum number of positions for a valid closed ring
MIN_RING_POSITIONS = 4


class ToleranceConfig:
    """Tolerance values for coordinate comparison and curvilinear lookups."""

    # On-line: distance below which a point is considered lying on a line
    ON_LINE = 1e-7

    # Zero length: lines shorter than this cannot be parameterised
    ZERO_LENGTH = 1e-12
