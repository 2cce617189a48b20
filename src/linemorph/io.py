"""
GeoJSON input and output: read initial/final lines, write morphs and matches.
"""

import json
from typing import Optional

import numpy as np
import pandas as pd
import geopandas as gpd
import shapely

from .adapter import from_shapely, from_shapely_type, reduce_to_2d, to_shapely
from .constants import ROLE_FINAL, ROLE_INITIAL, ROLE_MATCH, ROLE_MORPH
from .correspondence import LineCorrespondence
from .spatial import DirectPosition, LineString


def load_features(path: str, crs: Optional[str] = None) -> gpd.GeoDataFrame:
    """Load a GeoJSON FeatureCollection into a GeoDataFrame."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    features = data.get("features", []) if isinstance(data, dict) else []
    gdf = gpd.GeoDataFrame.from_features(features, crs=crs)
    if "role" not in gdf.columns:
        raise ValueError(f"No 'role' property in {path}")
    if "order" not in gdf.columns:
        gdf["order"] = range(len(gdf))
    return gdf


def _native_lines(geom, epsg: Optional[int], flatten: bool) -> list[LineString]:
    """Native line strings for a LineString or MultiLineString geometry."""
    parts = list(geom.geoms) if hasattr(geom, "geoms") else [geom]
    lines = []
    for part in parts:
        if from_shapely_type(type(part)) is not LineString:
            raise ValueError(f"Expected line geometries, got {part.geom_type}")
        if epsg:
            part = shapely.set_srid(part, epsg)
        line = from_shapely(part)
        lines.append(reduce_to_2d(line) if flatten else line)
    return lines


def read_lines(
    path: str,
    crs: Optional[str] = None,
    flatten: bool = True,
) -> tuple[list[LineString], list[LineString]]:
    """Read the ordered initial and final lines of a GeoJSON file.

    Features carry a ``role`` property (``initial`` or ``final``) and an
    optional ``order`` giving the position of each sub-line in its chain.
    """
    gdf = load_features(path, crs=crs)
    epsg = gdf.crs.to_epsg() if gdf.crs is not None else None
    gdf = gdf.sort_values("order", kind="stable")

    initial_lines: list[LineString] = []
    final_lines: list[LineString] = []
    for _, row in gdf.iterrows():
        if row.geometry is None or row.geometry.is_empty:
            continue
        role = str(row["role"]).strip().lower()
        if role == ROLE_INITIAL:
            initial_lines.extend(_native_lines(row.geometry, epsg, flatten))
        elif role == ROLE_FINAL:
            final_lines.extend(_native_lines(row.geometry, epsg, flatten))
    return initial_lines, final_lines


def morph_frames(
    correspondence: LineCorrespondence,
    steps: int,
    crs=None,
) -> gpd.GeoDataFrame:
    """One morphed line per interpolation factor ``t = 0, 1/steps, ..., 1``."""
    rows = []
    for t in np.linspace(0.0, 1.0, steps + 1):
        line = correspondence.morph_line(float(t))
        rows.append(
            {
                "role": ROLE_MORPH,
                "t": float(t),
                "type": correspondence.type.value,
                "geometry": to_shapely(line),
            }
        )
    return gpd.GeoDataFrame(rows, geometry="geometry", crs=crs)


def match_frame(
    correspondence: LineCorrespondence,
    crs=None,
) -> tuple[gpd.GeoDataFrame, pd.DataFrame]:
    """Segments joining each matched vertex pair, and the pair table."""
    table = correspondence.match_table()
    geometries = [
        to_shapely(
            LineString(
                [
                    DirectPosition(row.initial_x, row.initial_y),
                    DirectPosition(row.final_x, row.final_y),
                ]
            )
        )
        for row in table.itertuples(index=False)
    ]
    gdf = gpd.GeoDataFrame(
        {
            "role": ROLE_MATCH,
            "pair": range(len(table)),
            "offset": table["offset"].to_numpy(),
        },
        geometry=geometries,
        crs=crs,
    )
    return gdf, table


def export_geojson(gdf: gpd.GeoDataFrame, path: str) -> None:
    # to_json() rather than to_file(): no GDAL driver needed for plain GeoJSON
    with open(path, "w", encoding="utf-8") as f:
        f.write(gdf.to_json())


def export_csv(df: pd.DataFrame, path: str) -> None:
    df.to_csv(path, index=False)
