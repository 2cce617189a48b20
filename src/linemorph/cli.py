"""
CLI entry point and pipeline orchestration for linemorph.
"""

import os
import sys
import click

from .config import load_config, Config
from .errors import LineMorphError

TOTAL_STAGES = 4


def _stage(n: int, msg: str) -> None:
    """Print a stage label."""
    print(f"\n[{n}/{TOTAL_STAGES}] {msg}", flush=True)


def _run_pipeline(config: Config) -> None:
    """Run the read -> correspond -> morph -> match pipeline."""
    from .correspondence import build_correspondence
    from .curves import line_length
    from .io import read_lines, morph_frames, match_frame, export_geojson, export_csv

    print(f"Running pipeline for: {config.input_file}")
    paths = config.output_paths()

    # 1. Read lines
    _stage(1, "Reading lines...")
    initial_lines, final_lines = read_lines(
        config.input_path(), flatten=config.reduce_to_2d
    )
    print(f"  {len(initial_lines)} initial lines, {len(final_lines)} final lines")

    # 2. Build correspondence
    _stage(2, f"Building {config.correspondence_type.name} correspondence...")
    correspondence = build_correspondence(
        config.correspondence_type, initial_lines, final_lines
    )
    merged = correspondence.merged_initial()
    final = correspondence.merged_final()
    print(
        f"  Initial: {merged.num_points()} vertices, length {line_length(merged):.3f}"
    )
    print(f"  Final: {final.num_points()} vertices, length {line_length(final):.3f}")

    # 3. Morph
    _stage(3, f"Morphing in {config.steps} steps...")
    gdf_morphs = morph_frames(correspondence, config.steps)
    export_geojson(gdf_morphs, paths.morphs_geojson)
    print(f"  Wrote {len(gdf_morphs)} morphs to {paths.morphs_geojson}")

    # 4. Match vertices
    if config.write_matches:
        _stage(4, "Matching vertices...")
        gdf_matches, table = match_frame(correspondence)
        export_geojson(gdf_matches, paths.matches_geojson)
        export_csv(table, paths.matches_csv)
        print(
            f"  {len(table)} vertex pairs, "
            f"max offset {table['offset'].max():.3f}, "
            f"mean offset {table['offset'].mean():.3f}"
        )
    else:
        _stage(4, "Matching vertices... (skipped)")

    print("\nComplete")


def _ensure_directories(config: Config) -> None:
    """Create input and output directories if needed."""
    if not os.path.exists(config.input_directory):
        os.makedirs(config.input_directory)
    if not os.path.exists(config.output_directory):
        os.makedirs(config.output_directory)


def _validate_input_exists(config: Config) -> None:
    """Verify the input file exists; exit with helpful message if not."""
    input_path = config.input_path()
    if not os.path.exists(input_path):
        print(f"\nERROR: Input file not found!")
        print(f"  Expected file: {input_path}")
        print(f"  Profile setting: input_file = {config.input_file}")
        print(f"  Current working directory: {os.getcwd()}")
        sys.exit(1)


@click.command(help="Morph and match an initial linear feature onto its final counterpart.")
@click.option(
    "--profile",
    required=True,
    help="Path to the morph profile configuration file (required).",
    type=click.Path(exists=True),
)
def main(profile: str) -> None:
    """Morph and match an initial linear feature onto its final counterpart."""
    print(f"Running with profile: {profile}")
    config = load_config(profile)
    _ensure_directories(config)
    _validate_input_exists(config)
    try:
        _run_pipeline(config)
    except (LineMorphError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
