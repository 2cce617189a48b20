"""
Configuration loading and path resolution for linemorph.
"""

import configparser
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .constants import DEFAULT_MORPH_STEPS
from .correspondence import CorrespondenceType


@dataclass
class OutputPaths:
    """Resolved output file paths."""

    morphs_geojson: str
    matches_geojson: str
    matches_csv: str


@dataclass
class Config:
    """Run configuration for linemorph."""

    input_file: str
    input_directory: str
    output_directory: str
    output_name_prefix: str
    steps: int
    correspondence_type: CorrespondenceType
    reduce_to_2d: bool = True
    write_matches: bool = True

    def input_path(self) -> str:
        """Full path to the input GeoJSON file."""
        directory = os.path.join(os.getcwd(), self.input_directory)
        return os.path.join(directory, self.input_file)

    def output_paths(self) -> OutputPaths:
        prefix = self.output_name_prefix
        out_dir = self.output_directory
        return OutputPaths(
            morphs_geojson=os.path.join(out_dir, f"{prefix}_morphs.geojson"),
            matches_geojson=os.path.join(out_dir, f"{prefix}_matches.geojson"),
            matches_csv=os.path.join(out_dir, f"{prefix}_matches.csv"),
        )


def _case_preserving_config_parser() -> type[configparser.ConfigParser]:
    """Create a ConfigParser that preserves option case."""

    class CasePreservingConfigParser(configparser.ConfigParser):
        def optionxform(self, optionstr: str) -> str:
            return optionstr

    return CasePreservingConfigParser


def parse_bool(s: Optional[str], default: bool = False) -> bool:
    if s is None:
        return default
    return str(s).lower() in ("true", "1", "yes", "on")


def parse_correspondence_type(value: Optional[str]) -> CorrespondenceType:
    """Accept an enum name (``merge``) or a code (``C3_``); default MERGE."""
    if not value:
        return CorrespondenceType.MERGE
    key = value.strip()
    for member in CorrespondenceType:
        if key.upper() == member.name or key == member.value:
            return member
    print(
        f"Warning: Unknown correspondence_type '{value}'. Using default MERGE."
    )
    return CorrespondenceType.MERGE


def load_config(config_file: str) -> Config:
    """Load and validate configuration from an INI file."""

    parser_class = _case_preserving_config_parser()
    config = parser_class()
    config.read(config_file)

    parsed: dict[str, str] = {}
    for option, value in config.defaults().items():
        parsed[option] = value

    for section in config.sections():
        for option in config.options(section):
            parsed[option] = config.get(section, option)

    # Required
    input_file = parsed.get("input_file") or None
    if not input_file:
        print("Error. Please set input file name in morph profile")
        sys.exit(1)

    # Directories
    input_directory = parsed.get("input_directory", "input/")
    output_directory = parsed.get("output_directory", "output/")

    # Output prefix
    output_name_prefix = parsed.get("output_name_prefix") or Path(input_file).stem

    # Steps
    steps_str = parsed.get("steps", str(DEFAULT_MORPH_STEPS))
    try:
        steps = int(steps_str)
        if steps < 1:
            raise ValueError(steps_str)
    except (ValueError, TypeError):
        print(
            f"Warning: Invalid steps value '{steps_str}'. "
            f"Using default {DEFAULT_MORPH_STEPS}."
        )
        steps = DEFAULT_MORPH_STEPS

    correspondence_type = parse_correspondence_type(parsed.get("correspondence_type"))

    return Config(
        input_file=input_file,
        input_directory=input_directory,
        output_directory=output_directory,
        output_name_prefix=output_name_prefix,
        steps=steps,
        correspondence_type=correspondence_type,
        reduce_to_2d=parse_bool(parsed.get("reduce_to_2d"), True),
        write_matches=parse_bool(parsed.get("write_matches"), True),
    )
