"""
Unit and integration tests for configuration, GeoJSON I/O and the CLI.
"""

import json
import sys
from pathlib import Path

import pytest

# Add src to path for imports when running tests directly
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))

FIXTURES = ROOT / "tests" / "fixtures"


def _write_profile(path: Path, output_directory: Path, **extra) -> Path:
    options = {
        "input_file": "minimal.geojson",
        "input_directory": str(FIXTURES),
        "output_directory": str(output_directory),
        "output_name_prefix": "run",
        "steps": "4",
    }
    options.update(extra)
    lines = ["[morph]"] + [f"{k} = {v}" for k, v in options.items()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestConfig:
    """Tests for config loading."""

    def test_load_config(self):
        from linemorph.config import load_config
        from linemorph.correspondence import CorrespondenceType

        config = load_config(str(FIXTURES / "minimal.ini"))
        assert config.input_file == "minimal.geojson"
        assert config.input_directory == "tests/fixtures/"
        assert config.output_name_prefix == "minimal"
        assert config.steps == 4
        assert config.correspondence_type is CorrespondenceType.MERGE
        assert config.reduce_to_2d is True

    def test_defaults_and_invalid_values(self, tmp_path):
        from linemorph.config import load_config
        from linemorph.constants import DEFAULT_MORPH_STEPS
        from linemorph.correspondence import CorrespondenceType

        profile = tmp_path / "profile.ini"
        profile.write_text(
            "[morph]\ninput_file = lines.geojson\nsteps = many\n"
            "correspondence_type = C1\nwrite_matches = no\n",
            encoding="utf-8",
        )
        config = load_config(str(profile))
        assert config.steps == DEFAULT_MORPH_STEPS
        assert config.correspondence_type is CorrespondenceType.ONE_TO_ONE
        assert config.write_matches is False
        assert config.output_name_prefix == "lines"
        assert config.output_paths().morphs_geojson.endswith("lines_morphs.geojson")

    def test_missing_input_file_exits(self, tmp_path):
        from linemorph.config import load_config

        profile = tmp_path / "profile.ini"
        profile.write_text("[morph]\nsteps = 3\n", encoding="utf-8")
        with pytest.raises(SystemExit):
            load_config(str(profile))


class TestReadLines:
    """Tests for io.read_lines."""

    def test_orders_sub_lines(self):
        from linemorph.io import read_lines

        initial, final = read_lines(str(FIXTURES / "minimal.geojson"))
        assert len(initial) == 2
        assert len(final) == 1
        assert initial[0].coord()[0].coords == (0.0, 0.0)
        assert initial[1].coord()[-1].coords == (4.0, 0.0)

    def test_flattens_z_and_copies_crs(self, tmp_path):
        from linemorph.io import read_lines

        data = {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "properties": {"role": "initial"},
                    "geometry": {
                        "type": "LineString",
                        "coordinates": [[0, 0, 5], [1, 0, 6]],
                    },
                },
                {
                    "type": "Feature",
                    "properties": {"role": "final"},
                    "geometry": {
                        "type": "MultiLineString",
                        "coordinates": [[[0, 0], [0, 1]], [[0, 1], [0, 2]]],
                    },
                },
            ],
        }
        path = tmp_path / "lines.geojson"
        path.write_text(json.dumps(data), encoding="utf-8")

        initial, final = read_lines(str(path), crs="EPSG:2154")
        assert all(p.z is None for p in initial[0].coord())
        assert initial[0].crs == 2154
        assert len(final) == 2

    def test_rejects_non_lines(self, tmp_path):
        from linemorph.io import read_lines

        data = {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "properties": {"role": "initial"},
                    "geometry": {"type": "Point", "coordinates": [0, 0]},
                }
            ],
        }
        path = tmp_path / "points.geojson"
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(ValueError):
            read_lines(str(path))


class TestFrames:
    """Tests for io.morph_frames and io.match_frame."""

    def test_morph_frames(self):
        from linemorph.correspondence import CorrespondenceType, build_correspondence
        from linemorph.io import morph_frames, read_lines

        initial, final = read_lines(str(FIXTURES / "minimal.geojson"))
        corr = build_correspondence(CorrespondenceType.MERGE, initial, final)
        gdf = morph_frames(corr, steps=4)
        assert list(gdf["t"]) == pytest.approx([0.0, 0.25, 0.5, 0.75, 1.0])
        assert all(len(g.coords) == 4 for g in gdf.geometry)
        assert gdf.geometry.iloc[2].coords[2] == pytest.approx((1.0, 1.0))

    def test_match_frame(self):
        from linemorph.correspondence import CorrespondenceType, build_correspondence
        from linemorph.io import match_frame, read_lines

        initial, final = read_lines(str(FIXTURES / "minimal.geojson"))
        corr = build_correspondence(CorrespondenceType.MERGE, initial, final)
        gdf, table = match_frame(corr)
        assert len(gdf) == len(table) == 4
        assert gdf.geometry.iloc[-1].length == pytest.approx(table["offset"].iloc[-1])


class TestIntegration:
    """Integration test: full pipeline through the CLI."""

    def test_cli(self, tmp_path, monkeypatch):
        from click.testing import CliRunner

        from linemorph.cli import main
        from linemorph.config import load_config

        monkeypatch.chdir(tmp_path)
        out_dir = tmp_path / "out"
        profile = _write_profile(tmp_path / "profile.ini", out_dir)

        result = CliRunner().invoke(main, ["--profile", str(profile)])
        assert result.exit_code == 0, result.output
        assert "Complete" in result.output

        paths = load_config(str(profile)).output_paths()
        with open(paths.morphs_geojson) as f:
            morphs = json.load(f)
        with open(paths.matches_geojson) as f:
            matches = json.load(f)
        assert len(morphs["features"]) == 5
        assert len(matches["features"]) == 4
        assert Path(paths.matches_csv).exists()

    def test_cli_reports_degenerate_line(self, tmp_path, monkeypatch):
        from click.testing import CliRunner

        from linemorph.cli import main

        data = {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "properties": {"role": "initial"},
                    "geometry": {"type": "LineString", "coordinates": [[0, 0], [4, 0]]},
                },
                {
                    "type": "Feature",
                    "properties": {"role": "final"},
                    "geometry": {"type": "LineString", "coordinates": [[1, 1], [1, 1]]},
                },
            ],
        }
        (tmp_path / "flat.geojson").write_text(json.dumps(data), encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        profile = _write_profile(
            tmp_path / "profile.ini",
            tmp_path / "out",
            input_file="flat.geojson",
            input_directory=str(tmp_path),
        )

        result = CliRunner().invoke(main, ["--profile", str(profile)])
        assert result.exit_code != 0
        assert "zero-length" in result.output
