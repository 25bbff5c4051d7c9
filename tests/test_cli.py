"""Tests for the command-line interface."""

from pathlib import Path

import pytest
from PIL import Image

from tileworld.cli import main
from tileworld.terrain.persistence import load_map


class TestMain:
    """Tests for the CLI entry point."""

    def test_generates_map_and_image(self, tmp_path: Path) -> None:
        output = tmp_path / "maps" / "island.npz"
        image = tmp_path / "island.png"

        main(["--cells", "33", "--seed", "8", "-o", str(output), "--image", str(image)])

        assert output.exists()
        assert image.exists()
        tiles, metadata = load_map(output)
        assert tiles.shape == (33, 33)
        assert metadata["seed"] == 8

    def test_config_file(self, tmp_path: Path) -> None:
        config = tmp_path / "map.toml"
        config.write_text("seed = 4\ncells = 17\n")
        output = tmp_path / "out.npz"

        main(["-c", str(config), "-o", str(output)])

        tiles, metadata = load_map(output)
        assert tiles.shape == (17, 17)
        assert metadata["seed"] == 4

    def test_missing_config(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["-c", str(tmp_path / "missing.toml")])
        assert exc_info.value.code == 2

    def test_bad_size_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--cells", "20", "-o", str(tmp_path / "out.npz")])
        assert exc_info.value.code == 1

    def test_missing_atlas_exits_before_generating(self, tmp_path: Path) -> None:
        output = tmp_path / "out.npz"
        with pytest.raises(SystemExit) as exc_info:
            main(
                [
                    "--cells", "17", "-o", str(output),
                    "--image", str(tmp_path / "map.png"),
                    "--atlas", str(tmp_path / "missing.png"),
                ]
            )
        assert exc_info.value.code == 2
        assert not output.exists()

    def test_small_atlas_exits_before_generating(self, tmp_path: Path) -> None:
        atlas = tmp_path / "atlas.png"
        Image.new("RGB", (4 * 16, 16)).save(atlas)
        output = tmp_path / "out.npz"

        with pytest.raises(SystemExit) as exc_info:
            main(
                [
                    "--cells", "17", "-o", str(output),
                    "--image", str(tmp_path / "map.png"),
                    "--atlas", str(atlas),
                ]
            )

        assert exc_info.value.code == 2
        assert not output.exists()
