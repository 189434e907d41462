"""Tests for the command line entry point."""

import sys

import main


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, 'argv', ['main.py', *args])
    return main.main()


class TestSceneFileErrors:
    """Bad scene files are reported, not raised."""

    def test_non_numeric_radius(self, tmp_path, monkeypatch, capsys):
        scene = tmp_path / "scene.yaml"
        scene.write_text("objects:\n  - {kind: sphere, radius: big, material: {}}\n")

        assert run_cli(monkeypatch, '--scene-file', str(scene)) == 2

        err = capsys.readouterr().err
        assert 'radius' in err
        assert 'Traceback' not in err

    def test_empty_materials_section(self, tmp_path, monkeypatch, capsys):
        scene = tmp_path / "scene.yaml"
        scene.write_text("materials:\nobjects: []\n")

        assert run_cli(monkeypatch, '--scene-file', str(scene)) == 2
        assert 'materials' in capsys.readouterr().err

    def test_missing_scene_file(self, tmp_path, monkeypatch, capsys):
        assert run_cli(monkeypatch, '--scene-file', str(tmp_path / "nope.yaml")) == 2
        assert 'not found' in capsys.readouterr().err


class TestRender:
    """End-to-end render through the CLI."""

    def test_writes_png(self, tmp_path, monkeypatch):
        from PIL import Image

        output = tmp_path / "out" / "render.png"
        code = run_cli(
            monkeypatch, '--width', '4', '--height', '3', '--samples', '1',
            '--depth', '2', '--output', str(output)
        )

        assert code == 0
        with Image.open(output) as image:
            assert image.size == (4, 3)
