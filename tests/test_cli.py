"""Tests for the headless CLI paths."""

import json

import cv2
import numpy as np
import pytest
from PIL import Image

from pico_cam.cli import _auto_output_path, main


class TestConvert:
    def test_image_to_png_json(self, tmp_path, capsys):
        src = tmp_path / "photo.png"
        Image.new("RGB", (64, 48), (255, 255, 255)).save(str(src))
        out = tmp_path / "photo_dithered.png"

        main(["convert", str(src), "-o", str(out), "--json"])

        result = json.loads(capsys.readouterr().out)
        assert result["status"] == "success"
        assert result["metadata"]["input_format"] == "image"
        assert result["metadata"]["output_frames"] == 1
        with Image.open(out) as img:
            assert img.size == (160, 120)
            assert np.all(np.array(img) == 255)

    def test_default_output_path(self, tmp_path):
        src = tmp_path / "photo.png"
        Image.new("RGB", (10, 10)).save(str(src))
        main(["convert", str(src)])
        assert (tmp_path / "photo_pico.png").exists()

    def test_scale(self, tmp_path):
        src = tmp_path / "photo.png"
        Image.new("RGB", (10, 10)).save(str(src))
        out = tmp_path / "big.png"
        main(["convert", str(src), "-o", str(out), "--scale", "2"])
        with Image.open(out) as img:
            assert img.size == (320, 240)

    def test_gif_to_gif(self, tmp_path, capsys):
        src = tmp_path / "anim.gif"
        frames = [Image.new("RGB", (20, 20), c) for c in [(0, 0, 0), (255, 255, 255)]]
        frames[0].save(str(src), save_all=True, append_images=frames[1:], duration=100)

        main(["convert", str(src), "--json"])

        result = json.loads(capsys.readouterr().out)
        assert result["metadata"]["output_frames"] == 2
        assert (tmp_path / "anim_pico.gif").exists()

    def test_raw_frame(self, tmp_path, capsys):
        src = tmp_path / "frame.bgra"
        src.write_bytes(bytes([0, 0, 0, 255]) * (8 * 6))
        out = tmp_path / "raw.png"

        main([
            "convert", str(src), "--raw-size", "8x6",
            "--channel-order", "bgra", "-o", str(out), "--json",
        ])

        result = json.loads(capsys.readouterr().out)
        assert result["metadata"]["input_format"] == "raw"
        with Image.open(out) as img:
            assert not np.array(img).any()

    def test_raw_frame_wrong_size(self, tmp_path, capsys):
        src = tmp_path / "frame.bgra"
        src.write_bytes(bytes(10))
        with pytest.raises(SystemExit) as exc:
            main(["convert", str(src), "--raw-size", "8x6", "--json"])
        assert exc.value.code == 1
        err = json.loads(capsys.readouterr().err)
        assert err["code"] == "INVALID_INPUT"

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["convert", str(tmp_path / "nope.png"), "--json"])
        assert exc.value.code == 1
        err = json.loads(capsys.readouterr().err)
        assert err["code"] == "FILE_NOT_FOUND"

    def test_print_frame(self, tmp_path, capsys):
        src = tmp_path / "photo.png"
        Image.new("RGB", (10, 10), (255, 255, 255)).save(str(src))
        main(["convert", str(src), "-o", str(tmp_path / "o.png"), "--print"])
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 60
        assert lines[0] == "█" * 160

    def test_jpeg_output(self, tmp_path, capsys):
        src = tmp_path / "photo.png"
        Image.new("RGB", (10, 10), (255, 255, 255)).save(str(src))
        out = tmp_path / "photo.jpg"

        main(["convert", str(src), "-o", str(out), "--json"])

        result = json.loads(capsys.readouterr().out)
        assert result["metadata"]["output_format"] == "jpg"
        with Image.open(out) as img:
            assert img.format == "JPEG"

    def test_progress_on_stderr(self, tmp_path, capsys):
        src = tmp_path / "anim.gif"
        frames = [Image.new("RGB", (20, 20), c) for c in [(0, 0, 0), (255, 255, 255)]]
        frames[0].save(str(src), save_all=True, append_images=frames[1:], duration=100)

        main(["convert", str(src)])

        assert "Processing frame 2/2..." in capsys.readouterr().err

    def test_mkv_defaults_to_mp4(self, tmp_path, capsys):
        src = tmp_path / "clip.mkv"
        writer = cv2.VideoWriter(
            str(src), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (32, 24)
        )
        for value in (0, 128, 255):
            writer.write(np.full((24, 32, 3), value, dtype=np.uint8))
        writer.release()

        main(["convert", str(src), "--json"])

        result = json.loads(capsys.readouterr().out)
        assert result["output"].endswith("clip_pico.mp4")
        assert result["metadata"]["output_frames"] == 3
        assert (tmp_path / "clip_pico.mp4").exists()


class TestAutoOutputPath:
    @pytest.mark.parametrize(
        "name, fmt, expected",
        [
            ("photo.jpg", "image", "photo_pico.png"),
            ("anim.gif", "gif", "anim_pico.gif"),
            ("clip.mov", "video", "clip_pico.mov"),
            ("clip.MP4", "video", "clip_pico.mp4"),
            ("clip.mkv", "video", "clip_pico.mp4"),
            ("clip.webm", "video", "clip_pico.mp4"),
        ],
    )
    def test_suffix(self, tmp_path, name, fmt, expected):
        assert _auto_output_path(tmp_path / name, fmt) == tmp_path / expected
