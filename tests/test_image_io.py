"""Tests for image input/output."""

import numpy as np
import pytest
from PIL import Image

from lumenpath.image_io import to_ldr, save_ppm, save_image, load_image


class TestToLDR:
    """Test HDR to 8-bit conversion."""

    def test_gamma_and_scale(self):
        image = np.array([[[0.0, 0.25, 1.0]]])
        ldr = to_ldr(image)
        assert ldr.dtype == np.uint8
        assert ldr[0, 0].tolist() == [0, 127, 255]

    def test_clamps(self):
        image = np.array([[[-1.0, 4.0, 100.0]]])
        assert to_ldr(image)[0, 0].tolist() == [0, 255, 255]


class TestSavePPM:
    """Test binary PPM output."""

    def test_header_and_bytes(self, tmp_path):
        image = np.array([[[1.0, 0.0, 0.0], [0.0, 0.25, 1.0]]])
        path = tmp_path / "out.ppm"
        save_ppm(image, path)

        data = path.read_bytes()
        header = b"P6\n2\n1\n255\n"
        assert data.startswith(header)
        assert data[len(header):] == bytes([255, 0, 0, 0, 127, 255])

    def test_rows_top_to_bottom(self, tmp_path):
        image = np.zeros((2, 1, 3))
        image[0, 0] = [1.0, 1.0, 1.0]
        path = tmp_path / "rows.ppm"
        save_ppm(image, path)

        pixels = path.read_bytes()[len(b"P6\n1\n2\n255\n"):]
        assert pixels == bytes([255, 255, 255, 0, 0, 0])

    def test_uint8_written_as_is(self, tmp_path):
        image = np.full((1, 1, 3), 10, dtype=np.uint8)
        path = tmp_path / "raw.ppm"
        save_ppm(image, path)
        assert path.read_bytes().endswith(bytes([10, 10, 10]))


class TestSaveImage:
    """Test format dispatch."""

    def test_ppm_extension(self, tmp_path):
        path = tmp_path / "image.ppm"
        save_image(np.ones((3, 4, 3)), path)
        assert path.read_bytes().startswith(b"P6\n4\n3\n255\n")

    def test_png_through_pillow(self, tmp_path):
        path = tmp_path / "image.png"
        save_image(np.ones((3, 4, 3)), str(path))

        with Image.open(path) as img:
            assert img.size == (4, 3)
            assert img.mode == 'RGB'
            assert img.getpixel((0, 0)) == (255, 255, 255)


class TestLoadImage:
    """Test image loading."""

    def test_bytes_scaled_without_gamma(self, tmp_path):
        path = tmp_path / "in.png"
        data = np.array([[[0, 51, 255]]], dtype=np.uint8)
        Image.fromarray(data).save(path)

        loaded = load_image(path)
        assert loaded.shape == (1, 1, 3)
        np.testing.assert_allclose(loaded[0, 0], [0.0, 0.2, 1.0])

    def test_grayscale_converted_to_rgb(self, tmp_path):
        path = tmp_path / "grey.png"
        Image.fromarray(np.full((2, 3), 102, dtype=np.uint8)).save(path)

        loaded = load_image(path)
        assert loaded.shape == (2, 3, 3)
        np.testing.assert_allclose(loaded, 0.4)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_image(tmp_path / "nope.png")
