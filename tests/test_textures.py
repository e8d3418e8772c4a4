"""Tests for textures."""

import math

import numpy as np
import pytest
from PIL import Image

from lumenpath.vec3 import Vec3, Point3, Color, make_rng
from lumenpath.textures import (
    Texture, SolidColor, CheckerTexture, NoiseTexture, ImageTexture, Perlin,
    as_texture, shared_perlin
)


RED = Color(1, 0, 0)
BLUE = Color(0, 0, 1)


class TestSolidColor:
    """Test SolidColor texture."""

    def test_value_everywhere(self):
        texture = SolidColor(Color(0.1, 0.2, 0.3))
        assert texture.value(0, 0, Point3(0, 0, 0)) == Color(0.1, 0.2, 0.3)
        assert texture.value(0.7, 0.2, Point3(5, -3, 9)) == Color(0.1, 0.2, 0.3)

    def test_as_texture(self):
        wrapped = as_texture(RED)
        assert isinstance(wrapped, SolidColor)
        texture = SolidColor(BLUE)
        assert as_texture(texture) is texture


class TestCheckerTexture:
    """Test 3D checker pattern."""

    def test_alternates_every_cell(self):
        checker = CheckerTexture.from_colors(RED, BLUE, 1.0)
        mid = math.pi / 2
        colors = [checker.value(0, 0, Point3((k + 0.5) * math.pi, mid, mid)) for k in range(4)]
        assert colors == [BLUE, RED, BLUE, RED]

    def test_cells_are_pi_times_cell_size_wide(self):
        checker = CheckerTexture.from_colors(RED, BLUE, 1.0)
        assert checker.value(0, 0, Point3(0.5, 0.5, 0.5)) == checker.value(0, 0, Point3(1.5, 0.5, 0.5))
        assert checker.value(0, 0, Point3(3.5, 0.5, 0.5)) == RED

    def test_period_is_two_pi_cell_size(self):
        checker = CheckerTexture.from_colors(RED, BLUE, 0.5)
        mid = math.pi / 4
        for x in (0.1, 0.5, 1.0):
            p = Point3(x, mid, mid)
            shifted = Point3(x + 2 * math.pi * 0.5, mid, mid)
            half = Point3(x + math.pi * 0.5, mid, mid)
            assert checker.value(0, 0, p) == checker.value(0, 0, shifted)
            assert checker.value(0, 0, p) != checker.value(0, 0, half)

    def test_even_used_for_negative_product(self):
        checker = CheckerTexture.from_colors(RED, BLUE)
        assert checker.value(0, 0, Point3(-0.5, 0.5, 0.5)) == RED
        assert checker.value(0, 0, Point3(-0.5, -0.5, 0.5)) == BLUE

    def test_ignores_uv(self):
        checker = CheckerTexture.from_colors(RED, BLUE)
        p = Point3(0.5, 0.5, 0.5)
        assert checker.value(0, 0, p) == checker.value(0.9, 0.3, p)

    def test_nested_textures(self):
        inner = CheckerTexture.from_colors(RED, BLUE, 0.5)
        outer = CheckerTexture(inner, SolidColor(Color(1, 1, 1)), 2.0)
        assert isinstance(outer.value(0, 0, Point3(-1, 1, 1)), Vec3)


class TestPerlin:
    """Test Perlin lattice."""

    def test_table_shapes(self):
        perlin = Perlin(make_rng(0))
        assert perlin.gradients.shape == (256, 3)
        np.testing.assert_allclose(np.linalg.norm(perlin.gradients, axis=1), 1.0)
        for perm in (perlin.perm_x, perlin.perm_y, perlin.perm_z):
            assert sorted(perm.tolist()) == list(range(256))

    def test_tables_are_read_only(self):
        perlin = Perlin(make_rng(0))
        with pytest.raises(ValueError):
            perlin.gradients[0, 0] = 5.0
        with pytest.raises(ValueError):
            perlin.perm_x[0] = 1

    def test_noise_vanishes_on_lattice(self):
        perlin = Perlin(make_rng(1))
        for p in (Point3(0, 0, 0), Point3(3, -2, 7), Point3(255, 256, -300)):
            assert perlin.noise(p) == pytest.approx(0.0, abs=1e-12)

    def test_noise_is_bounded(self):
        perlin = Perlin(make_rng(2))
        rng = make_rng(3)
        for _ in range(200):
            assert -2.0 < perlin.noise(Vec3.random(-50, 50, rng)) < 2.0

    def test_same_seed_same_noise(self):
        p = Point3(1.3, 2.7, -0.4)
        assert Perlin(make_rng(4)).noise(p) == Perlin(make_rng(4)).noise(p)

    def test_turbulence_non_negative(self):
        perlin = Perlin(make_rng(5))
        rng = make_rng(6)
        for _ in range(50):
            assert perlin.turbulence(Vec3.random(-10, 10, rng)) >= 0.0

    def test_shared_instance(self):
        assert shared_perlin() is shared_perlin()


class TestNoiseTexture:
    """Test marble noise texture."""

    def test_grey_in_unit_range(self):
        texture = NoiseTexture(4.0)
        rng = make_rng(7)
        for _ in range(100):
            color = texture.value(0, 0, Vec3.random(-5, 5, rng))
            assert color.x == color.y == color.z
            assert 0.0 <= color.x <= 1.0

    def test_uses_shared_tables_by_default(self):
        assert NoiseTexture().perlin is shared_perlin()
        assert NoiseTexture(2.0).perlin is NoiseTexture(8.0).perlin

    def test_custom_tables(self):
        perlin = Perlin(make_rng(8))
        assert NoiseTexture(1.0, perlin).perlin is perlin


def quad_pixels():
    # Top row: red, green; bottom row: blue, white
    return np.array([
        [[1, 0, 0], [0, 1, 0]],
        [[0, 0, 1], [1, 1, 1]],
    ], dtype=np.float64)


class TestImageTexture:
    """Test bitmap textures."""

    def test_dimensions(self):
        texture = ImageTexture(quad_pixels())
        assert texture.width == 2
        assert texture.height == 2

    def test_v_zero_is_bottom_row(self):
        texture = ImageTexture(quad_pixels())
        p = Point3(0, 0, 0)
        assert texture.value(0.25, 0.75, p) == Color(1, 0, 0)
        assert texture.value(0.75, 0.75, p) == Color(0, 1, 0)
        assert texture.value(0.25, 0.25, p) == Color(0, 0, 1)
        assert texture.value(0.75, 0.25, p) == Color(1, 1, 1)

    def test_edges_clamp(self):
        texture = ImageTexture(quad_pixels())
        p = Point3(0, 0, 0)
        assert texture.value(1.0, 0.0, p) == Color(1, 1, 1)
        assert texture.value(0.0, 1.0, p) == Color(1, 0, 0)
        assert texture.value(-0.5, 1.5, p) == Color(1, 0, 0)

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            ImageTexture(np.zeros((4, 4)))

    def test_from_file(self, tmp_path):
        path = tmp_path / "tex.png"
        data = np.array([[[255, 0, 0], [0, 0, 51]]], dtype=np.uint8)
        Image.fromarray(data).save(path)

        texture = ImageTexture.from_file(str(path))
        assert texture.width == 2
        assert texture.height == 1
        assert texture.value(0.75, 0.5, Point3(0, 0, 0)) == Color(0, 0, 0.2)

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ImageTexture.from_file(str(tmp_path / "missing.png"))

    def test_is_texture(self):
        assert isinstance(ImageTexture(quad_pixels()), Texture)
