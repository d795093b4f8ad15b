"""Tests for the Pillow rasterizer."""

import pytest
from PIL import Image

from conftest import PNG_SIGNATURE
from sharecards.workers.fonts import FontBook, weight_bucket
from sharecards.workers.layout import (
    Border,
    Image as ImageNode,
    Noise,
    Solid,
    Stack,
    Text,
    gradient,
    parse_color,
)
from sharecards.workers.layout_engine import LayoutEngine
from sharecards.workers.rasterizer import Rasterizer, cover, encode_png, noise_texture, paint_fill


@pytest.fixture(scope="module")
def fonts():
    return FontBook()


def _render(root, fonts, images=None, size=(100, 100)):
    LayoutEngine(fonts).layout(root, *size)
    return Rasterizer(fonts, images).render(root, *size)


class TestFills:
    def test_solid(self):
        patch = paint_fill(Solid((10, 20, 30, 255)), 4, 4)
        assert patch.getpixel((2, 2)) == (10, 20, 30, 255)

    def test_linear_runs_left_to_right_at_90deg(self):
        patch = paint_fill(gradient(90, "#ff0000", "#0000ff"), 100, 10)
        left = patch.getpixel((0, 5))
        right = patch.getpixel((99, 5))
        assert left[0] > 240 and left[2] < 15
        assert right[2] > 240 and right[0] < 15

    def test_transparent_stop_keeps_color(self):
        patch = paint_fill(gradient(90, "#ff0000", "transparent"), 100, 10)
        r, g, b, a = patch.getpixel((50, 5))
        assert (r, g, b) == (255, 0, 0)
        assert 100 < a < 155


class TestHelpers:
    def test_noise_is_deterministic(self):
        a = noise_texture(32, 32, 0.035)
        b = noise_texture(32, 32, 0.035)
        assert a.tobytes() == b.tobytes()
        assert a.getpixel((0, 0))[3] == round(255 * 0.035)

    def test_cover_fills_target(self):
        wide = Image.new("RGB", (400, 100), (255, 0, 0))
        result = cover(wide, 100, 100)
        assert result.size == (100, 100)
        assert result.mode == "RGBA"

    def test_weight_buckets(self):
        assert weight_bucket(400) == "regular"
        assert weight_bucket(500) == "medium"
        assert weight_bucket(700) == "bold"
        assert weight_bucket(900) == "black"


class TestRasterizer:
    def test_canvas_size(self, fonts):
        root = Stack(width=1080, height=1920, fill=Solid(parse_color("#0a0a0a")))
        image = _render(root, fonts, size=(1080, 1920))
        assert image.size == (1080, 1920)
        assert image.getpixel((540, 960)) == (10, 10, 10, 255)

    def test_rounded_corners_are_clear(self, fonts):
        root = Stack(width=100, height=100, items=[Stack(width=100, height=100, radius=40, fill=Solid((255, 0, 0, 255)))])
        image = _render(root, fonts)
        assert image.getpixel((1, 1))[3] == 0
        assert image.getpixel((50, 50)) == (255, 0, 0, 255)

    def test_border_drawn(self, fonts):
        root = Stack(width=100, height=100, border=Border(4, (0, 255, 0, 255)))
        image = _render(root, fonts)
        assert image.getpixel((1, 50)) == (0, 255, 0, 255)
        assert image.getpixel((50, 50))[3] == 0

    def test_image_bitmap_painted(self, fonts):
        bitmap = Image.new("RGBA", (10, 10), (0, 0, 255, 255))
        root = Stack(width=100, height=100, items=[ImageNode(src="https://img/a", width=50, height=50)])
        image = _render(root, fonts, images={"https://img/a": bitmap})
        assert image.getpixel((25, 25)) == (0, 0, 255, 255)

    def test_missing_image_uses_placeholder(self, fonts):
        node = ImageNode(
            src="https://img/missing",
            width=60,
            height=60,
            placeholder_fill=Solid((200, 100, 50, 255)),
            placeholder="",
        )
        image = _render(Stack(width=100, height=100, items=[node]), fonts)
        assert image.getpixel((5, 5)) == (200, 100, 50, 255)

    def test_text_leaves_ink(self, fonts):
        text = Text(content="MMMM", size=40, weight=700, color=(255, 255, 255, 255))
        image = _render(Stack(width=200, height=100, items=[text]), fonts, size=(200, 100))
        alpha = image.getchannel("A")
        assert alpha.getbbox() is not None

    def test_render_is_deterministic(self, fonts):
        def build():
            return Stack(width=120, height=120, fill=gradient(135, "#1DB954", "#14B8A6"), items=[
                Noise(width=120, height=120),
                Text(content="Same every time", size=16),
            ])

        first = encode_png(_render(build(), fonts, size=(120, 120)))
        second = encode_png(_render(build(), fonts, size=(120, 120)))
        assert first == second
        assert first.startswith(PNG_SIGNATURE)
