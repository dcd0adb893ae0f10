"""Tests for QR image rendering."""

import io

import pytest
from PIL import Image
from pydantic import ValidationError

from vietqr.images import PNG_MAGIC
from vietqr.renderer import render_image, render_qr_payload
from vietqr.schemas import QRImageOptions


class TestQRImageOptions:
    @pytest.mark.parametrize("size", [49, 1001])
    def test_size_bounds(self, size):
        with pytest.raises(ValidationError):
            QRImageOptions(size=size)

    def test_colour_must_be_hex(self):
        with pytest.raises(ValidationError):
            QRImageOptions(fill_color="black")

    def test_negative_margin(self):
        with pytest.raises(ValidationError):
            QRImageOptions(margin=-1)

    def test_from_settings_applies_overrides(self):
        options = QRImageOptions.from_settings(size=120, caption=None)
        assert options.size == 120
        assert options.error_correction == "M"


class TestRenderImage:
    def test_png_has_requested_size(self, static_payload):
        data = render_image(static_payload, QRImageOptions(size=200))
        assert data.startswith(PNG_MAGIC)
        assert Image.open(io.BytesIO(data)).size == (200, 200)

    def test_caption_adds_a_strip(self, static_payload):
        data = render_image(static_payload, QRImageOptions(size=200, caption="VietQR"))
        width, height = Image.open(io.BytesIO(data)).size
        assert width == 200
        assert height > 200

    def test_svg_output(self, static_payload):
        data = render_image(static_payload, QRImageOptions(format="svg", fill_color="#112233"))
        assert b"svg" in data
        assert b"#112233" in data

    def test_render_qr_payload_returns_data_uri(self, dynamic_payload):
        rendered = render_qr_payload(dynamic_payload, QRImageOptions(format="svg", size=100))
        assert rendered["png_bytes"].startswith(PNG_MAGIC)
        assert rendered["data_uri"].startswith("data:image/png;base64,")
