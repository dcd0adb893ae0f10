"""Render payload text into PNG or SVG QR images."""
from __future__ import annotations

import base64
import io
from typing import Any

import qrcode
from PIL import Image, ImageDraw, ImageFont
from qrcode.image.svg import SvgPathImage

from .schemas import QRImageOptions

_ERROR_CORRECTION = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

CAPTION_HEIGHT = 32


def _build_qr(data: str, options: QRImageOptions) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None,
        error_correction=_ERROR_CORRECTION[options.error_correction],
        box_size=10,
        border=options.margin,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr


def _svg_factory(options: QRImageOptions) -> type[SvgPathImage]:
    return type(
        "VietQRSvgImage",
        (SvgPathImage,),
        {
            "background": options.back_color,
            "QR_PATH_STYLE": {**SvgPathImage.QR_PATH_STYLE, "fill": options.fill_color},
        },
    )


def generate_qr_image(data: str, options: QRImageOptions) -> Image.Image:
    """Draw the QR square at ``options.size`` pixels, with an optional caption strip below."""

    qr = _build_qr(data, options)
    qr_img = qr.make_image(fill_color=options.fill_color, back_color=options.back_color).convert("RGB")
    qr_img = qr_img.resize((options.size, options.size), Image.Resampling.NEAREST)
    if not options.caption:
        return qr_img

    canvas = Image.new("RGB", (options.size, options.size + CAPTION_HEIGHT), color=options.back_color)
    canvas.paste(qr_img, (0, 0))
    draw = ImageDraw.Draw(canvas)
    font = ImageFont.load_default()
    left, top, right, bottom = draw.textbbox((0, 0), options.caption, font=font)
    text_x = max((options.size - (right - left)) // 2, 0)
    text_y = options.size + (CAPTION_HEIGHT - (bottom - top)) // 2
    draw.text((text_x, text_y), options.caption, fill=options.fill_color, font=font)
    return canvas


def qr_image_to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def render_svg(data: str, options: QRImageOptions) -> bytes:
    qr = _build_qr(data, options)
    image = qr.make_image(image_factory=_svg_factory(options))
    buffer = io.BytesIO()
    image.save(buffer)
    return buffer.getvalue()


def render_image(payload: str, options: QRImageOptions | None = None) -> bytes:
    """Encode ``payload`` as a QR image in the format named by ``options``."""

    options = options or QRImageOptions.from_settings()
    if options.format == "svg":
        return render_svg(payload, options)
    return qr_image_to_png_bytes(generate_qr_image(payload, options))


def render_qr_payload(payload: str, options: QRImageOptions | None = None) -> dict[str, Any]:
    """Render payload into PNG bytes, a base64 string and a data URI."""

    options = (options or QRImageOptions.from_settings()).model_copy(update={"format": "png"})
    png_bytes = render_image(payload, options)
    png_base64 = base64.b64encode(png_bytes).decode("ascii")
    return {
        "png_bytes": png_bytes,
        "png_base64": png_base64,
        "data_uri": f"data:image/png;base64,{png_base64}",
    }
