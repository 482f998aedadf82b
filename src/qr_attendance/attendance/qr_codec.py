"""Thin adapter over the external QR codec libraries.

Encoding goes through ``qrcode`` (rendered by Pillow), decoding through
``pyzbar``. The token is treated as an opaque string either way.
"""

from __future__ import annotations

import base64
import io
from typing import BinaryIO, Optional

import qrcode
from PIL import Image, UnidentifiedImageError


def render_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_data_uri(data: str) -> str:
    return "data:image/png;base64," + base64.b64encode(render_png(data)).decode("ascii")


def decode_image(stream: BinaryIO) -> Optional[str]:
    """Return the first QR payload found in an uploaded image, or None."""

    # pyzbar loads the native zbar library on import; keep it off the import path of the app.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except UnidentifiedImageError:
        return None
    decoded = pyzbar_decode(img)
    if not decoded:
        return None
    return decoded[0].data.decode("utf-8")
