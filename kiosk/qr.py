"""QR codes pointing visitors at their ticket status page."""

from __future__ import annotations

import base64
import io

import qrcode
from qrcode.image.pure import PyPNGImage
from qrcode.image.svg import SvgPathImage

_FACTORIES = {
    "png": (PyPNGImage, "image/png"),
    "svg": (SvgPathImage, "image/svg+xml"),
}


def build_status_qr(url: str, *, image_format: str = "svg") -> str:
    """Render ``url`` as a QR code and return it as a ``data:`` URL."""

    try:
        factory, mime_type = _FACTORIES[image_format.lower()]
    except KeyError as exc:
        raise ValueError(f"Unsupported QR image format: {image_format!r}") from exc

    image = qrcode.make(url, image_factory=factory)
    buffer = io.BytesIO()
    image.save(buffer)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
