# products/services/labels.py

"""
QR LABELS

PNG label for a product: the QR encodes the JSON payload from
qr_payload.encode_qr_payload so the scanner can route on "id".
"""

from __future__ import annotations

from io import BytesIO

import qrcode

from products.services.qr_payload import encode_qr_payload


def build_label_payload(product) -> str:
    return encode_qr_payload(product)


def render_qr_png(data: str, *, box_size: int = 10, border: int = 4) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def render_label_png(product) -> bytes:
    return render_qr_png(build_label_payload(product))
