# products/services/qr_payload.py

"""
QR LABEL PAYLOAD

Labels carry a JSON snapshot: {"id", "code", "location", "stock"}.
Only "id" is trusted. location/stock are informational and go stale the
moment stock moves, so the scanner always re-fetches the live product.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional

from products.services.exceptions import InvalidQRPayload


@dataclass(frozen=True)
class QRPayload:
    id: str
    code: str = ""
    location: Optional[str] = None
    stock: Optional[int] = None


def parse_qr_payload(raw) -> QRPayload:
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidQRPayload("Invalid QR code format") from exc

    if not isinstance(raw, str) or not raw.strip():
        raise InvalidQRPayload("Invalid QR code format")

    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise InvalidQRPayload("Invalid QR code format") from exc

    if not isinstance(data, dict):
        raise InvalidQRPayload("Invalid QR code format")

    product_id = data.get("id")
    if not isinstance(product_id, str) or not product_id.strip():
        raise InvalidQRPayload("QR code does not identify a product")

    stock = data.get("stock")
    if isinstance(stock, bool) or not isinstance(stock, int):
        stock = None

    location = data.get("location")
    if not isinstance(location, str):
        location = None

    return QRPayload(
        id=product_id.strip(),
        code=str(data.get("code") or ""),
        location=location,
        stock=stock,
    )


def encode_qr_payload(product) -> str:
    return json.dumps(
        {
            "id": str(product.id),
            "code": product.product_code,
            "location": product.location,
            "stock": int(product.stock_quantity or 0),
        },
        separators=(",", ":"),
    )
