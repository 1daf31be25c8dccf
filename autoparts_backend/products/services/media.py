# products/services/media.py

"""
PRODUCT IMAGE MANIFEST

Product.images is a versioned envelope of tagged entries:

    {"schema_version": 1,
     "items": [{"kind": "url", "url": "https://..."},
               {"kind": "storage", "path": "products/abc.jpg"}]}

Legacy rows hold a bare list of URL strings; they are upgraded to v1 on read.
Unknown versions or kinds are rejected instead of being passed through.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from products.services.exceptions import InvalidImageManifest

CURRENT_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class UrlImage:
    url: str
    kind: str = "url"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "url": self.url}


@dataclass(frozen=True)
class StoredImage:
    path: str
    kind: str = "storage"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "path": self.path}


ImageRef = Union[UrlImage, StoredImage]


def _parse_item(item) -> ImageRef:
    if isinstance(item, str):
        if not item.strip():
            raise InvalidImageManifest("Image URL cannot be blank")
        return UrlImage(url=item.strip())

    if not isinstance(item, dict):
        raise InvalidImageManifest("Image entries must be objects")

    kind = item.get("kind")
    if kind == "url":
        url = str(item.get("url") or "").strip()
        if not url:
            raise InvalidImageManifest("url image requires 'url'")
        return UrlImage(url=url)
    if kind == "storage":
        path = str(item.get("path") or "").strip()
        if not path:
            raise InvalidImageManifest("storage image requires 'path'")
        return StoredImage(path=path)

    raise InvalidImageManifest(f"Unknown image kind '{kind}'")


def parse_images(raw) -> list[ImageRef]:
    if raw is None or raw == {} or raw == []:
        return []

    # legacy: bare list of URL strings
    if isinstance(raw, list):
        return [_parse_item(item) for item in raw]

    if not isinstance(raw, dict):
        raise InvalidImageManifest("Image manifest must be an object")

    version = raw.get("schema_version")
    if version != CURRENT_SCHEMA_VERSION:
        raise InvalidImageManifest(f"Unsupported image schema_version {version!r}")

    items = raw.get("items") or []
    if not isinstance(items, list):
        raise InvalidImageManifest("'items' must be a list")

    return [_parse_item(item) for item in items]


def dump_images(images: list[ImageRef]) -> dict:
    return {
        "schema_version": CURRENT_SCHEMA_VERSION,
        "items": [img.to_dict() for img in images],
    }


def normalize_images(raw) -> dict:
    """Parse anything accepted by parse_images and re-emit the current envelope."""
    return dump_images(parse_images(raw))
