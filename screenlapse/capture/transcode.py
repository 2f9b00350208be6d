"""Raw frame to canonical RGBA conversion.

Capture backends describe their byte layout with a four-letter string
(``"BGRA"``, ``"BGRX"``, ``"ARGB"``...), the same convention Pillow uses for
raw decoder modes. ``X`` and ``A`` both mark the fourth byte, which is always
discarded: screens do not report alpha, so the output is forced opaque.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

import numpy as np

from screenlapse.core.errors import FrameFormatError

from .frame import CanonicalImage, RawFrame

BYTES_PER_PIXEL = 4
OPAQUE = 255


def _normalize_layout(channel_order: str) -> str:
    return str(channel_order).strip().upper()


@lru_cache(maxsize=None)
def channel_indices(channel_order: str) -> tuple[int, int, int]:
    """Byte offsets of R, G and B inside one source pixel."""
    layout = _normalize_layout(channel_order)
    if len(layout) != BYTES_PER_PIXEL or sorted(layout.replace("X", "A")) != ["A", "B", "G", "R"]:
        raise FrameFormatError(f"Unsupported channel order '{channel_order}'")
    return (layout.index("R"), layout.index("G"), layout.index("B"))


def _validate(raw: RawFrame) -> int:
    if raw.width <= 0 or raw.height <= 0:
        raise FrameFormatError(f"Frame has no pixels ({raw.width}x{raw.height})")
    row_bytes = raw.width * BYTES_PER_PIXEL
    if raw.stride < row_bytes:
        raise FrameFormatError(
            f"Stride {raw.stride} is shorter than a {raw.width}px row ({row_bytes} bytes)"
        )
    needed = raw.stride * raw.height
    available = len(raw.data)
    if available < needed:
        raise FrameFormatError(
            f"Frame buffer holds {available} bytes, {needed} needed for "
            f"{raw.height} rows of stride {raw.stride}"
        )
    return needed


def transcode(raw: RawFrame, channel_order: Optional[str] = None) -> CanonicalImage:
    """Convert ``raw`` to a tightly packed, opaque RGBA image.

    Each row is addressed through ``raw.stride`` so row padding is skipped, and
    nothing beyond ``stride * height`` is read. ``channel_order`` overrides the
    layout declared on the frame.
    """
    r, g, b = channel_indices(channel_order or raw.channel_order)
    needed = _validate(raw)

    buffer = np.frombuffer(raw.data, dtype=np.uint8, count=needed)
    rows = buffer.reshape(raw.height, raw.stride)[:, : raw.width * BYTES_PER_PIXEL]
    source = rows.reshape(raw.height, raw.width, BYTES_PER_PIXEL)

    pixels = np.empty((raw.height, raw.width, BYTES_PER_PIXEL), dtype=np.uint8)
    pixels[..., 0] = source[..., r]
    pixels[..., 1] = source[..., g]
    pixels[..., 2] = source[..., b]
    pixels[..., 3] = OPAQUE

    return CanonicalImage(width=raw.width, height=raw.height, pixels=pixels)


__all__ = ["BYTES_PER_PIXEL", "OPAQUE", "channel_indices", "transcode"]
