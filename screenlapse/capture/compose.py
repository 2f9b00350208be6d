"""Horizontal composition of per-display images."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from screenlapse.core.errors import NoInputImagesError

from .frame import CanonicalImage

# Pixels no input covers (below a shorter display) stay transparent black.
FILL_RGBA = (0, 0, 0, 0)


def compose(images: Sequence[CanonicalImage]) -> CanonicalImage:
    """Lay ``images`` out left to right on one canvas.

    The canvas is as wide as all inputs together and as tall as the tallest.
    Every image is top-aligned at its cumulative x offset without scaling or
    cropping. A single image is returned as-is.
    """
    if not images:
        raise NoInputImagesError("Cannot compose zero images")
    if len(images) == 1:
        return images[0]

    width = sum(image.width for image in images)
    height = max(image.height for image in images)

    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[...] = FILL_RGBA

    offset = 0
    for image in images:
        canvas[: image.height, offset : offset + image.width] = image.pixels
        offset += image.width

    return CanonicalImage(width=width, height=height, pixels=canvas)


__all__ = ["FILL_RGBA", "compose"]
