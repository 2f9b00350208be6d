"""Test helpers for the screenlapse test suite.

Data Generators:
    make_raw_frame - Solid-colour raw frame in any channel layout, with row padding
    solid_image - Solid-colour canonical RGBA image
    gradient_image - Image whose every pixel differs
    column_colors - RGBA tuples along one row

Usage:
    from tests.infrastructure.helpers import make_raw_frame, solid_image

    raw = make_raw_frame(4, 2, (10, 20, 30), padding=8)
"""

from tests.infrastructure.helpers.generators import (
    BLUE,
    GREEN,
    RED,
    column_colors,
    gradient_image,
    make_raw_frame,
    solid_image,
)

__all__ = [
    "BLUE",
    "GREEN",
    "RED",
    "column_colors",
    "gradient_image",
    "make_raw_frame",
    "solid_image",
]
