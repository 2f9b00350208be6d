"""Frame and image data structures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np
from PIL import Image

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True, slots=True)
class DisplayInfo:
    """Geometry of one display as reported at enumeration time."""

    index: int  # Position in enumeration order
    left: int
    top: int
    width: int
    height: int
    primary: bool = False

    @property
    def label(self) -> str:
        return f"display{self.index}({self.width}x{self.height}+{self.left}+{self.top})"


@dataclass(frozen=True, slots=True)
class RawFrame:
    """Pixel buffer exactly as delivered by a frame source."""

    width: int
    height: int
    stride: int  # Bytes per row, >= width * 4
    data: BytesLike
    channel_order: str  # Source byte layout, e.g. "BGRA"


@dataclass(frozen=True, slots=True, eq=False)
class CanonicalImage:
    """Tightly packed RGBA image, the pipeline's internal currency.

    ``pixels`` has shape ``(height, width, 4)`` and dtype uint8. The array is
    frozen on construction so no stage can mutate an image after handing it
    on.
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        expected = (self.height, self.width, 4)
        if self.pixels.shape != expected or self.pixels.dtype != np.uint8:
            raise ValueError(
                f"pixels must be uint8 {expected}, got {self.pixels.dtype} {self.pixels.shape}"
            )
        if not self.pixels.flags.c_contiguous:
            object.__setattr__(self, "pixels", np.ascontiguousarray(self.pixels))
        self.pixels.flags.writeable = False

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> "CanonicalImage":
        height, width = pixels.shape[:2]
        return cls(width=width, height=height, pixels=pixels)

    @classmethod
    def from_pil(cls, image: Image.Image) -> "CanonicalImage":
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        return cls.from_array(np.array(rgba, dtype=np.uint8))

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def nbytes(self) -> int:
        return self.pixels.nbytes

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CanonicalImage):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.pixels, other.pixels)

    __hash__ = None


__all__ = ["BytesLike", "CanonicalImage", "DisplayInfo", "RawFrame"]
