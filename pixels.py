"""
RGB image value type and the packed-colour helpers shared by every filter.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np


def mask_channel(value):
    """Keep the low 8 bits of a channel value (wraps, does not saturate)."""
    return value & 255


def pack_rgb(r, g, b):
    """
    Pack three channels into one 0xRRGGBB integer.

    Each channel is masked to 8 bits first, so pack_rgb(300, -5, 128) is
    0x2CFB80. Works on plain ints and on NumPy integer arrays alike.
    """
    return (mask_channel(r) << 16) | (mask_channel(g) << 8) | mask_channel(b)


def unpack_rgb(packed):
    """Inverse of pack_rgb: returns (r, g, b)."""
    return (packed >> 16) & 255, (packed >> 8) & 255, packed & 255


@dataclass
class Image:
    """
    RGB pixels plus an optional source path for bookkeeping.
    """
    pixels: np.ndarray  # Shape (H, W, 3), dtype uint8, RGB order.
    path: Path | None = None

    @property
    def width(self):
        return self.pixels.shape[1]

    @property
    def height(self):
        return self.pixels.shape[0]

    @classmethod
    def blank(cls, width, height):
        """All-black image; this is what unprocessed border pixels look like."""
        return cls(np.zeros((height, width, 3), dtype=np.uint8))

    @classmethod
    def from_packed(cls, packed, path=None):
        r, g, b = unpack_rgb(np.asarray(packed, dtype=np.int64))
        pixels = np.stack([r, g, b], axis=-1).astype(np.uint8)
        return cls(pixels=pixels, path=path)

    def packed(self):
        """(H, W) int64 array of 0xRRGGBB values."""
        p = self.pixels.astype(np.int64)
        return pack_rgb(p[:, :, 0], p[:, :, 1], p[:, :, 2])
