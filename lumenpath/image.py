"""
Image sink.

Turns HDR radiance into 8-bit RGB and writes it to disk with Pillow. The sink
uses the usual raster convention (origin top-left, rows growing downward);
the renderer's convention (origin bottom-left, y growing upward) is mapped
onto it with ``sink_row``.
"""

from __future__ import annotations
from pathlib import Path
from typing import Tuple
import numpy as np

RGB8 = Tuple[int, int, int]


class ImageWriteError(OSError):
    """Raised when the image cannot be encoded or written."""


def to_ldr(hdr_image: np.ndarray, gamma: float = 2.2) -> np.ndarray:
    """Convert an HDR image to 8-bit with gamma correction.

    Values above the representable maximum are clamped to 255, never
    wrapped; negative and NaN values become 0.

    Args:
        hdr_image: HDR image array (float)
        gamma: Display gamma (1.0 leaves values linear)

    Returns:
        LDR image as uint8 array
    """
    linear = np.nan_to_num(np.asarray(hdr_image, dtype=np.float64), nan=0.0, posinf=1.0, neginf=0.0)
    corrected = np.power(np.clip(linear, 0.0, 1.0), 1.0 / gamma)
    return np.clip(corrected * 255.0, 0, 255).astype(np.uint8)


def sink_row(y: int, height: int) -> int:
    """Map a renderer row (counted from the bottom) to a sink row."""
    return height - 1 - y


class ImageBuffer:
    """A width x height grid of 8-bit RGB pixels."""

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(f"image dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._pixels = np.zeros((height, width, 3), dtype=np.uint8)

    @classmethod
    def from_hdr(cls, hdr_image: np.ndarray, gamma: float = 2.2) -> ImageBuffer:
        """Quantize an HDR image whose row 0 is already the top row."""
        height, width = hdr_image.shape[:2]
        buffer = cls(width, height)
        buffer._pixels[:] = to_ldr(hdr_image, gamma)
        return buffer

    def put_pixel(self, x: int, y: int, rgb: RGB8) -> None:
        """Set the pixel at column x, row y (row 0 at the top)."""
        self._pixels[y, x] = rgb

    def get_pixel(self, x: int, y: int) -> RGB8:
        r, g, b = self._pixels[y, x]
        return int(r), int(g), int(b)

    def to_array(self) -> np.ndarray:
        """Return a copy of the pixels, shape (height, width, 3)."""
        return self._pixels.copy()

    def save(self, filename: str) -> None:
        """Save the image; the extension selects the format.

        Raises:
            ImageWriteError: If the format is unknown or the file can't be written
        """
        from PIL import Image as PILImage

        path = Path(filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            PILImage.fromarray(self._pixels).save(path)
        except (OSError, ValueError) as exc:
            raise ImageWriteError(f"could not write image to {filename}: {exc}") from exc
