"""Image decode/encode at the file boundary, via Pillow."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image

from pixelate.core.data_types import ColorSpace, PixelBuffer

logger = logging.getLogger(__name__)


def read_image(path: str | Path) -> PixelBuffer:
    """
    Decode an image file into an 8-bit RGB PixelBuffer.

    Any mode Pillow can open is converted to RGB; alpha is dropped.

    Raises:
        OSError: If the file cannot be read
        PIL.UnidentifiedImageError: If the format is not recognized
    """
    with Image.open(path) as img:
        if img.mode != "RGB":
            logger.debug(f"Converting {path} from {img.mode} to RGB")
            img = img.convert("RGB")
        hwc = np.array(img, dtype=np.uint8)

    buffer = PixelBuffer.from_hwc(hwc, colorspace=ColorSpace.RGB)
    buffer.metadata["source"] = str(path)
    logger.debug(f"Read {buffer!r} from {path}")
    return buffer


def write_image(buffer: PixelBuffer, path: str | Path) -> None:
    """
    Encode an RGB PixelBuffer to a file; format follows the suffix.

    Raises:
        ValueError: If the buffer is not RGB
        OSError: If the file cannot be written
    """
    if buffer.colorspace != ColorSpace.RGB:
        raise ValueError(f"Only RGB buffers can be written, got {buffer.colorspace.value}")

    Image.fromarray(buffer.to_hwc()).save(path)
    logger.debug(f"Wrote {buffer!r} to {path}")
