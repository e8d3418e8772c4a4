"""
Image input/output.

Rendered images are (height, width, 3) float arrays of linear radiance with
row 0 at the top. Saving applies an approximate gamma of 2 (square root);
loading only rescales bytes to [0, 1] and does not undo that gamma.
"""

from __future__ import annotations
from pathlib import Path
from typing import Union
import logging

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def to_ldr(image: np.ndarray) -> np.ndarray:
    """Convert a linear HDR image to 8-bit with sqrt gamma.

    Each channel becomes ``int(min(sqrt(c), 1) * 255.99)``.

    Args:
        image: Float array of shape (height, width, 3)

    Returns:
        uint8 array of the same shape
    """
    corrected = np.sqrt(np.clip(image, 0.0, None))
    return (np.clip(corrected, 0.0, 1.0) * 255.99).astype(np.uint8)


def save_ppm(image: np.ndarray, filename: PathLike) -> None:
    """Write a binary PPM (P6) file.

    The header is ``P6\\n<width>\\n<height>\\n255\\n`` followed by the rows
    from top to bottom as RGB byte triples.
    """
    ldr = image if image.dtype == np.uint8 else to_ldr(image)
    height, width = ldr.shape[:2]

    with open(filename, 'wb') as f:
        f.write(f"P6\n{width}\n{height}\n255\n".encode('ascii'))
        f.write(np.ascontiguousarray(ldr).tobytes())


def save_image(image: np.ndarray, filename: PathLike) -> None:
    """Save image to file.

    ``.ppm`` is written natively; any other extension goes through Pillow.

    Args:
        image: Image array (float HDR or uint8)
        filename: Output filename (extension determines format)
    """
    path = Path(filename)
    if path.suffix.lower() == '.ppm':
        save_ppm(image, path)
    else:
        ldr = image if image.dtype == np.uint8 else to_ldr(image)
        Image.fromarray(ldr).save(path)
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], path)


def load_image(filename: PathLike) -> np.ndarray:
    """Load an image as linear floats in [0, 1] (byte / 255, no gamma undo).

    Returns:
        Float array of shape (height, width, 3), row 0 at the top
    """
    path = Path(filename)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {filename}")

    with Image.open(path) as img:
        data = np.array(img.convert('RGB'), dtype=np.float64) / 255.0

    logger.debug("Loaded %s (%dx%d)", path, data.shape[1], data.shape[0])
    return data
