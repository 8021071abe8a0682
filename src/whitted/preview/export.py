"""Image export utilities.

Post-processed images (floats in [0, 1]) are converted to 8-bit and written
as PNG via Pillow.

Example:
    >>> from whitted.preview.export import save_png
    >>> save_png(renderer.get_image_uint8(), "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a [0, 1] float image to uint8.

    Values outside [0, 1] are clamped first.

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    clamped = np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)
    return (clamped * 255.0 + 0.5).astype(np.uint8)


def save_png(image: npt.NDArray, filepath: str | Path) -> None:
    """Save an image as an 8-bit RGB PNG.

    Args:
        image: Either a uint8 array or a float array in [0, 1], of shape (H, W, 3).
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array is not an (H, W, 3) image.
    """
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    if image.dtype != np.uint8:
        image = image_to_uint8(image)

    PILImage.fromarray(image).save(filepath)
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
