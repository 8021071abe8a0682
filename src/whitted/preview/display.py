"""Post-processing and Matplotlib preview for rendered color maps.

The color map produced by the renderer holds raw values whose meaning
depends on the render mode. ``postprocess`` turns it into a displayable
image in [0, 1]:

- FULL: extended Reinhard tone mapping with the brightest channel in the
  image as the white point, then gamma 2.2
- DEPTH: distances divided by the largest distance; pixels that hit
  nothing (zero) map to 1.0 (far)
- NORMAL: unit normals remapped from [-1, 1] to [0, 1]

Example:
    >>> from whitted.preview.display import postprocess, show_preview
    >>> image = postprocess(renderer.get_color_map_numpy(), renderer.options.mode)
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import numpy as np
import numpy.typing as npt

from whitted.core.options import RenderMode

if TYPE_CHECKING:
    from whitted.core.renderer import Renderer


# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "reinhard_extended"]

DEFAULT_GAMMA = 2.2


def tone_map_reinhard(
    image: npt.NDArray[np.floating],
) -> npt.NDArray[np.float64]:
    """Apply Reinhard tone mapping: c / (1 + c).

    Args:
        image: Linear HDR image array of shape (H, W, 3).

    Returns:
        Tone mapped image in [0, 1) range.
    """
    image = np.maximum(image, 0.0)
    return (image / (1.0 + image)).astype(np.float64)


def tone_map_reinhard_extended(
    image: npt.NDArray[np.floating],
    white: float | None = None,
) -> npt.NDArray[np.float64]:
    """Apply extended Reinhard tone mapping: c * (1 + c / w^2) / (1 + c).

    Values equal to the white point map to exactly 1.0.

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        white: White point. Defaults to the largest channel value in the image.

    Returns:
        Tone mapped image. An all-black image stays black.
    """
    image = np.maximum(np.asarray(image, dtype=np.float64), 0.0)
    if white is None:
        white = float(image.max()) if image.size else 0.0
    if white <= 0.0:
        return np.zeros_like(image)

    return image * (1.0 + image / (white * white)) / (1.0 + image)


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float64]:
    """Apply gamma correction for display.

    Args:
        image: Linear image array of shape (H, W, 3) in [0, 1] range.
        gamma: Gamma value (default 2.2 for sRGB).

    Returns:
        Gamma corrected image.
    """
    image = np.asarray(image, dtype=np.float64)
    if gamma == 1.0:
        return image

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)
    return np.power(image, 1.0 / gamma)


def map_depth(color_map: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Normalize a depth-mode color map to [0, 1].

    Every channel holds the same distance. Pixels with distance zero saw
    no surface and are pushed to the far plane (1.0).
    """
    depth = np.asarray(color_map, dtype=np.float64)
    far = float(depth.max()) if depth.size else 0.0
    if far <= 0.0:
        return np.ones_like(depth)

    result = depth / far
    result[depth == 0.0] = 1.0
    return result


def map_normals(color_map: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Remap normal components from [-1, 1] to [0, 1]."""
    return np.clip(0.5 * np.asarray(color_map, dtype=np.float64) + 0.5, 0.0, 1.0)


def postprocess(
    color_map: npt.NDArray[np.floating],
    mode: RenderMode = RenderMode.FULL,
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float64]:
    """Turn a raw color map into a displayable image.

    Args:
        color_map: Raw render output of shape (H, W, 3).
        mode: The render mode the color map was produced with.
        gamma: Gamma applied in FULL mode.

    Returns:
        Image of shape (H, W, 3) in [0, 1].

    Raises:
        ValueError: If the mode is unknown.
    """
    if mode == RenderMode.DEPTH:
        return map_depth(color_map)
    if mode == RenderMode.NORMAL:
        return map_normals(color_map)
    if mode == RenderMode.FULL:
        return process_image_for_display(color_map, tone_map="reinhard_extended", gamma=gamma)
    raise ValueError(f"Unknown render mode: {mode!r}")


def process_image_for_display(
    image: npt.NDArray[np.floating],
    tone_map: ToneMapMethod = "none",
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float64]:
    """Process an image for display with tone mapping and gamma correction.

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard" or "reinhard_extended").
        gamma: Gamma correction value (default 2.2 for sRGB).

    Returns:
        Processed image ready for display, in [0, 1] range.

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    result = np.asarray(image, dtype=np.float64).copy()

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map == "reinhard_extended":
        result = tone_map_reinhard_extended(result)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)
    return np.clip(result, 0.0, 1.0)


def show_preview(
    renderer: Renderer,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display the current render as a Matplotlib figure.

    Args:
        renderer: The Renderer instance to display.
        title: Custom title (default shows size, mode and depth).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    image = renderer.get_image()

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image)
    ax.axis("off")

    if title is None:
        options = renderer.options
        title = (
            f"{renderer.width}x{renderer.height} - "
            f"{options.mode.name.lower()} (depth {options.depth})"
        )
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
