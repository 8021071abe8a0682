"""Banded renderer and the single render entry point.

``Renderer`` wraps the integrator's render target: it sets up the camera and
color map for one image and fills the color map band by band, so callers can
report progress between bands. Every pixel is independent, so rendering in
bands produces exactly the same image as rendering in one pass.

``render`` is the one-call entry point: scene (JSON path or SceneManager),
camera and render options in, post-processed ``uint8`` image out.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.core.renderer import Renderer, render
    >>> from whitted.scene.presets import create_demo_scene
    >>>
    >>> scene, camera = create_demo_scene(320, 240)
    >>> renderer = Renderer(camera)
    >>> for rows_done, total in renderer.render_progressive(band_height=32):
    ...     print(f"{rows_done}/{total} rows")
    >>> renderer.save_image("demo.png")
    >>>
    >>> image = render("scene.json", camera)  # (240, 320, 3) uint8
"""

import logging
import time
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from whitted.camera.pinhole import CameraOptions, setup_camera
from whitted.core.integrator import (
    clear_render_target,
    get_color_map_numpy,
    render_color_map,
    setup_render_target,
)
from whitted.core.options import RenderOptions
from whitted.preview.display import postprocess
from whitted.preview.export import image_to_uint8, save_png
from whitted.scene.manager import SceneManager, load_scene

logger = logging.getLogger(__name__)

# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

DEFAULT_BAND_HEIGHT = 32


class Renderer:
    """Renders the resident scene through one camera, band by band.

    The camera and color map are global Taichi state, so only the most
    recently constructed Renderer is valid to render with.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        options: Render mode and recursion budget.
    """

    def __init__(self, camera: CameraOptions, options: RenderOptions | None = None) -> None:
        """Configure the camera and allocate the color map.

        Raises:
            ValueError: If the camera or render options are invalid, or the
                image exceeds the maximum supported size.
        """
        options = options or RenderOptions()
        options.validate()
        camera.validate()

        self._camera = camera
        self._options = options
        self._rows_done = 0

        setup_render_target(camera.screen_width, camera.screen_height)
        setup_camera(camera)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._camera.screen_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._camera.screen_height

    @property
    def options(self) -> RenderOptions:
        """Get the render options."""
        return self._options

    @property
    def rows_done(self) -> int:
        """Number of image rows rendered so far."""
        return self._rows_done

    @property
    def is_complete(self) -> bool:
        """Whether every row has been rendered."""
        return self._rows_done >= self.height

    def reset(self) -> None:
        """Clear the color map so the image can be rendered again."""
        clear_render_target()
        self._rows_done = 0

    def _render_band(self, band_height: int) -> None:
        row_end = min(self._rows_done + band_height, self.height)
        render_color_map(self._options, self._rows_done, row_end)
        self._rows_done = row_end

    def render(
        self,
        band_height: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render all remaining rows.

        Args:
            band_height: Rows per kernel launch. Defaults to the whole image.
            callback: Optional callback called after each band with
                (rows_done, total_rows).

        Raises:
            ValueError: If band_height is not positive.
        """
        if band_height is None:
            band_height = self.height
        for rows_done, total in self.render_progressive(band_height):
            if callback is not None:
                callback(rows_done, total)

    def render_progressive(
        self,
        band_height: int = DEFAULT_BAND_HEIGHT,
    ) -> Generator[tuple[int, int], None, None]:
        """Render remaining rows, yielding progress after each band.

        Args:
            band_height: Rows per kernel launch.

        Yields:
            Tuple of (rows_done, total_rows).

        Raises:
            ValueError: If band_height is not positive.
        """
        if band_height < 1:
            raise ValueError(f"band_height must be positive, got {band_height}")

        start = time.perf_counter()
        logger.info(
            "Rendering %dx%d (mode=%s, depth=%d)",
            self.width,
            self.height,
            self._options.mode.name.lower(),
            self._options.depth,
        )

        while not self.is_complete:
            self._render_band(band_height)
            yield (self._rows_done, self.height)

        logger.info("Render finished in %.2fs", time.perf_counter() - start)

    def get_color_map_numpy(self) -> npt.NDArray[np.float64]:
        """Raw color map of shape (height, width, 3)."""
        return get_color_map_numpy()

    def get_image(self) -> npt.NDArray[np.float64]:
        """Post-processed image of shape (height, width, 3) in [0, 1]."""
        return postprocess(self.get_color_map_numpy(), self._options.mode)

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Post-processed image as an 8-bit array of shape (height, width, 3)."""
        return image_to_uint8(self.get_image())

    def save_image(self, filepath: str | Path) -> None:
        """Save the post-processed image as a PNG file."""
        save_png(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"mode={self._options.mode.name}, depth={self._options.depth}, "
            f"rows_done={self._rows_done})"
        )


def render(
    scene: SceneManager | str | Path,
    camera: CameraOptions,
    options: RenderOptions | None = None,
) -> npt.NDArray[np.uint8]:
    """Render a scene to a finished 8-bit image.

    Args:
        scene: A populated SceneManager (already resident in field storage)
            or the path of a JSON scene file to load.
        camera: Camera configuration, including the image size.
        options: Render mode and recursion budget (defaults if None).

    Returns:
        Array of shape (screen_height, screen_width, 3) with dtype uint8.

    Raises:
        ValueError: If the scene, camera or options are invalid.
        FileNotFoundError: If the scene file does not exist.
    """
    if not isinstance(scene, SceneManager):
        scene = load_scene(scene)

    renderer = Renderer(camera, options)
    renderer.render()
    return renderer.get_image_uint8()
