"""Preview module for post-processing and output.

Components:
    display: Mode-specific post-processing, tone mapping, gamma and a
        Matplotlib preview window
    export: PNG export and image comparison utilities

Example:
    >>> from whitted.preview import postprocess, save_png
    >>> image = postprocess(color_map, RenderMode.FULL)
    >>> save_png(image, "output.png")
"""

from whitted.preview.display import (
    ToneMapMethod,
    apply_gamma,
    map_depth,
    map_normals,
    postprocess,
    process_image_for_display,
    show_preview,
    tone_map_reinhard,
    tone_map_reinhard_extended,
)
from whitted.preview.export import compute_rmse, image_to_uint8, save_png

__all__ = [
    # Display functions
    "show_preview",
    # Post-processing
    "postprocess",
    "map_depth",
    "map_normals",
    "tone_map_reinhard",
    "tone_map_reinhard_extended",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    # Export functions
    "save_png",
    "image_to_uint8",
    "compute_rmse",
]
