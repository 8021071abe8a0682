"""Render configuration.

``RenderOptions`` selects what the renderer outputs and bounds the recursion:

- ``RenderMode.FULL``: Whitted shading (local Phong terms plus recursive
  reflection and refraction)
- ``RenderMode.DEPTH``: hit distance replicated across the color channels
- ``RenderMode.NORMAL``: surface normal components as color channels

``depth`` is the recursion budget. A primary ray consumes one unit; every
reflection or refraction bounce consumes one more. A budget of zero renders
background everywhere.

Options are validated in Python before any kernel is launched, so an
unsupported configuration never reaches the render loop.
"""

from dataclasses import dataclass
from enum import IntEnum

# Upper bound on the recursion budget. The ray-cast work stack is sized from it.
MAX_RECURSION_DEPTH = 16

DEFAULT_DEPTH = 5


class RenderMode(IntEnum):
    """What the renderer writes into the color map."""

    FULL = 0
    DEPTH = 1
    NORMAL = 2


@dataclass(frozen=True)
class RenderOptions:
    """Render configuration.

    Attributes:
        mode: The render mode.
        depth: Recursion budget, in [0, MAX_RECURSION_DEPTH].
    """

    mode: RenderMode = RenderMode.FULL
    depth: int = DEFAULT_DEPTH

    def validate(self) -> None:
        """Reject unsupported configurations.

        Raises:
            ValueError: If the mode is unknown or the depth is out of range.
        """
        if not isinstance(self.mode, RenderMode):
            raise ValueError(f"Unknown render mode: {self.mode!r}")
        if isinstance(self.depth, bool) or not isinstance(self.depth, int):
            raise ValueError(f"Recursion depth must be an integer, got {self.depth!r}")
        if self.depth < 0 or self.depth > MAX_RECURSION_DEPTH:
            raise ValueError(
                f"Recursion depth {self.depth} is outside [0, {MAX_RECURSION_DEPTH}]"
            )

    def with_depth(self, depth: int) -> "RenderOptions":
        """Return a copy with a different recursion budget."""
        return RenderOptions(mode=self.mode, depth=depth)


def parse_render_mode(name: str | int | RenderMode) -> RenderMode:
    """Convert a user-facing mode name ("full", "depth", "normal") to RenderMode.

    Raises:
        ValueError: If the name does not match a mode.
    """
    if isinstance(name, RenderMode):
        return name
    if isinstance(name, int):
        try:
            return RenderMode(name)
        except ValueError:
            raise ValueError(f"Unknown render mode: {name}") from None
    try:
        return RenderMode[name.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown render mode: {name}") from None
