from __future__ import annotations

import io
from typing import Any, Protocol

import numpy as np
from PIL import Image

from wavesurface.utils.image_ops import ColorSpec


class Surface(Protocol):
    """Drawing target the renderer issues its per-frame calls against."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def fill(self, color: ColorSpec) -> None: ...

    def fill_polygon(self, points: np.ndarray, color: ColorSpec, opacity: int, stroke_width: float) -> None: ...

    def mask_destination_in(self, mask: Image.Image, left: float, top: float) -> None: ...


class Host(Protocol):
    """Window or view that owns the renderer."""

    def surface_size(self) -> tuple[int, int]:
        """Current pixel size of the drawing surface, (0, 0) if not laid out yet."""

    def request_frame(self) -> None:
        """Schedule another render on the next tick."""

    def decode(self, resource: Any) -> Image.Image | None:
        """Turn a resource reference into an image, or None if it cannot be read."""


def open_image(resource: Any) -> Image.Image:
    if isinstance(resource, Image.Image):
        return resource
    if isinstance(resource, (bytes, bytearray)):
        resource = io.BytesIO(resource)
    img = Image.open(resource)
    img.load()
    return img


class HeadlessHost:
    """Host with a fixed size, for offline rendering and tests."""

    def __init__(self, size: tuple[int, int] = (0, 0)):
        self._size = (int(size[0]), int(size[1]))
        self.frame_requests = 0

    def surface_size(self) -> tuple[int, int]:
        return self._size

    def resize(self, width: int, height: int) -> None:
        self._size = (int(width), int(height))

    def request_frame(self) -> None:
        self.frame_requests += 1

    def decode(self, resource: Any) -> Image.Image | None:
        return open_image(resource)
