from __future__ import annotations

import dataclasses
import logging
import threading
from concurrent.futures import Executor, Future
from typing import Any

from PIL import Image

from wavesurface.core.mask_loader import MaskLoader
from wavesurface.core.surface import Host, Surface
from wavesurface.core.waves import WaveLayer, WaveParameters, build_layers
from wavesurface.utils.image_ops import Color, ColorSpec

logger = logging.getLogger(__name__)


class WaveRenderer:
    """Draws stacked sine waves onto a surface, one frame per :meth:`render` call.

    The host calls ``render`` on every tick. Each call fills the background,
    fills one polygon per wave layer, clips the result to the mask (if any),
    advances the phase while playing and asks the host for the next frame.
    """

    def __init__(self, host: Host, params: WaveParameters | None = None, executor: Executor | None = None):
        if host is None:
            raise ValueError("host cannot be None")
        self._host = host
        self._params = dataclasses.replace(params) if params is not None else WaveParameters()
        self._playing = threading.Event()
        self._playing.set()
        self._mask: Image.Image | None = None
        self._surface_size = (0, 0)
        self._loader = MaskLoader(
            decode=host.decode,
            size_provider=self._current_size,
            publish=self._publish_mask,
            executor=executor,
        )

    # parameters

    @property
    def parameters(self) -> WaveParameters:
        return self._params

    def set_parameters(self, params: WaveParameters) -> None:
        self._params = dataclasses.replace(params)

    def update_parameters(self, **changes: Any) -> None:
        self._params = dataclasses.replace(self._params, **changes)

    @property
    def phase(self) -> float:
        return self._params.phase

    @phase.setter
    def phase(self, value: float) -> None:
        self._params.phase = value

    @property
    def wave_color(self) -> Color:
        return self._params.wave_color

    @wave_color.setter
    def wave_color(self, color: ColorSpec) -> None:
        self._params.wave_color = color

    @property
    def background_color(self) -> Color:
        return self._params.background_color

    @background_color.setter
    def background_color(self, color: ColorSpec) -> None:
        self._params.background_color = color

    @property
    def x_axis_position_multiplier(self) -> float:
        return self._params.x_axis_position_multiplier

    @x_axis_position_multiplier.setter
    def x_axis_position_multiplier(self, value: float) -> None:
        self._params.x_axis_position_multiplier = value

    # playback

    def play(self) -> None:
        self._playing.set()

    def pause(self) -> None:
        self._playing.clear()

    def is_playing(self) -> bool:
        return self._playing.is_set()

    # mask

    @property
    def mask(self) -> Image.Image | None:
        return self._mask

    def _publish_mask(self, bitmap: Image.Image | None) -> None:
        self._mask = bitmap

    def _current_size(self) -> tuple[int, int]:
        w, h = self._host.surface_size()
        last_w, last_h = self._surface_size
        return (w if w > 0 else last_w, h if h > 0 else last_h)

    def set_mask(self, bitmap: Image.Image | None) -> None:
        """Use ``bitmap`` as the mask right away. ``None`` turns masking off."""
        if bitmap is not None:
            bitmap = bitmap.convert("RGBA")
            logger.debug("mask set: %dx%d", bitmap.width, bitmap.height)
        else:
            logger.debug("mask cleared")
        self._loader.publish_now(bitmap)

    def set_mask_drawable(self, image: Image.Image) -> Future:
        """Rasterize ``image`` to the surface size in the background and use it as the mask."""
        return self._loader.load_drawable(image)

    def set_mask_resource(self, resource: Any) -> Future:
        """Decode ``resource`` through the host, then rasterize it like a drawable."""
        return self._loader.load_resource(resource)

    # frame

    def compute_layers(self, width: int, height: int) -> list[WaveLayer]:
        return build_layers(self._params, width, height)

    def render(self, surface: Surface) -> None:
        params = self._params
        width, height = surface.width, surface.height
        self._surface_size = (width, height)

        surface.fill(params.background_color)
        for layer in build_layers(params, width, height):
            surface.fill_polygon(layer.points, params.wave_color, layer.opacity, layer.stroke_width)

        mask = self._mask
        if mask is not None:
            left = (width - mask.width) / 2
            top = (height - mask.height) / 2
            surface.mask_destination_in(mask, left, top)

        if self._playing.is_set():
            params.phase += params.phase_shift

        self._host.request_frame()

    def close(self) -> None:
        self._loader.shutdown(wait=False)
