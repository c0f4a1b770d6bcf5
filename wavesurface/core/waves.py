from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import numpy as np

from wavesurface.utils.image_ops import Color, to_rgba

logger = logging.getLogger(__name__)

MIN_DENSITY = 0.1

BLACK: Color = (0, 0, 0, 255)
WHITE: Color = (255, 255, 255, 255)

# Attribute names used by the original view XML, mapped to field names.
_ATTRIBUTE_ALIASES = {
    "waveNumberOfWaves": "number_of_waves",
    "waveFrequency": "frequency",
    "waveAmplitude": "amplitude",
    "wavePhase": "phase",
    "wavePhaseShift": "phase_shift",
    "waveDensity": "density",
    "wavePrimaryLineWidth": "primary_line_width",
    "waveSecondaryLineWidth": "secondary_line_width",
    "waveBackgroundColor": "background_color",
    "waveColor": "wave_color",
    "waveXAxisPositionMultiplier": "x_axis_position_multiplier",
}


def clamp01(x: float) -> float:
    return float(np.clip(x, 0.0, 1.0))


@dataclass
class WaveParameters:
    number_of_waves: int = 3
    frequency: float = 2.0
    amplitude: float = 0.15
    phase: float = 0.0
    phase_shift: float = -0.05
    density: float = 5.0
    primary_line_width: float = 3.0
    secondary_line_width: float = 1.0
    background_color: Color = field(default=BLACK)
    wave_color: Color = field(default=WHITE)
    x_axis_position_multiplier: float = 0.5

    def __setattr__(self, name: str, value: Any) -> None:
        # Every write goes through here, including __init__ and replace().
        if name == "x_axis_position_multiplier":
            value = clamp01(value)
        elif name == "density":
            value = float(value)
            if not value > 0:
                logger.warning("density %r is not positive, using %s", value, MIN_DENSITY)
                value = MIN_DENSITY
        elif name in ("background_color", "wave_color"):
            value = to_rgba(value)
        elif name == "number_of_waves":
            value = max(0, int(value))
        super().__setattr__(name, value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WaveParameters":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _ATTRIBUTE_ALIASES.get(key, key)
            if name not in known:
                logger.warning("ignoring unknown wave parameter %r", key)
                continue
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["background_color"] = list(self.background_color)
        out["wave_color"] = list(self.wave_color)
        return out


def load_parameters(path: str | Path) -> WaveParameters:
    """Read a JSON object of wave parameters from ``path``."""
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return WaveParameters.from_dict(data)


@dataclass(frozen=True)
class WaveLayer:
    index: int
    points: np.ndarray
    opacity: int
    stroke_width: float


def layer_opacity(index: int) -> int:
    return 255 if index == 0 else 255 // (index + 1)


def edge_scaling(x: np.ndarray | float, width: float) -> np.ndarray | float:
    """Parabola that is 1 at the horizontal midpoint and 0 at both edges.

    Tapers the wave amplitude towards the left and right sides of the surface.
    """
    mid = width / 2.0
    return 1.0 - ((x - mid) / mid) ** 2


def sample_xs(width: float, density: float) -> np.ndarray:
    # Over-scan one step past the right edge so the curve always reaches it.
    density = max(float(density), MIN_DENSITY)
    stop = width + density
    xs = np.arange(int(math.ceil(stop / density)) + 1, dtype=np.float64) * density
    return xs[xs < stop]


def build_layers(params: WaveParameters, width: int, height: int) -> list[WaveLayer]:
    """Compute the closed polygon of every wave layer for one frame.

    Layer 0 is the front (primary) wave. Each polygon runs along the sampled
    sine curve and is closed through the bottom corners of the surface, so a
    fill covers everything below the curve.
    """
    n = params.number_of_waves
    if n <= 0 or width <= 0 or height <= 0:
        return []

    x_axis_position = height * params.x_axis_position_multiplier
    w = float(width)
    xs = sample_xs(w, params.density)
    scaling = edge_scaling(xs, w)
    base_arg = 2 * math.pi * (xs / w) * params.frequency

    layers = []
    for i in range(n):
        progress = 1.0 - i / n
        normed_amplitude = (1.5 * progress - 0.5) * params.amplitude
        ys = (
            scaling * params.amplitude * normed_amplitude * np.sin(base_arg + params.phase * (i + 1))
            + x_axis_position
        )
        curve = np.column_stack((xs, ys))
        bottom = np.array([[xs[-1], float(height)], [0.0, float(height)]])
        layers.append(
            WaveLayer(
                index=i,
                points=np.vstack((curve, bottom)),
                opacity=layer_opacity(i),
                stroke_width=params.primary_line_width if i == 0 else params.secondary_line_width,
            )
        )
    return layers
