from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageColor, ImageDraw

Color = Tuple[int, int, int, int]
ColorSpec = Union[str, int, Sequence[int]]


def to_rgba(color: ColorSpec) -> Color:
    """Normalize a color spec to an RGBA tuple.

    Accepts anything ``ImageColor.getrgb`` understands, RGB/RGBA sequences,
    and packed ``0xAARRGGBB`` ints.
    """
    if isinstance(color, str):
        rgb = ImageColor.getrgb(color)
    elif isinstance(color, int):
        c = color & 0xFFFFFFFF
        rgb = ((c >> 16) & 0xFF, (c >> 8) & 0xFF, c & 0xFF, (c >> 24) & 0xFF)
    else:
        rgb = tuple(int(v) for v in color)
    if len(rgb) == 3:
        rgb = (*rgb, 255)
    if len(rgb) != 4:
        raise ValueError(f"invalid color: {color!r}")
    return tuple(int(np.clip(v, 0, 255)) for v in rgb)  # type: ignore[return-value]


def fit_to_size(img: Image.Image, size: tuple[int, int]) -> Image.Image:
    w, h = max(1, int(size[0])), max(1, int(size[1]))
    rgba = img.convert("RGBA")
    if rgba.size == (w, h):
        return rgba
    return rgba.resize((w, h), Image.BICUBIC)


def destination_in(dst: np.ndarray, mask_alpha: np.ndarray, left: int, top: int) -> np.ndarray:
    """Scale the alpha of ``dst`` by ``mask_alpha`` placed at (left, top).

    Only the pixels under the mask rectangle are touched; fully transparent
    mask pixels erase whatever lies beneath them.
    """
    h, w = dst.shape[:2]
    mh, mw = mask_alpha.shape
    x0, y0 = max(0, left), max(0, top)
    x1, y1 = min(w, left + mw), min(h, top + mh)
    if x0 >= x1 or y0 >= y1:
        return dst
    region = mask_alpha[y0 - top : y1 - top, x0 - left : x1 - left].astype(np.uint16)
    a = dst[y0:y1, x0:x1, 3].astype(np.uint16)
    dst[y0:y1, x0:x1, 3] = ((a * region + 127) // 255).astype(np.uint8)
    return dst


class RasterSurface:
    """Pillow RGBA image implementing the drawing surface."""

    def __init__(self, width: int, height: int, color: ColorSpec = (0, 0, 0, 0)):
        self._image = Image.new("RGBA", (max(0, int(width)), max(0, int(height))), color=to_rgba(color))

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    def resize(self, width: int, height: int) -> None:
        if (width, height) != self._image.size:
            self._image = Image.new("RGBA", (max(0, int(width)), max(0, int(height))))

    def fill(self, color: ColorSpec) -> None:
        if self.width and self.height:
            self._image.paste(to_rgba(color), (0, 0, self.width, self.height))

    def fill_polygon(
        self,
        points: np.ndarray,
        color: ColorSpec,
        opacity: int,
        stroke_width: float,
    ) -> None:
        if not self.width or not self.height or len(points) < 2:
            return
        xy = [tuple(p) for p in np.asarray(points, dtype=np.float64).tolist()]
        coverage = Image.new("L", self._image.size, 0)
        draw = ImageDraw.Draw(coverage)
        draw.polygon(xy, fill=255)
        # fill and stroke share one coverage mask
        draw.line(xy + [xy[0]], fill=255, width=max(1, int(round(stroke_width))), joint="curve")
        opacity = int(np.clip(opacity, 0, 255))
        if opacity < 255:
            coverage = coverage.point(lambda v: v * opacity // 255)
        r, g, b, _ = to_rgba(color)
        self._image.paste((r, g, b, 255), (0, 0, self.width, self.height), coverage)

    def mask_destination_in(self, mask: Image.Image, left: float, top: float) -> None:
        if not self.width or not self.height:
            return
        dst = np.array(self._image, dtype=np.uint8)
        alpha = np.asarray(mask.convert("RGBA"), dtype=np.uint8)[..., 3]
        destination_in(dst, alpha, int(round(left)), int(round(top)))
        self._image = Image.fromarray(dst)
