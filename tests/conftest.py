import threading

import pytest

from wavesurface.core.renderer import WaveRenderer
from wavesurface.core.surface import HeadlessHost


class RecordingSurface:
    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.calls = []

    def fill(self, color):
        self.calls.append(("fill", color))

    def fill_polygon(self, points, color, opacity, stroke_width):
        self.calls.append(("polygon", points, color, opacity, stroke_width))

    def mask_destination_in(self, mask, left, top):
        self.calls.append(("mask", mask, left, top))

    def kinds(self):
        return [c[0] for c in self.calls]

    def polygons(self):
        return [c for c in self.calls if c[0] == "polygon"]


class GatedHost(HeadlessHost):
    """Resolves named images; decoding "slow" blocks until ``gate`` is set."""

    def __init__(self, images, size=(0, 0)):
        super().__init__(size)
        self.images = images
        self.gate = threading.Event()

    def decode(self, resource):
        if resource == "slow":
            assert self.gate.wait(5)
        return super().decode(self.images[resource])


@pytest.fixture
def host():
    return HeadlessHost((100, 100))


@pytest.fixture
def renderer(host):
    r = WaveRenderer(host)
    yield r
    r.close()


@pytest.fixture
def make_surface():
    return RecordingSurface


@pytest.fixture
def make_gated_host():
    return GatedHost
