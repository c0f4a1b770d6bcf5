import dataclasses
import json
import math

import numpy as np
import pytest

from wavesurface.core.waves import (
    MIN_DENSITY,
    WaveParameters,
    build_layers,
    edge_scaling,
    layer_opacity,
    load_parameters,
    sample_xs,
)


def test_defaults_match_original_widget():
    p = WaveParameters()
    assert p.number_of_waves == 3
    assert p.frequency == 2.0
    assert p.amplitude == 0.15
    assert p.phase_shift == -0.05
    assert p.density == 5.0
    assert p.primary_line_width == 3.0
    assert p.secondary_line_width == 1.0
    assert p.background_color == (0, 0, 0, 255)
    assert p.wave_color == (255, 255, 255, 255)
    assert p.x_axis_position_multiplier == 0.5
    assert p.phase == 0.0


@pytest.mark.parametrize("value, expected", [(-0.3, 0.0), (1.7, 1.0), (0.4, 0.4)])
def test_x_axis_multiplier_is_clamped_on_every_write(value, expected):
    assert WaveParameters(x_axis_position_multiplier=value).x_axis_position_multiplier == pytest.approx(expected)

    p = WaveParameters()
    p.x_axis_position_multiplier = value
    assert p.x_axis_position_multiplier == pytest.approx(expected)

    replaced = dataclasses.replace(WaveParameters(), x_axis_position_multiplier=value)
    assert replaced.x_axis_position_multiplier == pytest.approx(expected)


@pytest.mark.parametrize("density", [0, -5.0])
def test_non_positive_density_is_clamped(density, caplog):
    p = WaveParameters()
    p.density = density
    assert p.density == MIN_DENSITY
    assert "density" in caplog.text


def test_colors_are_normalized_to_rgba():
    p = WaveParameters(wave_color="#ff0000", background_color=(0, 0, 255))
    assert p.wave_color == (255, 0, 0, 255)
    assert p.background_color == (0, 0, 255, 255)
    p.wave_color = 0x80FF0000
    assert p.wave_color == (255, 0, 0, 128)


def test_invalid_color_raises():
    with pytest.raises(ValueError):
        WaveParameters(wave_color="not-a-color")


def test_from_dict_accepts_attribute_names_and_skips_unknown(caplog):
    p = WaveParameters.from_dict(
        {"waveAmplitude": 0.3, "waveXAxisPositionMultiplier": 2, "density": 2.5, "bogus": 1}
    )
    assert p.amplitude == 0.3
    assert p.x_axis_position_multiplier == 1.0
    assert p.density == 2.5
    assert "bogus" in caplog.text


def test_load_parameters_reads_json(tmp_path):
    path = tmp_path / "waves.json"
    path.write_text(json.dumps({"number_of_waves": 5, "wave_color": "#00ff00"}), encoding="utf-8")
    p = load_parameters(path)
    assert p.number_of_waves == 5
    assert p.wave_color == (0, 255, 0, 255)
    assert p.frequency == 2.0


def test_load_parameters_rejects_non_object(tmp_path):
    path = tmp_path / "waves.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_parameters(path)


def test_to_dict_is_json_serializable():
    data = WaveParameters(number_of_waves=2).to_dict()
    assert json.loads(json.dumps(data))["number_of_waves"] == 2
    assert data["wave_color"] == [255, 255, 255, 255]


def test_layer_opacity_schedule():
    assert [layer_opacity(i) for i in range(5)] == [255, 127, 85, 63, 51]


def test_edge_scaling_peaks_in_middle_and_vanishes_at_edges():
    assert edge_scaling(50.0, 100.0) == pytest.approx(1.0)
    assert edge_scaling(0.0, 100.0) == pytest.approx(0.0)
    assert edge_scaling(100.0, 100.0) == pytest.approx(0.0)
    assert edge_scaling(25.0, 100.0) == pytest.approx(0.75)


def test_sampling_overscans_past_right_edge():
    xs = sample_xs(10.0, 3.0)
    assert xs.tolist() == [0.0, 3.0, 6.0, 9.0, 12.0]
    xs = sample_xs(100.0, 1.0)
    assert len(xs) == 101
    assert xs[-1] == 100.0


def test_single_wave_example_crosses_axis_at_both_edges():
    p = WaveParameters(
        number_of_waves=1, amplitude=1.0, frequency=1.0, phase=0.0, phase_shift=0.0, density=1.0
    )
    (layer,) = build_layers(p, 100, 100)
    curve = layer.points[:-2]
    assert curve[0] == pytest.approx([0.0, 50.0])
    assert curve[100] == pytest.approx([100.0, 50.0])

    xs = curve[:, 0]
    bound = edge_scaling(xs, 100.0)
    assert np.all(np.abs(curve[:, 1] - 50.0) <= bound + 1e-9)
    # quarter period: sin = 1 and scaling = 0.75
    assert curve[25, 1] == pytest.approx(50.0 + 0.75)


def test_polygon_is_closed_through_bottom_corners():
    p = WaveParameters(number_of_waves=2, density=10.0)
    layers = build_layers(p, 100, 40)
    for layer in layers:
        last_curve_x = layer.points[-3, 0]
        assert layer.points[-2] == pytest.approx([last_curve_x, 40.0])
        assert layer.points[-1] == pytest.approx([0.0, 40.0])


def test_layer_amplitude_and_stroke_per_index():
    p = WaveParameters(
        number_of_waves=4, amplitude=2.0, frequency=1.0, phase=math.pi / 2, density=25.0,
        primary_line_width=4.0, secondary_line_width=1.5,
    )
    layers = build_layers(p, 100, 100)
    assert [l.index for l in layers] == [0, 1, 2, 3]
    assert [l.opacity for l in layers] == [255, 127, 85, 63]
    assert [l.stroke_width for l in layers] == [4.0, 1.5, 1.5, 1.5]

    # at the midpoint scaling is 1; phase*(i+1) shifts each layer differently
    for i, layer in enumerate(layers):
        progress = 1.0 - i / 4
        normed = (1.5 * progress - 0.5) * 2.0
        expected = 2.0 * normed * math.sin(2 * math.pi * 0.5 + (math.pi / 2) * (i + 1)) + 50.0
        assert layer.points[2, 1] == pytest.approx(expected)


def test_no_layers_for_zero_waves_or_empty_surface():
    assert build_layers(WaveParameters(number_of_waves=0), 100, 100) == []
    assert build_layers(WaveParameters(), 0, 100) == []
    assert build_layers(WaveParameters(), 100, 0) == []


def test_zero_frequency_gives_flat_line():
    p = WaveParameters(number_of_waves=1, frequency=0.0, x_axis_position_multiplier=0.25)
    (layer,) = build_layers(p, 80, 40)
    assert np.allclose(layer.points[:-2, 1], 10.0)


def test_sampling_stays_strictly_below_overscan_limit():
    xs = sample_xs(1000.0, 0.1)
    assert xs[-1] < 1000.0 + 0.1
    assert xs[-1] == pytest.approx(1000.0)
    assert len(xs) == 10001
