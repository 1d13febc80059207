import sys
import numpy as np
import pytest

from phasematch import (
    InputSizeError,
    MatchConfig,
    NumericCapabilityError,
    PixelGrid,
    correlate,
    match_template,
)
from phasematch.utils.capability import check_numeric_capability, index_pixel_limit, x64_enabled


if sys.version_info < (3, 8):
    pytest.skip("Requires Python 3.8+ for package code", allow_module_level=True)


def make_case(th=8, tw=8, h=40, w=48, dx=13, dy=21, channels=None, seed=0):
    rng = np.random.default_rng(seed)
    shape = (th, tw) if channels is None else (th, tw, channels)
    tmpl = rng.random(shape).astype(np.float32)
    canvas_shape = (h, w) if channels is None else (h, w, channels)
    canvas = np.zeros(canvas_shape, dtype=np.float32)
    canvas[dy : dy + th, dx : dx + tw] = tmpl
    return tmpl, canvas


def test_self_match_identity():
    tmpl = np.random.default_rng(5).random((12, 16)).astype(np.float32)
    res = match_template(tmpl, tmpl)
    assert (res.x, res.y) == (0, 0)
    assert res.score >= 0.99


def test_known_offset_recovery():
    tmpl, canvas = make_case()
    res = match_template(tmpl, canvas)
    assert (res.x, res.y) == (13, 21)
    assert res.score >= 0.95


def test_box_template_in_zero_canvas():
    tmpl = np.ones((4, 4), dtype=np.float32)
    canvas = np.zeros((64, 64), dtype=np.float32)
    canvas[6:10, 10:14] = 1.0
    res = match_template(tmpl, canvas)
    assert (res.x, res.y) == (10, 6)
    assert res.score > 0.9


def test_offset_at_far_corner():
    tmpl, canvas = make_case(th=5, tw=7, h=21, w=30, dx=23, dy=16, seed=3)
    res = match_template(tmpl, canvas)
    assert (res.x, res.y) == (23, 16)


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_score_bounded(seed):
    rng = np.random.default_rng(seed)
    tmpl = rng.normal(size=(7, 9)).astype(np.float32)
    search = rng.normal(size=(25, 19)).astype(np.float32)
    res = match_template(tmpl, search)
    assert 0.0 <= res.score <= 1.0 + 1e-5
    assert 0 <= res.x < 19 and 0 <= res.y < 25


@pytest.mark.parametrize("tshape", [(41, 8), (8, 49), (41, 49)])
def test_oversized_template_raises(tshape):
    _, canvas = make_case()
    with pytest.raises(InputSizeError):
        match_template(np.ones(tshape, dtype=np.float32), canvas)


def test_uniform_gain_does_not_move_match():
    tmpl, canvas = make_case(seed=4)
    base = match_template(tmpl, canvas)
    bright = match_template(tmpl, 3.0 * canvas)
    assert (bright.x, bright.y) == (base.x, base.y)
    assert np.isclose(bright.score, base.score, atol=1e-4)


def test_grayscale_combination_rules_agree():
    tmpl, canvas = make_case(seed=6)
    surfaces = [
        np.asarray(correlate(tmpl, canvas, MatchConfig(channel_combination=m))[0].data)
        for m in ("gray", "average", "rms")
    ]
    for s in surfaces[1:]:
        assert np.allclose(s, surfaces[0], atol=1e-6)


@pytest.mark.parametrize("mode", ["gray", "average", "rms"])
def test_color_match_every_mode(mode):
    tmpl, canvas = make_case(channels=3, dx=5, dy=9, seed=7)
    surface, res = correlate(tmpl, canvas, MatchConfig(channel_combination=mode))
    assert surface.shape == (40, 48)
    assert (res.x, res.y) == (5, 9)
    assert res.score >= 0.95


def test_gray_template_against_color_search():
    tmpl, canvas = make_case(dx=2, dy=30, seed=8)
    color = np.stack([canvas * 0.5, canvas, canvas * 2.0], axis=-1)
    res = match_template(PixelGrid.from_array(tmpl), color, MatchConfig(channel_combination="average"))
    assert (res.x, res.y) == (2, 30)


def test_normalization_conventions_agree():
    tmpl, canvas = make_case(seed=9)
    s_fwd, r_fwd = correlate(tmpl, canvas, MatchConfig(transform_normalization="forward"))
    s_inv, r_inv = correlate(tmpl, canvas, MatchConfig(transform_normalization="inverse"))
    assert (r_fwd.x, r_fwd.y) == (r_inv.x, r_inv.y)
    assert np.allclose(np.asarray(s_fwd.data), np.asarray(s_inv.data), atol=1e-5)


def test_deterministic():
    rng = np.random.default_rng(10)
    tmpl = rng.random((6, 6)).astype(np.float32)
    search = rng.random((30, 30)).astype(np.float32)
    cfg = MatchConfig(channel_combination="rms")
    assert match_template(tmpl, search, cfg) == match_template(tmpl, search, cfg)


def test_surface_has_search_dimensions():
    tmpl, canvas = make_case(h=31, w=17, th=3, tw=3, dx=1, dy=1)
    surface, _ = correlate(tmpl, canvas)
    assert surface.shape == (31, 17)


def test_config_validation_and_aliases():
    assert MatchConfig(channel_combination="ave").channel_combination == "average"
    with pytest.raises(ValueError):
        MatchConfig(channel_combination="max")
    with pytest.raises(ValueError):
        MatchConfig(transform_normalization="ortho")
    with pytest.raises(ValueError):
        MatchConfig(luma="rec2020")
    cfg = MatchConfig.from_dict({"channelCombination": "rms", "transformNormalization": "forward"})
    assert (cfg.channel_combination, cfg.transform_normalization) == ("rms", "forward")
    with pytest.raises(ValueError):
        MatchConfig.from_dict({"stretch": True})


def test_numeric_capability_checks():
    # Canvases past 4096 px a side are fine in float32
    check_numeric_capability(4100, "float32")
    if not x64_enabled():
        assert index_pixel_limit() == 2 ** 31 - 1
        check_numeric_capability(46340, "float32")
        with pytest.raises(NumericCapabilityError):
            check_numeric_capability(46342, "float32")
    with pytest.raises(NumericCapabilityError):
        match_template(np.ones((2, 2)), np.ones((4, 4)), MatchConfig(dtype="int8"))


def test_float64_requires_x64():
    if x64_enabled():
        pytest.skip("JAX x64 mode is enabled in this session")
    with pytest.raises(NumericCapabilityError):
        match_template(np.ones((2, 2)), np.ones((4, 4)), MatchConfig(dtype="float64"))


def test_template_on_bright_background():
    rng = np.random.default_rng(12)
    search = (rng.random((256, 256)) + 200.0).astype(np.float32)
    tmpl = search[100:140, 60:110]
    res = match_template(tmpl, search)
    assert (res.x, res.y) == (60, 100)
