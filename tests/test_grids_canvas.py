import numpy as np
import jax.numpy as jnp
import pytest

from phasematch.core.canvas import even_square_size, normalize_canvas, pad_to_canvas
from phasematch.core.errors import GridMismatchError, InputSizeError
from phasematch.core.grids import (
    ComplexGrid,
    MatchResult,
    PixelGrid,
    broadcast_channels,
    split_channels,
)


def test_from_array_channels_first():
    gray = PixelGrid.from_array(np.zeros((5, 7)))
    assert gray.shape == (1, 5, 7)
    rgb = PixelGrid.from_array(np.arange(5 * 7 * 3, dtype=np.float32).reshape(5, 7, 3))
    assert rgb.shape == (3, 5, 7)
    assert (rgb.height, rgb.width, rgb.channels) == (5, 7, 3)
    assert np.array_equal(rgb.to_numpy(), np.arange(5 * 7 * 3, dtype=np.float32).reshape(5, 7, 3))


def test_from_array_rejects_bad_rank():
    with pytest.raises(ValueError):
        PixelGrid.from_array(np.zeros((2, 3, 4, 5)))
    with pytest.raises(ValueError):
        PixelGrid.from_array(np.zeros((0, 4)))


def test_split_channels_preserves_values():
    arr = np.random.default_rng(0).random((6, 4, 3)).astype(np.float32)
    parts = split_channels(PixelGrid.from_array(arr))
    assert len(parts) == 3
    for c, part in enumerate(parts):
        assert part.shape == (1, 6, 4)
        assert np.array_equal(np.asarray(part.data[0]), arr[:, :, c])


def test_broadcast_channels():
    g = PixelGrid.from_array(np.ones((3, 3)))
    assert broadcast_channels(g, 3).channels == 3
    rgb = PixelGrid.from_array(np.ones((3, 3, 3)))
    assert broadcast_channels(rgb, 3) is rgb
    with pytest.raises(GridMismatchError):
        broadcast_channels(rgb, 4)


def test_complex_grid_rejects_mismatched_planes():
    with pytest.raises(GridMismatchError):
        ComplexGrid(jnp.zeros((1, 4, 4)), jnp.zeros((1, 4, 6)))
    with pytest.raises(ValueError):
        ComplexGrid(jnp.zeros((1, 4, 4)), jnp.zeros((1, 4, 4)), norm="ortho")


def test_match_result_rejects_negative_offset():
    with pytest.raises(ValueError):
        MatchResult(x=-1, y=0, score=0.5)
    assert MatchResult(2, 3, 0.5).to_dict() == {"x": 2, "y": 3, "score": 0.5}


@pytest.mark.parametrize(
    "w,h,expected",
    [(5, 3, 6), (4, 7, 8), (6, 6, 6), (1, 1, 2), (64, 63, 64)],
)
def test_even_square_size(w, h, expected):
    assert even_square_size(w, h) == expected


def test_pad_to_canvas_places_content_at_origin():
    arr = np.arange(6, dtype=np.float32).reshape(2, 3) + 1.0
    out = pad_to_canvas(PixelGrid.from_array(arr), 4)
    data = np.asarray(out.data[0])
    assert data.shape == (4, 4)
    assert np.array_equal(data[:2, :3], arr)
    assert data[2:, :].sum() == 0.0 and data[:, 3:].sum() == 0.0


def test_normalize_canvas_shapes():
    tmpl = PixelGrid.from_array(np.ones((3, 2)))
    srch = PixelGrid.from_array(np.ones((5, 9)))
    tp, sp = normalize_canvas(tmpl, srch)
    assert tp.shape == (1, 10, 10)
    assert sp.shape == (1, 10, 10)


@pytest.mark.parametrize("tshape", [(4, 10), (6, 3), (6, 10)])
def test_normalize_canvas_rejects_oversized_template(tshape):
    srch = PixelGrid.from_array(np.ones((5, 9)))
    with pytest.raises(InputSizeError):
        normalize_canvas(PixelGrid.from_array(np.ones(tshape)), srch)
