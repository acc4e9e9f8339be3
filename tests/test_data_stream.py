from __future__ import annotations

import numpy as np
import pytest

from halfspace_detector.data_stream import ClusteredStream


def test_take_draws_reproducible_frames():
    first = ClusteredStream(center=[1.0, 2.0], spread=0.5, seed=4).take(30)
    second = ClusteredStream(center=[1.0, 2.0], spread=0.5, seed=4).take(30)

    assert list(first.columns) == ["x0", "x1", "is_injected"]
    assert first.equals(second)
    assert not first["is_injected"].any()


def test_inject_appends_flagged_points():
    stream = ClusteredStream(center=[0.0], seed=1)
    frame = stream.inject(stream.take(5), [[9.0], [-9.0]])

    assert len(frame) == 7
    assert frame["is_injected"].tolist() == [False] * 5 + [True] * 2
    assert frame["x0"].iloc[-1] == -9.0


def test_iteration_yields_vectors_near_center():
    stream = ClusteredStream(center=[5.0, 5.0], spread=0.01, seed=2)
    points = [point for point, _ in zip(stream, range(10))]

    assert all(point.shape == (2,) for point in points)
    assert np.allclose(points, 5.0, atol=0.1)


def test_invalid_stream_parameters():
    with pytest.raises(ValueError):
        ClusteredStream(center=[])
    with pytest.raises(ValueError):
        ClusteredStream(center=[0.0], spread=-1.0)
