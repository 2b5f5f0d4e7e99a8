import numpy as np
import pytest
from hypothesis import given, settings, strategies
from hypothesis.extra import numpy as hnp

import wjlib.analysis_error as analysis_error
import wjlib.channel_model as channel_model


@given(
    raw=hnp.arrays(
        np.float64,
        strategies.integers(min_value=1, max_value=200),
        elements=strategies.floats(min_value=-1e3, max_value=1e3),
    ),
    zero=strategies.floats(min_value=-10, max_value=10),
    factor=strategies.floats(min_value=-100, max_value=100),
)
@settings(deadline=None)
def test_reduce_channel(raw: np.ndarray, zero: float, factor: float):
    calibration = channel_model.Calibration(zero=zero, factor=factor)

    calibrated, mean = channel_model.reduce_channel(raw, calibration)

    assert calibrated.shape == raw.shape
    assert np.allclose(calibrated, factor * (raw - zero))
    assert np.isclose(mean, np.mean(calibrated))


def test_reduce_channel_identity():
    raw = np.array([1.0, 2.0, 3.0])

    calibrated, mean = channel_model.reduce_channel(
        raw, channel_model.Calibration(zero=0.0, factor=1.0)
    )

    # Reducing again with the identity calibration changes nothing
    again, again_mean = channel_model.reduce_channel(
        calibrated, channel_model.Calibration(zero=0.0, factor=1.0)
    )
    assert np.array_equal(calibrated, raw)
    assert np.array_equal(again, calibrated)
    assert mean == again_mean == 2.0


def test_reduce_empty_channel():
    with pytest.raises(analysis_error.IncompleteDataset):
        channel_model.reduce_channel(
            np.array([], dtype=np.float64), channel_model.Calibration(0.0, 1.0)
        )


def test_calibration_block():
    values = np.array([0.0, 1.0, 0.1, 2.0, 0.2, 3.0])

    block = channel_model.CalibrationBlock.from_vector(values)

    assert block.time == channel_model.Calibration(0.0, 1.0)
    assert len(block.channels) == 2
    assert block[channel_model.Channel.SPEED] == channel_model.Calibration(0.1, 2.0)
    assert block[channel_model.Channel.LVDT_FWD] == channel_model.Calibration(0.2, 3.0)

    with pytest.raises(analysis_error.IncompleteDataset):
        block[channel_model.Channel.DRAG]


def test_calibration_block_odd_size():
    with pytest.raises(analysis_error.IncompleteDataset):
        channel_model.CalibrationBlock.from_vector(np.array([0.0, 1.0, 2.0]))


def test_channel_statistics():
    stats = channel_model.ChannelStatistics.from_samples(np.array([1.0, 2.0, 3.0]))

    assert stats.mean == 2.0
    assert stats.minimum == 1.0
    assert stats.maximum == 3.0
    assert np.isclose(stats.deviation, 0.5)
    assert np.isclose(stats.std, 1.0)


def test_force():
    ahead = channel_model.Force.from_grams(1000.0, 9.806, channel_model.Direction.AHEAD)
    astern = channel_model.Force.from_grams(-1000.0, 9.806, channel_model.Direction.ASTERN)

    assert np.isclose(ahead.magnitude, 9.806)
    assert np.isclose(astern.magnitude, 9.806)
    assert np.isclose(ahead.value, 9.806)
    assert np.isclose(astern.value, -9.806)

    with pytest.raises(ValueError):
        channel_model.Force(magnitude=-1.0)
    with pytest.raises(ValueError):
        channel_model.Force(magnitude=np.nan)


def test_shaft_rpm_from_pulses():
    sampling_frequency = 800.0
    period = 80  # 10 revolutions per second
    signal = np.ones(8000)
    signal[period // 2 :: period] = 0.0

    rpm = channel_model.shaft_rpm_from_pulses(signal, sampling_frequency, skip_samples=0)

    assert abs(rpm - 600) <= 10


def test_shaft_rpm_without_pulses():
    assert channel_model.shaft_rpm_from_pulses(np.ones(1000), 800.0, skip_samples=0) == 0
    assert channel_model.shaft_rpm_from_pulses(np.ones(1000), 800.0) == 0
