import numpy as np
import pandas as pd
import pytest

import utils.data as data
import utils.models as models
import wjlib.analysis_error as analysis_error
import wjlib.conditions_data as conditions_data
import wjlib.run_model as run_model
from wjlib.channel_model import Channel


def write_run_file(path, samples: np.ndarray, calibration: np.ndarray):
    lines = [f"header line {i}" for i in range(data.CALIBRATION_HEADER_LINES)]
    lines.append(" ".join(f"{v:g}" for v in calibration))
    while len(lines) < data.DATA_HEADER_LINES:
        lines.append(f"header line {len(lines)}")
    for row in samples:
        lines.append(" ".join(f"{v:.6f}" for v in row))
    path.write_text("\n".join(lines) + "\n")


def test_read_run_file(tmp_path):
    n = 1600
    time = np.arange(1, n + 1) / 800
    channels = np.zeros((n, len(Channel)))
    channels[:, Channel.SPEED] = 1.0  # volts
    channels[:, Channel.DRAG] = 0.5
    channels[:, Channel.PORT_KIEL_PROBE] = 2.5
    channels[:, Channel.STBD_KIEL_PROBE] = 2.5
    calibration = np.tile([0.0, 1.0], len(Channel) + 1)
    calibration[2:4] = [0.1, 2.0]  # speed
    calibration[8:10] = [0.0, 2000.0]  # drag

    path = tmp_path / "R123.dat"
    write_run_file(path, np.column_stack([time, channels]), calibration)

    record = data.read_run_file(str(path))

    assert record.run_number == 123
    assert record.samples.shape == (n, len(Channel))
    assert np.isclose(record.time[-1], 2.0)

    _, speed = record.reduced(Channel.SPEED)
    assert np.isclose(speed, 1.8)

    run = run_model.reduce_run(record, conditions_data.TestConditions())
    assert np.isclose(run.speed, 1.8)
    assert np.isclose(run.drag, 9.806)
    assert run.sampling_rate == 800


def test_missing_run_file(tmp_path):
    with pytest.raises(analysis_error.MissingExternalData):
        data.read_run_file(str(tmp_path / "R1.dat"))


def test_read_run_files_skips_missing(tmp_path):
    n = 10
    samples = np.column_stack([np.arange(1, n + 1) / 800, np.zeros((n, len(Channel)))])
    write_run_file(tmp_path / "R7.dat", samples, np.tile([0.0, 1.0], len(Channel) + 1))

    records = data.read_run_files(str(tmp_path), range(5, 9))

    assert [r.run_number for r in records] == [7]


def test_load_and_export_table(tmp_path):
    table = pd.DataFrame({"flow_rate": [1.0, 2.0], "head": [10.0, 9.0], "other": [0, 0]})
    filename = data.export_table(table, str(tmp_path / "out" / "pump.csv"))

    loaded = data.load_table(filename, columns=["flow_rate", "head"])
    assert list(loaded.columns) == ["flow_rate", "head"]

    with pytest.raises(analysis_error.MissingExternalData):
        data.load_table(filename, columns=["efficiency"])

    tsv = data.export_table(table, str(tmp_path / "pump.txt"), delimiter="\t")
    assert pd.read_csv(tsv, sep="\t").equals(table)


def test_polyfit_round_trip():
    x = np.linspace(0.0, 1.0, 10)
    coeffs = models.polyfit(x, 1.0 + 2.0 * x + 3.0 * x**2, 2)

    assert np.allclose(coeffs, [1.0, 2.0, 3.0])
    assert np.isclose(models.eval_poly(coeffs, 0.5), 1.0 + 1.0 + 0.75)
    with pytest.raises(ValueError):
        models.polyfit([1.0, 1.0, 1.0], [1.0, 2.0, 3.0], 1)


def test_spline_interp():
    assert np.isclose(models.spline_interp([0.0, 1.0], [1.0, 3.0], 2.0), 5.0)
    assert np.isclose(models.spline_interp([0.0, 1.0, 2.0], [0.0, 1.0, 2.0], -1.0), -1.0)
    assert np.isclose(models.inverse_interp([0.0, 1.0, 2.0], [1.0, 3.0, 5.0], 4.0), 1.5)
    with pytest.raises(ValueError):
        models.inverse_interp([0.0, 1.0], [2.0, 2.0], 2.0)
