import numpy as np
import pytest

import wjlib.analysis_error as analysis_error
import wjlib.channel_model as channel_model
import wjlib.conditions_data as conditions_data
import wjlib.run_data as run_data
import wjlib.run_model as run_model
from wjlib.channel_model import Channel


def make_record(
    run_number: int = 1,
    speed: float = 1.948,
    drag_grams: float = 1000.0,
    seconds: float = 20.0,
    sampling_frequency: int = 800,
) -> run_data.RunRecord:
    n = int(seconds * sampling_frequency)
    time = np.arange(1, n + 1) / sampling_frequency
    samples = np.zeros((n, len(Channel)))

    pulses = np.ones(n)
    pulses[40::80] = 0.0  # 600 RPM

    samples[:, Channel.SPEED] = speed
    samples[:, Channel.DRAG] = drag_grams
    samples[:, Channel.PORT_RPM] = pulses
    samples[:, Channel.STBD_RPM] = pulses
    samples[:, Channel.PORT_THRUST] = 2000.0
    samples[:, Channel.STBD_THRUST] = 1800.0
    samples[:, Channel.PORT_TORQUE] = 0.5
    samples[:, Channel.STBD_TORQUE] = 0.4
    samples[:, Channel.PORT_KIEL_PROBE] = 2.5
    samples[:, Channel.STBD_KIEL_PROBE] = 2.4

    calibration = channel_model.CalibrationBlock.from_vector(
        np.tile([0.0, 1.0], len(Channel) + 1)
    )
    return run_data.RunRecord(
        run_number=run_number, time=time, samples=samples, calibration=calibration
    )


def test_reduce_run():
    conditions = conditions_data.TestConditions()
    kiel_probe = run_model.KielProbeCalibration.SEPTEMBER_2014

    run = run_model.reduce_run(make_record(), conditions, kiel_probe)

    assert run.sampling_rate == 800
    assert np.isclose(run.duration, 20.0)
    assert np.isclose(run.speed, 1.948)
    assert np.isclose(run.froude_number, 0.30)
    assert np.isclose(run.drag, 9.806)
    assert np.isclose(run.port_thrust, 2 * 9.806)
    assert np.isclose(run.stbd_thrust, 1.8 * 9.806)
    assert abs(run.port_shaft_speed - 600) <= 10
    assert run.towing_force > 0

    mass_flow_rate = kiel_probe.mass_flow_rate(2.5, run_model.Side.PORT)
    assert np.isclose(run.port_mass_flow_rate, mass_flow_rate)
    assert np.isclose(
        run.port_jet_velocity,
        run.port_flow_rate / conditions.model_waterjet.nozzle_area,
    )
    assert np.isclose(
        run.port_inlet_velocity, run.speed * (1 - run.port_wake_fraction)
    )
    assert np.isclose(
        run.port_gross_thrust_momentum,
        run.port_mass_flow_rate * (run.port_jet_velocity - run.port_inlet_velocity),
    )
    assert np.isclose(
        run.gross_thrust_jet, run.port_gross_thrust_jet + run.stbd_gross_thrust_jet
    )
    assert run.gross_thrust_jet > run.gross_thrust_momentum


def test_reduce_run_drag_astern():
    conditions = conditions_data.TestConditions()

    run = run_model.reduce_run(make_record(drag_grams=-1000.0), conditions)

    assert np.isclose(run.drag, -9.806)


def test_reduce_empty_run():
    record = make_record()
    record.time = np.array([], dtype=np.float64)

    with pytest.raises(analysis_error.IncompleteDataset):
        run_model.reduce_run(record, conditions_data.TestConditions())


def test_group_by_froude():
    conditions = conditions_data.TestConditions()
    records = [
        make_record(1, speed=1.948),
        make_record(2, speed=1.950),
        make_record(3, speed=2.078),
    ]

    runs = run_model.reduce_runs(records, conditions)
    groups = run_model.group_by_froude(runs)

    assert list(groups.keys()) == [0.30, 0.32]
    assert list(groups[0.30].run_number) == [1, 2]
    assert list(groups[0.32].run_number) == [3]


def test_kiel_probe_june_2013_branches():
    calibration = run_model.KielProbeCalibration.JUNE_2013

    high = calibration.mass_flow_rate(2.0, run_model.Side.PORT)
    low = calibration.mass_flow_rate(1.5, run_model.Side.STBD)

    assert np.isclose(high, -2.6737 + 4.3652 * 2 - 1.0326 * 4 + 0.1133 * 8)
    assert np.isclose(
        low,
        -19.488
        + 45.647 * 1.5
        - 41.064 * 1.5**2
        + 19.255 * 1.5**3
        - 4.5094 * 1.5**4
        + 0.4186 * 1.5**5,
    )


def test_kiel_probe_september_2014_stbd_refit():
    refit = run_model.KielProbeCalibration.SEPTEMBER_2014_STBD_REFIT
    reduction = run_model.KielProbeCalibration.SEPTEMBER_2014

    stbd = refit.mass_flow_rate(3.0, run_model.Side.STBD)

    assert np.isclose(stbd, -6.8484 + 11.0548 * 3 - 4.9878 * 9 + 1.1216 * 27 - 0.0942 * 81)
    assert not np.isclose(stbd, reduction.mass_flow_rate(3.0, run_model.Side.STBD))
    assert np.isclose(
        refit.mass_flow_rate(2.0, run_model.Side.PORT),
        reduction.mass_flow_rate(2.0, run_model.Side.PORT),
    )


def test_towing_force_grows_with_speed():
    conditions = conditions_data.TestConditions()

    forces = [run_model.towing_force(v, conditions) for v in (1.5, 2.0, 2.5)]

    assert np.all(np.diff(forces) > 0)


def test_inlet_wake():
    conditions = conditions_data.TestConditions()

    wake, inlet_velocity = run_model.inlet_wake(2.0, 0.003, 0.044, conditions)

    assert 0 < wake < 1
    assert np.isclose(inlet_velocity, 2.0 * (1 - wake))
