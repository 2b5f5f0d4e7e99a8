import numpy as np
import pandas as pd
import pytest
from hypothesis import given, settings, strategies

import wjlib.analysis_error as analysis_error
import wjlib.pump_model as pump_model


def make_benchmark() -> pump_model.AffinityPumpLookup:
    flow_rate = np.linspace(2.0, 6.0, 9)
    return pump_model.AffinityPumpLookup.from_dataframe(
        pd.DataFrame(
            {
                "flow_rate": flow_rate,
                "head": 40.0 - 1.5 * flow_rate**2,
                "efficiency": 0.9 - 0.01 * (flow_rate - 4.0) ** 2,
            }
        )
    )


def test_tabulated_lookup():
    lookup = pump_model.TabulatedPumpLookup(heads=(20.0, 22.0), efficiencies=(0.88, 0.9))

    assert lookup.solve(1, 4.0, 500.0) == (22.0, 0.9)
    with pytest.raises(analysis_error.MissingExternalData):
        lookup.solve(2, 4.0, 500.0)
    with pytest.raises(ValueError):
        pump_model.TabulatedPumpLookup(heads=(20.0,), efficiencies=())


def test_affinity_lookup_at_benchmark_speed():
    lookup = make_benchmark()

    head, efficiency = lookup.solve(0, 4.0, pump_model.BENCHMARK_SHAFT_SPEED)

    assert np.isclose(head, 40.0 - 1.5 * 16)
    assert np.isclose(efficiency, 0.9)


@given(ratio=strategies.floats(min_value=0.5, max_value=2.0))
@settings(deadline=None)
def test_affinity_laws(ratio: float):
    lookup = make_benchmark()
    shaft_speed = pump_model.BENCHMARK_SHAFT_SPEED * ratio

    # Homologous operating point of the benchmark Q = 4 m^3/s
    head, efficiency = lookup.solve(0, 4.0 * ratio, shaft_speed)

    assert np.isclose(head, (40.0 - 1.5 * 16) * ratio**2)
    assert np.isclose(efficiency, 0.9)


def test_affinity_lookup_rejects_stopped_shaft():
    with pytest.raises(analysis_error.NumericDomainError):
        make_benchmark().solve(0, 4.0, 0.0)


def test_short_pump_curve():
    with pytest.raises(analysis_error.IncompleteDataset):
        pump_model.AffinityPumpLookup(
            flow_rate=[1.0, 2.0, 3.0], head=[3.0, 2.0, 1.0], efficiency=[0.8, 0.9, 0.8]
        )


def test_model_pump_efficiency():
    efficiency = pump_model.model_pump_efficiency(
        flow_rate=0.003,
        head=0.6,
        torque=0.5,
        shaft_speed=2400.0,
        pump_diameter=1.2 / 21.6,
        density=998.5,
        gravity=9.806,
    )

    # Hydraulic power over shaft power
    expected = 998.5 * 9.806 * 0.003 * 0.6 / (0.5 * 2 * np.pi * 40.0)
    assert np.isclose(efficiency, expected)

    with pytest.raises(analysis_error.NumericDomainError):
        pump_model.model_pump_efficiency(0.003, 0.6, 0.0, 2400.0, 0.05, 998.5, 9.806)
