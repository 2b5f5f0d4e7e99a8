import matplotlib

matplotlib.use("Agg")

import pandas as pd  # noqa: E402

import utils.plot as plot  # noqa: E402
import wjlib.conditions_data as conditions_data  # noqa: E402
import wjlib.resistance_model as resistance_model  # noqa: E402
import wjlib.spp_model as spp_model  # noqa: E402
from wjlib.tests.test_spp_model import make_runs  # noqa: E402


def test_plot_thrust_fits(tmp_path):
    conditions = conditions_data.TestConditions()
    runs = make_runs((0.24, 0.26, 0.28, 0.30))
    result = spp_model.solve_self_propulsion(
        runs, resistance_model.ResistanceCurve(), conditions
    )

    fig, axes = plot.plot_thrust_fits(runs, result.momentum)

    assert axes.shape == (2, 3)
    assert not axes[1, 2].get_visible()
    assert plot.fig_save(fig, str(tmp_path / "spp.png")).endswith("spp.png")


def test_plot_power_vs_speed():
    tables = {
        f"Ca = {ca}": pd.DataFrame(
            {"speed_knots": [20.0, 25.0, 30.0], "delivered_power_mw": [10.0, 18.0, 30.0]}
        )
        for ca in (0.0, 0.00035)
    }

    fig, ax = plot.plot_power_vs_speed(tables)

    assert len(ax.get_lines()) == 2
