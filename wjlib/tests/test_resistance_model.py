import pathlib
import subprocess
import sys

import numpy as np
from hypothesis import given, strategies

import wjlib.conditions_data as conditions_data
import wjlib.resistance_model as resistance_model


@given(froude_number=strategies.floats(min_value=0.24, max_value=0.40))
def test_same_water_needs_no_correction(froude_number: float):
    conditions = conditions_data.TestConditions(
        resistance_test_water=conditions_data.MODEL_WATER
    )
    curve = resistance_model.ResistanceCurve()

    data = curve.solve(froude_number, conditions)

    assert np.isclose(data.corrected_resistance, data.resistance)
    assert np.isclose(data.cf_resistance_test, data.cf_self_propulsion_test)


def test_warmer_water_lowers_resistance():
    conditions = conditions_data.TestConditions()
    curve = resistance_model.ResistanceCurve()

    table = curve.solve_all(conditions)

    assert len(table) == conditions.speed_group_count
    assert np.all(table.resistance > 0)
    # Lower viscosity at the self-propulsion test, lower friction
    assert np.all(table.corrected_resistance < table.resistance)
    assert np.allclose(
        table.ct, table.cr + conditions.hull.form_factor * table.cf_resistance_test
    )


def test_corrected_matches_solve():
    conditions = conditions_data.TestConditions()
    curve = resistance_model.ResistanceCurve()

    assert curve.corrected(0.30, conditions) == curve.solve(0.30, conditions).corrected_resistance


def test_fit_resistance_curve():
    froude_numbers = np.linspace(0.2, 0.45, 20)
    resistance = resistance_model.ResistanceCurve().resistance(froude_numbers)

    curve = resistance_model.fit_resistance_curve(froude_numbers, resistance)

    assert np.isclose(curve.r_squared, 1.0)
    assert np.allclose(curve.resistance(froude_numbers), resistance)


def test_ship_speed_knots():
    conditions = conditions_data.TestConditions(scale_ratio=1.0)

    knots = resistance_model.ship_speed_knots(1.0, conditions)

    assert np.isclose(knots * resistance_model.KNOT, np.sqrt(9.806 * 4.30))


def test_first_table_after_import_is_checked_against_its_own_schema():
    # A fresh interpreter, so no table has been built since the imports ran
    script = "\n".join(
        [
            "import wjlib.conditions_data as conditions_data",
            "import wjlib.fullscale_model",
            "import wjlib.resistance_model as resistance_model",
            "import wjlib.thrustcurve_model",
            "table = resistance_model.ResistanceCurve().solve_all(conditions_data.TestConditions())",
            "assert len(table) == 9",
        ]
    )

    subprocess.run(
        [sys.executable, "-c", script],
        cwd=pathlib.Path(__file__).resolve().parents[2],
        check=True,
    )
