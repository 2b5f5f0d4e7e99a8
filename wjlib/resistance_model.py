from dataclasses import dataclass

import numpy as np
from strictly_typed_pandas.dataset import DataSet
from typeguard import typechecked

import utils.models as models
import wjlib.conditions_data as conditions_data
import wjlib.friction_model as friction_model

KNOT = 0.51444  # [m/s]

# Bare hull resistance [N] of the 1500 tonne demihull model, as function of
# Froude number, fitted over the resistance test runs (ascending order).
BARE_HULL_RESISTANCE_COEFFS = (
    18.6,
    -386.61,
    2989.46,
    -9049.96,
    13710.12,
    -7932.12,
)


@dataclass
class ResistanceData:
    froude_number: np.float64
    speed: np.float64  # model speed [m/s]
    ship_speed_knots: np.float64
    resistance: np.float64  # uncorrected, resistance test water [N]
    corrected_resistance: np.float64  # self-propulsion test water [N]
    cf_resistance_test: np.float64
    cf_self_propulsion_test: np.float64
    ct: np.float64
    cr: np.float64


ResistanceDataSet = DataSet[ResistanceData]


@dataclass
class ResistanceCurve:
    """Bare hull resistance as a polynomial of Froude number."""

    coeffs: tuple = BARE_HULL_RESISTANCE_COEFFS
    r_squared: float = 1.0

    def resistance(self, froude_number):
        return models.eval_poly(self.coeffs, np.asarray(froude_number, dtype=np.float64))

    @typechecked
    def solve(
        self, froude_number: float, conditions: conditions_data.TestConditions
    ) -> ResistanceData:
        """Resistance at a Froude number, corrected from the resistance test
        water temperature to the self-propulsion test one.

        Args:
            froude_number (float): Model Froude number
            conditions (conditions_data.TestConditions): Test conditions

        Returns:
            ResistanceData: Uncorrected and corrected resistance, with the
            coefficients used in the correction
        """
        hull = conditions.hull
        res_water = conditions.resistance_test_water
        spt_water = conditions.model_water

        speed = np.float64(froude_number * np.sqrt(conditions.gravity * hull.lwl))
        resistance = np.float64(self.resistance(froude_number))

        re_res = friction_model.reynolds_number(speed, hull.lwl, res_water.kinematic_viscosity)
        re_spt = friction_model.reynolds_number(speed, hull.lwl, spt_water.kinematic_viscosity)
        friction_model.warn_if_straddling(float(re_res), float(re_spt))

        cf_res = friction_model.grigson_cf(re_res)
        cf_spt = friction_model.grigson_cf(re_spt)

        ct = resistance / (0.5 * res_water.density * hull.wetted_surface * speed**2)
        cr = ct - hull.form_factor * cf_res

        corrected = (
            (hull.form_factor * cf_spt + cr) / (hull.form_factor * cf_res + cr)
        ) * resistance

        return ResistanceData(
            froude_number=np.float64(froude_number),
            speed=speed,
            ship_speed_knots=ship_speed_knots(froude_number, conditions),
            resistance=resistance,
            corrected_resistance=np.float64(corrected),
            cf_resistance_test=np.float64(cf_res),
            cf_self_propulsion_test=np.float64(cf_spt),
            ct=np.float64(ct),
            cr=np.float64(cr),
        )

    @typechecked
    def solve_all(self, conditions: conditions_data.TestConditions) -> ResistanceDataSet:
        return DataSet[ResistanceData](
            [self.solve(float(fr), conditions) for fr in conditions.froude_numbers]
        )

    def corrected(self, froude_number: float, conditions: conditions_data.TestConditions):
        return self.solve(froude_number, conditions).corrected_resistance


def fit_resistance_curve(froude_numbers, resistance, degree: int = 5) -> ResistanceCurve:
    """Refits the resistance curve from resistance test data."""
    coeffs = models.polyfit(froude_numbers, resistance, degree)
    fitted = models.eval_poly(coeffs, np.asarray(froude_numbers, dtype=np.float64))
    return ResistanceCurve(
        coeffs=tuple(float(c) for c in coeffs),
        r_squared=float(models.r_squared(resistance, fitted)),
    )


def ship_speed_knots(froude_number, conditions: conditions_data.TestConditions):
    return np.float64(
        froude_number
        * np.sqrt(conditions.gravity * conditions.hull.lwl * conditions.scale_ratio)
        / KNOT
    )
