from dataclasses import dataclass
from enum import Enum
import warnings

import numpy as np
import pandas as pd
from strictly_typed_pandas.dataset import DataSet
from typeguard import typechecked

import utils.models as models
import wjlib.analysis_error as analysis_error
import wjlib.analysis_status as analysis_status
import wjlib.conditions_data as conditions_data
import wjlib.resistance_model as resistance_model
import wjlib.run_data as run_data
import wjlib.run_model as run_model

debug = print


class GrossThrustDefinition(Enum):
    """The two gross thrust definitions compared side by side."""

    MOMENTUM = "gross_thrust_momentum"  # TG = rho Q (vj - vi)
    JET = "gross_thrust_jet"  # TG = rho Q vj

    @property
    def column(self) -> str:
        return self.value

    def side_column(self, side: run_model.Side) -> str:
        return f"{side.value}_{self.value}"


@dataclass
class ThrustDeduction:
    """Thrust deduction fraction, four algebraically equivalent ways.

    The first two use the corrected bare hull resistance, the last two the
    towing force at zero thrust from the regression, which estimates the
    same resistance.
    """

    from_resistance: np.float64  # (T + FD - RC) / T
    from_resistance_rearranged: np.float64  # 1 - (RC - FD) / T
    from_zero_thrust: np.float64  # (FD - F0) / T + 1
    from_zero_thrust_rearranged: np.float64  # 1 - (F0 - FD) / T

    def values(self) -> np.ndarray:
        return np.array(
            [
                self.from_resistance,
                self.from_resistance_rearranged,
                self.from_zero_thrust,
                self.from_zero_thrust_rearranged,
            ]
        )

    def spread(self) -> np.float64:
        values = self.values()
        return np.float64(np.max(values) - np.min(values))


@dataclass
class ThrustFit:
    slope: np.float64
    intercept: np.float64
    thrust_at_zero_drag: np.float64
    towing_force_at_zero_thrust: np.float64
    thrust_at_spp: np.float64
    thrust_deduction: ThrustDeduction


@typechecked
def solve_thrust_fit(
    drag: np.ndarray,
    gross_thrust: np.ndarray,
    towing_force: float,
    corrected_resistance: float,
) -> ThrustFit:
    """Self-propulsion point of one speed group.

    Fits a line through the (drag, gross thrust) pairs of the repeated runs,
    and finds the thrust at zero drag and the drag at zero thrust on it.

    Args:
        drag (np.ndarray): Measured bare hull resistance of each run [N]
        gross_thrust (np.ndarray): Gross thrust of each run [N]
        towing_force (float): Skin friction correction force FD [N]
        corrected_resistance (float): Temperature corrected resistance [N]

    Returns:
        ThrustFit: The fitted line and the self-propulsion point
    """
    drag = np.asarray(drag, dtype=np.float64)
    gross_thrust = np.asarray(gross_thrust, dtype=np.float64)

    if np.unique(drag).size < 2:
        raise analysis_error.IncompleteDataset(
            f"At least 2 distinct resistance values are needed, got {drag}"
        )

    coeffs = models.polyfit(drag, gross_thrust, 1)
    if np.isclose(coeffs[1], 0.0, atol=1e-12):
        raise analysis_error.NumericDomainError(
            "Gross thrust does not change with resistance, the fit cannot be inverted."
        )
    fitted = models.eval_poly(coeffs, drag)

    thrust_at_zero_drag = models.spline_interp(drag, fitted, 0.0)
    towing_force_at_zero_thrust = models.inverse_interp(drag, fitted, 0.0)
    thrust_at_spp = thrust_at_zero_drag - towing_force

    if thrust_at_spp == 0:
        raise analysis_error.NumericDomainError(
            "Thrust at the self-propulsion point is zero."
        )

    T, FD, RC, F0 = thrust_at_spp, towing_force, corrected_resistance, towing_force_at_zero_thrust
    thrust_deduction = ThrustDeduction(
        from_resistance=np.float64((T + FD - RC) / T),
        from_resistance_rearranged=np.float64(1 - ((RC - FD) / T)),
        from_zero_thrust=np.float64(((FD - F0) / T) + 1),
        from_zero_thrust_rearranged=np.float64(1 - ((F0 - FD) / T)),
    )

    return ThrustFit(
        slope=np.float64(coeffs[1]),
        intercept=np.float64(coeffs[0]),
        thrust_at_zero_drag=np.float64(thrust_at_zero_drag),
        towing_force_at_zero_thrust=np.float64(towing_force_at_zero_thrust),
        thrust_at_spp=np.float64(thrust_at_spp),
        thrust_deduction=thrust_deduction,
    )


def value_at_thrust(gross_thrust, values, thrust) -> np.float64:
    """Evaluates a linear fit of `values` against gross thrust."""
    try:
        coeffs = models.polyfit(gross_thrust, values, 1)
    except ValueError as e:
        raise analysis_error.IncompleteDataset(str(e)) from e
    fitted = models.eval_poly(coeffs, np.asarray(gross_thrust, dtype=np.float64))
    return models.spline_interp(gross_thrust, fitted, thrust)


@dataclass
class SelfPropulsionPoint:
    froude_number: np.float64
    speed: np.float64  # [m/s]
    towing_force: np.float64  # FD [N]
    corrected_resistance: np.float64  # [N]
    slope: np.float64
    intercept: np.float64
    thrust_at_zero_drag: np.float64  # [N]
    towing_force_at_zero_thrust: np.float64  # [N]
    thrust_at_spp: np.float64  # [N]
    t_from_resistance: np.float64
    t_from_resistance_rearranged: np.float64
    t_from_zero_thrust: np.float64
    t_from_zero_thrust_rearranged: np.float64
    port_shaft_speed: np.float64  # [RPM]
    stbd_shaft_speed: np.float64
    ship_port_shaft_speed: np.float64  # [RPM]
    ship_stbd_shaft_speed: np.float64
    port_torque: np.float64  # [Nm]
    stbd_torque: np.float64
    port_kiel_probe: np.float64  # [V]
    stbd_kiel_probe: np.float64
    port_mass_flow_rate: np.float64  # [kg/s]
    stbd_mass_flow_rate: np.float64
    port_wake_fraction: np.float64
    stbd_wake_fraction: np.float64
    port_thrust_ratio: np.float64
    stbd_thrust_ratio: np.float64
    port_thrust: np.float64  # [N]
    stbd_thrust: np.float64


SelfPropulsionPointDataSet = DataSet[SelfPropulsionPoint]


@typechecked
def solve_speed_group(
    group: pd.DataFrame,
    froude_number: float,
    towing_force: float,
    corrected_resistance: float,
    definition: GrossThrustDefinition,
    conditions: conditions_data.TestConditions,
    kiel_probe: run_model.KielProbeCalibration = run_model.KielProbeCalibration.SEPTEMBER_2014,
) -> SelfPropulsionPoint:
    gross_thrust = group[definition.column].to_numpy(dtype=np.float64)

    fit = solve_thrust_fit(
        drag=group["drag"].to_numpy(dtype=np.float64),
        gross_thrust=gross_thrust,
        towing_force=towing_force,
        corrected_resistance=corrected_resistance,
    )

    speed = np.float64(froude_number * np.sqrt(conditions.gravity * conditions.hull.lwl))
    boundary_layer_thickness = np.interp(
        froude_number, conditions.froude_numbers, conditions.boundary_layer_thickness
    )

    sides = {}
    for side in run_model.Side:
        s = side.value
        shaft_speed = value_at_thrust(gross_thrust, group[f"{s}_shaft_speed"], fit.thrust_at_spp)
        kiel_probe_voltage = value_at_thrust(
            gross_thrust, group[f"{s}_kiel_probe"], fit.thrust_at_spp
        )
        mass_flow_rate = np.float64(kiel_probe.mass_flow_rate(kiel_probe_voltage, side))
        wake, _ = run_model.inlet_wake(
            speed,
            mass_flow_rate / conditions.model_water.density,
            boundary_layer_thickness,
            conditions,
        )
        thrust_ratio = np.float64(
            np.mean(group[definition.side_column(side)] / group[definition.column])
        )

        sides[s] = dict(
            shaft_speed=shaft_speed,
            ship_shaft_speed=np.float64(shaft_speed / np.sqrt(conditions.scale_ratio)),
            torque=value_at_thrust(gross_thrust, group[f"{s}_torque"], fit.thrust_at_spp),
            kiel_probe=kiel_probe_voltage,
            mass_flow_rate=mass_flow_rate,
            wake_fraction=wake,
            thrust_ratio=thrust_ratio,
            thrust=np.float64(thrust_ratio * fit.thrust_at_spp),
        )

    t = fit.thrust_deduction
    return SelfPropulsionPoint(
        froude_number=np.float64(froude_number),
        speed=speed,
        towing_force=np.float64(towing_force),
        corrected_resistance=np.float64(corrected_resistance),
        slope=fit.slope,
        intercept=fit.intercept,
        thrust_at_zero_drag=fit.thrust_at_zero_drag,
        towing_force_at_zero_thrust=fit.towing_force_at_zero_thrust,
        thrust_at_spp=fit.thrust_at_spp,
        t_from_resistance=t.from_resistance,
        t_from_resistance_rearranged=t.from_resistance_rearranged,
        t_from_zero_thrust=t.from_zero_thrust,
        t_from_zero_thrust_rearranged=t.from_zero_thrust_rearranged,
        port_shaft_speed=sides["port"]["shaft_speed"],
        stbd_shaft_speed=sides["stbd"]["shaft_speed"],
        ship_port_shaft_speed=sides["port"]["ship_shaft_speed"],
        ship_stbd_shaft_speed=sides["stbd"]["ship_shaft_speed"],
        port_torque=sides["port"]["torque"],
        stbd_torque=sides["stbd"]["torque"],
        port_kiel_probe=sides["port"]["kiel_probe"],
        stbd_kiel_probe=sides["stbd"]["kiel_probe"],
        port_mass_flow_rate=sides["port"]["mass_flow_rate"],
        stbd_mass_flow_rate=sides["stbd"]["mass_flow_rate"],
        port_wake_fraction=sides["port"]["wake_fraction"],
        stbd_wake_fraction=sides["stbd"]["wake_fraction"],
        port_thrust_ratio=sides["port"]["thrust_ratio"],
        stbd_thrust_ratio=sides["stbd"]["thrust_ratio"],
        port_thrust=sides["port"]["thrust"],
        stbd_thrust=sides["stbd"]["thrust"],
    )


@dataclass
class SelfPropulsionResult:
    """Self-propulsion points under both gross thrust definitions."""

    momentum: SelfPropulsionPointDataSet
    jet: SelfPropulsionPointDataSet
    status: analysis_status.AnalysisStatus = analysis_status.AnalysisStatus.NORMAL

    def points(self, definition: GrossThrustDefinition) -> SelfPropulsionPointDataSet:
        if definition is GrossThrustDefinition.MOMENTUM:
            return self.momentum
        return self.jet


@typechecked
def solve_self_propulsion(
    runs: run_data.RunDataSet,
    resistance_curve: resistance_model.ResistanceCurve,
    conditions: conditions_data.TestConditions,
    kiel_probe: run_model.KielProbeCalibration = run_model.KielProbeCalibration.SEPTEMBER_2014,
) -> SelfPropulsionResult:
    """Solves the self-propulsion point of each speed group.

    Speed groups that cannot be solved, or whose Froude number is not one of
    the configured ones, are skipped. When any configured group is left
    unsolved, the result is flagged as incomplete and must not be
    extrapolated.
    """
    groups = run_model.group_by_froude(runs)
    status = analysis_status.AnalysisStatus.NORMAL

    points = {definition: [] for definition in GrossThrustDefinition}
    for froude_number, group in groups.items():
        try:
            conditions.froude_index(froude_number)
        except ValueError as e:
            debug(f"[SPP] Fr={froude_number:.2f} skipped: {e}")
            continue

        speed = froude_number * np.sqrt(conditions.gravity * conditions.hull.lwl)
        fd = float(run_model.towing_force(speed, conditions))
        rc = float(resistance_curve.corrected(froude_number, conditions))

        try:
            for definition in GrossThrustDefinition:
                points[definition].append(
                    solve_speed_group(
                        group, froude_number, fd, rc, definition, conditions, kiel_probe
                    )
                )
        except analysis_error.IncompleteDataset as e:
            debug(f"[SPP] Fr={froude_number:.2f} skipped: {e.message}")
            for definition in GrossThrustDefinition:
                points[definition] = [
                    p for p in points[definition] if p.froude_number != froude_number
                ]

    solved = [p.froude_number for p in points[GrossThrustDefinition.MOMENTUM]]
    missing = [
        float(fr) for fr in conditions.froude_numbers if not np.any(np.isclose(solved, fr))
    ]
    if len(missing) > 0 or len(solved) != conditions.speed_group_count:
        status = analysis_status.AnalysisStatus.INCOMPLETE_DATASET
        warnings.warn(
            f"{len(solved)} of {conditions.speed_group_count} speed groups solved, "
            + f"missing Fr {missing}: "
            + status.value
        )

    return SelfPropulsionResult(
        momentum=_to_dataset(points[GrossThrustDefinition.MOMENTUM]),
        jet=_to_dataset(points[GrossThrustDefinition.JET]),
        status=status,
    )


def _to_dataset(points: list) -> SelfPropulsionPointDataSet:
    if len(points) == 0:
        return DataSet[SelfPropulsionPoint](
            pd.DataFrame(
                {k: pd.Series(dtype=np.float64) for k in SelfPropulsionPoint.__dataclass_fields__}
            )
        )
    return DataSet[SelfPropulsionPoint](points)
