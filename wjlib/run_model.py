from enum import Enum

import numpy as np
from strictly_typed_pandas.dataset import DataSet
from typeguard import typechecked

import utils.models as models
import wjlib.analysis_error as analysis_error
import wjlib.channel_model as channel_model
import wjlib.conditions_data as conditions_data
import wjlib.friction_model as friction_model
import wjlib.run_data as run_data
from wjlib.channel_model import Channel

debug = print


class Side(Enum):
    PORT = "port"
    STBD = "stbd"


class KielProbeCalibration(Enum):
    """Kiel probe voltage to mass flow rate [kg/s] calibrations.

    The September 2014 test has two starboard fits. `SEPTEMBER_2014` is the
    one used to reduce the runs, `SEPTEMBER_2014_STBD_REFIT` the one used by
    the full scale extrapolation sheets. Port is the same in both.
    """

    SEPTEMBER_2014 = "september_2014"
    SEPTEMBER_2014_STBD_REFIT = "september_2014_stbd_refit"
    JUNE_2013 = "june_2013"

    def mass_flow_rate(self, voltage, side: Side):
        voltage = np.asarray(voltage, dtype=np.float64)
        if self is KielProbeCalibration.SEPTEMBER_2014:
            return models.eval_poly(_SEPTEMBER_2014[side], voltage)
        if self is KielProbeCalibration.SEPTEMBER_2014_STBD_REFIT:
            return models.eval_poly(_SEPTEMBER_2014_STBD_REFIT[side], voltage)
        return np.where(
            voltage > 1.86,
            models.eval_poly(_JUNE_2013_HIGH, voltage),
            models.eval_poly(_JUNE_2013_LOW, voltage),
        )


_SEPTEMBER_2014 = {
    Side.PORT: (-5.1976, 7.8517, -2.9517, 0.5718, -0.0421),
    Side.STBD: (-6.8705, 11.0896, -5.0067, 1.1259, -0.0946),
}
_SEPTEMBER_2014_STBD_REFIT = {
    Side.PORT: _SEPTEMBER_2014[Side.PORT],
    Side.STBD: (-6.8484, 11.0548, -4.9878, 1.1216, -0.0942),
}
_JUNE_2013_HIGH = (-2.6737, 4.3652, -1.0326, 0.1133)
_JUNE_2013_LOW = (-19.488, 45.647, -41.064, 19.255, -4.5094, 0.4186)


def towing_force_coefficient(
    speed: float, conditions: conditions_data.TestConditions
) -> tuple:
    """Skin friction correction coefficient and model Reynolds number.

    Returns:
        tuple: ((1+k)(CFm - CFs) - Ca, Re_m, CF_m)
    """
    hull = conditions.hull
    ship_hull = conditions.ship_hull
    ship_speed = speed * np.sqrt(conditions.scale_ratio)

    re_model = friction_model.reynolds_number(
        speed, hull.lwl, conditions.model_water.kinematic_viscosity
    )
    re_ship = friction_model.reynolds_number(
        ship_speed, ship_hull.lwl, conditions.ship_water.kinematic_viscosity
    )
    cf_model = friction_model.grigson_cf(re_model)
    cf_ship = friction_model.grigson_cf(re_ship)

    coefficient = (
        hull.form_factor * (cf_model - cf_ship) - conditions.correlation_allowance
    )
    return np.float64(coefficient), np.float64(re_model), np.float64(cf_model)


def towing_force(speed: float, conditions: conditions_data.TestConditions) -> np.float64:
    """Skin friction correction force FD [N] applied at the model."""
    coefficient, _, _ = towing_force_coefficient(speed, conditions)
    hull = conditions.hull
    return np.float64(
        0.5 * conditions.model_water.density * speed**2 * hull.wetted_surface * coefficient
    )


def inlet_wake(
    speed: float,
    flow_rate: float,
    boundary_layer_thickness: float,
    conditions: conditions_data.TestConditions,
) -> tuple:
    """Wake fraction from a power law boundary layer ingested by the inlet.

    Returns:
        tuple: (wake fraction, inlet velocity [m/s])
    """
    n = conditions.boundary_layer_exponent
    pump_diameter = conditions.model_waterjet.pump_diameter
    boundary_layer_flow = (
        speed
        * conditions.inlet_width_factor
        * pump_diameter
        * boundary_layer_thickness
        * (n / (n + 1))
    )
    wake = 1 - ((n + 1) / (n + 2)) * (flow_rate / boundary_layer_flow) ** (1 / (n + 1))
    return np.float64(wake), np.float64(speed * (1 - wake))


@typechecked
def reduce_run(
    record: run_data.RunRecord,
    conditions: conditions_data.TestConditions,
    kiel_probe: KielProbeCalibration = KielProbeCalibration.SEPTEMBER_2014,
) -> run_data.RunData:
    """Reduces a run file into its summary row.

    Args:
        record (run_data.RunRecord): Raw run data
        conditions (conditions_data.TestConditions): Test conditions
        kiel_probe (KielProbeCalibration): Mass flow rate calibration

    Returns:
        run_data.RunData: Mean values and derived quantities of the run
    """
    if record.time.size == 0 or record.time[-1] <= 0:
        raise analysis_error.IncompleteDataset(
            f"Run {record.run_number} has no samples."
        )

    g = conditions.gravity
    hull = conditions.hull

    sampling_rate = np.float64(round(record.time.size / record.time[-1]))
    if sampling_rate != conditions.sampling_frequency:
        debug(
            f"[Run {record.run_number}] {sampling_rate=} != {conditions.sampling_frequency=}"
        )

    _, speed = record.reduced(Channel.SPEED)
    froude_number = np.float64(round(round(speed, 2) / np.sqrt(g * hull.lwl), 2))

    coefficient, reynolds, cf = towing_force_coefficient(speed, conditions)
    fd = towing_force(speed, conditions)

    _, drag_grams = record.reduced(Channel.DRAG)
    drag = channel_model.Force.from_grams(
        drag_grams,
        g,
        channel_model.Direction.AHEAD
        if drag_grams >= 0
        else channel_model.Direction.ASTERN,
    ).value

    boundary_layer_thickness = np.interp(
        froude_number, conditions.froude_numbers, conditions.boundary_layer_thickness
    )

    sides = {}
    for side, rpm_ch, thrust_ch, torque_ch, kp_ch in (
        (Side.PORT, Channel.PORT_RPM, Channel.PORT_THRUST, Channel.PORT_TORQUE, Channel.PORT_KIEL_PROBE),
        (Side.STBD, Channel.STBD_RPM, Channel.STBD_THRUST, Channel.STBD_TORQUE, Channel.STBD_KIEL_PROBE),
    ):
        _, thrust_grams = record.reduced(thrust_ch)
        _, torque = record.reduced(torque_ch)
        _, kiel_probe_voltage = record.reduced(kp_ch)

        mass_flow_rate = np.float64(kiel_probe.mass_flow_rate(kiel_probe_voltage, side))
        flow_rate = mass_flow_rate / conditions.model_water.density
        jet_velocity = flow_rate / conditions.model_waterjet.nozzle_area
        wake, inlet_velocity = inlet_wake(
            speed, flow_rate, boundary_layer_thickness, conditions
        )

        sides[side] = dict(
            shaft_speed=np.float64(
                channel_model.shaft_rpm_from_pulses(
                    record.raw(rpm_ch), conditions.sampling_frequency
                )
            ),
            thrust=channel_model.Force.from_grams(
                thrust_grams, g, channel_model.Direction.AHEAD
            ).value,
            torque=torque,
            kiel_probe=kiel_probe_voltage,
            mass_flow_rate=mass_flow_rate,
            flow_rate=np.float64(flow_rate),
            jet_velocity=np.float64(jet_velocity),
            wake_fraction=wake,
            inlet_velocity=inlet_velocity,
            gross_thrust_momentum=np.float64(mass_flow_rate * (jet_velocity - inlet_velocity)),
            gross_thrust_jet=np.float64(mass_flow_rate * jet_velocity),
        )

    port, stbd = sides[Side.PORT], sides[Side.STBD]

    return run_data.RunData(
        run_number=record.run_number,
        sampling_rate=sampling_rate,
        duration=np.float64(record.time[-1]),
        speed=speed,
        froude_number=froude_number,
        reynolds_number=reynolds,
        cf=cf,
        towing_force_coefficient=coefficient,
        towing_force=fd,
        drag=drag,
        **{f"port_{k}": v for k, v in port.items()},
        **{f"stbd_{k}": v for k, v in stbd.items()},
        gross_thrust_momentum=port["gross_thrust_momentum"] + stbd["gross_thrust_momentum"],
        gross_thrust_jet=port["gross_thrust_jet"] + stbd["gross_thrust_jet"],
    )


@typechecked
def reduce_runs(
    records: list,
    conditions: conditions_data.TestConditions,
    kiel_probe: KielProbeCalibration = KielProbeCalibration.SEPTEMBER_2014,
) -> run_data.RunDataSet:
    return DataSet[run_data.RunData](
        [reduce_run(record, conditions, kiel_probe) for record in records]
    )


def group_by_froude(runs: run_data.RunDataSet) -> dict:
    """Speed groups: runs sharing the same rounded Froude number, ordered
    by Froude number."""
    groups = {}
    for froude_number, group in runs.groupby("froude_number", sort=True):
        groups[float(round(froude_number, 2))] = group.reset_index(drop=True)
    return groups
