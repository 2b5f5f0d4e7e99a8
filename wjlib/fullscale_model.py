"""Model to full scale extrapolation of the self-propulsion points.

The resistance is scaled with the ITTC 1978 method (residual resistance
coefficient frozen from model scale), and the waterjet operating point is
recovered from the scaled gross thrust. Powers and efficiencies follow the
energy balance of Bose (2008), chapter 10.
"""

from dataclasses import dataclass, replace
from enum import Enum

import numpy as np
import pandas as pd
from strictly_typed_pandas.dataset import DataSet
from typeguard import typechecked

import wjlib.analysis_error as analysis_error
import wjlib.analysis_status as analysis_status
import wjlib.conditions_data as conditions_data
import wjlib.friction_model as friction_model
import wjlib.pump_model as pump_model
import wjlib.resistance_model as resistance_model
import wjlib.run_data as run_data
import wjlib.run_model as run_model
import wjlib.spp_model as spp_model

# Correlation allowances compared against each other
CORRELATION_ALLOWANCES = (0.0, 0.00035, 0.00059)


class WakeScaling(Enum):
    REDUCED = "reduced"  # w_s = w_m CFs/CFm
    ITTC78 = "ittc78"  # w_s = w_m CFs/CFm + (t + 0.04)(1 - CFs/CFm)

    def solve(self, wake_fraction, thrust_deduction, cf_ship, cf_model) -> np.float64:
        ratio = cf_ship / cf_model
        if self is WakeScaling.REDUCED:
            return np.float64(wake_fraction * ratio)
        return np.float64(wake_fraction * ratio + (thrust_deduction + 0.04) * (1 - ratio))


class PumpPowerMethod(Enum):
    ENERGY_BALANCE = 1  # PPE = E7 / eta_n - eta_i E1
    PUMP_HEAD = 2  # PPE = rho g Q H

    def solve(self, e1, e7, ideal_efficiency, nozzle_efficiency, density, gravity, flow_rate, head):
        if self is PumpPowerMethod.ENERGY_BALANCE:
            return np.float64(e7 / nozzle_efficiency - ideal_efficiency * e1)
        return np.float64(density * gravity * flow_rate * head)


class CorrelationSource(Enum):
    REYNOLDS = "reynolds"  # Ca = (5.68 - 0.6 log10 Re) 1e-3
    CONFIGURED = "configured"  # Ca from the test conditions


@dataclass(frozen=True)
class ExtrapolationOptions:
    definition: spp_model.GrossThrustDefinition = spp_model.GrossThrustDefinition.MOMENTUM
    wake_scaling: WakeScaling = WakeScaling.REDUCED
    pump_power_method: PumpPowerMethod = PumpPowerMethod.ENERGY_BALANCE
    correlation_source: CorrelationSource = CorrelationSource.REYNOLDS
    roughness_allowance: bool = True
    air_resistance: bool = True


@dataclass
class PropulsionData:
    froude_number: np.float64
    speed: np.float64  # [m/s]
    speed_knots: np.float64  # full scale equivalent [kn]
    reynolds_number: np.float64
    port_shaft_speed: np.float64  # [RPM]
    stbd_shaft_speed: np.float64
    cf: np.float64
    cr: np.float64
    ct: np.float64
    resistance: np.float64  # RT [N]
    effective_power: np.float64  # PE [W]
    wake_fraction: np.float64
    thrust_deduction: np.float64
    port_gross_thrust: np.float64  # [N]
    stbd_gross_thrust: np.float64
    port_flow_rate: np.float64  # [m^3/s]
    stbd_flow_rate: np.float64
    port_mass_flow_rate: np.float64  # [kg/s]
    stbd_mass_flow_rate: np.float64
    port_jet_velocity: np.float64  # [m/s]
    stbd_jet_velocity: np.float64
    inlet_velocity: np.float64  # [m/s]
    hull_efficiency: np.float64  # (1-t)/(1-w)
    ideal_efficiency: np.float64  # 1 - (vj/V - 1)^2
    port_flow_coefficient: np.float64
    stbd_flow_coefficient: np.float64
    port_pump_head: np.float64  # [m]
    stbd_pump_head: np.float64
    port_head_coefficient: np.float64
    stbd_head_coefficient: np.float64
    port_pump_efficiency: np.float64
    stbd_pump_efficiency: np.float64
    port_pump_effective_power: np.float64  # PPE [W]
    stbd_pump_effective_power: np.float64
    port_delivered_power: np.float64  # PD [W]
    stbd_delivered_power: np.float64
    port_brake_power: np.float64  # PB [W]
    stbd_brake_power: np.float64
    propulsive_efficiency: np.float64  # PE / sum(PD)
    inlet_velocity_ratio: np.float64
    port_jet_velocity_ratio: np.float64
    stbd_jet_velocity_ratio: np.float64
    port_energy_flux_inlet: np.float64  # E1 [W]
    stbd_energy_flux_inlet: np.float64
    port_energy_flux_jet: np.float64  # E7 [W]
    stbd_energy_flux_jet: np.float64
    energy_flux_free_stream: np.float64  # E0
    port_jet_system_power: np.float64  # PJSE = E7 - E1 [W]
    stbd_jet_system_power: np.float64
    port_thrust_power: np.float64  # PTE = TG V [W]
    stbd_thrust_power: np.float64
    port_ideal_jet_efficiency: np.float64  # 2 / (1 + vj/vi)
    stbd_ideal_jet_efficiency: np.float64
    port_jet_system_efficiency: np.float64  # PTE / PJSE
    stbd_jet_system_efficiency: np.float64
    propulsive_efficiency_jet_system: np.float64  # PE / sum(PJSE / eta_JS)
    propulsive_efficiency_thrust_power: np.float64  # sum(TG) V / sum(PPE)
    propulsive_efficiency_bose_10_28: np.float64
    propulsive_efficiency_bose_10_29: np.float64
    port_thrust_coefficient: np.float64  # KT
    stbd_thrust_coefficient: np.float64
    gross_thrust_definition: int
    pump_power_method: int
    correlation_allowance: np.float64


PropulsionDataSet = DataSet[PropulsionData]


@dataclass
class ExtrapolationResult:
    model: PropulsionDataSet
    ship: PropulsionDataSet


def flow_rate_from_gross_thrust(
    gross_thrust: float,
    speed: float,
    wake_fraction: float,
    nozzle_area: float,
    density: float,
) -> np.float64:
    """Solves T = rho Q (Q/An - (1-w) V) for the positive flow rate Q."""
    a = density / nozzle_area
    b = -density * (1 - wake_fraction) * speed
    c = -gross_thrust
    discriminant = b**2 - 4 * a * c
    if discriminant < 0:
        raise analysis_error.NumericDomainError(
            f"No real flow rate for gross thrust {gross_thrust} at {speed} m/s"
        )
    return np.float64((-b + np.sqrt(discriminant)) / (2 * a))


def thrust_coefficient(gross_thrust, density, impeller_diameter, shaft_speed) -> np.float64:
    n = shaft_speed / 60
    if n <= 0:
        raise analysis_error.NumericDomainError(f"Shaft speed must be > 0, got {shaft_speed}")
    return np.float64(gross_thrust / (density * impeller_diameter**4 * n**2))


def _propulsion_row(
    *,
    froude_number,
    speed,
    speed_knots,
    reynolds_number,
    cf,
    cr,
    ct,
    resistance,
    wake_fraction,
    thrust_deduction,
    sides: dict,
    fluid: conditions_data.Fluid,
    waterjet: conditions_data.WaterjetGeometry,
    conditions: conditions_data.TestConditions,
    options: ExtrapolationOptions,
    correlation_allowance,
) -> PropulsionData:
    """Waterjet energy balance at one scale.

    `sides` maps "port" and "stbd" to dicts with the gross thrust, flow rate,
    shaft speed, pump head, pump efficiency and thrust coefficient.
    """
    rho = fluid.density
    g = conditions.gravity
    effective_power = resistance * speed
    inlet_velocity = (1 - wake_fraction) * speed

    values = {}
    for s, side in sides.items():
        q = side["flow_rate"]
        n = side["shaft_speed"] / 60
        jet_velocity = q / waterjet.nozzle_area

        e1 = 0.5 * rho * q * inlet_velocity**2 * (1 - wake_fraction) ** 2
        e7 = 0.5 * rho * q * jet_velocity**2
        ideal_jet_efficiency = 2 / (1 + jet_velocity / inlet_velocity)

        ppe = options.pump_power_method.solve(
            e1, e7, ideal_jet_efficiency, conditions.nozzle_efficiency, rho, g, q, side["head"]
        )
        delivered_power = ppe / side["efficiency"]
        jet_system_power = e7 - e1
        thrust_power = side["gross_thrust"] * speed

        values[s] = dict(
            gross_thrust=side["gross_thrust"],
            flow_rate=q,
            mass_flow_rate=q * rho,
            jet_velocity=jet_velocity,
            flow_coefficient=q / (n * waterjet.pump_diameter**3),
            pump_head=side["head"],
            head_coefficient=g * side["head"] / (n * waterjet.pump_diameter) ** 2,
            pump_efficiency=side["efficiency"],
            pump_effective_power=ppe,
            delivered_power=delivered_power,
            brake_power=delivered_power / conditions.shaft_efficiency,
            jet_velocity_ratio=jet_velocity / speed,
            energy_flux_inlet=e1,
            energy_flux_jet=e7,
            jet_system_power=jet_system_power,
            thrust_power=thrust_power,
            ideal_jet_efficiency=ideal_jet_efficiency,
            jet_system_efficiency=thrust_power / jet_system_power,
            thrust_coefficient=side["thrust_coefficient"],
            shaft_speed=side["shaft_speed"],
        )

    port, stbd = values["port"], values["stbd"]
    nozzle_efficiency = conditions.nozzle_efficiency
    jet_ratio = port["jet_velocity"] / speed

    row = dict(
        froude_number=froude_number,
        speed=speed,
        speed_knots=speed_knots,
        reynolds_number=reynolds_number,
        cf=cf,
        cr=cr,
        ct=ct,
        resistance=resistance,
        effective_power=effective_power,
        wake_fraction=wake_fraction,
        thrust_deduction=thrust_deduction,
        inlet_velocity=inlet_velocity,
        hull_efficiency=(1 - thrust_deduction) / (1 - wake_fraction),
        ideal_efficiency=1 - (jet_ratio - 1) ** 2,
        propulsive_efficiency=effective_power
        / (port["delivered_power"] + stbd["delivered_power"]),
        inlet_velocity_ratio=inlet_velocity / speed,
        energy_flux_free_stream=0.5 * rho * speed**2,
        propulsive_efficiency_jet_system=effective_power
        / sum(v["jet_system_power"] / v["jet_system_efficiency"] for v in values.values()),
        propulsive_efficiency_thrust_power=(port["gross_thrust"] + stbd["gross_thrust"])
        * speed
        / (port["pump_effective_power"] + stbd["pump_effective_power"]),
        propulsive_efficiency_bose_10_28=(
            port["mass_flow_rate"]
            * (port["jet_velocity"] - inlet_velocity)
            * speed
            * port["pump_efficiency"]
            * conditions.installation_efficiency
        )
        / (
            0.5
            * port["mass_flow_rate"]
            * (port["jet_velocity"] ** 2 / nozzle_efficiency - inlet_velocity**2)
        ),
        propulsive_efficiency_bose_10_29=(2 * port["pump_efficiency"] * (jet_ratio - 1))
        / (jet_ratio**2 - 1),
        gross_thrust_definition=1
        if options.definition is spp_model.GrossThrustDefinition.MOMENTUM
        else 2,
        pump_power_method=options.pump_power_method.value,
        correlation_allowance=correlation_allowance,
    )
    for s, v in values.items():
        for k in (
            "shaft_speed",
            "gross_thrust",
            "flow_rate",
            "mass_flow_rate",
            "jet_velocity",
            "flow_coefficient",
            "pump_head",
            "head_coefficient",
            "pump_efficiency",
            "pump_effective_power",
            "delivered_power",
            "brake_power",
            "jet_velocity_ratio",
            "energy_flux_inlet",
            "energy_flux_jet",
            "jet_system_power",
            "thrust_power",
            "ideal_jet_efficiency",
            "jet_system_efficiency",
            "thrust_coefficient",
        ):
            row[f"{s}_{k}"] = v[k]

    return PropulsionData(
        **{
            k: (v if isinstance(v, int) else np.float64(v))
            for k, v in row.items()
        }
    )


@typechecked
def extrapolate_point(
    group: int,
    point: spp_model.SelfPropulsionPoint,
    conditions: conditions_data.TestConditions,
    pump_lookup: pump_model.PumpLookup,
    options: ExtrapolationOptions = ExtrapolationOptions(),
) -> tuple:
    """Extrapolates one self-propulsion point.

    Args:
        group (int): Index of the speed group, used by the pump lookup
        point (spp_model.SelfPropulsionPoint): Model scale point
        conditions (conditions_data.TestConditions): Test conditions
        pump_lookup (pump_model.PumpLookup): Full scale pump head and efficiency
        options (ExtrapolationOptions): Alternative formulations

    Returns:
        tuple: (model scale PropulsionData, full scale PropulsionData)
    """
    model_water = conditions.model_water
    ship_water = conditions.ship_water
    hull = conditions.hull
    ship_hull = conditions.ship_hull
    scale = conditions.scale_ratio

    speed = point.speed
    ship_speed = speed * np.sqrt(scale)
    speed_knots = ship_speed / resistance_model.KNOT

    # Model scale resistance
    re_model = friction_model.reynolds_number(speed, hull.lwl, model_water.kinematic_viscosity)
    cf_model = friction_model.grigson_cf(re_model)
    rt_model = point.corrected_resistance
    ct_model = rt_model / (0.5 * model_water.density * hull.wetted_surface * speed**2)
    cr = ct_model - hull.form_factor * cf_model

    # Full scale resistance, CR frozen from model scale
    re_ship = friction_model.reynolds_number(
        ship_speed, ship_hull.lwl, ship_water.kinematic_viscosity
    )
    cf_ship = friction_model.grigson_cf(re_ship)
    roughness = (
        friction_model.roughness_allowance(conditions.roughness, ship_hull.lwl, re_ship)
        if options.roughness_allowance
        else 0.0
    )
    if options.correlation_source is CorrelationSource.REYNOLDS:
        ca = friction_model.correlation_allowance(re_ship)
    else:
        ca = conditions.correlation_allowance
    caa = (
        conditions.air_drag_coefficient
        * (conditions.air.density * conditions.projected_air_area)
        / (ship_water.density * ship_hull.wetted_surface)
        if options.air_resistance
        else 0.0
    )
    ct_ship = hull.form_factor * cf_ship + roughness + ca + cr + caa
    rt_ship = 0.5 * ship_water.density * ship_speed**2 * ship_hull.wetted_surface * ct_ship

    # Wake and thrust deduction
    wake_model = np.mean([point.port_wake_fraction, point.stbd_wake_fraction])
    thrust_deduction = point.t_from_zero_thrust
    wake_ship = options.wake_scaling.solve(wake_model, thrust_deduction, cf_ship, cf_model)

    model_jet = conditions.model_waterjet
    ship_jet = conditions.waterjet

    model_sides = {}
    ship_sides = {}
    for s in ("port", "stbd"):
        model_thrust = getattr(point, f"{s}_thrust")
        model_shaft_speed = getattr(point, f"{s}_shaft_speed")
        model_mass_flow_rate = getattr(point, f"{s}_mass_flow_rate")
        model_flow_rate = model_mass_flow_rate / model_water.density
        model_head = pump_model.model_pump_head(model_mass_flow_rate)

        kt = thrust_coefficient(
            model_thrust, model_water.density, model_jet.impeller_diameter, model_shaft_speed
        )
        model_sides[s] = dict(
            gross_thrust=model_thrust,
            flow_rate=model_flow_rate,
            shaft_speed=model_shaft_speed,
            head=model_head,
            efficiency=pump_model.model_pump_efficiency(
                flow_rate=model_flow_rate,
                head=model_head,
                torque=getattr(point, f"{s}_torque"),
                shaft_speed=model_shaft_speed,
                pump_diameter=model_jet.pump_diameter,
                density=model_water.density,
                gravity=conditions.gravity,
            ),
            thrust_coefficient=kt,
        )

        ship_thrust = model_thrust * scale**3 * (ship_water.density / model_water.density)
        ship_flow_rate = flow_rate_from_gross_thrust(
            ship_thrust, ship_speed, wake_ship, ship_jet.nozzle_area, ship_water.density
        )
        ship_shaft_speed = (
            np.sqrt(ship_thrust / (ship_water.density * ship_jet.impeller_diameter**4 * kt))
            * 60
        )
        head, efficiency = pump_lookup.solve(group, float(ship_flow_rate), float(ship_shaft_speed))
        ship_sides[s] = dict(
            gross_thrust=ship_thrust,
            flow_rate=ship_flow_rate,
            shaft_speed=ship_shaft_speed,
            head=head,
            efficiency=efficiency,
            thrust_coefficient=thrust_coefficient(
                ship_thrust, ship_water.density, ship_jet.impeller_diameter, ship_shaft_speed
            ),
        )

    common = dict(
        froude_number=point.froude_number,
        speed_knots=speed_knots,
        thrust_deduction=thrust_deduction,
        conditions=conditions,
        options=options,
        correlation_allowance=conditions.correlation_allowance,
    )
    model_row = _propulsion_row(
        speed=speed,
        reynolds_number=re_model,
        cf=cf_model,
        cr=cr,
        ct=ct_model,
        resistance=rt_model,
        wake_fraction=wake_model,
        sides=model_sides,
        fluid=model_water,
        waterjet=model_jet,
        **common,
    )
    ship_row = _propulsion_row(
        speed=ship_speed,
        reynolds_number=re_ship,
        cf=cf_ship,
        cr=cr,
        ct=ct_ship,
        resistance=rt_ship,
        wake_fraction=wake_ship,
        sides=ship_sides,
        fluid=ship_water,
        waterjet=ship_jet,
        **common,
    )
    return model_row, ship_row


@typechecked
def extrapolate(
    spp: spp_model.SelfPropulsionResult,
    conditions: conditions_data.TestConditions,
    pump_lookup: pump_model.PumpLookup,
    options: ExtrapolationOptions = ExtrapolationOptions(),
) -> ExtrapolationResult:
    """Extrapolates every self-propulsion point to full scale."""
    if spp.status is not analysis_status.AnalysisStatus.NORMAL:
        raise analysis_error.IncompleteDataset(
            f"Cannot extrapolate: {spp.status.value}"
        )

    points = spp.points(options.definition)
    model_rows = []
    ship_rows = []
    for _, row in points.iterrows():
        point = spp_model.SelfPropulsionPoint(**row.to_dict())
        try:
            group = conditions.froude_index(float(point.froude_number))
        except ValueError as e:
            raise analysis_error.IncompleteDataset(f"Cannot extrapolate: {e}") from e
        model_row, ship_row = extrapolate_point(group, point, conditions, pump_lookup, options)
        model_rows.append(model_row)
        ship_rows.append(ship_row)

    return ExtrapolationResult(
        model=DataSet[PropulsionData](model_rows), ship=DataSet[PropulsionData](ship_rows)
    )


@typechecked
def compare_correlation_allowances(
    runs: run_data.RunDataSet,
    resistance_curve: resistance_model.ResistanceCurve,
    conditions: conditions_data.TestConditions,
    pump_lookup: pump_model.PumpLookup,
    options: ExtrapolationOptions = ExtrapolationOptions(),
    allowances: tuple = CORRELATION_ALLOWANCES,
    kiel_probe: run_model.KielProbeCalibration = run_model.KielProbeCalibration.SEPTEMBER_2014,
) -> pd.DataFrame:
    """Repeats the analysis for each correlation allowance, which changes the
    towing force and hence the self-propulsion points. The full scale rows
    are concatenated, tagged by their `correlation_allowance` column."""
    tables = []
    for ca in allowances:
        ca_conditions = replace(conditions, correlation_allowance=ca)
        spp = spp_model.solve_self_propulsion(runs, resistance_curve, ca_conditions, kiel_probe)
        tables.append(extrapolate(spp, ca_conditions, pump_lookup, options).ship)
    return pd.concat(tables, ignore_index=True)


def split_by_correlation(table: pd.DataFrame) -> dict:
    """Splits a concatenated full scale table into one table per
    correlation allowance."""
    return {
        float(ca): group.reset_index(drop=True)
        for ca, group in table.groupby("correlation_allowance", sort=True)
    }


def delivered_power_mw(table: pd.DataFrame, demihulls: int = 2) -> pd.Series:
    """Total delivered power of the ship [MW], both demihulls."""
    return (
        (table["port_delivered_power"] + table["stbd_delivered_power"]) * demihulls / 1e6
    )
