"""Test conditions of the waterjet self-propulsion campaign.

All the physical constants, fluid properties and geometry used by the
analysis live here as immutable objects, passed explicitly to each model.
Water properties follow the ITTC 7.5-02-01-03 (2008) fresh and salt water
tables at the temperatures of each test.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


def _validate_positive(values: dict) -> None:
    for k, v in values.items():
        if not np.isfinite(v) or v <= 0:
            raise ValueError(f"Invalid {k}={v}")


@dataclass(frozen=True)
class Fluid:
    density: float  # [kg/m^3]
    kinematic_viscosity: float = 0.0  # [m^2/s], zero for fluids only used by density

    def validate(self) -> None:
        _validate_positive({"density": self.density})
        if not np.isfinite(self.kinematic_viscosity) or self.kinematic_viscosity < 0:
            raise ValueError(f"Invalid kinematic_viscosity={self.kinematic_viscosity}")


# Self-propulsion test, fresh water at 18.5 deg. C
MODEL_WATER = Fluid(density=998.5048, kinematic_viscosity=1.0411e-6)
# Resistance test, fresh water at 17.5 deg. C
RESISTANCE_TEST_WATER = Fluid(density=998.6897, kinematic_viscosity=1.0675e-6)
# Full scale, salt water at 19.2 deg. C
SHIP_WATER = Fluid(density=1025.0187, kinematic_viscosity=1.0711e-6)
AIR = Fluid(density=1.2041)


@dataclass(frozen=True)
class HullGeometry:
    lwl: float = 4.30  # [m] length on waterline
    wetted_surface: float = 1.501  # [m^2]
    form_factor: float = 1.18  # (1+k)
    draft: float = 0.133  # [m]

    def scaled(self, scale_ratio: float) -> HullGeometry:
        """Geometrically similar hull, `scale_ratio` times larger."""
        return HullGeometry(
            lwl=self.lwl * scale_ratio,
            wetted_surface=self.wetted_surface * scale_ratio**2,
            form_factor=self.form_factor,
            draft=self.draft * scale_ratio,
        )

    def validate(self) -> None:
        _validate_positive(
            {
                "lwl": self.lwl,
                "wetted_surface": self.wetted_surface,
                "form_factor": self.form_factor,
                "draft": self.draft,
            }
        )


@dataclass(frozen=True)
class WaterjetGeometry:
    """Waterjet dimensions, full scale by default.

    Attributes:
    ----------
    pump_diameter (float)
        Pump inlet diameter [m]
    nozzle_diameter (float)
        Effective nozzle diameter [m]
    nozzle_area (float)
        Nozzle outlet area [m^2]
    impeller_diameter (float)
        Impeller diameter [m]
    """

    pump_diameter: float = 1.2
    nozzle_diameter: float = 0.72
    nozzle_area: float = 0.4072
    impeller_diameter: float = 1.582

    def model(self, scale_ratio: float) -> WaterjetGeometry:
        return WaterjetGeometry(
            pump_diameter=self.pump_diameter / scale_ratio,
            nozzle_diameter=self.nozzle_diameter / scale_ratio,
            nozzle_area=np.pi * (self.nozzle_diameter / 2 / scale_ratio) ** 2,
            impeller_diameter=self.impeller_diameter / scale_ratio,
        )

    def validate(self) -> None:
        _validate_positive(
            {
                "pump_diameter": self.pump_diameter,
                "nozzle_diameter": self.nozzle_diameter,
                "nozzle_area": self.nozzle_area,
                "impeller_diameter": self.impeller_diameter,
            }
        )


# Froude numbers of the nine self-propulsion speed groups
FROUDE_NUMBERS = tuple(np.round(np.arange(0.24, 0.41, 0.02), 2))

# Boundary layer thickness at the inlet [m], one per speed group
BOUNDARY_LAYER_THICKNESS = (
    0.04546,
    0.04548,
    0.04519,
    0.04459,
    0.04369,
    0.04248,
    0.04097,
    0.03915,
    0.03702,
)


@dataclass(frozen=True)
class TestConditions:
    scale_ratio: float = 21.6  # full scale / model scale
    gravity: float = 9.806  # [m/s^2]

    model_water: Fluid = MODEL_WATER
    resistance_test_water: Fluid = RESISTANCE_TEST_WATER
    ship_water: Fluid = SHIP_WATER
    air: Fluid = AIR

    hull: HullGeometry = HullGeometry()
    waterjet: WaterjetGeometry = WaterjetGeometry()

    correlation_allowance: float = 0.00035  # Ca
    roughness: float = 150e-6  # [m] hull surface roughness, ks
    air_drag_coefficient: float = 0.446
    projected_air_area: float = 341.5 / 2  # [m^2] demihull transverse area

    nozzle_efficiency: float = 0.98
    shaft_efficiency: float = 0.98 * 0.98
    installation_efficiency: float = 1.0

    boundary_layer_exponent: float = 6.672  # power law 1/n
    inlet_width_factor: float = 1.3  # inlet width / pump diameter
    boundary_layer_thickness: tuple = BOUNDARY_LAYER_THICKNESS

    froude_numbers: tuple = FROUDE_NUMBERS
    sampling_frequency: float = 800.0  # [Hz]

    model_waterjet: WaterjetGeometry = field(init=False)
    ship_hull: HullGeometry = field(init=False)

    def __post_init__(self):
        # frozen, so derived geometry must bypass __setattr__
        object.__setattr__(self, "model_waterjet", self.waterjet.model(self.scale_ratio))
        object.__setattr__(self, "ship_hull", self.hull.scaled(self.scale_ratio))

    @property
    def speed_group_count(self) -> int:
        return len(self.froude_numbers)

    def validate(self) -> None:
        _validate_positive(
            {
                "scale_ratio": self.scale_ratio,
                "gravity": self.gravity,
                "nozzle_efficiency": self.nozzle_efficiency,
                "shaft_efficiency": self.shaft_efficiency,
                "installation_efficiency": self.installation_efficiency,
                "boundary_layer_exponent": self.boundary_layer_exponent,
                "inlet_width_factor": self.inlet_width_factor,
                "sampling_frequency": self.sampling_frequency,
            }
        )
        for k, v in {
            "correlation_allowance": self.correlation_allowance,
            "roughness": self.roughness,
            "air_drag_coefficient": self.air_drag_coefficient,
            "projected_air_area": self.projected_air_area,
        }.items():
            if not np.isfinite(v) or v < 0:
                raise ValueError(f"Invalid {k}={v}")

        if len(self.boundary_layer_thickness) != len(self.froude_numbers):
            raise ValueError(
                "boundary_layer_thickness must have one value per Froude number: "
                + f"{len(self.boundary_layer_thickness)} != {len(self.froude_numbers)}"
            )

        for fluid in (
            self.model_water,
            self.resistance_test_water,
            self.ship_water,
            self.air,
        ):
            fluid.validate()
        self.hull.validate()
        self.waterjet.validate()

    def froude_index(self, froude_number: float) -> int:
        """Index of the speed group of a given Froude number."""
        distances = np.abs(np.asarray(self.froude_numbers) - froude_number)
        k = int(np.argmin(distances))
        if distances[k] > 1e-6:
            raise ValueError(f"Froude number {froude_number} is not a speed group.")
        return k
