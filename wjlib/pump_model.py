from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
import pandas as pd
from typeguard import typechecked

import utils.models as models
import wjlib.analysis_error as analysis_error

# Shaft speed of the benchmark pump curve [RPM]
BENCHMARK_SHAFT_SPEED = 568.0


class PumpLookup(ABC):
    """Full scale pump head and efficiency at an operating point."""

    @abstractmethod
    def solve(self, group: int, flow_rate: float, shaft_speed: float) -> tuple:
        """
        Args:
            group (int): Index of the speed group
            flow_rate (float): Volumetric flow rate [m^3/s]
            shaft_speed (float): Shaft speed [RPM]

        Returns:
            tuple: (pump head [m], pump efficiency)
        """
        ...


@dataclass
class TabulatedPumpLookup(PumpLookup):
    heads: tuple
    efficiencies: tuple

    def __post_init__(self):
        if len(self.heads) != len(self.efficiencies):
            raise ValueError(
                "heads and efficiencies must have the same size: "
                + f"{len(self.heads)} != {len(self.efficiencies)}"
            )

    @typechecked
    def solve(self, group: int, flow_rate: float, shaft_speed: float) -> tuple:
        if not 0 <= group < len(self.heads):
            raise analysis_error.MissingExternalData(
                f"No pump data for speed group {group}, only {len(self.heads)} available."
            )
        return np.float64(self.heads[group]), np.float64(self.efficiencies[group])


@dataclass
class AffinityPumpLookup(PumpLookup):
    """Benchmark pump curve scaled to the operating shaft speed by the pump
    affinity laws, then fitted with a degree 4 polynomial.

    Attributes:
    ----------
    flow_rate (np.ndarray)
        Benchmark volumetric flow rate [m^3/s]
    head (np.ndarray)
        Benchmark pump head [m]
    efficiency (np.ndarray)
        Benchmark pump efficiency
    shaft_speed (float)
        Shaft speed of the benchmark curve [RPM]
    """

    flow_rate: np.ndarray
    head: np.ndarray
    efficiency: np.ndarray
    shaft_speed: float = BENCHMARK_SHAFT_SPEED
    degree: int = 4

    def __post_init__(self):
        self.flow_rate = np.asarray(self.flow_rate, dtype=np.float64)
        self.head = np.asarray(self.head, dtype=np.float64)
        self.efficiency = np.asarray(self.efficiency, dtype=np.float64)
        if not (self.flow_rate.size == self.head.size == self.efficiency.size):
            raise ValueError("Pump curve columns must have the same size.")
        if self.flow_rate.size <= self.degree:
            raise analysis_error.IncompleteDataset(
                f"Pump curve needs more than {self.degree} points, got {self.flow_rate.size}."
            )

    @staticmethod
    def from_dataframe(df: pd.DataFrame, shaft_speed: float = BENCHMARK_SHAFT_SPEED):
        return AffinityPumpLookup(
            flow_rate=df["flow_rate"].to_numpy(),
            head=df["head"].to_numpy(),
            efficiency=df["efficiency"].to_numpy(),
            shaft_speed=shaft_speed,
        )

    def scaled(self, shaft_speed: float) -> tuple:
        """Pump curve at another shaft speed: (flow rate, head, efficiency)."""
        ratio = shaft_speed / self.shaft_speed
        return self.flow_rate * ratio, self.head * ratio**2, self.efficiency

    @typechecked
    def solve(self, group: int, flow_rate: float, shaft_speed: float) -> tuple:
        if shaft_speed <= 0:
            raise analysis_error.NumericDomainError(
                f"Shaft speed must be > 0, got {shaft_speed}"
            )
        q, h, eta = self.scaled(shaft_speed)
        head = models.eval_poly(models.polyfit(q, h, self.degree), flow_rate)
        efficiency = models.eval_poly(models.polyfit(q, eta, self.degree), flow_rate)
        return np.float64(head), np.float64(efficiency)


def model_pump_head(mass_flow_rate):
    """Model scale pump head [m] from the mass flow rate [kg/s], from the
    pump loop calibration."""
    return models.eval_poly((-320.9491, 212.97, 24.3499), mass_flow_rate) / 1000


def model_pump_efficiency(
    flow_rate: float,
    head: float,
    torque: float,
    shaft_speed: float,
    pump_diameter: float,
    density: float,
    gravity: float,
) -> np.float64:
    """Model scale pump efficiency, J KH / (2 pi KQ)."""
    n = shaft_speed / 60
    if n <= 0 or torque == 0:
        raise analysis_error.NumericDomainError(
            f"Pump efficiency needs shaft speed > 0 and torque != 0, got {shaft_speed=} {torque=}"
        )
    flow_coefficient = flow_rate / (n * pump_diameter**3)
    head_coefficient = gravity * head / (n**2 * pump_diameter**2)
    torque_coefficient = torque / (density * n**2 * pump_diameter**5)
    return np.float64(flow_coefficient * head_coefficient / (2 * np.pi * torque_coefficient))
