from dataclasses import dataclass

import numpy as np
import pandas as pd
from strictly_typed_pandas.dataset import DataSet
from typeguard import typechecked

import utils.models as models
import wjlib.analysis_error as analysis_error

# 100% MCR of a single waterjet, 7200 kW engine with 2% transmission losses
SINGLE_WATERJET_RATED_POWER = 7056.0  # [kW]
WATERJETS_PER_DEMIHULL = 2
WATERJETS = 4


@dataclass(frozen=True)
class ThrustCurveBand:
    """Waterjet thrust [kN] vs ship speed [kn] at a fixed fraction of MCR.

    Attributes:
    ----------
    mcr (float)
        Fraction of MCR of the band, between 0.0 and 1.0
    coeffs (tuple)
        Cubic fit coefficients, ascending order
    r_squared (float)
        Coefficient of determination of the fit
    min_speed (float)
        Lowest tabulated speed [kn]
    max_speed (float)
        Highest tabulated speed [kn]
    """

    mcr: float
    coeffs: tuple
    r_squared: float
    min_speed: float
    max_speed: float

    def thrust(self, speed):
        return models.eval_poly(self.coeffs, np.asarray(speed, dtype=np.float64))

    @staticmethod
    def fit(mcr: float, speeds, thrusts) -> "ThrustCurveBand":
        coeffs = models.polyfit(speeds, thrusts, 3)
        fitted = models.eval_poly(coeffs, np.asarray(speeds, dtype=np.float64))
        return ThrustCurveBand(
            mcr=float(mcr),
            coeffs=tuple(float(c) for c in coeffs),
            r_squared=float(models.r_squared(thrusts, fitted)),
            min_speed=float(np.min(speeds)),
            max_speed=float(np.max(speeds)),
        )


@dataclass
class ThrustAtMCR:
    speed: np.float64  # [kn]
    mcr: np.float64  # fraction of MCR
    thrust: np.float64  # single waterjet [kN]
    demihull_thrust: np.float64  # [kN]
    total_thrust: np.float64  # [kN]
    r_squared: np.float64


ThrustAtMCRDataSet = DataSet[ThrustAtMCR]


class ThrustCurveTable:
    """Ordered thrust curve bands with a bracket search on MCR."""

    def __init__(self, bands: list):
        if len(bands) < 1:
            raise analysis_error.MissingExternalData("No thrust curve bands given.")
        self.bands = sorted(bands, key=lambda band: band.mcr)
        mcrs = [band.mcr for band in self.bands]
        if len(set(mcrs)) != len(mcrs):
            raise ValueError(f"Repeated MCR bands: {mcrs}")

    @staticmethod
    def from_dataframe(df: pd.DataFrame) -> "ThrustCurveTable":
        """Fits one band per `mcr` value of a table with `mcr`, `speed` and
        `thrust` columns."""
        return ThrustCurveTable(
            [
                ThrustCurveBand.fit(mcr, group["speed"].to_numpy(), group["thrust"].to_numpy())
                for mcr, group in df.groupby("mcr", sort=True)
            ]
        )

    @staticmethod
    def from_coefficients(df: pd.DataFrame) -> "ThrustCurveTable":
        """Bands already fitted, one row each with `mcr`, `c0`..`c3`
        (ascending), `r_squared`, `min_speed` and `max_speed` columns."""
        return ThrustCurveTable(
            [
                ThrustCurveBand(
                    mcr=float(row["mcr"]),
                    coeffs=tuple(float(row[f"c{i}"]) for i in range(4)),
                    r_squared=float(row["r_squared"]),
                    min_speed=float(row["min_speed"]),
                    max_speed=float(row["max_speed"]),
                )
                for _, row in df.iterrows()
            ]
        )

    def bracket(self, mcr: float) -> tuple:
        """Adjacent bands around `mcr`, edges included. A value equal to a
        band's MCR returns that band twice."""
        for band in self.bands:
            if np.isclose(band.mcr, mcr, rtol=0, atol=1e-12):
                return band, band
        for lower, upper in zip(self.bands[:-1], self.bands[1:]):
            if lower.mcr < mcr < upper.mcr:
                return lower, upper
        raise analysis_error.NumericDomainError(
            f"MCR {mcr:.4f} outside of the tabulated range "
            + f"[{self.bands[0].mcr}, {self.bands[-1].mcr}]"
        )

    @typechecked
    def interpolate(self, mcr: float, speed: float) -> tuple:
        """Thrust at an arbitrary MCR, by blending the two bracketing bands
        over their common speed range, then refitting a cubic.

        Returns:
            tuple: (thrust [kN], r squared of the refitted cubic)
        """
        lower, upper = self.bracket(mcr)
        if lower is upper:
            return np.float64(lower.thrust(speed)), np.float64(lower.r_squared)

        min_speed = int(np.ceil(max(lower.min_speed, upper.min_speed)))
        max_speed = int(np.floor(min(lower.max_speed, upper.max_speed)))
        speeds = np.arange(min_speed, max_speed + 1, dtype=np.float64)
        if speeds.size < 4:
            raise analysis_error.IncompleteDataset(
                f"Bands {lower.mcr} and {upper.mcr} share only {speeds.size} integer speeds."
            )

        weight = (mcr - lower.mcr) / (upper.mcr - lower.mcr)
        lower_thrust = lower.thrust(speeds)
        blended = weight * (upper.thrust(speeds) - lower_thrust) + lower_thrust

        coeffs = models.polyfit(speeds, blended, 3)
        r_squared = models.r_squared(blended, models.eval_poly(coeffs, speeds))
        return np.float64(models.eval_poly(coeffs, speed)), r_squared


@dataclass(frozen=True)
class SeaTrialsPower:
    """Corrected sea trials power of the whole catamaran [MW] as a degree 5
    polynomial of ship speed [kn], ascending coefficients."""

    coeffs: tuple
    r_squared: float = 1.0

    @staticmethod
    def fit(speeds, power_mw) -> "SeaTrialsPower":
        coeffs = models.polyfit(speeds, power_mw, 5)
        fitted = models.eval_poly(coeffs, np.asarray(speeds, dtype=np.float64))
        return SeaTrialsPower(
            coeffs=tuple(float(c) for c in coeffs),
            r_squared=float(models.r_squared(power_mw, fitted)),
        )

    def power(self, speed):
        return models.eval_poly(self.coeffs, np.asarray(speed, dtype=np.float64))

    def mcr(self, speed, rated_power: float = SINGLE_WATERJET_RATED_POWER * WATERJETS):
        """Fraction of MCR, for a rated power in kW."""
        return self.power(speed) / (rated_power / 1000)


@typechecked
def thrust_at_sea_trials_power(
    table: ThrustCurveTable, sea_trials: SeaTrialsPower, speeds: list
) -> ThrustAtMCRDataSet:
    """Waterjet thrust at the MCR implied by the sea trials power, for each
    ship speed [kn]."""
    rows = []
    for speed in speeds:
        mcr = np.float64(sea_trials.mcr(float(speed)))
        thrust, r_squared = table.interpolate(float(mcr), float(speed))
        rows.append(
            ThrustAtMCR(
                speed=np.float64(speed),
                mcr=mcr,
                thrust=thrust,
                demihull_thrust=thrust * WATERJETS_PER_DEMIHULL,
                total_thrust=thrust * WATERJETS,
                r_squared=np.float64(r_squared),
            )
        )
    return DataSet[ThrustAtMCR](rows)
