from dataclasses import dataclass
from enum import Enum, IntEnum

import numpy as np
from scipy.signal import find_peaks
from typeguard import typechecked

import wjlib.analysis_error as analysis_error


class Channel(IntEnum):
    """Data acquisition channels of the self-propulsion test."""

    SPEED = 0
    LVDT_FWD = 1
    LVDT_AFT = 2
    DRAG = 3
    PORT_RPM = 4
    STBD_RPM = 5
    PORT_THRUST = 6
    PORT_TORQUE = 7
    STBD_THRUST = 8
    STBD_TORQUE = 9
    PORT_KIEL_PROBE = 10
    STBD_KIEL_PROBE = 11
    PORT_STATIC_6 = 12
    STBD_STATIC_6 = 13
    STBD_STATIC_5 = 14
    STBD_STATIC_4 = 15
    STBD_STATIC_3 = 16
    PORT_STATIC_1A = 17
    STBD_STATIC_1A = 18


@dataclass(frozen=True)
class Calibration:
    zero: float
    factor: float


@typechecked
def reduce_channel(raw: np.ndarray, calibration: Calibration) -> tuple:
    """Converts raw samples to physical units.

    Args:
        raw (np.ndarray): Raw channel samples (voltage or counts)
        calibration (Calibration): Zero offset and calibration factor

    Returns:
        tuple: (calibrated samples, mean of the calibrated samples)
    """
    raw = np.asarray(raw, dtype=np.float64)
    if raw.size == 0:
        raise analysis_error.IncompleteDataset("Cannot reduce an empty channel.")

    calibrated = calibration.factor * (raw - calibration.zero)
    return calibrated, np.float64(np.mean(calibrated))


@dataclass(frozen=True)
class CalibrationBlock:
    """Zero and calibration factor pairs of one run file, the first pair
    belonging to the time column."""

    time: Calibration
    channels: tuple

    @staticmethod
    @typechecked
    def from_vector(values: np.ndarray) -> "CalibrationBlock":
        values = np.asarray(values, dtype=np.float64).ravel()
        if values.size < 2 or values.size % 2 != 0:
            raise analysis_error.IncompleteDataset(
                f"Calibration block must hold (zero, factor) pairs, got {values.size} values."
            )
        pairs = [
            Calibration(zero=float(values[i]), factor=float(values[i + 1]))
            for i in range(0, values.size, 2)
        ]
        return CalibrationBlock(time=pairs[0], channels=tuple(pairs[1:]))

    def __getitem__(self, channel: int) -> Calibration:
        if channel >= len(self.channels):
            raise analysis_error.IncompleteDataset(
                f"No calibration for channel {channel}, only {len(self.channels)} available."
            )
        return self.channels[channel]


@dataclass
class ChannelStatistics:
    mean: np.float64
    minimum: np.float64
    maximum: np.float64
    deviation: np.float64  # |1 - min/mean|
    std: np.float64

    @staticmethod
    @typechecked
    def from_samples(samples: np.ndarray) -> "ChannelStatistics":
        samples = np.asarray(samples, dtype=np.float64)
        if samples.size == 0:
            raise analysis_error.IncompleteDataset("Cannot describe an empty channel.")
        mean = np.mean(samples)
        minimum = np.min(samples)
        return ChannelStatistics(
            mean=np.float64(mean),
            minimum=np.float64(minimum),
            maximum=np.float64(np.max(samples)),
            deviation=np.float64(np.abs(1 - minimum / mean)) if mean != 0 else np.float64(np.inf),
            std=np.float64(np.std(samples, ddof=1)) if samples.size > 1 else np.float64(0),
        )


class Direction(Enum):
    AHEAD = 1
    ASTERN = -1


@dataclass(frozen=True)
class Force:
    """A force with explicit direction, magnitude always non-negative [N]."""

    magnitude: float
    direction: Direction = Direction.AHEAD

    def __post_init__(self):
        if not np.isfinite(self.magnitude) or self.magnitude < 0:
            raise ValueError(f"Invalid force magnitude={self.magnitude}")

    @staticmethod
    @typechecked
    def from_grams(grams: float, gravity: float, direction: Direction) -> "Force":
        """Load cells are calibrated in grams, and mounted so that their
        sign depends on the installation, hence the explicit direction."""
        return Force(magnitude=abs(grams) / 1000 * gravity, direction=direction)

    @property
    def value(self) -> np.float64:
        """Signed value, positive ahead."""
        return np.float64(self.direction.value * self.magnitude)


# Samples skipped while the carriage accelerates, 10 s at 800 Hz
ACCELERATION_SAMPLES = 8000


@typechecked
def shaft_rpm_from_pulses(
    pulses: np.ndarray,
    sampling_frequency: float,
    prominence: float = 0.5,
    skip_samples: int = ACCELERATION_SAMPLES,
) -> int:
    """Shaft speed from the inductive proximity sensor signal, counting one
    pulse (voltage minimum) per shaft revolution.

    Args:
        pulses (np.ndarray): Raw sensor voltage
        sampling_frequency (float): Sampling frequency [Hz]
        prominence (float): Minimum pulse depth [V]
        skip_samples (int): Samples skipped at the start of the run

    Returns:
        int: Shaft speed in RPM, 0 if no pulses were found
    """
    signal = np.asarray(pulses, dtype=np.float64)[skip_samples:]
    if signal.size == 0:
        return 0

    minima, _ = find_peaks(-signal, prominence=prominence)
    if minima.size < 2:
        return 0

    span = (minima[-1] - minima[0] + 4) / sampling_frequency
    return int(round(minima.size / (span / 60)))
