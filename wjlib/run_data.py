from dataclasses import dataclass

import numpy as np
from strictly_typed_pandas.dataset import DataSet

import wjlib.channel_model as channel_model


@dataclass
class RunRecord:
    """Raw content of one run file.

    Attributes:
    ----------
    run_number (int)
        Run identifier
    time (np.ndarray)
        Timeline [s]
    samples (np.ndarray)
        Raw samples, one column per `channel_model.Channel`
    calibration (channel_model.CalibrationBlock)
        Zero and calibration factor of each channel
    """

    run_number: int
    time: np.ndarray
    samples: np.ndarray
    calibration: channel_model.CalibrationBlock

    def raw(self, channel: channel_model.Channel) -> np.ndarray:
        return self.samples[:, int(channel)]

    def reduced(self, channel: channel_model.Channel) -> tuple:
        return channel_model.reduce_channel(self.raw(channel), self.calibration[channel])


@dataclass
class RunData:
    run_number: int
    sampling_rate: np.float64  # [Hz]
    duration: np.float64  # [s]
    speed: np.float64  # [m/s]
    froude_number: np.float64
    reynolds_number: np.float64
    cf: np.float64  # model scale frictional resistance coefficient (Grigson)
    towing_force_coefficient: np.float64  # (1+k)(CFm - CFs) - Ca
    towing_force: np.float64  # FD [N]
    drag: np.float64  # measured bare hull resistance [N]
    port_shaft_speed: np.float64  # [RPM]
    stbd_shaft_speed: np.float64  # [RPM]
    port_thrust: np.float64  # dynamometer thrust [N]
    stbd_thrust: np.float64  # dynamometer thrust [N]
    port_torque: np.float64  # [Nm]
    stbd_torque: np.float64  # [Nm]
    port_kiel_probe: np.float64  # [V]
    stbd_kiel_probe: np.float64  # [V]
    port_mass_flow_rate: np.float64  # [kg/s]
    stbd_mass_flow_rate: np.float64  # [kg/s]
    port_flow_rate: np.float64  # [m^3/s]
    stbd_flow_rate: np.float64  # [m^3/s]
    port_jet_velocity: np.float64  # [m/s]
    stbd_jet_velocity: np.float64  # [m/s]
    port_wake_fraction: np.float64
    stbd_wake_fraction: np.float64
    port_inlet_velocity: np.float64  # [m/s]
    stbd_inlet_velocity: np.float64  # [m/s]
    port_gross_thrust_momentum: np.float64  # rho Q (vj - vi) [N]
    stbd_gross_thrust_momentum: np.float64
    gross_thrust_momentum: np.float64
    port_gross_thrust_jet: np.float64  # rho Q vj [N]
    stbd_gross_thrust_jet: np.float64
    gross_thrust_jet: np.float64


RunDataSet = DataSet[RunData]
