import os
import re

import numpy as np
import pandas as pd

import wjlib.analysis_error as analysis_error
import wjlib.channel_model as channel_model
import wjlib.run_data as run_data

# Header lines of the data acquisition files
DATA_HEADER_LINES = 39
CALIBRATION_HEADER_LINES = 33


def _require_file(filename):
    if not os.path.isfile(filename):
        raise analysis_error.MissingExternalData(
            f"Required data file ({filename}) does not exist!"
        )


def run_number_from_filename(filename: str) -> int:
    """Run number from data file names like `R123.dat` or `R45_xyz.dat`."""
    match = re.search(r"R(\d+)", os.path.basename(filename))
    if match is None:
        raise ValueError(f"No run number in file name {filename}")
    return int(match.group(1))


def read_run_file(
    filename,
    run_number=None,
    header_lines=DATA_HEADER_LINES,
    calibration_header_lines=CALIBRATION_HEADER_LINES,
):
    """
    Reads a space delimited data acquisition file.

    Parameters:
        filename (str): The run file.
        run_number (int): The run number, parsed from the file name if None.
        header_lines (int): Lines before the sample block.
        calibration_header_lines (int): Lines before the zero and
            calibration factor row.

    Returns:
        run_data.RunRecord: The timeline, the raw samples of each channel,
        and their calibration.
    """
    _require_file(filename)

    if run_number is None:
        run_number = run_number_from_filename(filename)

    calibration = pd.read_csv(
        filename,
        sep=r"\s+",
        skiprows=calibration_header_lines,
        nrows=1,
        header=None,
    )
    samples = pd.read_csv(filename, sep=r"\s+", skiprows=header_lines, header=None)

    if samples.empty:
        raise analysis_error.IncompleteDataset(f"Run file {filename} has no samples.")

    data = samples.to_numpy(dtype=np.float64)

    return run_data.RunRecord(
        run_number=int(run_number),
        time=data[:, 0],
        samples=data[:, 1:],
        calibration=channel_model.CalibrationBlock.from_vector(
            calibration.to_numpy(dtype=np.float64).ravel()
        ),
    )


def read_run_files(directory, run_numbers, name_format="R{:d}.dat"):
    """Reads a range of runs, skipping missing files."""
    records = []
    for run_number in run_numbers:
        filename = os.path.join(directory, name_format.format(run_number))
        if not os.path.isfile(filename):
            print(f"[Data] run {run_number} skipped, {filename} not found")
            continue
        records.append(read_run_file(filename, run_number))
    return records


def load_table(filename, columns=None):
    """Loads an auxiliary lookup table (pump curve, thrust curves, sea
    trials power), comma delimited with a header row."""
    _require_file(filename)

    df = pd.read_csv(filename)
    if columns is not None:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise analysis_error.MissingExternalData(
                f"Columns {missing} missing from {filename}"
            )
        df = df[list(columns)]
    return df


def export_table(df: pd.DataFrame, filename, delimiter=","):
    """Writes a result table, comma (.csv/.dat) or tab (.txt) delimited."""
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    df.to_csv(filename, sep=delimiter, index=False)
    return filename
