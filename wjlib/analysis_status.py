from enum import Enum


class AnalysisStatus(Enum):
    """
    Enum Description: outcome of a self-propulsion analysis pass.
    """

    NORMAL = "normal"
    INCOMPLETE_DATASET = "Not all speed groups are available, extrapolation skipped"
