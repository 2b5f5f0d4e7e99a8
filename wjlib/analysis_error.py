class AnalysisError(Exception):
    """Exception raised for errors during the towing-tank analysis.

    Attributes:
        message -- explanation of the error
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class MissingExternalData(AnalysisError):
    """A required input file or auxiliary lookup table was not supplied."""

    pass


class IncompleteDataset(AnalysisError):
    """The supplied data is not enough to perform the requested analysis."""

    pass


class NumericDomainError(AnalysisError):
    """A formula was evaluated outside of its numeric domain."""

    pass
