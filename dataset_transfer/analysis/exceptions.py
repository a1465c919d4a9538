class AnalysisError(Exception):
    """Raised when a dataset cannot be analyzed at all (e.g. unreadable file)."""


class RecordParseError(AnalysisError):
    """Raised for a single line that is not a JSON object.

    The analyzer counts these and keeps scanning; they never abort a pass.
    """

    def __init__(self, message: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number
