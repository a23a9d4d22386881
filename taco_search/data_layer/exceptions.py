"""Custom exceptions for the TACO food search engine."""


class TacoSearchError(Exception):
    """Base class for all food search errors."""


class DatasetLoadError(TacoSearchError):
    """Raised when the food dataset cannot be loaded.

    This is fatal: no query can be served without the dataset.
    """

    def __init__(self, path: str, reason: str):
        """Initialize exception with dataset path and failure reason.

        Args:
            path: Path of the dataset file that failed to load
            reason: Human-readable description of the failure
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Could not load food dataset '{path}': {reason}")


class InvalidQueryError(TacoSearchError):
    """Raised when a query descriptor does not have the expected shape."""
