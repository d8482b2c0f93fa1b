class InvalidArgument(ValueError):
    """Raised when a caller passes a value outside the estimator's contract."""
