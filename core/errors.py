"""Error taxonomy for the signal core.

All errors are local and recoverable: a rejected call leaves prior state
untouched and the caller decides whether to retry, drop or log.
"""


class SniperError(Exception):
    """Base exception for strategy errors."""
    pass


class ConfigError(SniperError):
    """Configuration values out of range."""
    pass


class InputValidationError(SniperError):
    """Out-of-range, negative or non-finite input. Raised before any mutation."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid input: {field} - {reason}")


# Short alias used by callers that only care about the category
ValidationError = InputValidationError


class ClockSkewError(InputValidationError):
    """Timestamp too far in the future to be trusted."""
    pass


class CandidateNotFoundError(SniperError):
    """Operation referenced an identifier that is not tracked."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Candidate not found: {identifier}")
