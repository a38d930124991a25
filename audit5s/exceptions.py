"""Exception hierarchy for audit5s."""


class AuditError(Exception):
    """Base exception for all audit5s errors."""


class ConfigError(AuditError):
    """Raised when the configuration file is missing or unreadable."""


class ImageValidationError(AuditError):
    """Raised when an image is missing, unreadable or over the size ceiling."""


class CompressionError(AuditError):
    """Raised when a compressed copy still exceeds the size budget."""


class ProviderNotConfiguredError(AuditError):
    """Raised when no vision LLM API key is available."""


class AnalysisFailedError(AuditError):
    """Raised when every analysis attempt failed."""

    def __init__(self, attempts: int, last_error: str = ""):
        self.attempts = attempts
        self.last_error = last_error
        msg = f"Failed to analyze image after {attempts} attempts"
        if last_error:
            msg = f"{msg}: {last_error}"
        super().__init__(msg)
