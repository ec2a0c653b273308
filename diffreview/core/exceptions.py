"""Custom exceptions for the review pipeline."""


class ReviewerException(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        details: dict | None = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(ReviewerException):
    """Invalid caller-supplied setting."""


class InvalidBudgetError(ValidationError):
    """Batch budget is not a positive number of characters."""

    def __init__(self, max_chars: int) -> None:
        super().__init__(
            f"Batch budget must be positive, got {max_chars}",
            {"max_chars": max_chars},
        )


class InvalidConcurrencyError(ValidationError):
    """Concurrency limit is below one."""

    def __init__(self, max_concurrency: int) -> None:
        super().__init__(
            f"Concurrency must be at least 1, got {max_concurrency}",
            {"max_concurrency": max_concurrency},
        )


class ExternalServiceError(ReviewerException):
    """External analysis engine error."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service} error: {message}", {"service": service})
