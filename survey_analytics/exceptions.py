"""Project-wide custom exception types."""


class AnalyticsError(RuntimeError):
    """Base class for failures surfaced to callers of the analytics engine."""


class InvalidQueryError(AnalyticsError, ValueError):
    """Raised when a template id or date parameter is missing or malformed."""

    def __init__(self, message: str) -> None:  # noqa: D401 – simple constructor
        super().__init__(message)


class TemplateNotFoundError(AnalyticsError, LookupError):
    """Raised when no survey template exists for the requested id."""

    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__(f"Survey template {template_id} not found.")


class DataFetchError(AnalyticsError):
    """Raised when the response or template store cannot be read."""
