"""Error hierarchy for cardscope.

Error layers:
- CardscopeError: Base class for all cardscope errors
- DomainError: Rule violations, bad input, missing resources (4xx responses)
- InfrastructureError: Data source or configuration failures (503 responses)

These errors are mapped to HTTP responses by the global exception handler in app.py.
"""


class CardscopeError(Exception):
    """Base class for all cardscope errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(CardscopeError):
    """Base class for domain errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class CompileError(DomainError):
    """A facet value violates its own type constraints.

    Never escapes the compiler: the offending facet is dropped instead.
    """

    def __init__(self, message: str, facet: str | None = None) -> None:
        super().__init__(message, code="COMPILE_ERROR")
        self.facet = facet


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(CardscopeError):
    """Base class for infrastructure/system errors."""


class ExecutionError(InfrastructureError):
    """The card source failed to execute a query plan."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
