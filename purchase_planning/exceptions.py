class PlanningError(Exception):
    """Base exception for the Purchase Planning System."""

    default_message = "An error occurred in the Purchase Planning System"

    def __init__(self, message=None, code=None, details=None):
        """Initialize the exception.

        Args:
            message: Error message, the class default when omitted
            code: Short machine readable error code
            details: Additional error details
        """
        self.message = message or self.default_message
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self):
        """Convert the exception to a dictionary."""
        error_dict = {
            'error': self.__class__.__name__,
            'message': self.message,
        }

        if self.code:
            error_dict['code'] = self.code

        if self.details:
            error_dict['details'] = self.details

        return error_dict


class ConfigError(PlanningError):
    """Invalid or incomplete settings."""
    default_message = "Configuration error"


class DatabaseError(PlanningError):
    """Failure reading from or writing to the data store."""
    default_message = "Database error"


class ValidationError(PlanningError):
    """Malformed input at the command line or request boundary.

    ``details`` maps each invalid field to its message.
    """
    default_message = "Validation error"

    @property
    def field_errors(self):
        return dict(self.details or {})


class ForecastError(PlanningError):
    default_message = "Forecasting error"


class PlanError(PlanningError):
    """A purchase plan cannot be saved."""
    default_message = "Purchase plan error"


class NotFoundError(PlanningError):
    default_message = "Resource not found"
