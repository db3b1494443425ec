"""Error types raised while producing a prediction.

Every error carries a message that is safe to show to the user; the
controller surfaces ``str(exc)`` for any PredictorError.
"""


class PredictorError(Exception):
    """Base class for all recognized prediction failures."""


class InputValidationError(PredictorError):
    """Raised when required form input is missing. No network call is made."""


class InvalidSubjectError(PredictorError):
    """Raised when the AI reports the location or country as unrecognized."""


class ParseError(PredictorError):
    """Raised when no well-formed JSON object can be found in the AI response."""


class SchemaError(PredictorError):
    """Raised when the AI response JSON is missing fields or has the wrong shape."""


class ServiceError(PredictorError):
    """Raised when the AI service call itself fails (network, auth, quota)."""
