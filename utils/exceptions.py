"""
Custom exception hierarchy for the cross-validated parameter search.
"""

class ParamSearchException(Exception):
    """Base exception for all search errors."""
    pass

class ConfigurationError(ParamSearchException):
    """Search configuration is invalid or a capability is disabled."""
    pass

class ValidationError(ParamSearchException, ValueError):
    """Input data or parameter specification failed validation."""
    pass

class IndexOutOfRangeError(ValidationError, IndexError):
    """Candidate index outside the parameter grid."""
    pass

class EvaluationError(ParamSearchException):
    """Fitting or scoring a candidate on a fold failed."""
    pass

class InternalConsistencyError(ParamSearchException):
    """Fold results were reassembled out of order or incompletely."""
    pass

class FitFailedWarning(UserWarning):
    """A fold fit failed and its score was replaced by error_score."""
    pass
