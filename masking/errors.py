"""
Error taxonomy for the masking engine.

Only configuration problems are ever raised. They surface synchronously when a
configuration, rule or custom pattern is built, never in the middle of a
mask() call.
"""


class MaskingError(Exception):
    """
    Base exception for all masking engine errors
    """
    pass


class ConfigurationError(MaskingError, ValueError):
    """
    Raised when a masking configuration, rule or custom pattern is invalid
    (duplicate pattern name, malformed regular expression, unknown hash
    algorithm, unknown environment, ...).
    """
    pass
