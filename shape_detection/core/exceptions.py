"""Custom exceptions for the application."""

class ApplicationError(Exception):
    """Base application error."""
    pass

class DetectionError(ApplicationError):
    """Base exception for detection-related errors."""
    pass

class InvalidInputError(DetectionError):
    """Zero-area image or pixel buffer of the wrong length."""
    pass

class ConfigError(ApplicationError):
    """Configuration-related errors."""
    pass
