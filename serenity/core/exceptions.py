"""
Custom exceptions for the Serenity platform.
"""

from typing import Optional, Any, Dict


class SerenityException(Exception):
    """Base exception for all Serenity-related errors."""
    
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(SerenityException):
    """Raised when a constructor, setter or entity action receives invalid input."""
    
    @property
    def field(self) -> Optional[str]:
        """Name of the field whose rule was violated, when known."""
        return self.details.get('field')


class ConfigurationError(SerenityException):
    """Raised when configuration is invalid."""
    pass


class SnapshotError(SerenityException):
    """Raised when a snapshot cannot be created or restored."""
    pass
