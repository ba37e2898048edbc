"""Custom exceptions for the Daikin SkyFi integration."""


class DaikinSkyfiError(Exception):
    """Base exception for Daikin SkyFi."""


class DaikinSkyfiConnectionError(DaikinSkyfiError):
    """Raised when the adapter cannot be reached or answers with an error."""


class DaikinSkyfiValidationError(DaikinSkyfiError):
    """Raised when a command or configuration value is not acceptable."""
