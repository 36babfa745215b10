"""Custom exception classes for the sysidtools library."""

class SysidError(Exception):
    """Base class for all custom exceptions in the sysidtools library."""
    pass

class SysidConfigError(SysidError):
    """Exception raised for errors in configuration."""
    pass

class SysidDataError(SysidError):
    """Exception raised for errors related to input data."""
    pass

class SysidShapeMismatchError(SysidDataError):
    """Exception raised when observed and estimated arrays differ in shape."""
    pass

class SysidDomainError(SysidDataError):
    """Exception raised when an argument lies outside a formula's domain."""
    pass

class SysidEstimationError(SysidError):
    """Exception raised for errors during the estimation process."""
    pass

class SysidPlottingError(SysidError):
    """Exception raised for errors during plot generation."""
    pass
