"""Exception hierarchy for diskinfo."""


class DiskInfoError(Exception):
    """Base exception for diskinfo errors"""
    pass


class ConfigError(DiskInfoError):
    """Raised when configuration cannot be loaded or is invalid"""
    pass
