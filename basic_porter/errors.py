"""
Exceptions raised by the BASIC porting toolkit.

Source text never raises: malformed programs are reported through warnings,
errors and issues. Only the one-time table loading can fail fatally.
"""


class PorterError(Exception):
    """Base class for toolkit errors."""

    def __init__(self, message, path=None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self):
        if self.path:
            return f"{self.__class__.__name__}: {self.path}: {self.message}"
        return f"{self.__class__.__name__}: {self.message}"


class ConfigurationError(PorterError):
    """Rule set or keyword tables could not be loaded."""
    pass
