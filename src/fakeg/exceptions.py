class FakegError(Exception):
    """Base class for exceptions in the fakeg package."""

    pass


class ValidationError(FakegError):
    """Exception raised for errors during input validation."""

    pass


class ConfigurationError(FakegError):
    """Exception raised for invalid program, dialect or render settings."""

    pass


class ParsingError(FakegError):
    """Exception raised when a log yields no usable geometry."""

    pass


class RenderError(FakegError):
    """Exception raised when the Gaussian-format artifact cannot be written."""

    pass


class InternalCodeError(FakegError):
    """Exception raised for errors in the internal code."""

    pass
