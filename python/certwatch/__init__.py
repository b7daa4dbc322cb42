from .constants import VERSION

__version__ = VERSION


class CertWatchBaseException(Exception):
    """
    Base class for all custom exceptions we use in our code
    """


__all__ = ["CertWatchBaseException", "__version__"]
