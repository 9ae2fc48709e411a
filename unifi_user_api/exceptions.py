from typing import Optional


class UnifiControllerError(Exception):
    """Base exception for UnifiUserClient errors."""

    pass


class UnifiAuthenticationError(UnifiControllerError):
    """Raised when authentication with the UniFi Controller fails."""

    pass


class UnifiAPIError(UnifiControllerError):
    """Raised when an HTTP call to the UniFi Controller fails (network error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UnifiDataError(UnifiControllerError):
    """Raised when there is an error parsing data from the UniFi Controller."""

    pass


class UnifiMalformedResponseError(UnifiDataError):
    """Raised when a response does not follow the expected ``{meta, data}`` envelope shape."""

    pass


class UnifiProtocolError(UnifiControllerError):
    """Raised when the controller reports an error in the response ``meta`` block."""

    def __init__(self, message: str, rc: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.rc = rc


class UnifiNotFoundError(UnifiControllerError):
    """Raised when a response does not contain exactly the one record that was expected."""

    pass
