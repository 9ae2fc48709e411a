"""
UniFi user API client for managing client stations on a UniFi Network controller.

This package provides a Python interface to the controller's user endpoints,
allowing callers to look up, list, create, update, block, unblock and forget
user records on a site.
"""

from .api_client import UnifiUserClient
from .transport import UnifiTransport
from .models import UnifiUser
from .commands import BlockStation, UnblockStation, ForgetStations
from .envelope import Cardinality, UnifiEnvelope, UnifiMeta
from .versioning import (
    CONTROLLER_V6_0_43,
    LegacyGroupWrite,
    RestWriteThenRead,
    UpdateStrategy,
)
from .exceptions import (
    UnifiControllerError,
    UnifiAuthenticationError,
    UnifiAPIError,
    UnifiDataError,
    UnifiMalformedResponseError,
    UnifiProtocolError,
    UnifiNotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "UnifiUserClient",
    "UnifiTransport",
    "UnifiUser",
    "BlockStation",
    "UnblockStation",
    "ForgetStations",
    "Cardinality",
    "UnifiEnvelope",
    "UnifiMeta",
    "CONTROLLER_V6_0_43",
    "LegacyGroupWrite",
    "RestWriteThenRead",
    "UpdateStrategy",
    "UnifiControllerError",
    "UnifiAuthenticationError",
    "UnifiAPIError",
    "UnifiDataError",
    "UnifiMalformedResponseError",
    "UnifiProtocolError",
    "UnifiNotFoundError",
]
