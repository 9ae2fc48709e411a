"""
The ``{meta, data}`` envelope every UniFi controller response is wrapped in,
and the rules for turning an envelope into either records or an exception.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .logging import get_logger
from .exceptions import (
    UnifiMalformedResponseError,
    UnifiNotFoundError,
    UnifiProtocolError,
)

logger = get_logger(__name__)


class Cardinality(Enum):
    """How many records a response must hold to count as a success."""

    EXACTLY_ONE = "exactly_one"
    ANY = "any"


@dataclass
class UnifiMeta:
    """The ``meta`` block of a controller response.

    Attributes:
        rc: Result code, ``"ok"`` on success and ``"error"`` otherwise.
        msg: Message accompanying the result code (e.g. ``api.err.NoSiteContext``).
        error: Explicit error message, sent by some endpoints instead of ``msg``.
        extra: Remaining meta keys (``count``, ``server_version``, ...).
    """
    rc: Optional[str] = None
    msg: Optional[str] = None
    error: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "UnifiMeta":
        extra = {k: v for k, v in data.items() if k not in ("rc", "msg", "error")}
        return cls(
            rc=data.get("rc"),
            msg=data.get("msg"),
            error=data.get("error"),
            extra=extra,
        )

    def error_message(self) -> Optional[str]:
        """Return the error reported by the controller, or ``None`` if the call succeeded."""
        if self.error:
            return str(self.error)
        if self.rc is not None and self.rc != "ok":
            return str(self.msg) if self.msg else str(self.rc)
        return None


@dataclass
class UnifiEnvelope:
    """A decoded controller response: a ``meta`` block and an ordered ``data`` list."""
    meta: UnifiMeta
    data: List[Any]

    @classmethod
    def from_response(cls, body: Any, uri: str = "") -> "UnifiEnvelope":
        """
        Build an envelope from a decoded JSON body.

        Args:
            body: The decoded response body.
            uri: The URI that produced the body, used in error messages.

        Raises:
            UnifiMalformedResponseError: If the body, its ``meta`` or its ``data`` has the wrong type.
        """
        if not isinstance(body, Mapping):
            error_msg = f"Unexpected API response format for {uri}: expected an object, got {type(body).__name__}"
            logger.warning(error_msg)
            raise UnifiMalformedResponseError(error_msg)

        raw_meta = body.get("meta")
        if raw_meta is None:
            raw_meta = {}
        if not isinstance(raw_meta, Mapping):
            error_msg = f"Unexpected 'meta' in API response for {uri}: {raw_meta!r}"
            logger.warning(error_msg)
            raise UnifiMalformedResponseError(error_msg)

        raw_data = body.get("data")
        if raw_data is None:
            raw_data = []
        if not isinstance(raw_data, list):
            error_msg = f"Unexpected 'data' in API response for {uri}: expected a list, got {type(raw_data).__name__}"
            logger.warning(error_msg)
            raise UnifiMalformedResponseError(error_msg)

        return cls(meta=UnifiMeta.from_api(raw_meta), data=raw_data)

    def raise_for_error(self, uri: str = "") -> None:
        """Raise :class:`UnifiProtocolError` if the ``meta`` block carries an error."""
        message = self.meta.error_message()
        if message is not None:
            logger.error(f"Controller reported an error for {uri}: {message}")
            raise UnifiProtocolError(message, rc=self.meta.rc)


def classify(envelope: UnifiEnvelope, cardinality: Cardinality, uri: str = "") -> Any:
    """
    Classify an envelope against a cardinality expectation.

    A ``meta`` error always wins, even when ``data`` is not empty.

    Args:
        envelope: The decoded envelope.
        cardinality: How many records the caller expects.
        uri: The URI that produced the envelope, used in error messages.

    Returns:
        The single record for ``EXACTLY_ONE``, the full ``data`` list for ``ANY``.

    Raises:
        UnifiProtocolError: If the controller reported an error.
        UnifiNotFoundError: If ``EXACTLY_ONE`` was expected and ``data`` does not hold exactly one record.
    """
    envelope.raise_for_error(uri)

    if cardinality is Cardinality.EXACTLY_ONE:
        if len(envelope.data) != 1:
            logger.debug(
                f"Expected exactly one record from {uri}, got {len(envelope.data)}")
            raise UnifiNotFoundError(
                f"Expected exactly one record from {uri}, got {len(envelope.data)}")
        return envelope.data[0]

    return envelope.data
