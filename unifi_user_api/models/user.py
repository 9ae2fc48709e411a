from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..exceptions import UnifiMalformedResponseError
from ..logging import get_logger, log_extra_fields
from ..utils import map_api_data_to_model, map_model_to_api_data, normalize_mac

logger = get_logger(__name__)


@dataclass
class UnifiUser:
    """Represents a user (known client station) record on a UniFi site.

    A user is keyed by ``id`` for its whole lifetime and by ``mac`` within a site.
    Fields the controller returns that are not listed here are kept in
    ``_extra_fields`` and sent back untouched by :meth:`to_api`.

    Attributes:
        mac: MAC address of the station, lower-case and colon separated.
        id: Site-scoped identifier (API field ``_id``). ``None`` until the user is created.
        site_id: Identifier for the site the user belongs to.
        name: Alias given to the user.
        hostname: Hostname reported by the station.
        note: Free-form note.
        noted: Indicates if the user has a note.
        usergroup_id: Identifier for the user group.
        network_id: Identifier for the network the fixed IP belongs to.
        use_fixedip: Whether a fixed IP is assigned.
        fixed_ip: Fixed IP address assigned to the user.
        blocked: Whether the station is blocked.
        is_guest: Indicates if the user is a guest.
        is_wired: Indicates if the user is connected via wired connection.
        ip: Last seen IP address. Only returned by the ``stat/user`` endpoint.
        oui: Organizationally Unique Identifier.
        first_seen: Timestamp of when the user was first seen.
        last_seen: Timestamp of when the user was last seen.
    """
    mac: str
    id: Optional[str] = field(default=None, metadata={"unifi_api_field": "_id"})
    site_id: Optional[str] = None
    name: Optional[str] = None
    hostname: Optional[str] = None
    note: Optional[str] = None
    noted: Optional[bool] = None
    usergroup_id: Optional[str] = None
    network_id: Optional[str] = None
    use_fixedip: Optional[bool] = None
    fixed_ip: Optional[str] = None
    blocked: Optional[bool] = None
    is_guest: Optional[bool] = None
    is_wired: Optional[bool] = None
    ip: Optional[str] = None
    oui: Optional[str] = None
    first_seen: Optional[int] = None
    last_seen: Optional[int] = None

    _extra_fields: Dict[str, Any] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        if self.mac:
            self.mac = normalize_mac(self.mac)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "UnifiUser":
        """
        Build a user from a controller record, keeping unknown fields in ``_extra_fields``.

        Raises:
            UnifiMalformedResponseError: If the record is not a JSON object.
        """
        if not isinstance(data, Mapping):
            error_msg = f"Expected a user record object, got {type(data).__name__}: {data!r}"
            logger.error(error_msg)
            raise UnifiMalformedResponseError(error_msg)
        model_fields, extra_fields = map_api_data_to_model(data, cls)
        model_fields.setdefault("mac", "")
        user = cls(**model_fields)
        user._extra_fields = extra_fields
        log_extra_fields(logger, "User", user.mac or str(user.id), extra_fields)
        return user

    def to_api(self) -> Dict[str, Any]:
        """Return the controller representation of this user."""
        return map_model_to_api_data(self)
