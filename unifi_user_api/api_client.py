from typing import Any, Dict, List, Mapping, Optional, Sequence

from .commands import BlockStation, ForgetStations, StationCommand, UnblockStation
from .envelope import Cardinality, UnifiEnvelope, classify
from .models.user import UnifiUser
from .versioning import UpdateStrategy, select_update_strategy
from .logging import get_logger
from .utils import normalize_mac
from .exceptions import (
    UnifiMalformedResponseError,
    UnifiNotFoundError,
)

logger = get_logger(__name__)


class UnifiUserClient:
    """
    Client for the user (known client station) endpoints of a UniFi Network controller.

    The controller exposes users through several differently shaped endpoints
    (``stat/user``, ``rest/user``, ``group/user`` and ``cmd/stamgr``). This class
    hides those behind one set of methods, turns controller responses into
    :class:`~unifi_user_api.models.UnifiUser` objects and raises a distinct exception
    for each kind of failure.

    The client keeps no records between calls. Its only state is the transport, the
    controller version and the update protocol chosen for that version, so one
    instance may be shared as long as the transport may.

    Note:
        This client interacts with the UniFi Controller's **undocumented** private API.
        Response structures and endpoint behavior may change without notice between
        controller versions.
    """

    def __init__(self, transport, controller_version: Optional[str] = None):
        """
        Initialize the client.

        Args:
            transport: Object exposing ``execute(method, path, body, timeout)`` and
                       ``get_status(timeout)``, usually a :class:`~unifi_user_api.UnifiTransport`.
            controller_version: Version string reported by the controller, e.g. ``"7.4.162"``.
                                Use :meth:`refresh_controller_version` to read it from the
                                controller instead.
        """
        self.transport = transport
        self._controller_version: Optional[str] = None
        self._update_strategy: UpdateStrategy = select_update_strategy(None)
        self.controller_version = controller_version

    @property
    def controller_version(self) -> Optional[str]:
        """The controller's version string. Setting it re-selects the update protocol."""
        return self._controller_version

    @controller_version.setter
    def controller_version(self, version: Optional[str]) -> None:
        self._controller_version = version
        self._update_strategy = select_update_strategy(version)

    @property
    def update_strategy(self) -> UpdateStrategy:
        """The update protocol selected for the current controller version."""
        return self._update_strategy

    def refresh_controller_version(self, timeout: Optional[float] = None) -> Optional[str]:
        """
        Read the controller version from its ``status`` endpoint.

        Returns:
            The reported ``server_version``, or ``None`` if the controller did not send one.

        Raises:
            UnifiAPIError: If the request fails.
            UnifiProtocolError: If the status document reports an error.
            UnifiMalformedResponseError: If the response is not an envelope.
        """
        body = self.transport.get_status(timeout=timeout)
        envelope = UnifiEnvelope.from_response(body, "status")
        envelope.raise_for_error("status")
        version = envelope.meta.extra.get("server_version")
        logger.info(f"Controller reports version {version}")
        self.controller_version = version
        return version

    def _request(
        self,
        method: str,
        path: str,
        cardinality: Cardinality,
        body: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Execute one request and classify its envelope."""
        response_body = self.transport.execute(method, path, body, timeout=timeout)
        envelope = UnifiEnvelope.from_response(response_body, path)
        return classify(envelope, cardinality, path)

    def _group_write(
        self, site_name: str, user: UnifiUser, timeout: Optional[float] = None
    ) -> UnifiUser:
        """
        Write a user through the ``group/user`` batch endpoint.

        The response nests one ``{meta, data}`` result per submitted object inside
        the outer envelope's ``data``.
        """
        path = f"s/{site_name}/group/user"
        payload = {"objects": [{"data": user.to_api()}]}

        batch = self._request("POST", path, Cardinality.ANY, body=payload, timeout=timeout)

        if len(batch) != 1:
            error_msg = f"Malformed group response from {path}: expected one result object, got {len(batch)}"
            logger.error(error_msg)
            raise UnifiMalformedResponseError(error_msg)

        entry = batch[0]
        if not isinstance(entry, Mapping) or not ("meta" in entry or "data" in entry):
            error_msg = f"Malformed group response from {path}: result object is not a {{meta, data}} envelope"
            logger.error(error_msg)
            raise UnifiMalformedResponseError(error_msg)

        inner = UnifiEnvelope.from_response(entry, path)
        return UnifiUser.from_api(classify(inner, Cardinality.EXACTLY_ONE, path))

    def get_user_by_mac(
        self, site_name: str, mac: str, timeout: Optional[float] = None
    ) -> UnifiUser:
        """
        Fetch a user by MAC address using the ``stat/user/{mac}`` endpoint.

        This endpoint returns some fields (such as the current ``ip``) that
        :meth:`get_user` does not.

        Args:
            site_name (str): The short name (ID) of the site.
            mac (str): Station MAC address, in any common notation.
            timeout (Optional[float]): Request timeout in seconds.

        Returns:
            UnifiUser: The matching user.

        Raises:
            UnifiNotFoundError: If the controller returns no record, or more than one.
            UnifiProtocolError: If the controller reports an error.
            UnifiAPIError: If the HTTP request fails.
        """
        mac = normalize_mac(mac)
        path = f"s/{site_name}/stat/user/{mac}"
        logger.info(f"Fetching user {mac} on site {site_name} via {path}")
        record = self._request("GET", path, Cardinality.EXACTLY_ONE, timeout=timeout)
        return UnifiUser.from_api(record)

    def get_user(
        self, site_name: str, user_id: str, timeout: Optional[float] = None
    ) -> UnifiUser:
        """
        Fetch a user by identifier using the ``rest/user/{id}`` endpoint.

        Args:
            site_name (str): The short name (ID) of the site.
            user_id (str): The ``_id`` of the user.
            timeout (Optional[float]): Request timeout in seconds.

        Returns:
            UnifiUser: The matching user.

        Raises:
            UnifiNotFoundError: If the controller returns no record, or more than one.
            UnifiProtocolError: If the controller reports an error.
            UnifiAPIError: If the HTTP request fails.
        """
        path = f"s/{site_name}/rest/user/{user_id}"
        logger.info(f"Fetching user {user_id} on site {site_name} via {path}")
        record = self._request("GET", path, Cardinality.EXACTLY_ONE, timeout=timeout)
        return UnifiUser.from_api(record)

    def list_user(self, site_name: str, timeout: Optional[float] = None) -> List[UnifiUser]:
        """
        List every user known to the site using the ``rest/user`` endpoint.

        Args:
            site_name (str): The short name (ID) of the site.
            timeout (Optional[float]): Request timeout in seconds.

        Returns:
            List[UnifiUser]: All users, possibly empty.
        """
        path = f"s/{site_name}/rest/user"
        logger.info(f"Listing users on site {site_name} via {path}")
        records = self._request("GET", path, Cardinality.ANY, timeout=timeout)
        users = [UnifiUser.from_api(record) for record in records]
        logger.debug(f"Returning {len(users)} mapped UnifiUser objects.")
        return users

    def create_user(
        self, site_name: str, user: UnifiUser, timeout: Optional[float] = None
    ) -> UnifiUser:
        """
        Create a user using the ``group/user`` endpoint.

        Args:
            site_name (str): The short name (ID) of the site.
            user (UnifiUser): The user to create. ``id`` is normally left unset.
            timeout (Optional[float]): Request timeout in seconds.

        Returns:
            UnifiUser: The created user as returned by the controller.

        Raises:
            UnifiMalformedResponseError: If the batch response does not hold exactly one result object.
            UnifiProtocolError: If the controller reports an error, for the batch or for the object.
            UnifiNotFoundError: If the result object holds no created record.
            UnifiAPIError: If the HTTP request fails.
        """
        logger.info(
            f"Creating user {user.mac} on site {site_name} via s/{site_name}/group/user")
        return self._group_write(site_name, user, timeout=timeout)

    def update_user(
        self, site_name: str, user: UnifiUser, timeout: Optional[float] = None
    ) -> UnifiUser:
        """
        Update an existing user.

        Controllers at 6.0.43 or later are written with ``PUT rest/user/{id}`` and the
        user is then read back; older controllers (or an unknown version) are written
        through ``group/user``. See :mod:`unifi_user_api.versioning`.

        Args:
            site_name (str): The short name (ID) of the site.
            user (UnifiUser): The modified user. ``id`` must be set.
            timeout (Optional[float]): Request timeout in seconds, used for every request made.

        Returns:
            UnifiUser: The user as stored by the controller.

        Raises:
            ValueError: If ``user.id`` is not set.
        """
        if not user.id:
            raise ValueError("Cannot update a user without an id.")
        return self._update_strategy.update(self, site_name, user, timeout=timeout)

    def stamgr(
        self, site_name: str, command: StationCommand, timeout: Optional[float] = None
    ) -> List[UnifiUser]:
        """
        Send a station-manager command using the ``cmd/stamgr`` endpoint.

        Args:
            site_name (str): The short name (ID) of the site.
            command (StationCommand): The command to run.
            timeout (Optional[float]): Request timeout in seconds.

        Returns:
            List[UnifiUser]: The users the controller reports as affected. The number
            is not checked here.

        Raises:
            UnifiProtocolError: If the controller reports an error.
            UnifiAPIError: If the HTTP request fails.
        """
        path = f"s/{site_name}/cmd/stamgr"
        payload: Dict[str, Any] = command.to_payload()
        logger.debug(f"Sending {command.cmd} to {path}")
        records = self._request("POST", path, Cardinality.ANY, body=payload, timeout=timeout)
        return [UnifiUser.from_api(record) for record in records]

    def _stamgr_one(
        self, site_name: str, command: StationCommand, timeout: Optional[float] = None
    ) -> None:
        users = self.stamgr(site_name, command, timeout=timeout)
        if len(users) != 1:
            raise UnifiNotFoundError(
                f"{command.cmd} on site {site_name} affected {len(users)} users, expected 1")

    def block_user_by_mac(
        self, site_name: str, mac: str, timeout: Optional[float] = None
    ) -> None:
        """
        Block a station.

        Raises:
            UnifiNotFoundError: If the controller does not report exactly one blocked user.
        """
        logger.info(f"Blocking user {mac} on site {site_name}")
        self._stamgr_one(site_name, BlockStation(mac), timeout=timeout)

    def unblock_user_by_mac(
        self, site_name: str, mac: str, timeout: Optional[float] = None
    ) -> None:
        """
        Unblock a station.

        Raises:
            UnifiNotFoundError: If the controller does not report exactly one unblocked user.
        """
        logger.info(f"Unblocking user {mac} on site {site_name}")
        self._stamgr_one(site_name, UnblockStation(mac), timeout=timeout)

    def delete_user_by_mac(
        self, site_name: str, mac: str, timeout: Optional[float] = None
    ) -> None:
        """
        Forget a station.

        The controller drops the station from its table; this is not guaranteed to
        remove every trace of it.

        Raises:
            UnifiNotFoundError: If the controller does not report exactly one forgotten user.
        """
        logger.info(f"Forgetting user {mac} on site {site_name}")
        self._stamgr_one(site_name, ForgetStations([mac]), timeout=timeout)

    def forget_users_by_mac(
        self, site_name: str, macs: Sequence[str], timeout: Optional[float] = None
    ) -> List[UnifiUser]:
        """
        Forget several stations in one command.

        Args:
            site_name (str): The short name (ID) of the site.
            macs (Sequence[str]): MAC addresses to forget.
            timeout (Optional[float]): Request timeout in seconds.

        Returns:
            List[UnifiUser]: The users the controller reports as forgotten.

        Raises:
            ValueError: If ``macs`` is empty.
        """
        command = ForgetStations(macs)
        logger.info(f"Forgetting {len(command.macs)} users on site {site_name}")
        return self.stamgr(site_name, command, timeout=timeout)
