"""
Controller-version gate for updating users.

Controllers from 6.0.43 onwards accept ``PUT rest/user/{id}``; older ones only
take updates through the ``group/user`` batch endpoint. The two protocols are
modelled as :class:`UpdateStrategy` variants, and one is chosen from the
controller version before any update is sent.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from semver import Version

from .envelope import Cardinality
from .logging import get_logger
from .models.user import UnifiUser

if TYPE_CHECKING:
    from .api_client import UnifiUserClient

logger = get_logger(__name__)

CONTROLLER_V6_0_43 = Version(6, 0, 43)


def parse_controller_version(version: Optional[str]) -> Optional[Version]:
    """
    Parse a controller's self-reported version string with semantic-version precedence.

    A ``-suffix`` is a pre-release, so ``"6.0.43-1"`` sorts below ``"6.0.43"``;
    ``+build`` metadata is ignored when comparing. A leading ``v`` and missing minor or
    patch parts are accepted.

    Args:
        version: Version string such as ``"7.4.162"``.

    Returns:
        The parsed version, or ``None`` if the string is empty or cannot be parsed.
    """
    if not version:
        return None
    text = version.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    try:
        return Version.parse(text, optional_minor_and_patch=True)
    except ValueError:
        logger.warning(
            f"Could not parse controller version '{version}'; assuming a pre-{CONTROLLER_V6_0_43} controller.")
        return None


class UpdateStrategy(ABC):
    """Wire protocol used to write a modified user back to the controller."""

    name = "abstract"

    @abstractmethod
    def update(
        self,
        client: "UnifiUserClient",
        site_name: str,
        user: UnifiUser,
        timeout: Optional[float] = None,
    ) -> UnifiUser:
        """Write ``user`` and return the controller's resulting record."""

    def __repr__(self):
        return f"{type(self).__name__}()"


class LegacyGroupWrite(UpdateStrategy):
    """Write through ``POST group/user`` and trust the echoed record."""

    name = "legacy-group-write"

    def update(self, client, site_name, user, timeout=None):
        path = f"s/{site_name}/group/user"
        logger.info(
            f"Updating user {user.id} on site {site_name} via {path} (legacy group write)")
        return client._group_write(site_name, user, timeout=timeout)


class RestWriteThenRead(UpdateStrategy):
    """Write through ``PUT rest/user/{id}``, then return a fresh read of the record.

    The PUT response can hold a partial or stale copy of the user, so it is only
    checked for a controller error and otherwise discarded.
    """

    name = "rest-write-then-read"

    def update(self, client, site_name, user, timeout=None):
        path = f"s/{site_name}/rest/user/{user.id}"
        logger.info(
            f"Updating user {user.id} on site {site_name} via PUT {path}")
        client._request(
            "PUT", path, Cardinality.ANY, body=user.to_api(), timeout=timeout)

        return client.get_user(site_name, user.id, timeout=timeout)


def select_update_strategy(version: Optional[str]) -> UpdateStrategy:
    """
    Pick the update protocol for a controller version.

    Missing or unparseable versions fall back to :class:`LegacyGroupWrite`.
    """
    parsed = parse_controller_version(version)
    if parsed is not None and parsed >= CONTROLLER_V6_0_43:
        strategy: UpdateStrategy = RestWriteThenRead()
    else:
        strategy = LegacyGroupWrite()
    logger.debug(f"Controller version {version!r} uses {strategy.name} updates")
    return strategy
