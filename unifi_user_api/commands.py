"""
Station-manager (``cmd/stamgr``) commands.

Each supported command is its own dataclass so the required parameters are
checked when the command is built, not when the controller rejects it.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Sequence, Union

from .utils import normalize_mac


@dataclass(frozen=True)
class BlockStation:
    """Prevent the station from associating with the site."""
    mac: str

    cmd: ClassVar[str] = "block-sta"

    def to_payload(self) -> Dict[str, Any]:
        return {"cmd": self.cmd, "mac": normalize_mac(self.mac)}


@dataclass(frozen=True)
class UnblockStation:
    """Lift a block placed with :class:`BlockStation`."""
    mac: str

    cmd: ClassVar[str] = "unblock-sta"

    def to_payload(self) -> Dict[str, Any]:
        return {"cmd": self.cmd, "mac": normalize_mac(self.mac)}


@dataclass(frozen=True)
class ForgetStations:
    """Remove stations from the controller's station table."""
    macs: Sequence[str]

    cmd: ClassVar[str] = "forget-sta"

    def __post_init__(self):
        if isinstance(self.macs, str):
            raise TypeError("macs must be a sequence of MAC addresses, not a string")
        if not self.macs:
            raise ValueError("At least one MAC address is required.")

    def to_payload(self) -> Dict[str, Any]:
        macs: List[str] = [normalize_mac(m) for m in self.macs]
        return {"cmd": self.cmd, "macs": macs}


StationCommand = Union[BlockStation, UnblockStation, ForgetStations]
