import pytest

from unifi_user_api import UnifiUserClient


class FakeTransport:
    """Records every request and answers from a queue of canned bodies."""

    def __init__(self) -> None:
        self.calls = []
        self.responses = []
        self.status = {"meta": {"rc": "ok", "server_version": "7.4.162", "up": True}, "data": []}

    def queue(self, *bodies):
        self.responses.extend(bodies)

    def execute(self, method, path, body=None, timeout=None):
        self.calls.append((method, path, body, timeout))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get_status(self, timeout=None):
        self.calls.append(("GET", "status", None, timeout))
        return self.status


def ok(*records):
    return {"meta": {"rc": "ok"}, "data": list(records)}


def error(msg, *records):
    return {"meta": {"rc": "error", "msg": msg}, "data": list(records)}


def user_record(mac="aa:bb:cc:dd:ee:ff", _id="5f1a2b3c4d5e6f7a8b9c0d1e", **fields):
    record = {"_id": _id, "mac": mac, "site_id": "5e0a1b2c3d4e5f6a7b8c9d0e"}
    record.update(fields)
    return record


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    return UnifiUserClient(transport, controller_version="7.4.162")


@pytest.fixture
def legacy_client(transport):
    return UnifiUserClient(transport, controller_version="5.14.23")
