"""Tests for the controller-version gate and the two update protocols."""

import pytest

from conftest import error, ok, user_record
from unifi_user_api import UnifiUser, UnifiUserClient
from unifi_user_api.exceptions import UnifiNotFoundError, UnifiProtocolError
from unifi_user_api.versioning import (
    CONTROLLER_V6_0_43,
    LegacyGroupWrite,
    RestWriteThenRead,
    parse_controller_version,
    select_update_strategy,
)


def test_threshold_constant():
    assert str(CONTROLLER_V6_0_43) == "6.0.43"


@pytest.mark.parametrize(
    "text",
    ["6.0.43", "6.0.45", "6.1.0", "7.4.162", "8.0.7", "7.4.162-unifi", "6.0.43+build.5", "v6.0.43", "7"],
)
def test_new_controllers_use_rest_write_then_read(text):
    assert isinstance(select_update_strategy(text), RestWriteThenRead)


@pytest.mark.parametrize("text", ["6.0.42", "5.14.23", "6.0.9", "5.6.40", "6.0.43-1", "6.0.43-rc.2", "6"])
def test_old_controllers_use_legacy_group_write(text):
    assert isinstance(select_update_strategy(text), LegacyGroupWrite)


@pytest.mark.parametrize("text", [None, "", "unknown", "not.a.version!"])
def test_missing_or_unparseable_version_falls_back_to_legacy(text):
    assert parse_controller_version(text) is None
    assert isinstance(select_update_strategy(text), LegacyGroupWrite)


def test_version_comparison_is_numeric_not_lexical():
    assert parse_controller_version("6.0.100") > parse_controller_version("6.0.43")


def test_pre_release_sorts_below_release():
    assert parse_controller_version("6.0.43-1") < CONTROLLER_V6_0_43
    assert parse_controller_version("7.4.162-unifi") > CONTROLLER_V6_0_43


def test_strategy_is_selected_when_version_changes(transport):
    client = UnifiUserClient(transport)
    assert isinstance(client.update_strategy, LegacyGroupWrite)

    client.controller_version = "6.5.55"
    assert isinstance(client.update_strategy, RestWriteThenRead)


def test_refresh_controller_version_reads_status(transport):
    client = UnifiUserClient(transport)

    assert client.refresh_controller_version(timeout=3) == "7.4.162"

    assert transport.calls == [("GET", "status", None, 3)]
    assert client.controller_version == "7.4.162"
    assert isinstance(client.update_strategy, RestWriteThenRead)


def test_refresh_controller_version_without_server_version(transport):
    transport.status = {"meta": {"rc": "ok"}, "data": []}
    client = UnifiUserClient(transport, controller_version="7.0.0")

    assert client.refresh_controller_version() is None
    assert isinstance(client.update_strategy, LegacyGroupWrite)


def test_update_new_controller_puts_then_reads(client, transport):
    put_echo = user_record(name="stale")
    fresh = user_record(name="fresh", note="read back")
    transport.queue(ok(put_echo), ok(fresh))
    user = UnifiUser(mac="aa:bb:cc:dd:ee:ff", id="5f1a2b3c4d5e6f7a8b9c0d1e", name="fresh")

    result = client.update_user("default", user, timeout=7)

    assert transport.calls == [
        ("PUT", "s/default/rest/user/5f1a2b3c4d5e6f7a8b9c0d1e",
         {"_id": "5f1a2b3c4d5e6f7a8b9c0d1e", "mac": "aa:bb:cc:dd:ee:ff", "name": "fresh"}, 7),
        ("GET", "s/default/rest/user/5f1a2b3c4d5e6f7a8b9c0d1e", None, 7),
    ]
    assert result.name == "fresh"
    assert result.note == "read back"


def test_update_new_controller_accepts_empty_put_echo(client, transport):
    transport.queue(ok(), ok(user_record(name="fresh")))
    result = client.update_user("default", UnifiUser(mac="aa:bb:cc:dd:ee:ff", id="5f1a2b3c4d5e6f7a8b9c0d1e"))
    assert result.name == "fresh"


def test_update_new_controller_does_not_read_after_failed_write(client, transport):
    transport.queue(error("api.err.InvalidPayload"))

    with pytest.raises(UnifiProtocolError):
        client.update_user("default", UnifiUser(mac="aa:bb:cc:dd:ee:ff", id="abc"))

    assert [c[0] for c in transport.calls] == ["PUT"]


def test_update_new_controller_read_not_found(client, transport):
    transport.queue(ok(), ok())
    with pytest.raises(UnifiNotFoundError):
        client.update_user("default", UnifiUser(mac="aa:bb:cc:dd:ee:ff", id="abc"))


def test_update_old_controller_uses_group_endpoint(legacy_client, transport):
    echoed = user_record(name="renamed")
    transport.queue(ok({"meta": {"rc": "ok"}, "data": [echoed]}))
    user = UnifiUser(mac="aa:bb:cc:dd:ee:ff", id="5f1a2b3c4d5e6f7a8b9c0d1e", name="renamed")

    result = legacy_client.update_user("default", user, timeout=2)

    assert len(transport.calls) == 1
    method, path, body, timeout = transport.calls[0]
    assert (method, path, timeout) == ("POST", "s/default/group/user", 2)
    assert body == {"objects": [{"data": user.to_api()}]}
    assert all("rest/user" not in c[1] for c in transport.calls)
    assert result.name == "renamed"


def test_update_requires_id(client, transport):
    with pytest.raises(ValueError):
        client.update_user("default", UnifiUser(mac="aa:bb:cc:dd:ee:ff"))
    assert transport.calls == []


def test_refresh_controller_version_surfaces_status_error(transport):
    transport.status = {"meta": {"rc": "error", "msg": "api.err.LoginRequired", "server_version": "7.4.162"}, "data": []}
    client = UnifiUserClient(transport, controller_version="5.14.23")

    with pytest.raises(UnifiProtocolError, match="api.err.LoginRequired"):
        client.refresh_controller_version()
    assert client.controller_version == "5.14.23"
