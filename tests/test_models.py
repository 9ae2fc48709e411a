"""Tests for the UnifiUser model and field mapping helpers."""

import pytest

from unifi_user_api import UnifiUser
from unifi_user_api.utils import get_api_field_mapping, map_api_data_to_model, normalize_mac


@pytest.mark.parametrize(
    "raw",
    ["AA:BB:CC:DD:EE:FF", "aa-bb-cc-dd-ee-ff", "aabb.ccdd.eeff", "AABBCCDDEEFF"],
)
def test_normalize_mac(raw):
    assert normalize_mac(raw) == "aa:bb:cc:dd:ee:ff"


def test_id_maps_to_api_underscore_id():
    assert get_api_field_mapping(UnifiUser) == {"_id": "id"}


def test_map_api_data_splits_known_and_extra_fields():
    model_fields, extra_fields = map_api_data_to_model(
        {"_id": "1", "mac": "aa:bb:cc:dd:ee:ff", "tx_bytes": 10, "id": "ignored"}, UnifiUser
    )
    assert model_fields == {"id": "1", "mac": "aa:bb:cc:dd:ee:ff"}
    assert extra_fields == {"tx_bytes": 10, "id": "ignored"}


def test_from_api_keeps_unknown_fields_for_write_back():
    record = {
        "_id": "5f1a2b3c4d5e6f7a8b9c0d1e",
        "mac": "aa:bb:cc:dd:ee:ff",
        "name": "laptop",
        "blocked": False,
        "fingerprint_source": 0,
        "dev_cat": 1,
        "tags": ["office"],
    }

    user = UnifiUser.from_api(record)

    assert user.id == "5f1a2b3c4d5e6f7a8b9c0d1e"
    assert user.blocked is False
    assert user._extra_fields == {"fingerprint_source": 0, "dev_cat": 1, "tags": ["office"]}
    assert user.to_api() == record


def test_from_api_normalizes_mac():
    assert UnifiUser.from_api({"mac": "AA-BB-CC-DD-EE-FF"}).mac == "aa:bb:cc:dd:ee:ff"


def test_to_api_drops_unset_fields():
    assert UnifiUser(mac="aa:bb:cc:dd:ee:ff", note="").to_api() == {
        "mac": "aa:bb:cc:dd:ee:ff",
        "note": "",
    }


def test_extra_fields_do_not_affect_equality():
    a = UnifiUser.from_api({"mac": "aa:bb:cc:dd:ee:ff", "x": 1})
    b = UnifiUser(mac="aa:bb:cc:dd:ee:ff")
    assert a == b
