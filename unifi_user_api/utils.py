"""
Utility functions for the UniFi user API package.
"""

import dataclasses
from typing import Any, Dict, Tuple, Type

from .logging import get_logger

logger = get_logger(__name__)


def normalize_mac(mac_address: str) -> str:
    """
    Normalize a MAC address to lower-case colon-separated format.

    Args:
        mac_address: MAC address string in any format (with ``:``, ``-``, ``.`` separators or none).

    Returns:
        str: MAC address with colons between each pair of characters.
    """
    mac_clean = (
        mac_address.replace(":", "").replace(
            "-", "").replace(".", "").lower()
    )

    return ":".join(mac_clean[i: i + 2] for i in range(0, len(mac_clean), 2))


def get_api_field_mapping(model_class: Type) -> Dict[str, str]:
    """
    Create a mapping between API field names and model attribute names.

    Examines dataclass fields with metadata to find mappings between
    API field names (like '_id') and Python attribute names (like 'id').

    Args:
        model_class: The dataclass model to examine for field mappings

    Returns:
        Dictionary mapping UniFi API field names to Python model attribute names
    """
    if not dataclasses.is_dataclass(model_class):
        return {}

    field_mapping = {}

    for field in dataclasses.fields(model_class):
        if "unifi_api_field" in field.metadata:
            api_field_name = field.metadata["unifi_api_field"]
            field_mapping[api_field_name] = field.name

    return field_mapping


def map_api_data_to_model(
    data: Dict[str, Any], model_class: Type
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Maps API data to model fields, separating model fields from extra fields.

    Args:
        data: Input dictionary from API response
        model_class: The dataclass model to map data to

    Returns:
        Tuple containing (model_fields, extra_fields) where:
            - model_fields: Dictionary of fields that map to the model's ``__init__`` parameters
            - extra_fields: Dictionary of fields that don't map to the model
    """
    valid_params = {
        f.name for f in dataclasses.fields(model_class) if f.init
    }

    field_map = get_api_field_mapping(model_class)

    model_fields = {}
    extra_fields = {}

    for api_key, value in data.items():
        mapped_key = None

        if api_key in field_map and field_map[api_key] in valid_params:
            mapped_key = field_map[api_key]
            logger.debug(f"Mapped field {api_key} to {mapped_key}")

        elif api_key in valid_params and api_key not in field_map.values():
            mapped_key = api_key

        if mapped_key is not None:
            model_fields[mapped_key] = value
        else:
            extra_fields[api_key] = value

    return model_fields, extra_fields


def map_model_to_api_data(instance: Any) -> Dict[str, Any]:
    """
    Convert a dataclass instance back into a UniFi API dictionary.

    Attributes are renamed to their API field names, ``None`` values are dropped and
    the instance's ``_extra_fields`` (if any) are merged back in unchanged.

    Args:
        instance: A dataclass instance previously built from API data

    Returns:
        Dictionary suitable for sending to the controller
    """
    reverse_field_map = {
        v: k for k, v in get_api_field_mapping(type(instance)).items()
    }

    data: Dict[str, Any] = dict(getattr(instance, "_extra_fields", None) or {})

    for field in dataclasses.fields(instance):
        if not field.init:
            continue
        value = getattr(instance, field.name)
        if value is None:
            continue
        data[reverse_field_map.get(field.name, field.name)] = value

    return data
