import logging
import json
from typing import Any, Dict, Optional


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger namespaced under ``unifi_user_api``.

    Args:
        name: Optional specific logger name. If not provided, the package logger is returned.

    Returns:
        A logger instance for the specified name
    """
    if name is None:
        return logging.getLogger("unifi_user_api")
    elif name.startswith("unifi_user_api"):
        return logging.getLogger(name)
    else:
        return logging.getLogger(f"unifi_user_api.{name}")


def _truncate(text: str, max_length: int) -> str:
    if len(text) > max_length:
        return text[:max_length] + "... [truncated]"
    return text


def log_extra_fields(
    logger: logging.Logger,
    obj_name: str,
    obj_id: str,
    extra_fields: Dict[str, Any],
    max_length: int = 300,
):
    """
    Log controller fields that did not map onto a model attribute.

    Args:
        logger: Logger to use
        obj_name: Name of the object type (e.g., 'User').
        obj_id: Identifier for the specific object (e.g., MAC address).
        extra_fields: Fields returned by the controller but unknown to the model.
        max_length: Longest rendering of a single field value. Default is 300.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    if not extra_fields:
        logger.debug(f"No extra fields for {obj_name} {obj_id}")
        return

    rendered = {}
    for key, value in extra_fields.items():
        if isinstance(value, str):
            rendered[key] = _truncate(value, max_length)
        elif isinstance(value, (dict, list)):
            rendered[key] = _truncate(json.dumps(value, default=str), max_length)
        else:
            rendered[key] = value

    logger.debug(
        f"Extra fields for {obj_name} {obj_id}: {json.dumps(rendered, indent=2, default=str)}"
    )


def log_api_response(
    logger: logging.Logger,
    method: str,
    url: str,
    response_data: Any,
    status_code: int,
    max_length: int = 500,
):
    """
    Log a decoded API response body.

    Args:
        logger: Logger to use
        method: HTTP method of the request.
        url: The API URL that was called.
        response_data: The decoded JSON response.
        status_code: HTTP status code.
        max_length: Responses longer than this are truncated in the log. Default is 500.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    response_str = _truncate(json.dumps(response_data, default=str), max_length)
    logger.debug(
        f"API {method} response from {url} (Status: {status_code}):\n{response_str}"
    )
