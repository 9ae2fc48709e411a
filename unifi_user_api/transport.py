import json
import time
import base64
import binascii

import requests
import urllib3

from typing import Any, Dict, Optional

from .logging import get_logger, log_api_response
from .exceptions import (
    UnifiAuthenticationError,
    UnifiAPIError,
    UnifiDataError,
)

logger = get_logger(__name__)

SUPPORTED_METHODS = ("GET", "POST", "PUT")


class UnifiTransport:
    """
    HTTP session against a UniFi Network controller.

    Handles login, session renewal on ``401``, CSRF tokens for UniFi OS consoles and
    JSON decoding. Everything above the HTTP layer (envelopes, records, errors
    reported by the controller) is left to :class:`~unifi_user_api.UnifiUserClient`.
    """

    def __init__(
        self,
        controller_url,
        username,
        password,
        is_udm_pro=False,
        verify_ssl=True,
        auth_retry_enabled=True,
        auth_retry_count=3,
        auth_retry_delay=1,
        authenticate=True,
    ):
        """
        Create the session and (by default) log in.

        Args:
            controller_url: Base URL of the UniFi Controller, e.g. ``https://unifi:8443``.
            username: Username for authentication. Must be a local account.
            password: Password for authentication.
            is_udm_pro: Whether the controller runs on UniFi OS (UDM, UDR, UCG, Cloud Key Gen2+).
                        Defaults to False.
            verify_ssl: True to verify certificates, False to skip verification, or a path
                        to a CA bundle. Defaults to True.
            auth_retry_enabled: Whether to log in again when the session expires. Defaults to True.
            auth_retry_count: Maximum number of re-authentication attempts (1-10). Defaults to 3.
            auth_retry_delay: Delay in seconds between attempts (0.1-30). Defaults to 1.
            authenticate: Whether to log in immediately. Defaults to True.
        """
        if auth_retry_count < 1 or auth_retry_count > 10:
            raise ValueError("auth_retry_count must be between 1 and 10")
        if auth_retry_delay < 0.1 or auth_retry_delay > 30:
            raise ValueError("auth_retry_delay must be between 0.1 and 30")

        logger.debug(
            f"Initializing UnifiTransport with URL: {controller_url}, is_udm_pro: {is_udm_pro}"
        )
        self.controller_url = controller_url.rstrip("/")
        self.is_udm_pro = is_udm_pro
        self.session = requests.Session()
        self.verify_ssl = verify_ssl

        self.auth_retry_enabled = auth_retry_enabled
        self.auth_retry_count = auth_retry_count
        self.auth_retry_delay = auth_retry_delay

        self._username = username
        self._password = password

        if is_udm_pro:
            self.network_url = f"{self.controller_url}/proxy/network"
        else:
            self.network_url = self.controller_url

        if not verify_ssl:
            logger.warning(
                "SSL certificate verification is disabled. This is not recommended for production use."
            )
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        if authenticate:
            self.authenticate()

    def authenticate(self):
        """
        Log in to the UniFi Controller.

        UniFi OS consoles use ``/api/auth/login``; standalone controllers use ``/api/login``.

        Raises:
            UnifiAuthenticationError: If authentication fails.
        """
        if self.is_udm_pro:
            login_uri = f"{self.controller_url}/api/auth/login"
            logger.debug(f"Using UniFi OS authentication endpoint: {login_uri}")
        else:
            login_uri = f"{self.controller_url}/api/login"
            logger.debug(f"Using legacy authentication endpoint: {login_uri}")

        logger.debug(f"Attempting authentication with username: {self._username}")
        try:
            response = self.session.post(
                login_uri,
                json={"username": self._username, "password": self._password},
                verify=self.verify_ssl,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            error_msg = f"Authentication failed: {e}"
            logger.error(error_msg)
            raise UnifiAuthenticationError(error_msg) from e

        # UniFi OS answers with the user record rather than a meta block.
        if self.is_udm_pro:
            logger.info("Successfully connected to UniFi OS console.")
            return

        try:
            rc = response.json().get("meta", {}).get("rc")
        except (ValueError, AttributeError) as e:
            raise UnifiAuthenticationError(
                f"Authentication failed: unreadable login response: {e}") from e

        if rc == "ok":
            logger.info("Successfully connected to Unifi controller.")
        else:
            error_msg = "Failed to connect: Response code not ok."
            logger.warning(error_msg)
            raise UnifiAuthenticationError(error_msg)

    def _extract_csrf_token(self) -> Optional[str]:
        """Extracts the CSRF token from the UniFi OS ``TOKEN`` cookie if available."""
        unifi_cookie = self.session.cookies.get("TOKEN")
        if not unifi_cookie:
            logger.debug("UniFi OS 'TOKEN' cookie not found in session.")
            return None

        parts = unifi_cookie.split(".")
        if len(parts) != 3:
            logger.warning("Invalid JWT structure found in TOKEN cookie.")
            return None

        try:
            payload_b64 = parts[1]
            payload_b64 += "=" * (-len(payload_b64) % 4)
            payload_json = base64.urlsafe_b64decode(payload_b64).decode("utf-8")
            payload_data = json.loads(payload_json)
        except (binascii.Error, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Error decoding JWT payload from TOKEN cookie: {e}")
            return None

        csrf_token = payload_data.get("csrfToken")
        if csrf_token:
            logger.debug("Extracted CSRF token from cookie.")
        else:
            logger.warning("CSRF token not found within JWT payload.")
        return csrf_token

    def _request_kwargs(self, method, json_payload, timeout) -> Dict[str, Any]:
        request_kwargs: Dict[str, Any] = {
            "verify": self.verify_ssl,
            "timeout": timeout,
        }
        if json_payload is not None:
            request_kwargs["json"] = json_payload

        if self.is_udm_pro and method != "GET":
            csrf_token = self._extract_csrf_token()
            if csrf_token:
                request_kwargs["headers"] = {"X-Csrf-Token": csrf_token}
            else:
                logger.warning(
                    "UniFi OS detected, but CSRF token not found in cookies for non-GET request.")
        return request_kwargs

    def _send(self, method: str, url: str, json_payload=None, timeout=None) -> requests.Response:
        """
        Send one request, logging in again if the session has expired.

        Raises:
            UnifiAPIError: For network errors and non-2xx responses.
            UnifiAuthenticationError: If re-authentication fails.
        """
        try:
            response = self.session.request(
                method, url, **self._request_kwargs(method, json_payload, timeout))

            if response.status_code == 401 and self.auth_retry_enabled:
                for retry in range(self.auth_retry_count):
                    if retry > 0:
                        time.sleep(self.auth_retry_delay)

                    logger.warning(
                        f"Received 401 Unauthorized from {url}. "
                        f"Attempting re-authentication (try {retry+1}/{self.auth_retry_count})..."
                    )
                    try:
                        self.authenticate()
                    except UnifiAuthenticationError as auth_err:
                        logger.error(
                            f"Re-authentication failed during retry {retry+1}: {auth_err}")
                        continue

                    logger.info("Re-authentication successful. Retrying original request.")
                    response = self.session.request(
                        method, url, **self._request_kwargs(method, json_payload, timeout))
                    if response.status_code != 401:
                        break

                    logger.warning(
                        f"Request still failed with 401 after re-authentication (try {retry+1}).")

                if response.status_code == 401:
                    raise UnifiAuthenticationError(
                        f"Authentication failed after {self.auth_retry_count} attempts. "
                        "Session could not be renewed."
                    )

            response.raise_for_status()
            logger.debug(
                f"API {method} request to {url} successful (Status: {response.status_code})")
            return response

        except requests.exceptions.RequestException as e:
            status_code = e.response.status_code if e.response is not None else None
            error_msg = f"API {method} request to {url} failed: {str(e)}"
            logger.error(error_msg)
            raise UnifiAPIError(error_msg, status_code=status_code) from e

    def _decode(self, method: str, url: str, response: requests.Response) -> Any:
        try:
            body = response.json()
        except ValueError as e:
            error_msg = f"Failed to parse API response from {url}: {e}"
            logger.error(error_msg)
            raise UnifiDataError(error_msg) from e
        log_api_response(logger, method, url, body, response.status_code)
        return body

    def execute(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Execute a request against the controller's ``/api`` tree.

        Args:
            method: HTTP method, one of GET, POST, PUT.
            path: Path relative to ``/api/``, e.g. ``s/default/stat/user/aa:bb:cc:dd:ee:ff``.
            body: Optional JSON-serialisable request body.
            timeout: Optional request timeout in seconds, applied to every attempt.

        Returns:
            The decoded JSON response body.

        Raises:
            ValueError: If an unsupported HTTP method is given.
            UnifiAPIError: For network errors and non-2xx responses.
            UnifiAuthenticationError: If authentication or re-authentication fails.
            UnifiDataError: If the response is not valid JSON.
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        url = f"{self.network_url}/api/{path.lstrip('/')}"
        response = self._send(method, url, json_payload=body, timeout=timeout)
        return self._decode(method, url, response)

    def get_status(self, timeout: Optional[float] = None) -> Any:
        """
        Fetch the controller's unauthenticated ``/status`` document.

        Its ``meta.server_version`` carries the controller version.
        """
        url = f"{self.network_url}/status"
        response = self._send("GET", url, timeout=timeout)
        return self._decode("GET", url, response)
