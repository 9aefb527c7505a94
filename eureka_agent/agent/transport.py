"""
Registry transport implementation.
"""

import logging
from typing import Optional

import requests
from requests.auth import HTTPBasicAuth

from .errors import TransportError

logger = logging.getLogger(__name__)

SUCCESS_CODES = (200, 204)


def is_success(status_code: int) -> bool:
    return status_code in SUCCESS_CODES


class RegistryTransport:
    """
    Sends signed requests to the registry and reports the raw status code
    """

    def __init__(self, registry_url: str, username: str = "", password: str = "",
                 timeout: float = 5.0, session: Optional[requests.Session] = None):
        """
        Initialize registry transport

        Args:
            registry_url: Registry base URL
            username: Basic-auth user
            password: Basic-auth password
            timeout: Per-request timeout in seconds
            session: Session to reuse, a new one is created when omitted
        """
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = HTTPBasicAuth(username, password)
        self.session.headers.update({"Content-Type": "application/json"})

    def app_url(self, app_name: str) -> str:
        return f"{self.registry_url}/apps/{app_name}"

    def instance_url(self, app_name: str, instance_id: str) -> str:
        return f"{self.app_url(app_name)}/{instance_id}"

    def post_instance(self, app_name: str, body: str) -> int:
        """
        Create or update the instance record

        Args:
            app_name: Application name
            body: Encoded instance descriptor

        Returns:
            HTTP status code, whatever its value

        Raises:
            TransportError: The request never produced a response
        """
        return self._send("POST", self.app_url(app_name), data=body)

    def send_heartbeat(self, app_name: str, instance_id: str) -> int:
        """
        Renew the instance lease, no body is sent

        Returns:
            HTTP status code, whatever its value

        Raises:
            TransportError: The request never produced a response
        """
        return self._send("PUT", self.instance_url(app_name, instance_id))

    def _send(self, method: str, url: str, data: Optional[str] = None) -> int:
        try:
            response = self.session.request(method, url, data=data, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Cannot make %s request to %s. %s", method, url, e)
            raise TransportError(str(e), url=url) from e
        response.close()
        return response.status_code

    def close(self):
        self.session.close()
