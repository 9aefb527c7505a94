"""
Error taxonomy for registry interaction.
"""

from typing import Optional


class EurekaAgentError(Exception):
    """
    Base class for all agent errors
    """


class TransportError(EurekaAgentError):
    """
    Connection, DNS or timeout failure talking to the registry
    """

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class RegistryRejected(EurekaAgentError):
    """
    Registry answered with a status other than 200 or 204
    """

    def __init__(self, status_code: int, url: Optional[str] = None):
        target = f" to {url}" if url else ""
        super().__init__(f"Registry rejected request{target} with status {status_code}")
        self.status_code = status_code
        self.url = url


class SerializationError(EurekaAgentError):
    """
    Instance descriptor could not be encoded. Never retried.
    """


class AddressResolutionError(EurekaAgentError):
    """
    No usable external address was found. Non-fatal, loopback is substituted.
    """
