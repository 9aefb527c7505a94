"""
Instance descriptor assembly.

A descriptor is rebuilt for every request so the registry always sees the
status the controller holds at send time.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict

from .address import DEFAULT_ADDRESS, get_hostname, resolve_external_address
from .config import AgentConfig, InstanceIdentity
from .errors import AddressResolutionError, SerializationError

logger = logging.getLogger(__name__)

SCHEME = "http"
DATA_CENTER_CLASS = "com.netflix.appinfo.InstanceInfo$DefaultDataCenterInfo"


class InstanceStatus(Enum):
    """Lifecycle status stamped on outgoing descriptors"""
    STARTING = "STARTING"
    UP = "UP"
    DOWN = "DOWN"


@dataclass(frozen=True)
class PortInfo:
    port: str
    enabled: bool

    def to_dict(self) -> Dict[str, str]:
        return {"$": self.port, "@enabled": "true" if self.enabled else "false"}


@dataclass(frozen=True)
class InstanceDescriptor:
    """Registry document describing one instance"""
    host_name: str
    app: str
    vip_address: str
    secure_vip_address: str
    instance_id: str
    ip_addr: str
    status: InstanceStatus
    port: PortInfo
    secure_port: PortInfo
    home_page_url: str
    health_check_url: str
    status_page_url: str
    data_center_name: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the registry's wire shape."""
        return {
            "instance": {
                "hostName": self.host_name,
                "app": self.app,
                "vipAddress": self.vip_address,
                "secureVipAddress": self.secure_vip_address,
                "instanceId": self.instance_id,
                "ipAddr": self.ip_addr,
                "status": self.status.value,
                "port": self.port.to_dict(),
                "securePort": self.secure_port.to_dict(),
                "healthCheckUrl": self.health_check_url,
                "statusPageUrl": self.status_page_url,
                "homePageUrl": self.home_page_url,
                "dataCenterInfo": {
                    "@class": DATA_CENTER_CLASS,
                    "name": self.data_center_name,
                },
            }
        }

    def encode(self) -> str:
        """
        Serialize to a JSON request body

        Raises:
            SerializationError: The document holds values JSON cannot encode
        """
        try:
            return json.dumps(self.to_dict())
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot marshal instance body. {e}") from e


def _resolve_address(resolver: Callable[[], str]) -> str:
    try:
        return resolver()
    except AddressResolutionError as e:
        logger.warning("Can't get external IP address. Using %s as default. %s", DEFAULT_ADDRESS, e)
        return DEFAULT_ADDRESS


def build_descriptor(identity: InstanceIdentity, status: InstanceStatus, config: AgentConfig,
                     resolver: Callable[[], str] = resolve_external_address) -> InstanceDescriptor:
    """
    Build the descriptor for *identity* in *status*

    Args:
        identity: Instance identity
        status: Status to stamp on the document
        config: Agent configuration
        resolver: External address lookup, loopback is used when it fails

    Returns:
        Fresh descriptor
    """
    ip_addr = _resolve_address(resolver)
    if config.prefer_ip_address:
        # registry clients route by hostName, so advertise the address itself
        host_name = ip_addr
    else:
        host_name = get_hostname(identity.app_name)

    home_page_url = f"{SCHEME}://{ip_addr}:{identity.port}/"
    vip_address = identity.app_name.lower()

    return InstanceDescriptor(
        host_name=host_name,
        app=identity.app_name,
        vip_address=vip_address,
        secure_vip_address=vip_address,
        instance_id=identity.instance_id,
        ip_addr=ip_addr,
        status=status,
        port=PortInfo(identity.port, True),
        secure_port=PortInfo(config.secure_port, False),
        home_page_url=home_page_url,
        health_check_url=f"{home_page_url}health",
        status_page_url=f"{home_page_url}info",
        data_center_name=config.data_center_name,
    )
