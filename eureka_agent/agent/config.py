"""
Agent configuration and instance identity.
"""

import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AgentConfig:
    """
    Immutable configuration read once when the controller is built

    Args:
        registry_url: Registry base URL, e.g. http://localhost:8761/eureka
        app_name: Application name the instance registers under
        port: Port the service listens on
        username: Basic-auth user for the registry
        password: Basic-auth password for the registry
        verbose: Log every successful heartbeat at INFO level
    """
    registry_url: str
    app_name: str
    port: str = "8080"
    username: str = ""
    password: str = ""
    verbose: bool = False
    retry_interval: float = 10.0
    heartbeat_interval: float = 10.0
    grace_period: float = 3.0
    request_timeout: float = 5.0
    prefer_ip_address: bool = True
    secure_port: str = "443"
    data_center_name: str = "MyOwn"

    def __post_init__(self):
        if not self.registry_url:
            raise ValueError("registry_url is required")
        if not self.app_name:
            raise ValueError("app_name is required")
        # frozen, so normalise through object.__setattr__
        object.__setattr__(self, "registry_url", self.registry_url.rstrip("/"))
        object.__setattr__(self, "port", str(self.port))


def generate_instance_id(app_name: str) -> str:
    return f"{app_name}:{uuid.uuid1()}"


@dataclass(frozen=True)
class InstanceIdentity:
    """Identity of this process as seen by the registry."""
    app_name: str
    port: str
    username: str = field(default="", repr=False)
    password: str = field(default="", repr=False)
    instance_id: str = ""

    def __post_init__(self):
        if not self.instance_id:
            object.__setattr__(self, "instance_id", generate_instance_id(self.app_name))

    @classmethod
    def from_config(cls, config: AgentConfig) -> 'InstanceIdentity':
        return cls(
            app_name=config.app_name,
            port=config.port,
            username=config.username,
            password=config.password,
        )
