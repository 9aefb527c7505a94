"""
Eureka registration agent package
"""

from .config import AgentConfig, InstanceIdentity
from .descriptor import InstanceDescriptor, InstanceStatus, build_descriptor
from .errors import (
    AddressResolutionError,
    EurekaAgentError,
    RegistryRejected,
    SerializationError,
    TransportError,
)
from .lifecycle import LifecycleController
from .retry import FixedIntervalRetry, RetryPolicy
from .shutdown import ShutdownCoordinator, ShutdownState
from .transport import RegistryTransport

__all__ = [
    'AgentConfig',
    'InstanceIdentity',
    'InstanceDescriptor',
    'InstanceStatus',
    'build_descriptor',
    'AddressResolutionError',
    'EurekaAgentError',
    'RegistryRejected',
    'SerializationError',
    'TransportError',
    'LifecycleController',
    'FixedIntervalRetry',
    'RetryPolicy',
    'ShutdownCoordinator',
    'ShutdownState',
    'RegistryTransport',
]
