"""Cloud Foundry facing pieces of tunnel-boot."""

from .connection import CfCliConnection, PlatformCommandError, PlatformConnection
from .deployer import Deployer, ErrorHandler
from .push import DeployError
from .tunnel import ReverseTunnel, TunnelEndpoint, TunnelError, TunnelResult

__all__ = [
    "CfCliConnection",
    "Deployer",
    "DeployError",
    "ErrorHandler",
    "PlatformCommandError",
    "PlatformConnection",
    "ReverseTunnel",
    "TunnelEndpoint",
    "TunnelError",
    "TunnelResult",
]
