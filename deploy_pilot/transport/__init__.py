"""Transport factory and package exports"""

from pathlib import Path
from typing import Callable, Optional

from .base import Transport, CommandResult
from .local import LocalTransport
from .ssh import SSHTransport
from ..api.exceptions import TransportError
from ..models.config import HostCredentials, PipelineConfig

TransportFactory = Callable[[], Transport]


def get_transport_factory(config: PipelineConfig,
                          credentials: Optional[HostCredentials] = None,
                          local: bool = False,
                          workdir: Optional[Path] = None) -> TransportFactory:
    """
    Build a factory producing fresh transport sessions

    Every remote-access step opens its own session so credential material
    lives only for the duration of that step.

    Args:
        config: Pipeline configuration
        credentials: Host credentials (required unless local)
        local: Use LocalTransport instead of ssh
        workdir: Working directory for LocalTransport

    Returns:
        Zero-argument callable returning a new, unopened Transport
    """
    if local:
        return lambda: LocalTransport(workdir=workdir)

    if credentials is None:
        raise TransportError(
            "Host credentials are required for remote deployment "
            "(set DEPLOY_HOST, DEPLOY_USER and DEPLOY_SSH_KEY)"
        )
    return lambda: SSHTransport(credentials, port=config.remote.port)


__all__ = [
    "Transport",
    "CommandResult",
    "LocalTransport",
    "SSHTransport",
    "TransportFactory",
    "get_transport_factory",
]
