"""
pihole-ha Core Module

Data model, parameter validation, errors and the interactive setup flow.
"""

from .errors import (
    AccountError,
    DependencyError,
    ServiceError,
    SetupError,
    ValidationError,
    WriteError,
)
from .model import (
    ClusterConfigModel,
    ClusterSharedConfig,
    HealthCheckPolicy,
    NodeConfig,
    NodeRole,
    RenderedArtifacts,
)

__all__ = [
    "AccountError",
    "DependencyError",
    "ServiceError",
    "SetupError",
    "ValidationError",
    "WriteError",
    "ClusterConfigModel",
    "ClusterSharedConfig",
    "HealthCheckPolicy",
    "NodeConfig",
    "NodeRole",
    "RenderedArtifacts",
]
