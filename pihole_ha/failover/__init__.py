"""
pihole-ha Failover Module

Renders the keepalived configuration and the health check script.
"""

from .healthcheck import HealthCheckSynthesizer, HealthCondition
from .renderer import ConfigBlock, ConfigDocument, FailoverConfigRenderer

__all__ = [
    "HealthCheckSynthesizer",
    "HealthCondition",
    "ConfigBlock",
    "ConfigDocument",
    "FailoverConfigRenderer",
]
